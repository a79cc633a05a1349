"""Property search pipeline: resolve candidates, filter, rank, paginate."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from campsearch.schemas.search import Pagination, PropertySearchResponse, SearchCriteria
from campsearch.services.search.candidates import resolve_candidates
from campsearch.services.search.predicates import PropertyFilter
from campsearch.services.search.ranking import select_ranking

logger = logging.getLogger(__name__)


async def search_properties(db: AsyncSession, criteria: SearchCriteria) -> PropertySearchResponse:
    """Resolve a guest's search into one page of bookable properties.

    Unsatisfiable criteria (check-out not after check-in, no site matching
    the amenities, style or capacity, an empty intersection) give an empty
    page, never an error. Database errors propagate unchanged.
    """
    if criteria.has_invalid_date_range:
        logger.debug("Empty date range %s..%s, returning no results", criteria.check_in, criteria.check_out)
        return PropertySearchResponse.empty(criteria)

    candidates = await resolve_candidates(db, criteria)
    if candidates.is_empty:
        return PropertySearchResponse.empty(criteria)

    property_filter = PropertyFilter.build(criteria, candidates.ids)
    ranking = select_ranking(criteria)
    page = await ranking.page(db, property_filter, criteria)

    logger.info(
        "Property search: total=%d page=%d limit=%d sort=%s",
        page.total,
        criteria.page,
        criteria.limit,
        ranking.name,
    )
    return PropertySearchResponse(
        properties=page.items,
        pagination=Pagination.build(criteria.page, criteria.limit, page.total),
    )
