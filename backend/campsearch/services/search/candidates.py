"""Candidate property-id set and the resolver fold that narrows it."""

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from campsearch.schemas.search import SearchCriteria
from campsearch.services.search.resolvers import (
    Resolver,
    resolve_accommodation_style,
    resolve_amenities,
    resolve_availability,
    resolve_capacity,
    resolve_geo,
)

logger = logging.getLogger(__name__)

# Adding a filter means adding a line here.
RESOLVERS: tuple[tuple[str, Resolver], ...] = (
    ("amenities", resolve_amenities),
    ("availability", resolve_availability),
    ("capacity", resolve_capacity),
    ("accommodation_style", resolve_accommodation_style),
    ("geo", resolve_geo),
)


@dataclass(frozen=True)
class CandidateSet:
    """Property ids surviving the resolvers run so far.

    ``ids`` is ``None`` while no resolver has constrained the search.
    """

    ids: frozenset[uuid.UUID] | None = None

    @property
    def is_constrained(self) -> bool:
        return self.ids is not None

    @property
    def is_empty(self) -> bool:
        return self.ids is not None and not self.ids

    def narrow(self, ids: frozenset[uuid.UUID]) -> "CandidateSet":
        if self.ids is None:
            return CandidateSet(ids)
        return CandidateSet(self.ids & ids)


async def resolve_candidates(
    db: AsyncSession,
    criteria: SearchCriteria,
    resolvers: Sequence[tuple[str, Resolver]] = RESOLVERS,
) -> CandidateSet:
    """Run every triggered resolver in order, stopping at the first empty set."""
    candidates = CandidateSet()
    for name, resolver in resolvers:
        ids = await resolver(db, criteria)
        if ids is None:
            continue
        candidates = candidates.narrow(ids)
        if candidates.is_empty:
            logger.debug("Search short-circuited by %s resolver", name)
            return candidates
    return candidates
