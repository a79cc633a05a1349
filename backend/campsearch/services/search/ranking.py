"""Ranking and pagination strategies for the filtered property set.

Every strategy takes the final :class:`PropertyFilter` and returns one page
of enriched items plus the total size of the filtered set. Callers pick one
with :func:`select_ranking` and never need to know which path ran.
"""

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from sqlalchemy import ColumnElement, and_, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from campsearch.config import settings
from campsearch.models.property import Property
from campsearch.models.site import Site
from campsearch.schemas.search import PropertySearchItem, SearchCriteria
from campsearch.services.search.geo import GeoMode, GeoPoint, distance_km, geo_mode_for
from campsearch.services.search.predicates import PropertyFilter

logger = logging.getLogger(__name__)


@dataclass
class RankedPage:
    items: list[PropertySearchItem]
    total: int


class RankAndPaginate(Protocol):
    name: str

    async def page(
        self, db: AsyncSession, property_filter: PropertyFilter, criteria: SearchCriteria
    ) -> RankedPage: ...


# ---------------------------------------------------------------------------
# Shared queries
# ---------------------------------------------------------------------------


async def count_properties(db: AsyncSession, property_filter: PropertyFilter) -> int:
    result = await db.execute(property_filter.apply(select(func.count()).select_from(Property)))
    return result.scalar_one()


async def min_active_prices(db: AsyncSession, property_ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, Decimal]:
    """Lowest base price among the active sites of each property."""
    if not property_ids:
        return {}
    result = await db.execute(
        select(Site.property_id, func.min(Site.base_price))
        .where(Site.property_id.in_(list(property_ids)), Site.is_active.is_(True))
        .group_by(Site.property_id)
    )
    return dict(result.tuples().all())


async def _enrich(db: AsyncSession, props: Sequence[Property]) -> list[PropertySearchItem]:
    prices = await min_active_prices(db, [p.id for p in props])
    return [PropertySearchItem.from_property(p, prices.get(p.id)) for p in props]


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StoredFieldRanking:
    """Sort on stored columns, page in SQL, then attach min price per row."""

    name: str
    order_by: tuple[ColumnElement, ...]

    async def page(self, db: AsyncSession, property_filter: PropertyFilter, criteria: SearchCriteria) -> RankedPage:
        total = await count_properties(db, property_filter)
        if total <= criteria.skip:
            return RankedPage(items=[], total=total)

        stmt = (
            property_filter.apply(select(Property))
            .order_by(*self.order_by, Property.id)
            .offset(criteria.skip)
            .limit(criteria.limit)
        )
        result = await db.execute(stmt)
        props = list(result.scalars().all())
        return RankedPage(items=await _enrich(db, props), total=total)


@dataclass(frozen=True)
class MinPriceRanking:
    """Rank on the lowest active site price, computed in the query.

    Properties without any active site rank with the configured sentinel
    price and always come last, whichever the direction.
    """

    name: str
    descending: bool

    async def page(self, db: AsyncSession, property_filter: PropertyFilter, criteria: SearchCriteria) -> RankedPage:
        total = await count_properties(db, property_filter)
        if total <= criteria.skip:
            return RankedPage(items=[], total=total)

        min_price = func.min(Site.base_price)
        ranking_price = func.coalesce(min_price, settings.min_price_sentinel)
        without_active_sites = case((min_price.is_(None), 1), else_=0)

        stmt = (
            property_filter.apply(
                select(Property, min_price.label("min_price")).outerjoin(
                    Site, and_(Site.property_id == Property.id, Site.is_active.is_(True))
                )
            )
            .group_by(Property.id)
            .order_by(
                without_active_sites,
                ranking_price.desc() if self.descending else ranking_price.asc(),
                Property.id,
            )
            .offset(criteria.skip)
            .limit(criteria.limit)
        )
        result = await db.execute(stmt)
        items = [PropertySearchItem.from_property(prop, price) for prop, price in result.tuples().all()]
        return RankedPage(items=items, total=total)


@dataclass(frozen=True)
class DistanceRanking:
    """Nearest first from ``center``; used when the geo filter ran in nearest mode."""

    name: str
    center: GeoPoint

    async def page(self, db: AsyncSession, property_filter: PropertyFilter, criteria: SearchCriteria) -> RankedPage:
        total = await count_properties(db, property_filter)
        if total <= criteria.skip:
            return RankedPage(items=[], total=total)

        result = await db.execute(
            property_filter.apply(select(Property.id, Property.latitude, Property.longitude))
        )
        distances = {
            property_id: distance_km(self.center, GeoPoint(lat, lng))
            for property_id, lat, lng in result.tuples().all()
        }
        ordered = sorted(distances, key=lambda property_id: (distances[property_id], str(property_id)))
        page_ids = ordered[criteria.skip : criteria.skip + criteria.limit]

        result = await db.execute(select(Property).where(Property.id.in_(page_ids)))
        by_id = {prop.id: prop for prop in result.scalars().all()}
        props = [by_id[property_id] for property_id in page_ids if property_id in by_id]

        prices = await min_active_prices(db, page_ids)
        items = [
            PropertySearchItem.from_property(prop, prices.get(prop.id), distance_km=distances[prop.id])
            for prop in props
        ]
        return RankedPage(items=items, total=total)


SORT_ORDERS: dict[str, tuple[ColumnElement, ...]] = {
    "newest": (Property.created_at.desc(),),
    "oldest": (Property.created_at.asc(),),
    "rating": (Property.rating_average.desc(), Property.rating_count.desc()),
    "reviewCount": (Property.total_reviews.desc(),),
    "name": (Property.name.asc(),),
    "totalSites": (Property.total_sites.desc(),),
    # Distance order only exists when the geo filter ran; otherwise keep id order.
    "nearestFirst": (),
}

POPULAR_ORDER = SORT_ORDERS["reviewCount"]


def select_ranking(criteria: SearchCriteria) -> RankAndPaginate:
    """Pick the ranking strategy for the requested sort key."""
    sort_by = criteria.sort_by
    if sort_by in ("minPrice-asc", "minPrice-desc"):
        return MinPriceRanking(name=sort_by, descending=sort_by == "minPrice-desc")
    if criteria.has_geo and geo_mode_for(sort_by) is GeoMode.NEAREST:
        return DistanceRanking(name="nearestFirst", center=GeoPoint(criteria.lat, criteria.lng))  # type: ignore[arg-type]
    if sort_by is None:
        return StoredFieldRanking(name="popular", order_by=POPULAR_ORDER)
    return StoredFieldRanking(name=sort_by, order_by=SORT_ORDERS[sort_by])
