"""Property listings for the home page: featured, popular, nearby."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campsearch.models.property import Property
from campsearch.schemas.search import PropertySearchItem
from campsearch.services.search.geo import GeoMode, GeoPoint, GeoQuery, find_properties_in_radius
from campsearch.services.search.ranking import POPULAR_ORDER, min_active_prices

logger = logging.getLogger(__name__)


class PropertyNotFoundError(Exception):
    """Raised when a property id does not exist."""

    def __init__(self, property_id: uuid.UUID) -> None:
        super().__init__(f"Property {property_id} not found")
        self.property_id = property_id


async def _to_items(
    db: AsyncSession, props: list[Property], distances: dict[uuid.UUID, float] | None = None
) -> list[PropertySearchItem]:
    prices = await min_active_prices(db, [p.id for p in props])
    return [
        PropertySearchItem.from_property(
            p, prices.get(p.id), distance_km=distances.get(p.id) if distances else None
        )
        for p in props
    ]


async def get_featured_properties(db: AsyncSession, limit: int = 10) -> list[PropertySearchItem]:
    """Active featured properties, best rated first."""
    result = await db.execute(
        select(Property)
        .where(Property.is_featured.is_(True), Property.is_active.is_(True))
        .order_by(Property.rating_average.desc(), Property.id)
        .limit(limit)
    )
    return await _to_items(db, list(result.scalars().all()))


async def get_popular_properties(db: AsyncSession, limit: int = 8) -> list[PropertySearchItem]:
    """Active properties with the most reviews, ties broken by rating."""
    result = await db.execute(
        select(Property)
        .where(Property.is_active.is_(True))
        .order_by(*POPULAR_ORDER, Property.rating_average.desc(), Property.id)
        .limit(limit)
    )
    return await _to_items(db, list(result.scalars().all()))


async def get_nearby_properties(
    db: AsyncSession,
    property_id: uuid.UUID,
    radius: float = 50,
    limit: int = 10,
) -> list[PropertySearchItem]:
    """Other active properties within ``radius`` km of a property, nearest first.

    Raises:
        PropertyNotFoundError: if ``property_id`` does not exist.
    """
    origin = await db.get(Property, property_id)
    if origin is None:
        raise PropertyNotFoundError(property_id)

    query = GeoQuery(
        center=GeoPoint(origin.latitude, origin.longitude),
        radius_km=radius,
        mode=GeoMode.NEAREST,
    )
    distances = await find_properties_in_radius(
        db,
        query,
        extra_clauses=(Property.id != property_id, Property.is_active.is_(True)),
    )
    nearest = sorted(distances, key=lambda pid: (distances[pid], str(pid)))[:limit]
    if not nearest:
        return []

    result = await db.execute(select(Property).where(Property.id.in_(nearest)))
    by_id = {p.id: p for p in result.scalars().all()}
    logger.debug("Nearby %s: %d within %skm", property_id, len(distances), radius)
    return await _to_items(db, [by_id[pid] for pid in nearest], distances)
