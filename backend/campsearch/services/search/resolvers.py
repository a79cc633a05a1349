"""Site-level resolvers that narrow a search to a set of property ids.

Each resolver has the signature ``(db, criteria) -> frozenset[UUID] | None``.
``None`` means the resolver was not triggered by the request; an empty set
means nothing can match and the search is over.
"""

import logging
import uuid
from collections.abc import Awaitable, Callable, Iterable

from sqlalchemy import ColumnElement, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from campsearch.models.booking import BLOCKING_STATUSES, Booking
from campsearch.models.site import Site, site_amenities
from campsearch.schemas.search import SearchCriteria
from campsearch.services.search.geo import GeoPoint, GeoQuery, find_properties_in_radius, geo_mode_for
from campsearch.services.search.overlap import booking_overlap_clause, intervals_conflict

logger = logging.getLogger(__name__)

Resolver = Callable[[AsyncSession, SearchCriteria], Awaitable[frozenset[uuid.UUID] | None]]

GLAMPING_TYPES = (
    "cabin",
    "yurt",
    "treehouse",
    "tiny_home",
    "safari_tent",
    "bell_tent",
    "glamping_pod",
    "dome",
    "airstream",
    "vintage_trailer",
    "van",
)

CAMPING_STYLE_TYPES: dict[str, tuple[str, ...]] = {
    "tent": ("tent",),
    "rv": ("rv",),
    "glamping": GLAMPING_TYPES,
}


def expand_camping_styles(styles: Iterable[str]) -> frozenset[str]:
    """Map coarse styles (tent, rv, glamping) to concrete accommodation types."""
    types: set[str] = set()
    for style in styles:
        types.update(CAMPING_STYLE_TYPES.get(style, ()))
    return frozenset(types)


def capacity_clauses(guests: int | None, pets: int | None, nights: int | None) -> list[ColumnElement[bool]]:
    """Site clauses for guest/pet capacity and the min/max night policy.

    A missing criterion adds no clause at all; ``nights`` is ``None`` when the
    search has no date range.
    """
    clauses: list[ColumnElement[bool]] = []
    if guests:
        clauses.append(Site.max_guests >= guests)
    if pets:
        clauses.append(Site.max_pets >= pets)
    if nights is not None:
        clauses.append(Site.minimum_nights <= nights)
        clauses.append(or_(Site.maximum_nights.is_(None), Site.maximum_nights >= nights))
    return clauses


async def _owning_properties(db: AsyncSession, *clauses: ColumnElement[bool]) -> frozenset[uuid.UUID]:
    """Distinct property ids owning at least one active site matching ``clauses``."""
    result = await db.execute(
        select(Site.property_id).where(Site.is_active.is_(True), *clauses).distinct()
    )
    return frozenset(result.scalars().all())


async def find_available_sites(db: AsyncSession, criteria: SearchCriteria) -> dict[uuid.UUID, uuid.UUID]:
    """Return ``{site_id: property_id}`` for sites free for the whole requested window.

    A site is available when it is active, fits the party and the night
    count, and has no pending or confirmed booking overlapping the window.
    Sites that accept several concurrent bookings are treated the same way:
    any overlapping booking takes them out.
    """
    check_in, check_out = criteria.check_in, criteria.check_out
    result = await db.execute(
        select(Site.id, Site.property_id).where(
            Site.is_active.is_(True),
            *capacity_clauses(criteria.guests, criteria.pets, criteria.nights),
        )
    )
    candidates = dict(result.tuples().all())
    if not candidates:
        return {}

    result = await db.execute(
        select(Booking.site_id, Booking.check_in, Booking.check_out).where(
            Booking.site_id.in_(list(candidates)),
            Booking.status.in_(BLOCKING_STATUSES),
            booking_overlap_clause(check_in, check_out),
        )
    )
    booked = {
        site_id
        for site_id, booked_in, booked_out in result.tuples().all()
        if intervals_conflict(check_in, check_out, booked_in, booked_out)
    }
    logger.debug("Availability: %d candidate sites, %d booked", len(candidates), len(booked))
    return {site_id: property_id for site_id, property_id in candidates.items() if site_id not in booked}


async def resolve_availability(db: AsyncSession, criteria: SearchCriteria) -> frozenset[uuid.UUID] | None:
    if not criteria.has_date_range:
        return None
    available = await find_available_sites(db, criteria)
    return frozenset(available.values())


async def resolve_capacity(db: AsyncSession, criteria: SearchCriteria) -> frozenset[uuid.UUID] | None:
    """Guest/pet capacity without dates. With dates, availability covers it."""
    if criteria.has_date_range or not (criteria.guests or criteria.pets):
        return None
    return await _owning_properties(db, *capacity_clauses(criteria.guests, criteria.pets, None))


async def resolve_amenities(db: AsyncSession, criteria: SearchCriteria) -> frozenset[uuid.UUID] | None:
    if not criteria.amenities:
        return None
    amenity_ids = set()
    for raw in criteria.amenities:
        try:
            amenity_ids.add(uuid.UUID(raw))
        except ValueError:
            logger.debug("Ignoring malformed amenity id %r", raw)
    if not amenity_ids:
        return frozenset()

    result = await db.execute(
        select(Site.property_id)
        .join(site_amenities, site_amenities.c.site_id == Site.id)
        .where(Site.is_active.is_(True), site_amenities.c.amenity_id.in_(list(amenity_ids)))
        .distinct()
    )
    return frozenset(result.scalars().all())


async def resolve_accommodation_style(db: AsyncSession, criteria: SearchCriteria) -> frozenset[uuid.UUID] | None:
    if not criteria.camping_style:
        return None
    types = expand_camping_styles(criteria.camping_style)
    return await _owning_properties(db, Site.accommodation_type.in_(sorted(types)))


async def resolve_geo(db: AsyncSession, criteria: SearchCriteria) -> frozenset[uuid.UUID] | None:
    if not criteria.has_geo:
        return None
    query = GeoQuery(
        center=GeoPoint(criteria.lat, criteria.lng),  # type: ignore[arg-type]
        radius_km=criteria.radius,  # type: ignore[arg-type]
        mode=geo_mode_for(criteria.sort_by),
    )
    matches = await find_properties_in_radius(db, query)
    return frozenset(matches)
