"""Geospatial proximity filtering over property locations.

Two mutually exclusive modes, picked from the requested sort key:

* ``GeoMode.NEAREST`` — nearest-neighbour style: great-circle distance in
  meters bounded by ``radius * 1000``. Results carry an implicit
  nearest-first order and no other sort is applied.
* ``GeoMode.WITHIN`` — spherical cap containment: central angle bounded by
  ``radius / earth_radius`` radians. Carries no order, so any other sort key
  can be applied on top.

Both modes prefilter with a latitude/longitude bounding box in SQL and run
the exact test in Python.
"""

import enum
import logging
import math
import uuid
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import ColumnElement, select
from sqlalchemy.ext.asyncio import AsyncSession

from campsearch.config import settings
from campsearch.models.property import Property

logger = logging.getLogger(__name__)


class GeoMode(str, enum.Enum):
    NEAREST = "nearest"
    WITHIN = "within"


def geo_mode_for(sort_by: str | None) -> GeoMode:
    """Nearest-first unless the caller asked for a non-distance sort."""
    if sort_by is None or sort_by == "nearestFirst":
        return GeoMode.NEAREST
    return GeoMode.WITHIN


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float


def central_angle(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle angle between two points in radians (haversine)."""
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * math.asin(min(1.0, math.sqrt(h)))


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    return central_angle(a, b) * settings.earth_radius_km


@dataclass(frozen=True)
class GeoQuery:
    """A center point, a radius in km and the mode used to test containment."""

    center: GeoPoint
    radius_km: float
    mode: GeoMode

    @property
    def max_distance_m(self) -> float:
        return self.radius_km * 1000

    @property
    def max_angle(self) -> float:
        return self.radius_km / settings.earth_radius_km

    def contains(self, point: GeoPoint) -> bool:
        if self.mode is GeoMode.NEAREST:
            return distance_km(self.center, point) * 1000 <= self.max_distance_m
        return central_angle(self.center, point) <= self.max_angle

    def bounding_box_clauses(self) -> list[ColumnElement[bool]]:
        """Coarse SQL prefilter that never excludes a point inside the radius."""
        angle = self.max_angle
        lat_delta = math.degrees(angle)
        min_lat = max(-90.0, self.center.lat - lat_delta)
        max_lat = min(90.0, self.center.lat + lat_delta)
        clauses = [Property.latitude.between(min_lat, max_lat)]

        # Near a pole or across the antimeridian the longitude band is unbounded.
        if min_lat <= -90.0 or max_lat >= 90.0:
            return clauses
        ratio = math.sin(angle) / math.cos(math.radians(self.center.lat))
        if ratio >= 1.0:
            return clauses
        lng_delta = math.degrees(math.asin(ratio))
        min_lng = self.center.lng - lng_delta
        max_lng = self.center.lng + lng_delta
        if min_lng < -180.0 or max_lng > 180.0:
            return clauses
        clauses.append(Property.longitude.between(min_lng, max_lng))
        return clauses


async def find_properties_in_radius(
    db: AsyncSession,
    query: GeoQuery,
    extra_clauses: Sequence[ColumnElement[bool]] = (),
) -> dict[uuid.UUID, float]:
    """Return ``{property_id: distance_km}`` for every property inside ``query``."""
    result = await db.execute(
        select(Property.id, Property.latitude, Property.longitude).where(
            *query.bounding_box_clauses(), *extra_clauses
        )
    )
    matches: dict[uuid.UUID, float] = {}
    for property_id, lat, lng in result.all():
        point = GeoPoint(lat, lng)
        if query.contains(point):
            matches[property_id] = distance_km(query.center, point)

    logger.debug(
        "Geo %s query (%.4f, %.4f) r=%skm matched %d properties",
        query.mode.value,
        query.center.lat,
        query.center.lng,
        query.radius_km,
        len(matches),
    )
    return matches
