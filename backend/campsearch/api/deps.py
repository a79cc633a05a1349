"""Shared API dependencies — single import point for all routers.

Re-exports the database session dependency and the search request parser
so that router modules can import everything they need from one place::

    from campsearch.api.deps import get_db, get_search_criteria
"""

import uuid
from datetime import date

from fastapi import Query
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from campsearch.database import get_db
from campsearch.schemas.search import SearchCriteria


def get_search_criteria(
    search: str | None = Query(None, description="Free-text search over name, tagline and description"),
    city: str | None = Query(None),
    state: str | None = Query(None),
    country: str | None = Query(None),
    check_in: date | None = Query(None, alias="checkIn"),
    check_out: date | None = Query(None, alias="checkOut", description="Exclusive"),
    guests: int | None = Query(None),
    pets: int | None = Query(None),
    lat: float | None = Query(None),
    lng: float | None = Query(None),
    radius: float | None = Query(None, description="Kilometers"),
    property_type: list[str] | None = Query(None, alias="propertyType"),
    camping_style: list[str] | None = Query(None, alias="campingStyle", description="tent, rv, glamping"),
    amenities: list[str] | None = Query(None, description="Amenity ids, repeated or comma-separated"),
    instant_booking: bool | None = Query(None, alias="instantBooking"),
    instant_book: bool | None = Query(None, alias="instantBook", description="Alias of instantBooking, wins if both"),
    is_active: bool | None = Query(None, alias="isActive"),
    is_featured: bool | None = Query(None, alias="isFeatured"),
    is_verified: bool | None = Query(None, alias="isVerified"),
    host: uuid.UUID | None = Query(None),
    min_rating: float | None = Query(None, alias="minRating"),
    sort_by: str | None = Query(None, alias="sortBy"),
    page: int | None = Query(None),
    limit: int | None = Query(None),
) -> SearchCriteria:
    """Collect the search query string into a validated ``SearchCriteria``.

    Bounds and enumerations live on ``SearchCriteria``; violations surface as
    the usual 422 response.
    """
    raw = {
        "search": search,
        "city": city,
        "state": state,
        "country": country,
        "checkIn": check_in,
        "checkOut": check_out,
        "guests": guests,
        "pets": pets,
        "lat": lat,
        "lng": lng,
        "radius": radius,
        "propertyType": property_type,
        "campingStyle": camping_style,
        "amenities": amenities,
        "instantBooking": instant_booking,
        "instantBook": instant_book,
        "isActive": is_active,
        "isFeatured": is_featured,
        "isVerified": is_verified,
        "host": host,
        "minRating": min_rating,
        "sortBy": sort_by,
        "page": page,
        "limit": limit,
    }
    try:
        return SearchCriteria.model_validate({key: value for key, value in raw.items() if value is not None})
    except ValidationError as exc:
        errors = [{**error, "loc": ("query", *error["loc"])} for error in exc.errors(include_url=False)]
        raise RequestValidationError(errors) from exc


__all__ = [
    "get_db",
    "get_search_criteria",
]
