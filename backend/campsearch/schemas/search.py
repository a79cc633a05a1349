"""Pydantic v2 schemas for the property search request and response."""

import math
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from campsearch.config import settings
from campsearch.models.property import Property
from campsearch.models.user import User

SortBy = Literal[
    "newest",
    "oldest",
    "rating",
    "reviewCount",
    "minPrice-asc",
    "minPrice-desc",
    "name",
    "totalSites",
    "nearestFirst",
]
CampingStyle = Literal["tent", "rv", "glamping"]
PropertyType = Literal["private_land", "farm", "ranch", "campground"]

# ---------------------------------------------------------------------------
# Request schema
# ---------------------------------------------------------------------------


class SearchCriteria(BaseModel):
    """Every optional filter a guest can send to the property search.

    Accepts the camelCase names used by the web client (``checkIn``,
    ``sortBy``...) as well as the snake_case field names. List fields accept
    either arrays or comma-separated strings. ``instantBook`` is an alias of
    ``instantBooking`` that wins when both are sent; it is folded into
    ``instant_booking`` during validation and not kept anywhere else.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    # Text
    search: str | None = None

    # Location
    city: str | None = None
    state: str | None = None
    country: str | None = None

    # Dates, half-open: check_out is exclusive
    check_in: date | None = Field(None, alias="checkIn")
    check_out: date | None = Field(None, alias="checkOut")

    # Capacity
    guests: int | None = Field(None, ge=1)
    pets: int | None = Field(None, ge=0)

    # Geo (radius in km)
    lat: float | None = Field(None, ge=-90, le=90)
    lng: float | None = Field(None, ge=-180, le=180)
    radius: float | None = Field(None, ge=0, le=500)

    property_type: list[PropertyType] | None = Field(None, alias="propertyType")
    camping_style: list[CampingStyle] | None = Field(None, alias="campingStyle")
    amenities: list[str] | None = None

    instant_booking: bool | None = Field(None, alias="instantBooking")

    # Status
    is_active: bool | None = Field(None, alias="isActive")
    is_featured: bool | None = Field(None, alias="isFeatured")
    is_verified: bool | None = Field(None, alias="isVerified")

    host: uuid.UUID | None = None
    min_rating: float | None = Field(None, ge=0, le=5, alias="minRating")

    sort_by: SortBy | None = Field(None, alias="sortBy")
    page: int = Field(1, ge=1)
    limit: int = Field(settings.search_default_limit, ge=1, le=settings.search_max_limit)

    @model_validator(mode="before")
    @classmethod
    def _normalize_instant_book(cls, data: Any) -> Any:
        """Fold the ``instantBook`` alias into ``instantBooking``."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        alias = data.pop("instantBook", None)
        snake_alias = data.pop("instant_book", None)
        if alias is None:
            alias = snake_alias
        if alias is not None:
            data.pop("instant_booking", None)
            data["instantBooking"] = alias
        return data

    @field_validator("property_type", "camping_style", "amenities", mode="before")
    @classmethod
    def _split_comma_separated(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple)):
            items: list[Any] = []
            for item in value:
                if isinstance(item, str):
                    items.extend(part.strip() for part in item.split(",") if part.strip())
                else:
                    items.append(item)
            return items
        return value

    @property
    def has_date_range(self) -> bool:
        return self.check_in is not None and self.check_out is not None

    @property
    def has_invalid_date_range(self) -> bool:
        """True when both dates are given but check_out is not after check_in."""
        return self.has_date_range and self.check_in >= self.check_out  # type: ignore[operator]

    @property
    def nights(self) -> int | None:
        if not self.has_date_range:
            return None
        return (self.check_out - self.check_in).days  # type: ignore[operator]

    @property
    def has_geo(self) -> bool:
        return self.lat is not None and self.lng is not None and bool(self.radius)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class HostSummary(BaseModel):
    """Public host card. Never carries email or credentials."""

    id: uuid.UUID
    name: str
    avatar: str | None = None

    @classmethod
    def from_user(cls, user: User) -> "HostSummary":
        return cls(id=user.id, name=user.name, avatar=user.avatar_url)


class RefundRule(BaseModel):
    days_before_check_in: int = Field(..., ge=0)
    refund_percentage: int = Field(..., ge=0, le=100)


class CancellationPolicy(BaseModel):
    """Cancellation policy with refund rules ordered by days, descending."""

    type: Literal["flexible", "moderate", "strict"]
    description: str | None = None
    refund_rules: list[RefundRule] = Field(default_factory=list)

    @field_validator("refund_rules")
    @classmethod
    def _sort_rules(cls, rules: list[RefundRule]) -> list[RefundRule]:
        return sorted(rules, key=lambda rule: rule.days_before_check_in, reverse=True)


class LocationSummary(BaseModel):
    address: str | None = None
    city: str
    state: str
    country: str
    latitude: float
    longitude: float


class RatingSummary(BaseModel):
    average: float
    count: int
    breakdown: dict[str, float] | None = None


class PropertyStats(BaseModel):
    total_sites: int
    active_sites: int
    total_reviews: int


class PropertySearchItem(BaseModel):
    """A property as returned by search, enriched with its lowest active price."""

    id: uuid.UUID
    name: str
    slug: str
    tagline: str | None = None
    description: str | None = None
    property_type: str
    location: LocationSummary
    is_active: bool
    is_featured: bool
    is_verified: bool
    instant_book_enabled: bool
    rating: RatingSummary
    stats: PropertyStats
    cancellation_policy: CancellationPolicy | None = None
    host: HostSummary | None = None
    min_price: Decimal | None = None  # None when the property has no active site
    distance_km: float | None = None  # only set for nearest-first results
    created_at: datetime

    @classmethod
    def from_property(
        cls,
        prop: Property,
        min_price: Decimal | None,
        distance_km: float | None = None,
    ) -> "PropertySearchItem":
        """Build a search item from a Property whose ``host`` is already loaded."""
        return cls(
            id=prop.id,
            name=prop.name,
            slug=prop.slug,
            tagline=prop.tagline,
            description=prop.description,
            property_type=prop.property_type,
            location=LocationSummary(
                address=prop.address,
                city=prop.city,
                state=prop.state,
                country=prop.country,
                latitude=prop.latitude,
                longitude=prop.longitude,
            ),
            is_active=prop.is_active,
            is_featured=prop.is_featured,
            is_verified=prop.is_verified,
            instant_book_enabled=prop.instant_book_enabled,
            rating=RatingSummary(
                average=prop.rating_average,
                count=prop.rating_count,
                breakdown=prop.rating_breakdown,
            ),
            stats=PropertyStats(
                total_sites=prop.total_sites,
                active_sites=prop.active_sites,
                total_reviews=prop.total_reviews,
            ),
            cancellation_policy=(
                CancellationPolicy.model_validate(prop.cancellation_policy) if prop.cancellation_policy else None
            ),
            host=HostSummary.from_user(prop.host) if prop.host is not None else None,
            min_price=min_price,
            distance_km=distance_km,
            created_at=prop.created_at,
        )


class Pagination(BaseModel):
    """Page descriptor. ``total`` counts the fully filtered set."""

    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit))


class PropertySearchResponse(BaseModel):
    """Paginated search results."""

    properties: list[PropertySearchItem]
    pagination: Pagination

    @classmethod
    def empty(cls, criteria: SearchCriteria) -> "PropertySearchResponse":
        return cls(properties=[], pagination=Pagination.build(criteria.page, criteria.limit, 0))


class PropertyListResponse(BaseModel):
    """Unpaginated list used by the featured, popular and nearby listings."""

    items: list[PropertySearchItem]
    total: int
