"""Property model — a bookable piece of land that owns one or more sites."""

import uuid

from sqlalchemy import JSON, Boolean, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campsearch.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

PROPERTY_TYPES = ("private_land", "farm", "ranch", "campground")


class Property(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A campground, farm, ranch or private land listing owned by a host."""

    __tablename__ = "properties"

    host_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    tagline: Mapped[str | None] = mapped_column(String(255), default=None)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    property_type: Mapped[str] = mapped_column(String(50), nullable=False)  # private_land, farm, ranch, campground

    # Location
    address: Mapped[str | None] = mapped_column(String(255), default=None)
    city: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    country: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    # Status flags; properties start inactive until they own an active site
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    instant_book_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Rating, recomputed from published reviews by the review service
    rating_average: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    rating_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    rating_breakdown: Mapped[dict | None] = mapped_column(JSON, default=None)  # {location, communication, value}

    # Stats
    total_sites: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    active_sites: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_reviews: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # {type, description, refund_rules: [{days_before_check_in, refund_percentage}]}
    cancellation_policy: Mapped[dict | None] = mapped_column(JSON, default=None)

    # Relationships
    host: Mapped["User"] = relationship(back_populates="properties", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    sites: Mapped[list["Site"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="property", lazy="raise", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, name={self.name!r}, type={self.property_type!r})>"


