"""Site model — a single bookable plot or unit inside a property."""

import uuid
from decimal import Decimal

from sqlalchemy import Boolean, Column, ForeignKey, Integer, Numeric, String, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campsearch.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

ACCOMMODATION_TYPES = (
    "tent",
    "rv",
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

site_amenities = Table(
    "site_amenities",
    Base.metadata,
    Column("site_id", Uuid, ForeignKey("sites.id", ondelete="CASCADE"), primary_key=True),
    Column("amenity_id", Uuid, ForeignKey("amenities.id", ondelete="CASCADE"), primary_key=True, index=True),
)


class Site(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A bookable site with its own capacity, booking policy and pricing."""

    __tablename__ = "sites"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    accommodation_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    # Capacity
    max_guests: Mapped[int] = mapped_column(Integer, nullable=False)
    max_pets: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    max_vehicles: Mapped[int | None] = mapped_column(Integer, default=None)
    max_tents: Mapped[int | None] = mapped_column(Integer, default=None)
    # 1 = designated site, >1 = undesignated pool of identical slots
    max_concurrent_bookings: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    # Booking policy
    minimum_nights: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    maximum_nights: Mapped[int | None] = mapped_column(Integer, default=None)
    instant_book: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Pricing (per night)
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    weekend_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), default=None)
    cleaning_fee: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), default=None)
    pet_fee: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), default=None)
    currency: Mapped[str] = mapped_column(String(3), default="VND", nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    # Relationships
    property: Mapped["Property"] = relationship(back_populates="sites", lazy="raise")  # type: ignore[name-defined]  # noqa: F821
    amenities: Mapped[list["Amenity"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        secondary=site_amenities, lazy="raise"
    )

    def __repr__(self) -> str:
        return f"<Site(id={self.id}, property_id={self.property_id}, type={self.accommodation_type!r})>"
