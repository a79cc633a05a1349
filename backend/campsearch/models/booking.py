"""Booking model — reservations of a site for a half-open date range."""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campsearch.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

BOOKING_STATUSES = ("pending", "confirmed", "cancelled", "completed", "refunded")

# Only these statuses occupy the calendar.
BLOCKING_STATUSES = ("pending", "confirmed")


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A reservation of one site. ``check_out`` is exclusive."""

    __tablename__ = "bookings"

    site_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("sites.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    guest_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    number_of_guests: Mapped[int] = mapped_column(Integer, default=1)
    number_of_pets: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(
        String(20),
        default="pending",
        index=True,
    )  # pending, confirmed, cancelled, completed, refunded
    total_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)

    # Relationships
    site: Mapped["Site"] = relationship(lazy="raise")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (Index("ix_bookings_site_dates", "site_id", "check_in", "check_out"),)

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, site_id={self.site_id}, status={self.status})>"
