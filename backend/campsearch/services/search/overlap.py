"""Half-open date interval overlap between a search window and a booking."""

from datetime import date

from sqlalchemy import ColumnElement, and_, or_

from campsearch.models.booking import Booking


def intervals_conflict(check_in: date, check_out: date, booked_in: date, booked_out: date) -> bool:
    """Return True if ``[booked_in, booked_out)`` collides with ``[check_in, check_out)``.

    The three cases are kept separate rather than collapsed into a single
    ``booked_in < check_out and booked_out > check_in`` test. A booking that
    ends on the requested check-in day (or starts on the requested check-out
    day) does not conflict.

    Callers guarantee ``check_in < check_out``.
    """
    starts_inside = check_in <= booked_in < check_out
    ends_inside = check_in < booked_out <= check_out
    spans_window = booked_in <= check_in and booked_out >= check_out
    return starts_inside or ends_inside or spans_window


def booking_overlap_clause(check_in: date, check_out: date) -> ColumnElement[bool]:
    """SQL form of :func:`intervals_conflict` over the ``bookings`` table."""
    return or_(
        and_(Booking.check_in >= check_in, Booking.check_in < check_out),
        and_(Booking.check_out > check_in, Booking.check_out <= check_out),
        and_(Booking.check_in <= check_in, Booking.check_out >= check_out),
    )
