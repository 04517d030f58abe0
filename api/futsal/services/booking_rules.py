"""Booking rules that depend on the clock.

Each rule returns an error or None if the rule passes, so callers decide
whether to raise.
"""

from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from futsal.core.config import settings
from futsal.models.booking import Booking, BookingStatus
from futsal.services.errors import CancellationNotAllowed, SlotInPast
from futsal.services.operating_hours import format_hour, parse_time_slot


def facility_tz() -> ZoneInfo:
    return ZoneInfo(settings.timezone)


def slot_starts_at(slot_date: date, hour: int) -> datetime:
    return datetime.combine(slot_date, time(hour), tzinfo=facility_tz())


def booking_starts_at(booking: Booking) -> datetime:
    """Wall-clock start of a booking in the facility's timezone."""
    return slot_starts_at(booking.booking_date, parse_time_slot(booking.time_slot))


def validate_start(booking_date: date, start_hour: int, now: datetime | None = None) -> SlotInPast | None:
    """A booking must start after ``now``, the same rule the availability grid applies."""
    now = now or datetime.now(UTC)
    if slot_starts_at(booking_date, start_hour) <= now:
        return SlotInPast(format_hour(start_hour), booking_date)
    return None


def validate_cancellation(booking: Booking, now: datetime | None = None) -> CancellationNotAllowed | None:
    """A booking can be cancelled while confirmed and more than the cutoff before it starts."""
    if booking.status != BookingStatus.CONFIRMED:
        return CancellationNotAllowed(f"Booking is already {BookingStatus(booking.status).value}.")

    now = now or datetime.now(UTC)
    cutoff = booking_starts_at(booking) - timedelta(hours=settings.cancellation_cutoff_hours)
    if now >= cutoff:
        return CancellationNotAllowed(
            f"Bookings can only be cancelled more than {settings.cancellation_cutoff_hours} hours "
            f"before they start ({cutoff.strftime('%A %d %B at %H:%M')})."
        )

    return None
