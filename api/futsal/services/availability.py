"""Availability checks against a court's existing bookings.

Pure calculation module. Callers pass in the bookings they fetched; nothing
here reads from the database. A booking is anything with ``status`` and
``affected_slots`` (ORM rows or plain namespaces in tests).

Slots are compared as (date, hour) pairs: 00:00 on two different dates are
different slots.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from futsal.core.config import settings
from futsal.models.booking import BookingStatus
from futsal.services.errors import BookingError
from futsal.services.operating_hours import AffectedSlot, affected_slots, bookable_starts, max_duration


@dataclass(frozen=True)
class Available:
    slots: tuple[AffectedSlot, ...]


@dataclass(frozen=True)
class Conflict:
    slots: tuple[AffectedSlot, ...]


@dataclass(frozen=True)
class InvalidRequest:
    error: BookingError


AvailabilityResult = Available | Conflict | InvalidRequest


def occupied_slots(bookings: Iterable) -> set[AffectedSlot]:
    """Union of the slots held by every non-cancelled booking."""
    taken: set[AffectedSlot] = set()
    for booking in bookings:
        if booking.status == BookingStatus.CANCELLED:
            continue
        taken.update(AffectedSlot.from_document(doc) for doc in booking.affected_slots)
    return taken


def check_availability(booking_date: date, start_hour, duration: int, bookings: Iterable) -> AvailabilityResult:
    """Can ``duration`` hours from ``start_hour`` on ``booking_date`` be booked?

    Invalid requests are reported before any overlap test.
    """
    try:
        candidate = affected_slots(booking_date, start_hour, duration)
    except BookingError as exc:
        return InvalidRequest(exc)

    taken = occupied_slots(bookings)
    clashes = sorted(slot for slot in candidate if slot in taken)
    if clashes:
        return Conflict(tuple(clashes))
    return Available(tuple(candidate))


def generate_slots(query_date: date, bookings: Iterable, now: datetime | None = None) -> list[dict]:
    """Build the start-slot grid for one operational day of a court.

    Returns one dict per bookable start (08:00 to 01:00) with keys: date,
    time_slot, is_available, max_duration. Past slots and occupied slots are
    unavailable.
    """
    tz = ZoneInfo(settings.timezone)
    now = now or datetime.now(tz)
    taken = occupied_slots(bookings)

    slots: list[dict] = []
    for slot in bookable_starts(query_date):
        starts_at = datetime.combine(slot.date, time(slot.hour), tzinfo=tz)
        slots.append(
            {
                "date": slot.date,
                "time_slot": slot.label,
                "is_available": starts_at > now and slot not in taken,
                "max_duration": max_duration(slot.hour),
            }
        )
    return slots
