"""Operational calendar for the futsal courts.

Pure calculation module: no database, no async, no FastAPI dependencies.

The facility opens at 08:00 and closes at 02:00 the next morning. A day's
bookable slots are the 19 hour labels [08, 09, ..., 23, 00, 01, 02] in that
order; the sequence index is what every other calculation works from, since
hour 0 alone does not say which calendar date it belongs to. Labels at index
16 and later (00:00, 01:00, 02:00) fall on the day after the booking date.

02:00 is the closing boundary: a booking may end at 02:00 but never start at
it or run past it.
"""

from dataclasses import dataclass
from datetime import date, timedelta

from futsal.services.errors import Exceeded, InvalidDuration, InvalidHour

OPERATIONAL_HOURS: tuple[int, ...] = (*range(8, 24), 0, 1, 2)
MIDNIGHT_INDEX = OPERATIONAL_HOURS.index(0)  # 16
CLOSING_INDEX = len(OPERATIONAL_HOURS) - 1  # 18, the 02:00 label
MAX_DURATION = CLOSING_INDEX

_INDEX_BY_HOUR = {hour: index for index, hour in enumerate(OPERATIONAL_HOURS)}


def format_hour(hour: int) -> str:
    """24h label for an hour: 8 -> "08:00"."""
    return f"{hour:02d}:00"


@dataclass(frozen=True)
class OperationalSlot:
    hour: int
    sequence_index: int

    @property
    def crosses_midnight(self) -> bool:
        return self.sequence_index >= MIDNIGHT_INDEX

    @property
    def label(self) -> str:
        return format_hour(self.hour)


@dataclass(frozen=True, order=True)
class AffectedSlot:
    """One occupied hour, identified by calendar date and hour."""

    date: date
    hour: int

    @property
    def label(self) -> str:
        return format_hour(self.hour)

    def to_document(self) -> dict:
        return {"date": self.date.isoformat(), "timeSlot": self.label}

    @classmethod
    def from_document(cls, doc: dict) -> "AffectedSlot":
        return cls(date=date.fromisoformat(doc["date"]), hour=parse_time_slot(doc["timeSlot"]))


@dataclass(frozen=True)
class EndTime:
    hour: int
    day_offset: int

    @property
    def label(self) -> str:
        return format_hour(self.hour)

    def __str__(self) -> str:
        return format_end_time(self)


def parse_time_slot(value) -> int:
    """Parse an hour label ("14:00", "14:00:00") or int into an hour.

    Only whole hours are slots; anything else raises InvalidHour.
    """
    if isinstance(value, bool):
        raise InvalidHour(value)
    if isinstance(value, int):
        hour = value
    elif isinstance(value, str):
        parts = value.strip().split(":")
        # ASCII digits only: int() rejects other Unicode digits like "²"
        if len(parts) not in (2, 3) or not all(p.isascii() and p.isdecimal() for p in parts):
            raise InvalidHour(value)
        if any(int(p) for p in parts[1:]):
            raise InvalidHour(value)
        hour = int(parts[0])
    else:
        raise InvalidHour(value)

    if hour not in _INDEX_BY_HOUR:
        raise InvalidHour(value)
    return hour


def sequence_of(hour) -> int:
    """Index of ``hour`` in the operational sequence. Raises InvalidHour."""
    return _INDEX_BY_HOUR[parse_time_slot(hour)]


def slot_at(index: int) -> OperationalSlot:
    return OperationalSlot(hour=OPERATIONAL_HOURS[index], sequence_index=index)


def max_duration(start_hour) -> int:
    """Longest booking (in hours) that can start at ``start_hour`` and end by 02:00."""
    return CLOSING_INDEX - sequence_of(start_hour)


def duration_options(start_hour) -> list[int]:
    return list(range(1, max_duration(start_hour) + 1))


def check_duration(start_hour, duration) -> int:
    """Validate a (start, duration) pair and return the start index.

    Raises InvalidHour, InvalidDuration, or Exceeded when the run would pass 02:00.
    """
    start_index = sequence_of(start_hour)
    if isinstance(duration, bool) or not isinstance(duration, int) or duration < 1:
        raise InvalidDuration(duration)
    if start_index + duration > CLOSING_INDEX:
        raise Exceeded(format_hour(OPERATIONAL_HOURS[start_index]), duration, CLOSING_INDEX - start_index)
    return start_index


def date_for_offset(start_date: date, start_index: int, offset: int) -> date:
    """Calendar date of the slot ``offset`` steps after ``start_index``.

    The day rolls over only when the run crosses from 23:00 into 00:00, so the
    answer depends on where the run started, not on the hour reached.
    """
    index = start_index + offset
    if not 0 <= index <= CLOSING_INDEX:
        raise Exceeded(format_hour(OPERATIONAL_HOURS[start_index]), offset, CLOSING_INDEX - start_index)
    if start_index < MIDNIGHT_INDEX <= index:
        return start_date + timedelta(days=1)
    return start_date


def end_time(start_hour, duration: int) -> EndTime:
    """When a booking of ``duration`` hours from ``start_hour`` finishes."""
    start_index = check_duration(start_hour, duration)
    end_index = start_index + duration
    day_offset = 1 if start_index < MIDNIGHT_INDEX <= end_index else 0
    return EndTime(hour=OPERATIONAL_HOURS[end_index], day_offset=day_offset)


def format_end_time(end: EndTime) -> str:
    """"02:00 (+1 day)" when the booking ends after midnight, else "16:00"."""
    if end.day_offset:
        return f"{end.label} (+{end.day_offset} day)"
    return end.label


def affected_slots(start_date: date, start_hour, duration: int) -> list[AffectedSlot]:
    """Every (date, hour) a booking occupies, in order."""
    start_index = check_duration(start_hour, duration)
    return [
        AffectedSlot(
            date=date_for_offset(start_date, start_index, offset),
            hour=OPERATIONAL_HOURS[start_index + offset],
        )
        for offset in range(duration)
    ]


def bookable_starts(query_date: date) -> list[AffectedSlot]:
    """The start slots of one operational day: 08:00 on ``query_date`` to 01:00 the next day."""
    return [
        AffectedSlot(date=date_for_offset(query_date, 0, index), hour=OPERATIONAL_HOURS[index])
        for index in range(CLOSING_INDEX)
    ]
