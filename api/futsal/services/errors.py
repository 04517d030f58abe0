"""Booking error taxonomy.

Every failure the booking core can report is a ``BookingError`` carrying a
machine-readable ``rule`` and a message the app can show as-is. Input errors
(bad hour, bad duration, past 02:00, occupied slots) are raised before any
write; ``TransientIOError`` marks a store failure the caller may retry.
"""


class BookingError(Exception):
    """Base class for booking failures."""

    rule = "booking_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_detail(self) -> dict:
        return {"rule": self.rule, "message": self.message}


class InvalidHour(BookingError):
    """The hour is not one of the operational slot labels."""

    rule = "invalid_hour"

    def __init__(self, hour):
        self.hour = hour
        super().__init__(f"{hour!r} is not an operational time slot (08:00 to 02:00).")


class InvalidDuration(BookingError):
    rule = "invalid_duration"

    def __init__(self, duration):
        self.duration = duration
        super().__init__(f"Duration must be a whole number of hours from 1, got {duration!r}.")


class Exceeded(BookingError):
    """The booking would run past the 02:00 close."""

    rule = "exceeded"

    def __init__(self, start_label: str, duration: int, max_duration: int):
        self.start_label = start_label
        self.duration = duration
        self.max_duration = max_duration
        super().__init__(
            f"A {duration} hour booking from {start_label} runs past closing at 02:00. "
            f"Longest booking from {start_label} is {max_duration} hour{'s' if max_duration != 1 else ''}."
        )


class SlotInPast(BookingError):
    """The start slot has already begun in facility time."""

    rule = "slot_in_past"

    def __init__(self, start_label: str, booking_date):
        self.start_label = start_label
        self.booking_date = booking_date
        super().__init__(f"{booking_date.isoformat()} {start_label} has already started. Pick a later slot.")


class SlotConflict(BookingError):
    """One or more slots are held by a non-cancelled booking."""

    rule = "slot_conflict"

    def __init__(self, slots, message: str | None = None):
        self.slots = list(slots)
        taken = ", ".join(f"{s.date.isoformat()} {s.label}" for s in self.slots)
        super().__init__(message or f"Court already booked at {taken}.")

    def to_detail(self) -> dict:
        detail = super().to_detail()
        detail["slots"] = [s.to_document() for s in self.slots]
        return detail


class RaceLoss(SlotConflict):
    """A concurrent booking took the slots between our read and our write."""

    rule = "race_loss"

    def __init__(self, slots):
        super().__init__(slots, "Another booking for this court was made at the same moment. Please pick another slot.")


class TransientIOError(BookingError):
    """The backing store failed; retrying may succeed."""

    rule = "store_unavailable"


class BookingNotFound(BookingError):
    rule = "not_found"

    def __init__(self, booking_id: int):
        self.booking_id = booking_id
        super().__init__("Booking not found")


class CancellationNotAllowed(BookingError):
    rule = "cancellation_not_allowed"


class CourtNotFound(BookingError):
    rule = "not_found"

    def __init__(self, court_id: int):
        self.court_id = court_id
        super().__init__("Court not found or not bookable")
