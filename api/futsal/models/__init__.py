"""All models imported here for metadata discovery."""

from futsal.models.base import Base
from futsal.models.booking import Booking, BookingStatus, SlotClaim
from futsal.models.court import Court
from futsal.models.notification import Notification

__all__ = [
    "Base",
    "Court",
    "Booking",
    "BookingStatus",
    "SlotClaim",
    "Notification",
]
