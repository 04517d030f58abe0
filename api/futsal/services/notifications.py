"""Opponent-search notifications.

When a player books with "find opponent", every other user is told about it.
Delivery is handled outside this service; here the request is recorded as a
single broadcast row that the delivery channel fans out.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from futsal.core.dependencies import CurrentUser
from futsal.models.booking import Booking
from futsal.models.court import Court
from futsal.models.notification import Notification

logger = logging.getLogger(__name__)

OPPONENT_SEARCH = "opponent_search"


async def record_opponent_search(
    db: AsyncSession,
    booking: Booking,
    court: Court,
    user: CurrentUser,
) -> Notification:
    """Record a broadcast opponent-search request for ``booking``.

    Written inside a savepoint so a failure here leaves the booking intact.
    """
    searching_name = user.display_name or user.email or "A player"
    notification = Notification(
        user_id=None,
        type=OPPONENT_SEARCH,
        title="Looking for Opponent!",
        message=f"{searching_name} is looking for a playing partner at {court.name}",
        booking_id=booking.id,
        searching_user_id=user.id,
        court_name=court.name,
        booking_date=booking.booking_date,
        time_slot=booking.time_slot,
    )
    async with db.begin_nested():
        db.add(notification)

    logger.info("Opponent search broadcast for booking %s by user %s", booking.id, user.id)
    return notification
