"""Booking allocator: the only code path that creates or cancels bookings.

Create: validate the request, re-read the court's live bookings, re-check
availability against that snapshot, then write the booking together with its
quote and occupied slots.

The re-read narrows but cannot close the window between read and write. With
``settings.slot_claims_enabled`` each occupied slot is also inserted as a
``SlotClaim`` row under a unique constraint in the same transaction, so the
database rejects the second of two racing writers and it gets ``RaceLoss``.
With claims disabled the allocator re-scans after its own write and backs
out if an older overlapping booking is visible; two writers that both write
before either commits can still double-book in that mode.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, date, datetime, timedelta

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from futsal.core.config import settings
from futsal.core.dependencies import CurrentUser
from futsal.models.booking import Booking, BookingStatus, SlotClaim
from futsal.models.court import Court
from futsal.services.availability import Conflict, InvalidRequest, check_availability
from futsal.services.booking_rules import validate_cancellation, validate_start
from futsal.services.errors import (
    BookingNotFound,
    CourtNotFound,
    RaceLoss,
    SlotConflict,
    TransientIOError,
)
from futsal.services.notifications import record_opponent_search
from futsal.services.operating_hours import AffectedSlot, affected_slots, format_hour, parse_time_slot
from futsal.services.pricing import calculate_quote

logger = logging.getLogger(__name__)

Notifier = Callable[[AsyncSession, Booking, Court, CurrentUser], Awaitable[object]]


async def list_active_courts(db: AsyncSession) -> list[Court]:
    try:
        result = await db.execute(
            select(Court).where(Court.is_active.is_(True)).order_by(Court.sort_order, Court.court_number)
        )
    except SQLAlchemyError as exc:
        raise TransientIOError("Could not load the courts. Please try again.") from exc
    return list(result.scalars().all())


async def get_court(db: AsyncSession, court_id: int) -> Court | None:
    try:
        result = await db.execute(select(Court).where(Court.id == court_id, Court.is_active.is_(True)))
    except SQLAlchemyError as exc:
        raise TransientIOError("Could not load the court. Please try again.") from exc
    return result.scalar_one_or_none()


async def fetch_active_bookings(db: AsyncSession, court_id: int, booking_date: date) -> list[Booking]:
    """Non-cancelled bookings on ``court_id`` that can hold slots near ``booking_date``.

    Start dates D-1 to D+1 are read: a run starting at 22:00 on D-1 holds 00:00 on
    D, and the grid for D shows the 00:00 and 01:00 slots of D+1.
    """
    try:
        result = await db.execute(
            select(Booking).where(
                Booking.court_id == court_id,
                Booking.booking_date.between(booking_date - timedelta(days=1), booking_date + timedelta(days=1)),
                Booking.status != BookingStatus.CANCELLED,
            )
        )
    except SQLAlchemyError as exc:
        raise TransientIOError("Could not load current bookings. Please try again.") from exc
    return list(result.scalars().all())


def _overlap(booking: Booking, slots: list[AffectedSlot]) -> list[AffectedSlot]:
    held = {AffectedSlot.from_document(doc) for doc in booking.affected_slots}
    return sorted(slot for slot in slots if slot in held)


async def _race_slots(db: AsyncSession, court_id: int, booking_date: date, slots: list[AffectedSlot]) -> list[AffectedSlot]:
    """After losing a race, find which of ``slots`` the winner holds."""
    try:
        rivals = await fetch_active_bookings(db, court_id, booking_date)
    except TransientIOError:
        return slots
    lost = sorted({slot for rival in rivals for slot in _overlap(rival, slots)})
    return lost or slots


async def allocate_booking(
    db: AsyncSession,
    court_id: int,
    user: CurrentUser,
    booking_date: date,
    time_slot: str,
    duration: int,
    need_opponent: bool = False,
    notifier: Notifier | None = record_opponent_search,
    now: datetime | None = None,
) -> Booking:
    """Create a confirmed booking or raise a BookingError.

    Raises InvalidHour, InvalidDuration, Exceeded or SlotInPast before touching the store,
    CourtNotFound, SlotConflict when the fresh snapshot shows a clash, RaceLoss
    when a concurrent writer got there first, and TransientIOError when the
    store fails.
    """
    start_hour = parse_time_slot(time_slot)
    slots = affected_slots(booking_date, start_hour, duration)
    quote = calculate_quote(start_hour, duration)
    too_late = validate_start(booking_date, start_hour, now)
    if too_late:
        raise too_late

    court = await get_court(db, court_id)
    if court is None:
        raise CourtNotFound(court_id)

    # Authoritative check: fresh snapshot, immediately before the write
    existing = await fetch_active_bookings(db, court_id, booking_date)
    outcome = check_availability(booking_date, start_hour, duration, existing)
    if isinstance(outcome, InvalidRequest):
        raise outcome.error
    if isinstance(outcome, Conflict):
        logger.info(
            "Booking refused on court %s: %s already taken",
            court_id,
            ", ".join(f"{s.date} {s.label}" for s in outcome.slots),
        )
        raise SlotConflict(outcome.slots)

    booking = Booking(
        court_id=court_id,
        user_id=user.id,
        user_email=user.email,
        booking_date=booking_date,
        time_slot=format_hour(start_hour),
        duration=duration,
        affected_slots=[slot.to_document() for slot in slots],
        status=BookingStatus.CONFIRMED,
        normal_hours=quote.normal_hours,
        night_hours=quote.night_hours,
        total_price=quote.total_price,
        need_opponent=need_opponent,
    )
    db.add(booking)
    try:
        await db.flush()
        if settings.slot_claims_enabled:
            db.add_all(
                [SlotClaim(booking_id=booking.id, court_id=court_id, slot_date=s.date, hour=s.hour) for s in slots]
            )
            await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        if "slot_claims" not in str(exc.orig):
            raise TransientIOError("Could not save the booking. Please try again.") from exc
        lost = await _race_slots(db, court_id, booking_date, slots)
        logger.warning("Race lost on court %s for %s %s x%s", court_id, booking_date, time_slot, duration)
        raise RaceLoss(lost) from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        raise TransientIOError("Could not save the booking. Please try again.") from exc

    if not settings.slot_claims_enabled:
        await _rescan_for_race(db, booking, slots)

    logger.info(
        "Booking %s created: court %s %s %s x%s for user %s (RM%s)",
        booking.id,
        court_id,
        booking_date,
        booking.time_slot,
        duration,
        user.id,
        booking.total_price,
    )

    if need_opponent and notifier is not None:
        try:
            await notifier(db, booking, court, user)
        except Exception:
            logger.exception("Opponent search notification failed for booking %s", booking.id)

    return booking


async def _rescan_for_race(db: AsyncSession, booking: Booking, slots: list[AffectedSlot]) -> None:
    """Back out ``booking`` if an older overlapping booking became visible after our check."""
    current = await fetch_active_bookings(db, booking.court_id, booking.booking_date)
    lost = sorted(
        {slot for rival in current if rival.id < booking.id for slot in _overlap(rival, slots)}
    )
    if lost:
        logger.warning("Race lost on court %s: %s", booking.court_id, ", ".join(f"{s.date} {s.label}" for s in lost))
        await db.rollback()
        raise RaceLoss(lost)


async def cancel_booking(
    db: AsyncSession,
    booking_id: int,
    user: CurrentUser,
    now: datetime | None = None,
) -> Booking:
    """Cancel a booking and free its slots.

    The booking row and its ``affected_slots`` are kept; only the status flips
    and the slot claims are released. Admins may cancel any booking, users
    only their own.
    """
    query = select(Booking).where(Booking.id == booking_id)
    if not user.is_admin:
        query = query.where(Booking.user_id == user.id)
    try:
        result = await db.execute(query)
    except SQLAlchemyError as exc:
        raise TransientIOError("Could not load the booking. Please try again.") from exc
    booking = result.scalar_one_or_none()
    if booking is None:
        raise BookingNotFound(booking_id)

    now = now or datetime.now(UTC)
    violation = validate_cancellation(booking, now)
    if violation:
        raise violation

    booking.status = BookingStatus.CANCELLED
    booking.cancelled_at = now
    booking.updated_at = now
    try:
        await db.execute(delete(SlotClaim).where(SlotClaim.booking_id == booking.id))
        await db.flush()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise TransientIOError("Could not cancel the booking. Please try again.") from exc

    logger.info("Booking %s cancelled by user %s", booking.id, user.id)
    return booking


async def list_user_bookings(db: AsyncSession, user_id: str, limit: int = 50) -> list[Booking]:
    try:
        result = await db.execute(
            select(Booking)
            .where(Booking.user_id == user_id)
            .order_by(Booking.booking_date.desc(), Booking.created_at.desc())
            .limit(limit)
        )
    except SQLAlchemyError as exc:
        raise TransientIOError("Could not load your bookings. Please try again.") from exc
    return list(result.scalars().all())


async def booking_stats(db: AsyncSession) -> dict[str, int]:
    """Count bookings per status, plus the total."""
    try:
        result = await db.execute(select(Booking.status, func.count(Booking.id)).group_by(Booking.status))
    except SQLAlchemyError as exc:
        raise TransientIOError("Could not load booking statistics. Please try again.") from exc
    stats = {status.value: 0 for status in BookingStatus}
    for status_value, count in result.all():
        stats[BookingStatus(status_value).value] = count
    stats["total"] = sum(stats.values())
    return stats
