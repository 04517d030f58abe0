"""Booking routes: quote, create, list, cancel, stats."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from futsal.core.database import get_db
from futsal.core.dependencies import CurrentUser, get_current_user, require_admin
from futsal.schemas import BookingCreate, BookingDocument, BookingStatsOut, QuoteOut
from futsal.services.allocator import allocate_booking, booking_stats, cancel_booking, list_user_bookings
from futsal.services.errors import (
    BookingError,
    BookingNotFound,
    CancellationNotAllowed,
    CourtNotFound,
    SlotConflict,
    TransientIOError,
)
from futsal.services.operating_hours import end_time, format_end_time, format_hour, parse_time_slot
from futsal.services.pricing import NIGHT_RATE, NORMAL_RATE, calculate_quote

router = APIRouter(prefix="/bookings", tags=["bookings"])


def _http_error(exc: BookingError) -> HTTPException:
    """Map a booking error to its HTTP status. Input errors default to 422."""
    if isinstance(exc, SlotConflict):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, (BookingNotFound, CourtNotFound)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, CancellationNotAllowed):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, TransientIOError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    return HTTPException(status_code=code, detail=[exc.to_detail()])


@router.get("/quote", response_model=QuoteOut)
async def get_quote(
    time_slot: str = Query(..., description="Start slot, e.g. 14:00"),
    duration: int = Query(1, description="Hours"),
):
    """Price a booking before it is made. Same calculation as the stored total."""
    try:
        start_hour = parse_time_slot(time_slot)
        quote = calculate_quote(start_hour, duration)
        end = end_time(start_hour, duration)
    except BookingError as exc:
        raise _http_error(exc)

    return QuoteOut(
        time_slot=format_hour(start_hour),
        duration=duration,
        end_time=format_end_time(end),
        normal_hours=quote.normal_hours,
        normal_rate=NORMAL_RATE,
        night_hours=quote.night_hours,
        night_rate=NIGHT_RATE,
        total_price=quote.total_price,
    )


@router.get("/stats", response_model=BookingStatsOut)
async def get_booking_stats(
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        stats = await booking_stats(db)
    except BookingError as exc:
        raise _http_error(exc)
    return BookingStatsOut(**stats)


@router.post("", response_model=BookingDocument, status_code=status.HTTP_201_CREATED)
async def create_booking(
    body: BookingCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        booking = await allocate_booking(
            db,
            court_id=body.court_id,
            user=user,
            booking_date=body.date,
            time_slot=body.time_slot,
            duration=body.duration,
            need_opponent=body.need_opponent,
        )
    except BookingError as exc:
        raise _http_error(exc)

    return BookingDocument.from_booking(booking)


@router.get("", response_model=list[BookingDocument])
async def list_my_bookings(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        bookings = await list_user_bookings(db, user.id)
    except BookingError as exc:
        raise _http_error(exc)
    return [BookingDocument.from_booking(b) for b in bookings]


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_my_booking(
    booking_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        await cancel_booking(db, booking_id, user)
    except BookingError as exc:
        raise _http_error(exc)
