"""Court routes: list courts and the per-day availability grid."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from futsal.core.database import get_db
from futsal.schemas import AvailabilityOut, CourtOut, SlotOut
from futsal.services.allocator import fetch_active_bookings, get_court, list_active_courts
from futsal.services.availability import generate_slots
from futsal.services.errors import TransientIOError

router = APIRouter(prefix="/courts", tags=["courts"])


@router.get("", response_model=list[CourtOut])
async def list_courts(db: AsyncSession = Depends(get_db)):
    try:
        return await list_active_courts(db)
    except TransientIOError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=[exc.to_detail()])


@router.get("/{court_id}/availability", response_model=AvailabilityOut)
async def get_court_availability(
    court_id: int,
    query_date: date = Query(..., alias="date", description="Date in YYYY-MM-DD format"),
    db: AsyncSession = Depends(get_db),
):
    """Return the start slots of one operational day (08:00 to 01:00) for a court.

    Public endpoint, advisory only: the booking endpoint re-checks against a
    fresh read before writing.
    """
    try:
        court = await get_court(db, court_id)
        if court is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Court not found")
        bookings = await fetch_active_bookings(db, court_id, query_date)
    except TransientIOError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=[exc.to_detail()])

    slots = generate_slots(query_date, bookings)

    return AvailabilityOut(
        court_id=court.id,
        court_name=court.name,
        date=query_date,
        slots=[SlotOut(**s) for s in slots],
    )
