"""Pydantic schemas for API serialisation."""

from datetime import date, datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# --- Court ---


class CourtOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    court_number: int
    facility_name: str
    location: str | None


# --- Availability ---


class SlotOut(BaseModel):
    date: date
    time_slot: str  # "HH:00"
    is_available: bool
    max_duration: int


class AvailabilityOut(BaseModel):
    court_id: int
    court_name: str
    date: date
    slots: list[SlotOut]


# --- Quote ---


class QuoteOut(BaseModel):
    time_slot: str
    duration: int
    end_time: str  # "02:00 (+1 day)"
    normal_hours: int
    normal_rate: int
    night_hours: int
    night_rate: int
    total_price: int


# --- Booking ---


class BookingCreate(BaseModel):
    court_id: int
    date: date
    time_slot: str
    duration: int = 1
    need_opponent: bool = False


class AffectedSlotDoc(BaseModel):
    date: str  # "YYYY-MM-DD"
    time_slot: str = Field(alias="timeSlot")

    model_config = ConfigDict(populate_by_name=True)


class BookingDocument(BaseModel):
    """The booking record as the app and the document store see it.

    Older app builds wrote the total as ``totalAmount``; it is accepted on
    input and always emitted as ``totalPrice``.
    """

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int | None = None
    court_id: int = Field(alias="courtId")
    user_id: str = Field(alias="userId")
    date: date
    time_slot: str = Field(alias="timeSlot")
    duration: int
    status: str
    affected_slots: list[AffectedSlotDoc] = Field(alias="affectedSlots")
    normal_hours: int = Field(alias="normalHours")
    night_hours: int = Field(alias="nightHours")
    total_price: int = Field(
        alias="totalPrice",
        validation_alias=AliasChoices("totalPrice", "totalAmount", "total_price"),
    )
    need_opponent: bool = Field(default=False, alias="needOpponent")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    cancelled_at: datetime | None = Field(default=None, alias="cancelledAt")

    @classmethod
    def from_booking(cls, booking) -> "BookingDocument":
        return cls(
            id=booking.id,
            court_id=booking.court_id,
            user_id=booking.user_id,
            date=booking.booking_date,
            time_slot=booking.time_slot,
            duration=booking.duration,
            status=getattr(booking.status, "value", booking.status),
            affected_slots=booking.affected_slots,
            normal_hours=booking.normal_hours,
            night_hours=booking.night_hours,
            total_price=booking.total_price,
            need_opponent=booking.need_opponent,
            created_at=booking.created_at,
            cancelled_at=booking.cancelled_at,
        )


class BookingStatsOut(BaseModel):
    confirmed: int
    cancelled: int
    total: int
