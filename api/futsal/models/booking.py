"""Booking and slot claim models.

A booking reserves a court for a contiguous run of operational slots. The
slots it occupies are stored on the booking itself (``affected_slots``) so
conflict checks never re-derive the day-boundary arithmetic.

Slot claims are the write-time lock: one row per occupied (court, date, hour)
under a unique constraint, inserted in the same transaction as the booking
and released on cancellation.
"""

import enum
from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Enum, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from futsal.models.base import Base, JSONType, TimestampMixin


class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Booking(TimestampMixin, Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(primary_key=True)
    court_id: Mapped[int] = mapped_column(ForeignKey("courts.id"), nullable=False)

    # Identity-provider subject, not a local foreign key
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    user_email: Mapped[str | None] = mapped_column(String(254))

    # When: the date the start slot falls on
    booking_date: Mapped[date] = mapped_column(Date, nullable=False)
    time_slot: Mapped[str] = mapped_column(String(5), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)

    # [{"date": "YYYY-MM-DD", "timeSlot": "HH:00"}, ...]
    affected_slots: Mapped[list[dict]] = mapped_column(JSONType, nullable=False)

    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus, name="booking_status", values_callable=lambda e: [x.value for x in e]),
        default=BookingStatus.CONFIRMED,
        nullable=False,
    )
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Price, as quoted at commit time
    normal_hours: Mapped[int] = mapped_column(Integer, nullable=False)
    night_hours: Mapped[int] = mapped_column(Integer, nullable=False)
    total_price: Mapped[int] = mapped_column(Integer, nullable=False)

    need_opponent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        # The availability fetch: one court, start date in {D, D+1}
        Index("ix_bookings_court_date", "court_id", "booking_date"),
        # My bookings
        Index("ix_bookings_user", "user_id", "booking_date"),
    )

    def __repr__(self) -> str:
        return f"<Booking {self.booking_date} {self.time_slot} x{self.duration} court={self.court_id}>"


class SlotClaim(Base):
    __tablename__ = "slot_claims"

    id: Mapped[int] = mapped_column(primary_key=True)
    booking_id: Mapped[int] = mapped_column(ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False)
    court_id: Mapped[int] = mapped_column(ForeignKey("courts.id"), nullable=False)
    slot_date: Mapped[date] = mapped_column(Date, nullable=False)
    hour: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        # Two confirmed bookings can never hold the same court/date/hour
        UniqueConstraint("court_id", "slot_date", "hour", name="uq_slot_claims_court_slot"),
    )

    def __repr__(self) -> str:
        return f"<SlotClaim court={self.court_id} {self.slot_date} {self.hour:02d}:00>"
