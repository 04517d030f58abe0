"""Notification model.

Notifications are requests for the delivery channel, which lives outside this
service. A row with no ``user_id`` is addressed to every user except
``searching_user_id``.
"""

from datetime import date

from sqlalchemy import Boolean, Date, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from futsal.models.base import Base, TimestampMixin


class Notification(TimestampMixin, Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str | None] = mapped_column(String(128))
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(String(1000), nullable=False)

    booking_id: Mapped[int | None] = mapped_column(ForeignKey("bookings.id"))
    searching_user_id: Mapped[str | None] = mapped_column(String(128))
    court_name: Mapped[str | None] = mapped_column(String(200))
    booking_date: Mapped[date | None] = mapped_column(Date)
    time_slot: Mapped[str | None] = mapped_column(String(5))

    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<Notification {self.type} booking={self.booking_id}>"
