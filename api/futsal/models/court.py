"""Court model.

A court carries no per-slot state: availability is always derived from its
bookings.
"""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from futsal.models.base import Base, TimestampMixin


class Court(TimestampMixin, Base):
    __tablename__ = "courts"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    court_number: Mapped[int] = mapped_column(Integer, nullable=False)
    facility_name: Mapped[str] = mapped_column(String(200), default="One Touch Futsal", nullable=False)
    location: Mapped[str | None] = mapped_column(String(200))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<Court {self.name}>"
