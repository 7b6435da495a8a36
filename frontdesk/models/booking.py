from __future__ import annotations
from datetime import datetime
from typing import TYPE_CHECKING
from enum import Enum as PyEnum
from sqlalchemy import Integer, String, ForeignKey, Numeric, Enum, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base
from .room import _values

if TYPE_CHECKING:
    from .room import Room
    from .payment import Payment
    from .purchase import Purchase

class BookingStatus(str, PyEnum):
    ACTIVE = "active"
    COMPLETED = "completed"

class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    room_id: Mapped[int | None] = mapped_column(ForeignKey("rooms.id", ondelete="SET NULL"), index=True, nullable=True)
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(32), nullable=False)
    persons: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    extra_beds: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    id_proof_url: Mapped[str | None] = mapped_column(String(500))
    initial_payment: Mapped[float] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    rent_per_day: Mapped[float | None] = mapped_column(Numeric(10, 2))
    check_in_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)
    expected_check_out: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    actual_check_out: Mapped[datetime | None] = mapped_column(DateTime)
    status: Mapped[BookingStatus] = mapped_column(Enum(BookingStatus, values_callable=_values), default=BookingStatus.ACTIVE, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Relationships
    room: Mapped[Room | None] = relationship(back_populates="bookings")
    payments: Mapped[list[Payment]] = relationship(back_populates="booking", order_by="Payment.payment_date.desc()")
    purchases: Mapped[list[Purchase]] = relationship(back_populates="booking")
