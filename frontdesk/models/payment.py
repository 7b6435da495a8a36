from __future__ import annotations
from datetime import datetime
from typing import TYPE_CHECKING
from enum import Enum as PyEnum
from sqlalchemy import Integer, ForeignKey, Numeric, Enum, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base
from .room import _values

if TYPE_CHECKING:
    from .booking import Booking

class PaymentType(str, PyEnum):
    CHECK_IN = "check_in"
    EXTENSION = "extension"
    PURCHASE = "purchase"

class Payment(Base):
    """Append-only ledger entry of money received against a booking."""
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    booking_id: Mapped[int] = mapped_column(ForeignKey("bookings.id"), index=True, nullable=False)
    amount: Mapped[float] = mapped_column(Numeric(10, 2), nullable=False)
    payment_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False, index=True)
    payment_type: Mapped[PaymentType] = mapped_column(Enum(PaymentType, values_callable=_values), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    booking: Mapped[Booking] = relationship(back_populates="payments")
