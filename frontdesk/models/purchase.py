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
    from .inventory import InventoryItem

class PurchaseStatus(str, PyEnum):
    PAID = "paid"
    PENDING = "pending"

class Purchase(Base):
    __tablename__ = "purchases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    booking_id: Mapped[int] = mapped_column(ForeignKey("bookings.id"), index=True, nullable=False)
    item_id: Mapped[int | None] = mapped_column(ForeignKey("inventory.id", ondelete="SET NULL"), index=True, nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    # price x quantity at the time of purchase; never recomputed
    amount: Mapped[float] = mapped_column(Numeric(10, 2), nullable=False)
    purchase_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)
    payment_status: Mapped[PurchaseStatus] = mapped_column(Enum(PurchaseStatus, values_callable=_values), default=PurchaseStatus.PENDING, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    booking: Mapped[Booking] = relationship(back_populates="purchases")
    item: Mapped[InventoryItem | None] = relationship(back_populates="purchases")
