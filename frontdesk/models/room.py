from __future__ import annotations
from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import Integer, DateTime, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base


def _values(enum_cls):
    return [m.value for m in enum_cls]


class RoomType(str, PyEnum):
    AC = "ac"
    NON_AC = "non-ac"

class RoomStatus(str, PyEnum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    CLEANING = "cleaning"

# Allowed moves of the room lifecycle; anything else is rejected by the store.
ROOM_TRANSITIONS = {
    RoomStatus.AVAILABLE: {RoomStatus.OCCUPIED},
    RoomStatus.OCCUPIED: {RoomStatus.CLEANING},
    RoomStatus.CLEANING: {RoomStatus.AVAILABLE},
}

class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    room_number: Mapped[int] = mapped_column(Integer, unique=True, nullable=False, index=True)
    type: Mapped[RoomType] = mapped_column(Enum(RoomType, values_callable=_values), default=RoomType.AC, nullable=False)
    status: Mapped[RoomStatus] = mapped_column(Enum(RoomStatus, values_callable=_values), default=RoomStatus.AVAILABLE, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    bookings: Mapped[list["Booking"]] = relationship(back_populates="room")
