from .user import User, UserRole
from .room import Room, RoomType, RoomStatus, ROOM_TRANSITIONS
from .booking import Booking, BookingStatus
from .payment import Payment, PaymentType
from .inventory import InventoryItem
from .purchase import Purchase, PurchaseStatus
