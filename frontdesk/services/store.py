import logging
import math
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..config import settings
from ..db import get_db
from ..exceptions import (
    DuplicateRoomError,
    FrontDeskError,
    InsufficientStockError,
    InvalidInputError,
    NotFoundError,
    RoomStateError,
    StoreError,
)
from ..models import (
    ROOM_TRANSITIONS,
    Booking,
    BookingStatus,
    InventoryItem,
    Payment,
    PaymentType,
    Purchase,
    PurchaseStatus,
    Room,
    RoomStatus,
    RoomType,
)
from .billing import BillSummary, DayRule, bill_for_booking

logger = logging.getLogger(__name__)


@dataclass
class BookedRoom:
    booking: Booking
    room: Room
    payments: list[Payment]
    bill: BillSummary


@dataclass
class PendingPurchase:
    purchase: Purchase
    item_name: str


@dataclass
class CheckoutResult:
    booking: Booking
    bill: BillSummary
    final_payment: Payment | None


@dataclass
class Invoice:
    booking: Booking
    bill: BillSummary
    pending_purchases: list[PendingPurchase]


@dataclass
class PaymentLogEntry:
    payment: Payment
    room_number: int
    customer_name: str


def positive_amount(value, label: str = "amount") -> float:
    """Parse a form/API value into a positive number or raise InvalidInputError."""
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Please enter a valid {label}.")
    if not math.isfinite(amount) or amount <= 0:
        raise InvalidInputError(f"Please enter a valid {label}.")
    return amount


class FrontDeskStore:
    """
    Reads and writes the front desk relations through one session.

    Multi-step workflows (check-in, purchase, checkout) commit once at the end
    and roll back everything on any failure.
    """

    def __init__(self, db: Session, clock=datetime.now):
        self.db = db
        self.clock = clock

    @contextmanager
    def _transaction(self, action: str):
        try:
            yield
            self.db.commit()
        except FrontDeskError as e:
            self.db.rollback()
            logger.warning("%s rejected: %s", action, e.detail)
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("%s failed: %s", action, e)
            raise StoreError() from e

    # ==== Rooms ====

    def list_rooms(self) -> list[Room]:
        return self.db.query(Room).order_by(Room.room_number.asc()).all()

    def get_room(self, room_id: int) -> Room:
        room = self.db.get(Room, room_id)
        if not room:
            raise NotFoundError("Room not found.")
        return room

    def add_room(self, number, room_type=RoomType.AC) -> Room:
        try:
            number = int(number)
            room_type = RoomType(room_type)
        except (TypeError, ValueError):
            raise InvalidInputError("Please enter a room number and type.")
        with self._transaction("add_room"):
            if self.db.query(Room).filter(Room.room_number == number).first():
                raise DuplicateRoomError(f"Room {number} already exists.")
            room = Room(room_number=number, type=room_type, status=RoomStatus.AVAILABLE)
            self.db.add(room)
        logger.info("Added room %s (%s)", room.room_number, room.type.value)
        return room

    def _move_room(self, room: Room, status: RoomStatus) -> None:
        if room.status == status:
            return
        if status not in ROOM_TRANSITIONS[RoomStatus(room.status)]:
            raise RoomStateError(
                f"Room {room.room_number} cannot go from {room.status.value} to {status.value}."
            )
        room.status = status

    def set_room_status(self, room_id: int, status) -> Room:
        try:
            status = RoomStatus(status)
        except ValueError:
            raise InvalidInputError("Unknown room status.")
        with self._transaction("set_room_status"):
            room = self.get_room(room_id)
            self._move_room(room, status)
        logger.info("Room %s is now %s", room.room_number, room.status.value)
        return room

    def confirm_cleaning(self, room_id: int, is_clean: bool) -> Room:
        if not is_clean:
            room = self.get_room(room_id)
            logger.info("Room %s still awaiting cleaning", room.room_number)
            return room
        return self.set_room_status(room_id, RoomStatus.AVAILABLE)

    def room_counts(self) -> dict[str, int]:
        counts = {s.value: 0 for s in RoomStatus}
        rows = self.db.query(Room.status, func.count(Room.id)).group_by(Room.status).all()
        for status, count in rows:
            counts[RoomStatus(status).value] = count
        return counts

    # ==== Bookings ====

    def get_booking(self, booking_id: int) -> Booking:
        booking = self.db.get(Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking not found.")
        return booking

    def list_active_bookings(self) -> list[Booking]:
        """Active bookings with their room; bookings whose room is gone are skipped."""
        bookings = (
            self.db.query(Booking)
            .options(selectinload(Booking.room))
            .filter(Booking.status == BookingStatus.ACTIVE)
            .order_by(Booking.check_in_date.asc())
            .all()
        )
        return [b for b in bookings if b.room is not None]

    def create_booking(
        self,
        room_id: int,
        *,
        customer_name: str,
        phone_number: str,
        persons=1,
        extra_beds=0,
        initial_payment=0,
        rent_per_day=0,
        id_proof_url: str | None = None,
        expected_check_out: datetime | None = None,
        now: datetime | None = None,
    ) -> Booking:
        customer_name = (customer_name or "").strip()
        phone_number = (phone_number or "").strip()
        if not customer_name:
            raise InvalidInputError("Customer name is required.")
        if not phone_number:
            raise InvalidInputError("Phone number is required.")
        try:
            persons = int(persons)
            extra_beds = int(extra_beds or 0)
            initial_payment = float(initial_payment or 0)
            rent_per_day = float(rent_per_day or 0)
        except (TypeError, ValueError):
            raise InvalidInputError("Please enter numeric guest and payment details.")
        if persons < 1:
            raise InvalidInputError("At least 1 person is required.")
        if extra_beds < 0:
            raise InvalidInputError("Extra beds cannot be negative.")
        if not (math.isfinite(initial_payment) and math.isfinite(rent_per_day)):
            raise InvalidInputError("Please enter valid payment amounts.")
        if initial_payment < 0 or rent_per_day < 0:
            raise InvalidInputError("Amounts cannot be negative.")

        now = now or self.clock()
        with self._transaction("create_booking"):
            room = self.get_room(room_id)
            if room.status != RoomStatus.AVAILABLE:
                raise RoomStateError(f"Room {room.room_number} is not available.")
            booking = Booking(
                room_id=room.id,
                customer_name=customer_name,
                phone_number=phone_number,
                persons=persons,
                extra_beds=extra_beds,
                id_proof_url=(id_proof_url or "").strip() or None,
                initial_payment=initial_payment,
                rent_per_day=rent_per_day,
                check_in_date=now,
                expected_check_out=expected_check_out or now + timedelta(days=settings.DEFAULT_STAY_DAYS),
                status=BookingStatus.ACTIVE,
            )
            self.db.add(booking)
            self.db.flush()
            self._move_room(room, RoomStatus.OCCUPIED)
            if initial_payment > 0:
                self.db.add(Payment(
                    booking_id=booking.id,
                    amount=initial_payment,
                    payment_date=now,
                    payment_type=PaymentType.CHECK_IN,
                ))
        logger.info("Checked in %s to room %s (booking %s)", customer_name, room.room_number, booking.id)
        return booking

    def change_rent(self, booking_id: int, new_rent) -> Booking:
        rent = positive_amount(new_rent, "rent amount")
        with self._transaction("change_rent"):
            booking = self.get_booking(booking_id)
            booking.rent_per_day = rent
        logger.info("Booking %s rent set to %.2f/day", booking_id, rent)
        return booking

    # ==== Payments ====

    def record_payment(self, booking_id: int, amount, payment_type=PaymentType.EXTENSION) -> Payment:
        amount = positive_amount(amount)
        try:
            payment_type = PaymentType(payment_type)
        except ValueError:
            raise InvalidInputError("Unknown payment type.")
        with self._transaction("record_payment"):
            self.get_booking(booking_id)
            payment = Payment(
                booking_id=booking_id,
                amount=amount,
                payment_date=self.clock(),
                payment_type=payment_type,
            )
            self.db.add(payment)
        logger.info("Recorded %s payment of %.2f on booking %s", payment_type.value, amount, booking_id)
        return payment

    def list_payments(self, booking_id: int) -> list[Payment]:
        return (
            self.db.query(Payment)
            .filter(Payment.booking_id == booking_id)
            .order_by(Payment.payment_date.desc(), Payment.id.desc())
            .all()
        )

    def list_payment_log(self) -> list[PaymentLogEntry]:
        payments = (
            self.db.query(Payment)
            .options(selectinload(Payment.booking).selectinload(Booking.room))
            .order_by(Payment.payment_date.desc(), Payment.id.desc())
            .all()
        )
        return [
            PaymentLogEntry(payment=p, room_number=p.booking.room.room_number, customer_name=p.booking.customer_name)
            for p in payments
            if p.booking is not None and p.booking.room is not None
        ]

    # ==== Inventory & purchases ====

    def list_inventory(self) -> list[InventoryItem]:
        return self.db.query(InventoryItem).order_by(InventoryItem.item_name.asc()).all()

    def add_inventory_item(self, item_name: str, quantity, price) -> InventoryItem:
        item_name = (item_name or "").strip()
        if not item_name:
            raise InvalidInputError("Item name is required.")
        try:
            quantity = int(quantity)
            price = float(price)
        except (TypeError, ValueError):
            raise InvalidInputError("Please enter a valid quantity and price.")
        if not math.isfinite(price):
            raise InvalidInputError("Please enter a valid quantity and price.")
        if quantity < 0 or price < 0:
            raise InvalidInputError("Quantity and price cannot be negative.")
        with self._transaction("add_inventory_item"):
            item = InventoryItem(item_name=item_name, quantity=quantity, price=price)
            self.db.add(item)
        logger.info("Added inventory item %s (qty %s @ %.2f)", item_name, quantity, price)
        return item

    def list_pending_purchases(self, booking_id: int) -> list[PendingPurchase]:
        purchases = (
            self.db.query(Purchase)
            .options(selectinload(Purchase.item))
            .filter(Purchase.booking_id == booking_id, Purchase.payment_status == PurchaseStatus.PENDING)
            .order_by(Purchase.purchase_date.asc())
            .all()
        )
        return [
            PendingPurchase(purchase=p, item_name=p.item.item_name if p.item else "Unknown Item")
            for p in purchases
        ]

    def record_purchase(self, booking_id: int, item_id: int, quantity, paid: bool = False) -> Purchase:
        return self.record_purchases(booking_id, {item_id: quantity}, paid=paid)[0]

    def record_purchases(self, booking_id: int, lines: dict, paid: bool = False) -> list[Purchase]:
        """
        Record a shop basket against a booking.

        Every line is checked against current stock before anything is written;
        one short line rejects the whole basket.
        """
        basket = {}
        for item_id, quantity in lines.items():
            try:
                quantity = int(quantity or 0)
                item_id = int(item_id)
            except (TypeError, ValueError):
                raise InvalidInputError("Please enter whole-number quantities.")
            if quantity < 0:
                raise InvalidInputError("Quantities cannot be negative.")
            if quantity:
                basket[item_id] = basket.get(item_id, 0) + quantity
        if not basket:
            raise InvalidInputError("Please select items to purchase.")

        status = PurchaseStatus.PAID if paid else PurchaseStatus.PENDING
        now = self.clock()
        purchases = []
        with self._transaction("record_purchases"):
            booking = self.get_booking(booking_id)
            if booking.status != BookingStatus.ACTIVE:
                raise RoomStateError("Purchases can only be added to an active booking.")
            items = {
                item.id: item
                for item in self.db.execute(
                    select(InventoryItem).where(InventoryItem.id.in_(list(basket))).with_for_update()
                ).scalars()
            }
            for item_id, quantity in basket.items():
                item = items.get(item_id)
                if item is None:
                    raise NotFoundError("Item not found.")
                if item.quantity < quantity:
                    raise InsufficientStockError(f"Insufficient quantity for {item.item_name}.")
            for item_id, quantity in basket.items():
                item = items[item_id]
                item.quantity = item.quantity - quantity
                purchase = Purchase(
                    booking_id=booking_id,
                    item_id=item.id,
                    quantity=quantity,
                    amount=float(item.price) * quantity,
                    purchase_date=now,
                    payment_status=status,
                )
                self.db.add(purchase)
                purchases.append(purchase)
            if paid:
                total = sum(float(p.amount) for p in purchases)
                if total > 0:
                    self.db.add(Payment(
                        booking_id=booking_id,
                        amount=total,
                        payment_date=now,
                        payment_type=PaymentType.PURCHASE,
                    ))
        logger.info(
            "Recorded %d purchase line(s) on booking %s (%s)", len(purchases), booking_id, status.value
        )
        return purchases

    # ==== Billing views ====

    def booked_rooms(self, now: datetime | None = None) -> list[BookedRoom]:
        now = now or self.clock()
        return [
            BookedRoom(
                booking=b,
                room=b.room,
                payments=self.list_payments(b.id),
                bill=bill_for_booking(b, now, DayRule.ELAPSED),
            )
            for b in self.list_active_bookings()
        ]

    def booking_bill(self, booking_id: int, now: datetime | None = None, rule: DayRule = DayRule.CALENDAR) -> BillSummary:
        booking = self.get_booking(booking_id)
        return bill_for_booking(booking, now or self.clock(), rule)

    def invoice(self, booking_id: int, now: datetime | None = None) -> Invoice:
        """
        The checkout bill with its itemised pending purchases.

        Only open stays are invoiced: checkout settles the purchases and books
        the balance as a payment, after which the lines no longer add up.
        """
        booking = self.get_booking(booking_id)
        if booking.status != BookingStatus.ACTIVE:
            raise RoomStateError("Invoices are issued before checkout.")
        return Invoice(
            booking=booking,
            bill=bill_for_booking(booking, now or self.clock(), DayRule.CALENDAR),
            pending_purchases=self.list_pending_purchases(booking_id),
        )

    def checkout(self, booking_id: int, now: datetime | None = None) -> CheckoutResult:
        now = now or self.clock()
        final_payment = None
        with self._transaction("checkout"):
            booking = self.get_booking(booking_id)
            if booking.status != BookingStatus.ACTIVE:
                raise RoomStateError("Only active bookings can be checked out.")
            if booking.room is None:
                raise NotFoundError("Room not found.")
            bill = bill_for_booking(booking, now, DayRule.CALENDAR)
            if bill.amount_due > 0:
                final_payment = Payment(
                    booking_id=booking.id,
                    amount=bill.amount_due,
                    payment_date=now,
                    payment_type=PaymentType.EXTENSION,
                )
                self.db.add(final_payment)
            booking.status = BookingStatus.COMPLETED
            booking.actual_check_out = now
            self._move_room(booking.room, RoomStatus.CLEANING)
            (
                self.db.query(Purchase)
                .filter(Purchase.booking_id == booking.id, Purchase.payment_status == PurchaseStatus.PENDING)
                .update({Purchase.payment_status: PurchaseStatus.PAID}, synchronize_session="fetch")
            )
        logger.info(
            "Checked out booking %s from room %s, collected %.2f",
            booking.id, booking.room.room_number, bill.amount_due,
        )
        return CheckoutResult(booking=booking, bill=bill, final_payment=final_payment)


def get_store(db: Session = Depends(get_db)) -> FrontDeskStore:
    return FrontDeskStore(db)
