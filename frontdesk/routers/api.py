from datetime import datetime
from typing import Optional, List
from fastapi import APIRouter, Depends, Request, Response, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import User, RoomType, RoomStatus, BookingStatus, PaymentType, PurchaseStatus
from ..security import authenticate, set_session, clear_session, require_api_user
from ..services.billing import DayRule
from ..services.store import FrontDeskStore, get_store
from ..limiter import limiter
from ..config import settings

router = APIRouter(prefix="/api/v1", tags=["api"])

# ==== Schemas ====

class UserOut(BaseModel):
    id: int
    email: str
    role: str

    class Config:
        from_attributes = True

class RoomOut(BaseModel):
    id: int
    room_number: int
    type: RoomType
    status: RoomStatus

    class Config:
        use_enum_values = True
        from_attributes = True

class PaymentOut(BaseModel):
    id: int
    booking_id: int
    amount: float
    payment_date: datetime
    payment_type: PaymentType

    class Config:
        use_enum_values = True
        from_attributes = True

class PurchaseOut(BaseModel):
    id: int
    booking_id: int
    item_id: Optional[int] = None
    item_name: Optional[str] = None
    quantity: int
    amount: float
    purchase_date: datetime
    payment_status: PurchaseStatus

    class Config:
        use_enum_values = True
        from_attributes = True

class InventoryItemOut(BaseModel):
    id: int
    item_name: str
    quantity: int
    price: float

    class Config:
        from_attributes = True

class BillOut(BaseModel):
    rule: DayRule
    days_stayed: int
    rent_per_day: float
    total_rent: float
    initial_payment: float
    payments_credited: float
    total_purchases: float
    amount_due: float

    class Config:
        use_enum_values = True
        from_attributes = True

class BookingOut(BaseModel):
    id: int
    room_id: Optional[int] = None
    customer_name: str
    phone_number: str
    persons: int
    extra_beds: int
    id_proof_url: Optional[str] = None
    initial_payment: float
    rent_per_day: Optional[float] = None
    check_in_date: datetime
    expected_check_out: datetime
    actual_check_out: Optional[datetime] = None
    status: BookingStatus

    class Config:
        use_enum_values = True
        from_attributes = True

class BookedRoomOut(BaseModel):
    booking: BookingOut
    room: RoomOut
    payments: List[PaymentOut]
    bill: BillOut

class CheckoutOut(BaseModel):
    booking: BookingOut
    bill: BillOut
    final_payment: Optional[PaymentOut] = None

class PaymentLogOut(BaseModel):
    payment: PaymentOut
    room_number: int
    customer_name: str

    class Config:
        from_attributes = True

class LoginIn(BaseModel):
    email: str
    password: str

class RoomCreateIn(BaseModel):
    room_number: int
    type: RoomType = Field(default=RoomType.AC)

class CleaningIn(BaseModel):
    is_clean: bool

class CheckInIn(BaseModel):
    room_id: int
    customer_name: str
    phone_number: str
    persons: int = 1
    extra_beds: int = 0
    initial_payment: float = 0
    rent_per_day: float = 0
    id_proof_url: Optional[str] = None
    expected_check_out: Optional[datetime] = None

class PaymentIn(BaseModel):
    amount: float

class RentIn(BaseModel):
    rent_per_day: float

class PurchaseIn(BaseModel):
    item_id: int
    quantity: int
    paid: bool = False

class InventoryItemIn(BaseModel):
    item_name: str
    quantity: int = 0
    price: float = 0

# ==== Auth ====

@router.post("/auth/login", response_model=UserOut)
@limiter.limit(settings.RATE_LIMIT_AUTH_API)
def api_login(request: Request, payload: LoginIn, response: Response, db: Session = Depends(get_db)):
    user = authenticate(db, payload.email, payload.password)
    if not user:
        raise HTTPException(status_code=400, detail="Invalid email or password")
    set_session(response, user.id)
    return user

@router.post("/auth/logout")
def api_logout(response: Response):
    clear_session(response)
    return {"ok": True}

@router.get("/auth/me", response_model=UserOut)
def api_me(user: User = Depends(require_api_user)):
    return user

# ==== Rooms ====

@router.get("/rooms", response_model=List[RoomOut])
def api_rooms(user: User = Depends(require_api_user), store: FrontDeskStore = Depends(get_store)):
    return store.list_rooms()

@router.post("/rooms", response_model=RoomOut, status_code=201)
def api_add_room(payload: RoomCreateIn, user: User = Depends(require_api_user), store: FrontDeskStore = Depends(get_store)):
    return store.add_room(payload.room_number, payload.type)

@router.post("/rooms/{room_id}/cleaning", response_model=RoomOut)
def api_confirm_cleaning(room_id: int, payload: CleaningIn, user: User = Depends(require_api_user), store: FrontDeskStore = Depends(get_store)):
    return store.confirm_cleaning(room_id, payload.is_clean)

# ==== Bookings ====

@router.get("/bookings", response_model=List[BookedRoomOut])
def api_booked_rooms(user: User = Depends(require_api_user), store: FrontDeskStore = Depends(get_store)):
    return [
        {"booking": b.booking, "room": b.room, "payments": b.payments, "bill": b.bill}
        for b in store.booked_rooms()
    ]

@router.post("/bookings", response_model=BookingOut, status_code=201)
def api_check_in(payload: CheckInIn, user: User = Depends(require_api_user), store: FrontDeskStore = Depends(get_store)):
    return store.create_booking(
        payload.room_id,
        customer_name=payload.customer_name,
        phone_number=payload.phone_number,
        persons=payload.persons,
        extra_beds=payload.extra_beds,
        initial_payment=payload.initial_payment,
        rent_per_day=payload.rent_per_day,
        id_proof_url=payload.id_proof_url,
        expected_check_out=payload.expected_check_out,
    )

@router.get("/bookings/{booking_id}/payments", response_model=List[PaymentOut])
def api_booking_payments(booking_id: int, user: User = Depends(require_api_user), store: FrontDeskStore = Depends(get_store)):
    store.get_booking(booking_id)
    return store.list_payments(booking_id)

@router.post("/bookings/{booking_id}/payments", response_model=PaymentOut, status_code=201)
def api_record_payment(booking_id: int, payload: PaymentIn, user: User = Depends(require_api_user), store: FrontDeskStore = Depends(get_store)):
    return store.record_payment(booking_id, payload.amount)

@router.patch("/bookings/{booking_id}/rent", response_model=BookingOut)
def api_change_rent(booking_id: int, payload: RentIn, user: User = Depends(require_api_user), store: FrontDeskStore = Depends(get_store)):
    return store.change_rent(booking_id, payload.rent_per_day)

@router.get("/bookings/{booking_id}/purchases", response_model=List[PurchaseOut])
def api_pending_purchases(booking_id: int, user: User = Depends(require_api_user), store: FrontDeskStore = Depends(get_store)):
    store.get_booking(booking_id)
    return [
        PurchaseOut.model_validate(p.purchase).model_copy(update={"item_name": p.item_name})
        for p in store.list_pending_purchases(booking_id)
    ]

@router.post("/bookings/{booking_id}/purchases", response_model=PurchaseOut, status_code=201)
def api_record_purchase(booking_id: int, payload: PurchaseIn, user: User = Depends(require_api_user), store: FrontDeskStore = Depends(get_store)):
    purchase = store.record_purchase(booking_id, payload.item_id, payload.quantity, paid=payload.paid)
    return PurchaseOut.model_validate(purchase).model_copy(update={"item_name": purchase.item.item_name if purchase.item else None})

@router.get("/bookings/{booking_id}/checkout", response_model=BillOut)
def api_checkout_preview(booking_id: int, user: User = Depends(require_api_user), store: FrontDeskStore = Depends(get_store)):
    return store.booking_bill(booking_id, rule=DayRule.CALENDAR)

@router.post("/bookings/{booking_id}/checkout", response_model=CheckoutOut)
def api_checkout(booking_id: int, user: User = Depends(require_api_user), store: FrontDeskStore = Depends(get_store)):
    result = store.checkout(booking_id)
    return {"booking": result.booking, "bill": result.bill, "final_payment": result.final_payment}

# ==== Inventory & payment log ====

@router.get("/inventory", response_model=List[InventoryItemOut])
def api_inventory(user: User = Depends(require_api_user), store: FrontDeskStore = Depends(get_store)):
    return store.list_inventory()

@router.post("/inventory", response_model=InventoryItemOut, status_code=201)
def api_add_inventory_item(payload: InventoryItemIn, user: User = Depends(require_api_user), store: FrontDeskStore = Depends(get_store)):
    return store.add_inventory_item(payload.item_name, payload.quantity, payload.price)

@router.get("/payments", response_model=List[PaymentLogOut])
def api_payment_log(user: User = Depends(require_api_user), store: FrontDeskStore = Depends(get_store)):
    return [
        {"payment": e.payment, "room_number": e.room_number, "customer_name": e.customer_name}
        for e in store.list_payment_log()
    ]
