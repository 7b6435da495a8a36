from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from ..exceptions import FrontDeskError
from ..models import User, RoomStatus
from ..security import require_user
from ..services.store import FrontDeskStore, get_store
from ..templating import templates, redirect_with

router = APIRouter(prefix="/app/checkin", tags=["checkin"])

@router.get("/{room_id}", response_class=HTMLResponse)
def checkin_form(request: Request, room_id: int, user: User = Depends(require_user), store: FrontDeskStore = Depends(get_store)):
    try:
        room = store.get_room(room_id)
    except FrontDeskError as e:
        return redirect_with("/app/rooms/", error=e.detail)
    if room.status != RoomStatus.AVAILABLE:
        return redirect_with("/app/rooms/", error=f"Room {room.room_number} is not available.")
    return templates.TemplateResponse("checkin/form.html", {"request": request, "user": user, "room": room})

@router.post("/{room_id}")
def checkin_submit(
    room_id: int,
    user: User = Depends(require_user),
    store: FrontDeskStore = Depends(get_store),
    customer_name: str = Form(""),
    phone_number: str = Form(""),
    persons: str = Form("1"),
    extra_beds: str = Form("0"),
    initial_payment: str = Form("0"),
    rent_per_day: str = Form("0"),
    id_proof_url: str = Form(""),
):
    try:
        booking = store.create_booking(
            room_id,
            customer_name=customer_name,
            phone_number=phone_number,
            persons=persons,
            extra_beds=extra_beds or 0,
            initial_payment=initial_payment or 0,
            rent_per_day=rent_per_day or 0,
            id_proof_url=id_proof_url,
        )
    except FrontDeskError as e:
        return redirect_with(f"/app/checkin/{room_id}", error=e.detail)
    return redirect_with("/app/rooms/", msg=f"Check-in successful for {booking.customer_name}!")
