from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from ..exceptions import FrontDeskError
from ..models import User
from ..security import require_user
from ..services.store import FrontDeskStore, get_store
from ..templating import templates, redirect_with

router = APIRouter(prefix="/app/booked", tags=["booked"])

@router.get("/", response_class=HTMLResponse)
def booked_index(request: Request, user: User = Depends(require_user), store: FrontDeskStore = Depends(get_store)):
    booked = store.booked_rooms()
    return templates.TemplateResponse("booked/index.html", {"request": request, "user": user, "booked": booked})

@router.post("/{booking_id}/payment")
def booked_payment(booking_id: int, user: User = Depends(require_user), store: FrontDeskStore = Depends(get_store), amount: str = Form("")):
    try:
        store.record_payment(booking_id, amount)
    except FrontDeskError as e:
        return redirect_with("/app/booked/", error=e.detail)
    return redirect_with("/app/booked/", msg="Payment recorded successfully.")

@router.post("/{booking_id}/rent")
def booked_rent(booking_id: int, user: User = Depends(require_user), store: FrontDeskStore = Depends(get_store), rent_per_day: str = Form("")):
    try:
        store.change_rent(booking_id, rent_per_day)
    except FrontDeskError as e:
        return redirect_with("/app/booked/", error=e.detail)
    return redirect_with("/app/booked/", msg="Rent updated successfully.")
