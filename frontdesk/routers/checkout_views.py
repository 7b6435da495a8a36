from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response
from ..config import settings
from ..exceptions import FrontDeskError
from ..models import User
from ..security import require_user
from ..services.billing import DayRule
from ..services.reporting import generate_invoice_pdf
from ..services.store import FrontDeskStore, get_store
from ..templating import templates, redirect_with

router = APIRouter(prefix="/app/checkout", tags=["checkout"])

@router.get("/", response_class=HTMLResponse)
def checkout_index(request: Request, booking_id: int | None = None, user: User = Depends(require_user), store: FrontDeskStore = Depends(get_store)):
    active = store.list_active_bookings()
    selected = next((b for b in active if b.id == booking_id), None)
    bill = None
    pending = []
    if selected:
        bill = store.booking_bill(selected.id, rule=DayRule.CALENDAR)
        pending = store.list_pending_purchases(selected.id)
    return templates.TemplateResponse(
        "checkout/index.html",
        {
            "request": request,
            "user": user,
            "active": active,
            "selected": selected,
            "bill": bill,
            "pending": pending,
        },
    )

@router.post("/{booking_id}")
def checkout_submit(booking_id: int, user: User = Depends(require_user), store: FrontDeskStore = Depends(get_store)):
    try:
        result = store.checkout(booking_id)
    except FrontDeskError as e:
        return redirect_with(f"/app/checkout/?booking_id={booking_id}", error=e.detail)
    return redirect_with(
        "/app/checkout/",
        msg=f"Checkout completed successfully for Room {result.booking.room.room_number}.",
    )

@router.get("/{booking_id}/invoice.pdf")
def checkout_invoice(booking_id: int, user: User = Depends(require_user), store: FrontDeskStore = Depends(get_store)):
    try:
        invoice = store.invoice(booking_id)
    except FrontDeskError as e:
        return redirect_with("/app/checkout/", error=e.detail)
    pdf = generate_invoice_pdf(
        invoice.booking,
        invoice.bill,
        invoice.pending_purchases,
        hotel_name=settings.APP_NAME,
        currency_symbol=f"{settings.CURRENCY} ",
        issued_at=store.clock(),
    )
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="invoice-{booking_id}.pdf"'},
    )
