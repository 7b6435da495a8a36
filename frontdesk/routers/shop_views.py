from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from ..exceptions import FrontDeskError
from ..models import User, PurchaseStatus
from ..security import require_user
from ..services.store import FrontDeskStore, get_store
from ..templating import templates, redirect_with

router = APIRouter(prefix="/app/shop", tags=["shop"])

QTY_PREFIX = "qty_"

@router.get("/", response_class=HTMLResponse)
def shop_index(request: Request, user: User = Depends(require_user), store: FrontDeskStore = Depends(get_store)):
    return templates.TemplateResponse(
        "shop/index.html",
        {
            "request": request,
            "user": user,
            "inventory": store.list_inventory(),
            "active": store.list_active_bookings(),
        },
    )

@router.post("/items")
def shop_add_item(user: User = Depends(require_user), store: FrontDeskStore = Depends(get_store), item_name: str = Form(""), quantity: str = Form(""), price: str = Form("")):
    try:
        item = store.add_inventory_item(item_name, quantity, price)
    except FrontDeskError as e:
        return redirect_with("/app/shop/", error=e.detail)
    return redirect_with("/app/shop/", msg=f"{item.item_name} added successfully.")

@router.post("/purchase")
async def shop_purchase(request: Request, user: User = Depends(require_user), store: FrontDeskStore = Depends(get_store)):
    form = await request.form()
    booking_id = str(form.get("booking_id") or "")
    if not booking_id.isdigit():
        return redirect_with("/app/shop/", error="Please select a room.")
    lines = {
        key[len(QTY_PREFIX):]: (value or "0")
        for key, value in form.items()
        if key.startswith(QTY_PREFIX)
    }
    paid = form.get("payment_status", PurchaseStatus.PENDING.value) == PurchaseStatus.PAID.value
    try:
        store.record_purchases(int(booking_id), lines, paid=paid)
    except FrontDeskError as e:
        return redirect_with("/app/shop/", error=e.detail)
    return redirect_with("/app/shop/", msg="Purchase recorded successfully.")
