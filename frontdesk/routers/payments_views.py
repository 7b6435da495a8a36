from datetime import date

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response
from ..models import User
from ..security import require_user
from ..services.reporting import generate_payments_csv
from ..services.store import FrontDeskStore, get_store
from ..templating import templates

router = APIRouter(prefix="/app/payments", tags=["payments"])

@router.get("/", response_class=HTMLResponse)
def payments_index(request: Request, user: User = Depends(require_user), store: FrontDeskStore = Depends(get_store)):
    entries = store.list_payment_log()
    total = sum(float(e.payment.amount) for e in entries)
    return templates.TemplateResponse("payments/index.html", {"request": request, "user": user, "entries": entries, "total": total})

@router.get("/export.csv")
def payments_export(user: User = Depends(require_user), store: FrontDeskStore = Depends(get_store)):
    csv_data = generate_payments_csv(store.list_payment_log())
    return Response(
        content=csv_data,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="payments-{date.today().isoformat()}.csv"'},
    )
