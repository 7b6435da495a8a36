from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ..models import User
from ..security import require_user
from ..services.store import FrontDeskStore, get_store
from ..templating import templates

router = APIRouter(tags=["app"])

@router.get("/", include_in_schema=False)
def index():
    return RedirectResponse(url="/app", status_code=303)

@router.get("/app", response_class=HTMLResponse)
def dashboard(request: Request, user: User = Depends(require_user), store: FrontDeskStore = Depends(get_store)):
    counts = store.room_counts()
    active = store.list_active_bookings()
    return templates.TemplateResponse(
        "dashboard.html",
        {
            "request": request,
            "user": user,
            "counts": counts,
            "rooms_count": sum(counts.values()),
            "active_count": len(active),
        },
    )
