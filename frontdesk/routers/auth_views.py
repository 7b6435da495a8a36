import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from ..db import get_db
from ..security import authenticate, set_session, clear_session, get_current_user_id
from ..config import settings
from ..limiter import limiter
from ..templating import templates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

@router.get("/login", response_class=HTMLResponse)
def login_form(request: Request):
    if get_current_user_id(request):
        return RedirectResponse(url="/app", status_code=303)
    error = request.query_params.get("error")
    msg = request.query_params.get("msg")
    return templates.TemplateResponse("auth/login.html", {"request": request, "error": error, "msg": msg})

@router.post("/login")
@limiter.limit(settings.RATE_LIMIT_AUTH)
def login(request: Request, email: str = Form(...), password: str = Form(...), db: Session = Depends(get_db)):
    user = authenticate(db, email, password)
    if not user:
        logger.warning("Failed login for %s", email)
        return templates.TemplateResponse(
            "auth/login.html",
            {"request": request, "error": "Invalid email or password."},
            status_code=400,
        )

    logger.info("User %s signed in", user.email)
    redirect = RedirectResponse(url="/app", status_code=303)
    set_session(redirect, user.id)
    return redirect

@router.post("/logout")
def logout():
    redirect = RedirectResponse(url="/auth/login?msg=You+have+been+logged+out.", status_code=303)
    clear_session(redirect)
    return redirect
