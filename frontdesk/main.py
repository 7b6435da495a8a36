import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import settings
from .db import SessionLocal, init_db
from .exceptions import FrontDeskError
from .limiter import limiter
from .models import User, UserRole
from .routers import auth_views, app_views, rooms_views, checkin_views, booked_views
from .routers import checkout_views, shop_views, payments_views, api
from .security import hash_password

# --- Logging configuration ---
_level = logging.DEBUG if getattr(settings, "DEBUG", False) else logging.INFO
logging.basicConfig(
    level=_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
# Align uvicorn loggers with our level (useful under Docker Compose)
for _name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    logging.getLogger(_name).setLevel(_level)
logger = logging.getLogger("frontdesk.startup")
logger.info("Starting %s (DEBUG=%s)", settings.APP_NAME, getattr(settings, "DEBUG", False))

app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    description=(
        f"{settings.APP_NAME}: hotel front desk for room status, check-in/checkout, "
        "shop purchases and payment logs.\n\n"
        "The 'api' tag lists the JSON endpoints under /api/v1."
    ),
)


def ensure_default_admin():
    db = SessionLocal()
    try:
        if db.query(User).filter(User.role == UserRole.ADMIN.value).first():
            return
        email = settings.ADMIN_EMAIL.strip().lower()
        user = db.query(User).filter(User.email == email).first()
        if user:
            user.role = UserRole.ADMIN.value
        else:
            user = User(email=email, hashed_password=hash_password(settings.ADMIN_PASSWORD), role=UserRole.ADMIN.value)
            db.add(user)
        db.commit()
        logger.info("Default admin user ensured.")
    finally:
        db.close()


@app.on_event("startup")
def startup_event():
    """Creates missing tables and makes sure someone can sign in."""
    logger.info("Running startup tasks...")
    init_db()
    ensure_default_admin()
    logger.info("Startup tasks complete.")


@app.exception_handler(FrontDeskError)
async def front_desk_error_handler(request: Request, exc: FrontDeskError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# Add the limiter to the app state
app.state.limiter = limiter
# Add the exception handler for rate limit exceeded errors
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.include_router(auth_views.router)
app.include_router(app_views.router)
app.include_router(rooms_views.router)
app.include_router(checkin_views.router)
app.include_router(booked_views.router)
app.include_router(checkout_views.router)
app.include_router(shop_views.router)
app.include_router(payments_views.router)
app.include_router(api.router)

@app.get("/healthz")
@limiter.exempt
def healthz():
    return {"status": "ok"}
