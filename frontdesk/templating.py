from pathlib import Path
from urllib.parse import urlencode

from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from .config import settings
from .services.currency import format_money

def money_filter(amount) -> str:
    """A Jinja2 filter rendering an amount in the configured currency."""
    return format_money(amount, settings.CURRENCY)

def label_filter(value) -> str:
    """check_in -> Check In, non-ac -> Non-Ac style labels for enum values."""
    raw = getattr(value, "value", value) or ""
    return str(raw).replace("_", " ").title()

# Create a single, shared Jinja2Templates instance
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
templates.env.filters["money"] = money_filter
templates.env.filters["label"] = label_filter
templates.env.globals["app_name"] = settings.APP_NAME


def redirect_with(url: str, msg: str | None = None, error: str | None = None) -> RedirectResponse:
    """Redirect after a form post, carrying a one-shot message for the next page."""
    params = {k: v for k, v in (("msg", msg), ("error", error)) if v}
    if params:
        url = f"{url}{'&' if '?' in url else '?'}{urlencode(params)}"
    return RedirectResponse(url=url, status_code=303)
