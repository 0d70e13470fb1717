from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.models.constants import CURRENCY_NAMES

router = APIRouter(tags=["ui"])

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


def _currency_options(codes):
    return [{"code": c, "name": CURRENCY_NAMES.get(c, c)} for c in codes]


@router.get("/", response_class=HTMLResponse)
async def ui_home(request: Request):
    settings = request.app.state.settings
    currencies = _currency_options(settings.supported_currencies)
    # Default pair: base -> first non-base currency
    default_to = next(
        (c["code"] for c in currencies if c["code"] != settings.base_currency),
        settings.base_currency,
    )
    context = {
        "app_name": settings.app_name,
        "version": settings.version,
        "currencies": currencies,
        "default_from": settings.base_currency,
        "default_to": default_to,
    }
    return templates.TemplateResponse(request, "index.html", context)
