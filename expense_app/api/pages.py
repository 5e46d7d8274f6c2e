"""Server-rendered authentication pages"""
from pathlib import Path
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from expense_app.config import settings
from expense_app.database import get_db
from expense_app.dependencies import SESSION_COOKIE, get_user_from_token
from expense_app.models.platform import COUNTRIES, enabled_platforms, platform_for_country
from expense_app.schemas.auth import PASSWORD_HINT

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

router = APIRouter(prefix="/auth", tags=["pages"], include_in_schema=False)


def _has_session(request: Request, db: Session) -> bool:
    return get_user_from_token(db, request.cookies.get(SESSION_COOKIE)) is not None


def country_options():
    """Registration countries, disabled where the platform is not enabled"""
    enabled = enabled_platforms()
    return [
        {"code": code, "name": name, "disabled": not enabled[platform_for_country(code)]}
        for code, name in COUNTRIES.items()
    ]


@router.get("/register", response_class=HTMLResponse)
def register_page(request: Request, db: Session = Depends(get_db)):
    if _has_session(request, db):
        return RedirectResponse("/", status_code=302)

    return templates.TemplateResponse(
        request,
        "auth/register.html",
        {
            "demo_mode": settings.DEMO_MODE,
            "countries": country_options(),
            "default_country": "US",
            "password_hint": PASSWORD_HINT,
        },
    )


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, db: Session = Depends(get_db)):
    if _has_session(request, db):
        return RedirectResponse("/", status_code=302)

    return templates.TemplateResponse(request, "auth/login.html", {})
