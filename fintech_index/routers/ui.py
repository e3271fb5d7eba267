# fintech_index/routers/ui.py
from datetime import date
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, HTTPException, Request, UploadFile, File as FastAPIFile
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from fintech_index import analytics, config, crud, geo
from fintech_index.db import get_db
from fintech_index.ingest import UploadError, parse_upload
from fintech_index.models.user import Role
from fintech_index.scoring import NO_DATA_COLOR, ScoreBand, score_color
from fintech_index.security import (
    SESSION_USER_KEY,
    TokenClaims,
    authenticate,
    create_access_token,
    get_session_user,
)

router = APIRouter(tags=["Dashboard"])

SELECTED_YEAR_KEY = "selected_year"

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["score_color"] = score_color


def _admin_or_none(request: Request) -> Optional[TokenClaims]:
    user = get_session_user(request)
    if user is None or user.role != Role.ADMIN:
        return None
    return user


def _back_to_data(msg: str) -> RedirectResponse:
    return RedirectResponse(url="/ui/data?" + urlencode({"msg": msg}), status_code=303)


# -----------------------------
#   LOGIN
# -----------------------------
@router.get("/ui/login", name="login_ui")
def login_ui(request: Request):
    # Si ya está logueado → mandar al dashboard
    if get_session_user(request):
        return RedirectResponse(url="/ui/dashboard", status_code=303)
    return templates.TemplateResponse(request, "login.html", {"error": None})


@router.post("/ui/login")
def login_submit(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    try:
        user = authenticate(db, email, password)
    except HTTPException as e:
        return templates.TemplateResponse(
            request,
            "login.html",
            {"error": e.detail, "email": email},
            status_code=400,
        )

    claims = TokenClaims(id=user.id, role=Role(user.role), email=user.email)
    request.session[SESSION_USER_KEY] = claims.to_session()
    request.session["token"] = create_access_token(user)
    return RedirectResponse(url="/ui/dashboard", status_code=303)


@router.get("/logout", name="logout")
def logout(request: Request):
    request.session.clear()
    return RedirectResponse(url="/ui/login", status_code=303)


# -----------------------------
#   DASHBOARD
# -----------------------------
@router.get("/ui/dashboard", name="dashboard_ui")
def dashboard_ui(
    request: Request,
    year: Optional[int] = None,
    db: Session = Depends(get_db),
):
    # sin límite: tendencias y variación anual necesitan todos los años
    records = crud.all_records(db)
    years = analytics.available_years(records)
    if year not in years:
        year = years[0] if years else date.today().year
    request.session[SELECTED_YEAR_KEY] = year

    current = sorted(
        analytics.records_for_year(records, year),
        key=lambda r: r.final_score,
        reverse=True,
    )
    boundaries = geo.load_boundaries_or_fallback(config.GEOJSON_SOURCE)

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "user": get_session_user(request),
            "years": years,
            "selected_year": year,
            "stats": analytics.dashboard_stats(records, year),
            "sub_components": analytics.sub_components(records, year),
            "trends": analytics.yearly_trends(records),
            "countries": current,
            "shapes": geo.build_map(boundaries, current),
            "simplified_map": boundaries.fallback,
            "bands": list(ScoreBand),
            "no_data_color": NO_DATA_COLOR,
        },
    )


# -----------------------------
#   GESTIÓN DE DATOS (admin)
# -----------------------------
def _default_year(request: Request, db: Session) -> int:
    # el año elegido en el dashboard, si no el último con datos
    year = request.session.get(SELECTED_YEAR_KEY)
    if isinstance(year, int):
        return year
    years = crud.distinct_years(db)
    return years[0] if years else date.today().year


def _render_data(request: Request, db: Session, user: TokenClaims, **extra):
    status_code = extra.pop("status_code", 200)
    context = {
        "user": user,
        "stats": crud.stats(db),
        "countries": crud.distinct_countries(db),
        "default_year": _default_year(request, db),
        "message": request.query_params.get("msg"),
        "errors": [],
    }
    context.update(extra)
    return templates.TemplateResponse(request, "data.html", context, status_code=status_code)


@router.get("/ui/data", name="data_ui")
def data_ui(request: Request, db: Session = Depends(get_db)):
    user = _admin_or_none(request)
    if user is None:
        return RedirectResponse(url="/ui/login", status_code=303)
    return _render_data(request, db, user)


@router.post("/ui/data/upload")
async def upload_data(
    request: Request,
    year: int = Form(...),
    overwrite: bool = Form(False),
    uploaded_file: UploadFile = FastAPIFile(...),
    db: Session = Depends(get_db),
):
    user = _admin_or_none(request)
    if user is None:
        return RedirectResponse(url="/ui/login", status_code=303)

    content = await uploaded_file.read()
    try:
        result = parse_upload(uploaded_file.filename or "", content, default_year=year)
    except UploadError as e:
        return _render_data(request, db, user, errors=[str(e)], status_code=400)

    if not result.is_valid:
        return _render_data(request, db, user, errors=result.errors, status_code=400)

    if overwrite:
        crud.delete_all(db)
    inserted, skipped = crud.insert_many(db, result.records, user.email)

    msg = (
        f"Imported {inserted} records ({skipped} skipped) for years "
        f"{', '.join(str(y) for y in result.years)}; "
        f"{result.total_fintech_companies} fintech companies"
    )
    return _back_to_data(msg)


@router.post("/ui/data/delete-year")
def delete_year_ui(request: Request, year: int = Form(...), db: Session = Depends(get_db)):
    user = _admin_or_none(request)
    if user is None:
        return RedirectResponse(url="/ui/login", status_code=303)
    deleted = crud.delete_by_year(db, year)
    return _back_to_data(f"Deleted {deleted} records for year {year}")


@router.post("/ui/data/delete-country")
def delete_country_ui(request: Request, country: str = Form(...), db: Session = Depends(get_db)):
    user = _admin_or_none(request)
    if user is None:
        return RedirectResponse(url="/ui/login", status_code=303)
    deleted = crud.delete_by_country(db, country)
    return _back_to_data(f"Deleted {deleted} records for {country}")


@router.post("/ui/data/delete-all")
def delete_all_ui(request: Request, db: Session = Depends(get_db)):
    user = _admin_or_none(request)
    if user is None:
        return RedirectResponse(url="/ui/login", status_code=303)
    deleted = crud.delete_all(db)
    return _back_to_data(f"Deleted all {deleted} records")
