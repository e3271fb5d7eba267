# fintech_index/routers/startups.py
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from fintech_index.db import get_db
from fintech_index.models.startup import Startup
from fintech_index.models.user import Role
from fintech_index.schemas import StartupIn, StartupOut
from fintech_index.security import TokenClaims, require_any_role

router = APIRouter(prefix="/api/startups", tags=["Startups"])


@router.get("", response_model=list[StartupOut])
def list_startups(
    country: Optional[str] = None,
    sector: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    q = db.query(Startup)
    if country:
        q = q.filter(func.lower(Startup.country) == country.strip().lower())
    if sector:
        q = q.filter(func.lower(Startup.sector) == sector.strip().lower())
    if search:
        needle = search.strip().lower()
        q = q.filter(or_(
            func.lower(Startup.name).contains(needle, autoescape=True),
            func.lower(Startup.description).contains(needle, autoescape=True),
        ))
    return q.order_by(Startup.added_at.desc(), Startup.id.desc()).all()


@router.post("", response_model=StartupOut, status_code=status.HTTP_201_CREATED)
def create_startup(
    payload: StartupIn,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_any_role(Role.ADMIN, Role.EDITOR)),
):
    s = Startup(
        name=payload.name.strip(),
        country=payload.country.strip(),
        sector=payload.sector.strip(),
        founded_year=payload.founded_year,
        description=(payload.description or "").strip() or None,
        website=(payload.website or "").strip() or None,
        added_by=current_user.email,
    )
    db.add(s)
    db.commit()
    db.refresh(s)
    return s
