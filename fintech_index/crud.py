# fintech_index/crud.py
"""
Consultas sobre CountryData compartidas por la API y el dashboard.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from pydantic import ValidationError
from sqlalchemy import distinct, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fintech_index.models.country_data import CountryData
from fintech_index.schemas import CountryDataIn
from fintech_index.scoring import compute_final_score

log = logging.getLogger(__name__)

MAX_LIST_LIMIT = 1000

SORT_OPTIONS = {
    "score": (CountryData.final_score.desc(), CountryData.year.desc()),
    "name": (CountryData.name.asc(), CountryData.year.desc()),
}
DEFAULT_SORT = (CountryData.year.desc(), CountryData.name.asc())


def _country_filter(country: str):
    # subcadena literal, no regex: el texto del usuario nunca se interpreta como patrón
    needle = country.strip().lower()
    return or_(
        func.lower(CountryData.name).contains(needle, autoescape=True),
        func.lower(CountryData.country_code).contains(needle, autoescape=True),
    )


def list_records(
    db: Session,
    year: Optional[int] = None,
    country: Optional[str] = None,
    sort: Optional[str] = None,
    limit: Optional[int] = None,
) -> list[CountryData]:
    q = db.query(CountryData)
    if year is not None:
        q = q.filter(CountryData.year == year)
    if country:
        q = q.filter(_country_filter(country))

    limit = MAX_LIST_LIMIT if not limit or limit < 1 else min(limit, MAX_LIST_LIMIT)
    return q.order_by(*SORT_OPTIONS.get(sort or "", DEFAULT_SORT)).limit(limit).all()


def all_records(db: Session) -> list[CountryData]:
    """Todos los registros, sin el límite del listado: para los agregados del dashboard."""
    return db.query(CountryData).order_by(*DEFAULT_SORT).all()


def get_record(db: Session, country_code: str, year: int) -> Optional[CountryData]:
    return (
        db.query(CountryData)
        .filter(CountryData.country_code == country_code, CountryData.year == year)
        .first()
    )


def stats(db: Session) -> dict:
    total, unique_countries, avg_score, min_score, max_score = db.query(
        func.count(CountryData.id),
        func.count(distinct(CountryData.country_code)),
        func.avg(CountryData.final_score),
        func.min(CountryData.final_score),
        func.max(CountryData.final_score),
    ).one()
    return {
        "total_records": total or 0,
        "unique_countries": unique_countries or 0,
        "years": distinct_years(db),
        "average_score": round(float(avg_score), 2) if avg_score is not None else None,
        "min_score": min_score,
        "max_score": max_score,
    }


def distinct_years(db: Session) -> list[int]:
    rows = db.query(distinct(CountryData.year)).order_by(CountryData.year.desc()).all()
    return [r[0] for r in rows]


def distinct_countries(db: Session) -> list[str]:
    rows = (
        db.query(distinct(CountryData.name))
        .filter(CountryData.name.isnot(None), CountryData.name != "")
        .order_by(CountryData.name.asc())
        .all()
    )
    return [r[0] for r in rows]


def build_record(payload: CountryDataIn, actor: str) -> CountryData:
    data = payload.model_dump()
    if data.get("final_score") is None:
        data["final_score"] = compute_final_score(
            payload.literacy_rate, payload.digital_infrastructure, payload.investment
        )
    data["country_code"] = data["country_code"].strip().upper()
    data["name"] = data["name"].strip()
    return CountryData(**data, created_by=actor, updated_by=actor)


def insert_many(db: Session, rows: Iterable[Any], actor: str) -> tuple[int, int]:
    """
    Inserción no ordenada: cada fila se confirma por separado, las inválidas o
    duplicadas (mismo país y año) se saltan. Devuelve (insertadas, saltadas).
    """
    inserted = skipped = 0
    for row in rows:
        try:
            payload = row if isinstance(row, CountryDataIn) else CountryDataIn.model_validate(row)
        except ValidationError as e:
            log.debug("Skipping invalid bulk row: %s", e.errors())
            skipped += 1
            continue

        db.add(build_record(payload, actor))
        try:
            db.commit()
            inserted += 1
        except IntegrityError:
            db.rollback()
            skipped += 1
    return inserted, skipped


def delete_by_year(db: Session, year: int) -> int:
    deleted = db.query(CountryData).filter(CountryData.year == year).delete(synchronize_session=False)
    db.commit()
    return deleted


def delete_by_country(db: Session, country: str) -> int:
    deleted = db.query(CountryData).filter(_country_filter(country)).delete(synchronize_session=False)
    db.commit()
    return deleted


def delete_by_ids(db: Session, ids: list[int]) -> int:
    deleted = db.query(CountryData).filter(CountryData.id.in_(ids)).delete(synchronize_session=False)
    db.commit()
    return deleted


def delete_all(db: Session) -> int:
    deleted = db.query(CountryData).delete(synchronize_session=False)
    db.commit()
    return deleted
