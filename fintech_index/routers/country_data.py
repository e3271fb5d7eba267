# fintech_index/routers/country_data.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fintech_index import crud
from fintech_index.db import get_db
from fintech_index.models.user import Role
from fintech_index.schemas import (
    BulkIn,
    BulkOut,
    CountryDataIn,
    CountryDataOut,
    CountryDataUpdate,
    CountryDeleteOut,
    DeleteOut,
    SelectiveDeleteIn,
    StatsOut,
)
from fintech_index.security import TokenClaims, require_role

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/country-data", tags=["Índice por país"])

admin_only = require_role(Role.ADMIN)

DUPLICATE_DETAIL = "Data for this country and year already exists"

# columnas NOT NULL: un null explícito en el PUT se ignora
REQUIRED_COLUMNS = {
    "country_code", "name", "literacy_rate", "digital_infrastructure",
    "investment", "final_score", "year",
}


# ================== Consultas públicas ==================

@router.get("", response_model=list[CountryDataOut])
def list_country_data(
    year: Optional[int] = None,
    country: Optional[str] = None,
    sort: Optional[str] = None,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
):
    return crud.list_records(db, year=year, country=country, sort=sort, limit=limit)


@router.get("/stats", response_model=StatsOut)
def country_data_stats(db: Session = Depends(get_db)):
    return crud.stats(db)


@router.get("/years", response_model=list[int])
def country_data_years(db: Session = Depends(get_db)):
    return crud.distinct_years(db)


@router.get("/countries", response_model=list[str])
def country_data_countries(db: Session = Depends(get_db)):
    return crud.distinct_countries(db)


# ================== Altas (solo admin) ==================

@router.post("", response_model=CountryDataOut, status_code=status.HTTP_201_CREATED)
def create_country_data(
    payload: CountryDataIn,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(admin_only),
):
    record = crud.build_record(payload, current_user.email)
    db.add(record)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_DETAIL)
    db.refresh(record)
    return record


@router.post("/bulk", response_model=BulkOut, status_code=status.HTTP_201_CREATED)
def bulk_create_country_data(
    payload: BulkIn,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(admin_only),
):
    if not payload.data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Data array is required and must not be empty")

    inserted, skipped = crud.insert_many(db, payload.data, current_user.email)
    log.info("Bulk insert by %s: %d inserted, %d skipped", current_user.email, inserted, skipped)
    return {
        "message": f"Successfully added {inserted} records",
        "inserted_count": inserted,
        "skipped_count": skipped,
    }


# ================== Borrados masivos (solo admin) ==================
# Registrados antes de /{country_code}/{year}: si no, "delete-by-year/2024" encajaría ahí

@router.delete("/delete-by-year/{year}", response_model=DeleteOut)
def delete_by_year(
    year: int,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(admin_only),
):
    deleted = crud.delete_by_year(db, year)
    if deleted == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No data found for the specified year")
    log.info("%s deleted %d records for year %d", current_user.email, deleted, year)
    return {"message": f"Deleted {deleted} records for year {year}", "deleted_count": deleted}


@router.delete("/delete-by-country/{country}", response_model=DeleteOut)
def delete_by_country(
    country: str,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(admin_only),
):
    deleted = crud.delete_by_country(db, country)
    if deleted == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No data found for the specified country")
    log.info("%s deleted %d records for country %s", current_user.email, deleted, country)
    return {"message": f"Deleted {deleted} records for country {country}", "deleted_count": deleted}


@router.delete("/delete-selective", response_model=DeleteOut)
def delete_selective(
    payload: SelectiveDeleteIn,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(admin_only),
):
    if not payload.ids:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="IDs array is required and must not be empty")

    deleted = crud.delete_by_ids(db, payload.ids)
    if deleted == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No records found with the provided IDs")
    return {"message": f"Deleted {deleted} records", "deleted_count": deleted}


@router.delete("/delete-all", response_model=DeleteOut)
def delete_all(
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(admin_only),
):
    deleted = crud.delete_all(db)
    log.warning("%s deleted all %d country data records", current_user.email, deleted)
    return {"message": f"Deleted all {deleted} records", "deleted_count": deleted}


# ================== Un registro (solo admin) ==================

@router.put("/{country_code}/{year}", response_model=CountryDataOut)
def update_country_data(
    country_code: str,
    year: int,
    payload: CountryDataUpdate,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(admin_only),
):
    record = crud.get_record(db, country_code.upper(), year)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Country data not found")

    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is None and key in REQUIRED_COLUMNS:
            continue
        if key == "country_code":
            value = value.strip().upper()
        setattr(record, key, value)
    record.updated_by = current_user.email

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_DETAIL)
    db.refresh(record)
    return record


@router.delete("/{country_code}/{year}", response_model=CountryDeleteOut)
def delete_country_data(
    country_code: str,
    year: int,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(admin_only),
):
    record = crud.get_record(db, country_code.upper(), year)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Country data not found")

    deleted = CountryDataOut.model_validate(record)
    db.delete(record)
    db.commit()
    return {"message": "Country data deleted successfully", "deleted_data": deleted}
