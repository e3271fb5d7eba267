# fintech_index/ingest.py
"""
Importación de datos del índice desde CSV / Excel.

Columnas esperadas (cabecera en la primera fila):
    name, literacyRate, digitalInfrastructure, investment   -> obligatorias (0-100)
    year, fintechCompanies, id | countryCode, population, gdp -> opcionales

Si alguna fila falla la validación no se importa nada: se devuelven todos los
errores con su número de fila.
"""
from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Optional

import pandas as pd
from pydantic import ValidationError

from fintech_index.schemas import CountryDataIn
from fintech_index.scoring import compute_final_score

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
MIN_YEAR, MAX_YEAR = 2000, 2030

REQUIRED_FIELDS = ("name", "literacyRate", "digitalInfrastructure", "investment")
SCORE_FIELDS = ("literacyRate", "digitalInfrastructure", "investment")


class UploadError(ValueError):
    """El archivo entero no se puede procesar (formato, tamaño, vacío)."""


@dataclass
class IngestResult:
    records: list[CountryDataIn] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors and bool(self.records)

    @property
    def years(self) -> list[int]:
        return sorted({r.year for r in self.records}, reverse=True)

    @property
    def total_fintech_companies(self) -> int:
        return sum(r.fintech_companies or 0 for r in self.records)


def read_table(filename: str, content: bytes) -> pd.DataFrame:
    if len(content) > MAX_UPLOAD_BYTES:
        raise UploadError("File too large: please upload a file smaller than 10MB")

    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if ext not in ("csv", "xlsx"):
        raise UploadError("Unsupported file format: please upload a CSV or Excel (.xlsx) file")

    try:
        if ext == "csv":
            df = pd.read_csv(io.BytesIO(content), dtype=str, keep_default_na=False, skip_blank_lines=True)
        else:
            df = pd.read_excel(io.BytesIO(content), engine="openpyxl", dtype=str, keep_default_na=False)
    except ValueError as e:
        # EmptyDataError y ParserError heredan de ValueError
        raise UploadError(f"Failed to parse {filename}: {e}") from e

    df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)
    return df


def _cell(row: dict, key: str) -> str:
    value = row.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _to_float(raw: str) -> Optional[float]:
    try:
        return float(raw)
    except ValueError:
        return None


def _to_int(raw: str) -> Optional[int]:
    # Excel entrega "2024.0" para celdas numéricas
    value = _to_float(raw)
    if value is None or not value.is_integer():
        return None
    return int(value)


def _row_to_record(row: dict, row_number: int, default_year: int) -> tuple[Optional[CountryDataIn], Optional[str]]:
    missing = [f for f in REQUIRED_FIELDS if not _cell(row, f)]
    if missing:
        return None, f"Row {row_number}: Missing required fields: {', '.join(missing)}"

    scores = {}
    invalid = []
    for f in SCORE_FIELDS:
        value = _to_float(_cell(row, f))
        if value is None or not 0 <= value <= 100:
            invalid.append(f)
        scores[f] = value
    if invalid:
        return None, f"Row {row_number}: Invalid numeric values (must be 0-100): {', '.join(invalid)}"

    year = default_year
    if _cell(row, "year"):
        year = _to_int(_cell(row, "year"))
        if year is None or not MIN_YEAR <= year <= MAX_YEAR:
            return None, f"Row {row_number}: Invalid year (must be between {MIN_YEAR}-{MAX_YEAR})"

    fintech_companies = None
    if _cell(row, "fintechCompanies"):
        fintech_companies = _to_int(_cell(row, "fintechCompanies"))
        if fintech_companies is None or fintech_companies < 0:
            return None, f"Row {row_number}: Invalid fintech companies count (must be a positive number)"

    population = _to_int(_cell(row, "population")) if _cell(row, "population") else None
    gdp = _to_float(_cell(row, "gdp")) if _cell(row, "gdp") else None

    name = _cell(row, "name")
    code = (_cell(row, "countryCode") or _cell(row, "id") or name[:2]).upper()

    try:
        record = CountryDataIn(
            country_code=code,
            name=name,
            literacy_rate=scores["literacyRate"],
            digital_infrastructure=scores["digitalInfrastructure"],
            investment=scores["investment"],
            final_score=compute_final_score(
                scores["literacyRate"], scores["digitalInfrastructure"], scores["investment"]
            ),
            year=year,
            population=population,
            gdp=gdp,
            fintech_companies=fintech_companies,
        )
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
        return None, f"Row {row_number}: Invalid values: {fields}"
    return record, None


def validate_rows(rows: list[dict], default_year: int) -> IngestResult:
    result = IngestResult()
    if not rows:
        result.errors.append("File is empty or has no valid data rows")
        return result

    for index, row in enumerate(rows, start=1):
        record, error = _row_to_record(row, index, default_year)
        if error:
            result.errors.append(error)
        else:
            result.records.append(record)
    return result


def parse_upload(filename: str, content: bytes, default_year: int) -> IngestResult:
    """CSV/Excel -> registros validados. `default_year` se usa en filas sin año."""
    df = read_table(filename, content)
    rows = df.to_dict(orient="records")
    return validate_rows(rows, default_year)
