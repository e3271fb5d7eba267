"""Pydantic schemas for the JSON API (camelCase on the wire)."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fintech_index.models.user import Role


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


Score = Annotated[float, Field(ge=0, le=100)]


# ---------------------------------------------------------------------------
# Auth / users
# ---------------------------------------------------------------------------

class RegisterIn(ApiModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)
    name: str = Field(min_length=1)
    # se valida en la ruta: admin -> 403, otro valor -> 400
    role: Optional[str] = None


class LoginIn(ApiModel):
    email: str
    password: str


class UserOut(ApiModel):
    id: int
    email: str
    name: str
    role: Role
    is_verified: bool
    created_at: Optional[datetime] = None


class UserUpdate(ApiModel):
    name: Optional[str] = None
    role: Optional[Role] = None
    is_verified: Optional[bool] = None


class TokenOut(ApiModel):
    token: str
    user: UserOut


class MessageOut(ApiModel):
    message: str


class UserMessageOut(MessageOut):
    user: UserOut


# ---------------------------------------------------------------------------
# Country data
# ---------------------------------------------------------------------------

class CountryDataBase(ApiModel):
    country_code: str = Field(min_length=2, max_length=3)
    name: str = Field(min_length=1)
    literacy_rate: Score
    digital_infrastructure: Score
    investment: Score
    year: int
    population: Optional[int] = Field(default=None, ge=0)
    gdp: Optional[float] = None
    fintech_companies: Optional[int] = Field(default=None, ge=0)


class CountryDataIn(CountryDataBase):
    # si no viene, se calcula como media de los tres componentes
    final_score: Optional[float] = Field(default=None, ge=0, le=100)


class CountryDataUpdate(ApiModel):
    country_code: Optional[str] = Field(default=None, min_length=2, max_length=3)
    name: Optional[str] = Field(default=None, min_length=1)
    literacy_rate: Optional[float] = Field(default=None, ge=0, le=100)
    digital_infrastructure: Optional[float] = Field(default=None, ge=0, le=100)
    investment: Optional[float] = Field(default=None, ge=0, le=100)
    final_score: Optional[float] = Field(default=None, ge=0, le=100)
    year: Optional[int] = None
    population: Optional[int] = Field(default=None, ge=0)
    gdp: Optional[float] = None
    fintech_companies: Optional[int] = Field(default=None, ge=0)


class CountryDataOut(CountryDataBase):
    id: Optional[int] = None
    final_score: float
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BulkIn(ApiModel):
    # filas sin validar: cada una se valida por separado en la inserción
    data: list[Any]


class BulkOut(MessageOut):
    inserted_count: int
    skipped_count: int


class SelectiveDeleteIn(ApiModel):
    ids: list[int]


class DeleteOut(MessageOut):
    deleted_count: int


class CountryDeleteOut(MessageOut):
    deleted_data: CountryDataOut


class StatsOut(ApiModel):
    total_records: int
    unique_countries: int
    years: list[int]
    average_score: Optional[float] = None
    min_score: Optional[float] = None
    max_score: Optional[float] = None


# ---------------------------------------------------------------------------
# Startups
# ---------------------------------------------------------------------------

class StartupIn(ApiModel):
    name: str = Field(min_length=1)
    country: str = Field(min_length=1)
    sector: str = Field(min_length=1)
    founded_year: int = Field(ge=1900, le=2100)
    description: Optional[str] = None
    website: Optional[str] = None


class StartupOut(StartupIn):
    id: int
    added_by: str
    added_at: Optional[datetime] = None
