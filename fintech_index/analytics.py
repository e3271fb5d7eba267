# fintech_index/analytics.py
"""
KPIs del dashboard calculados sobre listas de registros del índice.

Funcionan con cualquier objeto que tenga los atributos de CountryData
(modelos SQLAlchemy o CountryDataOut del cliente).
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional


@dataclass
class DashboardStats:
    total_countries: int = 0
    average_score: float = 0.0
    top_performer: str = "N/A"
    year_over_year_change: float = 0.0
    total_fintech_companies: int = 0
    average_fintech_companies: float = 0.0


@dataclass
class RankedCountry:
    name: str
    score: float
    rank: int


@dataclass
class SubComponent:
    name: str
    attribute: str
    score: float
    change: float
    countries: list[RankedCountry] = field(default_factory=list)


@dataclass
class YearlyTrend:
    year: int
    average_score: float
    total_countries: int
    total_fintech_companies: int


SUB_COMPONENTS = (
    ("Financial Literacy", "literacy_rate"),
    ("Digital Infrastructure", "digital_infrastructure"),
    ("Investment", "investment"),
)


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _pct_change(current: float, previous: Optional[float]) -> float:
    if not previous:
        return 0.0
    return round((current - previous) / previous * 100, 1)


def records_for_year(records: Iterable[Any], year: int) -> list[Any]:
    return [r for r in records if r.year == year]


def available_years(records: Iterable[Any]) -> list[int]:
    return sorted({r.year for r in records}, reverse=True)


def dashboard_stats(records: Iterable[Any], year: int) -> DashboardStats:
    all_records = list(records)
    current = records_for_year(all_records, year)
    if not current:
        return DashboardStats()

    average = _mean([r.final_score for r in current])
    top = max(current, key=lambda r: r.final_score)
    total_companies = sum(r.fintech_companies or 0 for r in current)

    previous = records_for_year(all_records, year - 1)
    previous_average = _mean([r.final_score for r in previous]) if previous else None

    return DashboardStats(
        total_countries=len(current),
        average_score=round(average, 2),
        top_performer=top.name,
        year_over_year_change=_pct_change(average, previous_average),
        total_fintech_companies=total_companies,
        average_fintech_companies=round(total_companies / len(current), 2),
    )


def sub_components(records: Iterable[Any], year: int) -> list[SubComponent]:
    all_records = list(records)
    current = records_for_year(all_records, year)
    previous = records_for_year(all_records, year - 1)

    cards = []
    for label, attr in SUB_COMPONENTS:
        score = _mean([getattr(r, attr) for r in current])
        previous_score = _mean([getattr(r, attr) for r in previous]) if previous else None
        ranked = sorted(current, key=lambda r: getattr(r, attr), reverse=True)
        cards.append(SubComponent(
            name=label,
            attribute=attr,
            score=round(score, 1),
            change=_pct_change(score, previous_score),
            countries=[
                RankedCountry(name=r.name, score=getattr(r, attr), rank=i)
                for i, r in enumerate(ranked, start=1)
            ],
        ))
    return cards


def yearly_trends(records: Iterable[Any]) -> list[YearlyTrend]:
    by_year: dict[int, list[Any]] = defaultdict(list)
    for r in records:
        by_year[r.year].append(r)

    return [
        YearlyTrend(
            year=year,
            average_score=round(_mean([r.final_score for r in rows]), 2),
            total_countries=len(rows),
            total_fintech_companies=sum(r.fintech_companies or 0 for r in rows),
        )
        for year, rows in sorted(by_year.items())
    ]
