# fintech_index/scoring.py
"""
Índice compuesto y bandas de color.

Los umbrales se usan en el mapa, la leyenda y las tablas del dashboard:
cualquier cambio de rangos se hace solo aquí.
"""
from __future__ import annotations

import enum
from typing import Optional

NO_DATA_COLOR = "#E5E7EB"


class ScoreBand(enum.Enum):
    # (límite inferior, etiqueta, color)
    HIGH = (80.0, "High (80+)", "#10B981")
    MEDIUM = (60.0, "Medium (60-79)", "#F59E0B")
    LOW = (40.0, "Low (40-59)", "#EF4444")
    VERY_LOW = (0.0, "Very Low (<40)", "#6B7280")

    @property
    def floor(self) -> float:
        return self.value[0]

    @property
    def label(self) -> str:
        return self.value[1]

    @property
    def color(self) -> str:
        return self.value[2]


def compute_final_score(literacy_rate: float, digital_infrastructure: float, investment: float) -> float:
    """Media simple de los tres componentes, redondeada a 2 decimales."""
    return round((literacy_rate + digital_infrastructure + investment) / 3, 2)


def score_band(score: float) -> ScoreBand:
    for band in ScoreBand:
        if score >= band.floor:
            return band
    return ScoreBand.VERY_LOW


def score_color(score: Optional[float]) -> str:
    if score is None:
        return NO_DATA_COLOR
    return score_band(score).color
