# fintech_index/geo.py
"""
Mapa de África: carga de fronteras GeoJSON, cruce con los datos del índice
por código ISO_A2 y proyección Mercator a trazados SVG.
"""
from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

import httpx

from fintech_index.errors import (
    FetchError,
    MalformedResponseError,
    OfflineError,
    ServerError,
)
from fintech_index.scoring import score_color

log = logging.getLogger(__name__)

AFRICAN_COUNTRIES = frozenset({
    "DZ", "AO", "BJ", "BW", "BF", "BI", "CM", "CV", "CF", "TD", "KM", "CG", "CD", "DJ",
    "EG", "GQ", "ER", "ET", "GA", "GM", "GH", "GN", "GW", "CI", "KE", "LS", "LR", "LY",
    "MG", "MW", "ML", "MR", "MU", "MA", "MZ", "NA", "NE", "NG", "RW", "ST", "SN", "SC",
    "SL", "SO", "ZA", "SS", "SD", "SZ", "TZ", "TG", "TN", "UG", "ZM", "ZW",
})

# Mercator fijo centrado en África, lienzo SVG de 900x700
PROJECTION_CENTER = (20.0, 0.0)
PROJECTION_SCALE = 500.0
PROJECTION_TRANSLATE = (450.0, 350.0)
MAX_LATITUDE = 85.0511287798

FETCH_TIMEOUT = 10.0


@dataclass
class GeoFeature:
    iso_a2: str
    name: str
    geometry_type: str            # Polygon | MultiPolygon
    coordinates: list

    @classmethod
    def from_geojson(cls, raw: dict) -> "GeoFeature":
        try:
            props = raw["properties"]
            geometry = raw["geometry"]
            return cls(
                iso_a2=str(props["ISO_A2"]),
                name=str(props.get("ADMIN") or props.get("NAME") or props["ISO_A2"]),
                geometry_type=str(geometry["type"]),
                coordinates=list(geometry["coordinates"]),
            )
        except (KeyError, TypeError) as e:
            raise MalformedResponseError(f"Invalid GeoJSON feature: {e!r}") from e


@dataclass
class BoundaryCollection:
    features: list[GeoFeature] = field(default_factory=list)
    # True si las coordenadas ya están en píxeles del lienzo (mapa simplificado)
    projected: bool = False
    fallback: bool = False


@dataclass
class MatchedCountry:
    feature: GeoFeature
    record: Optional[Any] = None

    @property
    def fill(self) -> str:
        return score_color(self.record.final_score if self.record is not None else None)


@dataclass
class MapShape:
    iso_a2: str
    name: str
    path: str
    fill: str
    record: Optional[Any] = None


# Mapa simplificado (8 países) en coordenadas de lienzo
_FALLBACK_SHAPES = [
    ("NG", "Nigeria", [[[420, 380], [480, 380], [490, 420], [470, 450], [420, 450], [420, 380]]]),
    ("ZA", "South Africa", [[[480, 650], [580, 650], [600, 690], [560, 720], [480, 720], [480, 650]]]),
    ("KE", "Kenya", [[[620, 450], [670, 450], [680, 490], [660, 520], [620, 520], [620, 450]]]),
    ("EG", "Egypt", [[[520, 200], [600, 200], [620, 240], [580, 280], [520, 280], [520, 200]]]),
    ("GH", "Ghana", [[[360, 420], [400, 420], [410, 460], [390, 490], [360, 490], [360, 420]]]),
    ("MA", "Morocco", [[[380, 250], [450, 250], [470, 290], [430, 330], [380, 330], [380, 250]]]),
    ("ET", "Ethiopia", [[[680, 380], [740, 380], [750, 420], [720, 450], [680, 450], [680, 380]]]),
    ("TZ", "Tanzania", [[[620, 540], [680, 540], [690, 580], [660, 610], [620, 610], [620, 540]]]),
]


def fallback_boundaries() -> BoundaryCollection:
    features = [
        GeoFeature(iso_a2=iso, name=name, geometry_type="Polygon", coordinates=coords)
        for iso, name, coords in _FALLBACK_SHAPES
    ]
    return BoundaryCollection(features=features, projected=True, fallback=True)


# ==================== CARGA ====================

def _read_source(source: str) -> Any:
    if source.startswith(("http://", "https://")):
        try:
            resp = httpx.get(source, timeout=FETCH_TIMEOUT, follow_redirects=True)
        except httpx.TransportError as e:
            raise OfflineError(f"Could not reach {source}: {e}") from e
        if resp.status_code >= 400:
            raise ServerError(resp.status_code, resp.reason_phrase)
        try:
            return resp.json()
        except ValueError as e:
            raise MalformedResponseError(f"GeoJSON at {source} is not valid JSON") from e

    path = Path(source)
    if not is_geojson_path(source):
        raise MalformedResponseError(f"Boundary file must be .geojson or .json: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise OfflineError(f"Could not read {path}: {e}") from e
    try:
        return json.loads(text)
    except ValueError as e:
        raise MalformedResponseError(f"GeoJSON at {path} is not valid JSON") from e


def load_boundaries(source: str) -> BoundaryCollection:
    """
    Carga un FeatureCollection desde una ruta local (.geojson / .json) o una URL
    y se queda solo con los países africanos.

    Lanza OfflineError, ServerError o MalformedResponseError; no hay respaldo aquí.
    """
    payload = _read_source(source)
    if not isinstance(payload, dict) or not isinstance(payload.get("features"), list):
        raise MalformedResponseError("GeoJSON has no 'features' list")

    # solo se parsean los features africanos
    features = [GeoFeature.from_geojson(f) for f in filter_african(payload["features"])]
    log.info("Loaded %d African features from %s", len(features), source)
    return BoundaryCollection(features=features)


def load_boundaries_or_fallback(source: Optional[str]) -> BoundaryCollection:
    if not source:
        return fallback_boundaries()
    try:
        return load_boundaries(source)
    except FetchError as e:
        log.warning("Using simplified map, could not load GeoJSON (%s): %s", type(e).__name__, e)
        return fallback_boundaries()


def is_geojson_path(source: str) -> bool:
    return source.endswith((".geojson", ".json"))


def _iso_a2(raw: Any) -> Optional[str]:
    props = raw.get("properties") if isinstance(raw, dict) else None
    return props.get("ISO_A2") if isinstance(props, dict) else None


def filter_african(features: list) -> list:
    """Features GeoJSON (sin parsear) cuyo ISO_A2 está en la lista africana."""
    filtered = [f for f in features if _iso_a2(f) in AFRICAN_COUNTRIES]
    if len(filtered) != len(features):
        log.debug("Dropped %d non-African features", len(features) - len(filtered))
    return filtered


# ==================== CRUCE CON DATOS ====================

def match_country_data(features: Iterable[GeoFeature], records: Iterable[Any]) -> dict[str, MatchedCountry]:
    """
    ISO_A2 -> (feature, registro o None). Los registros necesitan
    `country_code` y `final_score`; si hay varios por código gana el primero.
    """
    by_code: dict[str, Any] = {}
    for record in records:
        by_code.setdefault(record.country_code, record)

    return {
        feature.iso_a2: MatchedCountry(feature=feature, record=by_code.get(feature.iso_a2))
        for feature in features
    }


# ==================== PROYECCIÓN ====================

def project(lon: float, lat: float) -> tuple[float, float]:
    lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, lat))
    lam = math.radians(lon - PROJECTION_CENTER[0])
    phi = math.radians(lat)
    phi0 = math.radians(PROJECTION_CENTER[1])
    x = PROJECTION_TRANSLATE[0] + PROJECTION_SCALE * lam
    y = PROJECTION_TRANSLATE[1] - PROJECTION_SCALE * (
        math.log(math.tan(math.pi / 4 + phi / 2)) - math.log(math.tan(math.pi / 4 + phi0 / 2))
    )
    return x, y


def _point(position: Any, projected: bool) -> tuple[float, float]:
    if (
        isinstance(position, (list, tuple))
        and len(position) >= 2
        and all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in position[:2])
    ):
        if projected:
            return float(position[0]), float(position[1])
        return project(position[0], position[1])
    return 0.0, 0.0


def _fmt(v: float) -> str:
    return f"{v:.2f}"


def coordinates_to_path(rings: list, projected: bool = False) -> str:
    """Anillos de un Polygon -> 'M x y L x y ... Z' por anillo."""
    paths = []
    for ring in rings or []:
        if not ring:
            continue
        parts = []
        for i, position in enumerate(ring):
            x, y = _point(position, projected)
            parts.append(f"{'M' if i == 0 else 'L'} {_fmt(x)} {_fmt(y)}")
        paths.append(" ".join(parts) + " Z")
    return " ".join(paths)


def feature_path(feature: GeoFeature, projected: bool = False) -> str:
    if feature.geometry_type == "Polygon":
        return coordinates_to_path(feature.coordinates, projected)
    if feature.geometry_type == "MultiPolygon":
        sub_paths = (coordinates_to_path(polygon, projected) for polygon in feature.coordinates)
        return " ".join(p for p in sub_paths if p)
    return ""


def build_map(collection: BoundaryCollection, records: Iterable[Any]) -> list[MapShape]:
    """Formas listas para pintar en la plantilla del dashboard."""
    shapes = []
    for iso, match in match_country_data(collection.features, records).items():
        path = feature_path(match.feature, collection.projected)
        if not path:
            continue
        shapes.append(MapShape(
            iso_a2=iso,
            name=match.feature.name,
            path=path,
            fill=match.fill,
            record=match.record,
        ))
    return shapes
