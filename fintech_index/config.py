# fintech_index/config.py
# Configuración desde variables de entorno (.env en local).
from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _env_int(key: str, default: int) -> int:
    raw = _env(key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(key: str, default: list[str]) -> list[str]:
    raw = _env(key)
    if not raw:
        return default
    return [x.strip() for x in raw.split(",") if x.strip()]


# ==================== BASE DE DATOS ====================
DATABASE_URL = _env("DATABASE_URL", "sqlite:///./fintech_index.db")

# ==================== AUTH ====================
JWT_SECRET = _env("JWT_SECRET", "changeme")
JWT_ALGORITHM = "HS256"
JWT_EXPIRES_HOURS = _env_int("JWT_EXPIRES_HOURS", 24)
BCRYPT_ROUNDS = _env_int("BCRYPT_ROUNDS", 10)

# Sesiones del dashboard (login por formulario)
SESSION_SECRET = _env("SESSION_SECRET", "cambia-esta-clave-en-produccion")
CORS_ORIGINS = _env_list("CORS_ORIGINS", ["*"])

# ==================== MAPA ====================
# Ruta local o URL del GeoJSON de fronteras; vacío = mapa simplificado
GEOJSON_SOURCE = _env("GEOJSON_SOURCE")

# ==================== CLIENTE ====================
API_BASE_URL = _env("API_BASE_URL", "http://localhost:8000")
SNAPSHOT_PATH = _env("SNAPSHOT_PATH", "fintechIndexData.json")

# ==================== SMTP ====================
SMTP_HOST = _env("SMTP_HOST")
SMTP_PORT = _env_int("SMTP_PORT", 587)
SMTP_USER = _env("SMTP_USER")
SMTP_PASS = _env("SMTP_PASS")
SMTP_FROM = _env("SMTP_FROM", SMTP_USER)

LOG_LEVEL = _env("LOG_LEVEL", "INFO").upper()
