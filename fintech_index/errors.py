# fintech_index/errors.py
"""
Errores al obtener datos remotos (API del índice, GeoJSON de fronteras).

Cada tipo distingue una causa distinta para que quien llama decida si
usa datos de respaldo o propaga el error.
"""
from __future__ import annotations

from typing import Optional


class FetchError(Exception):
    """Base de todos los fallos al obtener datos."""


class OfflineError(FetchError):
    """No se pudo contactar con el origen (red caída, host o archivo inexistente)."""


class MalformedResponseError(FetchError):
    """El origen respondió, pero el contenido no tiene el formato esperado."""


class ServerError(FetchError):
    """El servidor respondió con un error 5xx."""

    def __init__(self, status_code: int, detail: Optional[str] = None):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Server error {status_code}: {detail or 'no detail'}")


class RequestRejected(FetchError):
    """El servidor rechazó la petición (4xx): credenciales, permisos, validación..."""

    def __init__(self, status_code: int, detail: Optional[str] = None):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Request rejected {status_code}: {detail or 'no detail'}")
