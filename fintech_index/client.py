"""
API Client -- thin HTTP client for the African Fintech Index API.

Every call either returns parsed data or raises one of the FetchError types
(offline, malformed response, server error, rejected request); callers
decide whether to fall back to cached data.

Configuration:
    API_BASE_URL env var or fallback to http://localhost:8000
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import httpx

from fintech_index import config
from fintech_index.errors import (
    MalformedResponseError,
    OfflineError,
    RequestRejected,
    ServerError,
)
from fintech_index.schemas import CountryDataIn, CountryDataOut, StartupIn, StartupOut, UserOut

logger = logging.getLogger(__name__)

TIMEOUT = 30.0


class FintechIndexClient:
    """Sync HTTP client; pass `http` to reuse an existing httpx.Client (or a TestClient)."""

    def __init__(
        self,
        base_url: str = config.API_BASE_URL,
        token: Optional[str] = None,
        http: Optional[httpx.Client] = None,
    ):
        self._http = http or httpx.Client(base_url=base_url.rstrip("/"), timeout=TIMEOUT)
        self._owns_http = http is None
        self.token = token

    def close(self):
        if self._owns_http:
            self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(self, method: str, url: str, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            resp = self._http.request(method, url, headers=headers, **kwargs)
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise OfflineError(f"Could not reach the API: {e}") from e

        detail = None
        try:
            body = resp.json()
        except ValueError:
            body = None
            if resp.is_success:
                raise MalformedResponseError(f"{method} {url} returned a non-JSON body")
        if isinstance(body, dict):
            detail = body.get("detail") or body.get("message") or body.get("error")

        if resp.status_code >= 500:
            raise ServerError(resp.status_code, detail)
        if resp.status_code >= 400:
            raise RequestRejected(resp.status_code, str(detail) if detail is not None else None)
        return body

    @staticmethod
    def _parse(model, body):
        try:
            return model.model_validate(body)
        except ValueError as e:
            raise MalformedResponseError(f"Invalid {model.__name__}: {e}") from e

    def _parse_list(self, model, body) -> list:
        if not isinstance(body, list):
            raise MalformedResponseError(f"Expected a list of {model.__name__}")
        return [self._parse(model, item) for item in body]

    @staticmethod
    def _expect_dict(body, what: str) -> dict:
        if not isinstance(body, dict):
            raise MalformedResponseError(f"Expected a JSON object for {what}")
        return body

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def register(self, email: str, password: str, name: str, role: str) -> str:
        body = self._request("POST", "/api/auth/register", json={
            "email": email, "password": password, "name": name, "role": role,
        })
        message = self._expect_dict(body, "register").get("message")
        if not isinstance(message, str):
            raise MalformedResponseError("Unexpected register response: no message")
        return message

    def login(self, email: str, password: str) -> UserOut:
        """Stores the bearer token for later calls and returns the user."""
        body = self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        if not isinstance(body, dict) or not isinstance(body.get("token"), str):
            raise MalformedResponseError("Unexpected login response: no token")
        user = self._parse(UserOut, body.get("user"))
        self.token = body["token"]
        return user

    def logout(self):
        self.token = None

    def me(self) -> UserOut:
        return self._parse(UserOut, self._request("GET", "/api/auth/me"))

    # ------------------------------------------------------------------
    # Country data
    # ------------------------------------------------------------------

    def list_country_data(
        self,
        year: Optional[int] = None,
        country: Optional[str] = None,
        sort: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[CountryDataOut]:
        params = {k: v for k, v in {"year": year, "country": country, "sort": sort, "limit": limit}.items() if v is not None}
        body = self._request("GET", "/api/country-data", params=params)
        return self._parse_list(CountryDataOut, body)

    def country_stats(self) -> dict:
        return self._expect_dict(self._request("GET", "/api/country-data/stats"), "stats")

    def bulk_upload(self, records: Iterable[CountryDataIn]) -> dict:
        data = [r.model_dump(mode="json", by_alias=True, exclude_none=True) for r in records]
        body = self._request("POST", "/api/country-data/bulk", json={"data": data})
        return self._expect_dict(body, "bulk upload")

    # ------------------------------------------------------------------
    # Startups
    # ------------------------------------------------------------------

    def list_startups(self, **filters: str) -> list[StartupOut]:
        body = self._request("GET", "/api/startups", params=filters)
        return self._parse_list(StartupOut, body)

    def add_startup(self, startup: StartupIn) -> StartupOut:
        body = self._request("POST", "/api/startups", json=startup.model_dump(mode="json", by_alias=True))
        return self._parse(StartupOut, body)
