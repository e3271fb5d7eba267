# fintech_index/session.py
"""
Estado de una sesión del dashboard fuera del navegador: usuario actual,
año seleccionado y dataset, con la caché local detrás.

Desde consola refresca la instantánea local (SNAPSHOT_PATH) y muestra el resumen del año:

    fintech-index-snapshot --year 2024 [--email admin@example.com] [--strict]
"""
from __future__ import annotations

import argparse
import getpass
import logging
from typing import Optional, Sequence

from fintech_index import analytics, config
from fintech_index.client import FintechIndexClient
from fintech_index.defaults import default_dataset
from fintech_index.errors import FetchError
from fintech_index.models.user import Role
from fintech_index.schemas import CountryDataOut, UserOut
from fintech_index.snapshot import DatasetCache, JsonFileStore

log = logging.getLogger(__name__)


class DashboardSession:
    def __init__(self, client: FintechIndexClient, cache: DatasetCache, selected_year: Optional[int] = None):
        self.client = client
        self.cache = cache
        self.current_user: Optional[UserOut] = None
        self.records: list[CountryDataOut] = []
        self.selected_year = selected_year
        # True si los datos vienen de la caché o de los datos incluidos
        self.offline = False

    @classmethod
    def from_config(cls, selected_year: Optional[int] = None) -> "DashboardSession":
        """Cliente contra API_BASE_URL y caché en el fichero SNAPSHOT_PATH."""
        client = FintechIndexClient(config.API_BASE_URL)
        cache = DatasetCache(JsonFileStore(config.SNAPSHOT_PATH), default_dataset)
        return cls(client, cache, selected_year)

    # ==================== USUARIO ====================

    def sign_in(self, email: str, password: str) -> UserOut:
        self.current_user = self.client.login(email, password)
        return self.current_user

    def sign_out(self):
        self.client.logout()
        self.current_user = None

    @property
    def is_admin(self) -> bool:
        return self.current_user is not None and self.current_user.role == Role.ADMIN

    # ==================== DATOS ====================

    def load_dataset(self, allow_fallback: bool = True) -> list[CountryDataOut]:
        """
        Pide los datos a la API y los guarda en caché. Si falla y
        `allow_fallback` es False el FetchError se propaga.
        """
        try:
            records = self.client.list_country_data()
        except FetchError as e:
            if not allow_fallback:
                raise
            log.warning("Could not fetch country data (%s), using cached data", type(e).__name__)
            records = self.cache.load()
            self.offline = True
        else:
            updated_by = self.current_user.email if self.current_user else None
            self.cache.save(records, updated_by=updated_by)
            self.offline = False

        self.records = records
        years = analytics.available_years(records)
        if years and self.selected_year not in years:
            self.selected_year = years[0]
        return records

    def current_records(self) -> list[CountryDataOut]:
        if self.selected_year is None:
            return []
        return analytics.records_for_year(self.records, self.selected_year)

    def stats(self) -> analytics.DashboardStats:
        if self.selected_year is None:
            return analytics.DashboardStats()
        return analytics.dashboard_stats(self.records, self.selected_year)


# ==================== CLI ====================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Refresh the local dataset snapshot and show a year summary.")
    parser.add_argument("--year", type=int, help="defaults to the latest year with data")
    parser.add_argument("--email", help="sign in first; the snapshot records who refreshed it")
    parser.add_argument("--password", help="prompted for when --email is given without it")
    parser.add_argument("--strict", action="store_true", help="fail instead of falling back to cached data")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level="INFO", format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    args = build_parser().parse_args(argv)

    session = DashboardSession.from_config(args.year)
    try:
        if args.email:
            session.sign_in(args.email, args.password or getpass.getpass("Password: "))
        session.load_dataset(allow_fallback=not args.strict)
    except FetchError as e:
        log.error("Could not load the dataset: %s", e)
        return 1
    finally:
        session.client.close()

    stats = session.stats()
    log.info(
        "%s %s: %d countries, average score %.2f, top performer %s",
        "Cached data" if session.offline else "Live data",
        session.selected_year, stats.total_countries, stats.average_score, stats.top_performer,
    )
    info = session.cache.info()
    if info is not None:
        log.info("Snapshot %s: %d records, updated %s", config.SNAPSHOT_PATH, info.record_count,
                 info.last_updated.isoformat())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
