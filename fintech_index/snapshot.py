# fintech_index/snapshot.py
"""
Caché local del dataset del índice.

El almacenamiento va detrás de un adaptador get/set/clear (archivo JSON o
memoria) y el contenido es una instantánea versionada:

    {"version": "1.0", "data": [...], "lastUpdated": <ms epoch>, "updatedBy": "..."}

Se descarta (y se usan los datos incluidos) si tiene otra versión, más de
30 días, está vacía o no se puede leer.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError

from fintech_index.schemas import CountryDataOut

log = logging.getLogger(__name__)

STORAGE_KEY = "fintechIndexData"
STORAGE_VERSION = "1.0"
MAX_AGE = timedelta(days=30)


# ==================== ADAPTADORES ====================

class SnapshotStore:
    """Almacén clave -> texto."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def clear(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(SnapshotStore):
    def __init__(self):
        self._items: dict[str, str] = {}

    def get(self, key):
        return self._items.get(key)

    def set(self, key, value):
        self._items[key] = value

    def clear(self, key):
        self._items.pop(key, None)


class JsonFileStore(SnapshotStore):
    """Un archivo JSON con todas las claves."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(data, f)

    def get(self, key):
        return self._read().get(key)

    def set(self, key, value):
        data = self._read()
        data[key] = value
        self._write(data)

    def clear(self, key):
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)


# ==================== INSTANTÁNEA ====================

def _now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


@dataclass
class DatasetSnapshot:
    version: str
    data: list[CountryDataOut]
    last_updated: int                 # ms desde epoch
    updated_by: Optional[str] = None

    def to_json(self) -> str:
        return json.dumps({
            "version": self.version,
            "data": [r.model_dump(mode="json", by_alias=True) for r in self.data],
            "lastUpdated": self.last_updated,
            "updatedBy": self.updated_by,
        })

    @classmethod
    def from_json(cls, raw: str) -> "DatasetSnapshot":
        payload = json.loads(raw)
        return cls(
            version=str(payload["version"]),
            data=[CountryDataOut.model_validate(r) for r in payload["data"]],
            last_updated=int(payload["lastUpdated"]),
            updated_by=payload.get("updatedBy"),
        )


@dataclass
class DatasetInfo:
    last_updated: datetime
    updated_by: Optional[str]
    record_count: int
    years: list[int]


class DatasetCache:
    def __init__(
        self,
        store: SnapshotStore,
        defaults: Callable[[], list[CountryDataOut]],
        max_age: timedelta = MAX_AGE,
        clock: Callable[[], int] = _now_ms,
    ):
        self.store = store
        self.defaults = defaults
        self.max_age = max_age
        self.clock = clock

    def _snapshot(self) -> Optional[DatasetSnapshot]:
        try:
            raw = self.store.get(STORAGE_KEY)
            if not raw:
                return None
            return DatasetSnapshot.from_json(raw)
        except (ValueError, KeyError, TypeError, ValidationError) as e:
            log.warning("Stored dataset is unreadable, ignoring it: %s", e)
            return None

    def is_fresh(self, snapshot: DatasetSnapshot) -> bool:
        cutoff = self.clock() - int(self.max_age.total_seconds() * 1000)
        return (
            snapshot.version == STORAGE_VERSION
            and snapshot.last_updated > cutoff
            and len(snapshot.data) > 0
        )

    def load(self) -> list[CountryDataOut]:
        snapshot = self._snapshot()
        if snapshot is None:
            log.info("No stored dataset found, using bundled data")
            return self.defaults()
        if not self.is_fresh(snapshot):
            log.info("Stored dataset is outdated or invalid, using bundled data")
            return self.defaults()
        return snapshot.data

    def save(self, records: list[CountryDataOut], updated_by: Optional[str] = None) -> DatasetSnapshot:
        """Sobrescribe la instantánea entera con `records`."""
        snapshot = DatasetSnapshot(
            version=STORAGE_VERSION,
            data=list(records),
            last_updated=self.clock(),
            updated_by=updated_by,
        )
        self.store.set(STORAGE_KEY, snapshot.to_json())
        return snapshot

    def clear(self) -> None:
        self.store.clear(STORAGE_KEY)

    def info(self) -> Optional[DatasetInfo]:
        snapshot = self._snapshot()
        if snapshot is None:
            return None
        return DatasetInfo(
            last_updated=datetime.fromtimestamp(snapshot.last_updated / 1000, tz=timezone.utc),
            updated_by=snapshot.updated_by,
            record_count=len(snapshot.data),
            years=sorted({r.year for r in snapshot.data}, reverse=True),
        )
