"""Repositories holding the persisted collections.

Each collection (`revenueEntries`, `goals`, `calls`) is an ordered list of
flat JSON-safe records exchanged wholesale: `load` reads the whole list and
`save` replaces it. There are no partial writes and no schema migrations.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Protocol

from revenue_dashboard.config import Settings
from revenue_dashboard.db import get_client, get_db

log = logging.getLogger(__name__)

ENTRIES = "revenueEntries"
GOALS = "goals"
CALLS = "calls"
COLLECTIONS = (ENTRIES, GOALS, CALLS)

Record = dict[str, Any]


class Repository(Protocol):
    """Key-value store of collections keyed by collection name."""

    def load(self, name: str) -> list[Record]:
        """Return all records of collection `name` (empty when never saved)."""
        ...

    def save(self, name: str, records: list[Record]) -> None:
        """Replace collection `name` with `records`."""
        ...


class MemoryRepository:
    """Dict-backed repository for tests and dry runs."""

    def __init__(self, initial: dict[str, list[Record]] | None = None) -> None:
        self._data: dict[str, list[Record]] = copy.deepcopy(initial or {})

    def load(self, name: str) -> list[Record]:
        return copy.deepcopy(self._data.get(name, []))

    def save(self, name: str, records: list[Record]) -> None:
        self._data[name] = copy.deepcopy(records)


class JsonFileRepository:
    """One pretty-printed JSON file per collection under `data_dir`.

    Files are written atomically (temp file, then replace) so a crash never
    leaves a half-written collection.
    """

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)

    def path_for(self, name: str) -> Path:
        return self.data_dir / f"{name}.json"

    def load(self, name: str) -> list[Record]:
        """Read collection `name`.

        Raises:
            RuntimeError: if the file exists but is not a JSON list.
        """
        path = self.path_for(name)
        if not path.exists():
            return []

        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except json.JSONDecodeError as e:
            raise RuntimeError(f"Collection file {path} is not valid JSON: {e}") from e

        if not isinstance(data, list):
            raise RuntimeError(f"Collection file {path} must hold a JSON list")
        return data

    def save(self, name: str, records: list[Record]) -> None:
        path = self.path_for(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as fh:
                json.dump(records, fh, indent=2)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
        tmp.replace(path)
        log.debug("Saved %d records to %s", len(records), path)


class MongoRepository:
    """Collections stored as documents of a single MongoDB collection.

    Each document is ``{"_id": <collection name>, "items": [...]}`` and is
    rewritten with one upserting ``replace_one``, so a save is atomic per
    collection.
    """

    def __init__(self, collection: Any) -> None:
        self.collection = collection

    def load(self, name: str) -> list[Record]:
        doc = self.collection.find_one({"_id": name})
        if doc is None:
            return []
        return list(doc.get("items", []))

    def save(self, name: str, records: list[Record]) -> None:
        self.collection.replace_one(
            {"_id": name},
            {"_id": name, "items": records},
            upsert=True,
        )
        log.debug("Saved %d records to mongo document %s", len(records), name)


def build_repository(settings: Settings) -> Repository:
    """Return the repository selected by `settings.storage_backend`."""
    if settings.storage_backend == "mongo":
        client = get_client(settings.mongo_uri)
        db = get_db(client, settings.mongo_db)
        log.info("Using MongoDB repository %s.%s", settings.mongo_db, settings.mongo_collection)
        return MongoRepository(db[settings.mongo_collection])

    log.info("Using JSON repository in %s", settings.data_dir)
    return JsonFileRepository(settings.data_dir)
