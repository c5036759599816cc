"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads the storage and logging configuration from the environment (a `.env`
file at the project root is loaded first).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

STORAGE_BACKENDS = ("json", "mongo")


@dataclass(frozen=True)
class Settings:
    """Container for dashboard configuration read from the environment.

    Attributes:
        storage_backend: ``json`` (files under `data_dir`) or ``mongo``.
        mongo_uri: MongoDB connection URI.
        mongo_db: Target MongoDB database name.
        mongo_collection: Collection holding one document per stored collection.
        data_dir: Directory for the JSON collection files.
        log_level: Numeric logging level.
        log_path: Optional log file.
    """
    storage_backend: str
    mongo_uri: str
    mongo_db: str
    mongo_collection: str
    data_dir: Path
    log_level: int
    log_path: Path | None


def _parse_level(raw: str) -> int:
    level = logging.getLevelName(raw.strip().upper())
    if not isinstance(level, int):
        raise RuntimeError(f"LOG_LEVEL must be a logging level name, got {raw!r}")
    return level


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if `STORAGE_BACKEND` or `LOG_LEVEL` is invalid.
    """
    storage_backend = os.getenv("STORAGE_BACKEND", "json").strip().lower()
    mongo_uri = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    mongo_db = os.getenv("MONGO_DB", "revenue_dashboard")
    mongo_collection = os.getenv("MONGO_COLLECTION", "collections")
    data_dir = Path(os.getenv("DATA_DIR", "data/store"))
    log_level = _parse_level(os.getenv("LOG_LEVEL", "INFO"))
    log_path_raw = os.getenv("LOG_PATH", "").strip()

    if storage_backend not in STORAGE_BACKENDS:
        raise RuntimeError(
            f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, "
            f"got {storage_backend!r}."
        )

    return Settings(
        storage_backend=storage_backend,
        mongo_uri=mongo_uri,
        mongo_db=mongo_db,
        mongo_collection=mongo_collection,
        data_dir=data_dir,
        log_level=log_level,
        log_path=Path(log_path_raw) if log_path_raw else None,
    )
