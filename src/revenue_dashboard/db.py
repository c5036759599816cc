"""MongoDB client helpers.

Centralizes creation of Mongo clients for the Mongo-backed repository.
"""

from __future__ import annotations

from typing import Any

import certifi
from pymongo import MongoClient
from pymongo.database import Database


def get_client(uri: str, tls: bool | None = None) -> MongoClient:
    """Return a configured PyMongo MongoClient for the provided URI.

    Args:
        uri: MongoDB connection URI.
        tls: Force TLS on or off. By default TLS (with the certifi CA bundle)
            is used for ``mongodb+srv://`` URIs only, so a local replica set
            works without certificates.

    Returns:
        Configured MongoClient instance.
    """
    if tls is None:
        tls = uri.startswith("mongodb+srv://")

    options: dict[str, Any] = {
        "serverSelectionTimeoutMS": 30000,
        "socketTimeoutMS": 30000,
        "connectTimeoutMS": 30000,
    }
    if tls:
        options.update(tls=True, tlsCAFile=certifi.where())

    return MongoClient(uri, **options)


def get_db(
    client: MongoClient[dict[str, Any]],
    db_name: str,
) -> Database[dict[str, Any]]:
    """Return the named Database instance from a MongoClient."""
    return client[db_name]
