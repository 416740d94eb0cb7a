"""MongoDB helpers.

Centralizes creation of Mongo clients for the submission repository and the
score loader.
"""

from __future__ import annotations

from typing import Any
from pymongo import MongoClient
from pymongo.database import Database

import certifi


def get_client(uri: str) -> MongoClient:
    """Return a configured PyMongo MongoClient for the provided URI.

    Atlas-style ``mongodb+srv://`` URIs get TLS with the certifi CA bundle;
    plain local URIs connect without TLS.

    Args:
        uri: MongoDB connection URI.

    Returns:
        Configured MongoClient instance.
    """
    options: dict[str, Any] = {
        "serverSelectionTimeoutMS": 30000,
        "socketTimeoutMS": 30000,
        "connectTimeoutMS": 30000,
    }
    if uri.startswith("mongodb+srv://"):
        options["tls"] = True
        options["tlsCAFile"] = certifi.where()
    return MongoClient(uri, **options)


def get_db(
    client: MongoClient[dict[str, Any]],
    db_name: str,
) -> Database[dict[str, Any]]:
    """Return the named Database instance from a MongoClient.

    Args:
        client: PyMongo MongoClient.
        db_name: Database name.

    Returns:
        A Database object.
    """
    return client[db_name]
