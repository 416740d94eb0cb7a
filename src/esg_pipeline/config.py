"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads environment variables (after loading `.env` from the project root) and
checks that the submission source and poll interval are usable.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

from dotenv import load_dotenv

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

SOURCES = ("file", "api", "mongo")


@dataclass(frozen=True)
class Settings:
    """Container for pipeline configuration read from the environment.

    Attributes:
        source: Where raw submissions are read from (`file`, `api`, `mongo`).
        data_file: Local JSON key-value store holding submissions.
        store_key: Key under which the submissions array is stored.
        api_url: Base URL of the ESG data API.
        user_id: User whose submissions are requested from the API.
        mongo_uri: MongoDB connection URI.
        mongo_db: Target MongoDB database name.
        poll_seconds: Interval between refreshes in `watch` mode.
    """
    source: str
    data_file: Path
    store_key: str
    api_url: str
    user_id: str
    mongo_uri: str
    mongo_db: str
    poll_seconds: float


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if `ESG_SOURCE` is unknown or `ESG_POLL_SECONDS` is not
            a positive number.
    """
    source = os.getenv("ESG_SOURCE", "file").strip().lower()
    if source not in SOURCES:
        raise RuntimeError(
            f"ESG_SOURCE must be one of {', '.join(SOURCES)} (got {source!r})."
        )

    raw_poll = os.getenv("ESG_POLL_SECONDS", "30").strip()
    try:
        poll_seconds = float(raw_poll)
    except ValueError:
        poll_seconds = 0.0
    if poll_seconds <= 0:
        raise RuntimeError(
            f"ESG_POLL_SECONDS must be a positive number of seconds (got {raw_poll!r})."
        )

    return Settings(
        source=source,
        data_file=Path(os.getenv("ESG_DATA_FILE", "data/esg_store.json")),
        store_key=os.getenv("ESG_STORE_KEY", "esgData"),
        api_url=os.getenv("ESG_API_URL", "http://localhost:3001/api").rstrip("/"),
        user_id=os.getenv("ESG_USER_ID", "admin@esgenius.com"),
        mongo_uri=os.getenv("MONGO_URI", "mongodb://localhost:27017"),
        mongo_db=os.getenv("MONGO_DB", "esg"),
        poll_seconds=poll_seconds,
    )
