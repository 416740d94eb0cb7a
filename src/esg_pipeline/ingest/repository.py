"""Submission repositories.

The aggregation pipeline reads raw submissions through the small
`SubmissionRepository` protocol so it never depends on where records live.
Every implementation returns a fresh list snapshot of plain dict records in
the shape the data entry forms and the data API already produce.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Protocol
from urllib.parse import quote

log = logging.getLogger(__name__)


class SubmissionRepository(Protocol):
    """Protocol for any source of raw ESG submissions."""

    def list_submissions(self) -> list[dict[str, Any]]:
        """Return a snapshot of every stored raw submission.

        Returns:
            List of raw submission mappings (flat or nested shape).
        """
        ...


class InMemorySubmissionRepository:
    """Repository over records held in memory (fixtures, tests, imports)."""

    def __init__(self, records: Iterable[dict[str, Any]] = ()) -> None:
        self._records = list(records)

    def list_submissions(self) -> list[dict[str, Any]]:
        return [dict(r) for r in self._records]


class JsonFileSubmissionRepository:
    """Local key-value store: a JSON object holding the submissions array under one key.

    Attributes:
        path: JSON file location.
        key: Key under which the submissions array is stored.
    """

    def __init__(self, path: Path, key: str = "esgData") -> None:
        self.path = path
        self.key = key

    def list_submissions(self) -> list[dict[str, Any]]:
        """Return the stored array, or an empty list when the file or key is absent.

        Raises:
            ValueError: if the file is not a JSON object or the value stored
                under `key` is not a JSON array.
        """
        if not self.path.exists():
            log.info("Submission store %s not found; treating as empty", self.path)
            return []

        store = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        if not isinstance(store, dict):
            raise ValueError(f"{self.path}: submission store must be a JSON object")
        records = store.get(self.key, [])
        if not isinstance(records, list):
            raise ValueError(
                f"{self.path}: value under {self.key!r} must be a JSON array"
            )
        return records


class ApiSubmissionRepository:
    """Read submissions from the ESG data API (`GET {base_url}/esg/data/{user_id}`).

    The endpoint returns either a bare JSON array of rows or an object with a
    `data` array; both are accepted.
    """

    def __init__(
        self,
        base_url: str,
        user_id: str,
        session: Any = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_id = user_id
        self.timeout = timeout
        if session is None:
            import requests  # type: ignore[import-untyped]  # local import to avoid requiring type stubs at module import
            session = requests.Session()
        self._session = session

    def url(self) -> str:
        return f"{self.base_url}/esg/data/{quote(self.user_id, safe='')}"

    def list_submissions(self) -> list[dict[str, Any]]:
        """Fetch the user's submissions.

        Raises:
            requests.HTTPError: if the API answers with a non-2xx status.
            ValueError: if the payload is neither an array nor has a `data` array.
        """
        url = self.url()
        log.info("Fetching submissions from %s", url)
        r = self._session.get(url, headers={"Accept": "application/json"}, timeout=self.timeout)
        r.raise_for_status()

        payload = r.json()
        if isinstance(payload, dict):
            payload = payload.get("data", [])
        if not isinstance(payload, list):
            raise ValueError(f"Unexpected payload from {url}: {type(payload).__name__}")
        log.info("Fetched %d submissions", len(payload))
        return payload


class MongoSubmissionRepository:
    """Read raw submission documents from a MongoDB collection."""

    def __init__(self, collection: Any, query: dict[str, Any] | None = None) -> None:
        self.collection = collection
        self.query = query or {}

    def list_submissions(self) -> list[dict[str, Any]]:
        return list(self.collection.find(self.query, {"_id": False}))
