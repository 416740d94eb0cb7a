from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import requests
from esg_pipeline.ingest.repository import (
    ApiSubmissionRepository,
    InMemorySubmissionRepository,
    JsonFileSubmissionRepository,
    MongoSubmissionRepository,
)


class FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> Any:
        return self._payload


class FakeSession:
    def __init__(self, response: FakeResponse) -> None:
        self.response = response
        self.calls: list[str] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append(url)
        return self.response


class FakeCollection:
    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self.docs = docs
        self.queries: list[tuple[dict[str, Any], dict[str, Any]]] = []

    def find(self, query: dict[str, Any], projection: dict[str, Any]) -> list[dict[str, Any]]:
        self.queries.append((query, projection))
        return [dict(d) for d in self.docs]


def test_in_memory_repository_returns_copies() -> None:
    repo = InMemorySubmissionRepository(
        [{"category": "social", "value": "1"}, {"category": "governance", "value": "2"}]
    )
    snapshot = repo.list_submissions()
    snapshot[0]["value"] = "999"
    assert [r["value"] for r in repo.list_submissions()] == ["1", "2"]


def test_json_file_repository_reads_array_under_key(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"esgData": [{"category": "social", "value": "1"}], "theme": "dark"}))
    assert JsonFileSubmissionRepository(path).list_submissions() == [{"category": "social", "value": "1"}]


def test_json_file_repository_missing_file_or_key_is_empty(tmp_path: Path) -> None:
    assert JsonFileSubmissionRepository(tmp_path / "absent.json").list_submissions() == []
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"other": []}))
    assert JsonFileSubmissionRepository(path).list_submissions() == []


def test_json_file_repository_rejects_non_array(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"esgData": {"category": "social"}}))
    with pytest.raises(ValueError):
        JsonFileSubmissionRepository(path).list_submissions()


@pytest.mark.parametrize("content", ["[]", '[{"category": "social"}]', "42", "null"])
def test_json_file_repository_rejects_non_object_store(tmp_path: Path, content: str) -> None:
    path = tmp_path / "store.json"
    path.write_text(content)
    with pytest.raises(ValueError):
        JsonFileSubmissionRepository(path).list_submissions()


def test_api_repository_encodes_user_and_accepts_both_payloads() -> None:
    rows = [{"companyName": "A", "reporting_year": 2023, "category": "social",
             "metric_name": "x", "metric_value": 4}]
    session = FakeSession(FakeResponse(rows))
    repo = ApiSubmissionRepository("http://esg.local/api/", "admin@esgenius.com", session=session)
    assert repo.list_submissions() == rows
    assert session.calls == ["http://esg.local/api/esg/data/admin%40esgenius.com"]

    wrapped = ApiSubmissionRepository("http://esg.local/api", "u", session=FakeSession(FakeResponse({"data": rows})))
    assert wrapped.list_submissions() == rows


def test_api_repository_raises_on_http_error() -> None:
    repo = ApiSubmissionRepository("http://esg.local/api", "u", session=FakeSession(FakeResponse({}, 500)))
    with pytest.raises(requests.HTTPError):
        repo.list_submissions()


def test_api_repository_rejects_unexpected_payload() -> None:
    repo = ApiSubmissionRepository("http://esg.local/api", "u", session=FakeSession(FakeResponse("oops")))
    with pytest.raises(ValueError):
        repo.list_submissions()


def test_mongo_repository_drops_object_ids() -> None:
    coll = FakeCollection([{"category": "social", "value": "1"}])
    repo = MongoSubmissionRepository(coll, query={"userId": "alice"})
    assert repo.list_submissions() == [{"category": "social", "value": "1"}]
    assert coll.queries == [({"userId": "alice"}, {"_id": False})]
