"""End-to-end score report construction.

`build_score_report` reads one snapshot from a submission repository,
normalizes it, and runs both aggregations. It holds no state between calls,
so concurrent callers each get a report consistent with their own snapshot.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any, cast

import dask
import dask.dataframe as dd
import pandas as pd

from esg_pipeline.aggregate.build_scores import summarize_by_year, summarize_overall
from esg_pipeline.clean.normalize import normalize_submissions
from esg_pipeline.clean.transform import entries_from_frame, normalize_ddf
from esg_pipeline.config import Settings
from esg_pipeline.db import get_client, get_db
from esg_pipeline.ingest.repository import (
    ApiSubmissionRepository,
    JsonFileSubmissionRepository,
    MongoSubmissionRepository,
    SubmissionRepository,
)
from esg_pipeline.models import NormalizedEntry, ScoreReport

log = logging.getLogger(__name__)

SUBMISSIONS_COLLECTION = "raw_submissions"


def repository_from_settings(settings: Settings) -> SubmissionRepository:
    """Return the submission repository selected by `settings.source`."""
    if settings.source == "api":
        return ApiSubmissionRepository(settings.api_url, settings.user_id)
    if settings.source == "mongo":
        db = get_db(get_client(settings.mongo_uri), settings.mongo_db)
        return MongoSubmissionRepository(db[SUBMISSIONS_COLLECTION])
    return JsonFileSubmissionRepository(settings.data_file, settings.store_key)


def normalize_partitioned(
    records: list[dict[str, Any]],
    npartitions: int,
    today: date | None = None,
) -> list[NormalizedEntry]:
    """Normalize a large snapshot partition-wise with Dask.

    Nested category mappings are kept as Python objects, so Dask's automatic
    string conversion is disabled for the whole computation. Records that are
    not mappings contribute nothing, as in `normalize_submissions`.
    """
    rows = [r for r in records if isinstance(r, Mapping)]
    if not rows:
        return []

    with dask.config.set({"dataframe.convert-string": False}):
        dd_mod = cast(Any, dd)
        ddf = dd_mod.from_pandas(pd.DataFrame(rows), npartitions=max(1, npartitions))
        pdf = normalize_ddf(ddf, today).compute()
    return entries_from_frame(pdf)


def build_score_report(
    repository: SubmissionRepository,
    today: date | None = None,
    npartitions: int = 1,
) -> ScoreReport:
    """Read, normalize and aggregate one snapshot of submissions.

    Args:
        repository: Source of raw submissions.
        today: Date for the current-year fallback (defaults to today).
        npartitions: Normalize with Dask across this many partitions when > 1.

    Returns:
        ScoreReport with the year series and the all-years summary.
    """
    records = repository.list_submissions()
    if npartitions > 1:
        entries = normalize_partitioned(records, npartitions, today)
    else:
        entries = normalize_submissions(records, today)

    years = summarize_by_year(entries)
    overall = summarize_overall(entries)
    log.info(
        "Built score report: %d submissions, %d entries, %d years",
        len(records),
        len(entries),
        len(years),
    )
    return ScoreReport(
        years=years,
        overall=overall,
        entry_count=len(entries),
        generated_at=datetime.now(timezone.utc),
    )
