"""Submission normalization.

Turns raw ESG submissions of either shape into flat `NormalizedEntry`
records. Normalization is lenient: a malformed record, metric or year never
raises, it simply contributes no entries. Only a caller passing something
that is not a sequence of records gets an exception.
"""
from __future__ import annotations

import logging
import numbers
import re
from collections.abc import Iterator, Mapping, Sequence
from datetime import date, datetime
from typing import Any

import numpy as np
import pandas as pd

from esg_pipeline.models import (
    CATEGORIES,
    MAX_YEAR,
    MIN_YEAR,
    FlatSubmission,
    NestedSubmission,
    NormalizedEntry,
    SubmissionBase,
)

log = logging.getLogger(__name__)

DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
YEAR_RE = re.compile(r"\d{4}", re.ASCII)

# Free-text key that lives beside the metrics in nested category mappings
DESCRIPTION_KEY = "description"


def parse_decimal(value: Any) -> float | None:
    """Parse a metric value as a finite number.

    Strings must be a complete decimal literal: surrounding whitespace and
    trailing characters (``"12kg"``) are rejected rather than partially
    parsed.

    Args:
        value: Raw metric value (number or string).

    Returns:
        The parsed float, or ``None`` when the value is not a finite number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        if not DECIMAL_RE.fullmatch(value):
            return None
    elif not isinstance(value, numbers.Real):
        return None

    try:
        number = float(value)
    except (OverflowError, ValueError):
        return None
    return number if np.isfinite(number) else None


def _timestamp_year(value: Any) -> int | None:
    if isinstance(value, (datetime, date)):
        return value.year
    if not isinstance(value, str) or not value.strip():
        return None
    # year in the stamp's own offset, not shifted to UTC
    stamp = pd.to_datetime(value, errors="coerce", format="ISO8601")
    if pd.isna(stamp):
        return None
    return int(stamp.year)


def _parse_year(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        number = float(value)
        return int(number) if np.isfinite(number) and number.is_integer() else None
    if isinstance(value, str) and YEAR_RE.fullmatch(value):
        return int(value)
    return None


def resolve_year(submission: SubmissionBase, today: date) -> int | None:
    """Return the reporting year a submission's metrics belong to.

    Resolution order: the calendar year of a parseable `timestamp`, then the
    `reporting_year` field, then the current year. A `reporting_year` that is
    present but not a year, or any year outside 1..9999, makes the submission
    unresolvable.

    Args:
        submission: Classified raw submission.
        today: Date used for the current-year fallback.

    Returns:
        Year as int, or ``None`` when the submission should be dropped.
    """
    year = _timestamp_year(submission.timestamp)
    if year is None:
        if submission.reporting_year not in (None, ""):
            year = _parse_year(submission.reporting_year)
        else:
            year = today.year

    if year is None or not MIN_YEAR <= year <= MAX_YEAR:
        return None
    return year


def _first(record: Mapping[str, Any], *keys: str) -> Any:
    """Return the first non-None value among `keys` (field aliases)."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _text(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return str(value)


def classify_submission(record: Any) -> FlatSubmission | NestedSubmission | None:
    """Classify a raw record as a flat or nested submission.

    A record is nested when any category key holds a mapping (an empty
    mapping still counts); otherwise it is flat. Field aliases used by the
    data API rows (`reporting_year`, `metric_name`, `metric_value`) are
    accepted.

    Args:
        record: One raw submission as decoded from JSON or MongoDB.

    Returns:
        `FlatSubmission`, `NestedSubmission`, or ``None`` for records that
        are not mappings at all.
    """
    if not isinstance(record, Mapping):
        return None

    common = {
        "company_name": _text(_first(record, "companyName", "company_name")),
        "sector": _text(record.get("sector")),
        "region": _text(record.get("region")),
        "reporting_year": _first(record, "reportingYear", "reporting_year"),
        "timestamp": record.get("timestamp"),
    }

    if any(isinstance(record.get(c), Mapping) for c in CATEGORIES):
        metrics = {
            c: {str(k): v for k, v in record[c].items()}
            for c in CATEGORIES
            if isinstance(record.get(c), Mapping)
        }
        return NestedSubmission(**common, **metrics)

    return FlatSubmission(
        **common,
        category=record.get("category"),
        metric=_first(record, "metric", "metric_name"),
        value=_first(record, "value", "metric_value"),
    )


def _expand_nested(submission: NestedSubmission, year: int) -> Iterator[NormalizedEntry]:
    for category in CATEGORIES:
        metrics = getattr(submission, category)
        if not metrics:
            continue
        for metric, raw in metrics.items():
            if metric == DESCRIPTION_KEY or raw == "":
                continue
            value = parse_decimal(raw)
            if value is None:
                continue
            yield NormalizedEntry(
                year=year,
                category=category,
                value=value,
                metric=metric,
                company_name=submission.company_name,
                sector=submission.sector,
                region=submission.region,
            )


def _expand_flat(submission: FlatSubmission, year: int) -> Iterator[NormalizedEntry]:
    if not isinstance(submission.category, str):
        return
    category = submission.category.lower()
    if category not in CATEGORIES:
        return
    value = parse_decimal(submission.value)
    if value is None:
        return
    yield NormalizedEntry(
        year=year,
        category=category,
        value=value,
        metric=_text(submission.metric),
        company_name=submission.company_name,
        sector=submission.sector,
        region=submission.region,
    )


def normalize_submission(record: Any, today: date | None = None) -> list[NormalizedEntry]:
    """Expand one raw submission into zero or more normalized entries.

    Args:
        record: Raw submission mapping (flat or nested shape).
        today: Date for the current-year fallback (defaults to today).

    Returns:
        Entries in source order; empty for malformed records.
    """
    submission = classify_submission(record)
    if submission is None:
        return []

    year = resolve_year(submission, today or date.today())
    if year is None:
        return []

    if isinstance(submission, NestedSubmission):
        return list(_expand_nested(submission, year))
    return list(_expand_flat(submission, year))


def normalize_submissions(
    records: Sequence[Any],
    today: date | None = None,
) -> list[NormalizedEntry]:
    """Normalize a snapshot of raw submissions.

    Args:
        records: Sequence of raw submission mappings.
        today: Date for the current-year fallback, fixed once for the whole
            snapshot (defaults to today).

    Returns:
        Flat list of entries, in input order.

    Raises:
        TypeError: if `records` is not a sequence.
    """
    if not isinstance(records, Sequence) or isinstance(records, (str, bytes)):
        raise TypeError(
            f"records must be a sequence of submissions, not {type(records).__name__}"
        )

    today = today or date.today()
    entries: list[NormalizedEntry] = []
    empty = 0
    for record in records:
        produced = normalize_submission(record, today)
        if not produced:
            empty += 1
        entries.extend(produced)

    log.debug(
        "Normalized %d submissions into %d entries (%d contributed none)",
        len(records),
        len(entries),
        empty,
    )
    return entries
