"""Score aggregation functions.

Functions in this module build Gold-layer score summaries from the Clean
layer of normalized entries. Inputs are small enough to aggregate eagerly
with pandas on every report request.

Rules shared by every summary:
- A category bucket's score is ``round(sum / count, 2)``; a bucket with no
  entries is the sentinel ``"-"``, never 0.
- The combined figure (`average` / `overall`) is computed only when all
  three buckets are non-empty, as the rounded mean of the *unrounded*
  bucket averages; otherwise it is ``"-"``.
- Combined figures are always re-derived from the entries themselves, never
  from already-rounded rows.
"""
from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any

import pandas as pd

from esg_pipeline.clean.transform import entries_to_frame
from esg_pipeline.models import (
    CATEGORIES,
    SENTINEL,
    CompanyYearScore,
    NormalizedEntry,
    OverallSummary,
    Score,
    YearSummary,
)

UNKNOWN_COMPANY = "UNKNOWN"


def _require_sequence(entries: Any) -> None:
    if not isinstance(entries, Sequence) or isinstance(entries, (str, bytes)):
        raise TypeError(
            f"entries must be a sequence of NormalizedEntry, not {type(entries).__name__}"
        )


def _category_means(pdf: pd.DataFrame, keys: list[str]) -> dict[tuple[Any, ...], dict[str, float]]:
    """Return unrounded category means for every group of `keys`.

    Args:
        pdf: Entry frame with `category` and `value` columns plus `keys`.
        keys: Grouping columns (at least one).

    Returns:
        Mapping of key tuple → {category: mean} holding only non-empty buckets.
    """
    if pdf.empty:
        return {}

    group_cols = [*keys, "category"]
    grouped = pdf.groupby(group_cols, sort=True, dropna=False)["value"]
    stats = grouped.agg(["sum", "count"])
    # sum of value / count stays finite where the plain sum overflows
    shares = pdf.assign(value=pdf["value"] / grouped.transform("count"))
    stats["share"] = shares.groupby(group_cols, sort=True, dropna=False)["value"].sum()

    means: dict[tuple[Any, ...], dict[str, float]] = {}
    for idx, row in stats.iterrows():
        *key, category = idx
        count = int(row["count"])
        if count > 0:
            total = float(row["sum"])
            mean = total / count if math.isfinite(total) else float(row["share"])
            means.setdefault(tuple(key), {})[category] = mean
    return means


def _score_fields(means: Mapping[str, float]) -> tuple[dict[str, Score], Score]:
    """Round bucket means and apply the all-three gating rule.

    Returns:
        Tuple of (per-category scores, combined score).
    """
    scores: dict[str, Score] = {
        c: round(means[c], 2) if c in means else SENTINEL for c in CATEGORIES
    }
    if all(c in means for c in CATEGORIES):
        total = sum(means[c] for c in CATEGORIES)
        if math.isfinite(total):
            mean = total / len(CATEGORIES)
        else:
            mean = sum(means[c] / len(CATEGORIES) for c in CATEGORIES)
        combined: Score = round(mean, 2)
    else:
        combined = SENTINEL
    return scores, combined


def summarize_by_year(entries: Sequence[NormalizedEntry]) -> list[YearSummary]:
    """Return one `YearSummary` per observed year, ascending by year.

    Args:
        entries: Normalized entries from any number of years.

    Returns:
        List of YearSummary rows; empty when `entries` is empty.

    Raises:
        TypeError: if `entries` is not a sequence.
    """
    _require_sequence(entries)
    pdf = entries_to_frame(entries)

    rows: list[YearSummary] = []
    for (year,), means in sorted(_category_means(pdf, ["year"]).items()):
        scores, average = _score_fields(means)
        rows.append(YearSummary(year=int(year), average=average, **scores))
    return rows


def summarize_overall(entries: Sequence[NormalizedEntry]) -> OverallSummary:
    """Return category scores computed across every entry, all years combined.

    Args:
        entries: Normalized entries from any number of years.

    Returns:
        OverallSummary; every field is the sentinel when `entries` is empty.

    Raises:
        TypeError: if `entries` is not a sequence.
    """
    _require_sequence(entries)
    pdf = entries_to_frame(entries).assign(scope="all")

    means = _category_means(pdf, ["scope"]).get(("all",), {})
    scores, overall = _score_fields(means)
    return OverallSummary(overall=overall, **scores)


def summarize_by_company_year(entries: Sequence[NormalizedEntry]) -> list[CompanyYearScore]:
    """Return one score row per (company, year), sorted by company then year.

    Entries without a company name are grouped under ``"UNKNOWN"``.

    Raises:
        TypeError: if `entries` is not a sequence.
    """
    _require_sequence(entries)
    pdf = entries_to_frame(entries)
    pdf["company_name"] = pdf["company_name"].fillna(UNKNOWN_COMPANY).astype(str)

    rows: list[CompanyYearScore] = []
    for (company, year), means in sorted(_category_means(pdf, ["company_name", "year"]).items()):
        scores, overall = _score_fields(means)
        rows.append(
            CompanyYearScore(company_name=company, year=int(year), overall=overall, **scores)
        )
    return rows


def format_score(value: Score) -> str:
    """Format a score for display: two decimals, or the sentinel unchanged."""
    if value == SENTINEL:
        return SENTINEL
    return f"{float(value):.2f}"
