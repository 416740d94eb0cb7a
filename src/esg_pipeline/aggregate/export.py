"""Export helpers for year-over-year score summaries.

Exports keep the sentinel distinct from a computed zero: a category with no
data is written as ``-``, never ``0.00``.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import pandas as pd

from esg_pipeline.aggregate.build_scores import format_score
from esg_pipeline.models import CATEGORIES, YearSummary

log = logging.getLogger(__name__)

SUMMARY_COLUMNS = ["year", *CATEGORIES, "average"]


def year_summaries_to_frame(rows: Sequence[YearSummary]) -> pd.DataFrame:
    """Return a display frame with scores formatted as strings.

    Args:
        rows: YearSummary rows, typically from `summarize_by_year`.

    Returns:
        pandas.DataFrame with columns `year`, `environmental`, `social`,
        `governance`, `average`.
    """
    records = [
        {"year": r.year, **{c: format_score(getattr(r, c)) for c in SUMMARY_COLUMNS[1:]}}
        for r in rows
    ]
    return pd.DataFrame(records, columns=SUMMARY_COLUMNS)


def write_year_summaries_csv(rows: Sequence[YearSummary], path: Path) -> Path:
    """Write YearSummary rows to a CSV file and return its path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    year_summaries_to_frame(rows).to_csv(path, index=False)
    log.info("Wrote %d year summaries to %s", len(rows), path)
    return path
