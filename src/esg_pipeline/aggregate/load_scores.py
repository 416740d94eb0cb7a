"""Utilities for loading derived score rows into MongoDB.

Score rows are small (one per company and year) and are upserted into a
dedicated collection so other consumers can read them without re-running the
aggregation. This module centralizes the upsert strategy and logging.
"""

from __future__ import annotations

from typing import Any, Sequence
import logging
from pymongo import UpdateOne

from esg_pipeline.models import CompanyYearScore

log = logging.getLogger(__name__)

SCORES_COLLECTION = "esg_scores"
SCORE_KEY_FIELDS = ("company_name", "year")


def load_company_scores(
    rows: Sequence[CompanyYearScore],
    collection: Any,
) -> int:
    """Upsert company/year score rows into MongoDB.

    Rows are keyed on `(company_name, year)`, so re-running the load after new
    submissions replaces the previous scores instead of duplicating them.
    Sentinel scores are stored as ``"-"`` to keep "no data" distinct from 0.

    Args:
        rows: Score rows from `summarize_by_company_year`.
        collection: Target PyMongo collection.

    Returns:
        Number of rows written.
    """
    if not rows:
        log.warning("No score rows to load into %s", collection.name)
        return 0

    ops = []
    for row in rows:
        doc = row.model_dump()
        query = {k: doc[k] for k in SCORE_KEY_FIELDS}
        ops.append(UpdateOne(query, {"$set": doc}, upsert=True))

    collection.bulk_write(ops, ordered=False)

    log.info("Score load complete for %s: %d rows", collection.name, len(ops))
    return len(ops)
