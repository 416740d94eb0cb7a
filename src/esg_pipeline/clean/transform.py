"""Frame conversions and partitioned normalization.

`normalize_ddf` applies the submission normalizer partition-wise using Dask
so large submission collections can be flattened without materializing them
in one pandas frame. The output schema matches `NormalizedEntry`.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable

import numpy as np
import pandas as pd

from esg_pipeline.clean.normalize import normalize_submissions
from esg_pipeline.models import NormalizedEntry

log = logging.getLogger(__name__)

ENTRY_COLUMNS = list(NormalizedEntry.model_fields)
ENTRY_DTYPES = {"year": "int64", "value": "float64"}


def entries_to_frame(entries: Iterable[NormalizedEntry]) -> pd.DataFrame:
    """Return a pandas DataFrame with one row per entry.

    The frame always carries every `NormalizedEntry` column, even when empty,
    so it can be used as Dask `meta`.
    """
    pdf = pd.DataFrame([e.model_dump() for e in entries], columns=ENTRY_COLUMNS)
    return pdf.astype(ENTRY_DTYPES)


def _missing(value: Any) -> bool:
    if value is None or value is pd.NaT:
        return True
    return isinstance(value, float) and np.isnan(value)


def entries_from_frame(pdf: pd.DataFrame) -> list[NormalizedEntry]:
    """Materialize a frame of entry columns back into `NormalizedEntry` objects."""
    entries: list[NormalizedEntry] = []
    for rec in pdf.to_dict(orient="records"):
        text = {k: (None if _missing(rec.get(k)) else rec.get(k))
                for k in ("metric", "company_name", "sector", "region")}
        entries.append(
            NormalizedEntry(
                year=int(rec["year"]),
                category=rec["category"],
                value=float(rec["value"]),
                **text,
            )
        )
    return entries


def normalize_ddf(ddf: Any, today: date | None = None) -> Any:
    """Normalize a Dask DataFrame of raw submission documents.

    Each row is one raw submission; nested category mappings live in object
    columns. Cells that pandas filled with NaN (a field absent from that
    document) are treated as absent fields.

    Args:
        ddf: Dask DataFrame of raw submissions.
        today: Date for the current-year fallback, shared by all partitions.

    Returns:
        Dask DataFrame with the `NormalizedEntry` columns.
    """
    log.info("Starting normalize_ddf over %d partitions", ddf.npartitions)
    today = today or date.today()

    def _normalize_partition(pdf: pd.DataFrame) -> pd.DataFrame:
        """Partition-level normalization applied via map_partitions."""
        records = [
            {k: v for k, v in rec.items() if not _missing(v)}
            for rec in pdf.to_dict(orient="records")
        ]
        return entries_to_frame(normalize_submissions(records, today))

    return ddf.map_partitions(_normalize_partition, meta=entries_to_frame([]))
