from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd
from pymongo import UpdateOne
from esg_pipeline.aggregate.export import write_year_summaries_csv, year_summaries_to_frame
from esg_pipeline.aggregate.load_scores import load_company_scores
from esg_pipeline.models import CompanyYearScore, YearSummary

ROWS = [
    YearSummary(year=2023, environmental=75.0, social=10.0, governance="-", average="-"),
    YearSummary(year=2024, environmental=15.0, social=30.0, governance=40.0, average=28.33),
]


class FakeCollection:
    name = "esg_scores"

    def __init__(self) -> None:
        self.writes: list[list[Any]] = []

    def bulk_write(self, ops: list[Any], ordered: bool = True) -> None:
        self.writes.append(list(ops))


def test_year_summary_frame_formats_scores() -> None:
    pdf = year_summaries_to_frame(ROWS)
    assert list(pdf.columns) == ["year", "environmental", "social", "governance", "average"]
    assert pdf.loc[0, "environmental"] == "75.00"
    assert pdf.loc[0, "governance"] == "-"
    assert pdf.loc[1, "average"] == "28.33"


def test_csv_export_never_prints_zero_for_missing(tmp_path: Path) -> None:
    out = write_year_summaries_csv(ROWS, tmp_path / "reports" / "scores.csv")
    pdf = pd.read_csv(out, dtype=str, keep_default_na=False)
    assert pdf["governance"].tolist() == ["-", "40.00"]
    assert pdf["average"].tolist() == ["-", "28.33"]


def test_load_company_scores_upserts_on_company_and_year() -> None:
    rows = [
        CompanyYearScore(company_name="A", year=2023, environmental=75.0,
                         social=10.0, governance="-", overall="-"),
    ]
    coll = FakeCollection()
    assert load_company_scores(rows, coll) == 1
    assert coll.writes == [[
        UpdateOne(
            {"company_name": "A", "year": 2023},
            {"$set": rows[0].model_dump()},
            upsert=True,
        )
    ]]


def test_load_company_scores_skips_empty_input() -> None:
    coll = FakeCollection()
    assert load_company_scores([], coll) == 0
    assert coll.writes == []
