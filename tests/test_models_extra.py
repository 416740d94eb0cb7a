from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError
from esg_pipeline.models import (
    FlatSubmission,
    NestedSubmission,
    NormalizedEntry,
    RawSubmission,
    YearSummary,
)


def test_raw_submission_union_dispatches_on_shape() -> None:
    adapter = TypeAdapter(RawSubmission)
    nested = adapter.validate_python(
        {"shape": "nested", "companyName": "A", "environmental": {"scope1": "100"}}
    )
    flat = adapter.validate_python({"shape": "flat", "category": "social", "value": "3"})
    assert isinstance(nested, NestedSubmission)
    assert nested.company_name == "A"
    assert isinstance(flat, FlatSubmission)


def test_raw_submission_union_rejects_unknown_shape() -> None:
    with pytest.raises(ValidationError):
        TypeAdapter(RawSubmission).validate_python({"shape": "tabular"})


def test_normalized_entry_rejects_unknown_category_and_non_finite_value() -> None:
    with pytest.raises(ValidationError):
        NormalizedEntry(year=2023, category="economic", value=1.0)
    with pytest.raises(ValidationError):
        NormalizedEntry(year=2023, category="social", value=float("inf"))


def test_year_summary_accepts_sentinel_but_not_other_text() -> None:
    row = YearSummary(year=2023, environmental="-", social=1.5, governance=2.0, average="-")
    assert row.environmental == "-"
    with pytest.raises(ValidationError):
        YearSummary(year=2023, environmental="n/a", social=1.5, governance=2.0, average="-")


@pytest.mark.parametrize("year", [0, 10**20])
def test_year_fields_reject_years_outside_calendar_range(year: int) -> None:
    with pytest.raises(ValidationError):
        NormalizedEntry(year=year, category="social", value=1.0)
    with pytest.raises(ValidationError):
        YearSummary(year=year, environmental="-", social="-", governance="-", average="-")
