"""Pydantic models used for Raw, Clean and Gold validation.

Raw submissions are a tagged union on the `shape` field: a *flat* submission
carries a single `(category, metric, value)` triple while a *nested*
submission carries one metric mapping per category. Clean entries and Gold
summaries are the shapes handed to report views and exporters.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Union
from pydantic import BaseModel, Field, ConfigDict

Category = Literal["environmental", "social", "governance"]
CATEGORIES: tuple[Category, ...] = ("environmental", "social", "governance")

# Marker for "no entries observed"; never interchangeable with 0.
SENTINEL = "-"
Score = Union[float, Literal["-"]]

# Calendar years a reporting period may fall in
MIN_YEAR = 1
MAX_YEAR = 9999


class SubmissionBase(BaseModel):
    """Fields shared by both raw submission shapes.

    Attributes:
        company_name: Reporting company, passed through for display.
        sector: Company sector, passed through for display.
        region: Company region, passed through for display.
        reporting_year: Year the metrics are attributed to, as entered.
        timestamp: ISO-8601 submission time, as entered.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)
    company_name: str | None = Field(None, alias="companyName")
    sector: str | None = None
    region: str | None = None
    reporting_year: Any = Field(None, alias="reportingYear")
    timestamp: Any = None


class FlatSubmission(SubmissionBase):
    """One metric value for one category."""
    shape: Literal["flat"] = "flat"
    category: Any = None
    metric: Any = None
    value: Any = None


class NestedSubmission(SubmissionBase):
    """Metric-name → string-encoded value mappings, one per category."""
    shape: Literal["nested"] = "nested"
    environmental: dict[str, Any] | None = None
    social: dict[str, Any] | None = None
    governance: dict[str, Any] | None = None


RawSubmission = Annotated[
    Union[FlatSubmission, NestedSubmission],
    Field(discriminator="shape"),
]


class NormalizedEntry(BaseModel):
    """Canonical unit consumed by aggregation.

    Only `year`, `category` and `value` take part in averaging; the other
    fields are carried for display.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)
    year: int = Field(..., ge=MIN_YEAR, le=MAX_YEAR)
    category: Category
    value: float = Field(..., allow_inf_nan=False)
    metric: str | None = None
    company_name: str | None = None
    sector: str | None = None
    region: str | None = None


class YearSummary(BaseModel):
    """Per-year category averages and their combined average."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    year: int = Field(..., ge=MIN_YEAR, le=MAX_YEAR)
    environmental: Score
    social: Score
    governance: Score
    average: Score


class OverallSummary(BaseModel):
    """Category averages across every year combined."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    environmental: Score
    social: Score
    governance: Score
    overall: Score


class CompanyYearScore(BaseModel):
    """Derived score row for one company and reporting year."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    company_name: str
    year: int = Field(..., ge=MIN_YEAR, le=MAX_YEAR)
    environmental: Score
    social: Score
    governance: Score
    overall: Score


class ScoreReport(BaseModel):
    """Everything a report view needs from one aggregation run."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    years: list[YearSummary]
    overall: OverallSummary
    entry_count: int = Field(..., ge=0)
    generated_at: datetime
