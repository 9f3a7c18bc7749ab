"""Data models and type aliases for ``statement_insights``.

Transactions travel through the package as plain mappings. Sheets already in
canonical shape pass through with whatever extra columns they carry, so the
record type stays an opaque ``Mapping[str, Any]``; normalized bank rows are
produced as :class:`~statement_insights.ctv.CanonicalTransaction` and turned
into mappings at the pipeline boundary.

The insights models mirror the JSON object requested from the model. Every
top-level key defaults to an empty container so a partial response still
renders.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------------------------------------------------------------------------
# Core record and collections
# ---------------------------------------------------------------------------

TransactionRecord: TypeAlias = Mapping[str, Any]
"""A single transaction: canonical keys plus any extra sheet columns."""

Transactions: TypeAlias = Iterable[TransactionRecord]

RawRow: TypeAlias = Sequence[Any]
"""One spreadsheet row as positional cell values (``None`` for empty)."""


# ---------------------------------------------------------------------------
# Insights returned by the model
# ---------------------------------------------------------------------------


class _InsightItem(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class ChartInsight(_InsightItem):
    label: str = ""
    amount: float | None = None


class MonthlyTrend(_InsightItem):
    month: str = ""
    amount: float | None = None


class TopMerchant(_InsightItem):
    merchant: str = ""
    amount: float | None = None


class Anomaly(_InsightItem):
    date: str = ""
    description: str = ""
    amount: float | None = None


class InsightsSummary(_InsightItem):
    total_spent: float | None = None
    average_transaction: float | None = None
    num_transactions: int | None = None
    highest_category: str | None = None


class Insights(BaseModel):
    """Structured insights for one uploaded statement.

    Notes
    -----
    - ``summary`` defaults to an all-``None`` :class:`InsightsSummary`; the
      serialized form of an empty object is ``{}`` via
      ``model_dump(exclude_none=True)``.
    """

    model_config = ConfigDict(extra="ignore")

    chart_insights: list[ChartInsight] = Field(default_factory=list)
    monthly_trends: list[MonthlyTrend] = Field(default_factory=list)
    top_merchants: list[TopMerchant] = Field(default_factory=list)
    anomalies: list[Anomaly] = Field(default_factory=list)
    summary: InsightsSummary = Field(default_factory=InsightsSummary)
    reports: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _null_keys_to_defaults(cls, data: Any) -> Any:
        # A key present with ``null`` falls back to its empty default.
        if isinstance(data, Mapping):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @classmethod
    def empty(cls) -> Insights:
        return cls()

    @property
    def is_empty(self) -> bool:
        return self == Insights()


INSIGHT_KEYS: tuple[str, ...] = tuple(Insights.model_fields)


__all__ = [
    "INSIGHT_KEYS",
    "Anomaly",
    "ChartInsight",
    "Insights",
    "InsightsSummary",
    "MonthlyTrend",
    "RawRow",
    "TopMerchant",
    "TransactionRecord",
    "Transactions",
]
