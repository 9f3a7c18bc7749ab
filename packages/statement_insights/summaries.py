"""Debit/credit segment totals computed locally from canonical records.

These are the figures shown next to the model's insights (total spent, total
received, per-segment average and largest amount). They are derived from the
transactions themselves rather than trusted from the model. Records from
canonical sheets keep their own column names, so ``type`` and ``amount``
are looked up ignoring case.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from .ctv import record_value
from .models import Transactions
from .normalizers import is_populated, to_amount


@dataclass(frozen=True, slots=True)
class SegmentStats:
    count: int = 0
    total: float = 0.0
    average: float = 0.0
    largest: float = 0.0


@dataclass(frozen=True, slots=True)
class TransactionSummary:
    num_transactions: int
    debit: SegmentStats
    credit: SegmentStats

    @property
    def total_spent(self) -> float:
        return self.debit.total

    @property
    def total_received(self) -> float:
        return self.credit.total

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _record_type(record: Mapping[str, Any]) -> str:
    raw = record_value(record, "type") or ""
    return str(raw).strip().lower()


def _record_amount(record: Mapping[str, Any]) -> Decimal:
    raw = record_value(record, "amount")
    if not is_populated(raw):
        return Decimal(0)
    return Decimal(str(to_amount(raw)))


def _segment(amounts: list[Decimal]) -> SegmentStats:
    if not amounts:
        return SegmentStats()
    total = sum(amounts, Decimal(0))
    average = (total / len(amounts)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return SegmentStats(
        count=len(amounts),
        total=float(total),
        average=float(average),
        largest=float(max(amounts)),
    )


def summarize_transactions(transactions: Transactions) -> TransactionSummary:
    debits: list[Decimal] = []
    credits: list[Decimal] = []
    n = 0
    for record in transactions:
        n += 1
        kind = _record_type(record)
        if kind == "debit":
            debits.append(_record_amount(record))
        elif kind == "credit":
            credits.append(_record_amount(record))
    return TransactionSummary(
        num_transactions=n, debit=_segment(debits), credit=_segment(credits)
    )


__all__ = ["SegmentStats", "TransactionSummary", "summarize_transactions"]
