"""Public orchestration for ``statement_insights``.

:func:`analyze_statement` runs the whole flow for one file: ingest (detect
and normalize), local segment summary, then the insights call. A missing
header row aborts before any model call.
"""

from __future__ import annotations

from dataclasses import dataclass
from os import PathLike
from typing import Any

from .config import Settings, load_settings
from .models import Insights
from .pipeline import IngestResult
from .session import StatementSession
from .summaries import TransactionSummary, summarize_transactions


@dataclass(frozen=True, slots=True)
class StatementAnalysis:
    ingest: IngestResult
    summary: TransactionSummary
    insights: Insights


def analyze_statement(
    path: str | PathLike[str],
    *,
    settings: Settings | None = None,
    with_insights: bool = True,
    client: Any | None = None,
) -> StatementAnalysis:
    """Ingest ``path`` and derive its summary and (optionally) model insights.

    The insights call is skipped, leaving an empty :class:`Insights`, when
    ``with_insights`` is false or the sheet yielded no transactions.
    """

    session = StatementSession(settings=settings or load_settings())
    result = session.upload_file(path)
    summary = summarize_transactions(result.transactions)
    if with_insights and not result.is_empty:
        insights = session.generate_insights(client=client)
    else:
        insights = Insights.empty()
    return StatementAnalysis(ingest=result, summary=summary, insights=insights)


__all__ = ["StatementAnalysis", "analyze_statement"]
