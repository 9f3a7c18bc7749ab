"""Single-pass ingestion: raw rows → format detection → canonical records.

The sheet is parsed once into raw rows. The header-first record view is
derived from those rows for detection; when the sheet is already canonical
the records pass through unchanged, otherwise the raw rows go to the
bank-statement normalizer.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Any, Literal, TypeAlias

from .config import DEFAULT_SELF_IDENTITY
from .ingest.detection import is_canonical
from .ingest.spreadsheet import read_rows, read_rows_from_bytes, records_from_rows
from .logging_setup import get_logger
from .models import TransactionRecord
from .normalizers import normalize_bank_statement

SourceFormat: TypeAlias = Literal["canonical", "bank_statement"]

_logger = get_logger("statement_insights.pipeline")


@dataclass(frozen=True, slots=True)
class IngestResult:
    """Outcome of ingesting one uploaded sheet.

    ``source_format`` records which path produced ``transactions``. An empty
    sheet is reported as ``"canonical"`` with no transactions; check
    :attr:`is_empty` before calling the insights model.
    """

    transactions: list[TransactionRecord]
    source_format: SourceFormat

    @property
    def is_empty(self) -> bool:
        return not self.transactions


def ingest_rows(
    rows: Sequence[Sequence[Any]],
    *,
    self_identity: str = DEFAULT_SELF_IDENTITY,
    id_factory: Callable[[], str] | None = None,
) -> IngestResult:
    """Detect the sheet shape and return canonical transaction records.

    Raises :class:`~statement_insights.errors.HeaderNotFoundError` when the
    sheet is not canonical and no bank-statement header row can be found.
    """

    records = records_from_rows(rows)
    if is_canonical(records):
        _logger.info("ingest:canonical records=%d", len(records))
        if not records:
            _logger.warning("ingest:empty_sheet")
        return IngestResult(transactions=records, source_format="canonical")

    _logger.info("ingest:bank_statement raw_rows=%d", len(rows))
    normalized = normalize_bank_statement(
        rows, self_identity=self_identity, id_factory=id_factory
    )
    return IngestResult(
        transactions=[t.to_record() for t in normalized],
        source_format="bank_statement",
    )


def ingest_file(
    path: str | PathLike[str],
    *,
    self_identity: str = DEFAULT_SELF_IDENTITY,
    id_factory: Callable[[], str] | None = None,
) -> IngestResult:
    rows = read_rows(Path(path))
    return ingest_rows(rows, self_identity=self_identity, id_factory=id_factory)


def ingest_bytes(
    data: bytes,
    filename: str,
    *,
    self_identity: str = DEFAULT_SELF_IDENTITY,
    id_factory: Callable[[], str] | None = None,
) -> IngestResult:
    """Ingest uploaded file contents (``filename`` selects the reader)."""

    rows = read_rows_from_bytes(data, filename)
    return ingest_rows(rows, self_identity=self_identity, id_factory=id_factory)


__all__ = ["IngestResult", "SourceFormat", "ingest_bytes", "ingest_file", "ingest_rows"]
