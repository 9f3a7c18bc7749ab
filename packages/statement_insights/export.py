"""Write canonical transactions to a formatted ``.xlsx`` or ``.csv`` table."""

from __future__ import annotations

import csv
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from os import PathLike
from pathlib import Path
from typing import Any

from openpyxl import Workbook

from .ctv import CTV_FIELD_ORDER, record_value
from .errors import UnsupportedSpreadsheetError
from .logging_setup import get_logger
from .models import Transactions

EXPORT_SHEET_TITLE = "Formatted"

# Display header for each CTV field, in CTV_FIELD_ORDER.
EXPORT_HEADERS: tuple[str, ...] = (
    "Date",
    "Transaction ID",
    "Sender",
    "Receiver",
    "Category",
    "Amount",
    "Type",
    "Balance After Transaction",
    "Description",
)

_logger = get_logger("statement_insights.export")


def _export_row(record: Mapping[str, Any]) -> list[Any]:
    row: list[Any] = []
    for key in CTV_FIELD_ORDER:
        value = record_value(record, key)
        if key == "type" and isinstance(value, str):
            value = value.capitalize()
        row.append("" if value is None else value)
    return row


def _csv_cell(value: Any) -> Any:
    if isinstance(value, datetime | date):
        return value.isoformat()
    return value


def export_formatted(transactions: Transactions, path: str | PathLike[str]) -> Path:
    """Write ``transactions`` to ``path`` and return the resolved path.

    The suffix selects the format: ``.xlsx`` writes a single sheet titled
    ``Formatted``; ``.csv`` writes UTF-8 CSV. Both use :data:`EXPORT_HEADERS`.
    """

    p = Path(path)
    ext = p.suffix.lower()
    rows: Sequence[list[Any]] = [_export_row(r) for r in transactions]

    if ext == ".xlsx":
        wb = Workbook()
        ws = wb.active
        ws.title = EXPORT_SHEET_TITLE
        ws.append(list(EXPORT_HEADERS))
        for row in rows:
            ws.append(row)
        wb.save(p)
    elif ext == ".csv":
        with p.open("w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(EXPORT_HEADERS)
            for row in rows:
                writer.writerow([_csv_cell(v) for v in row])
    else:
        raise UnsupportedSpreadsheetError(
            f"Unsupported export type {ext or '(none)'!r}; expected .xlsx or .csv"
        )

    _logger.info("export:written path=%s rows=%d", p, len(rows))
    return p


__all__ = ["EXPORT_HEADERS", "EXPORT_SHEET_TITLE", "export_formatted"]
