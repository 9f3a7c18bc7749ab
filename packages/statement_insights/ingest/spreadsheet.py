"""Read the first worksheet of a statement file into raw rows.

Every reader returns ``list[list[Any]]``: one list of cell values per sheet
row, with empty cells as ``None``. No header is assumed at this layer; the
record view used for format detection is derived from the same rows by
:func:`records_from_rows`, so a file is only ever parsed once.

Supported inputs
----------------
- ``.xlsx`` / ``.xlsm`` via ``openpyxl`` (first worksheet, cached values).
- ``.xls`` (legacy BIFF workbooks) via ``xlrd``; date cells become
  ``datetime`` and whole numbers become ``int`` to match the ``openpyxl`` rows.
- ``.csv`` via the stdlib :mod:`csv` module (UTF-8 with BOM tolerated,
  Latin-1 fallback).
"""

from __future__ import annotations

import csv
import io
import zipfile
from collections.abc import Iterable, Sequence
from os import PathLike
from pathlib import Path
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from xlrd import open_workbook
from xlrd.biffh import (
    XL_CELL_BLANK,
    XL_CELL_BOOLEAN,
    XL_CELL_DATE,
    XL_CELL_EMPTY,
    XL_CELL_ERROR,
    XL_CELL_NUMBER,
    XLRDError,
)
from xlrd.compdoc import CompDocError
from xlrd.xldate import XLDateError, xldate_as_datetime

from ..errors import UnsupportedSpreadsheetError
from ..logging_setup import get_logger

SUPPORTED_EXTENSIONS: frozenset[str] = frozenset({".xlsx", ".xlsm", ".xls", ".csv"})

_logger = get_logger("statement_insights.ingest.spreadsheet")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _extension(filename: str | PathLike[str]) -> str:
    ext = Path(filename).suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise UnsupportedSpreadsheetError(
            f"Unsupported spreadsheet type {ext or '(none)'!r}; "
            f"expected one of: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
        )
    return ext


def _decode_bytes(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        # Latin-1 maps every byte, so this cannot fail.
        return data.decode("latin-1")


def _rows_from_csv_text(text: str) -> list[list[Any]]:
    with io.StringIO(text, newline="") as f:
        return [[None if cell == "" else cell for cell in row] for row in csv.reader(f)]


def _rows_from_workbook(source: Any, label: str) -> list[list[Any]]:
    try:
        wb = load_workbook(source, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as e:
        raise UnsupportedSpreadsheetError(f"Unable to read workbook {label}: {e}") from e
    try:
        if not wb.worksheets:
            return []
        ws = wb.worksheets[0]
        return [list(row) for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def _xls_cell(cell: Any, datemode: int) -> Any:
    if cell.ctype in (XL_CELL_EMPTY, XL_CELL_BLANK, XL_CELL_ERROR):
        return None
    if cell.ctype == XL_CELL_DATE:
        try:
            return xldate_as_datetime(cell.value, datemode)
        except XLDateError:
            return cell.value
    if cell.ctype == XL_CELL_NUMBER:
        value = float(cell.value)
        return int(value) if value.is_integer() else value
    if cell.ctype == XL_CELL_BOOLEAN:
        return bool(cell.value)
    return None if cell.value == "" else cell.value


def _rows_from_xls(data: bytes, label: str) -> list[list[Any]]:
    try:
        book = open_workbook(file_contents=data, on_demand=True)
    except (XLRDError, CompDocError) as e:
        raise UnsupportedSpreadsheetError(f"Unable to read workbook {label}: {e}") from e
    try:
        if book.nsheets == 0:
            return []
        sheet = book.sheet_by_index(0)
        return [
            [_xls_cell(cell, book.datemode) for cell in sheet.row(i)]
            for i in range(sheet.nrows)
        ]
    finally:
        book.release_resources()


def read_rows_from_bytes(data: bytes, filename: str) -> list[list[Any]]:
    """Parse uploaded file contents; ``filename`` selects the format."""

    ext = _extension(filename)
    if ext == ".csv":
        rows = _rows_from_csv_text(_decode_bytes(data))
    elif ext == ".xls":
        rows = _rows_from_xls(data, filename)
    else:
        rows = _rows_from_workbook(io.BytesIO(data), filename)
    _logger.debug("spreadsheet:read file=%s rows=%d", filename, len(rows))
    return rows


def read_rows(path: str | PathLike[str]) -> list[list[Any]]:
    """Read ``path`` into raw rows.

    Raises ``FileNotFoundError``/``PermissionError`` as-is and
    :class:`~statement_insights.errors.UnsupportedSpreadsheetError` for unknown
    extensions or unreadable workbooks.
    """

    p = Path(path)
    ext = _extension(p)
    if ext == ".csv":
        rows = _rows_from_csv_text(_decode_bytes(p.read_bytes()))
    elif ext == ".xls":
        rows = _rows_from_xls(p.read_bytes(), str(p))
    else:
        if not p.exists():
            raise FileNotFoundError(f"No such file: {p}")
        rows = _rows_from_workbook(p, str(p))
    _logger.debug("spreadsheet:read file=%s rows=%d", p.name, len(rows))
    return rows


def records_from_rows(rows: Iterable[Sequence[Any]]) -> list[dict[str, Any]]:
    """Derive the header-first record view of ``rows``.

    - The first non-blank row is the header; its non-blank cells become keys
      (coerced to ``str``). Blank header cells drop their column.
    - Subsequent rows that are entirely blank are skipped.
    - Empty cells are omitted from each record rather than mapped to ``None``.
    """

    header: list[str | None] | None = None
    records: list[dict[str, Any]] = []
    for row in rows:
        if header is None:
            if all(_is_blank(v) for v in row):
                continue
            header = [None if _is_blank(v) else str(v) for v in row]
            continue
        if all(_is_blank(v) for v in row):
            continue
        record: dict[str, Any] = {}
        for key, value in zip(header, row, strict=False):
            if key is None or _is_blank(value):
                continue
            record[key] = value
        if record:
            records.append(record)
    return records


__all__ = [
    "SUPPORTED_EXTENSIONS",
    "read_rows",
    "read_rows_from_bytes",
    "records_from_rows",
]
