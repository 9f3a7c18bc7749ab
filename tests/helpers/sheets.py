"""Sample statement rows, a tiny ``.xlsx`` writer and an ``.xls`` book stand-in."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from openpyxl import Workbook
from xlrd.biffh import XL_CELL_DATE, XL_CELL_EMPTY, XL_CELL_NUMBER, XL_CELL_TEXT
from xlrd.sheet import Cell

_EXCEL_EPOCH = datetime(1899, 12, 30)

BANK_HEADER: list[Any] = [
    "Txn Date",
    "Value Date",
    "Description",
    "Ref No./Cheque No.",
    "Debit Amount",
    "Credit Amount",
    "Balance",
]

# A bank export with a preamble, one debit, one credit, one slash-less
# balance line, one row with no amounts, a blank separator and a total line.
BANK_ROWS: list[list[Any]] = [
    ["Account Name :", "DEEPAK KUMAR", None, None, None, None, None],
    ["Statement Period", "01-04-2024 to 30-04-2024", None, None, None, None, None],
    [None, None, None, None, None, None, None],
    BANK_HEADER,
    ["01 Apr 2024", "01 Apr 2024", "PUR/AMAZON/SHOPPING", "4101", 500, None, 9500],
    ["02 Apr 2024", "02 Apr 2024", "SAL/INFOSYS/SALARY", "4102", None, 1200, 10700],
    ["03 Apr 2024", "03 Apr 2024", "OPENING BALANCE", None, None, None, 10700],
    ["04 Apr 2024", "04 Apr 2024", "IMPS/RAHUL", "4104", None, None, 10700],
    [None, None, None, None, None, None, None],
    ["Total", None, None, None, 500, 1200, None],
]

CANONICAL_ROWS: list[list[Any]] = [
    ["Date", "Type", "Amount", "Description", "Category"],
    ["2024-04-01", "debit", 250, "Groceries at DMart", "Food"],
    ["2024-04-02", "credit", 1000, "Refund", ""],
]


def write_xlsx(path: Path, rows: Sequence[Sequence[Any]], *, title: str = "Sheet1") -> Path:
    wb = Workbook()
    ws = wb.active
    ws.title = title
    for row in rows:
        ws.append(list(row))
    wb.save(path)
    return path


class FakeXlsBook:
    """Stand-in for an ``xlrd`` Book holding one sheet of typed cells.

    Cells are real ``xlrd.sheet.Cell`` objects so the reader's cell-type
    handling runs unchanged; only the BIFF parsing is skipped.
    """

    datemode = 0

    def __init__(self, rows: Sequence[Sequence[Any]]) -> None:
        self.nsheets = 1
        self.released = False
        self._cells = [[_xls_cell(v) for v in row] for row in rows]

    def sheet_by_index(self, index: int) -> FakeXlsBook:
        assert index == 0
        return self

    @property
    def nrows(self) -> int:
        return len(self._cells)

    def row(self, i: int) -> list[Cell]:
        return self._cells[i]

    def release_resources(self) -> None:
        self.released = True


def _xls_cell(value: Any) -> Cell:
    if value is None:
        return Cell(XL_CELL_EMPTY, "")
    if isinstance(value, datetime):
        serial = (value - _EXCEL_EPOCH).total_seconds() / 86400
        return Cell(XL_CELL_DATE, serial)
    if isinstance(value, int | float):
        return Cell(XL_CELL_NUMBER, float(value))
    return Cell(XL_CELL_TEXT, str(value))
