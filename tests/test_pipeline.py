# ruff: noqa: I001
from pathlib import Path

import pytest

import statement_insights.ingest.spreadsheet as spreadsheet_mod
import statement_insights.pipeline as pipeline_mod
from statement_insights.ctv import CTV_FIELD_ORDER
from statement_insights.errors import HeaderNotFoundError
from statement_insights.pipeline import ingest_bytes, ingest_file, ingest_rows
from tests.helpers.sheets import BANK_ROWS, CANONICAL_ROWS, FakeXlsBook, write_xlsx


def test_canonical_sheet_passes_through_unchanged(monkeypatch: pytest.MonkeyPatch) -> None:
    def _boom(*a, **kw):
        raise AssertionError("normalizer must not run for canonical sheets")

    monkeypatch.setattr(pipeline_mod, "normalize_bank_statement", _boom)
    result = ingest_rows(CANONICAL_ROWS)
    assert result.source_format == "canonical"
    assert result.transactions[0] == {
        "Date": "2024-04-01",
        "Type": "debit",
        "Amount": 250,
        "Description": "Groceries at DMart",
        "Category": "Food",
    }
    assert len(result.transactions) == 2


def test_bank_statement_is_normalized_to_camel_case_records() -> None:
    result = ingest_rows(BANK_ROWS, self_identity="DEEPAK")
    assert result.source_format == "bank_statement"
    assert len(result.transactions) == 3
    first = result.transactions[0]
    assert tuple(first.keys()) == CTV_FIELD_ORDER
    assert first["type"] == "debit"
    assert first["receiver"] == "AMAZON"


def test_empty_sheet_yields_zero_transactions() -> None:
    result = ingest_rows([])
    assert result.is_empty
    assert result.source_format == "canonical"


def test_missing_header_raises() -> None:
    rows = [["Date", "Narration", "Withdrawal"], ["01/04", "UPI/X/Y", 10]]
    with pytest.raises(HeaderNotFoundError):
        ingest_rows(rows)


def test_ingest_file_xlsx(tmp_path: Path) -> None:
    path = write_xlsx(tmp_path / "bank.xlsx", BANK_ROWS)
    result = ingest_file(path, self_identity="ASHA")
    credit = result.transactions[1]
    assert credit["type"] == "credit"
    assert credit["amount"] == 1200
    assert credit["receiver"] == "ASHA"
    assert credit["sender"] == "INFOSYS"


def test_ingest_bytes_csv_bank_statement() -> None:
    text = (
        "Statement for,DEEPAK,,,\n"
        "Txn Date,Description,Debit Amount,Credit Amount,Balance\n"
        '02 Apr 2024,UPI/SWIGGY/FOOD,"1,250.00",,"8,750.00"\n'
        "03 Apr 2024,Closing balance,,,8750\n"
    )
    result = ingest_bytes(text.encode(), "bank.csv")
    (tx,) = result.transactions
    assert tx["amount"] == 1250
    assert tx["category"] == "FOOD"
    assert tx["balanceAfterTransaction"] == "8,750.00"
    assert tx["date"] == "02 Apr 2024"


def test_ingest_bytes_legacy_xls_bank_statement(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(spreadsheet_mod, "open_workbook", lambda **kw: FakeXlsBook(BANK_ROWS))
    result = ingest_bytes(b"biff", "statement.xls")
    assert result.source_format == "bank_statement"
    assert [t["type"] for t in result.transactions] == ["debit", "credit", "unknown"]
    assert result.transactions[0]["amount"] == 500


def test_upper_case_canonical_headers_pass_through() -> None:
    rows = [["TYPE", "AMOUNT", "DESCRIPTION"], ["debit", 250, "x"]]
    result = ingest_rows(rows)
    assert result.source_format == "canonical"
    assert result.transactions == [{"TYPE": "debit", "AMOUNT": 250, "DESCRIPTION": "x"}]
