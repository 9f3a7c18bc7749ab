# ruff: noqa: I001
import threading
from pathlib import Path

import pytest

import statement_insights.insights as insights_mod
from statement_insights.api import analyze_statement
from statement_insights.config import Settings
from statement_insights.errors import HeaderNotFoundError
from statement_insights.session import StatementSession, TransactionStore
from tests.helpers.openai_stub import OpenAIStub
from tests.helpers.sheets import BANK_ROWS, CANONICAL_ROWS, write_xlsx


# ---- Store -------------------------------------------------------------------


def test_store_replace_is_wholesale() -> None:
    store = TransactionStore()
    assert store.replace([{"n": 1}, {"n": 2}]) == 1
    assert store.replace([{"n": 3}]) == 2
    snap = store.snapshot()
    assert snap.generation == 2
    assert snap.transactions == ({"n": 3},)
    store.clear()
    assert store.transactions == []
    assert store.snapshot().generation == 3


def test_concurrent_replacements_last_writer_wins() -> None:
    store = TransactionStore()
    barrier = threading.Barrier(8)
    results: dict[int, int] = {}

    def _upload(i: int) -> None:
        barrier.wait()
        results[i] = store.replace([{"upload": i}] * (i + 1))

    threads = [threading.Thread(target=_upload, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    snap = store.snapshot()
    assert snap.generation == 8
    assert sorted(results.values()) == list(range(1, 9))
    # The surviving list is exactly the one written by the last replace call.
    winner = next(i for i, gen in results.items() if gen == snap.generation)
    assert list(snap.transactions) == [{"upload": winner}] * (winner + 1)


# ---- Session -----------------------------------------------------------------


def test_upload_replaces_previous_transactions(tmp_path: Path) -> None:
    session = StatementSession(settings=Settings(self_identity="MEERA"))
    session.upload_file(write_xlsx(tmp_path / "bank.xlsx", BANK_ROWS))
    assert [t["sender"] for t in session.store.transactions][:1] == ["MEERA"]

    session.upload_file(write_xlsx(tmp_path / "canon.xlsx", CANONICAL_ROWS))
    assert len(session.store.transactions) == 2
    assert session.store.snapshot().generation == 2


def test_failed_upload_keeps_previous_state(tmp_path: Path) -> None:
    session = StatementSession(settings=Settings())
    session.upload_file(write_xlsx(tmp_path / "bank.xlsx", BANK_ROWS))
    before = session.store.snapshot()

    bad = "Date,Narration\n01/04,UPI/X/Y\n".encode()
    with pytest.raises(HeaderNotFoundError):
        session.upload_bytes(bad, "bad.csv")
    assert session.store.snapshot() == before


def test_generate_insights_uses_stored_transactions_and_model(tmp_path: Path) -> None:
    stub = OpenAIStub()
    session = StatementSession(settings=Settings(model="gpt-mini"))
    session.upload_file(write_xlsx(tmp_path / "bank.xlsx", BANK_ROWS))
    ins = session.generate_insights(client=stub)
    assert session.insights is ins
    assert stub.calls[0]["model"] == "gpt-mini"
    assert "PUR/AMAZON/SHOPPING" in stub.calls[0]["input"]

    session.upload_file(write_xlsx(tmp_path / "canon.xlsx", CANONICAL_ROWS))
    assert session.insights is None


# ---- analyze_statement -------------------------------------------------------


def test_analyze_statement_end_to_end(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    stub = OpenAIStub()
    monkeypatch.setattr(insights_mod, "OpenAI", lambda: stub)
    analysis = analyze_statement(write_xlsx(tmp_path / "bank.xlsx", BANK_ROWS))

    assert analysis.ingest.source_format == "bank_statement"
    assert analysis.summary.total_spent == 500
    assert analysis.summary.total_received == 1200
    assert analysis.insights.top_merchants[0].merchant == "AMAZON"
    assert len(stub.calls) == 1


def test_analyze_statement_without_insights(tmp_path: Path) -> None:
    stub = OpenAIStub()
    analysis = analyze_statement(
        write_xlsx(tmp_path / "bank.xlsx", BANK_ROWS), with_insights=False, client=stub
    )
    assert analysis.insights.is_empty
    assert stub.calls == []


def test_analyze_statement_empty_sheet_skips_insights(tmp_path: Path) -> None:
    stub = OpenAIStub()
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")
    analysis = analyze_statement(path, client=stub)
    assert analysis.ingest.is_empty
    assert analysis.summary.num_transactions == 0
    assert stub.calls == []


def test_analyze_statement_missing_header_makes_no_call(tmp_path: Path) -> None:
    stub = OpenAIStub()
    path = tmp_path / "odd.csv"
    path.write_text("Date,Narration\n01/04,UPI/X/Y\n", encoding="utf-8")
    with pytest.raises(HeaderNotFoundError):
        analyze_statement(path, client=stub)
    assert stub.calls == []
