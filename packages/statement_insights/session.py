"""In-memory holder for the current upload's transactions.

Each upload replaces the stored list wholesale; there is no merging and no
persistence. Uploads that finish concurrently resolve last-writer-wins: the
list from whichever :meth:`TransactionStore.replace` call runs last is kept.
The generation counter lets callers tell which upload produced the state
they are looking at.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from os import PathLike

from .config import Settings, load_settings
from .logging_setup import get_logger
from .models import Insights, TransactionRecord, Transactions
from .pipeline import IngestResult, ingest_bytes, ingest_file

_logger = get_logger("statement_insights.session")


@dataclass(frozen=True, slots=True)
class StoreSnapshot:
    generation: int
    transactions: tuple[TransactionRecord, ...]


class TransactionStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._generation = 0
        self._transactions: tuple[TransactionRecord, ...] = ()

    def replace(self, transactions: Transactions) -> int:
        """Swap in a new transaction list and return its generation number."""

        items = tuple(transactions)
        with self._lock:
            self._generation += 1
            self._transactions = items
            gen = self._generation
        _logger.debug("store:replaced generation=%d transactions=%d", gen, len(items))
        return gen

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return StoreSnapshot(generation=self._generation, transactions=self._transactions)

    @property
    def transactions(self) -> list[TransactionRecord]:
        return list(self.snapshot().transactions)

    def clear(self) -> None:
        self.replace(())


@dataclass
class StatementSession:
    """One user's working state: settings, current transactions, last insights.

    Ingestion failures (e.g. a missing header row) leave the previously
    stored transactions untouched.
    """

    settings: Settings = field(default_factory=load_settings)
    store: TransactionStore = field(default_factory=TransactionStore)
    insights: Insights | None = None

    def upload_file(self, path: str | PathLike[str]) -> IngestResult:
        result = ingest_file(path, self_identity=self.settings.self_identity)
        self._accept(result)
        return result

    def upload_bytes(self, data: bytes, filename: str) -> IngestResult:
        result = ingest_bytes(data, filename, self_identity=self.settings.self_identity)
        self._accept(result)
        return result

    def _accept(self, result: IngestResult) -> None:
        self.store.replace(result.transactions)
        self.insights = None

    def generate_insights(self, **kwargs) -> Insights:
        """Call the insights model on the stored transactions and keep the result."""

        from .insights import generate_insights

        self.insights = generate_insights(
            self.store.transactions, model=self.settings.model, **kwargs
        )
        return self.insights


__all__ = ["StatementSession", "StoreSnapshot", "TransactionStore"]
