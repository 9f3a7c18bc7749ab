"""Public interface for the ``statement_insights`` package.

Bank-statement spreadsheets are read into raw rows, detected as either
already-canonical or a bank export, normalized into canonical transaction
records, and handed to an LLM for descriptive insights. This module only
re-exports the stable import surface.
"""

from .api import StatementAnalysis, analyze_statement
from .config import Settings, load_settings
from .ctv import CanonicalTransaction
from .errors import (
    HeaderNotFoundError,
    InsightsError,
    StatementError,
    UnsupportedSpreadsheetError,
)
from .export import export_formatted
from .ingest import is_canonical, read_rows, read_rows_from_bytes, records_from_rows
from .insights import generate_insights, parse_insights_text
from .models import Insights, TransactionRecord, Transactions
from .normalizers import BankStatementNormalizer, normalize_bank_statement
from .pipeline import IngestResult, ingest_bytes, ingest_file, ingest_rows
from .session import StatementSession, TransactionStore
from .summaries import TransactionSummary, summarize_transactions

__all__ = [
    # API
    "analyze_statement",
    "export_formatted",
    "generate_insights",
    "ingest_bytes",
    "ingest_file",
    "ingest_rows",
    "is_canonical",
    "load_settings",
    "normalize_bank_statement",
    "parse_insights_text",
    "read_rows",
    "read_rows_from_bytes",
    "records_from_rows",
    "summarize_transactions",
    # Models / types
    "BankStatementNormalizer",
    "CanonicalTransaction",
    "IngestResult",
    "Insights",
    "Settings",
    "StatementAnalysis",
    "StatementSession",
    "TransactionRecord",
    "TransactionStore",
    "TransactionSummary",
    "Transactions",
    # Errors
    "HeaderNotFoundError",
    "InsightsError",
    "StatementError",
    "UnsupportedSpreadsheetError",
]
