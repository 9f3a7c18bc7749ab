"""Spreadsheet ingestion: raw row readers and the canonical-shape detector."""

from .detection import CANONICAL_COLUMNS, is_canonical
from .spreadsheet import (
    SUPPORTED_EXTENSIONS,
    read_rows,
    read_rows_from_bytes,
    records_from_rows,
)

__all__ = [
    "CANONICAL_COLUMNS",
    "SUPPORTED_EXTENSIONS",
    "is_canonical",
    "read_rows",
    "read_rows_from_bytes",
    "records_from_rows",
]
