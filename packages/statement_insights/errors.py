"""Exception types raised across the ingestion and insights flows."""

from __future__ import annotations


class StatementError(ValueError):
    """Base class for statement ingestion failures surfaced to the user."""


class UnsupportedSpreadsheetError(StatementError):
    """The file extension is not handled or the workbook could not be read."""


class HeaderNotFoundError(StatementError):
    """No row carries all of the bank-statement header markers.

    Non-recoverable for the current file: no transactions are produced.
    """

    def __init__(self, markers: tuple[str, ...]) -> None:
        self.markers = markers
        quoted = ", ".join(f'"{m}"' for m in markers)
        super().__init__(f"Could not find a header row containing {quoted}.")


class InsightsError(RuntimeError):
    """Terminal failure calling the insights model (transport or API error)."""


__all__ = [
    "HeaderNotFoundError",
    "InsightsError",
    "StatementError",
    "UnsupportedSpreadsheetError",
]
