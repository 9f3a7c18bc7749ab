"""Bank-statement rows → Canonical Transaction View.

Bank exports put a preamble (account holder, branch, statement period) above
the real column header and interleave subtotal and blank rows with the
transactions. The normalizer therefore works on raw rows:

1. Locate the header row: the first row whose cells include every marker in
   :data:`HEADER_MARKERS` (exact, case-sensitive, any order).
2. Zip each following row against the header to get a labeled row.
3. Keep only rows whose ``Description`` contains a ``/``. Structured bank
   descriptions look like ``UPI/AMAZON/SHOPPING``; rows without a slash are
   not transactions and are dropped silently.
4. Split the description into counterparty (second segment) and category
   (last segment, only when there are three or more segments), classify the
   row as debit/credit/unknown and orient sender/receiver around the
   configured self-identity.

A missing header is the only hard failure
(:class:`~statement_insights.errors.HeaderNotFoundError`); every row-level gap
degrades to empty strings.
"""

from __future__ import annotations

import math
import random
import string
from collections.abc import Callable, Iterator, Mapping, Sequence
from decimal import Decimal, InvalidOperation
from typing import Any, TypeAlias

from .config import DEFAULT_SELF_IDENTITY
from .ctv import CanonicalTransaction
from .errors import HeaderNotFoundError
from .logging_setup import get_logger

DESCRIPTION_COLUMN = "Description"
DEBIT_COLUMN = "Debit Amount"
CREDIT_COLUMN = "Credit Amount"
BALANCE_COLUMN = "Balance"
DATE_COLUMN = "Txn Date"

HEADER_MARKERS: tuple[str, ...] = (DESCRIPTION_COLUMN, DEBIT_COLUMN, CREDIT_COLUMN)

TRANSACTION_ID_LENGTH = 8
_ID_ALPHABET = string.digits + string.ascii_uppercase

_CURRENCY_TOKENS: tuple[str, ...] = ("INR", "Rs.", "Rs", "₹", "$")

_logger = get_logger("statement_insights.normalizers")

LabeledRow: TypeAlias = dict[str, Any]


# ---------------------------------------------------------------------------
# Helpers (ids, amounts, descriptions)
# ---------------------------------------------------------------------------


def generate_transaction_id(rng: random.Random | None = None) -> str:
    """Return an 8-character uppercase base-36 label.

    Labels are for display and scanning, not keys: there is no global
    uniqueness guarantee.
    """

    r = rng or random
    return "".join(r.choices(_ID_ALPHABET, k=TRANSACTION_ID_LENGTH))


def _parse_number(raw: Any) -> Decimal | None:
    """Parse a cell into a ``Decimal``; ``None`` when it is not numeric."""

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int | float):
        if isinstance(raw, float) and not math.isfinite(raw):
            return None
        return Decimal(str(raw))
    if isinstance(raw, Decimal):
        return raw
    if not isinstance(raw, str):
        return None

    s = raw.strip()
    negative = False
    if s.startswith("(") and s.endswith(")") and len(s) >= 2:
        negative = True
        s = s[1:-1].strip()
    for token in _CURRENCY_TOKENS:
        s = s.replace(token, "")
    s = s.replace(",", "").strip()
    if s.startswith("-"):
        negative = True
        s = s[1:].strip()
    elif s.startswith("+"):
        s = s[1:].strip()
    if not s:
        return None
    try:
        d = Decimal(s)
    except InvalidOperation:
        return None
    if not d.is_finite():
        return None
    return -d if negative else d


def is_populated(value: Any) -> bool:
    """Truthiness for amount cells: not empty, not blank, not a zero amount."""

    if value is None:
        return False
    if isinstance(value, str):
        if not value.strip():
            return False
        parsed = _parse_number(value)
        # Non-numeric text still marks the column as used.
        return parsed is None or parsed != 0
    parsed = _parse_number(value)
    if parsed is None:
        return bool(value) and not (isinstance(value, float) and math.isnan(value))
    return parsed != 0


def to_amount(raw: Any) -> int | float:
    """Coerce an amount cell to a number; unparseable values become ``0``."""

    if isinstance(raw, int | float) and not isinstance(raw, bool):
        return raw
    d = _parse_number(raw)
    if d is None:
        _logger.warning("normalize:amount_unparseable value=%r", raw)
        return 0
    if d == d.to_integral_value():
        return int(d)
    return float(d)


def split_description(description: str) -> tuple[str, str]:
    """Return ``(counterparty, category)`` from a slash-delimited description.

    - ``counterparty`` is the second segment, trimmed (``""`` if absent).
    - ``category`` is the last segment, trimmed, only when there are at least
      three segments; otherwise ``""``.
    """

    parts = description.split("/")
    counterparty = parts[1].strip() if len(parts) > 1 else ""
    category = parts[-1].strip() if len(parts) > 2 else ""
    return counterparty, category


def _description_text(row: Mapping[str, Any]) -> str:
    value = row.get(DESCRIPTION_COLUMN)
    return "" if value is None else str(value)


# ---------------------------------------------------------------------------
# Header location and labeling
# ---------------------------------------------------------------------------


def locate_header_row(rows: Sequence[Sequence[Any]]) -> int:
    """Return the index of the first row carrying every header marker.

    Raises :class:`HeaderNotFoundError` when no row qualifies.
    """

    for idx, row in enumerate(rows):
        cells = set(cell for cell in row if isinstance(cell, str))
        if all(marker in cells for marker in HEADER_MARKERS):
            return idx
    raise HeaderNotFoundError(HEADER_MARKERS)


def label_rows(header: Sequence[Any], rows: Sequence[Sequence[Any]]) -> list[LabeledRow]:
    """Zip each row against ``header`` by position.

    Header cells become keys as-is; rows shorter than the header map the
    trailing keys to ``None``. Cells past the end of the header are ignored.
    """

    labeled: list[LabeledRow] = []
    for row in rows:
        obj: LabeledRow = {}
        for i, key in enumerate(header):
            obj[key] = row[i] if i < len(row) else None
        labeled.append(obj)
    return labeled


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------


class BankStatementNormalizer:
    """Normalize raw bank-statement rows into :class:`CanonicalTransaction`.

    Usage
    -----
    normalizer = BankStatementNormalizer(self_identity="DEEPAK")
    txs = normalizer.normalize(rows)  # -> list[CanonicalTransaction]

    ``id_factory`` produces transaction ids; ids repeated within one pass are
    redrawn so every transaction from the same upload gets a distinct label.
    """

    _MAX_ID_DRAWS = 32

    def __init__(
        self,
        *,
        self_identity: str = DEFAULT_SELF_IDENTITY,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        if not self_identity.strip():
            raise ValueError("self_identity must be a non-empty string")
        self.self_identity = self_identity
        self._id_factory = id_factory or generate_transaction_id

    def normalize(self, rows: Sequence[Sequence[Any]]) -> list[CanonicalTransaction]:
        header_idx = locate_header_row(rows)
        header = rows[header_idx]
        labeled = label_rows(header, rows[header_idx + 1 :])
        _logger.info(
            "normalize:header_found row=%d data_rows=%d", header_idx, len(labeled)
        )

        kept = [r for r in labeled if "/" in _description_text(r)]
        dropped = len(labeled) - len(kept)
        if dropped:
            _logger.debug("normalize:rows_dropped count=%d", dropped)

        out = list(self._to_ctv(kept))
        unknown = sum(1 for t in out if t.type == "unknown")
        _logger.info(
            "normalize:done transactions=%d dropped=%d unknown=%d",
            len(out),
            dropped,
            unknown,
        )
        return out

    def _next_id(self, issued: set[str]) -> str:
        tx_id = self._id_factory()
        draws = 1
        while tx_id in issued and draws < self._MAX_ID_DRAWS:
            tx_id = self._id_factory()
            draws += 1
        issued.add(tx_id)
        return tx_id

    def _to_ctv(self, rows: Sequence[LabeledRow]) -> Iterator[CanonicalTransaction]:
        issued: set[str] = set()
        for r in rows:
            description = _description_text(r)
            counterparty, category = split_description(description)

            debit = r.get(DEBIT_COLUMN)
            credit = r.get(CREDIT_COLUMN)
            balance = r.get(BALANCE_COLUMN) or ""
            date = r.get(DATE_COLUMN) or ""

            if is_populated(debit):
                tx_type = "debit"
                amount = to_amount(debit)
                sender, receiver = self.self_identity, counterparty
            elif is_populated(credit):
                tx_type = "credit"
                amount = to_amount(credit)
                sender, receiver = counterparty, self.self_identity
            else:
                tx_type = "unknown"
                amount = 0
                sender = receiver = ""

            yield CanonicalTransaction(
                date=date,
                transaction_id=self._next_id(issued),
                sender=sender,
                receiver=receiver,
                category=category,
                amount=amount,
                type=tx_type,
                balance_after_transaction=balance,
                description=description,
            )


def normalize_bank_statement(
    rows: Sequence[Sequence[Any]],
    *,
    self_identity: str = DEFAULT_SELF_IDENTITY,
    id_factory: Callable[[], str] | None = None,
) -> list[CanonicalTransaction]:
    """Functional wrapper around :class:`BankStatementNormalizer`."""

    return BankStatementNormalizer(
        self_identity=self_identity, id_factory=id_factory
    ).normalize(rows)


__all__ = [
    "HEADER_MARKERS",
    "TRANSACTION_ID_LENGTH",
    "BankStatementNormalizer",
    "generate_transaction_id",
    "is_populated",
    "label_rows",
    "locate_header_row",
    "normalize_bank_statement",
    "split_description",
    "to_amount",
]
