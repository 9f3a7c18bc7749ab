"""Canonical Transaction View (CTV) model.

A normalized bank-statement row. Field order (exact, also the serialized
order used for the insights table):

    - date: raw ``Txn Date`` cell value, or ``""``
    - transaction_id: 8-character uppercase alphanumeric label
    - sender / receiver: counterparty names oriented by the self-identity
    - category: last slash-delimited description segment, or ``""``
    - amount: numeric amount (``0`` for unclassified rows)
    - type: ``"debit"``, ``"credit"`` or ``"unknown"``
    - balance_after_transaction: raw ``Balance`` cell value, or ``""``
    - description: original description text

Records leave the package as plain mappings with camelCase keys
(``transactionId``, ``balanceAfterTransaction``) so they line up with sheets
that are already in canonical shape and pass through untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

TransactionType: TypeAlias = Literal["debit", "credit", "unknown"]

CTV_FIELD_ORDER: tuple[str, ...] = (
    "date",
    "transactionId",
    "sender",
    "receiver",
    "category",
    "amount",
    "type",
    "balanceAfterTransaction",
    "description",
)


@dataclass(frozen=True, slots=True)
class CanonicalTransaction:
    """A single normalized transaction.

    ``date`` and ``balance_after_transaction`` keep the raw cell value (a
    string, number or ``datetime`` depending on the source sheet) because the
    bank exports do not agree on a format.
    """

    date: Any
    transaction_id: str
    sender: str
    receiver: str
    category: str
    amount: int | float
    type: TransactionType
    balance_after_transaction: Any
    description: str

    def to_record(self) -> dict[str, Any]:
        """Return the camelCase mapping form, in :data:`CTV_FIELD_ORDER`."""

        return {
            "date": self.date,
            "transactionId": self.transaction_id,
            "sender": self.sender,
            "receiver": self.receiver,
            "category": self.category,
            "amount": self.amount,
            "type": self.type,
            "balanceAfterTransaction": self.balance_after_transaction,
            "description": self.description,
        }


def _field_token(name: Any) -> str:
    return str(name).lower().replace(" ", "").replace("_", "")


def record_value(record: Mapping[str, Any], field: str) -> Any:
    """Return the value of ``field`` in ``record``, or ``None``.

    Pass-through sheets keep their own column names, so keys are compared
    ignoring case, spaces and underscores (``Type``, ``TYPE`` and ``type``
    all match ``type``; ``Transaction ID`` matches ``transactionId``). An
    exact key wins over a loose match.
    """

    if field in record:
        return record[field]
    wanted = _field_token(field)
    for key, value in record.items():
        if _field_token(key) == wanted:
            return value
    return None


__all__ = ["CTV_FIELD_ORDER", "CanonicalTransaction", "TransactionType", "record_value"]
