"""Prompt construction and transaction serialization for the insights call.

This module builds:
- A CSV rendering of the transaction list (header row = keys of the first
  record; every value JSON-encoded so strings are quoted and escaped).
- The system and user prompts.
- The strict ``response_format`` (JSON Schema) object for the OpenAI
  Responses API, covering the seven insight keys.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from openai.types.responses.response_format_text_json_schema_config_param import (
    ResponseFormatTextJSONSchemaConfigParam,
)

from .models import TransactionRecord

BEGIN_MARKER = "BEGIN_TRANSACTIONS_CSV"
END_MARKER = "END_TRANSACTIONS_CSV"


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return str(value)


def _csv_value(value: Any) -> str:
    # Falsy values (None, "", 0) render as an empty quoted string.
    return json.dumps(value or "", ensure_ascii=False, default=_json_default)


def transactions_to_csv(transactions: Sequence[TransactionRecord]) -> str:
    """Serialize records to CSV text; ``""`` when there are no records.

    Columns are the keys of the first record, in order. Keys missing from a
    later record render as ``""``.
    """

    if not transactions:
        return ""
    headers = list(transactions[0].keys())
    lines = [",".join(str(h) for h in headers)]
    for row in transactions:
        lines.append(",".join(_csv_value(row.get(h)) for h in headers))
    return "\n".join(lines)


def build_system_instructions() -> str:
    return (
        "You are a financial assistant analyzing a bank statement. Use only the "
        "transactions provided. Amounts are in the statement's currency. Output JSON "
        "only that conforms to the specified schema; do not wrap it in markdown."
    )


def build_user_content(csv_data: str) -> str:
    """Embed the CSV between BEGIN_/END_ markers and describe each insight key."""

    return (
        "Analyze this transaction history (CSV):\n"
        f"{BEGIN_MARKER}\n{csv_data}\n{END_MARKER}\n\n"
        "Return:\n"
        "- chart_insights: spending per category as {label, amount}\n"
        "- monthly_trends: spending per month (YYYY-MM) as {month, amount}\n"
        "- top_merchants: largest counterparties as {merchant, amount}\n"
        "- anomalies: unusual transactions as {date, description, amount}\n"
        "- summary: total_spent, average_transaction, num_transactions, "
        "highest_category\n"
        "- reports: short observations about the spending\n"
        "- suggestions: concrete ways to save money\n"
    )


def _object(properties: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }


def _array_of(item: dict[str, Any]) -> dict[str, Any]:
    return {"type": "array", "items": item}


def build_response_format() -> ResponseFormatTextJSONSchemaConfigParam:
    """Return the strict JSON Schema response_format for the insights object."""

    number = {"type": "number"}
    text = {"type": "string"}
    schema = _object(
        {
            "chart_insights": _array_of(_object({"label": text, "amount": number})),
            "monthly_trends": _array_of(_object({"month": text, "amount": number})),
            "top_merchants": _array_of(_object({"merchant": text, "amount": number})),
            "anomalies": _array_of(
                _object({"date": text, "description": text, "amount": number})
            ),
            "summary": _object(
                {
                    "total_spent": number,
                    "average_transaction": number,
                    "num_transactions": {"type": "integer"},
                    "highest_category": text,
                }
            ),
            "reports": _array_of(text),
            "suggestions": _array_of(text),
        }
    )
    result: ResponseFormatTextJSONSchemaConfigParam = {
        "type": "json_schema",
        "name": "statement_insights",
        "schema": schema,
        "strict": True,
    }
    return result


__all__ = [
    "BEGIN_MARKER",
    "END_MARKER",
    "build_response_format",
    "build_system_instructions",
    "build_user_content",
    "transactions_to_csv",
]
