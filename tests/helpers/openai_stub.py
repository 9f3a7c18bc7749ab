"""Test helpers to stub the OpenAI Responses client used by ``insights.py``.

The stub records each ``responses.create(...)`` call and answers with the text
produced by a ``respond`` callable, or raises the next queued exception.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from statement_insights.prompting import BEGIN_MARKER, END_MARKER

SAMPLE_INSIGHTS: dict[str, Any] = {
    "chart_insights": [{"label": "SHOPPING", "amount": 500}],
    "monthly_trends": [{"month": "2024-04", "amount": 500}],
    "top_merchants": [{"merchant": "AMAZON", "amount": 500}],
    "anomalies": [],
    "summary": {
        "total_spent": 500,
        "average_transaction": 500,
        "num_transactions": 2,
        "highest_category": "SHOPPING",
    },
    "reports": ["You spent the most on SHOPPING."],
    "suggestions": ["Review online shopping."],
}


def extract_csv_from_user_content(user_content: str) -> str:
    b = user_content.find(BEGIN_MARKER + "\n")
    e = user_content.rfind("\n" + END_MARKER)
    if b == -1 or e == -1 or e <= b:
        raise AssertionError("insights: user content missing embedded CSV block")
    return user_content[b + len(BEGIN_MARKER) + 1 : e]


class StatusError(Exception):
    """Mimics an SDK API error carrying an HTTP ``status_code``."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


class OpenAIStub:
    """Minimal stub matching the ``openai.OpenAI`` shape used by ``insights.py``.

    Parameters
    ----------
    respond:
        Callable receiving the call kwargs and returning the response text.
        Defaults to :data:`SAMPLE_INSIGHTS` as JSON.
    errors:
        Exceptions raised, in order, by the first calls before ``respond`` is
        used.
    """

    def __init__(
        self,
        respond: Callable[[dict[str, Any]], str] | None = None,
        errors: list[BaseException] | None = None,
    ) -> None:
        self.calls: list[dict[str, Any]] = []
        self._respond = respond or (lambda _kw: json.dumps(SAMPLE_INSIGHTS))
        self._errors = list(errors or [])

        class _Responses:
            def __init__(self, outer: OpenAIStub) -> None:
                self._outer = outer

            def create(self, **kwargs):
                self._outer.calls.append(kwargs)
                if self._outer._errors:
                    raise self._outer._errors.pop(0)

                class _Resp:
                    output_text: str

                resp = _Resp()
                resp.output_text = self._outer._respond(kwargs)
                return resp

        self.responses = _Responses(self)
