"""Insights generation via the OpenAI Responses API.

Public API:
    - :func:`generate_insights`
    - :func:`parse_insights_text`

The model receives the transactions as CSV and must answer with a JSON object
holding the seven insight keys. A response that cannot be decoded into that
shape is logged and replaced by an empty :class:`~statement_insights.models.Insights`
so callers can still render an empty state. Transport failures (HTTP 429/5xx)
are retried with jittered backoff; anything else, or exhausting the retries,
raises :class:`~statement_insights.errors.InsightsError`.
"""

from __future__ import annotations

import json
import random
import re
import time
from collections.abc import Mapping, Sequence
from typing import Any

from openai import OpenAI
from openai.types.responses import ResponseTextConfigParam
from pydantic import ValidationError

from . import prompting
from .config import DEFAULT_MODEL
from .errors import InsightsError
from .logging_setup import get_logger
from .models import Insights, TransactionRecord, Transactions

# ---- Tunables (private) ------------------------------------------------------

_MAX_ATTEMPTS: int = 3
_BACKOFF_SCHEDULE_SEC: tuple[float, ...] = (0.5, 2.0)
_JITTER_PCT: float = 0.20

_FENCE_RE = re.compile(r"```(?:json)?\n?|```")

_logger = get_logger("statement_insights.insights")


# ---- Internal helpers --------------------------------------------------------


def _create_client() -> OpenAI:
    return OpenAI()


def _is_retryable(exc: BaseException) -> bool:
    """Return True only for HTTP 429 and 5xx errors."""

    sc = getattr(exc, "status_code", None)
    return isinstance(sc, int) and (sc == 429 or 500 <= sc < 600)


def _sleep_backoff(attempt_no: int) -> None:
    if attempt_no - 1 < len(_BACKOFF_SCHEDULE_SEC):
        base = _BACKOFF_SCHEDULE_SEC[attempt_no - 1]
    else:
        base = _BACKOFF_SCHEDULE_SEC[-1]
    jitter = base * _JITTER_PCT
    time.sleep(max(0.0, base + random.uniform(-jitter, jitter)))


def _extract_response_text(resp: Any) -> str | None:
    """Locate the text output of a Responses SDK result.

    Prefers ``resp.output_text``; falls back to
    ``resp.output[0].content[0].text`` (or its ``.value``).
    """

    text = getattr(resp, "output_text", None)
    if isinstance(text, str) and text:
        return text
    output = getattr(resp, "output", None)
    if not output:
        return None
    content = getattr(output[0], "content", None)
    if not content:
        return None
    txt_obj = getattr(content[0], "text", None)
    if isinstance(txt_obj, str):
        return txt_obj
    maybe_val = getattr(txt_obj, "value", None)
    return maybe_val if isinstance(maybe_val, str) else None


def _strip_code_fences(text: str) -> str:
    s = text.strip()
    if s.startswith("```"):
        s = _FENCE_RE.sub("", s).strip()
    return s


# ---- Public API --------------------------------------------------------------


def parse_insights_text(text: str | None) -> Insights:
    """Decode a model answer into :class:`Insights`.

    Markdown code fences are removed first. Missing keys default to empty
    containers; undecodable text or a wrong shape yields an empty object and
    an ERROR log line rather than an exception.
    """

    if not text:
        _logger.error("insights:parse_failed reason=empty_response")
        return Insights.empty()
    body = _strip_code_fences(text)
    try:
        decoded = json.loads(body)
    except json.JSONDecodeError:
        _logger.error("insights:parse_failed reason=invalid_json text=%.200r", body)
        return Insights.empty()
    if not isinstance(decoded, Mapping):
        _logger.error("insights:parse_failed reason=not_an_object")
        return Insights.empty()
    try:
        return Insights.model_validate(decoded)
    except ValidationError as e:
        _logger.error(
            "insights:parse_failed reason=invalid_shape errors=%d", e.error_count()
        )
        return Insights.empty()


def generate_insights(
    transactions: Transactions,
    *,
    model: str = DEFAULT_MODEL,
    client: Any | None = None,
) -> Insights:
    """Ask the model for insights about ``transactions``.

    Parameters
    ----------
    transactions:
        Canonical transaction records (mappings); serialized to CSV for the
        prompt.
    model:
        Responses API model name.
    client:
        Optional pre-built client exposing ``responses.create(...)``; a fresh
        ``openai.OpenAI()`` is created when omitted.

    Returns
    -------
    Insights
        Parsed insights, or an empty object when there are no transactions or
        the answer could not be parsed.
    """

    items: Sequence[TransactionRecord] = list(transactions)
    if not items:
        _logger.info("insights:skipped reason=no_transactions")
        return Insights.empty()

    csv_data = prompting.transactions_to_csv(items)
    instructions = prompting.build_system_instructions()
    user_content = prompting.build_user_content(csv_data)
    text_cfg = ResponseTextConfigParam(format=prompting.build_response_format())

    api = client if client is not None else _create_client()
    _logger.info("insights:request model=%s num_transactions=%d", model, len(items))

    attempt = 1
    while True:
        t0 = time.perf_counter()
        try:
            resp = api.responses.create(
                model=model,
                instructions=instructions,
                input=user_content,
                text=text_cfg,
            )
        except Exception as e:  # noqa: BLE001 - classified below
            dt_ms = (time.perf_counter() - t0) * 1000.0
            if attempt >= _MAX_ATTEMPTS or not _is_retryable(e):
                _logger.error(
                    "insights:failed_terminal attempt=%d latency_ms=%.2f error=%s",
                    attempt,
                    dt_ms,
                    e.__class__.__name__,
                )
                raise InsightsError(f"insights request failed: {e}") from e
            _logger.warning(
                "insights:retry attempt=%d latency_ms=%.2f error=%s",
                attempt,
                dt_ms,
                e.__class__.__name__,
            )
            _sleep_backoff(attempt)
            attempt += 1
            continue

        dt_ms = (time.perf_counter() - t0) * 1000.0
        insights = parse_insights_text(_extract_response_text(resp))
        _logger.info(
            "insights:done latency_ms=%.2f empty=%s", dt_ms, insights.is_empty
        )
        return insights


__all__ = ["generate_insights", "parse_insights_text"]
