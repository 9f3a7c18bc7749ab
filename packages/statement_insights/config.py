"""Runtime settings for ``statement_insights``.

Settings are read from the process environment. The CLI loads a local ``.env``
via ``python-dotenv`` before calling :func:`load_settings`; library callers can
construct :class:`Settings` directly.

Environment variables
---------------------
``STATEMENT_INSIGHTS_SELF_IDENTITY``
    Account-holder name used to orient sender/receiver (default ``DEEPAK``).
``STATEMENT_INSIGHTS_MODEL``
    OpenAI model used by the insights call (default ``gpt-5``).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

DEFAULT_SELF_IDENTITY = "DEEPAK"
DEFAULT_MODEL = "gpt-5"

_SELF_IDENTITY_ENV = "STATEMENT_INSIGHTS_SELF_IDENTITY"
_MODEL_ENV = "STATEMENT_INSIGHTS_MODEL"


@dataclass(frozen=True, slots=True)
class Settings:
    self_identity: str = DEFAULT_SELF_IDENTITY
    model: str = DEFAULT_MODEL

    def __post_init__(self) -> None:
        if not self.self_identity.strip():
            raise ValueError("self_identity must be a non-empty string")
        if not self.model.strip():
            raise ValueError("model must be a non-empty string")

    def with_overrides(
        self, *, self_identity: str | None = None, model: str | None = None
    ) -> Settings:
        """Return a copy with any non-``None`` overrides applied (CLI options)."""

        changes: dict[str, str] = {}
        if self_identity is not None:
            changes["self_identity"] = self_identity
        if model is not None:
            changes["model"] = model
        return replace(self, **changes) if changes else self


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    identity = (env.get(_SELF_IDENTITY_ENV) or "").strip() or DEFAULT_SELF_IDENTITY
    model = (env.get(_MODEL_ENV) or "").strip() or DEFAULT_MODEL
    return Settings(self_identity=identity, model=model)


__all__ = ["DEFAULT_MODEL", "DEFAULT_SELF_IDENTITY", "Settings", "load_settings"]
