"""Pytest configuration for test isolation.

- Puts the workspace ``packages/`` dir on ``sys.path`` so ``statement_insights``
  imports without an install.
- Clears the package's environment variables and runs each test from its own
  temporary directory so a developer ``.env`` never leaks into assertions.
- Resets the package logger after each test; the CLI configures it once per
  process, which would otherwise stop ``caplog`` from seeing later records.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
sys.path[:0] = [p for p in [str(_PKG_DIR), str(_ROOT)] if p not in sys.path]

from statement_insights.logging_setup import reset_logging  # noqa: E402

_ENV_VARS = (
    "OPENAI_API_KEY",
    "STATEMENT_INSIGHTS_SELF_IDENTITY",
    "STATEMENT_INSIGHTS_MODEL",
    "STATEMENT_INSIGHTS_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    yield
    reset_logging()
