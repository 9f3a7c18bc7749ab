"""Canonical-shape detection for the header-first record view."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

CANONICAL_COLUMNS: frozenset[str] = frozenset({"type", "amount", "description"})


def is_canonical(records: Sequence[Mapping[str, Any]]) -> bool:
    """Return True when the sheet already carries canonical columns.

    Only the first record is inspected: its keys are lower-cased and must
    include ``type``, ``amount`` and ``description``. An empty sequence is
    treated as canonical (there is nothing to transform), so callers pass it
    through and end up with zero transactions.
    """

    if not records:
        return True
    keys = {str(k).lower() for k in records[0].keys()}
    return CANONICAL_COLUMNS <= keys


__all__ = ["CANONICAL_COLUMNS", "is_canonical"]
