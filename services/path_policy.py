"""Visibility and mutability policy for configuration paths.

Matching is a case-insensitive prefix test on the whole path, not a
per-segment comparison, so ``ConnectionStringsX`` is covered by
``ConnectionStrings`` as well.
"""

from __future__ import annotations

from typing import Iterable

from config.core.constants import Constants


def _starts_with_any(path: str, prefixes: Iterable[str]) -> bool:
    lowered = path.lower()
    return any(lowered.startswith(prefix.lower()) for prefix in prefixes)


def is_hidden(path: str) -> bool:
    """True when the path may not be viewed."""
    return _starts_with_any(path, Constants.HIDDEN_PATHS)


def is_restricted(path: str) -> bool:
    """True when the path may not be updated."""
    return _starts_with_any(path, Constants.RESTRICTED_PATHS)


__all__ = ["is_hidden", "is_restricted"]
