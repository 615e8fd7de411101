"""
ISIN shape checks and normalization.

Only the structural shape ``[A-Z]{2}[A-Z0-9]{9}[0-9]`` is checked; the
check digit is not verified.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from depot_import.exceptions import InvalidIsinError

ISIN_PATTERN = r"[A-Z]{2}[A-Z0-9]{9}[0-9]"
_ISIN_RE = re.compile(ISIN_PATTERN)


def is_isin(value: str | None) -> bool:
    """True if *value* already has the exact (uppercase) ISIN shape."""
    return bool(value) and _ISIN_RE.fullmatch(value) is not None


def normalize_isin(value: str | None) -> str:
    """Uppercase, trim and validate an ISIN.

    Unlike the permissive row-skipping inside the parsers, this is
    strict and meant for callers canonicalizing identifiers before
    lookups.

    Raises:
        InvalidIsinError: If the normalized text is not ISIN-shaped.
    """
    normalized = (value or "").strip().upper()
    if not is_isin(normalized):
        raise InvalidIsinError(f"Not a valid ISIN: {value!r}")
    return normalized


def normalize_isins(values: Iterable[str]) -> list[str]:
    """Normalize a list of ISINs, keeping first-seen order and dropping repeats.

    Raises:
        InvalidIsinError: On the first value that is not ISIN-shaped.
    """
    seen: dict[str, None] = {}
    for value in values:
        seen.setdefault(normalize_isin(value), None)
    return list(seen)
