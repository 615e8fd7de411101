"""
Date helpers for as-of date inference.
"""

from __future__ import annotations

import re
from datetime import date, datetime

_COMPACT_DATE_RE = re.compile(r"\d{8}")


def parse_german_date(text: str) -> date | None:
    """Parse ``dd.mm.yyyy``; ``None`` if it is not a real calendar date."""
    try:
        return datetime.strptime(text.strip(), "%d.%m.%Y").date()
    except ValueError:
        return None


def parse_compact_date(text: str) -> date | None:
    """Parse ``yyyyMMdd``; ``None`` if it is not a real calendar date."""
    if len(text) != 8 or not text.isdigit():
        return None
    try:
        return date(int(text[:4]), int(text[4:6]), int(text[6:]))
    except ValueError:
        return None


def date_from_filename(filename: str | None, last: bool = True) -> date | None:
    """Interpret an 8-digit run in a filename as ``yyyyMMdd``.

    Args:
        filename: The original upload filename (may be ``None``).
        last: Use the last run found (CSV exports put the statement date
            after the account number) instead of the first.

    Returns:
        The date, or ``None`` if there is no run or the chosen run is
        not a real date.  Other runs are not tried.
    """
    runs = _COMPACT_DATE_RE.findall(filename or "")
    if not runs:
        return None
    return parse_compact_date(runs[-1] if last else runs[0])
