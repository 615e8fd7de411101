"""
Text-level helpers: decoding, BOM handling, delimiter sniffing, line
splitting and instrument-name cleanup.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from depot_import.exceptions import StatementEncodingError

logger = logging.getLogger(__name__)

_BOM = "\ufeff"
_DEFAULT_DELIMITERS = (";", ",", "\t")
_TRAILING_DATE_RE = re.compile(r"\s+\d{2}\.\d{2}\.\d{4}\s*$")
_WHITESPACE_RUN_RE = re.compile(r"\s+")


def strip_bom(text: str) -> str:
    """Drop a leading byte-order mark, if present."""
    if text.startswith(_BOM):
        return text[1:]
    return text


def decode_payload(
    payload: bytes,
    encodings: Sequence[str] = ("utf-8", "iso-8859-1"),
) -> str:
    """Decode raw bytes, trying each encoding in order.

    A leading BOM is stripped from the decoded text, so BOM-prefixed and
    BOM-less payloads decode identically.

    Raises:
        StatementEncodingError: If no encoding decodes the payload.
    """
    for encoding in encodings:
        try:
            text = payload.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            logger.debug("Payload is not valid %s, trying next encoding", encoding)
            continue
        return strip_bom(text)
    raise StatementEncodingError(
        f"Payload could not be decoded with any of: {list(encodings)}"
    )


def sniff_delimiter(
    header_line: str,
    candidates: Sequence[str] = _DEFAULT_DELIMITERS,
) -> str:
    """Pick the candidate delimiter occurring most often in the header line.

    Ties go to the earlier candidate; if none occurs, the first
    candidate is returned.
    """
    best = candidates[0]
    best_count = 0
    for candidate in candidates:
        count = header_line.count(candidate)
        if count > best_count:
            best, best_count = candidate, count
    return best


def split_lines(text: str) -> list[str]:
    """Split on any line break convention (``\\n``, ``\\r\\n``, ``\\r``, ...)."""
    return text.splitlines()


def sanitize_name(name: str | None, fallback: str | None) -> str:
    """Clean an instrument name captured from statement text.

    Strips a trailing ``dd.mm.yyyy`` token, collapses whitespace runs and
    trims.  Falls back to *fallback* when nothing is left.
    """
    clean = (name or "").strip()
    clean = _TRAILING_DATE_RE.sub("", clean).strip()
    clean = _WHITESPACE_RUN_RE.sub(" ", clean).strip()
    if not clean:
        return fallback or ""
    return clean
