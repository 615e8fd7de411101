"""
Number parsing for German-formatted statement values.

Broker exports use the German convention:
- Dot as thousand separator (e.g., "1.234.567")
- Comma as decimal separator (e.g., "1.234,56")
- Optional currency marker (e.g., "1.234,56 €", "2.000,00 EUR")
- Regular, non-breaking (U+00A0) or narrow non-breaking (U+202F) spaces

``decimal_from_german_text`` is the single parser both statement parsers
share.  The CSV parser maps failures to zero via ``decimal_or_zero``;
the PDF parser keeps ``None``.
"""

from __future__ import annotations

import re
from decimal import Decimal

# Any whitespace, plus the no-break variants PDF text layers emit
_WHITESPACE_RE = re.compile(r"[\s\u00a0\u202f]+")
_CURRENCY_RE = re.compile(r"EUR|€", re.IGNORECASE)
_TRAILING_CURRENCY_RE = re.compile(r"\s*(?:EUR|€)\s*$", re.IGNORECASE)
# Plain decimal after separator mapping, no exponent or digit grouping
_PLAIN_DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)")


def strip_currency(text: str | None) -> str:
    """Remove a trailing ``EUR`` / ``€`` marker and surrounding whitespace."""
    if text is None:
        return ""
    return _TRAILING_CURRENCY_RE.sub("", text).strip()


def decimal_from_german_text(text: str | None) -> Decimal | None:
    """Parse a German-formatted number into a ``Decimal``.

    Steps:
    1. Remove all whitespace (including U+00A0 and U+202F).
    2. Remove currency markers (``EUR``, ``€``).
    3. Remove ``.`` thousand separators, turn ``,`` into the decimal point.
    4. Require a plain decimal shape (sign, digits, one point) and parse
       it as ``Decimal``.

    Examples: ``"1.234,56 €"`` -> ``Decimal("1234.56")``,
    ``"47,53"`` -> ``Decimal("47.53")``, ``"abc"`` -> ``None``.

    Args:
        text: Raw cell or token text.

    Returns:
        The parsed value, or ``None`` when the text is blank or not a
        finite number.  A negative zero is returned as plain zero.
    """
    if text is None:
        return None
    value = _WHITESPACE_RE.sub("", text)
    value = _CURRENCY_RE.sub("", value)
    if not value:
        return None
    value = value.replace(".", "").replace(",", ".")
    if not _PLAIN_DECIMAL_RE.fullmatch(value):
        return None
    result = Decimal(value)
    if result.is_zero() and result.is_signed():
        return result.copy_abs()
    return result


def decimal_or_zero(text: str | None) -> Decimal:
    """Permissive variant used by the CSV parser: failures become zero."""
    result = decimal_from_german_text(text)
    if result is None:
        return Decimal(0)
    return result
