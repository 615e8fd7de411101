"""
Trade Republic PDF parser.

The statement's text layer has no column boundaries, so extraction is
line-oriented and heuristic:

1. Extract text with pdfplumber and split into lines.
2. Infer the as-of date: ``DATUM dd.mm.yyyy`` header, then ``zum
   dd.mm.yyyy`` header, then the latest ``dd.mm.yyyy`` anywhere, then
   the first ``yyyyMMdd`` run in the filename, then today.
3. Segment lines into blocks.  A line shaped ``<qty> Stk. <rest>`` opens
   a block; every following line belongs to it until the next start.
4. Split ``<rest>`` into name and value with an ordered list of
   strategies (column gaps, trailing numbers, whole remainder).
5. Flush each block: it needs a name, shares and an ISIN (``ISIN: ...``
   line preferred, else the first inline ISIN token).  Without a value
   from the start line, the last purely numeric line is used.
6. Aggregate repeated ISINs and sort by ISIN.

Blocks missing shares or ISIN are dropped silently; unparseable numbers
become ``None``.
"""

from __future__ import annotations

import io
import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal

import pdfplumber

from depot_import.exceptions import StatementReadError
from depot_import.parsers.base import BaseParser
from depot_import.position import Position, PositionSource
from depot_import.transforms.dates import date_from_filename, parse_german_date
from depot_import.transforms.isin import ISIN_PATTERN
from depot_import.transforms.numbers import decimal_from_german_text, strip_currency
from depot_import.transforms.text import sanitize_name, split_lines

logger = logging.getLogger(__name__)

_POSITION_START_RE = re.compile(
    r"^\s*(?P<shares>[\d.,]+)\s+Stk\.?\s+(?P<rest>.+?)\s*$", re.IGNORECASE
)
_ISIN_INLINE_RE = re.compile(rf"\b({ISIN_PATTERN})\b")
_ISIN_LINE_RE = re.compile(rf"^\s*ISIN:\s*(?P<isin>{ISIN_PATTERN})\s*$", re.IGNORECASE)
_DATE_TOKEN_RE = re.compile(r"\b(\d{2}\.\d{2}\.\d{4})\b")
# Checked in order; the first line matching a pattern decides for that pattern
_HEADER_DATE_RES = (
    re.compile(r"^\s*DATUM\s+(?P<d>\d{2}\.\d{2}\.\d{4})\s*$", re.IGNORECASE),
    re.compile(r"^\s*zum\s+(?P<d>\d{2}\.\d{2}\.\d{4})\s*$", re.IGNORECASE),
)
_PURE_NUMBER_RE = re.compile(r"^\s*[\d.,]+\s*$")
_COLUMN_GAP_RE = re.compile(r"\s{2,}")
_TRAILING_TWO_NUMS_RE = re.compile(
    r"^(?P<name>.*\S)\s+(?P<n1>[\d.,]+)\s+(?P<n2>[\d.,]+)\s*(?:EUR|€)?\s*$",
    re.IGNORECASE,
)
_TRAILING_ONE_NUM_RE = re.compile(
    r"^(?P<name>.*\S)\s+(?P<n1>[\d.,]+)\s*(?:EUR|€)?\s*$",
    re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Name/value split strategies
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RestSplit:
    """Name and optional value recovered from a start line's remainder."""
    name: str
    value_eur: Decimal | None


def _columns(rest: str) -> list[str]:
    return [col.strip() for col in _COLUMN_GAP_RE.split(rest.strip()) if col.strip()]


def _named(name: str, value: Decimal | None) -> RestSplit:
    return RestSplit(sanitize_name(name, name), value)


def split_by_value_columns(rest: str) -> RestSplit | None:
    """``<name>  <price>  <value>``: both trailing columns must be numeric."""
    columns = _columns(rest)
    if len(columns) < 3:
        return None
    check = decimal_from_german_text(strip_currency(columns[-2]))
    value = decimal_from_german_text(strip_currency(columns[-1]))
    if check is None or value is None:
        return None
    return _named(" ".join(columns[:-2]), value)


def split_by_value_column(rest: str) -> RestSplit | None:
    """``<name>  <value>``: the last column must be numeric."""
    columns = _columns(rest)
    if len(columns) < 2:
        return None
    value = decimal_from_german_text(strip_currency(columns[-1]))
    if value is None:
        return None
    return _named(" ".join(columns[:-1]), value)


def split_by_trailing_numbers(rest: str) -> RestSplit | None:
    """Two trailing numeric tokens separated by single spaces; the last is the value."""
    match = _TRAILING_TWO_NUMS_RE.match(rest.strip())
    if match is None:
        return None
    return _named(match["name"], decimal_from_german_text(strip_currency(match["n2"])))


def split_by_trailing_number(rest: str) -> RestSplit | None:
    """One trailing numeric token."""
    match = _TRAILING_ONE_NUM_RE.match(rest.strip())
    if match is None:
        return None
    return _named(match["name"], decimal_from_german_text(strip_currency(match["n1"])))


def whole_remainder(rest: str) -> RestSplit:
    """Last resort: everything is the name, no value."""
    trimmed = rest.strip()
    return _named(trimmed, None)


REST_STRATEGIES: tuple[Callable[[str], RestSplit | None], ...] = (
    split_by_value_columns,
    split_by_value_column,
    split_by_trailing_numbers,
    split_by_trailing_number,
    whole_remainder,
)


def split_rest(rest: str) -> RestSplit:
    """Apply REST_STRATEGIES in order; the first non-``None`` result wins."""
    for strategy in REST_STRATEGIES:
        result = strategy(rest)
        if result is not None:
            return result
    return whole_remainder(rest)


# ---------------------------------------------------------------------------
# Block helpers
# ---------------------------------------------------------------------------

def extract_isin(lines: Sequence[str]) -> str | None:
    """Find a block's ISIN: an ``ISIN: <code>`` line first, else the first inline token."""
    for line in lines:
        match = _ISIN_LINE_RE.match((line or "").strip())
        if match:
            return match["isin"].upper()
    for line in lines:
        match = _ISIN_INLINE_RE.search(line or "")
        if match:
            return match.group(1)
    return None


def extract_value_fallback(lines: Sequence[str]) -> Decimal | None:
    """Last purely numeric line of a block, ignoring lines with a date.

    Lines with more than one decimal comma are rejected.
    """
    candidates: list[Decimal] = []
    for line in lines:
        trimmed = (line or "").strip()
        if _DATE_TOKEN_RE.search(trimmed):
            continue
        stripped = strip_currency(trimmed)
        if not _PURE_NUMBER_RE.match(stripped):
            continue
        if stripped.count(",") > 1:
            continue
        value = decimal_from_german_text(stripped)
        if value is not None:
            candidates.append(value)
    return candidates[-1] if candidates else None


def choose_name(existing: str, candidate: str, isin: str) -> str:
    """Keep *existing* unless it is blank or just the ISIN."""
    if existing and existing.strip() and existing.strip().upper() != isin.upper():
        return existing
    if candidate and candidate.strip():
        return candidate
    return existing or ""


def _add_optional(left: Decimal | None, right: Decimal | None) -> Decimal | None:
    if left is None and right is None:
        return None
    return (left or Decimal(0)) + (right or Decimal(0))


def aggregate_positions(positions: Sequence[Position]) -> list[Position]:
    """Merge positions sharing an ISIN and sort by ISIN.

    Shares are always summed; values are summed when at least one side
    is known (the unknown side counts as zero).
    """
    merged: dict[str, Position] = {}
    for pos in positions:
        existing = merged.get(pos.isin)
        if existing is None:
            merged[pos.isin] = pos
            continue
        merged[pos.isin] = replace(
            pos,
            name=choose_name(existing.name, pos.name, pos.isin),
            shares=(existing.shares or Decimal(0)) + (pos.shares or Decimal(0)),
            value_eur=_add_optional(existing.value_eur, pos.value_eur),
        )
    return sorted(merged.values(), key=lambda p: p.isin)


def _first_header_date(lines: Sequence[str], pattern: re.Pattern[str]) -> date | None:
    """Date of the first line matching *pattern*; later matches are not consulted."""
    for line in lines:
        match = pattern.match(line or "")
        if match:
            return parse_german_date(match["d"])
    return None


def infer_as_of_date(lines: Sequence[str], filename: str | None, today: date) -> date:
    """Statement date from header lines, body dates, filename, or *today*."""
    for pattern in _HEADER_DATE_RES:
        header_date = _first_header_date(lines, pattern)
        if header_date is not None:
            return header_date

    candidates: list[date] = []
    for line in lines:
        for token in _DATE_TOKEN_RE.findall(line or ""):
            parsed = parse_german_date(token)
            if parsed is not None:
                candidates.append(parsed)
    if candidates:
        return max(candidates)

    return date_from_filename(filename, last=False) or today


@dataclass(frozen=True)
class _Block:
    """Lines believed to describe one holding, plus what the start line gave."""
    name: str | None
    shares: Decimal | None
    value_eur: Decimal | None
    lines: tuple[str, ...]

    def with_line(self, line: str) -> _Block:
        return replace(self, lines=self.lines + (line,))


def _advance(block: _Block | None, line: str) -> tuple[_Block | None, _Block | None]:
    """Feed one line into the fold.

    Returns:
        ``(current_block, finished_block)``; *finished_block* is the
        previous block when *line* starts a new one, else ``None``.
    """
    start = _POSITION_START_RE.match((line or "").strip())
    if start:
        split = split_rest(start["rest"])
        opened = _Block(
            name=split.name,
            shares=decimal_from_german_text(start["shares"]),
            value_eur=split.value_eur,
            lines=(line,),
        )
        return opened, block
    if block is not None:
        return block.with_line(line), None
    return None, None


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class TrPdfParser(BaseParser):
    """Parser for Trade Republic depot statement PDFs."""

    source = PositionSource.TR_PDF

    def parse(
        self,
        payload: bytes,
        filename: str | None,
        depot_code: str,
        file_hash: str,
    ) -> list[Position]:
        logger.info("Parsing Trade Republic PDF: %s", filename)
        lines = extract_lines(payload)
        as_of = infer_as_of_date(lines, filename, self.today())
        positions = self.parse_lines(lines, depot_code, file_hash, as_of)
        logger.info(
            "Parsed %d lines into %d positions (as of %s)",
            len(lines), len(positions), as_of,
        )
        return positions

    def parse_lines(
        self,
        lines: Sequence[str],
        depot_code: str,
        file_hash: str,
        as_of: date,
    ) -> list[Position]:
        """Run block segmentation, flushing and aggregation over text lines."""
        flushed: list[Position] = []
        block: _Block | None = None
        for line in lines:
            block, finished = _advance(block, line)
            if finished is not None:
                self._flush(finished, flushed, depot_code, file_hash, as_of)
        if block is not None:
            self._flush(block, flushed, depot_code, file_hash, as_of)
        return aggregate_positions(flushed)

    def _flush(
        self,
        block: _Block,
        out: list[Position],
        depot_code: str,
        file_hash: str,
        as_of: date,
    ) -> None:
        if block.name is None or block.shares is None:
            logger.debug("Dropping block without name/shares: %r", block.lines[:1])
            return
        isin = extract_isin(block.lines)
        if isin is None:
            logger.debug("Dropping block without ISIN: %r", block.lines[:1])
            return
        value = block.value_eur
        if value is None:
            value = extract_value_fallback(block.lines)
        out.append(Position(
            depot_code=depot_code,
            as_of_date=as_of,
            source=self.source,
            file_hash=file_hash,
            isin=isin,
            name=sanitize_name(block.name, isin),
            shares=block.shares,
            value_eur=value,
        ))


def extract_lines(payload: bytes) -> list[str]:
    """Extract the text layer of every page and split it into lines.

    Raises:
        StatementReadError: If pdfplumber cannot open or read the document.
    """
    try:
        with pdfplumber.open(io.BytesIO(payload)) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
    except Exception as exc:
        raise StatementReadError(f"Failed to read PDF: {exc}") from exc
    return split_lines("\n".join(pages))
