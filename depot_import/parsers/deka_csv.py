"""
Deka CSV parser.

Input structure:
  - Row 0: header row, ``;``-delimited (Wertpapier;St_Nom;Wert;ISIN;...)
  - Rows 1+: one row per lot; an instrument may span several rows,
    follow-up rows often leave ``Wertpapier`` blank.

Key transformation:
  Rows are folded into one entry per ISIN (shares and value summed,
  first non-blank name kept).  Rows without a valid ISIN are skipped.
  Unparseable numbers count as zero; a zero total is emitted as ``None``.

The as-of date comes from the last ``yyyyMMdd`` run in the filename
(``Depot_12345678_Depotbestand_20260101.CSV`` -> 2026-01-01).
"""

from __future__ import annotations

import io
import logging
import warnings
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

import pandas as pd

from depot_import.exceptions import StatementReadError
from depot_import.parsers.base import BaseParser
from depot_import.position import Position, PositionSource
from depot_import.transforms.dates import date_from_filename
from depot_import.transforms.isin import is_isin
from depot_import.transforms.numbers import decimal_or_zero
from depot_import.transforms.text import decode_payload, sniff_delimiter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Aggregate:
    """Running totals for one ISIN."""
    name: str
    shares: Decimal
    value: Decimal

    def add(self, name: str, shares: Decimal, value: Decimal) -> _Aggregate:
        return _Aggregate(
            name=self.name or name,
            shares=self.shares + shares,
            value=self.value + value,
        )


def infer_as_of_date(filename: str | None, today: date) -> date:
    """Last 8-digit run of the filename as ``yyyyMMdd``, else *today*."""
    return date_from_filename(filename, last=True) or today


def _zero_to_none(value: Decimal) -> Decimal | None:
    return None if value.is_zero() else value


class DekaCsvParser(BaseParser):
    """Parser for Deka depot holdings CSV exports."""

    source = PositionSource.DEKA_CSV

    def parse(
        self,
        payload: bytes,
        filename: str | None,
        depot_code: str,
        file_hash: str,
    ) -> list[Position]:
        logger.info("Parsing Deka CSV: %s", filename)
        settings = self.layout.csv
        content = decode_payload(payload, settings.encodings)
        df = self._read_frame(content)
        as_of = infer_as_of_date(filename, self.today())

        cols = settings.columns
        if cols.isin not in df.columns:
            raise StatementReadError(
                f"CSV has no '{cols.isin}' column. Columns: {list(df.columns[:10])}"
            )

        aggregates: dict[str, _Aggregate] = {}
        skipped = 0
        for record in df.to_dict(orient="records"):
            isin = str(record.get(cols.isin, "")).strip().upper()
            if not is_isin(isin):
                skipped += 1
                continue
            name = str(record.get(cols.name, "")).strip()
            shares = decimal_or_zero(record.get(cols.shares, ""))
            value = decimal_or_zero(record.get(cols.value, ""))

            existing = aggregates.get(isin)
            if existing is None:
                aggregates[isin] = _Aggregate(name, shares, value)
            else:
                aggregates[isin] = existing.add(name, shares, value)

        if skipped:
            logger.debug("Skipped %d rows without a valid ISIN", skipped)

        positions = [
            Position(
                depot_code=depot_code,
                as_of_date=as_of,
                source=self.source,
                file_hash=file_hash,
                isin=isin,
                name=agg.name or isin,
                shares=_zero_to_none(agg.shares),
                value_eur=_zero_to_none(agg.value),
            )
            for isin, agg in aggregates.items()
        ]
        positions.sort(key=lambda p: p.isin)
        logger.info(
            "Parsed %d rows into %d positions (as of %s)",
            len(df), len(positions), as_of,
        )
        return positions

    def _read_frame(self, content: str) -> pd.DataFrame:
        """Read decoded CSV text into an all-string DataFrame."""
        delimiter = self.layout.csv.delimiter
        if delimiter == "auto":
            delimiter = sniff_delimiter(content.split("\n", 1)[0])
            logger.debug("Sniffed delimiter %r", delimiter)

        try:
            header = pd.read_csv(io.StringIO(content), sep=delimiter, nrows=0, engine="python")
            width = len(header.columns)
            with warnings.catch_warnings():
                # Rows longer than the header are truncated, not dropped
                warnings.simplefilter("ignore", pd.errors.ParserWarning)
                df = pd.read_csv(
                    io.StringIO(content),
                    sep=delimiter,
                    engine="python",
                    dtype=str,
                    keep_default_na=False,
                    skip_blank_lines=True,
                    # Trailing delimiters must not shift columns into the index
                    index_col=False,
                    on_bad_lines=lambda fields: fields[:width],
                )
        except pd.errors.EmptyDataError as exc:
            raise StatementReadError("CSV payload is empty") from exc
        except (pd.errors.ParserError, ValueError) as exc:
            raise StatementReadError(f"Failed to read CSV: {exc}") from exc

        df.columns = [str(c).strip() for c in df.columns]
        return df.fillna("")
