"""
Canonical output record for depot-import.

Both parsers emit ``Position`` objects: one per distinct ISIN of a
statement, sorted by ISIN.  Positions are immutable; the aggregation
steps build new instances instead of mutating existing ones.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

import pandas as pd

# Column order of positions_to_frame()
_FRAME_COLUMNS = [
    "depot_code",
    "as_of_date",
    "source",
    "file_hash",
    "isin",
    "name",
    "shares",
    "value_eur",
    "currency",
]


class PositionSource(str, Enum):
    """Which parser produced a position."""

    DEKA_CSV = "DEKA_CSV"
    TR_PDF = "TR_PDF"


@dataclass(frozen=True)
class Position:
    """One instrument holding of a depot on a statement's as-of date.

    Attributes:
        depot_code: Caller-supplied depot code, passed through unchanged.
        as_of_date: Calendar date the statement represents.
        source: The parser that produced this record.
        file_hash: Caller-supplied content fingerprint, passed through.
        isin: 12-character uppercase instrument identifier.
        name: Best-effort display name; the ISIN when nothing was recovered.
        shares: Quantity, or ``None`` when unknown.
        value_eur: Market value in EUR, or ``None`` when unknown.
        currency: Always ``"EUR"``.
    """

    depot_code: str
    as_of_date: date
    source: PositionSource
    file_hash: str
    isin: str
    name: str
    shares: Decimal | None
    value_eur: Decimal | None
    currency: str = "EUR"

    def to_dict(self) -> dict[str, object]:
        """Plain-dict view with the date as ISO string and the source tag as str."""
        data = asdict(self)
        data["as_of_date"] = self.as_of_date.isoformat()
        data["source"] = self.source.value
        return data


def positions_to_frame(positions: list[Position]) -> pd.DataFrame:
    """Build a DataFrame with one row per position.

    Decimal columns keep their ``Decimal`` objects (object dtype) so no
    precision is lost; ``None`` stays ``None``.
    """
    rows = [p.to_dict() for p in positions]
    return pd.DataFrame(rows, columns=_FRAME_COLUMNS)
