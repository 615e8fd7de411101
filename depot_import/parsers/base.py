"""
Base parser ABC for depot-import.

All statement parsers implement this interface. The contract is:
1. parse() takes the raw payload, the original filename, the depot code
   and a content fingerprint, and returns a list of Positions.
2. The list holds at most one Position per ISIN and is sorted by ISIN.
3. Document-level failures raise; row/block-level problems are skipped.

parse() is a pure function of its arguments (plus today's date for the
as-of fallback), so one parser instance can serve concurrent calls.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import date

from depot_import.layout_registry import StatementLayout, default_layout
from depot_import.position import Position, PositionSource


class BaseParser(ABC):
    """Abstract base class for statement parsers.

    Args:
        layout: Statement layout; the built-in one for ``source`` if omitted.
        today: Returns the date used when no as-of date can be inferred.
    """

    source: PositionSource

    def __init__(
        self,
        layout: StatementLayout | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.layout = layout or default_layout(self.source)
        self.today = today

    @abstractmethod
    def parse(
        self,
        payload: bytes,
        filename: str | None,
        depot_code: str,
        file_hash: str,
    ) -> list[Position]:
        """Parse a statement document.

        Args:
            payload: Raw document bytes.
            filename: Original filename, used for as-of date fallback.
            depot_code: Opaque depot code copied onto every Position.
            file_hash: Opaque content fingerprint copied onto every Position.

        Returns:
            Positions sorted ascending by ISIN, one per ISIN.

        Raises:
            StatementEncodingError: If the payload cannot be decoded.
            StatementReadError: If the document cannot be read at all.
        """
