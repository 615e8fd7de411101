"""
depot-import: normalize broker depot statements into positions.

Public API surface:

- ``parse_statement(payload, filename, depot_code, ...)`` -- **recommended
  entry point**.  Detects the statement source for the depot, fingerprints
  the payload if no hash is given, and returns the sorted ``Position`` list.

- ``import_file(path, depot_code=None, ...)`` -- Reads a statement from
  disk and delegates to ``parse_statement``.  The depot code is inferred
  from the file suffix when omitted.

- ``DekaCsvParser`` / ``TrPdfParser`` -- the parsers, usable directly
  when the caller already knows the source.

- ``normalize_isin`` / ``decimal_from_german_text`` -- shared helpers for
  callers canonicalizing identifiers and amounts.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from depot_import.config import ImportConfig, load_config
from depot_import.detect import depot_for_filename, detect_source
from depot_import.exceptions import (
    ConfigValidationError,
    DepotImportError,
    InvalidIsinError,
    StatementEncodingError,
    StatementReadError,
    UnknownSourceError,
)
from depot_import.parsers import BaseParser, DekaCsvParser, TrPdfParser
from depot_import.position import Position, PositionSource, positions_to_frame
from depot_import.transforms.isin import normalize_isin, normalize_isins
from depot_import.transforms.numbers import decimal_from_german_text

__all__ = [
    "parse_statement",
    "import_file",
    "compute_file_hash",
    "load_config",
    "ImportConfig",
    "Position",
    "PositionSource",
    "positions_to_frame",
    "BaseParser",
    "DekaCsvParser",
    "TrPdfParser",
    "normalize_isin",
    "normalize_isins",
    "decimal_from_german_text",
    "DepotImportError",
    "StatementEncodingError",
    "StatementReadError",
    "InvalidIsinError",
    "UnknownSourceError",
    "ConfigValidationError",
]

logger = logging.getLogger(__name__)


def compute_file_hash(payload: bytes) -> str:
    """SHA-256 hex digest of a statement payload."""
    return hashlib.sha256(payload).hexdigest()


def parse_statement(
    payload: bytes,
    filename: str | None,
    depot_code: str,
    file_hash: str | None = None,
    config: ImportConfig | None = None,
) -> list[Position]:
    """Parse one statement into positions.

    Orchestration:
      1. ``detect_source()`` -> ``(parser_class, layout)``
      2. ``compute_file_hash()`` when *file_hash* is None
      3. ``parser.parse()`` -> sorted ``Position`` list

    Args:
        payload: Raw statement bytes.
        filename: Original filename (as-of date fallback and suffix check).
        depot_code: Caller-assigned depot code.  Matched against the
            config trimmed and lowercased, but copied onto each Position
            exactly as given.
        file_hash: Content fingerprint; SHA-256 of *payload* if None.
        config: Depot mapping; the built-in one if None.

    Returns:
        Positions sorted by ISIN, at most one per ISIN.  May be empty.

    Raises:
        UnknownSourceError: If the depot or file type is not supported.
        StatementEncodingError: If a CSV payload cannot be decoded.
        StatementReadError: If the document cannot be read at all.

    Examples::

        with open("Depot_12345678_Depotbestand_20260101.CSV", "rb") as f:
            positions = depot_import.parse_statement(
                f.read(), "Depot_12345678_Depotbestand_20260101.CSV", "deka",
            )
    """
    parser_cls, layout = detect_source(depot_code, filename, config=config)
    if file_hash is None:
        file_hash = compute_file_hash(payload)
    parser = parser_cls(layout)
    return parser.parse(payload, filename, depot_code, file_hash)


def import_file(
    path: str | Path,
    depot_code: str | None = None,
    config: ImportConfig | None = None,
) -> list[Position]:
    """Read a statement file and parse it.

    Args:
        path: Path to the CSV or PDF statement.
        depot_code: Depot code; inferred from the file suffix if None.
        config: Depot mapping; the built-in one if None.

    Raises:
        FileNotFoundError: If *path* does not exist.
        UnknownSourceError: If the depot cannot be inferred or is unsupported.
    """
    path = Path(path)
    if depot_code is None:
        depot_code = depot_for_filename(path.name, config=config)
        logger.info("import_file() -- inferred depot %s for %s", depot_code, path.name)
    payload = path.read_bytes()
    return parse_statement(payload, path.name, depot_code, config=config)
