"""
Statement source detection for depot-import.

Resolves which parser reads a statement, based on the depot code the
caller assigns and the filename of the upload.

Detection algorithm:
1. Normalize the depot code (trim + lowercase).
2. Build the depot map: every layout's ``depot_codes``, overlaid with
   ``ImportConfig.depots``.
3. Look up the source tag for the depot in that map.
4. Pick the layout: one of that source that lists the depot code, else
   the first loaded layout of that source.
5. If the config asks for it, check the filename suffix against the layout.
6. Map the layout's parser kind (csv | pdf) to the parser class.
7. Otherwise raise UnknownSourceError.
"""

from __future__ import annotations

import logging
from pathlib import Path

from depot_import.config import ImportConfig, default_config, normalize_depot_code
from depot_import.exceptions import ConfigValidationError, UnknownSourceError
from depot_import.layout_registry import StatementLayout, load_all_layouts
from depot_import.parsers.base import BaseParser
from depot_import.position import PositionSource

logger = logging.getLogger(__name__)

# Maps layout parser kind to parser class
_PARSER_MAP: dict[str, type[BaseParser]] = {}


def _get_parser_map() -> dict[str, type[BaseParser]]:
    """Lazily build the parser map to avoid circular imports."""
    if not _PARSER_MAP:
        from depot_import.parsers.deka_csv import DekaCsvParser
        from depot_import.parsers.tr_pdf import TrPdfParser

        _PARSER_MAP["csv"] = DekaCsvParser
        _PARSER_MAP["pdf"] = TrPdfParser
    return _PARSER_MAP


def _load_layouts(config: ImportConfig) -> list[StatementLayout]:
    layouts_dir = Path(config.layouts_dir) if config.layouts_dir else None
    return load_all_layouts(layouts_dir)


def depot_sources(
    config: ImportConfig, layouts: list[StatementLayout]
) -> dict[str, PositionSource]:
    """Depot code -> source tag, from layout ``depot_codes`` plus config overrides.

    When two layouts claim the same depot code, the first one (filename
    order) keeps it.  Entries in ``config.depots`` always win.
    """
    mapping: dict[str, PositionSource] = {}
    for layout in layouts:
        for code in layout.depot_codes:
            if not code:
                continue
            if code in mapping:
                if mapping[code] != layout.source:
                    logger.warning(
                        "Depot code %s claimed by %s and %s; keeping %s",
                        code, mapping[code].value, layout.source.value, mapping[code].value,
                    )
                continue
            mapping[code] = layout.source
    mapping.update(config.depots)
    return mapping


def _layout_for(
    code: str, source: PositionSource, layouts: list[StatementLayout]
) -> StatementLayout | None:
    candidates = [l for l in layouts if l.source == source]
    for layout in candidates:
        if code in layout.depot_codes:
            return layout
    return candidates[0] if candidates else None


def detect_source(
    depot_code: str,
    filename: str | None,
    config: ImportConfig | None = None,
    layouts: list[StatementLayout] | None = None,
) -> tuple[type[BaseParser], StatementLayout]:
    """Resolve the parser class and layout for a depot statement.

    Args:
        depot_code: Caller-assigned depot code (e.g., ``"deka"``, ``" TR "``).
        filename: Original filename of the upload.
        config: Depot overrides and layout directory; ``default_config()`` if None.
        layouts: Pre-loaded layouts (optional; loads from disk if None).

    Returns:
        Tuple of (parser_class, matched_layout).

    Raises:
        UnknownSourceError: If the depot is not known or the filename
            suffix does not match the layout.
        ConfigValidationError: If the depot maps to a source no layout provides.
    """
    config = config or default_config()
    if layouts is None:
        layouts = _load_layouts(config)

    code = normalize_depot_code(depot_code)
    sources = depot_sources(config, layouts)
    source = sources.get(code)
    if source is None:
        raise UnknownSourceError(
            f"Unsupported depot_code: {depot_code!r}. "
            f"Known depots: {sorted(sources)}"
        )

    layout = _layout_for(code, source, layouts)
    if layout is None:
        raise ConfigValidationError(
            f"Depot '{code}' maps to {source.value}, but no layout provides it. "
            f"Loaded layouts: {[l.source.value for l in layouts]}"
        )

    if config.check_suffix and not layout.accepts_filename(filename):
        raise UnknownSourceError(
            f"Expected {layout.file_suffix} file for depot {code}, got {filename!r}"
        )

    parser_cls = _get_parser_map()[layout.parser]
    logger.info("Detected source '%s' for depot %s (%s)", source.value, code, filename)
    return parser_cls, layout


def depot_for_filename(
    filename: str,
    config: ImportConfig | None = None,
    layouts: list[StatementLayout] | None = None,
) -> str:
    """Find the single known depot whose layout accepts *filename*.

    Raises:
        UnknownSourceError: If no depot, or more than one, matches.
    """
    config = config or default_config()
    if layouts is None:
        layouts = _load_layouts(config)

    matches = []
    for code, source in depot_sources(config, layouts).items():
        layout = _layout_for(code, source, layouts)
        if layout is not None and layout.file_suffix and layout.accepts_filename(filename):
            matches.append(code)
    if len(matches) != 1:
        raise UnknownSourceError(
            f"Cannot infer depot for {filename!r}: matching depots {sorted(matches)}. "
            "Pass depot_code explicitly."
        )
    return matches[0]
