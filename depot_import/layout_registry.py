"""
Layout loader for depot-import.

Loads statement layout YAML files from depot_import/layouts/ and provides
structured access via Pydantic models. Each layout defines:
- source: the position source tag the parser emits (e.g., "DEKA_CSV")
- parser: which parser implementation reads it (csv | pdf)
- depot_codes: depot codes whose statements use this layout
- file_suffix: expected filename suffix (checked case-insensitively)
- csv: delimiter, encodings and header names (CSV layouts only)

New brokers with the same structure (e.g., renamed CSV headers) are added
by dropping a YAML file, without code changes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from depot_import.exceptions import ConfigValidationError
from depot_import.position import PositionSource

logger = logging.getLogger(__name__)

# Directory containing layout YAML files (sibling package)
_LAYOUTS_DIR = Path(__file__).parent / "layouts"


class CsvColumns(BaseModel):
    """Header names addressed by the CSV parser."""
    isin: str = "ISIN"
    name: str = "Wertpapier"
    shares: str = "St_Nom"
    value: str = "Wert"


class CsvSettings(BaseModel):
    """How to decode and split a CSV export.

    ``delimiter: auto`` sniffs the delimiter from the header line.
    """
    delimiter: str = ";"
    encodings: list[str] = Field(default_factory=lambda: ["utf-8", "iso-8859-1"])
    columns: CsvColumns = Field(default_factory=CsvColumns)

    @field_validator("encodings")
    @classmethod
    def _at_least_one_encoding(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("At least one encoding must be configured")
        return value


class StatementLayout(BaseModel):
    """A complete statement layout loaded from YAML."""
    source: PositionSource
    parser: Literal["csv", "pdf"]
    description: str = ""
    depot_codes: list[str] = Field(default_factory=list)
    file_suffix: str | None = None
    csv: CsvSettings = Field(default_factory=CsvSettings)

    @field_validator("depot_codes")
    @classmethod
    def _normalize_depot_codes(cls, value: list[str]) -> list[str]:
        return [code.strip().lower() for code in value]

    def accepts_filename(self, filename: str | None) -> bool:
        """True if no suffix is required or *filename* ends with it."""
        if not self.file_suffix:
            return True
        return (filename or "").lower().endswith(self.file_suffix.lower())


def default_layout(source: PositionSource) -> StatementLayout:
    """Built-in layout for a source, used when a parser is built without one."""
    if source is PositionSource.TR_PDF:
        return StatementLayout(source=source, parser="pdf", depot_codes=["tr"], file_suffix=".pdf")
    return StatementLayout(source=source, parser="csv", depot_codes=["deka"], file_suffix=".csv")


def load_layout(path: Path) -> StatementLayout:
    """Load a single layout YAML file.

    Raises:
        ConfigValidationError: If the file is empty.
        pydantic.ValidationError: If the content fails schema validation.
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigValidationError(f"Layout file is empty: {path}")
    return StatementLayout.model_validate(raw)


def load_all_layouts(layouts_dir: Path | None = None) -> list[StatementLayout]:
    """Load all layout YAML files.

    Files that fail to load are logged and skipped.

    Args:
        layouts_dir: Directory to scan for .yaml files. Defaults to
            the built-in layouts/ directory.

    Returns:
        List of StatementLayout objects, in filename order.
    """
    layouts_dir = layouts_dir or _LAYOUTS_DIR
    layouts: list[StatementLayout] = []
    for yaml_path in sorted(Path(layouts_dir).glob("*.yaml")):
        try:
            layout = load_layout(yaml_path)
            layouts.append(layout)
            logger.debug("Loaded layout: %s from %s", layout.source.value, yaml_path)
        except Exception as e:
            logger.warning("Failed to load layout from %s: %s", yaml_path, e)
    logger.info("Loaded %d layouts", len(layouts))
    return layouts
