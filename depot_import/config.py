"""
Configuration model and YAML I/O for depot-import.

Depot routing starts from the ``depot_codes`` each layout YAML declares
(built-in: ``deka`` -> Deka CSV, ``tr`` -> Trade Republic PDF).  The
config adds depot codes or re-points existing ones, and can point at a
different layout directory.  It is optional: ``default_config()`` adds
nothing to the layouts.

Key functions:
- load_config(path) -> ImportConfig: Load and validate from YAML.
- save_config(config, path): Serialize to YAML.
- default_config() -> ImportConfig: No extra depots, built-in layouts.
- normalize_depot_code(code) -> str: Trim + lowercase.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from depot_import.exceptions import ConfigValidationError
from depot_import.position import PositionSource

logger = logging.getLogger(__name__)


def normalize_depot_code(depot_code: str | None) -> str:
    """Canonical depot code: trimmed and lowercase."""
    return (depot_code or "").strip().lower()


class ImportConfig(BaseModel):
    """Top-level configuration for depot-import.

    Attributes:
        depots: Maps depot code -> statement source tag.  Entries are
            merged over the layouts' ``depot_codes`` and win on conflict.
        layouts_dir: Directory with layout YAML files; the built-in
            ``depot_import/layouts`` when ``None``.
        check_suffix: If True, reject files whose suffix does not match
            the layout's ``file_suffix``.
    """

    depots: dict[str, PositionSource] = Field(default_factory=dict)
    layouts_dir: str | None = None
    check_suffix: bool = True

    @field_validator("depots")
    @classmethod
    def _normalize_depot_keys(
        cls, value: dict[str, PositionSource]
    ) -> dict[str, PositionSource]:
        normalized: dict[str, PositionSource] = {}
        for code, source in value.items():
            key = normalize_depot_code(code)
            if not key:
                raise ValueError("Depot codes must not be blank")
            if key in normalized:
                raise ValueError(f"Depot code '{key}' is configured twice")
            normalized[key] = source
        return normalized


def default_config() -> ImportConfig:
    return ImportConfig()


def load_config(path: str | Path) -> ImportConfig:
    """Load and validate a config YAML into an ImportConfig model.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigValidationError: If the file is empty.
        pydantic.ValidationError: If the YAML content fails schema validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigValidationError(f"Config file is empty: {path}")
    logger.info("Loaded config from %s", path)
    return ImportConfig.model_validate(raw)


def save_config(config: ImportConfig, path: str | Path) -> None:
    """Serialize an ImportConfig to YAML with a header comment."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json")
    with open(path, "w", encoding="utf-8") as f:
        f.write("# depot-import configuration\n")
        f.write("# Map depot codes to statement sources (DEKA_CSV, TR_PDF).\n\n")
        yaml.dump(
            data,
            f,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
    logger.info("Saved config to %s", path)
