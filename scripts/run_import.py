"""
Demo script: parse depot statements via the public API and print positions.

Usage:
    uv run python scripts/run_import.py inputs/Depot_12345678_Depotbestand_20260101.CSV
    uv run python scripts/run_import.py inputs/statement.pdf --depot tr
    uv run python scripts/run_import.py inputs/*.CSV --config depot_import.yaml --out positions.csv

Without --depot the depot code is inferred from the file suffix.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("run_import")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("files", nargs="+", help="CSV/PDF statement files")
    parser.add_argument("--depot", default=None, help="Depot code (e.g. deka, tr)")
    parser.add_argument("--config", default=None, help="Path to a depot-import YAML config")
    parser.add_argument("--out", default=None, help="Write all positions to this CSV file")
    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    import depot_import

    args = _parse_args(sys.argv[1:] if argv is None else argv)
    config = depot_import.load_config(args.config) if args.config else None

    frames: list[pd.DataFrame] = []
    failed = 0
    for input_path in args.files:
        if not Path(input_path).exists():
            log.warning("SKIP  %s  (file not found)", input_path)
            continue

        log.info("=" * 70)
        log.info("Processing: %s", input_path)
        try:
            positions = depot_import.import_file(input_path, args.depot, config=config)
        except depot_import.DepotImportError as exc:
            log.error("FAILED  %s: %s", input_path, exc)
            failed += 1
            continue

        frame = depot_import.positions_to_frame(positions)
        frames.append(frame)
        log.info("  %d positions", len(frame))
        print(frame.to_string(index=False))

    if args.out and frames:
        pd.concat(frames, ignore_index=True).to_csv(args.out, index=False, encoding="utf-8-sig")
        log.info("Wrote %s", args.out)

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
