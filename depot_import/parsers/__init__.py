"""
Parsers sub-package for depot-import.

Contains source-specific parsers that convert raw broker statements into
an ordered list of ``Position`` records.

Design: Strategy Pattern
- base.py defines the BaseParser ABC (protocol).
- deka_csv.py implements DekaCsvParser for Deka ``;``-delimited CSV exports.
- tr_pdf.py implements TrPdfParser for Trade Republic PDF statements.

The detector (detect.py) selects the parser + layout for a depot code at
runtime.
"""

from depot_import.parsers.base import BaseParser
from depot_import.parsers.deka_csv import DekaCsvParser
from depot_import.parsers.tr_pdf import TrPdfParser

__all__ = ["BaseParser", "DekaCsvParser", "TrPdfParser"]
