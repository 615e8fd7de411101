"""
Transforms sub-package for depot-import.

Shared normalization used by both statement parsers:
- numbers.py: German decimal parsing (``decimal_from_german_text``).
- text.py: decoding with encoding fallback, BOM stripping, delimiter
  sniffing, line splitting, name sanitization.
- isin.py: ISIN shape checks and strict normalization.
- dates.py: ``dd.mm.yyyy`` / ``yyyyMMdd`` parsing and filename dates.
"""
