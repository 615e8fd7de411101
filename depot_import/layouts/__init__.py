"""
Layout definitions sub-package for depot-import.

Contains YAML files that describe each supported statement source:
source tag, parser kind, depot codes served, expected file suffix and
(for CSV exports) delimiter, encodings and header names. The loader
module (layout_registry.py in the parent package) reads these files at
runtime.
"""
