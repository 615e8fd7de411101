"""
Custom exception hierarchy for depot-import.

Only document-level failures are raised: a payload that cannot be
decoded, a document that cannot be read at all, or a depot/file that no
statement layout serves.  Row- and block-level problems inside a
readable document are skipped silently by the parsers.
"""


class DepotImportError(Exception):
    """Base exception for all depot-import errors."""


class StatementEncodingError(DepotImportError):
    """Raised when a CSV payload cannot be decoded with any configured encoding."""


class StatementReadError(DepotImportError):
    """Raised when a statement cannot be structurally read.

    For example an empty CSV payload, a CSV without an ``ISIN`` header
    column, or a PDF stream that pdfplumber cannot open.
    """


class InvalidIsinError(DepotImportError, ValueError):
    """Raised by strict ISIN normalization when the shape does not match.

    Subclasses ``ValueError`` so callers validating user input can catch
    it without importing this module.
    """


class UnknownSourceError(DepotImportError):
    """Raised when no statement layout serves a depot code or filename.

    Typically includes the configured depot codes / expected suffix to
    aid debugging.
    """


class ConfigValidationError(DepotImportError):
    """Raised when a config or layout YAML file is empty or inconsistent.

    This can happen if:
    - The YAML file has no content.
    - A depot code maps to a source tag no layout provides.
    """
