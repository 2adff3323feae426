from __future__ import annotations

"""Exception hierarchy for the merge run.

DecodeError is recovered per document by the aggregator; the others abort the
run and are mapped to exit code 1 by the CLI.
"""

__all__ = [
    "ProcessingError",
    "DirectoryUnreadableError",
    "DecodeError",
    "SheetNotFoundError",
    "SinkWriteError",
    "SchemaMismatchError",
]


class ProcessingError(Exception):
    """Base exception for processing errors."""


class DirectoryUnreadableError(ProcessingError):
    """Raised when the input directory cannot be listed."""


class DecodeError(ProcessingError):
    """Raised when a document is not a readable spreadsheet workbook."""


class SheetNotFoundError(DecodeError):
    """Raised when the workbook lacks the worksheet holding the table."""


class SinkWriteError(ProcessingError):
    """Raised when the output file cannot be opened or written."""


class SchemaMismatchError(ProcessingError):
    """Raised in strict mode when a document's column count differs from the header."""
