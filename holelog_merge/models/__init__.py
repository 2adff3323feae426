"""Domain models for the hole report merge tool.

This package contains the value types shared by the locator, the aggregator
and the CLI.
"""

from .cell import EMPTY_CELL, Cell, CellKind, Row
from .document import Document, DocumentStatus
from .error_record import ErrorRecord
from .header_spec import HeaderSpec
from .run_result import DocumentStat, RunResult, SkippedDocument

__all__ = [
    # Cell values
    "Cell",
    "CellKind",
    "EMPTY_CELL",
    "Row",
    # Documents
    "Document",
    "DocumentStatus",
    # Results
    "DocumentStat",
    "ErrorRecord",
    "HeaderSpec",
    "RunResult",
    "SkippedDocument",
]
