from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

"""Document domain model and DocumentStatus enum.

A Document is one spreadsheet report found in the input directory. It is
identified by its path and a label (file name without extension); the label
also names the worksheet holding the table unless configured otherwise.
"""


class DocumentStatus(Enum):
    """Status enum for Document processing lifecycle.

    State transitions: pending → processing → (success | no_table | skipped)

    - PENDING: Document discovered but not yet processed
    - PROCESSING: Document is currently being scanned
    - SUCCESS: A header-start row was found and the table was scanned
    - NO_TABLE: Decoded fine but no header-start sentinel present
    - SKIPPED: Could not be decoded (or worksheet missing); nothing emitted
    """
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    NO_TABLE = "no_table"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Document:
    """Processing context for a single spreadsheet document.

    Rows are not kept here; they are decoded, scanned and dropped within
    the aggregator's per-document step.
    """
    path: Path
    label: str
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: DocumentStatus = DocumentStatus.PENDING
    emitted_rows: int = 0
    provenance: str = ""
    error_type: str | None = None
    error: str | None = None

    @classmethod
    def from_path(cls, path: Path) -> Document:
        return cls(path=path, label=path.stem)

    @property
    def name(self) -> str:
        return self.path.name
