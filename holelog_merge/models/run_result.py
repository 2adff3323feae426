from __future__ import annotations

import statistics
from dataclasses import dataclass, field
from datetime import datetime

from .header_spec import HeaderSpec

"""Run result models for the hole report merge tool.

Aggregates per-document outcomes into the figures printed on the SUMMARY line
and returned to programmatic callers of the aggregator.
"""


@dataclass(frozen=True)
class DocumentStat:
    """Per-document processing statistics."""
    file_name: str
    status: str  # success / no_table / skipped
    emitted_rows: int
    elapsed_seconds: float
    provenance: str = ""


@dataclass(frozen=True)
class SkippedDocument:
    """A document dropped from the run, with the reason it was dropped."""
    path: str
    error_type: str
    message: str


@dataclass(frozen=True)
class RunResult:
    """Aggregated results of one merge run.

    ``header`` is None when no document contained a header-start row; in that
    case the output holds no lines at all.
    """
    processed_documents: int  # status SUCCESS
    no_table_documents: int
    skipped_documents: list[SkippedDocument]
    total_emitted_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float
    header: HeaderSpec | None = None
    document_stats: list[DocumentStat] = field(default_factory=list)
    avg_document_seconds: float = 0.0
    p95_document_seconds: float = 0.0

    @property
    def total_documents(self) -> int:
        return self.processed_documents + self.no_table_documents + len(self.skipped_documents)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped_documents)


class DocumentTimingAccumulator:
    """Collects per-document scan times and derives summary statistics."""

    def __init__(self) -> None:
        self.document_times: list[float] = []

    def add(self, elapsed_seconds: float) -> None:
        self.document_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Calculate timing statistics.

        Returns:
            tuple: (documents, avg_seconds, p95_seconds)
        """
        if not self.document_times:
            return (0, 0.0, 0.0)

        count = len(self.document_times)
        avg_seconds = statistics.mean(self.document_times)

        if count == 1:
            p95_seconds = self.document_times[0]
        else:
            p95_seconds = statistics.quantiles(
                self.document_times, n=20, method='inclusive'
            )[18]  # 19th of 20 cut points

        return (count, avg_seconds, p95_seconds)
