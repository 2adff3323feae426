from __future__ import annotations

from ..models.run_result import RunResult

"""SUMMARY line rendering.

Format:
SUMMARY documents={total} processed={ok} no_table={none} skipped={skipped}
rows={rows} elapsed_sec={elapsed} throughput_rps={throughput}
"""


def _format_metric(value: float) -> str:
    """Integers without a decimal point, tiny values without exponent notation."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip('0').rstrip('.')
    return str(value)


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line for a finished run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = RunResult(
        ...     processed_documents=2, no_table_documents=0, skipped_documents=[],
        ...     total_emitted_rows=40, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0, throughput_rows_per_sec=20.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY documents=2 processed=2 no_table=0 skipped=0 rows=40 elapsed_sec=2 throughput_rps=20'
    """
    return (
        f"SUMMARY documents={result.total_documents} "
        f"processed={result.processed_documents} "
        f"no_table={result.no_table_documents} "
        f"skipped={result.skipped_count} "
        f"rows={result.total_emitted_rows} "
        f"elapsed_sec={_format_metric(result.elapsed_seconds)} "
        f"throughput_rps={_format_metric(result.throughput_rows_per_sec)}"
    )


def render_timing_line(result: RunResult) -> str:
    """Per-document scan timing, logged next to the SUMMARY line.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> result = RunResult(
        ...     processed_documents=1, no_table_documents=0, skipped_documents=[],
        ...     total_emitted_rows=3, start_time=t, end_time=t,
        ...     elapsed_seconds=0.5, throughput_rows_per_sec=6.0,
        ...     avg_document_seconds=0.25, p95_document_seconds=0.4,
        ... )
        >>> render_timing_line(result)
        'document_timing avg_sec=0.25 p95_sec=0.4'
    """
    return (
        f"document_timing avg_sec={_format_metric(result.avg_document_seconds)} "
        f"p95_sec={_format_metric(result.p95_document_seconds)}"
    )
