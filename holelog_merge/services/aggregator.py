from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import MergeConfig
from ..errors import DecodeError, SchemaMismatchError, SheetNotFoundError
from ..excel.locator import (
    RemarksMode,
    RowRole,
    Sentinels,
    TableLocator,
    build_composite_header,
)
from ..excel.reader import DEFAULT_EXTENSIONS, list_spreadsheets, read_document_rows
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.cell import Row
from ..models.document import Document, DocumentStatus
from ..models.header_spec import HeaderSpec
from ..models.run_result import DocumentStat, DocumentTimingAccumulator, RunResult, SkippedDocument
from ..sink.line_sink import LineSink
from .progress import ProgressTracker

logger = logging.getLogger(__name__)

"""Cross-document aggregation.

Drives the TableLocator over every spreadsheet of the input directory and
writes one combined record stream:

1. List documents (filesystem order, or sorted when requested)
2. Decode each one; a decode failure skips that document only
3. The first header-start row of the run fixes the HeaderSpec, which is
   written once, before any data record
4. Every data row is written as its cells' display text plus the document's
   provenance value

Documents are handled one after another and the run-wide header lives on the
Aggregator instance, so "first document wins" follows enumeration order.
"""

ERROR_TYPE_DECODE = "DECODE_ERROR"
ERROR_TYPE_SHEET_NOT_FOUND = "SHEET_NOT_FOUND"


@dataclass(frozen=True)
class AggregatorOptions:
    """Knobs of the extraction engine (see MergeConfig for the file form)."""
    sentinels: Sentinels = field(default_factory=Sentinels)
    remarks_mode: RemarksMode = RemarksMode.ROW
    provenance_row: int = 1
    provenance_column: int = 0
    provenance_label: str = "date"
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    sheet_name: str | int | None = None
    na_strings: tuple[str, ...] = ()
    sort_files: bool = False
    strict_columns: bool = False

    @classmethod
    def from_config(cls, config: MergeConfig) -> AggregatorOptions:
        return cls(
            sentinels=config.sentinels,
            remarks_mode=config.remarks_mode,
            provenance_row=config.provenance.row,
            provenance_column=config.provenance.column,
            provenance_label=config.provenance.label,
            extensions=config.extensions,
            sheet_name=config.sheet_name,
            na_strings=config.na_strings,
            sort_files=config.sort_files,
            strict_columns=config.strict_columns,
        )


def provenance_value(rows: Sequence[Row], row: int, column: int) -> str:
    """Display text of the provenance cell, or "" when it lies outside the sheet."""
    if row < len(rows) and column < len(rows[row]):
        return rows[row][column].to_display_text()
    return ""


def list_documents(directory: Path, options: AggregatorOptions) -> list[Path]:
    paths = list_spreadsheets(directory, options.extensions)
    if options.sort_files:
        paths = sorted(paths)
    return paths


class Aggregator:
    """Owns the run-wide header and writes records for each document.

    One instance per run. ``header`` stays None until the first header-start
    row is seen and is never replaced afterwards.
    """

    def __init__(
        self,
        sink: LineSink,
        options: AggregatorOptions | None = None,
        error_log: ErrorLogBuffer | None = None,
    ) -> None:
        self.sink = sink
        self.options = options or AggregatorOptions()
        self.error_log = error_log
        self.header: HeaderSpec | None = None

    def _claim_header(self, main_row: Row, sub_row: Row, label: str) -> bool:
        """Set the run header if none exists yet; True when this call set it."""
        if self.header is not None:
            return False
        fields = build_composite_header(main_row, sub_row, self.options.provenance_label)
        self.header = HeaderSpec(fields=fields, source_document=label)
        self.sink.write_record(self.header.to_line_fields())
        logger.info(f"header taken from {label}: {len(fields)} fields")
        return True

    def _check_width(self, document: Document, index: int, width: int) -> None:
        header = self.header
        if header is None or width == header.data_width:
            return
        raise SchemaMismatchError(
            f"{document.name} row {index}: {width} columns, header "
            f"from {header.source_document} has {header.data_width}"
        )

    def _skip(self, document: Document, error: DecodeError) -> Document:
        error_type = ERROR_TYPE_SHEET_NOT_FOUND if isinstance(error, SheetNotFoundError) else ERROR_TYPE_DECODE
        logger.warning(f"skipping {document.name}: {error}")
        if self.error_log is not None:
            self.error_log.append(
                ErrorRecord.create(file=document.name, row=-1, error_type=error_type, message=str(error))
            )
        return replace(
            document,
            status=DocumentStatus.SKIPPED,
            end_time=datetime.now(UTC),
            error_type=error_type,
            error=str(error),
        )

    def process_document(self, path: Path) -> Document:
        """Decode, scan and emit one document.

        Raises:
            SinkWriteError: output could not be written
            SchemaMismatchError: strict mode and the column count differs
        """
        opts = self.options
        document = replace(
            Document.from_path(path),
            status=DocumentStatus.PROCESSING,
            start_time=datetime.now(UTC),
        )

        try:
            rows = read_document_rows(path, sheet_name=opts.sheet_name, na_strings=list(opts.na_strings))
        except DecodeError as e:
            return self._skip(document, e)

        provenance = provenance_value(rows, opts.provenance_row, opts.provenance_column)
        locator = TableLocator(rows, opts.sentinels, opts.remarks_mode)
        emitted = 0

        for classified in locator.scan():
            if classified.role is RowRole.HEADER_START:
                claimed = self._claim_header(classified.cells, classified.sub_row, document.label)
                if not claimed and opts.strict_columns:
                    self._check_width(document, classified.index, len(classified.cells))
            elif classified.role is RowRole.DATA:
                if opts.strict_columns:
                    self._check_width(document, classified.index, len(classified.cells))
                fields = [c.to_display_text() for c in classified.cells]
                fields.append(provenance)
                self.sink.write_record(fields)
                emitted += 1

        state = locator.state
        logger.debug(
            f"{document.name}: header_row={state.header_row} table_end_row={state.table_end_row} "
            f"remarks_row={state.remarks_row} emitted={emitted}"
        )
        if not state.has_header:
            logger.warning(f"{document.name}: no '{opts.sentinels.data_start}' row found, nothing emitted")

        return replace(
            document,
            status=DocumentStatus.SUCCESS if state.has_header else DocumentStatus.NO_TABLE,
            end_time=datetime.now(UTC),
            emitted_rows=emitted,
            provenance=provenance,
        )


def run(
    input_directory: Path,
    sink: LineSink,
    options: AggregatorOptions | None = None,
    *,
    error_log: ErrorLogBuffer | None = None,
) -> RunResult:
    """Merge every spreadsheet in ``input_directory`` into ``sink``.

    The directory is listed before the sink is opened, so an unreadable
    directory leaves an existing output file untouched.

    Raises:
        DirectoryUnreadableError: input directory cannot be listed
        SinkWriteError: output cannot be written (earlier lines stay written)
        SchemaMismatchError: strict mode column-count violation
    """
    options = options or AggregatorOptions()
    start_time = datetime.now(UTC)

    paths = list_documents(input_directory, options)
    logger.info(f"found {len(paths)} spreadsheet(s) in {input_directory}")
    sink.open()

    aggregator = Aggregator(sink, options, error_log)
    timings = DocumentTimingAccumulator()
    stats: list[DocumentStat] = []
    skipped: list[SkippedDocument] = []
    processed = 0
    no_table = 0
    total_rows = 0

    with ProgressTracker(len(paths)) as progress:
        for path in paths:
            progress.start_document(path)
            document = aggregator.process_document(path)

            elapsed = 0.0
            if document.start_time and document.end_time:
                elapsed = (document.end_time - document.start_time).total_seconds()
            timings.add(elapsed)

            if document.status is DocumentStatus.SUCCESS:
                processed += 1
            elif document.status is DocumentStatus.NO_TABLE:
                no_table += 1
            else:
                skipped.append(
                    SkippedDocument(
                        path=str(path),
                        error_type=document.error_type or ERROR_TYPE_DECODE,
                        message=document.error or "",
                    )
                )
            total_rows += document.emitted_rows

            stats.append(
                DocumentStat(
                    file_name=document.name,
                    status=document.status.value,
                    emitted_rows=document.emitted_rows,
                    elapsed_seconds=elapsed,
                    provenance=document.provenance,
                )
            )
            progress.set_postfix(rows=total_rows, skipped=len(skipped))
            progress.finish_document()

    end_time = datetime.now(UTC)
    elapsed_seconds = (end_time - start_time).total_seconds()
    throughput = total_rows / elapsed_seconds if elapsed_seconds > 0 else 0.0
    _, avg_seconds, p95_seconds = timings.get_stats()

    return RunResult(
        processed_documents=processed,
        no_table_documents=no_table,
        skipped_documents=skipped,
        total_emitted_rows=total_rows,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed_seconds,
        throughput_rows_per_sec=throughput,
        header=aggregator.header,
        document_stats=stats,
        avg_document_seconds=avg_seconds,
        p95_document_seconds=p95_seconds,
    )


def process_all(config: MergeConfig) -> RunResult:
    """Run a merge as described by ``config`` and flush the error log.

    Raises:
        ConfigError: input directory or output file not configured
        ProcessingError: any fatal error from ``run``
    """
    input_directory, output_file = config.require_paths()
    error_log = ErrorLogBuffer(Path(config.error_log_dir))
    sink = LineSink(output_file)
    try:
        result = run(input_directory, sink, AggregatorOptions.from_config(config), error_log=error_log)
    finally:
        sink.close()
        try:
            log_path = error_log.flush()
        except OSError as e:
            logger.warning(f"could not write error log: {e}")
        else:
            if log_path is not None:
                logger.info(f"skipped documents recorded in {log_path}")
    return result
