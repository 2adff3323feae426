from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from holelog_merge.config.loader import (
    ConfigError,
    MergeConfig,
    apply_env_overrides,
    default_config,
    load_config,
)
from holelog_merge.errors import DecodeError, DirectoryUnreadableError, ProcessingError
from holelog_merge.excel.locator import RemarksMode, RowRole, TableLocator, build_composite_header
from holelog_merge.excel.reader import read_document_rows
from holelog_merge.logging.init import log_summary, set_debug, setup_logging
from holelog_merge.services.aggregator import AggregatorOptions, list_documents, process_all
from holelog_merge.services.summary import render_summary_line, render_timing_line

"""CLI entrypoint.

Flow:
- Load .env, then config/merge.yml (or --config), then HOLELOG_* variables,
  then command-line flags; later sources win
- Merge every report in the input directory into the output file
- Print a SUMMARY line and exit with the contract code
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

DEFAULT_CONFIG_PATH = Path("config/merge.yml")


def _load_env_file(path: Path) -> None:
    """Load .env using python-dotenv; variables already set in the process win."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=False)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Merge sentinel-bounded hole report tables into one CSV")
    p.add_argument("--config", help=f"YAML config file (default: {DEFAULT_CONFIG_PATH} if present)")
    p.add_argument("--input-dir", help="Directory holding the .xlsx reports")
    p.add_argument("--output", help="Merged output file (truncated on open)")
    p.add_argument("--sorted", action="store_true", help="Process files in lexicographic order")
    p.add_argument("--strict", action="store_true", help="Fail when a report's column count differs from the header")
    p.add_argument(
        "--remarks-mode",
        choices=[m.value for m in RemarksMode],
        help="'row': drop only the Remarks line; 'section': drop everything from it to Sub-Totals",
    )
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect", action="store_true", help="Print located table bounds per report then exit")
    return p.parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> MergeConfig:
    if args.config:
        cfg = load_config(Path(args.config))
    elif DEFAULT_CONFIG_PATH.exists():
        cfg = load_config(DEFAULT_CONFIG_PATH)
    else:
        cfg = default_config()

    cfg = apply_env_overrides(cfg)

    if args.input_dir:
        cfg = replace(cfg, input_directory=args.input_dir)
    if args.output:
        cfg = replace(cfg, output_file=args.output)
    if args.sorted:
        cfg = replace(cfg, sort_files=True)
    if args.strict:
        cfg = replace(cfg, strict_columns=True)
    if args.remarks_mode:
        cfg = replace(cfg, remarks_mode=RemarksMode(args.remarks_mode))
    return cfg


def _inspect_data(cfg: MergeConfig) -> int:
    if not cfg.input_directory:
        print("inspect: input directory not configured")
        return EXIT_FATAL
    options = AggregatorOptions.from_config(cfg)
    try:
        paths = list_documents(Path(cfg.input_directory), options)
    except DirectoryUnreadableError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    if not paths:
        print("inspect: no spreadsheet files")
        return EXIT_SUCCESS_ALL
    for path in paths:
        print(f"FILE: {path.name}")
        try:
            rows = read_document_rows(path, sheet_name=options.sheet_name, na_strings=list(options.na_strings))
        except DecodeError as e:
            print(f"  read_error: {e}")
            continue
        locator = TableLocator(rows, options.sentinels, options.remarks_mode)
        header: tuple[str, ...] | None = None
        data_rows = 0
        for classified in locator.scan():
            if classified.role is RowRole.HEADER_START and header is None:
                header = build_composite_header(classified.cells, classified.sub_row, options.provenance_label)
            elif classified.role is RowRole.DATA:
                data_rows += 1
        state = locator.state
        print(
            f"  rows={len(rows)} header_row={state.header_row} table_end_row={state.table_end_row} "
            f"remarks_row={state.remarks_row} data_rows={data_rows}"
        )
        print(f"  header={list(header) if header else None}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None means "read sys.argv"; an explicit [] must not pick up pytest's arguments
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    try:
        cfg = _resolve_config(args)
        if args.inspect:
            return _inspect_data(cfg)
        input_directory, output_file = cfg.require_paths()
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    logger.info(f"Merging reports from: {input_directory}")

    try:
        result = process_all(cfg)
    except DirectoryUnreadableError as e:
        logger.error(f"directory: {e}")
        return EXIT_FATAL
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    if result.header is None:
        logger.warning("no report contained a header row; output is empty")
    logger.info(f"output={output_file} rows={result.total_emitted_rows}")
    for skipped in result.skipped_documents:
        logger.warning(f"skipped {skipped.path} ({skipped.error_type})")

    summary_line = render_summary_line(result)
    log_summary(summary_line[len("SUMMARY "):])
    logger.info(render_timing_line(result))

    if result.skipped_documents:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
