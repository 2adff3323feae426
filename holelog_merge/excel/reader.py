from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import pandas as pd

from ..errors import DecodeError, DirectoryUnreadableError, SheetNotFoundError
from ..models.cell import Cell, Row

"""Spreadsheet listing and decoding.

- list_spreadsheets: non-recursive scan for files with a spreadsheet suffix
- read_document_rows: decode one worksheet into rows of typed Cells

pandas (openpyxl engine) does the binary decoding. Sheets are read raw
(header=None, dtype=object) so cell types survive. Rows are then cut to the
sheet's used range: row 0 and column 0 are the first occupied row and column,
not A1, so a report shifted by a blank margin is read the same way.
"""

__all__ = [
    "DEFAULT_EXTENSIONS",
    "list_spreadsheets",
    "read_document_rows",
    "resolve_sheet_name",
]

DEFAULT_EXTENSIONS = (".xlsx",)
LOCK_FILE_PREFIX = "~$"


def list_spreadsheets(directory: Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> list[Path]:
    """Scan directory for spreadsheet files (non-recursive).

    Order is whatever the filesystem yields; callers sort when they need
    reproducible output.

    Raises:
        DirectoryUnreadableError: If directory doesn't exist or can't be read
    """
    suffixes = {e.lower() if e.startswith(".") else f".{e.lower()}" for e in extensions}

    if not directory.exists():
        raise DirectoryUnreadableError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise DirectoryUnreadableError(f"Path is not a directory: {directory}")

    try:
        return [
            p for p in directory.iterdir()
            if p.is_file()
            and p.suffix.lower() in suffixes
            and not p.name.startswith(LOCK_FILE_PREFIX)  # Excel owner/lock files
        ]
    except OSError as e:
        raise DirectoryUnreadableError(f"Error reading directory {directory}: {e}") from e


def resolve_sheet_name(sheet_names: list[str], label: str, sheet_name: str | int | None) -> str:
    """Pick the worksheet holding the table.

    None means the sheet named after the document label, an int is a
    positional index and a string is taken literally.
    """
    if sheet_name is None:
        wanted: str | int = label
    else:
        wanted = sheet_name

    if isinstance(wanted, int):
        if 0 <= wanted < len(sheet_names):
            return sheet_names[wanted]
        raise SheetNotFoundError(f"worksheet index {wanted} out of range ({len(sheet_names)} sheets)")

    if wanted not in sheet_names:
        raise SheetNotFoundError(f"worksheet '{wanted}' not found (available: {sheet_names})")
    return wanted


def _trim_to_used_range(df: pd.DataFrame) -> pd.DataFrame:
    """Drop leading rows and columns that hold no value at all."""
    occupied = df.notna() & df.ne("")
    rows = occupied.any(axis=1).to_numpy()
    if not rows.any():
        return df.iloc[0:0, 0:0]
    cols = occupied.any(axis=0).to_numpy()
    return df.iloc[int(rows.argmax()):, int(cols.argmax()):]


def read_document_rows(
    path: Path,
    sheet_name: str | int | None = None,
    na_strings: list[str] | None = None,
) -> tuple[Row, ...]:
    """Decode one worksheet of a workbook into rows of Cells.

    Parameters
    ----------
    path: workbook path
    sheet_name: worksheet selector (see resolve_sheet_name)
    na_strings: text values to read as empty cells; pandas' default NA
        strings are disabled so values such as "NA" survive as text

    Raises
    ------
    DecodeError: the file is not a readable workbook
    SheetNotFoundError: the selected worksheet does not exist
    """
    try:
        xls = pd.ExcelFile(path)
    except Exception as e:
        raise DecodeError(f"cannot open workbook {path.name}: {e}") from e

    with xls:
        names = [str(n) for n in xls.sheet_names]
        target = resolve_sheet_name(names, path.stem, sheet_name)
        try:
            df = xls.parse(
                target,
                header=None,
                dtype=object,
                keep_default_na=False,
                na_values=list(na_strings) if na_strings else None,
            )
        except Exception as e:
            raise DecodeError(f"cannot read worksheet '{target}' of {path.name}: {e}") from e

    df = _trim_to_used_range(df)
    return tuple(
        tuple(Cell.from_raw(v) for v in raw)
        for raw in df.itertuples(index=False, name=None)
    )
