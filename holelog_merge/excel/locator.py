from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum

from ..models.cell import EMPTY_CELL, Cell, Row

"""Table locator: find the sentinel-bounded table inside one worksheet.

A report worksheet carries free-form preamble, then a two-row header whose
first cell reads "Hole Number", the data rows, an optional "Remarks" line and
a "Sub-Totals" terminator. Nothing sits at fixed coordinates, so rows are
classified in one forward pass keyed on the first cell of each row.

The locator only classifies. Choosing which header wins for the run and
writing records is the aggregator's job.
"""

__all__ = [
    "DATA_START_ID",
    "DATA_END_ID",
    "REMARKS_START_ID",
    "ClassifiedRow",
    "RemarksMode",
    "RowRole",
    "ScanState",
    "Sentinels",
    "TableLocator",
    "build_composite_header",
    "normalize_header",
]

DATA_START_ID = "Hole Number"
DATA_END_ID = "Sub-Totals"
REMARKS_START_ID = "Remarks"

_HEADER_SEPARATORS = (" ", "-", "\n")


class RowRole(Enum):
    """Structural role of a worksheet row."""
    HEADER_START = "header_start"
    HEADER_SUB_ROW = "header_sub_row"
    PRE_HEADER = "pre_header"
    TERMINATOR = "terminator"
    AFTER_TABLE = "after_table"
    REMARKS_START = "remarks_start"
    REMARKS = "remarks"
    BLANK_LEADING = "blank_leading"
    DATA = "data"
    IRRELEVANT = "irrelevant"


class RemarksMode(Enum):
    """How much of a worksheet a remarks marker suppresses.

    ROW: only the marker row itself; later rows before the terminator are data
    SECTION: the first marker row below the header and everything after it up
        to the terminator
    """
    ROW = "row"
    SECTION = "section"


@dataclass(frozen=True)
class Sentinels:
    """First-cell texts that delimit the table. Matched by exact equality."""
    data_start: str = DATA_START_ID
    data_end: str = DATA_END_ID
    remarks_start: str = REMARKS_START_ID


@dataclass
class ScanState:
    """Row indices discovered while scanning one document.

    All three start unset. Once set, none of them moves again for the rest of
    the document.
    """
    header_row: int | None = None  # index of the header sub-row
    table_end_row: int | None = None
    remarks_row: int | None = None

    @property
    def has_header(self) -> bool:
        return self.header_row is not None

    @property
    def ended(self) -> bool:
        return self.table_end_row is not None


@dataclass(frozen=True)
class ClassifiedRow:
    """A row together with its role.

    ``sub_row`` is only populated for HEADER_START rows and holds the row
    right below (empty tuple when the header-start row is the last one).
    """
    index: int
    role: RowRole
    cells: Row
    sub_row: Row = field(default=())

    @property
    def first_cell(self) -> Cell:
        return self.cells[0] if self.cells else EMPTY_CELL


def normalize_header(text: str) -> str:
    """Lower-case, trim, then map each space, hyphen and newline to '_'.

    Separators are replaced one for one, so "a  b" becomes "a__b".
    """
    out = text.strip().lower()
    for sep in _HEADER_SEPARATORS:
        out = out.replace(sep, "_")
    return out


def build_composite_header(main_row: Sequence[Cell], sub_row: Sequence[Cell], provenance_label: str = "date") -> tuple[str, ...]:
    """Flatten a main/sub header pair into one field name per column.

    Merged main-header cells are stored once and read back as empties, so
    each empty main cell inherits the last non-empty one to its left.
    """
    fields: list[str] = []
    last_main = ""
    for i, cell in enumerate(main_row):
        main = cell.to_display_text()
        if main:
            last_main = main
        else:
            main = last_main

        sub = sub_row[i].to_display_text() if i < len(sub_row) else ""
        if sub:
            fields.append(f"{normalize_header(main)}_{normalize_header(sub)}")
        else:
            fields.append(normalize_header(main))

    fields.append(provenance_label)
    return tuple(fields)


class TableLocator:
    """Classify the rows of one decoded worksheet.

    A fresh instance is used per document; the ScanState it accumulates is
    discarded with it.
    """

    def __init__(
        self,
        rows: Sequence[Row],
        sentinels: Sentinels | None = None,
        remarks_mode: RemarksMode = RemarksMode.ROW,
    ) -> None:
        self.rows = rows
        self.sentinels = sentinels or Sentinels()
        self.remarks_mode = remarks_mode
        self.state = ScanState()

    def classify(self, index: int, row: Row) -> RowRole:
        """Classify one row and advance the scan state.

        Rows must be fed in ascending index order.
        """
        first = (row[0] if row else EMPTY_CELL).to_display_text()
        state = self.state

        if first == self.sentinels.data_start:
            if state.header_row is None:
                state.header_row = index + 1
            return RowRole.HEADER_START

        if first == self.sentinels.data_end:
            if state.table_end_row is None:
                state.table_end_row = index
            return RowRole.TERMINATOR

        if state.header_row is not None and index <= state.header_row:
            if index == state.header_row:
                return RowRole.HEADER_SUB_ROW
            return RowRole.PRE_HEADER

        if state.ended:
            return RowRole.AFTER_TABLE

        # section mode: the marker only counts below the header
        if (
            state.remarks_row is None
            and first == self.sentinels.remarks_start
            and (self.remarks_mode is RemarksMode.ROW or state.header_row is not None)
        ):
            state.remarks_row = index
            return RowRole.REMARKS_START

        if state.header_row is not None:
            if self.remarks_mode is RemarksMode.SECTION and state.remarks_row is not None:
                return RowRole.REMARKS
            if first == "":
                return RowRole.BLANK_LEADING
            return RowRole.DATA

        return RowRole.IRRELEVANT

    def scan(self) -> Iterator[ClassifiedRow]:
        """Yield every row with its role, in worksheet order."""
        for index, row in enumerate(self.rows):
            role = self.classify(index, row)
            if role is RowRole.HEADER_START:
                sub_row = self.rows[index + 1] if index + 1 < len(self.rows) else ()
                yield ClassifiedRow(index, role, row, sub_row)
            else:
                yield ClassifiedRow(index, role, row)

    def data_rows(self) -> Iterator[ClassifiedRow]:
        """Yield only the rows that belong in the merged output."""
        for classified in self.scan():
            if classified.role is RowRole.DATA:
                yield classified
