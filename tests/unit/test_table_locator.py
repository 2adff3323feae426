from __future__ import annotations

import pytest

from holelog_merge.excel.locator import (
    RemarksMode,
    RowRole,
    Sentinels,
    TableLocator,
    build_composite_header,
    normalize_header,
)
from holelog_merge.models.cell import Cell

"""Unit tests for the sentinel-driven table locator."""


def _rows(grid: list[list[object]]):
    return tuple(tuple(Cell.from_raw(v) for v in line) for line in grid)


def _roles(grid: list[list[object]], **kwargs) -> list[RowRole]:
    return [c.role for c in TableLocator(_rows(grid), **kwargs).scan()]


def _data_firsts(grid: list[list[object]], **kwargs) -> list[str]:
    locator = TableLocator(_rows(grid), **kwargs)
    return [c.first_cell.to_display_text() for c in locator.data_rows()]


REPORT = [
    ["Daily Drilling Report", ""],     # 0 irrelevant
    ["2024-01-01", ""],                # 1 provenance
    ["Hole Number", "Depth"],          # 2 header start
    ["", "m"],                         # 3 sub row
    ["H1", 12.3],                      # 4 data
    ["", 4.0],                         # 5 blank leading
    ["H2", 9.8],                       # 6 data
    ["Sub-Totals", 22.1],              # 7 terminator
    ["H3", 1.0],                       # 8 after table
]


def test_normalize_header_rules():
    assert normalize_header("Depth (m)") == "depth_(m)"
    assert normalize_header("  Hole Number ") == "hole_number"
    assert normalize_header("Rig-Type") == "rig_type"
    assert normalize_header("Core\nRecovery") == "core_recovery"
    # Separators are replaced one for one
    assert normalize_header("Hole  Depth") == "hole__depth"


def test_forward_fill_composite_header():
    main = _rows([["A", "", "B"]])[0]
    sub = _rows([["x", "y", ""]])[0]
    assert build_composite_header(main, sub) == ("a_x", "a_y", "b", "date")


def test_composite_header_missing_sub_row_and_custom_label():
    main = _rows([["Hole Number", "Depth"]])[0]
    assert build_composite_header(main, (), provenance_label="report_date") == (
        "hole_number", "depth", "report_date",
    )


def test_composite_header_sub_row_shorter_than_main():
    main = _rows([["Depth", "", "Rig Type"]])[0]
    sub = _rows([["From", "To"]])[0]
    assert build_composite_header(main, sub) == ("depth_from", "depth_to", "rig_type", "date")


def test_composite_header_numeric_main_cell():
    main = _rows([["Hole Number", 2024]])[0]
    sub = _rows([["", ""]])[0]
    assert build_composite_header(main, sub) == ("hole_number", "2024", "date")


def test_standard_report_classification():
    assert _roles(REPORT) == [
        RowRole.IRRELEVANT,
        RowRole.IRRELEVANT,
        RowRole.HEADER_START,
        RowRole.HEADER_SUB_ROW,
        RowRole.DATA,
        RowRole.BLANK_LEADING,
        RowRole.DATA,
        RowRole.TERMINATOR,
        RowRole.AFTER_TABLE,
    ]


def test_scan_state_bounds():
    locator = TableLocator(_rows(REPORT))
    list(locator.scan())
    assert locator.state.header_row == 3
    assert locator.state.table_end_row == 7
    assert locator.state.remarks_row is None


def test_header_start_carries_sub_row():
    header = next(c for c in TableLocator(_rows(REPORT)).scan() if c.role is RowRole.HEADER_START)
    assert header.index == 2
    assert [c.to_display_text() for c in header.sub_row] == ["", "m"]


def test_header_start_as_last_row_has_empty_sub_row():
    classified = list(TableLocator(_rows([["title", ""], ["Hole Number", "Depth"]])).scan())
    assert classified[-1].role is RowRole.HEADER_START
    assert classified[-1].sub_row == ()


def test_no_header_means_no_data():
    grid = [["title", ""], ["H1", 1], ["H2", 2], ["Sub-Totals", ""]]
    assert _data_firsts(grid) == []
    assert RowRole.DATA not in _roles(grid)


def test_sentinel_match_is_exact():
    grid = [
        ["Hole Number ", "Depth"],   # trailing space: not a sentinel
        ["hole number", "Depth"],    # wrong case
        ["Hole Numbers", "Depth"],   # contains, not equal
    ]
    locator = TableLocator(_rows(grid))
    list(locator.scan())
    assert locator.state.header_row is None


def test_terminator_before_header_suppresses_all_data():
    grid = [
        ["Sub-Totals", ""],
        ["Hole Number", "Depth"],
        ["", ""],
        ["H1", 1],
    ]
    assert _data_firsts(grid) == []


def test_terminator_is_never_reset():
    grid = [
        ["Hole Number", "Depth"],
        ["", ""],
        ["H1", 1],
        ["Sub-Totals", ""],
        ["H2", 2],
        ["Sub-Totals", ""],
    ]
    locator = TableLocator(_rows(grid))
    assert [c.index for c in locator.data_rows()] == [2]
    assert locator.state.table_end_row == 3


def test_recurring_header_keeps_first_bounds():
    grid = [
        ["Hole Number", "Depth"],   # 0
        ["", ""],                   # 1 sub
        ["H1", 1],                  # 2 data
        ["Hole Number", "Depth"],   # 3 recurrence: header start again, not data
        ["Sub Row", ""],            # 4 not treated as a sub-row any more
        ["Sub-Totals", ""],         # 5
    ]
    locator = TableLocator(_rows(grid))
    roles = [c.role for c in locator.scan()]
    assert locator.state.header_row == 1
    assert roles[3] is RowRole.HEADER_START
    assert roles[4] is RowRole.DATA


def test_missing_first_cell_counts_as_blank():
    grid = [["Hole Number", "Depth"], ["", ""], [], ["H1", 1]]
    assert _roles(grid)[2] is RowRole.BLANK_LEADING
    assert _data_firsts(grid) == ["H1"]


def test_whitespace_first_cell_is_not_blank():
    grid = [["Hole Number", "Depth"], ["", ""], [" ", 1]]
    assert _roles(grid)[2] is RowRole.DATA


def test_emission_property_on_report():
    """Emitted iff after the sub-row, before the terminator, non-blank first cell, not the remarks row."""
    grid = [
        ["title", ""],          # 0
        ["Hole Number", "A"],   # 1
        ["", "x"],              # 2
        ["H1", 1],              # 3 yes
        ["", 2],                # 4 blank
        ["Remarks", "note"],    # 5 remarks row
        ["H2", 3],              # 6 yes (default mode)
        ["Sub-Totals", ""],     # 7
        ["H3", 4],              # 8 after end
    ]
    locator = TableLocator(_rows(grid))
    emitted = [c.index for c in locator.data_rows()]
    st = locator.state
    expected = [
        i for i, line in enumerate(grid)
        if st.header_row < i < st.table_end_row
        and line and line[0] != ""
        and i != st.remarks_row
    ]
    assert emitted == expected == [3, 6]


class TestRemarksBoundary:
    """Where a remarks marker stops suppressing rows."""

    GRID = [
        ["Hole Number", "Depth"],   # 0
        ["", ""],                   # 1
        ["H1", 1],                  # 2
        ["Remarks", "rig down"],    # 3
        ["H2", 2],                  # 4 ordinary-looking row after the marker
        ["Remarks", "second"],      # 5 a second marker
        ["Sub-Totals", ""],         # 6
    ]

    def test_row_mode_excludes_only_the_marker_row(self):
        locator = TableLocator(_rows(self.GRID))
        roles = [c.role for c in locator.scan()]
        assert roles[3] is RowRole.REMARKS_START
        assert roles[4] is RowRole.DATA
        # Only the first marker is designated; a later one is plain data
        assert roles[5] is RowRole.DATA
        assert locator.state.remarks_row == 3

    def test_row_mode_is_default(self):
        assert _data_firsts(self.GRID) == ["H1", "H2", "Remarks"]

    def test_section_mode_excludes_up_to_terminator(self):
        assert _data_firsts(self.GRID, remarks_mode=RemarksMode.SECTION) == ["H1"]
        roles = _roles(self.GRID, remarks_mode=RemarksMode.SECTION)
        assert roles[4:6] == [RowRole.REMARKS, RowRole.REMARKS]
        assert roles[6] is RowRole.TERMINATOR

    def test_remarks_before_header_claims_the_marker(self):
        grid = [
            ["Remarks", ""],            # 0 seen before any header
            ["Hole Number", "Depth"],   # 1
            ["", ""],                   # 2
            ["Remarks", "late"],        # 3 no longer the designated marker
            ["Sub-Totals", ""],
        ]
        locator = TableLocator(_rows(grid))
        assert [c.index for c in locator.data_rows()] == [3]
        assert locator.state.remarks_row == 0

    def test_section_mode_ignores_marker_above_header(self):
        grid = [
            ["Remarks", "preamble note"],   # 0 above the table
            ["2024-01-01", ""],             # 1
            ["Hole Number", "Depth"],       # 2
            ["", ""],                       # 3
            ["H1", 1],                      # 4
            ["H2", 2],                      # 5
            ["Sub-Totals", ""],             # 6
        ]
        locator = TableLocator(_rows(grid), remarks_mode=RemarksMode.SECTION)
        assert [c.first_cell.to_display_text() for c in locator.data_rows()] == ["H1", "H2"]
        assert locator.state.remarks_row is None
        assert _roles(grid, remarks_mode=RemarksMode.SECTION)[0] is RowRole.IRRELEVANT

    def test_section_mode_marker_inside_table_after_preamble_marker(self):
        grid = [
            ["Remarks", ""],                # 0 above the table
            ["Hole Number", "Depth"],       # 1
            ["", ""],                       # 2
            ["H1", 1],                      # 3
            ["Remarks", "rig down"],        # 4 starts the section
            ["H2", 2],                      # 5
            ["Sub-Totals", ""],             # 6
        ]
        locator = TableLocator(_rows(grid), remarks_mode=RemarksMode.SECTION)
        assert [c.index for c in locator.data_rows()] == [3]
        assert locator.state.remarks_row == 4


@pytest.mark.parametrize("remarks_mode", list(RemarksMode))
def test_custom_sentinels(remarks_mode):
    grid = [
        ["Sample ID", "Grade"],
        ["", "g/t"],
        ["S1", 1.2],
        ["Notes", ""],
        ["Totals", ""],
        ["S2", 3.4],
    ]
    sentinels = Sentinels(data_start="Sample ID", data_end="Totals", remarks_start="Notes")
    assert _data_firsts(grid, sentinels=sentinels, remarks_mode=remarks_mode) == ["S1"]


def test_fresh_locator_per_document_has_unset_state():
    locator = TableLocator(_rows([]))
    assert list(locator.scan()) == []
    assert locator.state.header_row is None
    assert locator.state.table_end_row is None
    assert locator.state.remarks_row is None
