#!/usr/bin/env python3
"""Generate synthetic hole report workbooks.

Each workbook holds one worksheet named after the file stem, laid out the way
field reports arrive:
- Row 1: Report title
- Row 2: Report date (the provenance cell)
- Row 3: Free-form site line
- Row 4: Main header, first cell "Hole Number", merged groups left blank
- Row 5: Sub header
- Row 6+: Hole rows, an optional "Remarks" line, then "Sub-Totals"

Useful for manual runs of holelog-merge and rough throughput checks.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

MAIN_HEADER = ["Hole Number", "Depth", "", "Core Recovery", "Rig-Type", "Comments"]
SUB_HEADER = ["", "From", "To", "(%)", "", ""]
RIG_TYPES = ["RC", "Diamond", "Auger", "RAB"]


def build_report_rows(report_date: pd.Timestamp, holes: int, rng: np.random.Generator, with_remarks: bool) -> list[list[object]]:
    """Build the cell grid of one report worksheet."""
    rows: list[list[object]] = [
        ["Daily Drilling Report"] + [""] * (len(MAIN_HEADER) - 1),
        [report_date.strftime("%Y-%m-%d")] + [""] * (len(MAIN_HEADER) - 1),
        ["Site: synthetic"] + [""] * (len(MAIN_HEADER) - 1),
        list(MAIN_HEADER),
        list(SUB_HEADER),
    ]
    depth = 0.0
    for i in range(holes):
        drilled = float(np.round(rng.uniform(0.5, 30.0), 1))
        rows.append([
            f"H{i + 1:03d}",
            depth,
            float(np.round(depth + drilled, 1)),
            int(rng.integers(60, 101)),
            str(rng.choice(RIG_TYPES)),
            "",
        ])
        depth = float(np.round(depth + drilled, 1))
    if with_remarks:
        rows.append(["Remarks", "Generated data", "", "", "", ""])
    rows.append(["Sub-Totals", "", depth, "", "", ""])
    return rows


def create_report(output_path: Path, report_date: pd.Timestamp, holes: int, seed: int, with_remarks: bool) -> None:
    rng = np.random.default_rng(seed)
    grid = build_report_rows(report_date, holes, rng, with_remarks)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        pd.DataFrame(grid).to_excel(writer, sheet_name=output_path.stem, header=False, index=False)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic hole report workbooks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Ten reports with 25 holes each
  %(prog)s reports/

  # Larger set for throughput checks
  %(prog)s reports/ --reports 200 --holes 400 --seed 7
        """,
    )
    parser.add_argument("output_dir", type=Path, help="Directory to write the .xlsx reports into")
    parser.add_argument("--reports", type=int, default=10, help="Number of workbooks (default: 10)")
    parser.add_argument("--holes", type=int, default=25, help="Hole rows per report (default: 25)")
    parser.add_argument("--start-date", default="2024-01-01", help="Date of the first report (default: 2024-01-01)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--no-remarks", action="store_true", help="Omit the Remarks line")
    args = parser.parse_args()

    if args.reports <= 0 or args.holes <= 0:
        print("Error: --reports and --holes must be positive", file=sys.stderr)
        return 1

    start = pd.Timestamp(args.start_date)
    for i in range(args.reports):
        report_date = start + pd.Timedelta(days=i)
        path = args.output_dir / f"report_{report_date.strftime('%Y%m%d')}.xlsx"
        create_report(path, report_date, args.holes, args.seed + i, not args.no_remarks)
        print(f"Created {path}")

    print(f"\n{args.reports} reports, {args.reports * args.holes:,} hole rows total")
    return 0


if __name__ == "__main__":
    sys.exit(main())
