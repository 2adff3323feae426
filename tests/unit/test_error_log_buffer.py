from __future__ import annotations

import json
import re
from pathlib import Path

from holelog_merge.logging.error_log import ErrorLogBuffer, ErrorRecord

ERROR_LOG_KEYS = {"timestamp", "file", "row", "error_type", "message"}


def test_error_record_creation_and_json_line():
    rec = ErrorRecord.create(
        file="A.xlsx",
        row=-1,
        error_type="DECODE_ERROR",
        message="cannot open workbook A.xlsx",
    )
    data = json.loads(rec.to_json_line())
    assert data["file"] == "A.xlsx"
    assert data["row"] == -1
    assert data["error_type"] == "DECODE_ERROR"
    assert data["timestamp"].endswith("Z")
    assert set(data.keys()) == ERROR_LOG_KEYS


def test_error_record_keeps_non_ascii():
    rec = ErrorRecord.create("Bohrung-Süd.xlsx", -1, "DECODE_ERROR", "kaputt")
    assert "Bohrung-Süd.xlsx" in rec.to_json_line()


def test_flush_writes_json_lines(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "logs")
    buf.append(ErrorRecord.create("a.xlsx", -1, "DECODE_ERROR", "bad zip"))
    buf.append(ErrorRecord.create("b.xlsx", -1, "SHEET_NOT_FOUND", "worksheet 'b' not found"))
    path = buf.flush()

    assert path is not None and path.exists()
    assert path.parent == temp_workdir / "logs"
    assert re.fullmatch(r"errors-\d{8}-\d{6}\.log", path.name)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["file"] for line in lines] == ["a.xlsx", "b.xlsx"]
    assert len(buf) == 0


def test_flush_without_records_creates_nothing(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "logs")
    assert buf.flush() is None
    assert not (temp_workdir / "logs").exists()


def test_multiple_flushes_append_to_same_file(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("a.xlsx", -1, "DECODE_ERROR", "first"))
    path = buf.flush()
    assert path is not None
    size1 = path.stat().st_size
    buf.append(ErrorRecord.create("b.xlsx", -1, "DECODE_ERROR", "second"))
    path2 = buf.flush()
    assert path2 == path
    assert path.stat().st_size > size1
    assert path.resolve().parent == (temp_workdir / "logs").resolve()
