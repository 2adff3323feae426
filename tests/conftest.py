# Shared pytest fixtures
from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from holelog_merge.logging.init import LOGGER_NAME, reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("HOLELOG_INPUT_DIR", raising=False)
    monkeypatch.delenv("HOLELOG_OUTPUT_FILE", raising=False)
    reset_logging()
    yield
    reset_logging()
    # Handlers bound to a test's captured stdout must not outlive the test
    app_logger = logging.getLogger(LOGGER_NAME)
    for handler in app_logger.handlers[:]:
        app_logger.removeHandler(handler)


@pytest.fixture()
def write_report() -> Callable[..., Path]:
    """Write a single-sheet workbook; the sheet is named after the file stem by default."""
    def _write(directory: Path, name: str, grid: list[list[object]], sheet_name: str | None = None) -> Path:
        path = directory / name
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            pd.DataFrame(grid).to_excel(
                writer, sheet_name=sheet_name or path.stem, header=False, index=False
            )
        return path
    return _write


@pytest.fixture()
def sample_config_yaml() -> str:
    return """input_directory: ./data
output_file: ./out/merged.csv
sort_files: true
error_log_dir: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "merge.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg
