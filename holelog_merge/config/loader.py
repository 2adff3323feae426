from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..excel.locator import RemarksMode, Sentinels
from ..excel.reader import DEFAULT_EXTENSIONS

"""Config loader.

Responsibilities:
- Load YAML config (default location config/merge.yml)
- Validate against the packaged config_schema.json
- Apply defaults for every key that is absent
- Apply HOLELOG_* environment overrides for the input/output paths
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")

ENV_INPUT_DIR = "HOLELOG_INPUT_DIR"
ENV_OUTPUT_FILE = "HOLELOG_OUTPUT_FILE"

DEFAULT_PROVENANCE_ROW = 1
DEFAULT_PROVENANCE_COLUMN = 0
DEFAULT_PROVENANCE_LABEL = "date"
DEFAULT_ERROR_LOG_DIR = "logs"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class ProvenanceConfig:
    row: int = DEFAULT_PROVENANCE_ROW
    column: int = DEFAULT_PROVENANCE_COLUMN
    label: str = DEFAULT_PROVENANCE_LABEL


@dataclass(frozen=True)
class MergeConfig:
    input_directory: str | None = None
    output_file: str | None = None
    sentinels: Sentinels = field(default_factory=Sentinels)
    provenance: ProvenanceConfig = field(default_factory=ProvenanceConfig)
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    sheet_name: str | int | None = None  # None: sheet named after the file stem
    sort_files: bool = False
    strict_columns: bool = False
    remarks_mode: RemarksMode = RemarksMode.ROW
    na_strings: tuple[str, ...] = ()
    error_log_dir: str = DEFAULT_ERROR_LOG_DIR

    def require_paths(self) -> tuple[Path, Path]:
        """Return (input_directory, output_file) or raise if either is unset."""
        missing = [
            name for name, value in (("input_directory", self.input_directory), ("output_file", self.output_file))
            if not value
        ]
        if missing:
            raise ConfigError(f"missing required setting(s): {', '.join(missing)}")
        return Path(self.input_directory), Path(self.output_file)  # type: ignore[arg-type]


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or unreadable, or the
            config data violates it.
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def default_config() -> MergeConfig:
    return MergeConfig()


def config_from_mapping(data: Mapping[str, Any]) -> MergeConfig:
    """Build a MergeConfig from already-validated raw data."""
    sentinels_raw = data.get("sentinels") or {}
    defaults = Sentinels()
    sentinels = Sentinels(
        data_start=sentinels_raw.get("data_start", defaults.data_start),
        data_end=sentinels_raw.get("data_end", defaults.data_end),
        remarks_start=sentinels_raw.get("remarks_start", defaults.remarks_start),
    )
    prov_raw = data.get("provenance") or {}
    provenance = ProvenanceConfig(
        row=prov_raw.get("row", DEFAULT_PROVENANCE_ROW),
        column=prov_raw.get("column", DEFAULT_PROVENANCE_COLUMN),
        label=prov_raw.get("label", DEFAULT_PROVENANCE_LABEL),
    )
    return MergeConfig(
        input_directory=data.get("input_directory"),
        output_file=data.get("output_file"),
        sentinels=sentinels,
        provenance=provenance,
        extensions=tuple(data.get("extensions", DEFAULT_EXTENSIONS)),
        sheet_name=data.get("sheet_name"),
        sort_files=data.get("sort_files", False),
        strict_columns=data.get("strict_columns", False),
        remarks_mode=RemarksMode(data.get("remarks_mode", RemarksMode.ROW.value)),
        na_strings=tuple(data.get("na_strings", ())),
        error_log_dir=data.get("error_log_dir", DEFAULT_ERROR_LOG_DIR),
    )


def load_config(path: Path) -> MergeConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)
    return config_from_mapping(data)


def apply_env_overrides(cfg: MergeConfig, environ: Mapping[str, str] | None = None) -> MergeConfig:
    """Override input/output paths from HOLELOG_INPUT_DIR / HOLELOG_OUTPUT_FILE."""
    env = os.environ if environ is None else environ
    changes: dict[str, Any] = {}
    if env.get(ENV_INPUT_DIR):
        changes["input_directory"] = env[ENV_INPUT_DIR]
    if env.get(ENV_OUTPUT_FILE):
        changes["output_file"] = env[ENV_OUTPUT_FILE]
    return replace(cfg, **changes) if changes else cfg
