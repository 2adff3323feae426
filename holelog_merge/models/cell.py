from __future__ import annotations

import numbers
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd

"""Cell domain model for the hole report merge tool.

A Cell is one decoded worksheet value carrying its semantic kind. The decoder
hands out raw pandas/openpyxl values; ``Cell.from_raw`` classifies them once so
the locator and the output stage only ever deal with display text.
"""

__all__ = [
    "Cell",
    "CellKind",
    "EMPTY_CELL",
    "Row",
]


class CellKind(Enum):
    """Semantic type of a decoded cell."""
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    EMPTY = "empty"


@dataclass(frozen=True)
class Cell:
    """Immutable typed cell value.

    Attributes:
        kind: Semantic classification of the value
        value: The decoded Python value (None for EMPTY)
    """
    kind: CellKind
    value: Any = None

    @classmethod
    def from_raw(cls, value: Any) -> Cell:
        """Classify a raw decoded value.

        None, NaN/NaT and the empty string are EMPTY. Booleans are checked
        before numbers since ``bool`` is an ``int`` subclass.
        """
        if value is None:
            return EMPTY_CELL
        if isinstance(value, str):
            if value == "":
                return EMPTY_CELL
            return cls(CellKind.TEXT, value)
        if pd.api.types.is_scalar(value) and pd.isna(value):
            return EMPTY_CELL
        if isinstance(value, (bool, np.bool_)):
            return cls(CellKind.BOOLEAN, bool(value))
        if isinstance(value, np.datetime64):
            return cls(CellKind.DATE, pd.Timestamp(value).to_pydatetime())
        if isinstance(value, (datetime, date, time)):
            return cls(CellKind.DATE, value)
        if isinstance(value, numbers.Number):
            return cls(CellKind.NUMBER, value)
        return cls(CellKind.TEXT, str(value))

    @property
    def is_empty(self) -> bool:
        return self.kind is CellKind.EMPTY

    def to_display_text(self) -> str:
        """Render the value the way it appears in the merged output."""
        if self.kind is CellKind.EMPTY:
            return ""
        if self.kind is CellKind.TEXT:
            return self.value
        if self.kind is CellKind.BOOLEAN:
            return "true" if self.value else "false"
        if self.kind is CellKind.NUMBER:
            return _format_number(self.value)
        return _format_date(self.value)


def _format_number(value: Any) -> str:
    if isinstance(value, numbers.Integral):
        return str(int(value))
    try:
        as_float = float(value)
    except (TypeError, ValueError):
        return str(value)
    if as_float.is_integer():
        return str(int(as_float))
    # repr(float) gives the shortest round-tripping form (12.3 -> "12.3")
    return repr(as_float)


def _format_date(value: Any) -> str:
    if isinstance(value, datetime):
        if (value.hour, value.minute, value.second, value.microsecond) == (0, 0, 0, 0):
            return value.strftime("%Y-%m-%d")
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    return value.strftime("%H:%M:%S")


EMPTY_CELL = Cell(CellKind.EMPTY)

# One worksheet line, positionally indexed
Row = tuple[Cell, ...]
