from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import IO

from ..errors import SinkWriteError

"""Line-oriented output sink for the merged record stream.

One line per record, fields joined with ',' and terminated with '\n', UTF-8.
Fields are written as-is: embedded commas are not quoted or escaped, so a
value containing ',' shifts the columns of its line. Downstream tools read
the file as plain comma-separated text.
"""

__all__ = [
    "LineSink",
    "SinkWriteError",
]

FIELD_SEPARATOR = ","
LINE_TERMINATOR = "\n"
ENCODING = "utf-8"


class LineSink:
    """Single-writer output destination, truncated on open.

    Use as a context manager; the underlying file stays open for the whole
    run. A caller-supplied binary stream is written to but never closed.
    """

    def __init__(self, path: Path | None = None, stream: IO[bytes] | None = None) -> None:
        if (path is None) == (stream is None):
            raise ValueError("LineSink needs exactly one of path or stream")
        self.path = path
        self._stream = stream
        self._owns_stream = stream is None
        self.records_written = 0

    @classmethod
    def from_stream(cls, stream: IO[bytes]) -> LineSink:
        return cls(stream=stream)

    def open(self) -> LineSink:
        # stream sinks are open from construction
        if self._stream is not None or self.path is None:
            return self
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._stream = self.path.open("wb")
        except OSError as e:
            raise SinkWriteError(f"cannot open output file {self.path}: {e}") from e
        return self

    def write_record(self, fields: Sequence[str]) -> None:
        """Append one comma-joined, newline-terminated line."""
        if self._stream is None:
            raise SinkWriteError("sink is not open")
        line = FIELD_SEPARATOR.join(fields) + LINE_TERMINATOR
        try:
            self._stream.write(line.encode(ENCODING))
        except (OSError, ValueError) as e:  # ValueError: write to closed file
            raise SinkWriteError(f"cannot write output: {e}") from e
        self.records_written += 1

    def close(self) -> None:
        if self._stream is None or not self._owns_stream:
            return
        try:
            self._stream.close()
        except OSError as e:
            raise SinkWriteError(f"cannot close output file {self.path}: {e}") from e
        finally:
            self._stream = None

    def __enter__(self) -> LineSink:
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
