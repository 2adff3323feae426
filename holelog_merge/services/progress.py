from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display with tqdm (TTY only).

One bar over the documents of the run. In non-TTY environments (CI, pipes)
no bar is created, so log output is not interleaved with control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Document progress bar, disabled outside a terminal."""

    def __init__(self, total_documents: int, *, description: str = "Merging reports") -> None:
        """Initialize progress tracker.

        Args:
            total_documents: Number of documents the run will visit
            description: Description for the progress bar
        """
        self.total_documents = total_documents
        self.description = description
        self.current_document = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_documents,
                desc=description,
                unit="doc",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start_document(self, path: Path) -> None:
        self.current_document += 1

        if self.enabled and self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({path.name})")

    def finish_document(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
