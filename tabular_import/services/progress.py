from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any

from tqdm import tqdm

"""Import run progress.

ImportProgress counts files as they move through load -> submit and is the
single source of the per-run totals used by process_files. The counts are
mirrored on a tqdm bar that is only drawn when stdout is a TTY, so piped or
CI output keeps plain labeled log lines.
"""

__all__ = [
    "ImportCounts",
    "ImportProgress",
]


@dataclass
class ImportCounts:
    loaded: int = 0  # files that produced a preview and payload
    submitted: int = 0
    failed: int = 0  # rejected at load or at submit
    previewed_rows: int = 0  # of submitted files only
    inserted_rows: int = 0

    @property
    def finished(self) -> int:
        return self.submitted + self.failed


class ImportProgress:
    def __init__(self, total_files: int, *, enabled: bool | None = None) -> None:
        if enabled is None:
            enabled = sys.stdout.isatty()
        self.counts = ImportCounts()
        self.bar = tqdm(
            total=total_files,
            desc="Importing",
            unit="file",
            disable=not enabled,
            ncols=80,
            ascii=True,
        )

    def loaded(self, file_name: str) -> None:
        self.counts.loaded += 1
        self.bar.set_description_str(f"Importing {file_name}", refresh=False)

    def submitted(self, inserted_rows: int, previewed_rows: int) -> None:
        self.counts.submitted += 1
        self.counts.inserted_rows += inserted_rows
        self.counts.previewed_rows += previewed_rows
        self._advance()

    def failed(self) -> None:
        self.counts.failed += 1
        self._advance()

    def _advance(self) -> None:
        c = self.counts
        self.bar.set_postfix(ok=c.submitted, failed=c.failed, rows=c.inserted_rows, refresh=False)
        self.bar.update(1)

    def close(self) -> None:
        self.bar.close()

    def __enter__(self) -> ImportProgress:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
