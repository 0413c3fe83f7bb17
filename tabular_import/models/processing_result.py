from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Processing result models for CLI import runs.

A CLI run feeds one or more files through separate import sessions. FileStat
records what happened to each file; ProcessingResult aggregates them for the
SUMMARY line.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file outcome of an import run."""
    file_name: str
    status: str  # success/failed
    previewed_rows: int  # data rows in the bounded window
    inserted_rows: int  # rows reported by the submitter
    elapsed_seconds: float
    error: str | None = None  # user-visible failure message


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results of an import run."""
    success_files: int
    failed_files: int
    total_previewed_rows: int
    total_inserted_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
