from __future__ import annotations

from datetime import UTC, datetime

import pytest

from tabular_import.models.processing_result import ProcessingResult
from tabular_import.services.summary import render_summary_line


def _result(elapsed: float, *, success: int = 2, failed: int = 1) -> ProcessingResult:
    now = datetime(2024, 5, 1, tzinfo=UTC)
    return ProcessingResult(
        success_files=success,
        failed_files=failed,
        total_previewed_rows=75,
        total_inserted_rows=70,
        start_time=now,
        end_time=now,
        elapsed_seconds=elapsed,
    )


def test_summary_line_keys_in_order():
    line = render_summary_line(_result(1.5))
    assert line == "SUMMARY files=3 success=2 failed=1 previewed_rows=75 inserted_rows=70 elapsed_sec=1.5"


@pytest.mark.parametrize(
    "elapsed,expected",
    [(0.0, "0"), (3.0, "3"), (0.1234, "0.123"), (0.000123, "0.000123")],
)
def test_elapsed_formatting(elapsed, expected):
    assert render_summary_line(_result(elapsed)).endswith(f"elapsed_sec={expected}")
