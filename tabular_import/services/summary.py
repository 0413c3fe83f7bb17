from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""Summary line rendering for CLI import runs."""


def _format_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{value:.6f}".rstrip('0').rstrip('.')
    return f"{value:.3f}".rstrip('0').rstrip('.')


def render_summary_line(result: ProcessingResult) -> str:
    """Render the SUMMARY line for an import run.

    Format:
    SUMMARY files={total} success={success} failed={failed}
    previewed_rows={previewed} inserted_rows={inserted} elapsed_sec={elapsed}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2023, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2023, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     success_files=1, failed_files=0, total_previewed_rows=50,
        ...     total_inserted_rows=50, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY files=1 success=1 failed=0 previewed_rows=50 inserted_rows=50 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={result.total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"previewed_rows={result.total_previewed_rows} "
        f"inserted_rows={result.total_inserted_rows} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)}"
    )
