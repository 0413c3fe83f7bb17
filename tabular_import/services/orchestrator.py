from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ImportConfig
from ..models.processing_result import FileStat, ProcessingResult
from ..tabular.codec import SpreadsheetCodec
from .import_session import ImportSession
from .progress import ImportProgress
from .remote import RowSubmitter

"""Batch import orchestration for the CLI.

Each file gets its own ImportSession (no state is shared between files):
load -> preview/payload -> submit. A failing file is recorded and the run
moves on to the next one. Error records of the whole run are flushed once at
the end.
"""

__all__ = [
    "process_files",
]

logger = logging.getLogger(__name__)


def process_files(
    paths: Sequence[Path],
    config: ImportConfig,
    submitter: RowSubmitter,
    *,
    target_object: str | None = None,
    codec: SpreadsheetCodec | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> ProcessingResult:
    """Import every file in ``paths`` and aggregate the outcome."""
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    file_stats: list[FileStat] = []

    with ImportProgress(len(paths)) as progress:
        for path in paths:
            file_start = datetime.now(UTC)

            session = ImportSession(
                submitter,
                config=config,
                codec=codec,
                error_log=error_log,
                target_object=target_object,
            )
            inserted = None
            if session.load_path(path):
                progress.loaded(path.name)
                inserted = session.submit()
            previewed = session.preview.row_count if session.has_payload else 0
            ok = inserted is not None

            if ok:
                progress.submitted(inserted, previewed)
                logger.info("%s: %s", path.name, session.message)
            else:
                progress.failed()
                logger.error("%s: %s", path.name, session.message)

            file_stats.append(
                FileStat(
                    file_name=path.name,
                    status="success" if ok else "failed",
                    previewed_rows=previewed,
                    inserted_rows=inserted or 0,
                    elapsed_seconds=(datetime.now(UTC) - file_start).total_seconds(),
                    error=None if ok else session.message,
                )
            )

    try:
        flushed = error_log.flush()
    except OSError as e:
        # エラーログ書き込み失敗で全体を失敗扱いにしない
        logger.warning("failed to write error log: %s", e)
    else:
        if flushed is not None:
            logger.info("error log written: %s", flushed)

    counts = progress.counts
    end_time = datetime.now(UTC)
    return ProcessingResult(
        success_files=counts.submitted,
        failed_files=counts.failed,
        total_previewed_rows=counts.previewed_rows,
        total_inserted_rows=counts.inserted_rows,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
    )
