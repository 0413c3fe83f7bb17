from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ImportConfig
from ..models.error_record import ErrorRecord
from ..models.parsed_table import ParsedTable
from ..models.preview import Preview, PreviewRow
from ..models.raw_file import RawFile
from ..models.submit_state import SubmitState
from ..tabular.codec import SpreadsheetCodec, get_codec
from ..tabular.detector import FileFormat, detect
from ..tabular.encoder import to_submission_payload
from ..tabular.preview import build_preview
from ..tabular.reader import FileTooLargeError, ParseError, decode_content, parse, read_raw_file
from .remote import RemoteSubmissionError, RowSubmitter

"""Import session: the file import widget without the UI.

One session owns at most one loaded file. Selecting a new file replaces the
previous state (last write wins). The user-visible outcome of every action is
written to ``message``; failures never escape as exceptions except for
programming errors.

Flow:
    select_file(raw) -> detect -> decode -> parse -> preview + payload
    submit()         -> submitter.submit_rows(payload, target_object)
"""

__all__ = [
    "ImportSession",
    "MSG_ALREADY_SUBMITTING",
    "MSG_NO_FILE",
    "MSG_SELECT_FIRST",
    "MSG_UNSUPPORTED",
]

logger = logging.getLogger(__name__)

MSG_NO_FILE = "No file selected"
MSG_UNSUPPORTED = "Unsupported file type. Please upload CSV or Excel."
MSG_SELECT_FIRST = "Please select a file"
MSG_ALREADY_SUBMITTING = "Upload already in progress"


class ImportSession:
    def __init__(
        self,
        submitter: RowSubmitter | None = None,
        *,
        config: ImportConfig | None = None,
        codec: SpreadsheetCodec | None = None,
        error_log: ErrorLogBuffer | None = None,
        target_object: str | None = None,
    ) -> None:
        self.config = config or ImportConfig()
        self.submitter = submitter
        self.codec = codec or get_codec()
        self.error_log = error_log
        self.target_object = target_object or self.config.target_object

        self.message = ""
        self.file_name: str | None = None
        self.table: ParsedTable | None = None
        self.preview = Preview(headers=[], rows=[])
        self.file_content: str | None = None  # submission payload
        self.submit_state = SubmitState.IDLE
        self.last_inserted: int | None = None

    @property
    def headers(self) -> list[Any]:
        return self.preview.headers

    @property
    def preview_rows(self) -> list[PreviewRow]:
        return self.preview.rows

    @property
    def has_payload(self) -> bool:
        return bool(self.file_content)

    def _clear(self) -> None:
        self.file_name = None
        self.table = None
        self.preview = Preview(headers=[], rows=[])
        self.file_content = None

    def _fail(self, file_name: str, error_type: str, message: str) -> bool:
        self.message = message
        logger.debug("file=%s %s: %s", file_name, error_type, message)
        if self.error_log is not None:
            self.error_log.append(ErrorRecord.create(file_name, -1, error_type, message))
        return False

    def load_path(self, path: Path) -> bool:
        """Read a file from disk and load it (size is checked before reading)."""
        try:
            raw = read_raw_file(path, self.config.max_file_bytes)
        except FileTooLargeError:
            self._clear()
            return self._fail(path.name, "FILE_TOO_LARGE", self._too_large_message())
        except OSError as e:
            self._clear()
            return self._fail(path.name, "READ_ERROR", f"Error: could not read {path.name}: {e}")
        return self.select_file(raw)

    def _too_large_message(self) -> str:
        return (
            "File is too large. Please upload a file smaller than "
            f"{self.config.max_file_megabytes:g}MB."
        )

    def select_file(self, raw: RawFile | None) -> bool:
        """Load a newly selected file, replacing whatever was loaded before.

        Returns True when a preview and payload are ready for submission.
        """
        if raw is None:
            self.message = MSG_NO_FILE
            return False

        self._clear()
        if raw.size > self.config.max_file_bytes:
            return self._fail(raw.name, "FILE_TOO_LARGE", self._too_large_message())

        fmt = detect(raw.name)
        if fmt is FileFormat.UNSUPPORTED:
            return self._fail(raw.name, "UNSUPPORTED_FORMAT", MSG_UNSUPPORTED)

        try:
            content = decode_content(raw, fmt)
            table = parse(content, fmt, raw.name, codec=self.codec)
        except ParseError as e:
            return self._fail(raw.name, "PARSE_ERROR", f"Error: {e}")

        row_cap = self.config.row_cap
        self.file_name = raw.name
        self.table = table
        self.preview = build_preview(table, row_cap)

        if not table.has_data:
            return self._fail(raw.name, "NO_DATA", f'File "{raw.name}" contains no data')

        self.file_content = to_submission_payload(table, row_cap, codec=self.codec)
        if self.submit_state is SubmitState.ERROR:
            self.submit_state = SubmitState.IDLE
        self.message = f'File "{raw.name}" loaded successfully'
        logger.debug(
            "file=%s format=%s rows=%d previewed=%d",
            raw.name,
            fmt.value,
            len(table.data_rows),
            self.preview.row_count,
        )
        return True

    def submit(self) -> int | None:
        """Send the payload to the submitter; returns the inserted count on success."""
        if not self.file_content:
            self.message = MSG_SELECT_FIRST
            return None
        if self.submit_state is SubmitState.SUBMITTING:
            self.message = MSG_ALREADY_SUBMITTING
            return None
        if self.submitter is None:
            raise RuntimeError("no submitter configured for this session")

        self.submit_state = SubmitState.SUBMITTING
        try:
            count = self.submitter.submit_rows(
                self.file_content,
                self.target_object,
                timeout=self.config.submit_timeout_seconds,
            )
        except RemoteSubmissionError as e:
            self.submit_state = SubmitState.ERROR
            self._fail(self.file_name or "", "SUBMISSION_ERROR", f"Error: {e.message}")
            return None
        except Exception:
            self.submit_state = SubmitState.ERROR
            raise

        self.submit_state = SubmitState.IDLE
        self.last_inserted = count
        self.message = f"File uploaded. Inserted {count} records"
        return count
