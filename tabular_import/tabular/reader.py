from __future__ import annotations

import logging
from pathlib import Path

from ..models.config_models import DEFAULT_MAX_FILE_BYTES
from ..models.parsed_table import ParsedTable
from ..models.raw_file import RawFile
from .codec import SpreadsheetCodec, get_codec
from .detector import FileFormat, ReadMode, read_mode

"""File reading and parsing for the import pipeline.

- read_raw_file: path -> RawFile, rejecting files over the size cap before
  any bytes are read
- decode_content: RawFile -> str (CSV) or bytes (xls/xlsx)
- parse: content -> ParsedTable from the first sheet of the workbook

Any failure inside the codec is surfaced as a single ParseError carrying the
file name; a partially parsed table is never returned.
"""

__all__ = [
    "FileTooLargeError",
    "ParseError",
    "decode_content",
    "parse",
    "read_raw_file",
]

logger = logging.getLogger(__name__)


class FileTooLargeError(Exception):
    """Raised when a file exceeds the configured size cap."""

    def __init__(self, file_name: str, size: int, max_bytes: int) -> None:
        super().__init__(f"file '{file_name}' is {size} bytes (limit {max_bytes})")
        self.file_name = file_name
        self.size = size
        self.max_bytes = max_bytes


class ParseError(Exception):
    """Raised when file content cannot be interpreted as a table."""

    def __init__(self, file_name: str, reason: str) -> None:
        super().__init__(f"could not parse '{file_name}': {reason}")
        self.file_name = file_name
        self.reason = reason


def read_raw_file(path: Path, max_bytes: int = DEFAULT_MAX_FILE_BYTES) -> RawFile:
    size = path.stat().st_size
    if size > max_bytes:
        raise FileTooLargeError(path.name, size, max_bytes)
    return RawFile(name=path.name, content=path.read_bytes())


def decode_content(raw: RawFile, fmt: FileFormat) -> str | bytes:
    """Turn raw bytes into what the codec expects for the detected format."""
    if read_mode(fmt) is ReadMode.BINARY:
        return raw.content
    try:
        # utf-8-sig: Excel 出力の BOM 付き CSV 対応
        return raw.content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(raw.name, f"not valid UTF-8 text: {e}") from e


def parse(
    content: str | bytes,
    mode: FileFormat,
    file_name: str,
    codec: SpreadsheetCodec | None = None,
) -> ParsedTable:
    """Parse CSV text or workbook bytes into a ParsedTable (first sheet only)."""
    if mode is FileFormat.UNSUPPORTED:
        raise ParseError(file_name, "unsupported file type")
    codec = codec or get_codec()
    content_type = "string" if mode is FileFormat.CSV else "binary"
    try:
        workbook = codec.parse_workbook(content, type=content_type)
        sheet_name, sheet = workbook.first_sheet()
        rows = codec.sheet_to_rows(sheet)
    except Exception as e:
        raise ParseError(file_name, str(e) or type(e).__name__) from e

    if len(workbook.sheet_names) > 1:
        logger.debug(
            "file=%s using first sheet '%s', ignoring %s",
            file_name,
            sheet_name,
            workbook.sheet_names[1:],
        )
    logger.debug("file=%s sheet=%s rows=%d", file_name, sheet_name, len(rows))
    return ParsedTable(file_name=file_name, rows=rows, sheet_name=sheet_name, sheet=sheet)
