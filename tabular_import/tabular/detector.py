from __future__ import annotations

from enum import Enum

"""File format detection by file name suffix.

Detection never raises: an unrecognized name is reported as
FileFormat.UNSUPPORTED and the caller decides what to tell the user.
"""

__all__ = [
    "FileFormat",
    "ReadMode",
    "detect",
    "read_mode",
]


class FileFormat(Enum):
    CSV = "csv"
    SPREADSHEET = "spreadsheet"
    UNSUPPORTED = "unsupported"


class ReadMode(Enum):
    """How the raw bytes are handed to the codec."""
    TEXT = "text"  # decoded str
    BINARY = "binary"  # untouched bytes


_SUFFIXES: dict[str, FileFormat] = {
    ".csv": FileFormat.CSV,
    ".xls": FileFormat.SPREADSHEET,
    ".xlsx": FileFormat.SPREADSHEET,
}


def detect(filename: str | None) -> FileFormat:
    """Choose the parse mode from a file name (case-insensitive)."""
    if not filename:
        return FileFormat.UNSUPPORTED
    lowered = filename.lower()
    for suffix, fmt in _SUFFIXES.items():
        if lowered.endswith(suffix):
            return fmt
    return FileFormat.UNSUPPORTED


def read_mode(fmt: FileFormat) -> ReadMode:
    if fmt is FileFormat.CSV:
        return ReadMode.TEXT
    if fmt is FileFormat.SPREADSHEET:
        return ReadMode.BINARY
    raise ValueError(f"no read mode for {fmt.value} files")
