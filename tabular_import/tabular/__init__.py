"""Tabular import pipeline: format detection, parsing, preview and payload encoding."""

from .codec import PandasCodec, SpreadsheetCodec, Workbook, get_codec
from .detector import FileFormat, ReadMode, detect, read_mode
from .encoder import to_submission_payload
from .preview import build_preview
from .reader import FileTooLargeError, ParseError, decode_content, parse, read_raw_file

__all__ = [
    "FileFormat",
    "FileTooLargeError",
    "PandasCodec",
    "ParseError",
    "ReadMode",
    "SpreadsheetCodec",
    "Workbook",
    "build_preview",
    "decode_content",
    "detect",
    "get_codec",
    "parse",
    "read_mode",
    "read_raw_file",
    "to_submission_payload",
]
