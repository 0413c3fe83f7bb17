"""Domain models for the tabular import / export tool."""

from .config_models import (
    ColumnConfig,
    DatabaseConfig,
    ExportConfig,
    ExportEntityConfig,
    ImportConfig,
)
from .error_record import ErrorRecord
from .parsed_table import ParsedTable
from .preview import Preview, PreviewCell, PreviewRow
from .processing_result import FileStat, ProcessingResult
from .raw_file import RawFile
from .submit_state import SubmitState

__all__ = [
    # Configuration models
    "ColumnConfig",
    "DatabaseConfig",
    "ExportConfig",
    "ExportEntityConfig",
    "ImportConfig",
    # Pipeline models
    "ParsedTable",
    "Preview",
    "PreviewCell",
    "PreviewRow",
    "RawFile",
    "SubmitState",
    # Run reporting
    "ErrorRecord",
    "FileStat",
    "ProcessingResult",
]
