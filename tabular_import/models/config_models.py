from __future__ import annotations

import math
from dataclasses import dataclass, field

"""Config dataclasses for the tabular import / export tool.

These are the typed counterparts of config/import.yml. The loader in
tabular_import/config/loader.py builds them after schema validation; every
field has a default so that a missing config file still yields a usable
configuration.
"""

DEFAULT_ROW_CAP = 50
DEFAULT_MAX_FILE_BYTES = 10 * 1024 * 1024  # 10 MiB
DEFAULT_TARGET_OBJECT = "Customer__c"
DEFAULT_EXPORT_FILE = "ExportedData.xlsx"


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ColumnConfig:
    """One exported column: friendly header label and source field name."""
    label: str
    field: str


@dataclass(frozen=True)
class ExportEntityConfig:
    """Record list exported to one workbook sheet."""
    kind: str  # entity kind passed to RecordSource.fetch_records
    sheet_name: str  # sheet title in the generated workbook
    table: str  # source table for the postgres record source
    columns: tuple[ColumnConfig, ...]

    @property
    def labels(self) -> list[str]:
        return [c.label for c in self.columns]

    @property
    def fields(self) -> list[str]:
        return [c.field for c in self.columns]


DEFAULT_EXPORT_ENTITIES: tuple[ExportEntityConfig, ...] = (
    ExportEntityConfig(
        kind="employees",
        sheet_name="Employees",
        table="employee__c",
        columns=(
            ColumnConfig("Id", "Id"),
            ColumnConfig("Name", "Name"),
            ColumnConfig("Email", "Email__c"),
            ColumnConfig("Role", "Role__c"),
        ),
    ),
    ExportEntityConfig(
        kind="accounts",
        sheet_name="Accounts",
        table="account",
        columns=(
            ColumnConfig("Id", "Id"),
            ColumnConfig("Name", "Name"),
            ColumnConfig("Industry", "Industry"),
            ColumnConfig("Phone", "Phone"),
        ),
    ),
)


@dataclass(frozen=True)
class ExportConfig:
    output_file: str = DEFAULT_EXPORT_FILE
    entities: tuple[ExportEntityConfig, ...] = DEFAULT_EXPORT_ENTITIES


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for import sessions, export and the CLI."""
    row_cap: int = DEFAULT_ROW_CAP  # data rows kept for preview and submission
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES  # larger files are rejected before reading
    target_object: str = DEFAULT_TARGET_OBJECT  # object (table) rows are submitted to
    submit_timeout_seconds: float | None = None  # None = wait for the backend indefinitely
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    @property
    def max_file_megabytes(self) -> float:
        """Size cap in MiB, rounded up to one decimal so a small cap never reads as 0."""
        return math.ceil(self.max_file_bytes * 10 / (1024 * 1024)) / 10
