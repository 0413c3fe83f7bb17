from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.config_models import DEFAULT_EXPORT_ENTITIES, DEFAULT_EXPORT_FILE, ExportEntityConfig
from ..tabular.codec import SpreadsheetCodec, get_codec
from .remote import RecordSource

"""Workbook export service.

Fetches one record list per configured entity kind (employees and accounts by
default) and writes them into a single xlsx workbook, one sheet per non-empty
list. Columns carry friendly labels (Email, Role) instead of the raw field
names (Email__c, Role__c).
"""

__all__ = [
    "NoDataToExportError",
    "WorkbookExporter",
    "records_to_frame",
]

logger = logging.getLogger(__name__)


class NoDataToExportError(Exception):
    """Raised when every record list is empty; no workbook is written."""


def records_to_frame(records: Sequence[Mapping[str, Any]], entity: ExportEntityConfig) -> pd.DataFrame:
    """Flatten records into a DataFrame with the entity's labels as columns, in declared order."""
    rows = [[record.get(c.field) for c in entity.columns] for record in records]
    return pd.DataFrame(rows, columns=entity.labels, dtype=object)


class WorkbookExporter:
    def __init__(
        self,
        source: RecordSource,
        *,
        entities: Sequence[ExportEntityConfig] = DEFAULT_EXPORT_ENTITIES,
        codec: SpreadsheetCodec | None = None,
    ) -> None:
        self.source = source
        self.entities = tuple(entities)
        self.codec = codec or get_codec()
        self.records: dict[str, list[dict[str, Any]]] = {e.kind: [] for e in self.entities}
        self.errors: dict[str, str] = {}

    def load(self) -> dict[str, list[dict[str, Any]]]:
        """Fetch every entity kind; a failed fetch leaves that list empty."""
        for entity in self.entities:
            try:
                self.records[entity.kind] = list(self.source.fetch_records(entity.kind))
            except Exception as e:
                self.records[entity.kind] = []
                self.errors[entity.kind] = str(e)
                logger.error("Error fetching %s: %s", entity.kind, e)
                continue
            logger.debug("fetched %s: %d records", entity.kind, len(self.records[entity.kind]))
        return self.records

    def build_sheets(self, records: Mapping[str, Sequence[Mapping[str, Any]]] | None = None) -> dict[str, pd.DataFrame]:
        records = self.records if records is None else records
        sheets: dict[str, pd.DataFrame] = {}
        for entity in self.entities:
            rows = records.get(entity.kind) or []
            if rows:
                sheets[entity.sheet_name] = records_to_frame(rows, entity)
        return sheets

    def export(self, output_path: Path | str = DEFAULT_EXPORT_FILE) -> Path:
        sheets = self.build_sheets()
        if not sheets:
            raise NoDataToExportError("No data available to export")
        path = Path(output_path)
        path.write_bytes(self.codec.write_workbook(sheets))
        logger.info(
            "exported %s sheets=%s rows=%d",
            path,
            list(sheets),
            sum(len(df) for df in sheets.values()),
        )
        return path
