from __future__ import annotations

from ..models.config_models import DEFAULT_ROW_CAP
from ..models.parsed_table import ParsedTable
from ..models.preview import INDEX_HEADER, Preview, PreviewCell, PreviewRow

__all__ = [
    "build_preview",
]


def build_preview(table: ParsedTable, row_cap: int = DEFAULT_ROW_CAP) -> Preview:
    """Build the preview grid for the first ``row_cap`` data rows of a table.

    - headers: "Index" followed by the table's header row
    - row i (0-based): id "row-{i}", an index cell "row-{i}-index" = i + 1,
      then one cell "row-{i}-cell-{j}" per source cell

    Short rows are passed through unpadded. A table without any rows yields
    empty headers; a header-only table yields headers and no rows.
    """
    if row_cap < 0:
        raise ValueError(f"row_cap must be >= 0 (got {row_cap})")
    if not table.rows:
        return Preview(headers=[], rows=[])

    headers = [INDEX_HEADER, *table.headers]
    rows: list[PreviewRow] = []
    for i, source in enumerate(table.data_rows[:row_cap]):
        cells = [PreviewCell(cell_id=f"row-{i}-index", value=i + 1)]
        cells.extend(
            PreviewCell(cell_id=f"row-{i}-cell-{j}", value=value)
            for j, value in enumerate(source)
        )
        rows.append(PreviewRow(row_id=f"row-{i}", cells=cells))
    return Preview(headers=headers, rows=rows)
