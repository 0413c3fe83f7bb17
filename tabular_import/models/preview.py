from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

"""Preview models bound to the UI grid.

Every row and cell carries an identifier derived only from its (row, column)
position, so rebuilding a preview for the same table yields the same ids.
"""

__all__ = [
    "INDEX_HEADER",
    "Preview",
    "PreviewCell",
    "PreviewRow",
]

INDEX_HEADER = "Index"


@dataclass(frozen=True)
class PreviewCell:
    cell_id: str  # "row-{i}-index" or "row-{i}-cell-{j}"
    value: Any  # str | number, as returned by the parser


@dataclass(frozen=True)
class PreviewRow:
    row_id: str  # "row-{i}"
    cells: list[PreviewCell]


@dataclass(frozen=True)
class Preview:
    headers: list[Any]  # "Index" + source header labels (empty if no header row)
    rows: list[PreviewRow]

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
