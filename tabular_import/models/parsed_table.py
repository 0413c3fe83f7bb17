from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pandas as pd

"""ParsedTable model.

A ParsedTable is the first sheet of an imported file expressed as rows of
cells. Row 0 is the header row. Rows may be ragged: a data row can have fewer
(or more) cells than the header, and nothing is padded or rejected here.

The originating sheet (a pandas DataFrame produced by the codec) is kept next
to the rows so that the submission payload can be re-serialized from the
sheet itself rather than from the preview structure.
"""

__all__ = [
    "ParsedTable",
]


@dataclass(frozen=True)
class ParsedTable:
    file_name: str
    rows: list[list[Any]]  # row 0 = header
    sheet_name: str = "Sheet1"
    sheet: pd.DataFrame | None = field(default=None, compare=False, repr=False)

    @property
    def headers(self) -> list[Any]:
        return list(self.rows[0]) if self.rows else []

    @property
    def data_rows(self) -> list[list[Any]]:
        return self.rows[1:]

    @property
    def has_data(self) -> bool:
        return len(self.rows) > 1

    def as_sheet(self) -> pd.DataFrame:
        """Return the source sheet, building one from ``rows`` if none is attached."""
        if self.sheet is not None:
            return self.sheet
        # ragged rows -> DataFrame pads missing cells with None
        return pd.DataFrame([list(r) for r in self.rows], dtype=object)
