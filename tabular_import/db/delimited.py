from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field

from .batch_insert import is_identifier

"""Server-side handling of submitted delimited text.

A submission payload is comma separated text whose first line holds the
column names. split_payload turns it back into columns and rows;
validate_rows reports every row that cannot be inserted so the whole batch
can be refused with one message per offending row.
"""

__all__ = [
    "SplitPayload",
    "split_payload",
    "validate_rows",
]

# a single cell may be as large as the whole accepted file
csv.field_size_limit(2**31 - 1)


@dataclass(frozen=True)
class SplitPayload:
    columns: list[str]
    rows: list[list[str | None]] = field(default_factory=list)


def split_payload(csv_data: str) -> SplitPayload:
    """Parse payload text; short rows are padded with None, empty fields become None."""
    records = [r for r in csv.reader(io.StringIO(csv_data)) if r]
    if not records:
        return SplitPayload(columns=[])
    columns = [c.strip() for c in records[0]]
    rows: list[list[str | None]] = []
    for record in records[1:]:
        values: list[str | None] = [None if v == "" else v for v in record]
        if len(values) < len(columns):
            values.extend([None] * (len(columns) - len(values)))
        rows.append(values)
    return SplitPayload(columns=columns, rows=rows)


def validate_rows(payload: SplitPayload) -> list[str]:
    errors: list[str] = []
    if not payload.columns:
        return ["No header row found"]
    blank = [i + 1 for i, c in enumerate(payload.columns) if not c]
    if blank:
        errors.append(f"Header has empty column names at positions {blank}")
    dupes = sorted({c for c in payload.columns if c and payload.columns.count(c) > 1})
    if dupes:
        errors.append(f"Header has duplicate column names {dupes}")
    invalid = [c for c in payload.columns if c and not is_identifier(c)]
    if invalid:
        errors.append(f"Invalid column names {invalid}")
    for n, row in enumerate(payload.rows, start=1):
        if len(row) > len(payload.columns):
            errors.append(
                f"Row {n}: expected at most {len(payload.columns)} fields, got {len(row)}"
            )
    return errors
