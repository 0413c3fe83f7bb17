from __future__ import annotations

from ..models.config_models import DEFAULT_ROW_CAP
from ..models.parsed_table import ParsedTable
from .codec import SpreadsheetCodec, get_codec

"""Submission payload encoding.

The payload is re-serialized from the table's sheet, whatever the input
format was, as comma separated text: header line plus at most ``row_cap``
data lines. The row window is cut on the sheet before serialization so the
payload covers exactly the rows shown by build_preview for the same cap.
"""

__all__ = [
    "FIELD_SEPARATOR",
    "to_submission_payload",
]

FIELD_SEPARATOR = ","


def to_submission_payload(
    table: ParsedTable,
    row_cap: int = DEFAULT_ROW_CAP,
    codec: SpreadsheetCodec | None = None,
) -> str:
    """Serialize the header plus the first ``row_cap`` data records.

    The cap counts records, not text lines: a quoted field containing a
    newline keeps its line break, so such a payload has more than
    ``row_cap + 1`` lines while still holding exactly the previewed rows.
    """
    if row_cap < 0:
        raise ValueError(f"row_cap must be >= 0 (got {row_cap})")
    if not table.rows:
        return ""
    codec = codec or get_codec()
    window = table.as_sheet().iloc[: row_cap + 1]
    # strip: 末尾の空フィールドを落とし、ヘッダ行を元の表記のまま保つ
    return codec.sheet_to_delimited_text(window, field_separator=FIELD_SEPARATOR, strip=True)
