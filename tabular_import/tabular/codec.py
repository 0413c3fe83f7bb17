from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Literal, Protocol

import numpy as np
import pandas as pd

"""Spreadsheet codec built on pandas.

The import pipeline only needs four capabilities from a spreadsheet library:

- parse_workbook: text (CSV) or bytes (xls/xlsx) -> Workbook of named sheets
- sheet_to_rows: sheet -> rows of cells (header row first)
- sheet_to_delimited_text: sheet -> delimited text
- write_workbook: named sheets -> xlsx bytes

A sheet is a pandas DataFrame of dtype object with positional integer columns
and missing cells stored as None/NaN. Completely blank rows are dropped at
parse time so every consumer sees the same row sequence.

Engines: openpyxl (.xlsx read/write), xlrd (.xls read). CSV text is tokenized
with the csv module because ragged rows must be kept, which pandas.read_csv
rejects when a later row has more fields than the first.
"""

__all__ = [
    "PandasCodec",
    "SpreadsheetCodec",
    "Workbook",
    "get_codec",
    "reset_codec",
]

logger = logging.getLogger(__name__)

CSV_SHEET_NAME = "Sheet1"

ContentType = Literal["string", "binary"]

# csv の既定上限 (131072 文字) ではファイル上限内の長いセルを読めない
CSV_FIELD_SIZE_LIMIT = 2**31 - 1
csv.field_size_limit(CSV_FIELD_SIZE_LIMIT)


@dataclass
class Workbook:
    sheet_names: list[str] = field(default_factory=list)
    sheets: dict[str, pd.DataFrame] = field(default_factory=dict)

    def first_sheet(self) -> tuple[str, pd.DataFrame]:
        if not self.sheet_names:
            return CSV_SHEET_NAME, pd.DataFrame(dtype=object)
        name = self.sheet_names[0]
        return name, self.sheets[name]


class SpreadsheetCodec(Protocol):
    def parse_workbook(self, content: str | bytes, *, type: ContentType) -> Workbook: ...

    def sheet_to_rows(self, sheet: pd.DataFrame) -> list[list[Any]]: ...

    def sheet_to_delimited_text(
        self, sheet: pd.DataFrame, *, field_separator: str = ",", strip: bool = False
    ) -> str: ...

    def write_workbook(self, sheets: dict[str, pd.DataFrame]) -> bytes: ...


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _cell_value(value: Any) -> Any:
    """Normalize a DataFrame cell to a plain Python value (str or number)."""
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if isinstance(value, datetime):
        # 時刻部分が 0 の場合は日付のみ
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


def _cell_text(value: Any) -> str:
    value = _cell_value(value)
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)


def _drop_blank_rows(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return df
    keep = [not all(_is_empty(v) for v in row) for row in df.itertuples(index=False, name=None)]
    return df.loc[keep].reset_index(drop=True)


class PandasCodec:
    """SpreadsheetCodec implementation on pandas / openpyxl / xlrd."""

    def parse_workbook(self, content: str | bytes, *, type: ContentType) -> Workbook:
        if type == "string":
            if not isinstance(content, str):
                raise TypeError("string content expected for type='string'")
            return self._parse_text(content)
        if type == "binary":
            if not isinstance(content, (bytes, bytearray)):
                raise TypeError("bytes content expected for type='binary'")
            return self._parse_binary(bytes(content))
        raise ValueError(f"unknown content type: {type!r}")

    def _parse_text(self, content: str) -> Workbook:
        rows = [
            [None if cell == "" else cell for cell in row]
            for row in csv.reader(io.StringIO(content))
        ]
        df = pd.DataFrame(rows, dtype=object) if rows else pd.DataFrame(dtype=object)
        return Workbook(sheet_names=[CSV_SHEET_NAME], sheets={CSV_SHEET_NAME: _drop_blank_rows(df)})

    def _parse_binary(self, content: bytes) -> Workbook:
        if not content:
            raise ValueError("empty workbook content")
        sheets: dict[str, pd.DataFrame] = {}
        with pd.ExcelFile(io.BytesIO(content)) as xls:
            for name in xls.sheet_names:
                # ヘッダなしで生読み (ヘッダ行の扱いは呼び出し側)
                df = xls.parse(name, header=None, dtype=object)
                df.columns = range(df.shape[1])
                sheets[str(name)] = _drop_blank_rows(df)
        return Workbook(sheet_names=list(sheets), sheets=sheets)

    def sheet_to_rows(self, sheet: pd.DataFrame) -> list[list[Any]]:
        """Rows of cells; interior empty cells become "", trailing empty cells are dropped."""
        rows: list[list[Any]] = []
        for values in sheet.itertuples(index=False, name=None):
            cells = list(values)
            while cells and _is_empty(cells[-1]):
                cells.pop()
            rows.append(["" if _is_empty(v) else _cell_value(v) for v in cells])
        return rows

    def sheet_to_delimited_text(
        self, sheet: pd.DataFrame, *, field_separator: str = ",", strip: bool = False
    ) -> str:
        """Serialize a sheet as delimited text without a trailing newline.

        Without ``strip`` every line spans the full sheet width; with ``strip``
        trailing empty fields are removed from each line.
        """
        buf = io.StringIO()
        writer = csv.writer(buf, delimiter=field_separator, lineterminator="\n")
        for values in sheet.itertuples(index=False, name=None):
            fields = ["" if _is_empty(v) else _cell_text(v) for v in values]
            if strip:
                while fields and fields[-1] == "":
                    fields.pop()
            writer.writerow(fields)
        text = buf.getvalue()
        return text[:-1] if text.endswith("\n") else text

    def write_workbook(self, sheets: dict[str, pd.DataFrame]) -> bytes:
        bio = io.BytesIO()
        with pd.ExcelWriter(bio, engine="openpyxl") as writer:
            for name, df in sheets.items():
                df.to_excel(writer, sheet_name=name, index=False)
        return bio.getvalue()


_codec: SpreadsheetCodec | None = None


def get_codec() -> SpreadsheetCodec:
    """Load the spreadsheet codec once; later calls return the same instance."""
    global _codec

    if _codec is not None:
        return _codec

    _codec = PandasCodec()
    logger.debug("spreadsheet codec loaded: %s", type(_codec).__name__)
    return _codec


def reset_codec() -> None:
    """Reset the loaded codec. Mainly for testing purposes."""
    global _codec
    _codec = None
