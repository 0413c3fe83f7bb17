from __future__ import annotations

import io

import pandas as pd
import pytest

from tabular_import.tabular import codec as codec_mod
from tabular_import.tabular.codec import PandasCodec, get_codec, reset_codec


def test_parse_text_keeps_ragged_rows(codec: PandasCodec):
    wb = codec.parse_workbook("a,b,c\n1,2\n3,4,5,6\n", type="string")
    assert wb.sheet_names == ["Sheet1"]
    rows = codec.sheet_to_rows(wb.sheets["Sheet1"])
    assert rows == [["a", "b", "c"], ["1", "2"], ["3", "4", "5", "6"]]


def test_parse_text_interior_empty_cells_become_empty_strings(codec: PandasCodec):
    wb = codec.parse_workbook("a,b,c\nx,,z\ny,,\n", type="string")
    rows = codec.sheet_to_rows(wb.sheets["Sheet1"])
    assert rows[1] == ["x", "", "z"]
    # 末尾の空セルは出力しない
    assert rows[2] == ["y"]


def test_parse_text_drops_blank_lines(codec: PandasCodec):
    wb = codec.parse_workbook("a,b\n\n1,2\n,\n3,4", type="string")
    rows = codec.sheet_to_rows(wb.sheets["Sheet1"])
    assert rows == [["a", "b"], ["1", "2"], ["3", "4"]]


def test_parse_empty_text_gives_empty_sheet(codec: PandasCodec):
    wb = codec.parse_workbook("", type="string")
    assert codec.sheet_to_rows(wb.sheets["Sheet1"]) == []
    assert codec.sheet_to_delimited_text(wb.sheets["Sheet1"]) == ""


def test_parse_binary_reads_all_sheets_in_order(codec: PandasCodec, xlsx_bytes):
    content = xlsx_bytes({
        "First": [["id", "name"], [1, "Alice"], [2, "Bob"]],
        "Second": [["x"], [9]],
    })
    wb = codec.parse_workbook(content, type="binary")
    assert wb.sheet_names == ["First", "Second"]
    name, sheet = wb.first_sheet()
    assert name == "First"
    assert codec.sheet_to_rows(sheet) == [["id", "name"], [1, "Alice"], [2, "Bob"]]


def test_parse_binary_normalizes_numbers(codec: PandasCodec, xlsx_bytes):
    content = xlsx_bytes({"S": [["amount", "ratio"], [1500.0, 0.25]]})
    rows = codec.sheet_to_rows(codec.parse_workbook(content, type="binary").sheets["S"])
    assert rows[1] == [1500, 0.25]
    assert isinstance(rows[1][0], int)


def test_parse_binary_rejects_garbage(codec: PandasCodec):
    with pytest.raises(Exception):
        codec.parse_workbook(b"this is not a workbook", type="binary")
    with pytest.raises(ValueError):
        codec.parse_workbook(b"", type="binary")


def test_parse_workbook_checks_content_type(codec: PandasCodec):
    with pytest.raises(TypeError):
        codec.parse_workbook(b"a,b", type="string")
    with pytest.raises(TypeError):
        codec.parse_workbook("a,b", type="binary")
    with pytest.raises(ValueError):
        codec.parse_workbook("a,b", type="array")  # type: ignore[arg-type]


def test_delimited_text_full_width_and_strip(codec: PandasCodec):
    sheet = codec.parse_workbook("a,b,c\n1\n", type="string").sheets["Sheet1"]
    assert codec.sheet_to_delimited_text(sheet) == "a,b,c\n1,,"
    assert codec.sheet_to_delimited_text(sheet, strip=True) == "a,b,c\n1"


def test_delimited_text_quotes_and_separator(codec: PandasCodec):
    sheet = pd.DataFrame([["name", "note"], ["Ada", "x, y"]], dtype=object)
    assert codec.sheet_to_delimited_text(sheet) == 'name,note\nAda,"x, y"'
    assert codec.sheet_to_delimited_text(sheet, field_separator=";") == "name;note\nAda;x, y"


def test_delimited_text_formats_booleans(codec: PandasCodec):
    sheet = pd.DataFrame([["flag"], [True], [False]], dtype=object)
    assert codec.sheet_to_delimited_text(sheet) == "flag\nTRUE\nFALSE"


def test_write_workbook_uses_column_labels(codec: PandasCodec):
    df = pd.DataFrame([["001", "Acme"]], columns=["Id", "Name"])
    data = codec.write_workbook({"Accounts": df})
    back = pd.read_excel(io.BytesIO(data), sheet_name=None, dtype=object)
    assert list(back) == ["Accounts"]
    assert list(back["Accounts"].columns) == ["Id", "Name"]
    assert back["Accounts"].iloc[0]["Name"] == "Acme"


def test_get_codec_is_loaded_once():
    reset_codec()
    try:
        first = get_codec()
        assert get_codec() is first
        assert codec_mod._codec is first
    finally:
        reset_codec()
