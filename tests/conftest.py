# Shared pytest fixtures
from __future__ import annotations

import io
import tempfile
from pathlib import Path

import pandas as pd
import pytest

from tabular_import.logging.init import reset_logging
from tabular_import.tabular.codec import PandasCodec


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def codec() -> PandasCodec:
    return PandasCodec()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """row_cap: 50
max_file_bytes: 10485760
target_object: Customer__c
submit_timeout_seconds: 30
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
export:
  output_file: ExportedData.xlsx
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def make_xlsx_bytes(sheets: dict[str, list[list[object]]]) -> bytes:
    """Build an xlsx workbook in memory; rows are written as-is (no header handling)."""
    bio = io.BytesIO()
    with pd.ExcelWriter(bio, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            df = pd.DataFrame(rows)
            df.to_excel(writer, sheet_name=sheet, header=False, index=False)
    return bio.getvalue()


@pytest.fixture()
def xlsx_bytes():
    return make_xlsx_bytes
