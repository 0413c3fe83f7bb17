from __future__ import annotations

import re
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

import psycopg2
from psycopg2.extensions import QueryCanceledError
from psycopg2.extras import execute_values

"""DB batch insert.

Rows are inserted with psycopg2.extras.execute_values. Table and column
names are validated as plain identifiers and double-quoted; values always go
through parameters. Transaction boundaries (BEGIN / COMMIT / ROLLBACK) are
owned by the caller.
"""

__all__ = [
    "BatchInsertError",
    "BatchTimeoutError",
    "InsertResult",
    "batch_insert",
    "is_identifier",
    "quote_identifier",
]

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class BatchInsertError(Exception):
    pass


class BatchTimeoutError(BatchInsertError):
    """Raised when the statement was cancelled by statement_timeout."""


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int
    elapsed_seconds: float = 0.0


def is_identifier(name: str) -> bool:
    return bool(_IDENTIFIER_RE.match(name or ""))


def quote_identifier(name: str) -> str:
    if not is_identifier(name):
        raise BatchInsertError(f"invalid identifier: {name!r}")
    return f'"{name}"'


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    page_size: int = 1000,
) -> InsertResult:
    """Perform batched INSERT using psycopg2.extras.execute_values.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: 対象テーブル名 (識別子チェックあり)
    columns: 挿入列
    rows: 行シーケンス (各行は columns と同じ長さ)
    page_size: execute_values の page_size
    """
    rows_list = [list(r) for r in rows]
    if not rows_list:
        return InsertResult(inserted_rows=0)
    if not columns:
        raise BatchInsertError(f"no columns to insert into {table}")

    cols_sql = ",".join(quote_identifier(c) for c in columns)
    base_sql = f"INSERT INTO {quote_identifier(table)} ({cols_sql}) VALUES %s"

    start_time = time.time()
    try:
        execute_values(cursor, base_sql, rows_list, page_size=page_size)
    except QueryCanceledError as e:
        raise BatchTimeoutError(str(e).strip()) from e
    except psycopg2.Error as e:
        raise BatchInsertError(str(e).strip()) from e
    elapsed = time.time() - start_time
    return InsertResult(inserted_rows=len(rows_list), elapsed_seconds=elapsed)
