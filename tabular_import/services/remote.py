from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Any, Protocol

from ..db.batch_insert import (
    BatchInsertError,
    BatchTimeoutError,
    batch_insert,
    is_identifier,
    quote_identifier,
)
from ..db.delimited import split_payload, validate_rows
from ..models.config_models import ExportEntityConfig

"""Remote collaborators of the import and export widgets.

The widgets depend only on two call signatures:

- RowSubmitter.submit_rows(csv_data, object_name, *, timeout) -> inserted count
- RecordSource.fetch_records(entity_kind) -> list of records (dicts)

Any implementation satisfying them can be injected. The PostgreSQL ones
below run on a psycopg2 cursor; DryRunRowSubmitter validates and counts
without persisting (used by the CLI --dry-run mode and in tests).
"""

__all__ = [
    "DryRunRowSubmitter",
    "PostgresRecordSource",
    "PostgresRowSubmitter",
    "RecordFetchError",
    "RecordSource",
    "RemoteSubmissionError",
    "RowSubmitter",
    "SubmitTimeoutError",
]

logger = logging.getLogger(__name__)


class RemoteSubmissionError(Exception):
    """Submission refused or failed on the backend.

    Carries either a single message or one message per offending row.
    """

    def __init__(self, messages: str | Sequence[str]) -> None:
        if isinstance(messages, str):
            messages = [messages]
        self.messages: list[str] = [m for m in messages if m] or ["Unknown error"]
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return ", ".join(self.messages)


class SubmitTimeoutError(RemoteSubmissionError):
    pass


class RecordFetchError(Exception):
    pass


class RowSubmitter(Protocol):
    def submit_rows(self, csv_data: str, object_name: str, *, timeout: float | None = None) -> int: ...


class RecordSource(Protocol):
    def fetch_records(self, entity_kind: str) -> list[dict[str, Any]]: ...


def _timeout_ms(timeout: float) -> int:
    """Seconds -> statement_timeout milliseconds, rounded up (0 would disable the timeout)."""
    return max(1, math.ceil(timeout * 1000))


def _checked_rows(csv_data: str, object_name: str):
    if not is_identifier(object_name):
        raise RemoteSubmissionError(f"Invalid object name: {object_name!r}")
    payload = split_payload(csv_data)
    errors = validate_rows(payload)
    if errors:
        raise RemoteSubmissionError(errors)
    return payload


class DryRunRowSubmitter:
    """Validates a payload like the database submitter but inserts nothing."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def submit_rows(self, csv_data: str, object_name: str, *, timeout: float | None = None) -> int:
        payload = _checked_rows(csv_data, object_name)
        self.calls.append((csv_data, object_name))
        logger.debug("dry-run object=%s rows=%d", object_name, len(payload.rows))
        return len(payload.rows)


class PostgresRowSubmitter:
    """Inserts submitted rows into the table named by ``object_name``.

    All rows go in one transaction; a refused row or a database error rolls
    the whole submission back.
    """

    def __init__(self, cursor: Any, page_size: int = 1000) -> None:
        self._cursor = cursor
        self._page_size = page_size

    def submit_rows(self, csv_data: str, object_name: str, *, timeout: float | None = None) -> int:
        payload = _checked_rows(csv_data, object_name)
        if not payload.rows:
            return 0

        cur = self._cursor
        try:
            cur.execute("BEGIN")
            if timeout is not None:
                # SET LOCAL はパラメータ不可のため整数ミリ秒を直接埋め込む
                cur.execute(f"SET LOCAL statement_timeout = {_timeout_ms(timeout)}")
            result = batch_insert(
                cur, object_name, payload.columns, payload.rows, page_size=self._page_size
            )
            cur.execute("COMMIT")
        except BatchTimeoutError as e:
            self._rollback()
            raise SubmitTimeoutError(f"Submission timed out after {timeout}s: {e}") from e
        except BatchInsertError as e:
            self._rollback()
            raise RemoteSubmissionError(str(e)) from e
        except Exception as e:
            self._rollback()
            raise RemoteSubmissionError(f"{type(e).__name__}: {e}") from e

        logger.info(
            "inserted object=%s rows=%d elapsed=%.3fs",
            object_name,
            result.inserted_rows,
            result.elapsed_seconds,
        )
        return result.inserted_rows

    def _rollback(self) -> None:
        try:
            self._cursor.execute("ROLLBACK")
        except Exception as e:  # pragma: no cover
            logger.warning("rollback failed: %s", e)


class PostgresRecordSource:
    """Fetches export records for each configured entity kind."""

    def __init__(self, cursor: Any, entities: Sequence[ExportEntityConfig]) -> None:
        self._cursor = cursor
        self._entities = {e.kind: e for e in entities}

    def fetch_records(self, entity_kind: str) -> list[dict[str, Any]]:
        entity = self._entities.get(entity_kind)
        if entity is None:
            raise RecordFetchError(f"unknown entity kind: {entity_kind}")
        try:
            cols_sql = ",".join(quote_identifier(f) for f in entity.fields)
            self._cursor.execute(f"SELECT {cols_sql} FROM {quote_identifier(entity.table)}")
            fetched = self._cursor.fetchall()
        except Exception as e:
            raise RecordFetchError(f"fetch {entity_kind} failed: {e}") from e
        return [dict(zip(entity.fields, row, strict=False)) for row in fetched]
