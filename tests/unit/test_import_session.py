from __future__ import annotations

from pathlib import Path

import pytest

from tabular_import.logging.error_log import ErrorLogBuffer
from tabular_import.models.config_models import ImportConfig
from tabular_import.models.raw_file import RawFile
from tabular_import.models.submit_state import SubmitState
from tabular_import.services.import_session import (
    MSG_ALREADY_SUBMITTING,
    MSG_NO_FILE,
    MSG_SELECT_FIRST,
    MSG_UNSUPPORTED,
    ImportSession,
)
from tabular_import.services.remote import RemoteSubmissionError


class FakeSubmitter:
    def __init__(self, result: int | Exception = 0) -> None:
        self.result = result
        self.calls: list[tuple[str, str, float | None]] = []

    def submit_rows(self, csv_data, object_name, *, timeout=None):
        self.calls.append((csv_data, object_name, timeout))
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def _csv(name: str, text: str) -> RawFile:
    return RawFile(name=name, content=text.encode("utf-8"))


def test_csv_end_to_end(codec):
    submitter = FakeSubmitter(result=2)
    session = ImportSession(submitter, codec=codec)
    text = "Name,Email\nAda,a@x.com\nBob,b@x.com"

    assert session.select_file(_csv("people.csv", text)) is True
    assert session.message == 'File "people.csv" loaded successfully'
    assert session.headers == ["Index", "Name", "Email"]
    assert len(session.preview_rows) == 2
    assert session.file_content == text

    assert session.submit() == 2
    assert session.message == "File uploaded. Inserted 2 records"
    assert submitter.calls == [(text, "Customer__c", None)]
    assert session.submit_state is SubmitState.IDLE


def test_xlsx_end_to_end(codec, xlsx_bytes):
    rows = [["id", "name", "city"]] + [[i, f"n{i}", f"c{i}"] for i in range(1, 6)]
    session = ImportSession(FakeSubmitter(5), codec=codec)
    assert session.select_file(RawFile(name="data.xlsx", content=xlsx_bytes({"S": rows})))
    assert len(session.preview_rows) == 5
    assert all(len(r.cells) == 4 for r in session.preview_rows)


def test_no_file_selected(codec):
    session = ImportSession(codec=codec)
    assert session.select_file(None) is False
    assert session.message == MSG_NO_FILE


def test_unsupported_file_type(codec):
    log = ErrorLogBuffer()
    session = ImportSession(codec=codec, error_log=log)
    assert session.select_file(_csv("notes.txt", "a,b")) is False
    assert session.message == MSG_UNSUPPORTED
    assert session.file_content is None
    assert [r.error_type for r in log.records] == ["UNSUPPORTED_FORMAT"]


def test_file_too_large_does_not_parse(codec):
    class NeverParse:
        def parse_workbook(self, content, *, type):  # pragma: no cover
            raise AssertionError("should not be called")

    session = ImportSession(config=ImportConfig(max_file_bytes=10), codec=NeverParse())
    assert session.select_file(_csv("a.csv", "a,b\n1,2\n3,4")) is False
    assert session.message.startswith("File is too large.")


def test_default_size_message_mentions_10mb(codec):
    session = ImportSession(codec=codec)
    raw = RawFile(name="big.csv", content=b"x" * (10 * 1024 * 1024 + 1))
    assert session.select_file(raw) is False
    assert session.message == "File is too large. Please upload a file smaller than 10MB."


def test_load_path_too_large(temp_workdir: Path, codec):
    p = temp_workdir / "data" / "big.csv"
    p.write_bytes(b"a\n" * 50)
    session = ImportSession(config=ImportConfig(max_file_bytes=20), codec=codec)
    assert session.load_path(p) is False
    assert session.message.startswith("File is too large.")


def test_load_path_reads_file(temp_workdir: Path, codec):
    p = temp_workdir / "data" / "ok.csv"
    p.write_text("a,b\n1,2\n", encoding="utf-8")
    session = ImportSession(codec=codec)
    assert session.load_path(p) is True
    assert session.file_content == "a,b\n1,2"


def test_parse_error_clears_previous_state(codec):
    session = ImportSession(codec=codec)
    assert session.select_file(_csv("good.csv", "a\n1"))
    assert session.select_file(RawFile(name="bad.xlsx", content=b"not a workbook")) is False
    assert session.message.startswith("Error: ")
    assert "bad.xlsx" in session.message
    assert session.headers == []
    assert session.preview_rows == []
    assert session.file_content is None


def test_empty_file_reports_no_data(codec):
    session = ImportSession(FakeSubmitter(), codec=codec)
    assert session.select_file(_csv("empty.csv", "")) is False
    assert session.message == 'File "empty.csv" contains no data'
    assert session.submit() is None
    assert session.message == MSG_SELECT_FIRST


def test_header_only_file_keeps_headers(codec):
    session = ImportSession(codec=codec)
    assert session.select_file(_csv("h.csv", "a,b\n")) is False
    assert session.headers == ["Index", "a", "b"]
    assert session.preview_rows == []
    assert session.file_content is None


def test_new_selection_replaces_previous(codec):
    session = ImportSession(codec=codec)
    session.select_file(_csv("first.csv", "a\n1\n2\n3"))
    session.select_file(_csv("second.csv", "b\n9"))
    assert session.file_name == "second.csv"
    assert session.headers == ["Index", "b"]
    assert session.file_content == "b\n9"


def test_row_cap_from_config(codec):
    text = "n\n" + "\n".join(str(i) for i in range(200))
    session = ImportSession(config=ImportConfig(row_cap=10), codec=codec)
    session.select_file(_csv("many.csv", text))
    assert len(session.preview_rows) == 10
    assert len(session.file_content.split("\n")) == 11


def test_submit_without_file(codec):
    session = ImportSession(FakeSubmitter(), codec=codec)
    assert session.submit() is None
    assert session.message == MSG_SELECT_FIRST


def test_submit_error_with_row_messages_keeps_state(codec):
    log = ErrorLogBuffer()
    submitter = FakeSubmitter(RemoteSubmissionError(["Row 1: bad email", "Row 3: missing name"]))
    session = ImportSession(submitter, codec=codec, error_log=log)
    session.select_file(_csv("p.csv", "name,email\nAda,x\nBob,y"))

    assert session.submit() is None
    assert session.message == "Error: Row 1: bad email, Row 3: missing name"
    assert session.submit_state is SubmitState.ERROR
    assert session.file_content == "name,email\nAda,x\nBob,y"
    assert len(session.preview_rows) == 2
    assert log.records[-1].error_type == "SUBMISSION_ERROR"

    # 再選択なしで再送できる
    submitter.result = 2
    assert session.submit() == 2
    assert session.submit_state is SubmitState.IDLE


def test_submit_error_single_message(codec):
    session = ImportSession(FakeSubmitter(RemoteSubmissionError("insert failed")), codec=codec)
    session.select_file(_csv("p.csv", "a\n1"))
    session.submit()
    assert session.message == "Error: insert failed"


def test_double_submission_is_refused(codec):
    session = ImportSession(codec=codec)
    inner: list[int | None] = []

    class ReentrantSubmitter:
        calls = 0

        def submit_rows(self, csv_data, object_name, *, timeout=None):
            ReentrantSubmitter.calls += 1
            inner.append(session.submit())
            assert session.message == MSG_ALREADY_SUBMITTING
            return 1

    session.submitter = ReentrantSubmitter()
    session.select_file(_csv("p.csv", "a\n1"))
    assert session.submit() == 1
    assert inner == [None]
    assert ReentrantSubmitter.calls == 1


def test_timeout_and_target_object_are_forwarded(codec):
    submitter = FakeSubmitter(1)
    cfg = ImportConfig(submit_timeout_seconds=5.0, target_object="Project__c")
    session = ImportSession(submitter, config=cfg, codec=codec)
    session.select_file(_csv("p.csv", "a\n1"))
    session.submit()
    assert submitter.calls[0][1:] == ("Project__c", 5.0)


def test_unexpected_submitter_error_propagates(codec):
    session = ImportSession(FakeSubmitter(KeyError("bug")), codec=codec)
    session.select_file(_csv("p.csv", "a\n1"))
    with pytest.raises(KeyError):
        session.submit()
    assert session.submit_state is SubmitState.ERROR


def test_submit_requires_submitter(codec):
    session = ImportSession(codec=codec)
    session.select_file(_csv("p.csv", "a\n1"))
    with pytest.raises(RuntimeError):
        session.submit()


def test_long_cell_within_size_cap_loads(codec):
    note = "x" * 200_000
    submitter = FakeSubmitter(2)
    session = ImportSession(submitter, codec=codec)
    raw = RawFile(name="long.csv", content=b"name,note\nAda," + note.encode() + b"\nBob,ok")
    assert session.select_file(raw) is True
    assert session.message == 'File "long.csv" loaded successfully'
    assert session.preview_rows[0].cells[2].value == note
    assert session.submit() == 2
    assert submitter.calls[0][0] == f"name,note\nAda,{note}\nBob,ok"


@pytest.mark.parametrize("cap,shown", [(500_000, "0.5"), (10, "0.1"), (3 * 1024 * 1024, "3")])
def test_size_message_never_shows_zero(cap, shown):
    session = ImportSession(config=ImportConfig(max_file_bytes=cap))
    assert session.select_file(RawFile(name="big.csv", content=b"x" * (cap + 1))) is False
    assert session.message == f"File is too large. Please upload a file smaller than {shown}MB."
