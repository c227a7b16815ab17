"""Tests for JSON and console log formatters."""

import json
import logging

from xerrors.errors import fail, wrap
from xerrors.logging.formatters import ConsoleFormatter, JSONFormatter


def _make_record(
    msg="test message",
    level=logging.INFO,
    name="test.logger",
    exc=None,
    **extras,
):
    exc_info = (type(exc), exc, exc.__traceback__) if exc is not None else None
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extras.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_formats_basic_json_with_required_fields(self):
        output = json.loads(JSONFormatter().format(_make_record()))

        assert output["level"] == "INFO"
        assert output["logger"] == "test.logger"
        assert output["message"] == "test message"
        assert output["ts"].endswith("Z")
        assert "file" not in output

    def test_source_location_for_errors(self):
        output = json.loads(JSONFormatter().format(_make_record(level=logging.ERROR)))
        assert output["file"] == "test.py:42"

    def test_extra_fields_with_numeric_types(self):
        record = _make_record(error_code="404", duration_ms="12.5", operation="lookup")
        output = json.loads(JSONFormatter().format(record))

        assert output["error_code"] == 404
        assert output["duration_ms"] == 12.5
        assert output["operation"] == "lookup"

    def test_invalid_numeric_becomes_null(self):
        output = json.loads(JSONFormatter().format(_make_record(error_code="n/a")))
        assert output["error_code"] is None

    def test_unknown_extras_ignored(self):
        output = json.loads(JSONFormatter().format(_make_record(password="hunter2")))
        assert "password" not in output

    def test_plain_exception(self):
        record = _make_record(level=logging.ERROR, exc=ValueError("boom"))
        output = json.loads(JSONFormatter().format(record))

        assert output["exception"]["type"] == "ValueError"
        assert output["exception"]["message"] == "boom"
        assert "code" not in output["exception"]

    def test_classified_exception_expanded(self):
        err = fail(404, "not found").wrap(KeyError("user-7"), "lookup")
        record = _make_record(level=logging.ERROR, exc=err)
        output = json.loads(JSONFormatter().format(record))

        exception = output["exception"]
        assert exception["type"] == "XError"
        assert exception["code"] == 404
        assert exception["classification"] == "not found"
        assert exception["message"] == "lookup: 'user-7'"
        assert 'File "' in exception["trace"]


class TestConsoleFormatter:

    def test_prefix_and_message(self):
        line = ConsoleFormatter().format(_make_record())
        assert " - INFO - test message" in line

    def test_error_code_tag(self):
        line = ConsoleFormatter().format(_make_record(error_code=404))
        assert line.endswith("- [404] test message")

    def test_appends_trace(self):
        err = wrap(ValueError("boom"), "parse")
        output = ConsoleFormatter().format(_make_record(level=logging.ERROR, exc=err))

        first, rest = output.split("\n", 1)
        assert first.endswith("ERROR - test message")
        assert "ValueError: boom" in rest
        assert "parse" in rest
