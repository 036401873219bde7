import json
import logging
import sys

import pytest

from campus_portal.app.core.logging import JsonFormatter, _read_format, _read_level, setup_logging


def _record(msg="hello", exc_info=None, **extra):
    record = logging.LogRecord("campus_portal.test", logging.INFO, __file__, 1, msg, (), exc_info)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_basic_fields(self):
        payload = json.loads(JsonFormatter().format(_record()))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "campus_portal.test"
        assert payload["message"] == "hello"
        assert "context" not in payload

    def test_context_fields(self):
        payload = json.loads(JsonFormatter().format(_record(collection="exams", record_id=7, attachment=None)))

        assert payload["context"] == {"collection": "exams", "record_id": 7}

    def test_http_fields(self):
        payload = json.loads(JsonFormatter().format(_record(http_method="GET", path="/exams", status_code=404)))

        assert payload["http"] == {"method": "GET", "path": "/exams", "status": 404}

    def test_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            payload = json.loads(JsonFormatter().format(_record(exc_info=sys.exc_info())))

        assert payload["error"]["type"] == "ValueError"
        assert payload["error"]["message"] == "boom"
        assert "Traceback" in payload["error"]["stack"]


class TestDefaults:
    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")

        assert _read_level("debug") == "DEBUG"
        assert _read_level(None) == "ERROR"

    def test_explicit_format_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "JSON")

        assert _read_format(None) == "json"
        assert _read_format("plain") == "plain"


@pytest.mark.parametrize("fmt,formatter", [("json", JsonFormatter), ("plain", logging.Formatter)])
def test_setup_logging_installs_handler(fmt, formatter):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging(level="warning", fmt=fmt)

        assert root.level == logging.WARNING
        assert type(root.handlers[0].formatter) is formatter
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
