import json
import logging
import sys

from user_service.core.logging.formatters import ColorFormatter, JsonFormatter


def make_record(exc_info=None):
    return logging.LogRecord("user_service.api", logging.INFO, __file__, 10, "created user %s", (3,), exc_info)


def test_json_formatter_basic_fields():
    rec = make_record()
    rec.request_id = "req-1"
    rec.id = 3

    data = json.loads(JsonFormatter(env="testing", service="svc").format(rec))

    assert data["message"] == "created user 3"
    assert data["level"] == "INFO"
    assert data["logger"] == "user_service.api"
    assert data["service"] == "svc"
    assert data["env"] == "testing"
    assert data["request_id"] == "req-1"
    assert data["id"] == 3
    assert "timestamp" in data
    assert "version" in data


def test_json_formatter_skips_standard_record_attributes():
    data = json.loads(JsonFormatter().format(make_record()))

    for attr in ("args", "msg", "levelno", "thread", "processName"):
        assert attr not in data
    assert data["request_id"] == "-"
    assert data["service"] == "user-service"


def test_json_formatter_stringifies_non_serializable_extra():
    class Opaque:
        def __repr__(self):
            return "<Opaque>"

    rec = make_record()
    rec.obj = Opaque()

    data = json.loads(JsonFormatter(env="dev").format(rec))

    assert data["obj"] == "<Opaque>"


def test_json_formatter_includes_traceback():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        rec = make_record(exc_info=sys.exc_info())

    data = json.loads(JsonFormatter().format(rec))

    assert "RuntimeError: boom" in data["exc_info"]


def test_color_formatter_line_layout():
    rec = make_record()
    rec.request_id = "req-9"

    line = ColorFormatter().format(rec)

    parts = [p.strip() for p in line.split(" | ")]
    assert "user_service.api" in parts
    assert "req-9" in parts
    assert parts[-1] == "created user 3"
    assert ColorFormatter.COLOR_CODES["INFO"] in line
