import json
import logging
from io import StringIO

import pytest

from user_service.core.dependencies import get_user_service
from user_service.core.logging.filters import RequestIdFilter
from user_service.core.logging.formatters import JsonFormatter
from user_service.core.logging.middleware import REQUEST_ID_HEADER, resolve_request_id


@pytest.fixture
def json_log_stream():
    """Collect JSON log lines emitted anywhere under the `user_service` logger."""
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter(env="testing"))
    handler.addFilter(RequestIdFilter())

    logger = logging.getLogger("user_service")
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    yield stream
    logger.removeHandler(handler)
    logger.setLevel(previous_level)


def test_resolve_request_id_keeps_sane_values():
    assert resolve_request_id("abc-123") == "abc-123"


@pytest.mark.parametrize("incoming", [None, "", "bad id with spaces", "x" * 200, "line\nbreak"])
def test_resolve_request_id_replaces_unsafe_values(incoming):
    rid = resolve_request_id(incoming)

    assert rid != incoming
    assert len(rid) == 36


async def test_response_carries_generated_request_id(client):
    resp = await client.get("/api/users/all")

    assert resp.status_code == 200
    assert len(resp.headers[REQUEST_ID_HEADER]) == 36


async def test_incoming_request_id_is_echoed(client):
    resp = await client.get("/api/users/all", headers={REQUEST_ID_HEADER: "trace-42"})

    assert resp.headers[REQUEST_ID_HEADER] == "trace-42"


async def test_request_id_reaches_log_records(client, json_log_stream):
    resp = await client.post(
        "/api/users/create",
        json={"firstName": "Ana", "lastName": "Silva", "email": "ana@x.com"},
        headers={REQUEST_ID_HEADER: "trace-7"},
    )
    assert resp.status_code == 201

    records = [json.loads(line) for line in json_log_stream.getvalue().splitlines() if line]
    created = [r for r in records if r["message"] == "users.created"]

    assert created, "expected a users.created log line"
    assert created[0]["request_id"] == "trace-7"
    assert created[0]["id"] == resp.json()["id"]


class FailingService:
    async def list_users(self):
        raise RuntimeError("boom")


async def test_unhandled_error_keeps_request_id(app, client, json_log_stream):
    app.dependency_overrides[get_user_service] = lambda: FailingService()
    try:
        resp = await client.get("/api/users/all", headers={REQUEST_ID_HEADER: "trace-9"})
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 500
    assert resp.headers[REQUEST_ID_HEADER] == "trace-9"

    records = [json.loads(line) for line in json_log_stream.getvalue().splitlines() if line]
    failures = [r for r in records if r["message"].startswith("Unhandled error for GET")]

    assert failures, "expected the unhandled error to be logged"
    assert failures[0]["request_id"] == "trace-9"
    assert "RuntimeError: boom" in failures[0]["exc_info"]
