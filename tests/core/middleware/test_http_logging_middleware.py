"""Unit tests for the HTTP logging middleware.

We assert structured log fields via `caplog` (not message strings) and verify:
- X-Request-ID is generated, propagated, or replaced when unsafe
- Successful requests emit exactly one INFO log entry with metadata only
- Care plan service logs share the request id of the access log
- Unhandled exceptions emit an ERROR log entry with a stack trace and return 500
"""

from __future__ import annotations

import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.careplans.router import router as careplans_router
from app.core.llm.deps import get_openai_client
from app.core.middleware.http_logging import HttpLoggingMiddleware
from tests.careplans._fakes import RecordingLLMClient


def _make_app() -> FastAPI:
    """Create a minimal app with the care plan router behind the logging middleware."""
    app = FastAPI()
    app.add_middleware(HttpLoggingMiddleware)
    app.include_router(careplans_router)
    app.dependency_overrides[get_openai_client] = lambda: RecordingLLMClient()

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("boom")

    return app


def _get_http_log_records(caplog: pytest.LogCaptureFixture) -> list[logging.LogRecord]:
    return [r for r in caplog.records if r.name == "app.http"]


def test_care_plan_request_logs_metadata_only(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="app.http")
    app = _make_app()

    with TestClient(app) as client:
        res = client.post(
            "/api/careplan?patient_name=Jane+Doe",
            json={"conditions": "Heart failure"},
        )

    assert res.status_code == 200
    assert res.headers["x-request-id"]

    info_records = [r for r in _get_http_log_records(caplog) if r.levelno == logging.INFO]
    assert len(info_records) == 1

    record = info_records[0]
    assert record.__dict__["request_id"] == res.headers["x-request-id"]
    assert record.__dict__["http_method"] == "POST"
    # Route template only: no query string values.
    assert record.__dict__["request_path"] == "/api/careplan"
    assert record.__dict__["status_code"] == 200

    duration_ms = record.__dict__["duration_ms"]
    assert isinstance(duration_ms, (int, float))
    assert duration_ms >= 0

    app_messages = [r.getMessage() for r in caplog.records if r.name.startswith("app.")]
    assert app_messages
    assert not any("Heart failure" in m or "Jane" in m for m in app_messages)


def test_propagates_valid_request_id_to_service_logs(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    app = _make_app()

    with TestClient(app) as client:
        res = client.post(
            "/api/careplan",
            json={"conditions": "Asthma"},
            headers={"X-Request-ID": "req_abc-123"},
        )

    assert res.headers["x-request-id"] == "req_abc-123"

    http_records = _get_http_log_records(caplog)
    assert [r.__dict__["request_id"] for r in http_records] == ["req_abc-123"]
    service_records = [r for r in caplog.records if r.name == "app.careplan"]
    assert [r.__dict__["request_id"] for r in service_records] == ["req_abc-123"]


def test_replaces_unsafe_request_id(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="app.http")
    app = _make_app()

    with TestClient(app) as client:
        res = client.options("/api/careplan", headers={"X-Request-ID": "bad id with spaces"})

    assert res.status_code == 200
    assert res.headers["x-request-id"] != "bad id with spaces"
    assert len(res.headers["x-request-id"]) == 32


def test_unhandled_exception_returns_500_and_logs_error_with_request_id(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Unhandled exceptions should return 500 and emit one ERROR log record with exc_info."""
    caplog.set_level(logging.INFO, logger="app.http")
    app = _make_app()

    with TestClient(app, raise_server_exceptions=False) as client:
        res = client.get("/boom", headers={"X-Request-ID": "req_err_001"})

    assert res.status_code == 500

    error_records = [r for r in _get_http_log_records(caplog) if r.levelno == logging.ERROR]
    assert len(error_records) == 1

    record = error_records[0]
    assert record.__dict__["request_id"] == "req_err_001"
    assert record.__dict__["http_method"] == "GET"
    assert record.__dict__["request_path"] == "/boom"
    assert record.__dict__["status_code"] == 500
    assert record.exc_info
