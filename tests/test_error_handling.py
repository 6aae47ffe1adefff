# ruff: noqa: INP001
"""Request-id propagation, JSON error bodies, and request logging."""

from __future__ import annotations

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel
from starlette.requests import Request

from campus_complaints.core import error_handling
from campus_complaints.core.error_handling import (
    REQUEST_ID_HEADER,
    _error_payload,
    _get_request_id,
    _http_exception_exception_handler,
    _request_validation_exception_handler,
    _response_validation_exception_handler,
    install_error_handling,
)


def _app() -> FastAPI:
    app = FastAPI()
    install_error_handling(app)

    @app.get("/complaints")
    def list_complaints(limit: int) -> dict[str, int]:
        return {"limit": limit}

    @app.get("/complaints/missing")
    def missing_complaint() -> None:
        raise HTTPException(status_code=404, detail="Complaint not found")

    @app.get("/complaints/explode")
    def explode() -> None:
        raise RuntimeError("database on fire")

    class EscalationOut(BaseModel):
        level: int

    @app.get("/complaints/bad-response", response_model=EscalationOut)
    def bad_response() -> dict[str, str]:
        return {"level": "not-a-number"}

    @app.get("/healthz")
    def healthz() -> dict[str, bool]:
        return {"ok": True}

    return app


def _assert_request_id(resp) -> str:  # type: ignore[no-untyped-def]
    body = resp.json()
    request_id = body.get("request_id")
    assert isinstance(request_id, str) and request_id
    assert resp.headers.get(REQUEST_ID_HEADER) == request_id
    return request_id


def test_validation_error_returns_422_with_request_id() -> None:
    resp = TestClient(_app()).get("/complaints?limit=lots")

    assert resp.status_code == 422
    assert isinstance(resp.json()["detail"], list)
    _assert_request_id(resp)


def test_http_exception_keeps_detail_and_request_id() -> None:
    resp = TestClient(_app()).get("/complaints/missing")

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Complaint not found"
    _assert_request_id(resp)


def test_unhandled_exception_is_masked_as_500() -> None:
    resp = TestClient(_app(), raise_server_exceptions=False).get("/complaints/explode")

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Internal Server Error"
    assert "database on fire" not in resp.text
    _assert_request_id(resp)


def test_response_validation_error_is_masked_as_500() -> None:
    resp = TestClient(_app(), raise_server_exceptions=False).get("/complaints/bad-response")

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Internal Server Error"
    _assert_request_id(resp)


def test_incoming_request_id_is_trimmed_and_echoed() -> None:
    resp = TestClient(_app()).get(
        "/complaints?limit=x",
        headers={REQUEST_ID_HEADER: "  sched-42  "},
    )

    assert resp.json()["request_id"] == "sched-42"
    assert resp.headers[REQUEST_ID_HEADER] == "sched-42"


def test_successful_response_carries_request_id_header() -> None:
    resp = TestClient(_app()).get("/complaints?limit=5")

    assert resp.status_code == 200
    assert resp.json() == {"limit": 5}
    assert resp.headers.get(REQUEST_ID_HEADER)


def test_slow_request_logs_warning(monkeypatch: pytest.MonkeyPatch) -> None:
    warnings: list[tuple[str, dict[str, object]]] = []

    def _fake_warning(message: str, *args: object, **kwargs: object) -> None:
        del args
        extra = kwargs.get("extra")
        warnings.append((message, extra if isinstance(extra, dict) else {}))

    ticks = iter((10.0, 10.5))
    monkeypatch.setattr(error_handling.settings, "request_log_slow_ms", 250)
    monkeypatch.setattr(error_handling, "perf_counter", lambda: next(ticks))
    monkeypatch.setattr(error_handling.logger, "warning", _fake_warning)

    resp = TestClient(_app()).get("/complaints?limit=1")

    assert resp.status_code == 200
    assert warnings
    message, extra = warnings[0]
    assert message == "http.request.slow"
    assert extra["slow_threshold_ms"] == 250
    assert extra["duration_ms"] == 500.0


def test_health_requests_are_not_logged_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    logged: list[str] = []
    monkeypatch.setattr(error_handling.settings, "request_log_include_health", False)
    monkeypatch.setattr(
        error_handling.logger,
        "info",
        lambda message, *args, **kwargs: logged.append(message),
    )

    client = TestClient(_app())
    health = client.get("/healthz")
    client.get("/complaints?limit=1")

    assert health.status_code == 200
    assert health.headers.get(REQUEST_ID_HEADER)
    assert logged == ["http.request.completed"]


@pytest.mark.parametrize(
    "state",
    [{}, {"request_id": 7}, {"request_id": ""}],
)
def test_get_request_id_ignores_missing_or_invalid_state(state: dict[str, object]) -> None:
    req = Request({"type": "http", "headers": [], "state": state})
    assert _get_request_id(req) is None


def test_error_payload_omits_missing_request_id() -> None:
    assert _error_payload(detail="nope", request_id=None) == {"detail": "nope"}
    assert _error_payload(detail="nope", request_id="r1") == {"detail": "nope", "request_id": "r1"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("handler", "expected"),
    [
        (_request_validation_exception_handler, "Expected RequestValidationError"),
        (_response_validation_exception_handler, "Expected ResponseValidationError"),
        (_http_exception_exception_handler, "Expected StarletteHTTPException"),
    ],
)
async def test_handlers_reject_unexpected_exception_types(handler, expected) -> None:  # type: ignore[no-untyped-def]
    req = Request({"type": "http", "headers": [], "state": {}})
    with pytest.raises(TypeError, match=expected):
        await handler(req, ValueError("x"))


def test_json_safe_decodes_bytes_and_stringifies_unknown_values() -> None:
    assert error_handling._json_safe(b"\xff") == "\ufffd"
    assert error_handling._json_safe({"raw": bytearray(b"ok")}) == {"raw": "ok"}
    assert error_handling._json_safe((1, None, object)) == [1, None, str(object)]
