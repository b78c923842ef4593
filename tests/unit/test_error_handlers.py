"""Unit tests for FastAPI structured error handlers."""

from __future__ import annotations

import logging
from uuid import UUID

import pytest
from fastapi import FastAPI
from fastapi import Query
from fastapi.testclient import TestClient
from pydantic import BaseModel
from pydantic import Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from errkit.api.handlers import _field_path
from errkit.api.handlers import register_error_handlers
from errkit.core.catalog import error_not_found
from errkit.core.config import get_error_settings
from errkit.core.errors import new
from errkit.core.errors import violations
from errkit.schemas.error import ValidationIssue
from errkit.schemas.error import ViolationKind


class _SignupPayload(BaseModel):
    name: str = Field(min_length=2, max_length=5)
    account_id: UUID


def _build_client() -> TestClient:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/query")
    def query(limit: int = Query(ge=1)) -> dict[str, int]:
        return {"limit": limit}

    @app.post("/signup")
    def signup(payload: _SignupPayload) -> dict[str, str]:
        return {"name": payload.name}

    @app.get("/not-found")
    def not_found() -> None:
        raise error_not_found()

    @app.get("/custom")
    def custom() -> None:
        raise new(409, "Pipeline already exists", "PIPELINE_EXISTS")

    @app.get("/invalid")
    def invalid() -> None:
        raise violations(
            [ValidationIssue(kind=ViolationKind.EMAIL, field="email", message="Invalid email format")]
        )

    @app.get("/http")
    def http_error() -> None:
        raise StarletteHTTPException(status_code=404, detail="Client not found")

    @app.get("/private")
    def private() -> None:
        raise StarletteHTTPException(
            status_code=401,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.get("/boom")
    def boom() -> None:
        raise RuntimeError("database password leaked")

    return TestClient(app, raise_server_exceptions=False)


def test_structured_errors_render_serialized_form() -> None:
    client = _build_client()

    response = client.get("/not-found")

    assert response.status_code == 404
    assert response.json() == {"type": "NOT_FOUND", "code": 404, "message": "Not found"}


def test_custom_kinds_keep_their_code_and_message() -> None:
    client = _build_client()

    response = client.get("/custom")

    assert response.status_code == 409
    assert response.json() == {
        "type": "PIPELINE_EXISTS",
        "code": 409,
        "message": "Pipeline already exists",
    }


def test_violations_render_with_issues() -> None:
    client = _build_client()

    response = client.get("/invalid")

    assert response.status_code == 422
    assert response.json()["violations"] == [
        {"type": "EMAIL", "field": "email", "message": "Invalid email format"}
    ]


def test_request_validation_errors_become_violations() -> None:
    client = _build_client()

    response = client.get("/query")

    assert response.status_code == 422
    payload = response.json()
    assert payload["type"] == "UNPROCESSABLE_ENTITY"
    assert payload["message"] == "Unprocessable entity"
    assert payload["violations"][0]["type"] == "REQUIRED"
    assert payload["violations"][0]["field"] == "limit"


def test_request_validation_maps_issue_kinds() -> None:
    client = _build_client()

    too_small = client.get("/query", params={"limit": 0}).json()
    too_long = client.post("/signup", json={"name": "abcdefgh", "account_id": "not-a-uuid"}).json()

    assert too_small["violations"][0]["type"] == "MIN"
    kinds = {issue["field"]: issue["type"] for issue in too_long["violations"]}
    assert kinds == {"name": "MAX", "account_id": "UUID"}


def test_http_errors_are_mapped_to_catalog_kinds() -> None:
    client = _build_client()

    response = client.get("/http")

    assert response.status_code == 404
    assert response.json() == {"type": "NOT_FOUND", "code": 404, "message": "Client not found"}


def test_unknown_routes_use_catalog_message() -> None:
    client = _build_client()

    response = client.get("/missing-route")

    assert response.status_code == 404
    assert response.json()["type"] == "NOT_FOUND"


def test_unhandled_exceptions_are_wrapped_without_leaking(caplog: pytest.LogCaptureFixture) -> None:
    client = _build_client()

    with caplog.at_level(logging.ERROR, logger="errkit.api.handlers"):
        response = client.get("/boom")

    assert response.status_code == 500
    assert response.json() == {
        "type": "INTERNAL_SERVER_ERROR",
        "code": 500,
        "message": "An internal server error occurred",
    }
    assert "password" not in response.text
    assert any("RuntimeError" in record.getMessage() for record in caplog.records)


def test_stack_traces_are_exposed_only_when_enabled(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ERRKIT_EXPOSE_STACK_TRACES", "true")
    get_error_settings.cache_clear()
    client = _build_client()

    response = client.get("/not-found")

    assert response.status_code == 404
    stack_traces = response.json()["stack_traces"]
    assert stack_traces
    assert "not_found" in stack_traces[0]


def test_method_not_allowed_keeps_allow_header() -> None:
    client = _build_client()

    response = client.post("/query")

    assert response.status_code == 405
    assert "GET" in response.headers["allow"]
    assert response.json()["type"] == "BAD_REQUEST"
    assert response.json()["code"] == 405


def test_http_exception_headers_reach_the_response() -> None:
    client = _build_client()

    response = client.get("/private")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert response.json() == {"type": "UNAUTHORIZED", "code": 401, "message": "Token expired"}


def test_unmapped_validation_types_fall_back_to_required() -> None:
    client = _build_client()

    response = client.get("/query", params={"limit": "many"})

    assert response.status_code == 422
    issue = response.json()["violations"][0]
    assert issue["type"] == "REQUIRED"
    assert issue["field"] == "limit"
    assert "integer" in issue["message"]


@pytest.mark.parametrize(
    ("location", "expected"),
    [
        (("body", "address", "city"), "address.city"),
        (("body", "items", 0, "sku"), "items.0.sku"),
        (("query", "limit"), "limit"),
        (("body",), "body"),
        ((), "request"),
        ("header", "header"),
    ],
)
def test_field_path_drops_request_part_prefixes(location: object, expected: str) -> None:
    assert _field_path(location) == expected


def test_registration_logs_active_settings(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="errkit.api.handlers"):
        _build_client()

    messages = [record.getMessage() for record in caplog.records]
    assert any("expose_stack_traces" in message and "max_stack_frames" in message for message in messages)
