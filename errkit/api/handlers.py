"""FastAPI exception handlers rendering structured errors."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
import logging

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from errkit.core.catalog import from_status_code
from errkit.core.config import get_error_settings
from errkit.core.errors import StructuredError
from errkit.core.errors import violations
from errkit.core.errors import wrap
from errkit.schemas.error import ValidationIssue
from errkit.schemas.error import ViolationKind

logger = logging.getLogger(__name__)

_LOCATION_PREFIXES = frozenset({"body", "query", "path", "header", "cookie"})

_MIN_TYPES = frozenset({"string_too_short", "too_short", "greater_than", "greater_than_equal"})
_MAX_TYPES = frozenset({"string_too_long", "too_long", "less_than", "less_than_equal"})
_ONEOF_TYPES = frozenset({"enum", "literal_error"})


def _response_status(code: int) -> int:
    if 400 <= code <= 599:
        return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _build_error_response(error: StructuredError, headers: Mapping[str, str] | None = None) -> JSONResponse:
    settings = get_error_settings()
    content = error.to_dict(include_stack_traces=settings.expose_stack_traces)
    return JSONResponse(
        status_code=_response_status(error.code),
        content=content,
        headers=dict(headers) if headers else None,
    )


def _field_path(location: Any) -> str:
    """Render a pydantic error location as a dotted field path.

    Request-part prefixes such as ``body`` or ``query`` are dropped. A location
    made only of a prefix keeps it, and an empty one names the whole request.
    """
    parts = location if isinstance(location, (tuple, list)) else (location,)
    fields = [str(part) for part in parts if part not in _LOCATION_PREFIXES]
    if fields:
        return ".".join(fields)
    return str(parts[0]) if parts else "request"


def _violation_kind(issue: dict[str, Any]) -> ViolationKind:
    """Map a pydantic error onto the closed violation vocabulary.

    The vocabulary has no generic entry, so error types without a counterpart
    (``int_parsing``, ``bool_type``, ``model_type`` and the like) are reported
    as REQUIRED; the issue message still carries pydantic's own explanation.
    """
    error_type = str(issue.get("type", ""))
    message = str(issue.get("msg", "")).lower()

    if error_type == "missing":
        return ViolationKind.REQUIRED
    if error_type in _MIN_TYPES:
        return ViolationKind.MIN
    if error_type in _MAX_TYPES:
        return ViolationKind.MAX
    if error_type in _ONEOF_TYPES:
        return ViolationKind.ONEOF
    if error_type.startswith("uuid"):
        return ViolationKind.UUID
    if error_type.startswith(("date", "datetime")):
        return ViolationKind.DATE
    if "email" in error_type or "email" in message:
        return ViolationKind.EMAIL
    return ViolationKind.REQUIRED


def validation_issues(exc: RequestValidationError) -> list[ValidationIssue]:
    """Translate FastAPI request validation errors into validation issues."""
    return [
        ValidationIssue(
            kind=_violation_kind(issue),
            field=_field_path(issue.get("loc", ())),
            message=str(issue.get("msg", "Invalid value")),
        )
        for issue in exc.errors()
    ]


async def structured_error_handler(_: Request, exc: StructuredError) -> JSONResponse:
    """Render a raised structured error as its serialized form."""
    if exc.code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("Structured error kind=%s code=%s: %s", exc.kind, exc.code, exc.description())
    else:
        logger.info("Structured error kind=%s code=%s: %s", exc.kind, exc.code, exc.message)
    return _build_error_response(exc)


async def request_validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Normalize FastAPI validation errors to an unprocessable-entity error."""
    return _build_error_response(violations(validation_issues(exc)))


async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Normalize HTTP exceptions to catalog errors, keeping their headers."""
    message = exc.detail if isinstance(exc.detail, str) and exc.detail else None
    return _build_error_response(
        from_status_code(exc.status_code, message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    """Wrap unexpected exceptions without leaking their details."""
    logger.exception("Unhandled exception: %s", type(exc).__name__)
    return _build_error_response(wrap(exc))


def register_error_handlers(app: FastAPI) -> None:
    """Attach structured error handlers to a FastAPI app instance."""
    logger.debug("Registering error handlers with settings=%s", get_error_settings().safe_for_logging())

    app.add_exception_handler(StructuredError, structured_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
