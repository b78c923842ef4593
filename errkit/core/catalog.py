"""Predefined structured errors for common HTTP-style conditions.

Every entry is a zero-argument factory: each call builds a new instance with
its own stack snapshot, so callers never share or mutate a common error.
"""

from __future__ import annotations

from collections.abc import Callable

from errkit.core.errors import ErrorKind
from errkit.core.errors import StructuredError
from errkit.core.stack import FrameCapture

CATALOG: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.BAD_REQUEST: (400, "Bad request"),
    ErrorKind.UNAUTHORIZED: (401, "Unauthorized"),
    ErrorKind.FORBIDDEN: (403, "Forbidden"),
    ErrorKind.NOT_FOUND: (404, "Not found"),
    ErrorKind.CONFLICT: (409, "Conflict"),
    ErrorKind.UNPROCESSABLE_ENTITY: (422, "Unprocessable entity"),
    ErrorKind.INTERNAL_SERVER_ERROR: (500, "Internal server error"),
    ErrorKind.PANIC: (500, "Panic"),
}

_STATUS_KINDS: dict[int, ErrorKind] = {
    code: kind for kind, (code, _) in CATALOG.items() if kind is not ErrorKind.PANIC
}


def _entry(kind: ErrorKind) -> Callable[..., StructuredError]:
    code, message = CATALOG[kind]

    def factory(*, capture: FrameCapture | None = None) -> StructuredError:
        return StructuredError(code=code, message=message, kind=kind, capture=capture)

    factory.__name__ = f"error_{kind.value.lower()}"
    factory.__qualname__ = factory.__name__
    factory.__doc__ = f"Create a {code} {kind.value} error."
    return factory


error_bad_request = _entry(ErrorKind.BAD_REQUEST)
error_unauthorized = _entry(ErrorKind.UNAUTHORIZED)
error_forbidden = _entry(ErrorKind.FORBIDDEN)
error_not_found = _entry(ErrorKind.NOT_FOUND)
error_conflict = _entry(ErrorKind.CONFLICT)
error_unprocessable_entity = _entry(ErrorKind.UNPROCESSABLE_ENTITY)
error_internal_server_error = _entry(ErrorKind.INTERNAL_SERVER_ERROR)
error_panic = _entry(ErrorKind.PANIC)


def from_status_code(
    status_code: int,
    message: str | None = None,
    *,
    capture: FrameCapture | None = None,
) -> StructuredError:
    """Return a catalog-shaped error for an HTTP status code.

    Known statuses use their catalog kind. Other 4xx statuses are classified as
    bad requests and other 5xx statuses as internal server errors; both keep the
    given status code. A status outside 400-599 is not an error status and
    becomes a 500 internal server error. ``message`` overrides the catalog
    message.
    """
    if not 400 <= status_code <= 599:
        status_code = 500
    kind = _STATUS_KINDS.get(status_code)
    if kind is None:
        kind = ErrorKind.INTERNAL_SERVER_ERROR if status_code >= 500 else ErrorKind.BAD_REQUEST
    _, default_message = CATALOG[kind]
    return StructuredError(
        code=status_code,
        message=message or default_message,
        kind=kind,
        capture=capture,
    )
