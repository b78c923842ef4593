"""Structured, classifiable errors for HTTP-style APIs."""

from errkit.core.catalog import error_bad_request
from errkit.core.catalog import error_conflict
from errkit.core.catalog import error_forbidden
from errkit.core.catalog import error_internal_server_error
from errkit.core.catalog import error_not_found
from errkit.core.catalog import error_panic
from errkit.core.catalog import error_unauthorized
from errkit.core.catalog import error_unprocessable_entity
from errkit.core.catalog import from_status_code
from errkit.core.errors import ErrorKind
from errkit.core.errors import StructuredError
from errkit.core.errors import as_structured
from errkit.core.errors import default_error
from errkit.core.errors import error_is
from errkit.core.errors import new
from errkit.core.errors import violations
from errkit.core.errors import wrap
from errkit.schemas.error import ErrorPayload
from errkit.schemas.error import ValidationIssue
from errkit.schemas.error import ViolationKind

__all__ = [
    "ErrorKind",
    "ErrorPayload",
    "StructuredError",
    "ValidationIssue",
    "ViolationKind",
    "as_structured",
    "default_error",
    "error_bad_request",
    "error_conflict",
    "error_forbidden",
    "error_internal_server_error",
    "error_is",
    "error_not_found",
    "error_panic",
    "error_unauthorized",
    "error_unprocessable_entity",
    "from_status_code",
    "new",
    "violations",
    "wrap",
]

__version__ = "0.1.0"
