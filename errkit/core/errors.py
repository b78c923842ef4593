"""Structured error type, its constructors and cause-chain helpers."""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Iterator
from enum import Enum
from typing import Any

from errkit.core.stack import FrameCapture
from errkit.core.stack import snapshot
from errkit.schemas.error import ErrorPayload
from errkit.schemas.error import ValidationIssue


class ErrorKind(str, Enum):
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    UNPROCESSABLE_ENTITY = "UNPROCESSABLE_ENTITY"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    PANIC = "PANIC"


WRAPPED_ERROR_CODE = 500
WRAPPED_ERROR_MESSAGE = "An internal server error occurred"
VIOLATIONS_CODE = 422
VIOLATIONS_MESSAGE = "Unprocessable entity"


def _normalize_kind(kind: str | Enum) -> str:
    if isinstance(kind, Enum):
        return str(kind.value)
    return str(kind)


class StructuredError(Exception):
    """Classifiable application error with a kind, a status code and a message.

    Two structured errors match when their kinds are equal, regardless of code
    or message. A wrapped cause, when present, drives ``str()`` and is exposed
    through ``unwrap()`` and the native ``__cause__``.
    """

    def __init__(
        self,
        *,
        code: int,
        message: str,
        kind: str | Enum,
        violations: Iterable[ValidationIssue] = (),
        cause: Any = None,
        capture: FrameCapture | None = None,
    ) -> None:
        normalized_kind = _normalize_kind(kind)
        if not normalized_kind:
            raise ValueError("kind must not be empty")

        super().__init__(message)
        self._kind = normalized_kind
        self._code = int(code)
        self._message = message
        self._violations = tuple(violations)
        self._cause = cause
        self._stack_trace = tuple(snapshot(capture))
        if isinstance(cause, BaseException):
            self.__cause__ = cause

    def __reduce__(self) -> tuple[Any, ...]:
        return (
            _restore_structured_error,
            (type(self), self._kind, self._code, self._message, self._violations, self._cause, self._stack_trace),
        )

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def code(self) -> int:
        return self._code

    @property
    def message(self) -> str:
        return self._message

    @property
    def violations(self) -> tuple[ValidationIssue, ...]:
        return self._violations

    @property
    def cause(self) -> Any:
        return self._cause

    @property
    def stack_trace(self) -> tuple[str, ...]:
        return self._stack_trace

    def description(self) -> str:
        """Return the cause's description when wrapping, otherwise the message."""
        if self._cause is not None:
            return str(self._cause)
        return self._message

    def __str__(self) -> str:
        return self.description()

    def __repr__(self) -> str:
        return f"StructuredError(kind={self._kind!r}, code={self._code}, message={self._message!r})"

    def unwrap(self) -> Any:
        """Return the wrapped cause, or ``None``."""
        return self._cause

    def matches(self, other: object) -> bool:
        """Report whether ``other`` classifies as this error.

        Structured targets match on kind alone. Any other target matches only
        when it is the very object this error wraps.
        """
        if isinstance(other, StructuredError):
            return self._kind == other._kind
        if self._cause is not None:
            return self._cause is other
        return False

    def to_payload(self, *, include_stack_traces: bool = True) -> ErrorPayload:
        """Build the serialized form; the cause is never included."""
        return ErrorPayload(
            type=self._kind,
            code=self._code,
            message=self._message,
            violations=list(self._violations) if self._violations else None,
            stack_traces=list(self._stack_trace) if include_stack_traces and self._stack_trace else None,
        )

    def to_dict(self, *, include_stack_traces: bool = True) -> dict[str, Any]:
        """Return the serialized form as a JSON-ready mapping."""
        return self.to_payload(include_stack_traces=include_stack_traces).to_content()


def _restore_structured_error(
    cls: type[StructuredError],
    kind: str,
    code: int,
    message: str,
    violations: tuple[ValidationIssue, ...],
    cause: Any,
    stack_trace: tuple[str, ...],
) -> StructuredError:
    """Rebuild a pickled or copied error without capturing a new stack."""
    err = cls.__new__(cls)
    Exception.__init__(err, message)
    err._kind = kind
    err._code = code
    err._message = message
    err._violations = tuple(violations)
    err._cause = cause
    err._stack_trace = tuple(stack_trace)
    if isinstance(cause, BaseException):
        err.__cause__ = cause
    return err


def new(code: int, message: str, kind: str | Enum, *, capture: FrameCapture | None = None) -> StructuredError:
    """Create a structured error with no violations and no cause."""
    return StructuredError(code=code, message=message, kind=kind, capture=capture)


def wrap(cause: Any, *, capture: FrameCapture | None = None) -> StructuredError:
    """Wrap ``cause`` in a generic internal-server-error."""
    return StructuredError(
        code=WRAPPED_ERROR_CODE,
        message=WRAPPED_ERROR_MESSAGE,
        kind=ErrorKind.INTERNAL_SERVER_ERROR,
        cause=cause,
        capture=capture,
    )


def violations(issues: Iterable[ValidationIssue], *, capture: FrameCapture | None = None) -> StructuredError:
    """Create an unprocessable-entity error carrying ``issues`` in order."""
    return StructuredError(
        code=VIOLATIONS_CODE,
        message=VIOLATIONS_MESSAGE,
        kind=ErrorKind.UNPROCESSABLE_ENTITY,
        violations=issues,
        capture=capture,
    )


def default_error(*, capture: FrameCapture | None = None) -> StructuredError:
    """Create the generic internal-server-error without a cause."""
    return StructuredError(
        code=WRAPPED_ERROR_CODE,
        message=WRAPPED_ERROR_MESSAGE,
        kind=ErrorKind.INTERNAL_SERVER_ERROR,
        capture=capture,
    )


def _iter_chain(err: Any) -> Iterator[Any]:
    seen: set[int] = set()
    current = err
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if isinstance(current, StructuredError):
            current = current.unwrap()
        else:
            current = getattr(current, "__cause__", None)


def error_is(err: Any, target: Any) -> bool:
    """Report whether any error in ``err``'s cause chain matches ``target``."""
    if err is None:
        return target is None

    for link in _iter_chain(err):
        if isinstance(link, StructuredError):
            if link.matches(target):
                return True
        elif link is target:
            return True
    return False


def as_structured(err: Any) -> StructuredError | None:
    """Return the first structured error in ``err``'s cause chain."""
    for link in _iter_chain(err):
        if isinstance(link, StructuredError):
            return link
    return None
