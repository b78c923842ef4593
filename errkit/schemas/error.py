"""Structured error wire schemas."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class ViolationKind(str, Enum):
    REQUIRED = "REQUIRED"
    ONEOF = "ONEOF"
    UUID = "UUID"
    MIN = "MIN"
    MAX = "MAX"
    EMAIL = "EMAIL"
    DATE = "DATE"
    REQUIRED_IF = "REQUIRED_IF"


class ValidationIssue(BaseModel):
    """Single field-level validation failure."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: ViolationKind = Field(alias="type")
    field: str
    message: str


class ErrorPayload(BaseModel):
    """Serialized form of a structured error.

    Empty ``violations`` and ``stack_traces`` are carried as ``None`` so that
    ``model_dump(exclude_none=True)`` leaves them out entirely.
    """

    type: str
    code: int
    message: str
    violations: list[ValidationIssue] | None = None
    stack_traces: list[str] | None = None

    def to_content(self) -> dict:
        """Return the JSON-ready mapping used in HTTP responses."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
