"""Error toolkit configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_MAX_STACK_FRAMES = 32
DEFAULT_EXPOSE_STACK_TRACES = False
DEFAULT_CAPTURE_STACK = True

_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    return int(raw)


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() not in _FALSE_VALUES


@dataclass(frozen=True)
class ErrorSettings:
    """Runtime settings for stack capture and HTTP rendering."""

    max_stack_frames: int
    expose_stack_traces: bool
    capture_stack: bool

    def safe_for_logging(self) -> dict[str, int | bool]:
        """Return error settings as a plain mapping for logs."""
        return {
            "max_stack_frames": self.max_stack_frames,
            "expose_stack_traces": self.expose_stack_traces,
            "capture_stack": self.capture_stack,
        }


@lru_cache(maxsize=1)
def get_error_settings() -> ErrorSettings:
    """Load error settings from the environment."""
    max_frames = _get_int_env("ERRKIT_MAX_STACK_FRAMES", DEFAULT_MAX_STACK_FRAMES)
    if max_frames < 0:
        raise ValueError("ERRKIT_MAX_STACK_FRAMES must be >= 0")
    return ErrorSettings(
        max_stack_frames=max_frames,
        expose_stack_traces=_get_bool_env("ERRKIT_EXPOSE_STACK_TRACES", DEFAULT_EXPOSE_STACK_TRACES),
        capture_stack=_get_bool_env("ERRKIT_CAPTURE_STACK", DEFAULT_CAPTURE_STACK),
    )
