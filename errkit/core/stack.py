"""Call-stack snapshots attached to structured errors."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Generator
from contextlib import contextmanager
from types import FrameType
import logging
import sys
import traceback

from errkit.core.config import get_error_settings

logger = logging.getLogger(__name__)

PACKAGE_NAME = "errkit"
IGNORED_MODULE_PREFIXES = ("_pytest", "pluggy")

FrameCapture = Callable[[int], list[str]]


def _module_name(frame: FrameType) -> str:
    return str(frame.f_globals.get("__name__", ""))


def _is_relevant_frame(frame: FrameType) -> bool:
    """Skip frames owned by this package and by the test runner."""
    module = _module_name(frame)
    if module == PACKAGE_NAME or module.startswith(f"{PACKAGE_NAME}."):
        return False
    return not module.startswith(IGNORED_MODULE_PREFIXES)


def _format_frame(frame: FrameType, lineno: int) -> str:
    code = frame.f_code
    return f"{code.co_filename}:{lineno} {_module_name(frame)}.{code.co_qualname}"


def capture_stack_trace(limit: int) -> list[str]:
    """Snapshot the current stack, innermost frame first, up to ``limit`` frames."""
    if limit <= 0:
        return []

    frames: list[str] = []
    for frame, lineno in traceback.walk_stack(sys._getframe()):
        if not _is_relevant_frame(frame):
            continue
        frames.append(_format_frame(frame, lineno))
        if len(frames) >= limit:
            break
    return frames


def disabled_capture(limit: int) -> list[str]:
    """Frame capture that never records anything."""
    return []


_default_capture: FrameCapture = capture_stack_trace


def get_frame_capture() -> FrameCapture:
    """Return the process-wide default frame capture."""
    return _default_capture


def set_frame_capture(capture: FrameCapture) -> None:
    """Replace the process-wide default frame capture."""
    global _default_capture
    _default_capture = capture


def reset_frame_capture() -> None:
    """Restore the built-in frame capture."""
    set_frame_capture(capture_stack_trace)


@contextmanager
def frame_capture_override(capture: FrameCapture) -> Generator[FrameCapture, None, None]:
    """Temporarily install ``capture`` as the default frame capture."""
    previous = get_frame_capture()
    set_frame_capture(capture)
    try:
        yield capture
    finally:
        set_frame_capture(previous)


def snapshot(capture: FrameCapture | None = None) -> list[str]:
    """Capture a stack snapshot for a new error.

    Uses ``capture`` when given, otherwise the process default. Never raises:
    any failure in settings or capture yields an empty list.
    """
    try:
        settings = get_error_settings()
        if capture is None:
            if not settings.capture_stack:
                return []
            capture = _default_capture
        return [str(line) for line in capture(settings.max_stack_frames)]
    except Exception:
        logger.debug("Stack capture failed", exc_info=True)
        return []
