"""Shared pytest fixtures for errkit test suites."""

from collections.abc import Generator
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from errkit.core.config import get_error_settings  # noqa: E402
from errkit.core.stack import reset_frame_capture  # noqa: E402

_ENV_VARS = ("ERRKIT_MAX_STACK_FRAMES", "ERRKIT_EXPOSE_STACK_TRACES", "ERRKIT_CAPTURE_STACK")


@pytest.fixture(autouse=True)
def clean_error_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Run every test against default settings and the built-in frame capture."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_error_settings.cache_clear()
    reset_frame_capture()
    yield
    get_error_settings.cache_clear()
    reset_frame_capture()


@pytest.fixture
def fixed_capture() -> list[str]:
    """Deterministic frames used with ``capture=`` overrides."""
    return ["app.py:10 app.handler", "app.py:20 app.main"]
