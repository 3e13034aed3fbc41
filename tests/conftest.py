"""Shared test fixtures and helpers for facemood tests."""

import importlib.util
import sys
from pathlib import Path

import pytest

# Load helpers module from the tests directory using importlib to avoid
# polluting sys.path.
_helpers_path = Path(__file__).resolve().parent / "helpers.py"
_spec = importlib.util.spec_from_file_location("helpers", _helpers_path)
_helpers = importlib.util.module_from_spec(_spec)
sys.modules["helpers"] = _helpers
_spec.loader.exec_module(_helpers)

from helpers import make_detection, neutral_face  # noqa: F401,E402

from facemood.observability import ObservabilityHub  # noqa: E402


@pytest.fixture(autouse=True)
def reset_observability():
    """Each test starts with tracing disabled and no sinks."""
    ObservabilityHub.reset_instance()
    yield
    ObservabilityHub.reset_instance()


@pytest.fixture
def face():
    """Landmarks of a relaxed, symmetric synthetic face."""
    return neutral_face()


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
