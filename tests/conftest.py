"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_ENV_NAMES = (
    "VANTAGE_METRICS_URL",
    "VANTAGE_METRICS_TOKEN",
    "VANTAGE_REQUEST_TIMEOUT",
    "VANTAGE_DISCOVERY_WORKERS",
    "VANTAGE_LOG_LEVEL",
)


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test against default Vantage configuration."""
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
