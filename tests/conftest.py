"""
Shared pytest fixtures for faultline tests.

This module provides:
- Isolation of the default reporter, resolver and settings cache
- A RecordingSink and a Reporter wired to it
"""

import os
import sys
from pathlib import Path

import pytest

# Ensure faultline package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from faultline import report
from faultline.core.settings import FaultlineSettings, clear_settings_cache
from faultline.observability.sinks import RecordingSink


@pytest.fixture(autouse=True)
def _isolate_faultline(monkeypatch):
    """Reset process-wide faultline state around every test."""
    for key in list(os.environ):
        if key.startswith("FAULTLINE_"):
            monkeypatch.delenv(key)
    clear_settings_cache()
    report.reset()
    yield
    clear_settings_cache()
    report.reset()


@pytest.fixture
def settings():
    """Default settings, ignoring any .env file in the working directory."""
    return FaultlineSettings(_env_file=None)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def reporter(settings, sink):
    return report.Reporter(settings, sink=sink)
