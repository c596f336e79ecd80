"""
Shared test setup.

Settings are cached process-wide; every test starts from the defaults.
"""

import os

import pytest

from splitledger.config import get_settings


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """Drop SPLITLEDGER_* overrides and reset the settings cache around each test."""
    for key in list(os.environ):
        if key.startswith("SPLITLEDGER_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(os.path.dirname(__file__))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
