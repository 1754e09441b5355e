"""Shared test fixtures for all test modules."""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _clear_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test against default configuration."""
    monkeypatch.delenv("POD_STATUS_RESULT_CAP", raising=False)
    monkeypatch.delenv("POD_STATUS_LOG_LEVEL", raising=False)
