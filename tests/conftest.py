"""Shared test fixtures."""

from __future__ import annotations

import os

import pytest

from csp_policy.policy.presets import reset_presets_cache


@pytest.fixture(autouse=True)
def _mock_settings(monkeypatch):
    """Start every test from default settings and an empty preset cache."""
    for key in list(os.environ):
        if key.startswith("CSP_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("CSP_LOG_JSON", "false")

    # Reset cached settings
    import csp_policy.config.loader as loader
    loader._settings = None
    reset_presets_cache()
    yield
    loader._settings = None
    reset_presets_cache()


@pytest.fixture
def base_policy():
    """Directives every rendered policy starts with."""
    return "default-src 'none';base-uri 'none';manifest-src 'self';"
