"""Env var config loading with pydantic-settings."""

from __future__ import annotations

from pathlib import Path

import structlog
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger()

_PRESETS_PATH = Path(__file__).parent / "policy_presets.yaml"


class CspSettings(BaseSettings):
    """Policy configuration loaded from model defaults, overridden by env vars."""

    model_config = SettingsConfigDict(
        env_prefix="CSP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "info"
    log_json: bool = True

    # Named preset from presets_file used when none is given explicitly
    preset: str = "balanced"
    presets_file: str = str(_PRESETS_PATH)

    # Emit Content-Security-Policy-Report-Only instead of enforcing
    report_only: bool = False
    # Appended to every preset-built policy as report-uri targets (JSON list in env)
    report_uris: list[str] = []


_settings: CspSettings | None = None


def get_settings() -> CspSettings:
    """Get or create the singleton settings instance."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def load_settings() -> CspSettings:
    """Load settings from env vars (env vars override model defaults)."""
    global _settings
    _settings = CspSettings()
    logger.info("config_loaded", preset=_settings.preset, report_only=_settings.report_only)
    return _settings
