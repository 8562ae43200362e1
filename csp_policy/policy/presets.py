"""Named policy presets loaded from YAML."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml

from csp_policy.config.loader import get_settings
from csp_policy.policy.builder import DOMAIN_FIELDS, PolicyBuilder
from csp_policy.policy.domains import DomainList

logger = structlog.get_logger()

HEADER_NAME = "Content-Security-Policy"
REPORT_ONLY_HEADER_NAME = "Content-Security-Policy-Report-Only"

# Preset flag key -> builder attribute
_FLAG_FIELDS = {
    "inline_style": "inline_style_allowed",
    "eval_script": "eval_script_allowed",
    "eval_wasm": "eval_wasm_allowed",
    "strict_dynamic": "strict_dynamic",
    "strict_dynamic_on_scripts": "strict_dynamic_on_scripts",
}

# Cache loaded presets
_presets: dict | None = None


class UnknownPresetError(KeyError):
    """Raised when a preset name is not defined in the presets file."""


def _presets_path() -> Path:
    return Path(get_settings().presets_file)


def load_presets(path: Path | None = None) -> dict[str, Any]:
    """Load policy presets from YAML, caching after first load.

    An explicit ``path`` bypasses the cache.
    """
    global _presets
    if path is None and _presets is not None:
        return _presets
    source = path or _presets_path()
    if not source.exists():
        logger.error("policy_presets_not_found", path=str(source))
        loaded: dict[str, Any] = {}
    else:
        with open(source) as f:
            loaded = yaml.safe_load(f) or {}
    if path is None:
        _presets = loaded
    return loaded


def reset_presets_cache() -> None:
    """Reset the presets cache (for testing)."""
    global _presets
    _presets = None


def apply_preset(builder: PolicyBuilder, preset: dict[str, Any]) -> PolicyBuilder:
    """Append a preset's sources and set its flags on ``builder``.

    Unknown keys are ignored. A preset that is not a mapping, a domain field
    that is not a list, or a flag that is not a boolean raises ``ValueError``.
    A ``null`` flag leaves the builder untouched.
    """
    if not isinstance(preset, dict):
        raise ValueError(f"preset must be a mapping, got {type(preset).__name__}")

    flags: dict[str, bool] = {}
    for key, attr in _FLAG_FIELDS.items():
        value = preset.get(key)
        if value is None:
            continue
        # Quoted YAML such as "false" is a str, not a bool
        if not isinstance(value, bool):
            raise ValueError(f"preset field '{key}' must be a boolean, got {type(value).__name__}")
        flags[attr] = value

    for field_name in DOMAIN_FIELDS:
        if field_name not in preset:
            continue
        values = preset[field_name]
        if values is None:
            values = []
        if not isinstance(values, list):
            raise ValueError(f"preset field '{field_name}' must be a list, got {type(values).__name__}")
        domains = getattr(builder, field_name)
        if not domains.is_set:
            # An explicit empty list still marks the directive as configured
            domains = DomainList([])
            setattr(builder, field_name, domains)
        for value in values:
            domains.append(str(value))

    for attr, value in flags.items():
        setattr(builder, attr, value)
    return builder


def builder_from_preset(name: str | None = None, nonce: str | None = None) -> PolicyBuilder:
    """Create a builder populated from the named preset.

    ``name`` defaults to the configured preset. Configured report URIs are
    appended and ``nonce``, when given, is applied.
    """
    settings = get_settings()
    preset_name = name or settings.preset
    presets = load_presets()
    if preset_name not in presets:
        valid = ", ".join(sorted(presets))
        raise UnknownPresetError(f"unknown CSP preset '{preset_name}'; expected one of: {valid}")

    builder = apply_preset(PolicyBuilder(), presets[preset_name] or {})
    for location in settings.report_uris:
        builder.add_report_to(location)
    if nonce is not None:
        builder.use_js_nonce(nonce)
    logger.debug("policy_preset_applied", preset=preset_name, nonce=nonce is not None)
    return builder


def header_name(report_only: bool | None = None) -> str:
    """Return the response header name for enforced or report-only policies."""
    if report_only is None:
        report_only = get_settings().report_only
    return REPORT_ONLY_HEADER_NAME if report_only else HEADER_NAME
