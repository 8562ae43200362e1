"""structlog logging setup for policy composition."""

from __future__ import annotations

import logging
import sys

import structlog

from csp_policy.config.loader import CspSettings, get_settings


def _rename_logger_to_module(
    logger: logging.Logger, method_name: str, event_dict: dict
) -> dict:
    """Rename 'logger' key to 'module' for structured log field consistency."""
    if "logger" in event_dict:
        event_dict["module"] = event_dict.pop("logger")
    return event_dict


def _policy_context(settings: CspSettings) -> structlog.types.Processor:
    """Stamp every event with the configured preset and enforcement mode.

    Fields already bound on the event win.
    """
    mode = "report-only" if settings.report_only else "enforce"

    def processor(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
        event_dict.setdefault("csp_preset", settings.preset)
        event_dict.setdefault("csp_mode", mode)
        return event_dict

    return processor


def setup_logging(log_level: str | None = None, json_format: bool | None = None) -> None:
    """Configure structlog for JSON or human-readable output.

    Arguments left as ``None`` fall back to ``CSP_LOG_LEVEL`` / ``CSP_LOG_JSON``.
    Events carry ``csp_preset`` and ``csp_mode`` from the current settings.
    """
    settings = get_settings()
    log_level = log_level or settings.log_level
    json_format = settings.log_json if json_format is None else json_format

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _rename_logger_to_module,
        _policy_context(settings),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
