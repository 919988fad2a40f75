"""Logging configuration setup.

Builds a ``logging.config.dictConfig`` document with a single console
handler on the root logger (child loggers propagate), a JSONL or plain
text formatter and the context-injecting filter.
"""

from __future__ import annotations

import logging
import logging.config
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from dispatch_service.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from dispatch_service.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    log_config = {**settings_obj.to_logging_kwargs(), **configure_kwargs}
    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    service_name: str | None = None,
    include_context: bool = True,
    include_process_info: bool = False,
    capture_warnings: bool = True,
) -> None:
    """Configure the root logger with dictConfig.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Enable JSONL (JSON Lines) structured logging.
        service_name: Static ``service`` field added to JSON records.
        include_context: Enable ContextInjectingFilter for auto context.
        include_process_info: Include process ID and name in JSON records.
        capture_warnings: Forward Python warnings to logging system.

    Example:
        from dispatch_service.core.settings import get_logging_settings

        configure_logging(**get_logging_settings().to_logging_kwargs())
    """
    if capture_warnings:
        logging.captureWarnings(True)

    logging.config.dictConfig(
        build_logging_config(
            log_level=log_level,
            json_logs=json_logs,
            service_name=service_name,
            include_context=include_context,
            include_process_info=include_process_info,
        ),
    )
    logger.debug("Logging configured", extra={"json_logs": json_logs, "level": log_level})


def build_logging_config(
    log_level: str,
    json_logs: bool,
    service_name: str | None,
    include_context: bool,
    include_process_info: bool,
) -> dict[str, Any]:
    """Return the dictConfig document for the given options."""
    if json_logs:
        formatter: dict[str, Any] = {
            "()": "dispatch_service.infra.logging.formatters.JSONFormatter",
            "static": {"service": service_name} if service_name else None,
            "include_process_info": include_process_info,
        }
    else:
        formatter = {"format": TEXT_FORMAT}

    filters: dict[str, Any] = {}
    if include_context:
        filters["context"] = {
            "()": "dispatch_service.infra.logging.context.ContextInjectingFilter",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": formatter},
        "filters": filters,
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "formatter": "default",
                "filters": list(filters),
                "level": log_level,
            },
        },
        "root": {"level": log_level, "handlers": ["console"]},
        "loggers": {
            # apscheduler logs every job run at INFO
            "apscheduler": {"level": "WARNING"},
        },
    }
