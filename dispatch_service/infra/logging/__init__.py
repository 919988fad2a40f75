"""Logging infrastructure.

Basic usage:
    import logging

    from dispatch_service.infra.logging import set_log_context

    logger = logging.getLogger(__name__)

    set_log_context(notification_id=42)
    logger.info("Attempting delivery")  # Includes notification_id

    # Lazy evaluation for expensive debug output
    from dispatch_service.infra.logging import get_lazy_logger

    lazy_logger = get_lazy_logger(__name__)
    lazy_logger.debug(lambda: f"Snapshot: {expensive_dump()}")
"""

from dispatch_service.infra.logging.config import (
    build_logging_config,
    configure_logging,
    setup_logging,
)
from dispatch_service.infra.logging.context import (
    ContextBoundLogger,
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    get_logger,
    set_log_context,
)
from dispatch_service.infra.logging.formatters import JSONFormatter
from dispatch_service.infra.logging.lazy import LazyLoggerAdapter, get_lazy_logger

__all__ = [
    "ContextBoundLogger",
    "ContextInjectingFilter",
    "JSONFormatter",
    "LazyLoggerAdapter",
    "build_logging_config",
    "clear_log_context",
    "configure_logging",
    "get_lazy_logger",
    "get_log_context",
    "get_logger",
    "set_log_context",
    "setup_logging",
]
