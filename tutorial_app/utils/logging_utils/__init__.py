"""
Category loggers with request-scoped context.

Usage:
    from tutorial_app.utils.logging_utils import get_logger, log_context
    log = get_logger("storage")
    with log_context(tutorial_id=tutorial.id):
        log.info("tutorial saved")
"""

from .manager import (
    LogCategory,
    LoggerManager,
    clear_log_context,
    get_log_context,
    get_logger,
    init_logger,
    log_context,
    logger_manager,
    set_log_context,
    shutdown_logger,
    update_log_context,
)

__all__ = [
    "LogCategory",
    "LoggerManager",
    "get_logger",
    "get_log_context",
    "set_log_context",
    "update_log_context",
    "clear_log_context",
    "log_context",
    "init_logger",
    "logger_manager",
    "shutdown_logger",
]
