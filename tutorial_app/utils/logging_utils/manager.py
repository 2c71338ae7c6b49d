from __future__ import annotations

import json
import logging
import os
import tempfile
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, current_app


# Attributes every LogRecord carries; anything else was passed through ``extra``.
_RESERVED_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime", "taskName"}

_log_context: ContextVar[Dict[str, Any]] = ContextVar("tutorial_log_context", default={})


def _current_flask_app() -> Optional[Flask]:
    try:
        return current_app._get_current_object()  # type: ignore[attr-defined]
    except RuntimeError:
        return None


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields attached to every log line in this context."""

    return dict(_log_context.get())


def set_log_context(context: Dict[str, Any]) -> None:
    _log_context.set(dict(context or {}))


def update_log_context(**fields: Any) -> None:
    """Merge fields into the active context; a ``None`` value removes the key."""

    merged = dict(_log_context.get())
    for key, value in fields.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    _log_context.set(merged)


def clear_log_context(*keys: str) -> None:
    if not keys:
        _log_context.set({})
        return
    remaining = {k: v for k, v in _log_context.get().items() if k not in keys}
    _log_context.set(remaining)


@contextmanager
def log_context(**fields: Any):
    """Attach ``fields`` to every log line emitted inside the ``with`` block."""

    scoped = dict(_log_context.get())
    scoped.update({key: value for key, value in fields.items() if value is not None})
    token = _log_context.set(scoped)
    try:
        yield
    finally:
        _log_context.reset(token)


class ContextAwareFormatter(logging.Formatter):
    """Render records as text or JSON, appending the active log context."""

    def __init__(
        self,
        fmt: Optional[str] = None,
        datefmt: Optional[str] = None,
        *,
        json_format: bool = False,
        static_fields: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(fmt=fmt or "[%(asctime)s] %(levelname)s %(name)s - %(message)s", datefmt=datefmt)
        self.json_format = json_format
        self.static_fields = dict(static_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        if self.json_format:
            return self._as_json(record)

        line = super().format(record)
        context = _log_context.get()
        if context:
            line += " | " + " ".join(f"{key}={context[key]}" for key in sorted(context))
        return line

    def _as_json(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **self.static_fields,
        }
        for key, value in vars(record).items():
            if key in _RESERVED_RECORD_ATTRS or key.startswith("_") or key in payload:
                continue
            payload[key] = value

        context = _log_context.get()
        if context:
            payload["context"] = dict(context)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, separators=(",", ":"))


@dataclass(frozen=True)
class LogCategory:
    """A named logger and the file it writes to."""

    name: str
    filename: str


DEFAULT_CATEGORIES: Dict[str, LogCategory] = {
    "app": LogCategory("app", "application.log"),
    "route": LogCategory("route", "route.log"),
    "storage": LogCategory("storage", "storage.log"),
    "error": LogCategory("error", "errors.log"),
}


class LoggerManager:
    """
    Hands out one ``logging.Logger`` per category.  Each logger writes to its
    own daily-rotated file under ``base_dir``, optionally echoes to the
    console, and reuses the Flask app's handlers so everything also lands in
    the main application log.
    """

    def __init__(
        self,
        *,
        base_dir: Optional[str] = None,
        rotation_when: str = "midnight",
        backup_count: int = 7,
        categories: Optional[Dict[str, LogCategory]] = None,
        default_level: int = logging.INFO,
        enable_console: bool = True,
        json_format: bool = False,
        static_fields: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._base_dir = base_dir
        self._rotation_when = rotation_when
        self._backup_count = backup_count
        self._categories = dict(categories or DEFAULT_CATEGORIES)
        self._default_level = default_level
        self._enable_console = enable_console
        self._json_format = json_format
        self._static_fields = dict(static_fields or {})
        self._loggers: Dict[str, logging.Logger] = {}
        self._console_handler: Optional[logging.Handler] = None

    @property
    def base_dir(self) -> Path:
        if self._base_dir:
            return Path(self._base_dir)
        app = _current_flask_app()
        if app and app.config.get("LOGGING_BASE_DIR"):
            return Path(app.config["LOGGING_BASE_DIR"])
        return Path(os.getenv("LOGGING_BASE_DIR", os.path.join(tempfile.gettempdir(), "tutorial_portal_logs")))

    def register_category(self, name: str, filename: Optional[str] = None) -> LogCategory:
        key = name.strip().lower()
        category = LogCategory(key, filename or f"{key}.log")
        if key in self._categories and self._categories[key] != category:
            self._detach_logger(key)
        self._categories[key] = category
        return category

    def get_logger(self, category: str) -> logging.Logger:
        key = category.strip().lower()
        cached = self._loggers.get(key)
        if cached is not None:
            return cached

        entry = self._categories.get(key) or self.register_category(key)
        logger = logging.getLogger(f"tutorial_app.{entry.name}")
        logger.propagate = False
        logger.setLevel(self._default_level)

        self.base_dir.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            self.base_dir / entry.filename,
            when=self._rotation_when,
            backupCount=self._backup_count,
            encoding="utf-8",
            utc=True,
        )
        file_handler.setFormatter(self._formatter())
        logger.addHandler(file_handler)

        if self._enable_console:
            logger.addHandler(self._shared_console_handler())

        app = _current_flask_app()
        if app is not None:
            for handler in app.logger.handlers:
                if handler not in logger.handlers:
                    logger.addHandler(handler)

        self._loggers[key] = logger
        return logger

    def shutdown(self) -> None:
        for key in list(self._loggers):
            self._detach_logger(key)
        if self._console_handler is not None:
            self._console_handler.close()
            self._console_handler = None

    def _formatter(self) -> ContextAwareFormatter:
        return ContextAwareFormatter(json_format=self._json_format, static_fields=self._static_fields)

    def _shared_console_handler(self) -> logging.Handler:
        if self._console_handler is None:
            self._console_handler = logging.StreamHandler()
            self._console_handler.setFormatter(self._formatter())
        return self._console_handler

    def _detach_logger(self, key: str) -> None:
        logger = self._loggers.pop(key, None)
        if logger is None:
            return
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            # the console and app handlers are shared; only our own file handler is ours to close
            if isinstance(handler, TimedRotatingFileHandler):
                handler.close()


def _to_int(value: Optional[Any], *, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _to_bool(value: Optional[Any], *, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return bool(value)


def _to_level(value: Optional[Any], *, default: int = logging.INFO) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        level = logging.getLevelName(value.strip().upper())
        if isinstance(level, int):
            return level
    return default


_manager: Optional[LoggerManager] = None


def init_logger(app: Flask) -> LoggerManager:
    """Rebuild the shared manager from the Flask app's ``LOGGING_*`` settings."""

    global _manager

    manager = LoggerManager(
        base_dir=app.config.get("LOGGING_BASE_DIR"),
        rotation_when=app.config.get("LOGGING_ROTATION_WHEN", "midnight"),
        backup_count=_to_int(app.config.get("LOGGING_ROTATION_BACKUP_COUNT"), default=7),
        default_level=_to_level(app.config.get("LOGGING_DEFAULT_LEVEL")),
        enable_console=_to_bool(app.config.get("LOGGING_CONSOLE_ENABLED"), default=True),
        json_format=_to_bool(app.config.get("LOGGING_JSON_FORMAT")),
        static_fields={"app": app.config.get("APP_NAME"), "env": app.config.get("MY_ENVIRONMENT")},
    )

    shutdown_logger()
    _manager = manager
    return _manager


def logger_manager() -> LoggerManager:
    global _manager
    if _manager is None:
        _manager = LoggerManager(
            default_level=_to_level(os.getenv("LOGGING_DEFAULT_LEVEL")),
            enable_console=_to_bool(os.getenv("LOGGING_CONSOLE_ENABLED"), default=True),
            json_format=_to_bool(os.getenv("LOGGING_JSON_FORMAT")),
        )
    return _manager


def shutdown_logger() -> None:
    global _manager
    if _manager is None:
        return
    _manager.shutdown()
    _manager = None


def get_logger(category: str) -> logging.Logger:
    return logger_manager().get_logger(category)
