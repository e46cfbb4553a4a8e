"""
Logging setup for the wpquery package, driven by Settings.

The package itself only ever calls ``logging.getLogger(__name__)``; applications
that embed it call :func:`setup_logging` once at startup.
"""

from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any

from .config import Settings, get_settings

_LOGGING_CONFIGURED = False


def _resolve_log_level(level_name: str) -> int:
    """Return a logging level constant from a case-insensitive string."""

    numeric_level = logging.getLevelName(level_name.upper())
    if isinstance(numeric_level, int):
        return numeric_level
    raise ValueError(f"Unsupported log level: {level_name}")


def _build_logging_config(settings: Settings, *, to_file: bool) -> dict[str, Any]:
    """Construct a dictConfig payload for console and (optionally) file output."""

    log_settings = settings.logging
    level = _resolve_log_level(log_settings.level)

    handlers: dict[str, dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "standard",
        },
    }
    if to_file:
        log_settings.directory.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "standard",
            "filename": str(log_settings.directory / log_settings.file_name),
            "encoding": "utf-8",
            "maxBytes": log_settings.max_bytes,
            "backupCount": log_settings.backup_count,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"standard": {"format": log_settings.format}},
        "handlers": handlers,
        "loggers": {
            # SQL statements are only interesting when explicitly asked for.
            "sqlalchemy.engine": {
                "level": logging.INFO if settings.database.echo else logging.WARNING,
            },
        },
        "root": {"level": level, "handlers": list(handlers)},
    }


def setup_logging(settings: Settings | None = None, *, to_file: bool = True) -> logging.Logger:
    """
    Configure the global logging stack and return the package logger.

    Idempotent: the dictConfig is applied on the first call only.
    """

    global _LOGGING_CONFIGURED

    runtime_settings = settings or get_settings()

    if not _LOGGING_CONFIGURED:
        dictConfig(_build_logging_config(runtime_settings, to_file=to_file))
        _LOGGING_CONFIGURED = True

    logger = logging.getLogger("wpquery")
    logger.setLevel(_resolve_log_level(runtime_settings.logging.level))
    return logger


__all__ = ["setup_logging"]
