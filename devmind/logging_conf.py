"""structlog on top of stdlib logging, every handler emitting JSON lines."""

from __future__ import annotations

import logging.config
from pathlib import Path
from typing import Any

import structlog

from .config.loader import resolve_home

APP_LOG = "devmind.log"
ERROR_LOG = "error.log"
_MAX_LOG_BYTES = 2 * 1024 * 1024

_configured = False


def default_log_dir() -> Path:
    return resolve_home() / "logs"


def _file_handler(path: Path, level: str) -> dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "filename": str(path),
        "maxBytes": _MAX_LOG_BYTES,
        "backupCount": 3,
        "formatter": "json",
        "encoding": "utf-8",
    }


def _dict_config(log_dir: Path, level: str) -> dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
            }
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "level": level, "formatter": "json"},
            "app_file": _file_handler(log_dir / APP_LOG, "INFO"),
            "error_file": _file_handler(log_dir / ERROR_LOG, "ERROR"),
        },
        "loggers": {
            "devmind": {
                "handlers": ["console", "app_file", "error_file"],
                "level": level,
                "propagate": False,
            },
        },
    }


def configure_logging(verbose: bool = False) -> structlog.stdlib.BoundLogger:
    """Set up handlers once per process and return the ``devmind`` logger."""

    global _configured
    if not _configured:
        log_dir = default_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        logging.config.dictConfig(_dict_config(log_dir, "DEBUG" if verbose else "INFO"))
        # Event dicts reach the JSON formatter as LogRecord extras
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.stdlib.filter_by_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.render_to_log_kwargs,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        _configured = True
    return structlog.get_logger("devmind")


def log_file(errors: bool = False) -> Path:
    return default_log_dir() / (ERROR_LOG if errors else APP_LOG)


def tail_log(path: Path, line_count: int = 100) -> list[str]:
    """Last ``line_count`` lines of ``path``; empty when the file does not exist yet."""

    if not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="ignore") as stream:
        lines = stream.readlines()
    return lines[-line_count:]


__all__ = ["APP_LOG", "ERROR_LOG", "configure_logging", "default_log_dir", "log_file", "tail_log"]
