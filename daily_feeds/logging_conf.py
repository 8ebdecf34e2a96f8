"""Logging configuration built around structlog JSON logging."""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path
from typing import Iterable

import structlog

LOG_DIR_ENV_VAR = "DAILY_FEEDS_LOG_DIR"

_LOGGING_INITIALISED = False


def default_log_dir() -> Path:
    env_dir = os.environ.get(LOG_DIR_ENV_VAR)
    if env_dir:
        return Path(env_dir).expanduser().resolve()
    return (Path.cwd() / "logs").resolve()


def configure_logging(verbose: bool = False) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers and return application logger."""

    global _LOGGING_INITIALISED
    log_dir = default_log_dir()
    (log_dir / "sources").mkdir(parents=True, exist_ok=True)

    if not _LOGGING_INITIALISED:
        level = "DEBUG" if verbose else "INFO"
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "plain": {
                        "()": "pythonjsonlogger.json.JsonFormatter",
                        "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    }
                },
                "handlers": {
                    "console": {
                        "class": "logging.StreamHandler",
                        "level": level,
                        "formatter": "plain",
                    },
                    "app_file": {
                        "class": "logging.FileHandler",
                        "level": "INFO",
                        "filename": str(log_dir / "daily_feeds.log"),
                        "formatter": "plain",
                        "encoding": "utf-8",
                    },
                    "error_file": {
                        "class": "logging.FileHandler",
                        "level": "ERROR",
                        "filename": str(log_dir / "error.log"),
                        "formatter": "plain",
                        "encoding": "utf-8",
                    },
                },
                "loggers": {
                    "daily_feeds": {
                        "handlers": ["console", "app_file", "error_file"],
                        "level": level,
                        "propagate": False,
                    },
                },
            }
        )

        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                # JSON rendering happens in the stdlib formatter
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_INITIALISED = True
    return structlog.get_logger("daily_feeds")


def source_logger(source_name: str) -> structlog.BoundLogger:
    """Return a logger bound to one source, adding its file handler once logging is set up."""

    logger_name = f"daily_feeds.source.{source_name}"
    if _LOGGING_INITIALISED:
        log_path = source_log_path(source_name)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        py_logger = logging.getLogger(logger_name)
        if not any(
            isinstance(handler, logging.FileHandler)
            and handler.baseFilename == str(log_path)
            for handler in py_logger.handlers
        ):
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            app_logger = logging.getLogger("daily_feeds")
            if app_logger.handlers:
                file_handler.setFormatter(app_logger.handlers[0].formatter)
            file_handler.setLevel(logging.INFO)
            py_logger.addHandler(file_handler)
    return structlog.get_logger(logger_name).bind(source=source_name)


def source_log_path(source_name: str) -> Path:
    stem = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in source_name) or "source"
    return default_log_dir() / "sources" / f"{stem}.log"


def tail_log(path: Path, line_count: int = 100) -> list[str]:
    """Return the last N lines from a log file."""

    if not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="ignore") as stream:
        lines = stream.readlines()
    return lines[-line_count:]


def available_source_logs() -> Iterable[Path]:
    sources_dir = default_log_dir() / "sources"
    if not sources_dir.exists():
        return []
    return sorted(p for p in sources_dir.glob("*.log"))


__all__ = [
    "LOG_DIR_ENV_VAR",
    "available_source_logs",
    "configure_logging",
    "default_log_dir",
    "source_log_path",
    "source_logger",
    "tail_log",
]
