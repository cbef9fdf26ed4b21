"""Logging setup shared by the API, the scripts and the tests."""
from __future__ import annotations

from logging.config import dictConfig
from pathlib import Path

from pydantic import ValidationError

from workout_log.config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_configured = False


def build_logging_config(log_dir: Path, level: str, debug: bool = False) -> dict:
    """Return the dictConfig for console plus ``<log_dir>/workout_log.log``.

    Storage failures are what users need to find later, so the
    ``workout_log.services`` loggers always reach the file at INFO or finer
    while the console keeps the configured level.
    SQL echo and per-request access lines are only kept in debug mode.
    """
    noisy_level = "INFO" if debug else "WARNING"
    storage_level = level if level in {"DEBUG", "INFO"} else "INFO"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": LOG_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "level": level,
            },
            "file": {
                "class": "logging.FileHandler",
                "filename": str(log_dir / "workout_log.log"),
                "encoding": "utf-8",
                "formatter": "standard",
                "level": "DEBUG",
            },
        },
        "loggers": {
            "workout_log.services": {
                "level": storage_level,
                "handlers": ["console", "file"],
                "propagate": False,
            },
            "sqlalchemy.engine": {"level": noisy_level},
            "uvicorn.access": {"level": noisy_level},
        },
        "root": {
            "level": level,
            "handlers": ["console", "file"],
        },
    }


def configure_logging() -> None:
    """Apply the logging config once per process."""

    global _configured
    if _configured:
        return

    try:
        settings = get_settings()
        log_dir, level, debug = settings.log_dir, settings.log_level, settings.debug
    except ValidationError:
        # A broken .env should not prevent log output about the failure.
        log_dir, level, debug = Path("logs"), "INFO", False
    log_dir.mkdir(parents=True, exist_ok=True)

    dictConfig(build_logging_config(log_dir, level, debug))
    _configured = True
