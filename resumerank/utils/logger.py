"""
Logging infrastructure for ResumeRank.

Uses Loguru for console and file logging with automatic rotation,
plus a dedicated activity sink mirroring the activity log collection.
"""

import sys
from pathlib import Path
from typing import Any

from loguru import logger

from resumerank.utils.config import AppSettings, LoggingSettings, get_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
ACTIVITY_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {extra[audit_type]} | {message}"

REDACTED = "***REDACTED***"

# Credentials, plus candidate contact details that must not reach log files
SENSITIVE_KEYS = frozenset(
    {
        "password", "secret", "token", "api_key", "apikey", "x-goog-api-key",
        "auth", "credential", "private_key", "email", "phone",
    }
)


def setup_logging(app_settings: AppSettings | None = None) -> None:
    """
    Configure application-wide logging.

    The console sink is always installed when enabled. File and activity
    sinks are skipped in the testing environment.
    """
    settings = app_settings or get_settings()
    log_settings = settings.logging

    logger.remove()

    # diagnose prints local variables, which may hold resume bytes or keys
    enable_diagnose = settings.debug and settings.environment == "development"

    if log_settings.console_output:
        logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            level=log_settings.level,
            colorize=True,
            backtrace=True,
            diagnose=enable_diagnose,
        )

    if settings.environment == "testing":
        return

    _add_file_sinks(log_settings, enable_diagnose)
    logger.info(f"Logging initialized - Level: {log_settings.level}")


def _add_file_sinks(log_settings: LoggingSettings, enable_diagnose: bool) -> None:
    log_file: Path = log_settings.file_path
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_file,
        format=log_settings.format,
        level=log_settings.level,
        rotation=log_settings.rotation,
        retention=log_settings.retention,
        compression="zip",
        backtrace=True,
        diagnose=enable_diagnose,
        enqueue=True,
    )

    logger.add(
        log_file.parent / "activity.log",
        format=ACTIVITY_FORMAT,
        level="INFO",
        filter=lambda record: "audit_type" in record["extra"],
        rotation="1 week",
        retention="1 year",
        compression="zip",
        enqueue=True,
    )


def get_logger(name: str) -> Any:
    """
    Get a logger instance with the specified name.

    Args:
        name: The name for the logger (typically __name__)
    """
    return logger.bind(name=name)


def sanitize_for_logging(data: Any) -> Any:
    """Replace values of sensitive keys, recursively, before they are logged."""
    if isinstance(data, dict):
        return {
            k: REDACTED
            if any(s in str(k).lower() for s in SENSITIVE_KEYS)
            else sanitize_for_logging(v)
            for k, v in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [sanitize_for_logging(item) for item in data]
    return data


def audit_log(
    action: str,
    details: dict[str, Any],
    audit_type: str = "ACTIVITY",
) -> None:
    """
    Write an entry to the activity log sink.

    Args:
        action: The action being recorded (e.g., "AI_ANALYSIS_COMPLETED")
        details: Dictionary of relevant details
        audit_type: Type of entry (ACTIVITY, ACCESS)
    """
    logger.bind(audit_type=audit_type).info(f"{action} | {sanitize_for_logging(details)}")


class LoggerMixin:
    """Adds a ``logger`` property bound to the class name."""

    @property
    def logger(self) -> Any:
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger
