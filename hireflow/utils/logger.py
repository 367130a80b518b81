"""
Logging infrastructure for hireflow.

Uses Loguru with a colored console sink, a rotating file sink and a
separate audit sink for candidate persistence events.
"""

import sys
from typing import Any

from loguru import logger

from hireflow.utils.config import get_settings

SENSITIVE_KEYS = frozenset({
    "password", "passwd", "pwd", "secret", "token", "api_key",
    "apikey", "auth", "authorization", "credential", "private_key",
    "access_token", "refresh_token",
})


def setup_logging() -> None:
    """
    Configure application-wide logging.

    Console output is colored; file output rotates and is compressed.
    Records bound with ``audit_type`` are additionally written to
    ``audit.log`` next to the main log file.
    """
    settings = get_settings()
    log_settings = settings.logging

    logger.remove()

    # diagnose=True can leak variable values (tokens, resume text) into traces
    enable_diagnose = settings.debug and settings.environment == "development"

    if log_settings.console_output:
        logger.add(
            sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>",
            level=log_settings.level,
            colorize=True,
            backtrace=True,
            diagnose=enable_diagnose,
        )

    if not log_settings.file_output:
        logger.info(f"Logging initialized - Level: {log_settings.level}")
        return

    log_file = log_settings.file_path
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
        log_file.parent / "audit.log",
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[audit_type]} | {message}",
        level="INFO",
        filter=lambda record: "audit_type" in record["extra"],
        rotation="1 week",
        retention="1 year",
        compression="zip",
        enqueue=True,
    )

    logger.info(f"Logging initialized - Level: {log_settings.level}")


def get_logger(name: str) -> Any:
    """
    Get a logger instance with the specified name.

    Args:
        name: The name for the logger (typically __name__)

    Returns:
        A configured logger instance
    """
    return logger.bind(name=name)


def sanitize_for_logging(data: Any) -> Any:
    """Redact sensitive fields from dicts (recursively) before logging."""
    if isinstance(data, dict):
        return {
            k: "***REDACTED***"
            if any(s in str(k).lower() for s in SENSITIVE_KEYS)
            else sanitize_for_logging(v)
            for k, v in data.items()
        }
    elif isinstance(data, list):
        return [sanitize_for_logging(item) for item in data]
    return data


def audit_log(
    action: str,
    details: dict[str, Any],
    audit_type: str = "PIPELINE",
) -> None:
    """
    Log an audit entry.

    Args:
        action: The action being audited (e.g., "candidate_persisted")
        details: Dictionary of relevant details
        audit_type: Type of audit entry (PIPELINE, BATCH, PROXY)
    """
    logger.bind(audit_type=audit_type).info(f"{action} | {sanitize_for_logging(details)}")


class LoggerMixin:
    """
    Mixin class to add logging capability to any class.

    Usage:
        class ResumeUploadPipeline(LoggerMixin):
            async def process(self, task):
                self.logger.info("Uploading...")
    """

    @property
    def logger(self) -> Any:
        """Get a logger instance for this class."""
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger


log = logger
