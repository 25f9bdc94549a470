# core/config.py

"""
Configuration for the gradebook services, read from environment variables.

Variables:
    GRADEBOOK_NOTIFICATION_TTI_SECONDS: idle seconds before an editing notification expires (default 10).
    GRADEBOOK_NOTIFICATION_MAX_ENTRIES: ceiling on cached gradebooks, unset or 0 for unbounded.
    GRADEBOOK_LOG_LEVEL: level applied by `configure_logging()` (default WARNING).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class GradebookConfig:
    notification_time_to_idle: float = 10.0
    notification_max_entries: int | None = None
    log_level: str = "WARNING"


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got: {raw!r}")
    if value <= 0 or value > 3600:
        raise ValueError(f"{name} out of range (0..3600], got: {value}")
    return value


def _optional_int_env(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw!r}")
    if value < 0:
        raise ValueError(f"{name} cannot be negative, got: {value}")
    return value or None


def load_gradebook_config() -> GradebookConfig:
    """
    Parse and validate gradebook configuration from environment variables.

    Raises:
        ValueError: If a variable is set but malformed or out of range.
    """
    log_level = (os.getenv("GRADEBOOK_LOG_LEVEL") or "WARNING").strip().upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(f"GRADEBOOK_LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}")

    return GradebookConfig(
        notification_time_to_idle=_float_env("GRADEBOOK_NOTIFICATION_TTI_SECONDS", 10.0),
        notification_max_entries=_optional_int_env("GRADEBOOK_NOTIFICATION_MAX_ENTRIES"),
        log_level=log_level,
    )


def configure_logging(config: GradebookConfig) -> None:
    """Apply the configured level to the loggers of the service modules."""
    for name in ("core", "models"):
        logging.getLogger(name).setLevel(config.log_level)
