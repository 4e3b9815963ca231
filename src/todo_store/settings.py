from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    """
    Todo store settings loaded from environment variables.

    Env vars:
    - TODO_STORE_ID_STRATEGY: 'uuid4' (default) or 'sequential'
    - TODO_STORE_CLOCK: 'utc' (default, timezone-aware) or 'local' (naive local time)
    - TODO_STORE_LOG_LEVEL: logging level name used by configure_logging. Default 'INFO'
    - TODO_STORE_LOG_FORMAT: logging format string used by configure_logging
    """

    id_strategy: str
    clock: str
    log_level: str
    log_format: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return todo store settings loaded from environment variables."""
    id_strategy = _get_env("TODO_STORE_ID_STRATEGY", "uuid4").strip().lower()
    if id_strategy not in {"uuid4", "sequential"}:
        # Fallback to uuid4 if unsupported
        id_strategy = "uuid4"

    clock = _get_env("TODO_STORE_CLOCK", "utc").strip().lower()
    if clock not in {"utc", "local"}:
        clock = "utc"

    log_level = _get_env("TODO_STORE_LOG_LEVEL", "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        log_level = "INFO"

    return Settings(
        id_strategy=id_strategy,
        clock=clock,
        log_level=log_level,
        log_format=_get_env("TODO_STORE_LOG_FORMAT", DEFAULT_LOG_FORMAT),
    )


# PUBLIC_INTERFACE
def configure_logging(settings: Settings) -> None:
    """
    Configure the root logger from settings: a single stderr handler with the
    configured level and format. The library itself never calls this on import;
    applications embedding the store call it once at startup.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(settings.log_level)
    console_handler.setFormatter(logging.Formatter(settings.log_format))
    root_logger.addHandler(console_handler)
