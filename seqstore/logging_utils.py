"""Logging helpers for seqstore."""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_LEVEL = logging.INFO
ENV_LOG_LEVEL = "SEQSTORE_LOG_LEVEL"
ROOT_LOGGER = "seqstore"


def resolve_log_level(verbose: bool = False, env_value: str | None = None) -> int:
    """Pick the log level: ``--verbose`` wins, then the environment, then INFO.

    Unknown level names fall back to the default.
    """

    if verbose:
        return logging.DEBUG
    if not env_value:
        return DEFAULT_LOG_LEVEL
    level = logging.getLevelName(env_value.strip().upper())
    return level if isinstance(level, int) else DEFAULT_LOG_LEVEL


def configure_logging(verbose: bool = False) -> None:
    """Configure logging for CLI entrypoints.

    Only the ``seqstore`` logger tree gets the resolved level, so debug output
    from splices does not pull in chatter from third-party libraries.
    """

    level = resolve_log_level(verbose, os.getenv(ENV_LOG_LEVEL))
    logging.basicConfig(
        level=DEFAULT_LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger(ROOT_LOGGER).setLevel(level)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger inside the ``seqstore`` tree."""

    if not name:
        return logging.getLogger(ROOT_LOGGER)
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "resolve_log_level"]
