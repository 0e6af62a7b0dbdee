"""Logging configuration for the AuroraInvest engine."""

import functools
import logging
import os
import sys


@functools.lru_cache(maxsize=1)
def _configured_level() -> str:
    env_level = os.getenv("AURORA_LOG_LEVEL")
    if env_level:
        return env_level
    from aurora.config import load_settings

    return load_settings().get("app", {}).get("log_level", "INFO")


def setup_logger(name: str = "aurora", level: str | None = None) -> logging.Logger:
    """Create and configure a logger under the ``aurora`` namespace."""
    qualified = name if name.startswith("aurora") else f"aurora.{name}"
    logger = logging.getLogger(qualified)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        fmt = logging.Formatter(
            "%(asctime)s | %(name)-20s | %(levelname)-7s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(fmt)
        logger.addHandler(handler)
    level = level or _configured_level()
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    return logger
