"""Root logger setup for the command line client.

The level comes from, in order: ``CVDESK_LOG_LEVEL`` (name or number), a truthy
``CVDESK_DEBUG``, then the ``--debug`` flag or the saved ``debug_logging``
preference. Transport loggers never go below INFO.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"
LEVEL_ENV = "CVDESK_LOG_LEVEL"
DEBUG_ENV = "CVDESK_DEBUG"
_TRANSPORT_LOGGERS = ("urllib3", "requests")


def _env_level() -> Optional[int]:
    """Level forced by the environment, or ``None``."""
    raw = (os.getenv(LEVEL_ENV) or "").strip()
    if raw:
        if raw.isdigit():
            return int(raw)
        level = logging.getLevelName(raw.upper())
        if isinstance(level, int):
            return level
    if (os.getenv(DEBUG_ENV) or "").strip().lower() in {"1", "true", "yes", "on"}:
        return logging.DEBUG
    return None


def debug_forced_by_env() -> bool:
    """Whether the environment already asks for DEBUG output."""
    level = _env_level()
    return level is not None and level <= logging.DEBUG


def configure_logging(debug: bool = False) -> int:
    """Install the console handler once and set the effective root level.

    Safe to call again (e.g. after settings are loaded); only the level changes.
    """
    level = _env_level()
    if level is None:
        level = logging.DEBUG if debug else logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    root.setLevel(level)
    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))
    return level


__all__ = ["configure_logging", "debug_forced_by_env"]
