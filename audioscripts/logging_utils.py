"""Process-wide logging for the command-line tools.

Messages carry the file they are about in their text; the same values are
also attached as ``extra`` fields for handlers that render them.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LEVEL_ENV_VARS = ("AUDIOSCRIPTS_LOG_LEVEL", "LOG_LEVEL")

_CONFIGURED = False


def level_from_name(name: Optional[str], default: int = logging.INFO) -> int:
    """Map ``"debug"``/``"WARNING"``/... to a logging level; unknown names give ``default``."""
    if not name:
        return default
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else default


def _level_from_env() -> Optional[str]:
    for var in LEVEL_ENV_VARS:
        value = os.getenv(var)
        if value:
            return value
    return None


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging.

    The first call installs the handler (level from ``level``, then the
    environment, then INFO). Modules call this at import time, so a later
    call with an explicit ``level`` (a CLI ``--log_level``) only adjusts
    the root level.
    """
    global _CONFIGURED
    if _CONFIGURED:
        if level:
            logging.getLogger().setLevel(level_from_name(level))
        return

    logging.basicConfig(level=level_from_name(level or _level_from_env()), format=LOG_FORMAT)
    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)
