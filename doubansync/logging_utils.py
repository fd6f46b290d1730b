"""
Structured JSON event logging for the scheduler, the transform pipeline and scripts.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

LOG_LEVEL_ENV = "DOUBAN_SYNC_LOG_LEVEL"


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit ``{"event": event, **fields}`` as one sorted JSON line.

    Chinese titles and labels are written as-is rather than escaped.
    """

    if not logger.isEnabledFor(level):
        return
    logger.log(level, json.dumps({"event": event, **fields}, default=str, ensure_ascii=False, sort_keys=True))


def configure_script_logging(default_level: str = "WARNING") -> int:
    """
    Configure root logging for a command-line entry point from ``DOUBAN_SYNC_LOG_LEVEL``.

    Returns the resolved numeric level; unknown level names fall back to ``default_level``.
    """

    name = (os.getenv(LOG_LEVEL_ENV) or default_level).strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        level = logging.getLevelName(default_level.upper())
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    return level
