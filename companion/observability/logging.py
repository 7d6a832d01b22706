"""Logger factory shared by every companion module."""

from __future__ import annotations

import logging
import os
from typing import Final

_HANDLER_ATTACHED: bool = False
_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATEFMT: Final[str] = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level_name: str | None = None) -> int:
    level_name = (level_name or os.getenv("COMPANION_LOG_LEVEL", "INFO")).upper()
    return getattr(logging, level_name, logging.INFO)


def _attach_root_handler(level: int) -> None:
    global _HANDLER_ATTACHED

    root = logging.getLogger()
    if not _HANDLER_ATTACHED:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
        root.addHandler(handler)
        _HANDLER_ATTACHED = True
    root.setLevel(level)


def configure_logging(level_name: str | None = None) -> int:
    """Attach the stream handler and set the root level.

    Called by the API entry point so uvicorn and companion loggers share
    one handler. Returns the numeric level applied.
    """
    level = _resolve_level(level_name)
    _attach_root_handler(level)
    return level


def get_logger(name: str) -> logging.Logger:
    """Return a module logger configured with a single stream handler."""
    level = _resolve_level()
    _attach_root_handler(level)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger
