"""Helpers for configuring consistent project logging output."""

from __future__ import annotations

import logging
import os
from typing import Optional

LOG_LEVEL_ENV = "LYRIC_PIC_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_CONFIGURED = False


def _resolve_level(level: str | int | None) -> int:
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    try:
        return int(level)
    except (TypeError, ValueError):
        normalized = str(level).strip().upper()
        return getattr(logging, normalized, logging.INFO)


def configure_logging(level: Optional[str | int] = None, *, force: bool = False) -> int:
    """Initialise root logging handlers for batch scripts.

    An explicit ``level`` wins over ``LYRIC_PIC_LOG_LEVEL``. Returns the level
    that was applied.
    """

    global _CONFIGURED

    resolved_level = _resolve_level(level if level is not None else os.environ.get(LOG_LEVEL_ENV))
    if _CONFIGURED and not force:
        return resolved_level

    logging.basicConfig(level=resolved_level, format=_DEFAULT_FORMAT, force=force)
    logging.getLogger("lyric_pic").setLevel(resolved_level)
    logging.getLogger("gameplay").setLevel(resolved_level)
    _CONFIGURED = True
    return resolved_level


__all__ = ["LOG_LEVEL_ENV", "configure_logging"]
