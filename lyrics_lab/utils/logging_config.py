"""Helpers for configuring consistent project logging output."""

from __future__ import annotations

import logging
import os
from typing import Optional

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_LEVEL_ENV_VAR = "LYRICS_LAB_LOG_LEVEL"
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


def configure_logging(level: Optional[str | int] = None, *, force: bool = False) -> None:
    """Initialise root logging handlers for the application.

    The level comes from ``level`` when given, otherwise from the
    ``LYRICS_LAB_LOG_LEVEL`` environment variable, and defaults to ``INFO`` so
    library imports and statistics runs show up in the console of the UI
    process.
    """

    global _CONFIGURED

    if _CONFIGURED and not force:
        return

    env_level = os.environ.get(_LEVEL_ENV_VAR)
    resolved_level = _resolve_level(level if level is not None else env_level)

    logging.basicConfig(level=resolved_level, format=_DEFAULT_FORMAT, force=force)
    logging.getLogger("lyrics_lab").setLevel(resolved_level)
    _CONFIGURED = True


__all__ = ["configure_logging"]
