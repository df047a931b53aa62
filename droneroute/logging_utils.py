"""Mini README: Logging helpers for the droneroute logger tree.

Structure:
    * PACKAGE_LOGGER - name of the parent logger every module logs under.
    * configure_logging - install the package handler once and set its level.
    * get_logger - module logger factory; names outside the package are
      nested under ``droneroute`` so they share the handler.

Usage:
    Modules keep ``LOGGER = get_logger(__name__)``. The handler sits on the
    ``droneroute`` logger rather than the root logger, so embedding
    applications (uvicorn, pytest) keep control of their own output while
    records still propagate upwards. The CLI calls ``configure_logging`` with
    the configured ``log_level`` before any work starts.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

PACKAGE_LOGGER = "droneroute"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"

_HANDLER: Optional[logging.Handler] = None


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """Attach the package handler (first call only) and apply ``level``."""

    global _HANDLER
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(_resolve_level(level))
    if _HANDLER is None:
        _HANDLER = logging.StreamHandler()
        _HANDLER.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        package_logger.addHandler(_HANDLER)
    return package_logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger inside the ``droneroute`` tree."""

    if _HANDLER is None:
        configure_logging()
    if not name or name == PACKAGE_LOGGER:
        return logging.getLogger(PACKAGE_LOGGER)
    if not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
