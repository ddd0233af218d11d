"""Logging setup for the netinstall loader.

Only the `netinstall` root logger carries a handler. Module loggers come from
`get_logger(__name__)`, stay at NOTSET and propagate to it, so one
`set_level` call controls the whole package.
"""

from __future__ import annotations

import logging
import sys

ROOT_LOGGER_NAME = "netinstall"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _root_logger() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not any(getattr(h, "_netinstall_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
        handler._netinstall_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
        if root.level == logging.NOTSET:
            root.setLevel(logging.INFO)
    return root


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Return the logger for `name`, making sure the package handler exists.

    Names outside the `netinstall` namespace are placed under it so their
    records reach the package handler.
    """

    root = _root_logger()
    if name == ROOT_LOGGER_NAME:
        return root
    if not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def set_level(level: str) -> None:
    """Set the level for every `netinstall` logger, e.g. "DEBUG"."""

    _root_logger().setLevel(level.upper())
