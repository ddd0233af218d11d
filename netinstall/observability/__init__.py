"""Observability helpers (logging)."""

from netinstall.observability.logger import get_logger, set_level

__all__ = ["get_logger", "set_level"]
