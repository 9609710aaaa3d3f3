"""Utility modules for the Policy Assistant."""

from .logger import get_logger, set_global_level

__all__ = ["get_logger", "set_global_level"]
