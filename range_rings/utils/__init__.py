"""Utility components for range rings."""

from range_rings.utils.logging import setup_logging, get_logger
from range_rings.utils.color import parse_color, normalize_color

__all__ = [
    "setup_logging",
    "get_logger",
    "parse_color",
    "normalize_color",
]
