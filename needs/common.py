"""
Common utilities shared across needs modules.
"""

from __future__ import annotations

import os


def debug_enabled() -> bool:
    """Check if NEEDS_DEBUG forces verbose logging."""
    return os.environ.get("NEEDS_DEBUG", "0") == "1"


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log a verbose message through the "needs" logger.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose or debug_enabled():
        from .logging_config import get_logger
        get_logger().debug(msg)
