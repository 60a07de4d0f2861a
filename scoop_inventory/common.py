"""
Common utilities shared across scoop_inventory modules.
"""

from __future__ import annotations

import os
import sys


def is_windows() -> bool:
    """
    Check if running on Windows.

    Returns:
        True on Windows hosts, False otherwise.
    """
    return sys.platform == "win32"


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log verbose message using structured logging.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose or os.environ.get("SCOOP_INVENTORY_DEBUG", "0") == "1":
        from .logging_config import get_logger
        get_logger().info(msg)
