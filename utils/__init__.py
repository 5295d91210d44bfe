"""Shared utilities for the Personal Assistant client"""

from .storage import OriginStorage, origin_slug
from .debug_console import (
    DebugCapturingConsole,
    create_debug_console,
    setup_debug_logger,
)

__all__ = [
    "OriginStorage",
    "origin_slug",
    "DebugCapturingConsole",
    "create_debug_console",
    "setup_debug_logger",
]
