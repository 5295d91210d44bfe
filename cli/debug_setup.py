"""Logging and console setup for the CLI"""

import logging
import os
from typing import Optional

from rich.console import Console

from utils.debug_console import create_debug_console, setup_debug_logger

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level_name: str, debug: bool = False, log_file: str = "assistant_debug.log") -> Optional[logging.Logger]:
    """
    Configure the root logger.

    Without debug, records at ``level_name`` and above go to stderr. With
    debug, everything is appended to ``log_file`` and console output is
    captured there as well.

    Args:
        level_name: Log level name such as "info" or "warning"
        debug: Whether debug mode is enabled
        log_file: Debug log path

    Returns:
        Logger for console captures in debug mode, None otherwise
    """
    root_logger = logging.getLogger()

    # Clear existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(_FORMAT)

    if not debug:
        level = logging.getLevelName(level_name.upper())
        root_logger.setLevel(level if isinstance(level, int) else logging.INFO)
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)
        # httpx logs every request at INFO
        logging.getLogger("httpx").setLevel(logging.WARNING)
        return None

    root_logger.setLevel(logging.DEBUG)

    log_path = os.path.abspath(log_file)
    file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    debug_logger = setup_debug_logger(log_path)
    logging.getLogger(__name__).info(f"Debug logging enabled - appending to {log_path}")
    return debug_logger


def setup_debug_console(debug: bool, debug_logger: Optional[logging.Logger]) -> Console:
    """
    Console for the CLI, mirrored into the debug log when debug is on.

    Args:
        debug: Whether debug mode is enabled
        debug_logger: Logger returned by setup_logging

    Returns:
        Console instance (either regular or debug-enabled)
    """
    console = create_debug_console(debug_enabled=debug, debug_logger=debug_logger)
    if debug and debug_logger:
        debug_logger.debug("[CLI] ===== CLI SESSION STARTED =====")
    return console
