"""Rich console that mirrors what it prints into the debug log.

Terminal output keeps its formatting; the log receives the plain text.
"""

import logging
from typing import Optional

from rich.console import Console as RichConsole


class DebugCapturingConsole(RichConsole):
    """Rich Console that records each print and forwards it to a logger"""

    def __init__(self, debug_logger: logging.Logger, *args, **kwargs):
        """
        Args:
            debug_logger: Logger that receives the plain-text copy
            *args, **kwargs: Arguments passed to Rich Console
        """
        kwargs["record"] = True
        super().__init__(*args, **kwargs)
        self.debug_logger = debug_logger
        self._log_prefix = "[CONSOLE] "

    def print(self, *objects, **kwargs):
        super().print(*objects, **kwargs)

        # export_text(clear=True) drains the record buffer even when logging is off
        plain_text = self.export_text(clear=True, styles=False).rstrip()
        if plain_text and self.debug_logger.isEnabledFor(logging.DEBUG):
            self.debug_logger.debug(f"{self._log_prefix}{plain_text}")


def create_debug_console(debug_enabled: bool = False,
                         debug_logger: Optional[logging.Logger] = None) -> RichConsole:
    """
    Create the console for the current mode.

    Returns:
        DebugCapturingConsole if debug is enabled and a logger is given, regular Console otherwise
    """
    if debug_enabled and debug_logger:
        return DebugCapturingConsole(debug_logger)
    return RichConsole()


def setup_debug_logger(log_file: str) -> logging.Logger:
    """
    Logger that appends console captures to ``log_file``.

    Args:
        log_file: Path to debug log file

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger("debug_console")
    logger.setLevel(logging.DEBUG)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
    logger.addHandler(file_handler)

    # Prevent propagation to avoid duplicate logs
    logger.propagate = False

    return logger
