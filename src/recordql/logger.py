"""Logging for recordql with CLI output helpers."""

import json
import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


class RecordQLLogger(logging.Logger):
    """
    Logger that combines standard logging with CLI formatting methods.

    Log records go to stderr through a RichHandler; the display methods
    (print, success, key_value, print_dict) write to stdout.
    """

    def __init__(self, name: str, level: int = logging.INFO) -> None:
        super().__init__(name, level)
        self.console = Console()

        handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_time=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        self.addHandler(handler)

    def print(self, message: str) -> None:
        """
        Print a plain message (with Rich markup support).

        Args:
            message: Message to display
        """
        self.console.print(message)

    def success(self, message: str) -> None:
        """Print a success message in green with checkmark icon."""
        self.print(f"[green]✓[/green] {message}")

    def print_dict(self, data: dict[str, Any]) -> None:
        """
        Print dictionary data as syntax highlighted JSON.

        Args:
            data: Dictionary to display
        """
        self.console.print_json(json.dumps(data, indent=2, default=str))

    def key_value(self, key: str, value: Any, key_style: str = "dim") -> None:
        """
        Print a formatted key-value pair.

        Args:
            key: The key/label to display
            value: The value to display
            key_style: Style for the key (default: "dim")
        """
        self.print(f"[{key_style}]{key}:[/{key_style}] {value}")


def get_logger(name: str = "recordql") -> RecordQLLogger:
    """
    Get or create a recordql logger instance.

    Args:
        name: Logger name (default: "recordql")

    Returns:
        RecordQLLogger instance
    """
    logger_class = logging.getLoggerClass()
    logging.setLoggerClass(RecordQLLogger)
    try:
        logger = logging.getLogger(name)
    finally:
        logging.setLoggerClass(logger_class)
    return logger  # type: ignore[return-value]
