"""Unified logging system for rolefilter with CLI output support."""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


class RoleFilterLogger(logging.Logger):
    """
    Enhanced logger that combines Python logging with CLI formatting methods.

    Provides both standard logging levels (debug, info, warning, error, critical)
    and semantic CLI output methods (success, rule, key_value, etc.).
    """

    def __init__(self, name: str, level: int = logging.INFO) -> None:
        """
        Initialize the rolefilter logger.

        Args:
            name: Logger name
            level: Initial log level
        """
        super().__init__(name, level)
        self.console = Console()

        handler = RichHandler(
            console=self.console,
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

    def colored(self, message: str, style: str = "bold cyan") -> None:
        """
        Print a message with a specific style/color.

        Args:
            message: Message to display
            style: Rich style string (e.g., "green", "red", "bold cyan", "dim")
        """
        self.print(f"[{style}]{message}[/{style}]")

    def success(self, message: str) -> None:
        """
        Print a success message in green with checkmark icon.

        Args:
            message: Message to display
        """
        self.print(f"[green]✓[/green] {message}")

    def rule(self, title: str, style: str = "bold blue") -> None:
        """
        Print a horizontal rule with a title.

        Args:
            title: Title text for the rule
            style: Rich style string (default: "bold blue")
        """
        self.console.rule(f"[{style}]{title}")

    def key_value(self, key: str, value: Any, key_style: str = "dim") -> None:
        """
        Print a formatted key-value pair.

        Args:
            key: The key/label to display
            value: The value to display
            key_style: Style for the key (default: "dim")
        """
        self.print(f"[{key_style}]{key}:[/{key_style}] {value}")

    def list_item(self, text: str, prefix: str = "-", style: str = "") -> None:
        """
        Print a list item with optional styling.

        Args:
            text: Text to display
            prefix: Prefix character (default: "-")
            style: Optional style for the entire item
        """
        if style:
            self.colored(f"{prefix} {text}", style)
        else:
            self.print(f"{prefix} {text}")


def get_logger(name: str = "rolefilter") -> RoleFilterLogger:
    """
    Get or create a rolefilter logger instance.

    The logger class is swapped only for the duration of the lookup so that
    loggers created later by other libraries keep the default class.

    Args:
        name: Logger name (default: "rolefilter")

    Returns:
        RoleFilterLogger instance
    """
    previous_class = logging.getLoggerClass()
    logging.setLoggerClass(RoleFilterLogger)
    try:
        logger = logging.getLogger(name)
    finally:
        logging.setLoggerClass(previous_class)

    return logger  # type: ignore[return-value]
