"""Logging utilities for Gatherer sessions.

Provides color-coded output to distinguish game-engine updates from expert bot decisions.
"""

import os
from enum import Enum


class Color(Enum):
    """ANSI color codes for terminal output."""

    # Colors for operation types
    BLUE = "\033[94m"      # Deterministic operations (rules, map generation)
    YELLOW = "\033[93m"    # Expert bot decisions
    RED = "\033[91m"       # Errors, aborts and retries
    GREEN = "\033[92m"     # Success/completion
    CYAN = "\033[96m"      # Info/metadata

    # Formatting
    BOLD = "\033[1m"
    RESET = "\033[0m"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes if colors are enabled.

    Args:
        text: Text to colorize
        color: Color to apply
        bold: Whether to make text bold

    Returns:
        Colorized text if GATHERER_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("GATHERER_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


# Markers for operation types (color-blind accessible)
LOG_TAG_DETERMINISTIC = "[•]"  # Rules / generator
LOG_TAG_BOT = "[BOT]"          # Expert bot decision
LOG_TAG_ERROR = "[!]"          # Error/abort
LOG_TAG_SUCCESS = "[✓]"        # Success
LOG_TAG_INFO = "[i]"           # Information


def log_deterministic(message: str) -> None:
    """Log a deterministic operation (blue)."""
    print(colored(f"{LOG_TAG_DETERMINISTIC} {message}", Color.BLUE))


def log_bot(message: str) -> None:
    """Log an expert bot decision (yellow)."""
    print(colored(f"{LOG_TAG_BOT} {message}", Color.YELLOW))


def log_error(message: str) -> None:
    """Log an error or abort (red)."""
    print(colored(f"{LOG_TAG_ERROR} {message}", Color.RED))


def log_success(message: str) -> None:
    """Log a success (green)."""
    print(colored(f"{LOG_TAG_SUCCESS} {message}", Color.GREEN))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    print(colored(f"{LOG_TAG_INFO} {message}", Color.CYAN))
