"""Colored channel logger — ANSI-colored console logging for real-time fan-out.

Provides a ChannelLogger with color-coded output per channel stage, making
it easy to follow connections and broadcasts in the terminal.

Color scheme:
    🟢 Green   — Client connected
    🟡 Yellow  — Client disconnected
    🔵 Blue    — Broadcast
    🟣 Magenta — Hub lifecycle
    🔴 Red     — Errors / warnings
    ⚪ Gray    — Counts / details
"""

import logging
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    GRAY = "\033[90m"


# ── Channel Stage Definitions ────────────────────────────────────────

class ChannelStage:
    """Predefined channel stages with colors and icons."""

    CONNECT = ("CONNECT", _Colors.GREEN, "✅")
    DISCONNECT = ("DISCONNECT", _Colors.YELLOW, "❌")
    BROADCAST = ("BROADCAST", _Colors.BLUE, "📢")
    LIFECYCLE = ("HUB", _Colors.MAGENTA, "📡")
    WARNING = ("WARNING", _Colors.RED, "⚠️")


# ── ChannelLogger ────────────────────────────────────────────────────

class ChannelLogger:
    """Color-coded logger for the real-time broadcast hub.

    Usage:
        log = ChannelLogger("BroadcastHub")
        log.event(ChannelStage.BROADCAST, 'book:created - "Dune"', clients=3)
        log.warning("Cannot broadcast - hub not running")
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)

    def event(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log a channel event with its stage color."""
        label, color, icon = stage
        formatted = (
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        formatted += self._details(kwargs)
        self._logger.info(formatted)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a non-fatal channel problem in red."""
        label, color, icon = ChannelStage.WARNING
        formatted = f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} {color}{message}{_Colors.RESET}"
        formatted += self._details(kwargs)
        self._logger.warning(formatted)

    def error(self, message: str, error: BaseException | None = None) -> None:
        """Log a failed channel operation, with the exception type when given."""
        formatted = f"{_Colors.RED}{_Colors.BOLD}❌ [ERROR]{_Colors.RESET} {_Colors.RED}{message}{_Colors.RESET}"
        if error is not None:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        """Log additional detail (gray/dimmed) at debug level."""
        formatted = f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}"
        formatted += self._details(kwargs)
        self._logger.debug(formatted)

    @staticmethod
    def _details(kwargs: dict[str, Any]) -> str:
        if not kwargs:
            return ""
        details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
        return f" {_Colors.GRAY}({details}){_Colors.RESET}"
