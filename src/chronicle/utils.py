"""Shared utilities for logging, console output, and value coercion."""

from __future__ import annotations

import json
import logging
import sys
from datetime import date, datetime, timezone
from pathlib import Path
from typing import NoReturn, Optional

import click
from rich.console import Console, RenderableType

CHECKMARK = "\033[92;1m✔\033[0m"
CROSS = "\033[31m✘\033[0m"
INFO = "\033[94;1mi\033[0m"
WARNING = "○"
DEBUG_PREFIX = "\033[95m◆\033[0m"

CHECKMARK_PREFIX = f"{CHECKMARK} "
CROSS_PREFIX = f"{CROSS} "
INFO_PREFIX = f"{INFO} "
WARNING_PREFIX = f"{WARNING} "
DEBUG_PREFIX_WITH_SPACE = f"{DEBUG_PREFIX} "
BOLD = "\033[1m"
RESET = "\033[0m"

_LOGGER_NAME = "chronicle"
_LOGGER = logging.getLogger(_LOGGER_NAME)

LOG_LEVELS: dict[str, int] = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}

console = Console(stderr=True)


class _PlainFormatter(logging.Formatter):
    """Strip ANSI prefixes for file output."""

    _MARKERS = (
        CHECKMARK_PREFIX,
        CROSS_PREFIX,
        INFO_PREFIX,
        WARNING_PREFIX,
        DEBUG_PREFIX_WITH_SPACE,
    )

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for marker in self._MARKERS:
            if marker in message:
                message = message.replace(marker, "")
        return f"{record.levelname.lower()}: {message}"


class _StructuredFormatter(_PlainFormatter):
    """Emit one JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        plain = super().format(record)
        _, _, message = plain.partition(": ")
        payload = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": message,
        }
        return json.dumps(payload)


def configure_logging(
    level: int = logging.WARNING,
    *,
    structured: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure the shared logger used across the CLI."""
    _LOGGER.setLevel(level)
    while _LOGGER.handlers:
        existing = _LOGGER.handlers.pop()
        existing.close()
    handler = logging.StreamHandler(sys.stderr)
    if structured:
        handler.setFormatter(_StructuredFormatter("%(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(level)
    _LOGGER.addHandler(handler)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        if structured:
            file_handler.setFormatter(_StructuredFormatter("%(message)s"))
        else:
            file_handler.setFormatter(_PlainFormatter("%(message)s"))
        file_handler.setLevel(level)
        _LOGGER.addHandler(file_handler)
    _LOGGER.propagate = False
    return _LOGGER


def resolve_log_level(name: str) -> int:
    """Return the logging level for a configured level name."""
    try:
        return LOG_LEVELS[name.strip().lower()]
    except KeyError:
        allowed = ", ".join(sorted(set(LOG_LEVELS) - {"warn", "trace"}))
        raise ValueError(f"unknown log level '{name}'. Allowed levels: {allowed}") from None


def _log(prefix: str, message: str, level: int) -> None:
    logger = logging.getLogger(_LOGGER_NAME)
    lines = message.splitlines() or [""]
    for line in lines:
        if line:
            logger.log(level, f"{prefix}{line}")
        else:
            logger.log(level, prefix.rstrip())


def log_info(message: str) -> None:
    """Log an informational message with the standardized prefix."""
    _log(INFO_PREFIX, message, logging.INFO)


def log_success(message: str) -> None:
    """Log a success message with the standardized prefix."""
    _log(CHECKMARK_PREFIX, message, logging.INFO)


def log_error(message: str) -> None:
    """Log an error message with the standardized prefix."""
    _log(CROSS_PREFIX, message, logging.ERROR)


def log_warning(message: str) -> None:
    """Log a warning message with the standardized prefix."""
    _log(WARNING_PREFIX, message, logging.WARNING)


def log_debug(message: str) -> None:
    """Log a debug message with the standardized prefix."""
    _log(DEBUG_PREFIX_WITH_SPACE, message, logging.DEBUG)


def abort_on_user_interrupt(exc: BaseException | None = None) -> NoReturn:
    """Log a standardized cancellation message and exit the command."""

    log_error("operation cancelled by user (Ctrl+C).")
    raise click.exceptions.Exit(130) from exc


def format_bold(text: str) -> str:
    """Return text wrapped in ANSI bold styling."""
    return f"{BOLD}{text}{RESET}"


def render_to_text(renderable: RenderableType) -> str:
    """Return the string representation of a Rich renderable."""
    capture_console = Console(width=console.width, force_terminal=False, color_system=None)
    with capture_console.capture() as capture:
        capture_console.print(renderable)
    return capture.get()


def emit_output(content: str, *, newline: bool = True) -> None:
    """Emit raw command output to stdout for machine consumption."""
    click.echo(content, nl=newline, err=False)


def coerce_datetime(value: object) -> Optional[datetime]:
    """Return a UTC-aware datetime object for ISO-like inputs, preserving None.

    Accepts datetime objects, date objects (converted to midnight UTC),
    and ISO-formatted strings, including the ``Z`` suffix GitHub and git
    emit. All returned datetimes are timezone-aware.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    text = str(value).strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt
    except ValueError:
        pass
    try:
        d = date.fromisoformat(text)
        return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)
    except ValueError:
        return None
