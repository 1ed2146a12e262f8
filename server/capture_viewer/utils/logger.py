"""
Colourful structured console logging for the capture viewer.

Lines go to stderr, to an ANSI-stripped in-memory buffer, and to a
timestamped file under ``.logs/`` when WRITE_TO_FILE is set.

Timers, the buffer, and the file handle live in ``contextvars`` so
concurrent requests keep separate state.
"""

from __future__ import annotations

import contextvars
import io
import os
import pathlib
import re
import sys
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import NamedTuple, TypeVar

_T = TypeVar("_T")

_timers_var: contextvars.ContextVar[dict[str, tuple[float, str]]] = contextvars.ContextVar("_timers_var")
_buffer_var: contextvars.ContextVar[list[str]] = contextvars.ContextVar("_buffer_var")
_file_var: contextvars.ContextVar[io.TextIOWrapper | None] = contextvars.ContextVar("_file_var", default=None)

_ANSI_RE = re.compile(r"\033\[[0-9;]*m")

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
GRAY = "\033[90m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
MAGENTA = "\033[35m"
CYAN = "\033[36m"


class _Level(NamedTuple):
    colour: str
    symbol: str


_LEVELS = {
    "info": _Level(CYAN, "ℹ"),
    "success": _Level(GREEN, "✓"),
    "warn": _Level(YELLOW, "⚠"),
    "error": _Level(RED, "✗"),
    "debug": _Level(GRAY, "•"),
    "timing": _Level(MAGENTA, "⏱"),
}


def _context_value(var: contextvars.ContextVar[_T], factory: Callable[[], _T]) -> _T:
    """Return *var* for this context, creating it on first access."""
    try:
        return var.get()
    except LookupError:
        value = factory()
        var.set(value)
        return value


def _paint(text: object, colour: str) -> str:
    return f"{colour}{text}{RESET}"


def get_log_buffer() -> list[str]:
    """Return a copy of the accumulated log lines (ANSI-stripped)."""
    return list(_context_value(_buffer_var, list))


def clear_log_buffer() -> None:
    """Forget buffered lines and running timers for this context."""
    _context_value(_buffer_var, list).clear()
    _context_value(_timers_var, dict).clear()


# ============================================================================
# File Logging
# ============================================================================


def start_log_file(label: str) -> str | None:
    """Open ``.logs/<label>_<timestamp>.log`` when WRITE_TO_FILE is true.

    Returns:
        The path of the opened file, or ``None`` when file
        logging is off or the file cannot be opened.
    """
    if os.environ.get("WRITE_TO_FILE", "").lower() != "true":
        return None

    end_log_file()

    logs_dir = pathlib.Path.cwd() / ".logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    now = datetime.now(UTC)
    safe_label = re.sub(r"[^A-Za-z0-9.-]", "_", label)[:50]
    path = logs_dir / f"{safe_label}_{now:%Y-%m-%d_%H-%M-%S}.log"

    try:
        stream = open(path, "a", encoding="utf-8")  # noqa: SIM115
    except OSError as exc:
        print(_paint(f"✗ [Logger] Failed to open log file: {exc}", RED), file=sys.stderr)
        return None

    _file_var.set(stream)
    stream.write(f"\n{'=' * 80}\n  Capture Viewer Log - {label}\n  Started: {now.isoformat()}\n{'=' * 80}\n")
    return str(path)


def end_log_file() -> None:
    """Flush and close the current log file, if any."""
    stream = _file_var.get()
    if stream is None:
        return
    try:
        stream.close()
    except OSError:
        print(_paint("⚠ [Logger] Failed to close log file", YELLOW), file=sys.stderr)
    _file_var.set(None)


# ============================================================================
# Formatting
# ============================================================================


def _clock() -> str:
    """Current UTC time as HH:MM:SS.mmm."""
    now = datetime.now(UTC)
    return f"{now:%H:%M:%S}.{now.microsecond // 1000:03d}"


def _format_duration(ms: float) -> str:
    if ms < 1000:
        return f"{int(ms)}ms"
    if ms < 60000:
        return f"{ms / 1000:.2f}s"
    return f"{int(ms // 60000)}m {(ms % 60000) / 1000:.1f}s"


def _format_value(value: object) -> str:
    """Colour a data value by type; containers show their size only."""
    if value is None:
        return _paint("None", DIM)
    if isinstance(value, bool):
        return _paint(value, GREEN if value else RED)
    if isinstance(value, (int, float)):
        return _paint(value, YELLOW)
    if isinstance(value, str):
        shown = value if len(value) <= 200 else value[:197] + "..."
        return _paint(f'"{shown}"', GREEN)
    if isinstance(value, list):
        return _paint(f"[{len(value)} items]", CYAN)
    if isinstance(value, dict):
        return _paint(f"{{{len(value)} keys}}", CYAN)
    return str(value)


# ============================================================================
# Logger
# ============================================================================


class Logger:
    """Console logger that tags each line with a context name."""

    def __init__(self, context: str) -> None:
        self._context = context

    def _emit(self, line: str) -> None:
        print(line, file=sys.stderr)
        plain = _ANSI_RE.sub("", line)
        _context_value(_buffer_var, list).append(plain)
        stream = _file_var.get()
        if stream is not None:
            stream.write(plain + "\n")
            stream.flush()

    def _log(self, level: str, message: str, data: dict[str, object] | None = None) -> None:
        colour, symbol = _LEVELS[level]
        parts = [_paint(f"[{_clock()}]", GRAY), _paint(symbol, colour), _paint(f"[{self._context}]", BOLD), message]
        if data:
            parts.extend(f"{_paint(f'{key}=', DIM)}{_format_value(value)}" for key, value in data.items())
        self._emit(" ".join(parts))

    def info(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("info", message, data)

    def success(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("success", message, data)

    def warn(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("warn", message, data)

    def error(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("error", message, data)

    def debug(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("debug", message, data)

    def start_timer(self, label: str) -> None:
        """Start a named timer; pair with :meth:`end_timer`."""
        timers = _context_value(_timers_var, dict)
        timers[f"{self._context}:{label}"] = (time.monotonic() * 1000, _clock())
        self._log("timing", f"Starting: {label}")

    def end_timer(self, label: str, message: str | None = None) -> float:
        """Stop a named timer, log the elapsed time, and return it in ms."""
        entry = _context_value(_timers_var, dict).pop(f"{self._context}:{label}", None)
        if entry is None:
            self.warn(f'Timer "{label}" was not started')
            return 0.0

        started_ms, started_at = entry
        elapsed = time.monotonic() * 1000 - started_ms
        self._log(
            "timing",
            f"{message or f'Completed: {label}'} {_paint('took', DIM)} "
            f"{_paint(_format_duration(elapsed), MAGENTA)} {_paint(f'(started {started_at})', DIM)}",
        )
        return elapsed

    def section(self, title: str) -> None:
        """Print a banner with *title* between two rules."""
        rule = _paint("─" * 60, BLUE)
        for line in ("", rule, _paint(f"{BOLD}  {title}", BLUE), rule, ""):
            self._emit(line)


def create_logger(context: str) -> Logger:
    """Create a logger for a specific module."""
    return Logger(context)
