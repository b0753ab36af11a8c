# src/lua_inline/logs.py

import argparse
import logging
import os
import sys
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, TextIO, cast

from .constants import DEFAULT_ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL
from .meta import PROGRAM_ENV, PROGRAM_PACKAGE


# --- ANSI Colors -------------------------------------------------------------


RESET = "\033[0m"
CYAN = "\033[36m"
YELLOW = "\033[93m"  # or \033[33m
RED = "\033[91m"  # or \033[31m # or background \033[41m
GREEN = "\033[92m"  # or \033[32m
GRAY = "\033[90m"


LEVEL_ORDER = [
    "trace",
    "debug",
    "info",
    "warning",
    "error",
    "critical",
    "silent",  # disables all logging
]


TAG_STYLES = {
    "TRACE": (GRAY, "[TRACE]"),
    "DEBUG": (CYAN, "[DEBUG]"),
    "WARNING": ("", "⚠️ "),
    "ERROR": ("", "❌ "),
    "CRITICAL": ("", "💥 "),
}

# sanity check
assert set(TAG_STYLES.keys()) <= {lvl.upper() for lvl in LEVEL_ORDER}, (  # noqa: S101
    "TAG_STYLES contains unknown levels"
)


TRACE_LEVEL = logging.DEBUG - 5
SILENT_LEVEL = logging.CRITICAL + 1
logging.addLevelName(TRACE_LEVEL, "TRACE")
logging.addLevelName(SILENT_LEVEL, "SILENT")

_LEVEL_MAP = {
    "TRACE": TRACE_LEVEL,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
    "SILENT": SILENT_LEVEL,
}


# --- Application logger ------------------------------------------------------


class AppLogger(logging.Logger):
    """Logger with a TRACE level, colour flag and CLI-aware helpers."""

    enable_color: bool = False

    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, msg, args, **kwargs)

    def setLevel(self, level: int | str) -> None:  # noqa: N802
        if isinstance(level, str):
            key = level.upper()
            if key not in _LEVEL_MAP:
                xmsg = f"Unknown log level: {level!r}"
                raise ValueError(xmsg)
            level = _LEVEL_MAP[key]
        super().setLevel(level)

    @property
    def level_name(self) -> str:
        """Return the current effective level as a lowercase LEVEL_ORDER name."""
        for name, value in _LEVEL_MAP.items():
            if value == self.level:
                return name.lower()
        return logging.getLevelName(self.level).lower()

    def determine_log_level(
        self,
        *,
        args: argparse.Namespace | None = None,
        root_log_level: str | None = None,
        bundle_log_level: str | None = None,
    ) -> str:
        """Resolve log level from CLI → env → bundle config → root config → default."""
        if args is not None and getattr(args, "log_level", None):
            return cast("str", args.log_level)

        env_log_level = os.getenv(f"{PROGRAM_ENV}_LOG_LEVEL") or os.getenv(
            DEFAULT_ENV_LOG_LEVEL
        )
        if env_log_level:
            return env_log_level

        if bundle_log_level:
            return bundle_log_level

        if root_log_level:
            return root_log_level

        return DEFAULT_LOG_LEVEL

    def determine_color_enabled(self) -> bool:
        """Return True if colored output should be enabled."""
        # Respect explicit overrides
        if "NO_COLOR" in os.environ:
            return False
        if os.getenv("FORCE_COLOR", "").lower() in {"1", "true", "yes"}:
            return True

        # Auto-detect: use color if output is a TTY
        return sys.stdout.isatty()

    def error_if_not_debug(self, msg: str, *args: Any) -> None:
        """Log an error; include the traceback only when debugging."""
        if self.isEnabledFor(logging.DEBUG):
            self.exception(msg, *args)
        else:
            self.error(msg, *args)

    def critical_if_not_debug(self, msg: str, *args: Any) -> None:
        """Log a critical error; include the traceback only when debugging."""
        if self.isEnabledFor(logging.DEBUG):
            self.critical(msg, *args, exc_info=True)
        else:
            self.critical(msg, *args)

    def colorize(self, text: str, color: str) -> str:
        return f"{color}{text}{RESET}" if self.enable_color else text

    @contextmanager
    def use_level(self, level: str | None) -> Generator[None, None, None]:
        """Temporarily switch the log level (no-op when level is None)."""
        if not level:
            yield
            return
        prev = self.level
        self.setLevel(level)
        try:
            yield
        finally:
            self.setLevel(prev)


# --- Tag formatter ---------------------------------------------------------


class TagFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        tag_color, tag_text = TAG_STYLES.get(record.levelname, ("", ""))
        msg = super().format(record)
        if tag_text:
            if _logger.enable_color and tag_color:
                prefix = f"{tag_color}{tag_text}{RESET}"
            else:
                prefix = tag_text
            return f"{prefix} {msg}"
        return msg


# --- DualStreamHandler ---------------------------------------------------------


class DualStreamHandler(logging.StreamHandler[TextIO]):
    """Send info/debug/trace to stdout, everything else to stderr."""

    def __init__(self) -> None:
        # default to stdout, overridden per record
        super().__init__(stream=sys.stdout)

    def emit(self, record: logging.LogRecord) -> None:
        if record.levelno >= logging.WARNING:
            self.stream = sys.stderr
        else:
            self.stream = sys.stdout
        super().emit(record)


# --- Logger initialization ---------------------------------------------------


_previous_logger_class = logging.getLoggerClass()
logging.setLoggerClass(AppLogger)
_logger = cast("AppLogger", logging.getLogger(PROGRAM_PACKAGE))
logging.setLoggerClass(_previous_logger_class)


def _ensure_logger_initialized() -> None:
    """Configure the logger once."""
    if getattr(_ensure_logger_initialized, "_done", False):
        return

    handler = DualStreamHandler()
    handler.setFormatter(TagFormatter("%(message)s"))
    _logger.addHandler(handler)

    _logger.propagate = False  # don’t double-log through root logger
    _logger.enable_color = _logger.determine_color_enabled()
    try:
        _logger.setLevel(_logger.determine_log_level())
    except ValueError:
        _logger.setLevel(DEFAULT_LOG_LEVEL)
    _ensure_logger_initialized._done = True  # type: ignore[attr-defined]  # noqa: SLF001


def get_logger() -> AppLogger:
    """Return the configured lua_inline logger."""
    _ensure_logger_initialized()
    return _logger
