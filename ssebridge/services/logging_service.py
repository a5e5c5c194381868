# -*- coding: utf-8 -*-
"""Location: ./ssebridge/services/logging_service.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Logging Service Implementation.
All bridge diagnostics flow through here and are written to stderr only, so the
protocol stream on stdout is never polluted. Severity names follow RFC 5424
(see :class:`ssebridge.types.LogLevel`) and the whole namespace can be switched
off with ``OFF``.

Examples:
    >>> from ssebridge.services.logging_service import LoggingService
    >>> service = LoggingService()
    >>> service.get_logger("ssebridge.doctest").name
    'ssebridge.doctest'
    >>> LoggingService.parse_level("warning")
    <LogLevel.WARNING: 'warning'>
    >>> LoggingService.parse_level("OFF") is None
    True
"""

# Standard
import logging
import sys
from typing import Dict, Optional, TextIO, Union

# First-Party
from ssebridge.types import LogLevel

ROOT_LOGGER_NAME = "ssebridge"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DISABLED_LEVELS = {"OFF", "NONE", "DISABLE", "FALSE", "0"}
OFF_LEVEL = logging.CRITICAL + 10

# RFC 5424 levels without a stdlib counterpart are folded onto the nearest one.
_STDLIB_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.NOTICE: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
    LogLevel.ALERT: logging.CRITICAL,
    LogLevel.EMERGENCY: logging.CRITICAL,
}


class LoggingService:
    """Bridge logging service.

    Implements stderr-only logging with:
    - RFC 5424 severity levels
    - Log level management, including OFF
    - Logger name tracking under the ``ssebridge`` namespace
    """

    def __init__(self, stream: Optional[TextIO] = None):
        """Initialize logging service.

        Args:
            stream: Diagnostic sink; resolved to ``sys.stderr`` lazily when omitted.
        """
        self._level: Optional[LogLevel] = LogLevel.INFO
        self._stream = stream
        self._handler: Optional[logging.Handler] = None
        self._loggers: Dict[str, logging.Logger] = {}

    @staticmethod
    def parse_level(level: Union[str, LogLevel, None]) -> Optional[LogLevel]:
        """Translate a user supplied level name.

        Args:
            level: Level name (any case), a LogLevel, or None.

        Returns:
            Optional[LogLevel]: The level, or None when logging is disabled.
            Unknown names fall back to INFO.

        Examples:
            >>> LoggingService.parse_level("DEBUG")
            <LogLevel.DEBUG: 'debug'>
            >>> LoggingService.parse_level("nonsense")
            <LogLevel.INFO: 'info'>
            >>> LoggingService.parse_level(None) is None
            True
        """
        if level is None:
            return None
        if isinstance(level, LogLevel):
            return level
        name = level.strip()
        if not name or name.upper() in DISABLED_LEVELS:
            return None
        try:
            return LogLevel(name.lower())
        except ValueError:
            return LogLevel.INFO

    def configure(self, level: Union[str, LogLevel, None] = LogLevel.INFO) -> None:
        """Attach the stderr handler to the ``ssebridge`` namespace and set its level.

        Args:
            level: Level name, LogLevel, or OFF/None to silence the bridge.
        """
        root = logging.getLogger(ROOT_LOGGER_NAME)
        if self._handler is None:
            self._handler = logging.StreamHandler(self._stream or sys.stderr)
            self._handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(self._handler)
        # Never bubble up to a root handler that might print to stdout.
        root.propagate = False
        self.set_level(level)

    def shutdown(self) -> None:
        """Detach the handler installed by :meth:`configure`."""
        root = logging.getLogger(ROOT_LOGGER_NAME)
        if self._handler is not None:
            self._handler.flush()
            root.removeHandler(self._handler)
            self._handler = None
        root.propagate = True
        root.setLevel(logging.NOTSET)

    def get_logger(self, name: str) -> logging.Logger:
        """Get or create logger instance.

        Args:
            name: Logger name

        Returns:
            Logger instance
        """
        if name not in self._loggers:
            self._loggers[name] = logging.getLogger(name)
        return self._loggers[name]

    def set_level(self, level: Union[str, LogLevel, None]) -> None:
        """Set minimum log level for the whole bridge namespace.

        Args:
            level: New log level, or OFF/None to disable output.
        """
        self._level = self.parse_level(level)
        root = logging.getLogger(ROOT_LOGGER_NAME)
        # Child loggers inherit the effective level, so OFF is a level above CRITICAL.
        root.setLevel(OFF_LEVEL if self._level is None else _STDLIB_LEVELS[self._level])

    @property
    def level(self) -> Optional[LogLevel]:
        """Current level, None when disabled.

        Returns:
            Optional[LogLevel]: Active level.
        """
        return self._level


# Shared instance used by the bridge modules
logging_service = LoggingService()
