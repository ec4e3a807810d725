# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for Enchante.

The probe engine never talks to :mod:`logging` directly. It receives an
:class:`EventLogger` and emits leveled events made of a message plus key/value
attributes; how they are rendered is up to the implementation.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from typing import Any, Protocol

DEFAULT_LOG_LEVEL = os.getenv("ENCHANTE_LOG_LEVEL", "INFO").upper()
LOGGER_NAME = "enchante"


def setup_logging(level: str | None = None, *, debug: bool = False) -> None:
    """Configure standard logging for CLI/library use."""
    effective_level = "DEBUG" if debug else (level or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, effective_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class EventLogger(Protocol):
    """Structured, leveled event sink injected into the probe engine."""

    def debug(self, message: str, **attrs: Any) -> None: ...

    def info(self, message: str, **attrs: Any) -> None: ...

    def warning(self, message: str, **attrs: Any) -> None: ...

    def error(self, message: str, **attrs: Any) -> None: ...


def _format_attrs(attrs: dict[str, Any]) -> str:
    return " ".join(f"{key}={value}" for key, value in attrs.items())


class StdlibEventLogger(EventLogger):
    """EventLogger backed by a :class:`logging.Logger`."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(LOGGER_NAME)

    def _log(self, level: int, message: str, attrs: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        if attrs:
            self._logger.log(level, "%s %s", message, _format_attrs(attrs), extra={"attrs": attrs})
        else:
            self._logger.log(level, "%s", message, extra={"attrs": attrs})

    def debug(self, message: str, **attrs: Any) -> None:
        self._log(logging.DEBUG, message, attrs)

    def info(self, message: str, **attrs: Any) -> None:
        self._log(logging.INFO, message, attrs)

    def warning(self, message: str, **attrs: Any) -> None:
        self._log(logging.WARNING, message, attrs)

    def error(self, message: str, **attrs: Any) -> None:
        self._log(logging.ERROR, message, attrs)


@dataclass(frozen=True)
class LogEvent:
    level: str
    message: str
    attrs: dict[str, Any] = field(default_factory=dict)


class MemoryEventLogger(EventLogger):
    """Thread-safe EventLogger that keeps every event in memory (for tests)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: list[LogEvent] = []

    def _record(self, level: str, message: str, attrs: dict[str, Any]) -> None:
        with self._lock:
            self._events.append(LogEvent(level, message, dict(attrs)))

    def debug(self, message: str, **attrs: Any) -> None:
        self._record("debug", message, attrs)

    def info(self, message: str, **attrs: Any) -> None:
        self._record("info", message, attrs)

    def warning(self, message: str, **attrs: Any) -> None:
        self._record("warning", message, attrs)

    def error(self, message: str, **attrs: Any) -> None:
        self._record("error", message, attrs)

    @property
    def events(self) -> list[LogEvent]:
        with self._lock:
            return list(self._events)

    def messages(self, level: str | None = None) -> list[str]:
        return [event.message for event in self.events if level is None or event.level == level]

    def find(self, message: str) -> list[LogEvent]:
        return [event for event in self.events if event.message == message]


def get_event_logger(name: str = LOGGER_NAME) -> EventLogger:
    return StdlibEventLogger(logging.getLogger(name))


__all__ = [
    "EventLogger",
    "LogEvent",
    "MemoryEventLogger",
    "StdlibEventLogger",
    "get_event_logger",
    "setup_logging",
]
