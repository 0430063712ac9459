"""
Structured pipeline events.

The pipeline stages never log directly. They emit PipelineEvent objects to an
observer callable supplied by the caller, which keeps them testable and lets
the CLI decide where events end up (normally the "needs" logger).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass(frozen=True)
class PipelineEvent:
    """
    A single diagnostic event emitted by a pipeline stage.

    Attributes:
        scope: What the event is about (binary name, or a stage like "which")
        message: Short description
        level: Standard logging level number
        fields: Extra key/value context (flag, path, version, ...)
    """
    scope: str
    message: str
    level: int = logging.DEBUG
    fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "scope": self.scope,
            "message": self.message,
            "level": logging.getLevelName(self.level),
            "fields": dict(self.fields),
        }


Observer = Callable[[PipelineEvent], None]


def emit(
    observer: Observer | None,
    scope: str,
    message: str,
    level: int = logging.DEBUG,
    **fields: Any,
) -> None:
    """Build an event and hand it to observer (no-op when observer is None)."""
    if observer is None:
        return
    observer(PipelineEvent(scope=scope, message=message, level=level, fields=fields))


def null_observer(event: PipelineEvent) -> None:
    """Discard the event."""


def log_event(event: PipelineEvent) -> None:
    """Forward an event to the configured "needs" logger."""
    from .logging_config import get_logger

    get_logger().log(
        event.level,
        event.message,
        extra={"scope": event.scope, "fields": dict(event.fields)},
    )


@dataclass
class EventCollector:
    """
    Thread-safe event sink.

    Attributes:
        _lock: Threading lock guarding the event list
        _events: Events in arrival order
        _forward: Optional observer every event is also passed to
    """
    _lock: threading.Lock = field(default_factory=threading.Lock)
    _events: list[PipelineEvent] = field(default_factory=list)
    _forward: Observer | None = None

    def __call__(self, event: PipelineEvent) -> None:
        with self._lock:
            self._events.append(event)
        if self._forward is not None:
            self._forward(event)

    @property
    def events(self) -> list[PipelineEvent]:
        with self._lock:
            return list(self._events)

    def for_scope(self, scope: str) -> list[PipelineEvent]:
        """Get events emitted for one scope."""
        with self._lock:
            return [e for e in self._events if e.scope == scope]

    def messages(self, scope: str | None = None) -> list[str]:
        with self._lock:
            return [e.message for e in self._events if scope is None or e.scope == scope]
