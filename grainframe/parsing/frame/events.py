"""
Structured diagnostics emitted while decoding a frame.

Decoders never write to a global console or logger. They report through an
``EventRecorder`` that keeps every event for the ``DecodeResult`` and forwards
each one, in order, to an optional caller-supplied sink.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional


class Severity(str, Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class IssueKind(str, Enum):
    MALFORMED_TOKEN = "malformed_token"
    FRAME_TOO_SHORT = "frame_too_short"
    TIMESTAMP_OUT_OF_RANGE = "timestamp_out_of_range"
    TEMPERATURE_OUT_OF_RANGE = "temperature_out_of_range"
    LENGTH_MISMATCH = "length_mismatch"
    PAYLOAD_TOO_SHORT = "payload_too_short"
    END_OF_DATA = "end_of_data"
    SUMMARY = "summary"


@dataclass(frozen=True)
class DecodeEvent:
    kind: IssueKind
    severity: Severity
    message: str
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    def as_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "severity": self.severity.value,
            "message": self.message,
            "details": dict(self.details),
        }


EventSink = Callable[[DecodeEvent], None]


class EventRecorder:
    """Collects events for one decode call and forwards them to ``sink``."""

    def __init__(self, sink: Optional[EventSink] = None) -> None:
        self.sink = sink
        self._events: list[DecodeEvent] = []

    def record(self, kind: IssueKind, severity: Severity, message: str, **details: Any) -> DecodeEvent:
        event = DecodeEvent(kind=kind, severity=severity, message=message, details=details)
        self._events.append(event)
        if self.sink is not None:
            self.sink(event)
        return event

    def info(self, kind: IssueKind, message: str, **details: Any) -> DecodeEvent:
        return self.record(kind, Severity.INFO, message, **details)

    def warn(self, kind: IssueKind, message: str, **details: Any) -> DecodeEvent:
        return self.record(kind, Severity.WARN, message, **details)

    def error(self, kind: IssueKind, message: str, **details: Any) -> DecodeEvent:
        return self.record(kind, Severity.ERROR, message, **details)

    @property
    def events(self) -> tuple[DecodeEvent, ...]:
        return tuple(self._events)

    def of_kind(self, kind: IssueKind) -> list[DecodeEvent]:
        return [event for event in self._events if event.kind == kind]


__all__ = ["DecodeEvent", "EventRecorder", "EventSink", "IssueKind", "Severity"]
