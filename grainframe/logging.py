import logging
import threading
from collections import deque
from typing import Deque, Dict, List, Optional

from grainframe.parsing.frame.events import DecodeEvent, Severity

_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARN: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class RingBufferHandler(logging.Handler):
    def __init__(self, max_entries: int = 200):
        super().__init__()
        self.max_entries = max_entries
        self._events: Deque[Dict] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def emit(self, record: logging.LogRecord) -> None:
        event = {
            "event": record.getMessage(),
            "level": record.levelname,
            "ts": record.created,
            "details": getattr(record, "details", {}),
        }
        with self._lock:
            self._events.append(event)

    def get_events(self, level: Optional[str] = None, limit: int = 100) -> List[Dict]:
        """
        Most recent ``limit`` entries, oldest first.

        ``level`` filters by level name ("warn" is accepted for WARNING);
        ``None`` or ``"all"`` returns every level.
        """
        with self._lock:
            events = list(self._events)
        if level and level.lower() != "all":
            wanted = "WARNING" if level.lower() == "warn" else level.upper()
            events = [event for event in events if event["level"] == wanted]
        return events[-limit:] if limit > 0 else []

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


def create_logger(name: str, ring_size: int) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)
    handler = RingBufferHandler(max_entries=ring_size)
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def ring_buffer(logger: logging.Logger) -> Optional[RingBufferHandler]:
    for handler in logger.handlers:
        if isinstance(handler, RingBufferHandler):
            return handler
    return None


class LoggingEventSink:
    """Forwards decode events to a ``logging.Logger`` at the matching level."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def __call__(self, event: DecodeEvent) -> None:
        details = {"kind": event.kind.value, **event.details}
        self.logger.log(_LEVELS[event.severity], event.message, extra={"details": details})
