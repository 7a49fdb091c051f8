"""Structured telemetry for instrumenting statistics and lookup runs."""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from copy import deepcopy
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from .observability import get_logger

TelemetryListener = Callable[[str, Dict[str, Any]], None]


class StructuredTelemetry:
    """Collects timings, counters and metadata for the current trace.

    Each ``start_trace`` call resets the collected state. Listeners receive a
    copy of every event as ``(event_type, payload)``; a failing listener never
    interrupts the instrumented work.
    """

    def __init__(
        self,
        time_fn: Optional[Callable[[], float]] = None,
        *,
        max_events: int = 256,
        listeners: Optional[Iterable[TelemetryListener]] = None,
    ) -> None:
        self._time_fn = time_fn or time.perf_counter
        self._max_events = max(1, int(max_events))
        self._lock = threading.RLock()
        self._listeners: List[TelemetryListener] = list(listeners or [])
        self._trace_id = 0
        self._trace_name: Optional[str] = None
        self._timings: Dict[str, Dict[str, float]] = {}
        self._counters: Dict[str, float] = {}
        self._events: List[Dict[str, Any]] = []
        self._metadata: Dict[str, Any] = {}

    def _emit(self, event_type: str, payload: Dict[str, Any]) -> None:
        with self._lock:
            listeners = tuple(self._listeners)
        for listener in listeners:
            try:
                listener(event_type, dict(payload))
            except Exception:
                continue

    def now(self) -> float:
        return float(self._time_fn())

    def start_trace(self, name: str) -> int:
        """Reset state and begin a new named trace, returning its id."""

        with self._lock:
            self._trace_id += 1
            self._trace_name = name
            self._timings = {}
            self._counters = {}
            self._events = []
            self._metadata = {"trace_name": name, "start_time": self.now()}
            trace_id = self._trace_id

        self._emit("trace_started", {"trace_id": trace_id, "name": name})
        return trace_id

    def record_timing(
        self,
        name: str,
        duration: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        duration = max(0.0, float(duration))
        details = dict(metadata or {})
        with self._lock:
            bucket = self._timings.setdefault(
                name, {"count": 0, "total": 0.0, "min": duration, "max": duration}
            )
            bucket["count"] += 1
            bucket["total"] += duration
            bucket["min"] = min(bucket["min"], duration)
            bucket["max"] = max(bucket["max"], duration)
            bucket["avg"] = bucket["total"] / bucket["count"]

            event: Dict[str, Any] = {"name": name, "duration": duration}
            if details:
                event["metadata"] = details
            self._events.append(event)
            del self._events[: -self._max_events]

        self._emit("timing", {"name": name, "duration": duration, "metadata": details})

    @contextmanager
    def timer(
        self,
        name: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Iterator[Dict[str, Any]]:
        """Time the block; callers may add metadata to the yielded dict."""

        payload: Dict[str, Any] = dict(metadata or {})
        start = self.now()
        try:
            yield payload
        finally:
            self.record_timing(name, self.now() - start, payload)

    def increment(self, name: str, amount: float = 1.0) -> None:
        value = float(amount)
        with self._lock:
            current = self._counters.get(name, 0.0) + value
            self._counters[name] = current
        self._emit("counter", {"name": name, "delta": value, "value": current})

    def annotate(self, key: str, value: Any) -> None:
        with self._lock:
            self._metadata[key] = value
        self._emit("metadata", {"key": key, "value": value})

    def snapshot(self) -> Dict[str, Any]:
        """Return a deep copy of the active trace."""

        with self._lock:
            return deepcopy(
                {
                    "trace_id": self._trace_id,
                    "name": self._trace_name,
                    "timings": self._timings,
                    "counters": self._counters,
                    "events": self._events,
                    "metadata": self._metadata,
                }
            )

    def add_listener(self, listener: TelemetryListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: TelemetryListener) -> None:
        with self._lock:
            self._listeners = [entry for entry in self._listeners if entry is not listener]


class TelemetryLogger:
    """Listener that writes telemetry events to the project logger."""

    def __init__(
        self,
        *,
        logger: Optional[logging.LoggerAdapter] = None,
        level: int = logging.DEBUG,
    ) -> None:
        self._logger = logger or get_logger(__name__).bind(component="telemetry")
        self._level = level

    def __call__(self, event_type: str, payload: Dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(self._level):
            return

        name = payload.get("name") or payload.get("key") or payload.get("trace_id") or "event"
        context = {"telemetry.event": event_type}
        context.update({str(key): value for key, value in payload.items()})
        self._logger.log(self._level, f"Telemetry {event_type}: {name}", context=context)


__all__ = ["StructuredTelemetry", "TelemetryLogger", "TelemetryListener"]
