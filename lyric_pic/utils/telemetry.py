"""Run-scoped telemetry for batch lyric processing."""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .observability import get_logger

TelemetryListener = Callable[[str, Dict[str, Any]], None]


class StructuredTelemetry:
    """Collects timings, counters and metadata for one batch run at a time.

    A run is started with :meth:`start_run`; every song processed inside it
    contributes timings (``timer``) and counters (``increment``). Listeners
    receive each event as ``(event_type, payload)``.
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
        self._run_id = 0
        self._listeners: List[TelemetryListener] = list(listeners or [])
        self._reset_state()

    def _reset_state(self) -> None:
        self._timings: Dict[str, Dict[str, float]] = {}
        self._counters: Dict[str, float] = {}
        self._events: List[Dict[str, Any]] = []
        self._metadata: Dict[str, Any] = {}
        self._run_name: Optional[str] = None

    def _listeners_snapshot(self) -> Tuple[TelemetryListener, ...]:
        with self._lock:
            return tuple(self._listeners)

    def _notify(self, event_type: str, payload: Dict[str, Any]) -> None:
        for listener in self._listeners_snapshot():
            listener(event_type, dict(payload))

    def now(self) -> float:
        return float(self._time_fn())

    def start_run(self, name: str) -> int:
        """Discard previous state and begin a new named run."""

        with self._lock:
            self._run_id += 1
            self._reset_state()
            self._run_name = name
            self._metadata["started_at"] = self.now()
            run_id = self._run_id

        self._notify("run_started", {"run_id": run_id, "name": name})
        return run_id

    def record_timing(
        self,
        name: str,
        duration: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        duration = max(0.0, float(duration))
        details = dict(metadata) if metadata else {}
        with self._lock:
            bucket = self._timings.setdefault(
                name,
                {"count": 0, "total": 0.0, "min": duration, "max": duration},
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
            if len(self._events) > self._max_events:
                self._events = self._events[-self._max_events :]

        self._notify("timing", {"name": name, "duration": duration, "metadata": details})

    @contextmanager
    def timer(
        self,
        name: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Iterator[Dict[str, Any]]:
        """Time the enclosed block; callers may add to the yielded metadata."""

        payload: Dict[str, Any] = dict(metadata) if metadata else {}
        start = self.now()
        try:
            yield payload
        finally:
            self.record_timing(name, self.now() - start, payload)

    def increment(self, name: str, amount: float = 1.0) -> None:
        value = float(amount)
        with self._lock:
            self._counters[name] = self._counters.get(name, 0.0) + value
            current = self._counters[name]

        self._notify("counter", {"name": name, "delta": value, "value": current})

    def annotate(self, key: str, value: Any) -> None:
        with self._lock:
            self._metadata[key] = value

        self._notify("metadata", {"key": key, "value": value})

    def counter(self, name: str) -> float:
        with self._lock:
            return self._counters.get(name, 0.0)

    def snapshot(self) -> Dict[str, Any]:
        """Return a copy of the current run's data."""

        with self._lock:
            return {
                "run_id": self._run_id,
                "name": self._run_name,
                "timings": {key: dict(value) for key, value in self._timings.items()},
                "counters": dict(self._counters),
                "events": [dict(event) for event in self._events],
                "metadata": dict(self._metadata),
            }

    def add_listener(self, listener: TelemetryListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: TelemetryListener) -> None:
        with self._lock:
            self._listeners = [entry for entry in self._listeners if entry is not listener]


class TelemetryLogger:
    """Listener that forwards telemetry events to the project logger."""

    def __init__(
        self,
        *,
        logger: Optional[logging.LoggerAdapter] = None,
        level: int = logging.INFO,
        level_map: Optional[Dict[str, int]] = None,
    ) -> None:
        self._logger = logger or get_logger(__name__).bind(component="telemetry")
        self._default_level = level
        self._level_map = dict(level_map or {})

    def __call__(self, event_type: str, payload: Dict[str, Any]) -> None:
        level = self._level_map.get(event_type, self._default_level)
        if not self._logger.isEnabledFor(level):
            return

        context = {"telemetry.event": event_type}
        context.update({str(key): value for key, value in payload.items()})
        name = payload.get("name") or payload.get("key") or payload.get("run_id") or "event"
        self._logger.log(level, f"Telemetry {event_type}: {name}", context=context)


__all__ = ["StructuredTelemetry", "TelemetryLogger", "TelemetryListener"]
