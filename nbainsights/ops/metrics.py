"""Request and controller metrics.

The API client counts requests and failures and times each endpoint;
diagnostics count query transitions. Everything lands in one process-wide
recorder unless a recorder is injected.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator
import threading
import time


@dataclass
class TimingSummary:
    count: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0

    def add(self, value_ms: float) -> None:
        self.count += 1
        self.total_ms += value_ms
        self.max_ms = max(self.max_ms, value_ms)

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.count if self.count else 0.0


class MetricsRecorder:
    def increment(self, key: str, value: int = 1) -> None:
        raise NotImplementedError

    def timing(self, key: str, value_ms: float) -> None:
        raise NotImplementedError

    def counter(self, key: str) -> int:
        raise NotImplementedError

    def snapshot(self) -> Dict[str, Dict[str, object]]:
        raise NotImplementedError

    @contextmanager
    def timed(self, key: str) -> Iterator[None]:
        """Record the wall time of the block under ``key``, even when it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.timing(key, (time.perf_counter() - start) * 1000)


class InMemoryMetricsRecorder(MetricsRecorder):
    def __init__(self) -> None:
        self._counters: Dict[str, int] = {}
        self._timings: Dict[str, TimingSummary] = {}
        self._lock = threading.Lock()

    def increment(self, key: str, value: int = 1) -> None:
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + int(value)

    def timing(self, key: str, value_ms: float) -> None:
        with self._lock:
            self._timings.setdefault(key, TimingSummary()).add(float(value_ms))

    def counter(self, key: str) -> int:
        with self._lock:
            return self._counters.get(key, 0)

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._timings.clear()

    def snapshot(self) -> Dict[str, Dict[str, object]]:
        with self._lock:
            return {
                "counters": dict(self._counters),
                "timings": {
                    key: {"count": t.count, "avg_ms": t.avg_ms, "max_ms": t.max_ms}
                    for key, t in self._timings.items()
                },
            }


_recorder: MetricsRecorder = InMemoryMetricsRecorder()


def get_metrics_recorder() -> MetricsRecorder:
    return _recorder


def set_metrics_recorder(recorder: MetricsRecorder) -> MetricsRecorder:
    """Swap the process-wide recorder; returns the previous one."""
    global _recorder
    previous, _recorder = _recorder, recorder
    return previous
