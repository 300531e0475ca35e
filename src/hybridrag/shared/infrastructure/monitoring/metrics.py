"""
Counters and timings for HybridRAG operations.
"""

import threading
import time
from collections import defaultdict, deque
from functools import wraps
from typing import Any, Deque, Dict, Iterable, Optional


class MetricsCollector:
    """
    Thread-safe counters plus bounded timing samples.

    Collectors are plain instances: each service owns one, so tests never
    share counts. Reads that span several counters happen under the same
    lock as increments.
    """

    def __init__(self, max_samples: int = 1000):
        self._lock = threading.RLock()
        self.max_samples = max_samples
        self._counters: Dict[str, int] = defaultdict(int)
        self._timings: Dict[str, Deque[float]] = defaultdict(lambda: deque(maxlen=self.max_samples))

    def counter(self, name: str, value: int = 1) -> int:
        """Increment a counter and return its new value."""
        with self._lock:
            self._counters[name] += value
            return self._counters[name]

    def timer(self, name: str, duration_seconds: float) -> None:
        """Record one timing sample, keeping the most recent ``max_samples``."""
        with self._lock:
            self._timings[name].append(duration_seconds)

    def get_counter(self, name: str) -> int:
        with self._lock:
            return self._counters.get(name, 0)

    def snapshot_counters(self, names: Iterable[str]) -> Dict[str, int]:
        """Read several counters atomically."""
        with self._lock:
            return {name: self._counters.get(name, 0) for name in names}

    def get_timer_stats(self, name: str) -> Dict[str, float]:
        """Count, mean, min, max and p95 of the retained samples."""
        with self._lock:
            samples = sorted(self._timings.get(name, ()))

        if not samples:
            return {'count': 0, 'mean': 0.0, 'min': 0.0, 'max': 0.0, 'p95': 0.0}

        count = len(samples)
        return {
            'count': count,
            'mean': sum(samples) / count,
            'min': samples[0],
            'max': samples[-1],
            'p95': samples[min(count - 1, int(0.95 * count))],
        }

    def get_all_metrics(self) -> Dict[str, Any]:
        """All counters and timer summaries."""
        with self._lock:
            counters = dict(self._counters)
            timer_names = list(self._timings)
        return {
            'counters': counters,
            'timers': {name: self.get_timer_stats(name) for name in timer_names},
        }

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._timings.clear()


def timed_operation(metric_name: str):
    """
    Time a coroutine method of an object that has a ``metrics`` collector.

    Failed calls are recorded as ``<metric_name>_error`` and re-raised.
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(self, *args, **kwargs):
            metrics: Optional[MetricsCollector] = getattr(self, 'metrics', None)
            start = time.perf_counter()
            name = f"{metric_name}_error"
            try:
                result = await func(self, *args, **kwargs)
                name = metric_name
                return result
            finally:
                if metrics is not None:
                    metrics.timer(name, time.perf_counter() - start)

        return wrapper
    return decorator
