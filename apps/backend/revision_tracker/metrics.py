from __future__ import annotations

import threading
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Deque


@dataclass
class RouteStats:
    latencies_ms: Deque[float]
    total: int = 0
    errors: int = 0
    status_codes: Counter = field(default_factory=Counter)


class MetricsRegistry:
    """In-memory request metrics keyed by path.

    - rolling latency window per path (p50/p95)
    - request, error and per-status counters
    """

    def __init__(self, window_size: int = 200) -> None:
        self._window_size = max(1, window_size)
        self._lock = threading.Lock()
        self._per_path: dict[str, RouteStats] = {}

    def record(
        self,
        path: str,
        latency_ms: float,
        *,
        status_code: int | None = None,
        is_error: bool = False,
    ) -> None:
        with self._lock:
            stats = self._per_path.get(path)
            if stats is None:
                stats = RouteStats(latencies_ms=deque(maxlen=self._window_size))
                self._per_path[path] = stats
            stats.latencies_ms.append(latency_ms)
            stats.total += 1
            if is_error or (status_code is not None and status_code >= 500):
                stats.errors += 1
            if status_code is not None:
                stats.status_codes[str(status_code)] += 1

    def snapshot(self) -> dict[str, dict[str, object]]:
        with self._lock:
            result: dict[str, dict[str, object]] = {}
            for path, stats in self._per_path.items():
                values = list(stats.latencies_ms)
                result[path] = {
                    "p50_ms": round(percentile(values, 0.5), 2),
                    "p95_ms": round(percentile(values, 0.95), 2),
                    "count": stats.total,
                    "errors": stats.errors,
                    "status_codes": dict(stats.status_codes),
                }
            return result

    def reset(self) -> None:
        with self._lock:
            self._per_path.clear()


def percentile(values: list[float], fraction: float) -> float:
    """Nearest-rank percentile over the given values (0.0 when empty)."""

    if not values:
        return 0.0
    ordered = sorted(values)
    k = int(fraction * (len(ordered) - 1))
    return ordered[k]


registry = MetricsRegistry()
