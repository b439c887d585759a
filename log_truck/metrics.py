"""Thread-safe pipeline counters."""

import threading
import time

COUNTERS = (
    "received",
    "read_errors",
    "structured",
    "raw",
    "delivered",
    "rejected",
    "failed",
    "dropped",
)


class Metrics:
    def __init__(self):
        self._lock = threading.Lock()
        self._counters: dict[str, int] = {name: 0 for name in COUNTERS}
        self._start_time = time.monotonic()

    def increment(self, name: str, amount: int = 1):
        """Bump a named counter."""
        if name not in self._counters:
            raise KeyError(f"unknown counter {name!r}")
        with self._lock:
            self._counters[name] += amount

    def get(self, name: str) -> int:
        with self._lock:
            return self._counters[name]

    def snapshot(self) -> dict:
        """Return a point-in-time snapshot of all metrics."""
        with self._lock:
            elapsed = time.monotonic() - self._start_time
            counters = dict(self._counters)

        received = counters["received"]
        return {
            "counters": counters,
            "elapsed_seconds": round(elapsed, 2),
            "datagrams_per_second": round(received / elapsed, 2) if elapsed > 0 else 0.0,
        }
