"""
Process and request timing snapshot.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass

import psutil


@dataclass
class RequestTimer:
    """Thread-safe record of the most recent request duration and a request count."""

    started_at: float = 0.0
    last_ms: float = 0.0
    count: int = 0

    def __post_init__(self) -> None:
        self._lock = threading.Lock()
        self.started_at = time.monotonic()

    def record(self, elapsed_ms: float) -> None:
        with self._lock:
            self.last_ms = elapsed_ms
            self.count += 1

    def read(self) -> tuple[float, int]:
        with self._lock:
            return self.last_ms, self.count


def process_memory_mb() -> float:
    """RSS of the current process in megabytes, via :mod:`psutil`."""
    return psutil.Process().memory_info().rss / (1024 * 1024)


def collect_performance_snapshot(timer: RequestTimer) -> dict:
    """
    Build the performance payload.

    Returns
    -------
    dict
        ``{"time": "...", "memory": "...", "threads": int,
        "requests": int, "uptime": "..."}``
    """
    last_ms, count = timer.read()
    return {
        "time": f"{last_ms:.4f} ms",
        "memory": f"{process_memory_mb():.2f} MB",
        "threads": threading.active_count(),
        "requests": count,
        "uptime": f"{time.monotonic() - timer.started_at:.1f} s",
    }
