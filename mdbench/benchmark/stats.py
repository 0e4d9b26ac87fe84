"""
Operation and Run Statistics.

OpStats describes one executed operation. ThreadStats folds OpStats from any
number of worker threads into running totals over a measurement window.
"""

import statistics
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class OpStats:
    """Outcome of one executed operation."""

    succeeded: bool
    elapsed_seconds: float
    bytes_transferred: int = 0

    def __post_init__(self) -> None:
        if self.bytes_transferred < 0:
            raise ValueError(f"bytes_transferred must be >= 0, got {self.bytes_transferred}")
        if self.elapsed_seconds < 0:
            raise ValueError(f"elapsed_seconds must be >= 0, got {self.elapsed_seconds}")


@dataclass
class LatencyStats:
    """Latency statistics."""

    min_ms: float = 0.0
    max_ms: float = 0.0
    mean_ms: float = 0.0
    median_ms: float = 0.0
    p50_ms: float = 0.0
    p75_ms: float = 0.0
    p90_ms: float = 0.0
    p95_ms: float = 0.0
    p99_ms: float = 0.0
    std_dev_ms: float = 0.0

    @classmethod
    def from_samples(cls, samples_ms: list[float]) -> "LatencyStats":
        """Calculate statistics from latency samples."""
        if not samples_ms:
            return cls()

        sorted_samples = sorted(samples_ms)
        n = len(sorted_samples)

        def percentile(p: float) -> float:
            k = (n - 1) * (p / 100)
            f = int(k)
            c = f + 1 if f < n - 1 else f
            return sorted_samples[f] + (k - f) * (sorted_samples[c] - sorted_samples[f])

        return cls(
            min_ms=sorted_samples[0],
            max_ms=sorted_samples[-1],
            mean_ms=statistics.mean(sorted_samples),
            median_ms=statistics.median(sorted_samples),
            p50_ms=percentile(50),
            p75_ms=percentile(75),
            p90_ms=percentile(90),
            p95_ms=percentile(95),
            p99_ms=percentile(99),
            std_dev_ms=statistics.stdev(sorted_samples) if n > 1 else 0.0,
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "min_ms": round(self.min_ms, 3),
            "max_ms": round(self.max_ms, 3),
            "mean_ms": round(self.mean_ms, 3),
            "median_ms": round(self.median_ms, 3),
            "p50_ms": round(self.p50_ms, 3),
            "p75_ms": round(self.p75_ms, 3),
            "p90_ms": round(self.p90_ms, 3),
            "p95_ms": round(self.p95_ms, 3),
            "p99_ms": round(self.p99_ms, 3),
            "std_dev_ms": round(self.std_dev_ms, 3),
        }


class ThreadStats:
    """
    Running totals shared by all workers of a run.

    Every mutation happens under one lock, so concurrent update() calls from
    worker threads give the same totals as a sequential run.

    Usage:
        stats = ThreadStats()
        stats.start()
        for i in range(workload.num_operations):
            stats.update(workload.execute(i, store))
        stats.stop()
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._done = 0
        self._failed = 0
        self._bytes = 0
        self._latencies_ms: list[float] = []
        self._start_time: float | None = None
        self._stop_time: float | None = None
        self.started_at: datetime | None = None
        self.stopped_at: datetime | None = None

    def start(self) -> None:
        """Open the measurement window."""
        with self._lock:
            self._start_time = time.perf_counter()
            self._stop_time = None
            self.started_at = datetime.now(timezone.utc)
            self.stopped_at = None

    def stop(self) -> None:
        """Close the measurement window."""
        with self._lock:
            self._stop_time = time.perf_counter()
            self.stopped_at = datetime.now(timezone.utc)

    def update(self, op_stats: OpStats) -> int:
        """
        Fold one operation into the totals.

        Failed operations count toward ``done`` as well.

        Returns:
            Number of operations folded in so far
        """
        with self._lock:
            self._done += 1
            self._bytes += op_stats.bytes_transferred
            if not op_stats.succeeded:
                self._failed += 1
            self._latencies_ms.append(op_stats.elapsed_seconds * 1000)
            return self._done

    def merge(self, other: "ThreadStats") -> None:
        """Add another run's totals; the window widens to cover both."""
        with other._lock:
            done, failed, nbytes = other._done, other._failed, other._bytes
            latencies = list(other._latencies_ms)
            other_window = (other._start_time, other._stop_time, other.started_at, other.stopped_at)

        with self._lock:
            self._done += done
            self._failed += failed
            self._bytes += nbytes
            self._latencies_ms.extend(latencies)

            start, stop, started_at, stopped_at = other_window
            if start is not None and (self._start_time is None or start < self._start_time):
                self._start_time = start
                self.started_at = started_at
            if stop is not None and (self._stop_time is None or stop > self._stop_time):
                self._stop_time = stop
                self.stopped_at = stopped_at

    @property
    def done(self) -> int:
        with self._lock:
            return self._done

    @property
    def failed(self) -> int:
        with self._lock:
            return self._failed

    @property
    def bytes(self) -> int:
        with self._lock:
            return self._bytes

    @property
    def elapsed_seconds(self) -> float:
        """Length of the measurement window; an open window runs up to now."""
        with self._lock:
            if self._start_time is None:
                return 0.0
            end = self._stop_time if self._stop_time is not None else time.perf_counter()
            return end - self._start_time

    @property
    def throughput_ops_per_sec(self) -> float:
        elapsed = self.elapsed_seconds
        return self.done / elapsed if elapsed > 0 else 0.0

    @property
    def bytes_per_sec(self) -> float:
        elapsed = self.elapsed_seconds
        return self.bytes / elapsed if elapsed > 0 else 0.0

    def latency_stats(self) -> LatencyStats:
        with self._lock:
            samples = list(self._latencies_ms)
        return LatencyStats.from_samples(samples)

    def to_dict(self) -> dict[str, Any]:
        done = self.done
        return {
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "stopped_at": self.stopped_at.isoformat() if self.stopped_at else None,
            "elapsed_seconds": round(self.elapsed_seconds, 6),
            "operations": {
                "done": done,
                "failed": self.failed,
                "success_rate": (done - self.failed) / done * 100 if done > 0 else 0,
            },
            "bytes": self.bytes,
            "throughput_ops_per_sec": round(self.throughput_ops_per_sec, 2),
            "bytes_per_sec": round(self.bytes_per_sec, 2),
            "latency": self.latency_stats().to_dict(),
        }
