"""
Benchmark Runner.

Prepares workloads, executes them from a pool of worker threads, and
collects their statistics.
"""

import json
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog

from mdbench.benchmark.registry import create_workload
from mdbench.benchmark.stats import ThreadStats
from mdbench.benchmark.util import insert_nodes_in_db, insert_types_in_db
from mdbench.benchmark.workload import Workload
from mdbench.config.workload_config import BenchConfig
from mdbench.core.errors import StoreOperationFailed
from mdbench.observability.logging import LogContext
from mdbench.store.base import MetadataStore

logger = structlog.get_logger(__name__)


@dataclass
class WorkloadResult:
    """Result of running one workload."""

    name: str
    description: str
    num_operations: int
    stats: ThreadStats
    num_threads: int = 1
    aborted: bool = False
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "num_operations": self.num_operations,
            "num_threads": self.num_threads,
            "aborted": self.aborted,
            "stats": self.stats.to_dict(),
            "errors": self.errors[:10],  # Limit errors in output
        }


class ThreadRunner:
    """
    Runs workloads against one shared store.

    Features:
    - Worker threads over disjoint index sets
    - One lock-guarded ThreadStats per workload
    - Failed operations tallied, optionally aborting the workload
    - Result persistence
    """

    def __init__(
        self,
        store: MetadataStore,
        num_threads: int = 1,
        abort_on_failure: bool = False,
        report_interval: int = 1000,
        output_dir: str | None = None,
    ):
        if num_threads < 1:
            raise ValueError(f"num_threads must be >= 1, got {num_threads}")
        self.store = store
        self.num_threads = num_threads
        self.abort_on_failure = abort_on_failure
        self.report_interval = report_interval
        self.output_dir = output_dir
        self._results: list[WorkloadResult] = []

    def run_workload(self, workload: Workload) -> WorkloadResult:
        """
        Prepare and execute one workload.

        prepare() errors propagate: the workload does not start.
        """
        with LogContext(workload=workload.name):
            workload.prepare(self.store)

            stats = ThreadStats()
            result = WorkloadResult(
                name=workload.name,
                description=workload.description,
                num_operations=workload.num_operations,
                stats=stats,
                num_threads=self.num_threads,
            )
            errors_lock = threading.Lock()
            abort = threading.Event()

            def worker(worker_index: int) -> None:
                with LogContext(workload=workload.name, worker=worker_index):
                    run_indices(worker_index)

            def run_indices(worker_index: int) -> None:
                for index in range(worker_index, workload.num_operations, self.num_threads):
                    if abort.is_set():
                        return
                    try:
                        op_stats = workload.execute(index, self.store)
                    except StoreOperationFailed as e:
                        done = stats.update(e.op_stats)
                        with errors_lock:
                            result.errors.append(f"Operation {index} failed: {e}")
                        logger.warning("Operation failed", index=index, error=str(e))
                        if self.abort_on_failure:
                            abort.set()
                    else:
                        done = stats.update(op_stats)
                    if done % self.report_interval == 0:
                        logger.info("Progress", done=done, total=workload.num_operations)

            logger.info(
                "Starting workload",
                num_operations=workload.num_operations,
                num_threads=self.num_threads,
            )
            stats.start()
            with ThreadPoolExecutor(
                max_workers=self.num_threads, thread_name_prefix="mdbench-worker"
            ) as executor:
                futures = [executor.submit(worker, w) for w in range(self.num_threads)]
                for future in futures:
                    future.result()
            stats.stop()
            workload.tear_down()

            result.aborted = abort.is_set()
            logger.info(
                "Workload completed",
                done=stats.done,
                failed=stats.failed,
                bytes=stats.bytes,
                throughput=f"{stats.throughput_ops_per_sec:.2f} ops/sec",
                aborted=result.aborted,
            )

        self._results.append(result)
        if self.output_dir:
            self._save_result(result)
        return result

    def run(
        self,
        bench_config: BenchConfig,
        sampler: str = "zipf",
    ) -> list[WorkloadResult]:
        """Seed the store if configured, then run every workload in order."""
        if bench_config.seed_data is not None:
            seed_data = bench_config.seed_data
            insert_types_in_db(self.store, *[seed_data.num_types] * 3)
            insert_nodes_in_db(self.store, *[seed_data.num_nodes] * 3, seed=bench_config.seed)

        results = []
        for position, workload_config in enumerate(bench_config.workload_configs):
            seed = bench_config.seed + position if bench_config.seed is not None else None
            workload = create_workload(workload_config, sampler=sampler, seed=seed)
            results.append(self.run_workload(workload))
        return results

    def _save_result(self, result: WorkloadResult) -> None:
        """Save workload result to file."""
        output_dir = Path(self.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
        filepath = output_dir / f"{result.name}_{timestamp}.json"

        with open(filepath, "w") as f:
            json.dump(result.to_dict(), f, indent=2)

        logger.info("Workload result saved", path=str(filepath))

    def get_results(self) -> list[dict[str, Any]]:
        """Get all workload results."""
        return [r.to_dict() for r in self._results]

    def get_summary(self) -> dict[str, Any]:
        """Get summary of all workload runs."""
        if not self._results:
            return {"message": "No workloads have been run"}

        total = ThreadStats()
        for r in self._results:
            total.merge(r.stats)

        return {
            "total_workloads": len(self._results),
            "total": {
                "done": total.done,
                "failed": total.failed,
                "bytes": total.bytes,
                "elapsed_seconds": round(total.elapsed_seconds, 6),
            },
            "workloads": [
                {
                    "name": r.name,
                    "done": r.stats.done,
                    "failed": r.stats.failed,
                    "bytes": r.stats.bytes,
                    "elapsed_seconds": round(r.stats.elapsed_seconds, 6),
                    "throughput_ops_per_sec": round(r.stats.throughput_ops_per_sec, 2),
                    "p99_latency_ms": round(r.stats.latency_stats().p99_ms, 3),
                }
                for r in self._results
            ],
        }
