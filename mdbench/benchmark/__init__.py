"""
Workload Engine.

Generates and executes randomized read/write workloads against a graph
metadata store:
- Popularity-weighted entity sampling
- Two-phase workloads (prepare, then execute by index)
- Lock-guarded statistics aggregation across worker threads
"""

from mdbench.benchmark.fill_context_edges import FillContextEdges
from mdbench.benchmark.read_nodes_via_context_edges import ReadNodesViaContextEdges
from mdbench.benchmark.registry import create_workload
from mdbench.benchmark.runner import ThreadRunner, WorkloadResult
from mdbench.benchmark.sampler import (
    PopularitySampler,
    UniformPopularitySampler,
    ZipfPopularitySampler,
    create_sampler,
)
from mdbench.benchmark.stats import LatencyStats, OpStats, ThreadStats
from mdbench.benchmark.work_items import (
    FillContextEdgesWorkItem,
    ReadNodesWorkItem,
    StoreSnapshot,
    WorkItemGenerator,
)
from mdbench.benchmark.workload import Workload, WorkloadState

__all__ = [
    # Sampling
    "PopularitySampler",
    "UniformPopularitySampler",
    "ZipfPopularitySampler",
    "create_sampler",
    # Work items
    "FillContextEdgesWorkItem",
    "ReadNodesWorkItem",
    "StoreSnapshot",
    "WorkItemGenerator",
    # Workloads
    "Workload",
    "WorkloadState",
    "FillContextEdges",
    "ReadNodesViaContextEdges",
    "create_workload",
    # Statistics
    "OpStats",
    "LatencyStats",
    "ThreadStats",
    # Runner
    "ThreadRunner",
    "WorkloadResult",
]
