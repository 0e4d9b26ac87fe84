"""
Workload Factory.

Builds the workload matching a WorkloadConfig's ``kind`` tag.
"""

from mdbench.benchmark.fill_context_edges import FillContextEdges
from mdbench.benchmark.read_nodes_via_context_edges import ReadNodesViaContextEdges
from mdbench.benchmark.sampler import create_sampler
from mdbench.benchmark.work_items import WorkItemGenerator
from mdbench.benchmark.workload import Workload
from mdbench.config.workload_config import WorkloadConfig


def create_workload(
    config: WorkloadConfig,
    sampler: str = "zipf",
    seed: int | None = None,
) -> Workload:
    """
    Create an unprepared workload.

    Args:
        config: Workload configuration
        sampler: Popularity sampler name
        seed: Seed for both the sampler and the edge-count draws
    """
    generator = WorkItemGenerator(sampler=create_sampler(sampler, seed=seed), seed=seed)
    family = config.workload

    if family.kind == "fill_context_edges":
        return FillContextEdges(family, config.num_operations, generator)
    elif family.kind == "read_nodes_via_context_edges":
        return ReadNodesViaContextEdges(family, config.num_operations, generator)
    raise ValueError(f"Unknown workload kind: {family.kind}")
