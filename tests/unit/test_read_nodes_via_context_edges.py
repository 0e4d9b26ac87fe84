"""
Unit Tests for the ReadNodesViaContextEdges Workload.

Every test runs once per read specification against a freshly seeded store:
100 types and 100 nodes of each kind, plus 100 attribution and 100
association fill operations with 1-10 edges each.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from mdbench.benchmark.read_nodes_via_context_edges import ReadNodesViaContextEdges
from mdbench.benchmark.stats import ThreadStats
from mdbench.benchmark.work_items import WorkItemGenerator
from mdbench.config.workload_config import (
    ReadNodesViaContextEdgesConfig,
    ReadNodesViaContextEdgesSpecification,
)
from mdbench.core.errors import InsufficientPopulation, StoreOperationFailed
from mdbench.store.memory import InMemoryMetadataStore

NUM_OPERATIONS = 100


def make_workload(
    specification: ReadNodesViaContextEdgesSpecification,
    num_operations: int = NUM_OPERATIONS,
    seed: int | None = None,
) -> ReadNodesViaContextEdges:
    config = ReadNodesViaContextEdgesConfig(specification=specification)
    return ReadNodesViaContextEdges(config, num_operations, WorkItemGenerator(seed=seed))


@pytest.fixture(params=list(ReadNodesViaContextEdgesSpecification), ids=lambda s: s.value)
def specification(request) -> ReadNodesViaContextEdgesSpecification:
    return request.param


class TestReadNodesViaContextEdges:
    """Test cases for ReadNodesViaContextEdges."""

    def test_prepare(self, store_with_edges, specification) -> None:
        """Test that prepare builds one work item per operation."""
        workload = make_workload(specification)

        workload.prepare(store_with_edges)

        assert workload.num_operations == NUM_OPERATIONS
        assert len(workload.work_items) == NUM_OPERATIONS

    def test_execute(self, store_with_edges, specification) -> None:
        """Test that every read succeeds and transfers bytes."""
        workload = make_workload(specification)
        workload.prepare(store_with_edges)

        stats = ThreadStats()
        stats.start()
        for i in range(workload.num_operations):
            op_stats = workload.execute(i, store_with_edges)
            assert op_stats.succeeded
            assert op_stats.bytes_transferred > 0
            stats.update(op_stats)
        stats.stop()

        assert stats.done == NUM_OPERATIONS
        assert stats.bytes > 0

    def test_concurrent_totals_match_sequential(self, store_with_edges, specification) -> None:
        """Test that aggregation does not depend on execution order."""
        workload = make_workload(specification, seed=21)
        workload.prepare(store_with_edges)

        sequential = ThreadStats()
        for i in range(workload.num_operations):
            sequential.update(workload.execute(i, store_with_edges))

        concurrent = ThreadStats()
        num_threads = 4

        def worker(offset: int) -> None:
            for i in range(offset, workload.num_operations, num_threads):
                concurrent.update(workload.execute(i, store_with_edges))

        with ThreadPoolExecutor(max_workers=num_threads) as executor:
            for future in [executor.submit(worker, w) for w in range(num_threads)]:
                future.result()

        assert concurrent.done == sequential.done == NUM_OPERATIONS
        assert concurrent.bytes == sequential.bytes

    def test_prepare_without_edges(self, store_with_nodes, specification) -> None:
        """Test that a store with nodes but no edges cannot be read from."""
        workload = make_workload(specification)

        with pytest.raises(InsufficientPopulation):
            workload.prepare(store_with_nodes)

    def test_prepare_on_empty_store(self, store, specification) -> None:
        workload = make_workload(specification)

        with pytest.raises(InsufficientPopulation):
            workload.prepare(store)

    def test_store_failure(self, store_with_edges, specification) -> None:
        """Test that a failed read is raised with a failed OpStats."""
        workload = make_workload(specification, num_operations=3)
        workload.prepare(store_with_edges)
        store_with_edges.close()

        with pytest.raises(StoreOperationFailed) as exc_info:
            workload.execute(0, store_with_edges)

        assert exc_info.value.op_stats.succeeded is False


def test_reads_see_only_existing_targets(store_with_edges: InMemoryMetadataStore) -> None:
    """Test that reads return nodes connected by edges inserted before prepare."""
    workload = make_workload(ReadNodesViaContextEdgesSpecification.ARTIFACTS_BY_CONTEXT, 20)
    workload.prepare(store_with_edges)

    for item in workload.work_items:
        nodes = store_with_edges.get_connected_nodes(
            item.anchor_kind, item.anchor_id, item.target_kind
        )
        assert nodes
        assert all(node.kind is item.target_kind for node in nodes)
