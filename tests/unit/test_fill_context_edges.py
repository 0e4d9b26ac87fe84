"""
Unit Tests for the FillContextEdges Workload.
"""

from collections.abc import Sequence

import pytest

from mdbench.benchmark.fill_context_edges import FillContextEdges
from mdbench.benchmark.stats import ThreadStats
from mdbench.benchmark.util import insert_nodes_in_db, insert_types_in_db
from mdbench.benchmark.work_items import WorkItemGenerator
from mdbench.benchmark.workload import WorkloadState
from mdbench.config.workload_config import FillContextEdgesSpecification
from mdbench.core.errors import InsufficientPopulation, StoreOperationFailed, WorkloadStateError
from mdbench.store.memory import InMemoryMetadataStore
from mdbench.store.schema import EdgeKind

NUM_OPERATIONS = 100


class FailingInsertStore(InMemoryMetadataStore):
    """Store whose edge inserts always fail."""

    def insert_edges(self, kind: EdgeKind, endpoints: Sequence[tuple[int, int]]) -> int:
        raise StoreOperationFailed("disk full", operation="insert_edges")


@pytest.mark.parametrize(
    "specification,edge_kind",
    [
        (FillContextEdgesSpecification.ATTRIBUTION, EdgeKind.ATTRIBUTION),
        (FillContextEdgesSpecification.ASSOCIATION, EdgeKind.ASSOCIATION),
    ],
)
class TestFillContextEdgesSpecifications:
    """Data-driven cases, one fresh store per specification."""

    def test_prepare(self, store_with_nodes, fill_config_factory, specification, edge_kind) -> None:
        """Test that prepare builds exactly num_operations work items."""
        workload = FillContextEdges(fill_config_factory(specification), NUM_OPERATIONS)

        workload.prepare(store_with_nodes)

        assert workload.state is WorkloadState.PREPARED
        assert len(workload.work_items) == NUM_OPERATIONS
        assert workload.num_operations == NUM_OPERATIONS
        assert all(1 <= item.num_edges <= 10 for item in workload.work_items)
        assert all(item.edge_kind is edge_kind for item in workload.work_items)

    def test_execute(self, store_with_nodes, fill_config_factory, specification, edge_kind) -> None:
        """Test that every item inserts its whole batch and reports bytes."""
        workload = FillContextEdges(fill_config_factory(specification), NUM_OPERATIONS)
        workload.prepare(store_with_nodes)

        stats = ThreadStats()
        stats.start()
        for i in range(workload.num_operations):
            op_stats = workload.execute(i, store_with_nodes)
            assert op_stats.succeeded
            assert op_stats.bytes_transferred > 0
            stats.update(op_stats)
        stats.stop()

        expected_edges = sum(item.num_edges for item in workload.work_items)
        assert stats.done == NUM_OPERATIONS
        assert stats.bytes > 0
        assert store_with_nodes.count(edge_kind) == expected_edges


class TestFillContextEdgesLifecycle:
    """Test cases for lifecycle and failure handling."""

    def test_prepare_on_empty_store(self, store, fill_config_factory) -> None:
        """Test that a missing population fails prepare instead of yielding nothing."""
        workload = FillContextEdges(
            fill_config_factory(FillContextEdgesSpecification.ATTRIBUTION), NUM_OPERATIONS
        )

        with pytest.raises(InsufficientPopulation):
            workload.prepare(store)

        assert workload.state is WorkloadState.UNINITIALIZED
        assert workload.work_items == ()

    def test_execute_before_prepare(self, store_with_nodes, fill_config_factory) -> None:
        workload = FillContextEdges(
            fill_config_factory(FillContextEdgesSpecification.ATTRIBUTION), 1
        )

        with pytest.raises(WorkloadStateError):
            workload.execute(0, store_with_nodes)

    def test_prepare_twice(self, store_with_nodes, fill_config_factory) -> None:
        workload = FillContextEdges(
            fill_config_factory(FillContextEdgesSpecification.ATTRIBUTION), 1
        )
        workload.prepare(store_with_nodes)

        with pytest.raises(WorkloadStateError):
            workload.prepare(store_with_nodes)

    @pytest.mark.parametrize("index", [-1, 5])
    def test_index_out_of_range(self, store_with_nodes, fill_config_factory, index: int) -> None:
        workload = FillContextEdges(
            fill_config_factory(FillContextEdgesSpecification.ATTRIBUTION), 5
        )
        workload.prepare(store_with_nodes)

        with pytest.raises(IndexError):
            workload.execute(index, store_with_nodes)

    def test_zero_operations(self, store_with_nodes, fill_config_factory) -> None:
        workload = FillContextEdges(
            fill_config_factory(FillContextEdgesSpecification.ASSOCIATION), 0
        )

        workload.prepare(store_with_nodes)

        assert workload.work_items == ()

    def test_tear_down(self, store_with_nodes, fill_config_factory) -> None:
        workload = FillContextEdges(
            fill_config_factory(FillContextEdgesSpecification.ATTRIBUTION), 3
        )
        workload.prepare(store_with_nodes)

        workload.tear_down()

        assert workload.state is WorkloadState.DONE
        with pytest.raises(WorkloadStateError):
            workload.execute(0, store_with_nodes)

    def test_same_seed_same_plan(self, store_with_nodes, fill_config_factory) -> None:
        config = fill_config_factory(FillContextEdgesSpecification.ATTRIBUTION, concentration=0.5)
        first = FillContextEdges(config, 20, WorkItemGenerator(seed=8))
        second = FillContextEdges(config, 20, WorkItemGenerator(seed=8))

        first.prepare(store_with_nodes)
        second.prepare(store_with_nodes)

        assert first.work_items == second.work_items

    def test_store_failure_surfaces_failed_op_stats(self, fill_config_factory) -> None:
        """Test that a failed insert is raised with a failed OpStats and not retried."""
        store = FailingInsertStore()
        insert_types_in_db(store, 1, 1, 1)
        insert_nodes_in_db(store, 3, 3, 3, seed=0)
        workload = FillContextEdges(
            fill_config_factory(FillContextEdgesSpecification.ATTRIBUTION), 2
        )
        workload.prepare(store)

        with pytest.raises(StoreOperationFailed) as exc_info:
            workload.execute(0, store)

        op_stats = exc_info.value.op_stats
        assert op_stats is not None
        assert not op_stats.succeeded
        assert op_stats.bytes_transferred == 0
        assert exc_info.value.operation == "insert_edges"
        # A failed item does not affect the next one's plan
        assert workload.state is WorkloadState.PREPARED
