"""
FillContextEdges Workload.

Inserts attributions (artifact -> context) or associations
(execution -> context) between nodes that already exist in the store.
"""

from mdbench.benchmark.work_items import (
    FILL_EDGE_KINDS,
    FillContextEdgesWorkItem,
    StoreSnapshot,
    WorkItemGenerator,
)
from mdbench.benchmark.workload import Workload
from mdbench.config.workload_config import FillContextEdgesConfig
from mdbench.store.base import MetadataStore
from mdbench.store.schema import NodeKind


class FillContextEdges(Workload[FillContextEdgesWorkItem]):
    """
    Write workload for context edges.

    Each operation inserts one batch whose size is drawn from
    ``config.num_edges``; endpoints are sampled with the configured
    non-context and context popularity.
    """

    name = "fill_context_edges"

    def __init__(
        self,
        config: FillContextEdgesConfig,
        num_operations: int,
        generator: WorkItemGenerator | None = None,
    ):
        super().__init__(num_operations, generator)
        self.config = config
        self.edge_kind = FILL_EDGE_KINDS[config.specification]
        self.description = (
            f"Insert {config.num_edges.minimum}-{config.num_edges.maximum} "
            f"{self.edge_kind.value} edges per operation"
        )

    def _capture_snapshot(self, store: MetadataStore) -> StoreSnapshot:
        return StoreSnapshot.capture(
            store,
            node_kinds=(self.edge_kind.non_context_kind, NodeKind.CONTEXT),
        )

    def _generate(self, snapshot: StoreSnapshot) -> list[FillContextEdgesWorkItem]:
        return self._generator.generate(self.config, self.num_operations, snapshot)

    def _execute_item(self, item: FillContextEdgesWorkItem, store: MetadataStore) -> int:
        return store.insert_edges(item.edge_kind, item.endpoints)
