"""
ReadNodesViaContextEdges Workload.

Reads the nodes reachable from an anchor across existing context edges,
e.g. all artifacts attributed to a context.
"""

from mdbench.benchmark.work_items import (
    READ_ROUTES,
    ReadNodesWorkItem,
    StoreSnapshot,
    WorkItemGenerator,
)
from mdbench.benchmark.workload import Workload
from mdbench.config.workload_config import ReadNodesViaContextEdgesConfig
from mdbench.store.base import MetadataStore


class ReadNodesViaContextEdges(Workload[ReadNodesWorkItem]):
    """Read workload; anchors are drawn from nodes that have at least one edge."""

    name = "read_nodes_via_context_edges"

    def __init__(
        self,
        config: ReadNodesViaContextEdgesConfig,
        num_operations: int,
        generator: WorkItemGenerator | None = None,
    ):
        super().__init__(num_operations, generator)
        self.config = config
        self.route = READ_ROUTES[config.specification]
        self.description = f"Read {config.specification.value.lower()}"

    def _capture_snapshot(self, store: MetadataStore) -> StoreSnapshot:
        return StoreSnapshot.capture(store, edge_kinds=(self.route.edge_kind,))

    def _generate(self, snapshot: StoreSnapshot) -> list[ReadNodesWorkItem]:
        return self._generator.generate(self.config, self.num_operations, snapshot)

    def _execute_item(self, item: ReadNodesWorkItem, store: MetadataStore) -> int:
        nodes = store.get_connected_nodes(item.anchor_kind, item.anchor_id, item.target_kind)
        return sum(node.byte_size() for node in nodes)
