"""
In-Memory Metadata Store.

Dict-backed store used by tests and by the ``fake`` backend. Ids are
assigned per kind starting at 1, the way a relational store would assign
them per table.
"""

import threading
from collections import defaultdict
from collections.abc import Sequence

import structlog

from mdbench.core.errors import StoreOperationFailed
from mdbench.store.base import MetadataStore, edge_kind_between
from mdbench.store.schema import Edge, EdgeKind, Node, NodeKind, NodeType

logger = structlog.get_logger(__name__)


class InMemoryMetadataStore(MetadataStore):
    """Thread-safe in-memory metadata store."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._types: dict[NodeKind, dict[int, NodeType]] = {k: {} for k in NodeKind}
        self._nodes: dict[NodeKind, dict[int, Node]] = {k: {} for k in NodeKind}
        self._edges: dict[EdgeKind, list[Edge]] = {k: [] for k in EdgeKind}
        # (edge kind, node kind, node id) -> ids on the other side, one entry per edge
        self._adjacency: dict[tuple[EdgeKind, NodeKind, int], list[int]] = defaultdict(list)
        self._next_type_id: dict[NodeKind, int] = {k: 1 for k in NodeKind}
        self._next_node_id: dict[NodeKind, int] = {k: 1 for k in NodeKind}
        self._closed = False

    def _check_open(self, operation: str) -> None:
        if self._closed:
            raise StoreOperationFailed("Store is closed", operation=operation)

    def put_types(self, kind: NodeKind, names: Sequence[str]) -> list[int]:
        with self._lock:
            self._check_open("put_types")
            existing = {t.name: t.id for t in self._types[kind].values()}
            ids: list[int] = []
            for name in names:
                if name in existing:
                    ids.append(existing[name])
                    continue
                type_id = self._next_type_id[kind]
                self._next_type_id[kind] += 1
                self._types[kind][type_id] = NodeType(id=type_id, kind=kind, name=name)
                existing[name] = type_id
                ids.append(type_id)
            return ids

    def get_type_ids(self, kind: NodeKind) -> list[int]:
        with self._lock:
            self._check_open("get_type_ids")
            return sorted(self._types[kind])

    def put_nodes(self, nodes: Sequence[Node]) -> list[int]:
        with self._lock:
            self._check_open("put_nodes")
            for node in nodes:
                if node.type_id not in self._types[node.kind]:
                    raise StoreOperationFailed(
                        f"Unknown {node.kind.value} type id {node.type_id}",
                        operation="put_nodes",
                    )
            ids: list[int] = []
            for node in nodes:
                node_id = node.id
                if node_id is None:
                    node_id = self._next_node_id[node.kind]
                    self._next_node_id[node.kind] += 1
                else:
                    self._next_node_id[node.kind] = max(self._next_node_id[node.kind], node_id + 1)
                self._nodes[node.kind][node_id] = node.model_copy(update={"id": node_id})
                ids.append(node_id)
            return ids

    def get_node_ids(self, kind: NodeKind) -> list[int]:
        with self._lock:
            self._check_open("get_node_ids")
            return sorted(self._nodes[kind])

    def get_edges(self, kind: EdgeKind) -> list[Edge]:
        with self._lock:
            self._check_open("get_edges")
            return list(self._edges[kind])

    def count(self, kind: NodeKind | EdgeKind) -> int:
        with self._lock:
            self._check_open("count")
            if isinstance(kind, EdgeKind):
                return len(self._edges[kind])
            return len(self._nodes[kind])

    def insert_edges(
        self,
        kind: EdgeKind,
        endpoints: Sequence[tuple[int, int]],
    ) -> int:
        non_context_kind = kind.non_context_kind
        with self._lock:
            self._check_open("insert_edges")
            for non_context_id, context_id in endpoints:
                if non_context_id not in self._nodes[non_context_kind]:
                    raise StoreOperationFailed(
                        f"No {non_context_kind.value} with id {non_context_id}",
                        operation="insert_edges",
                    )
                if context_id not in self._nodes[NodeKind.CONTEXT]:
                    raise StoreOperationFailed(
                        f"No context with id {context_id}",
                        operation="insert_edges",
                    )

            bytes_written = 0
            for non_context_id, context_id in endpoints:
                edge = Edge(kind=kind, non_context_id=non_context_id, context_id=context_id)
                self._edges[kind].append(edge)
                self._adjacency[(kind, non_context_kind, non_context_id)].append(context_id)
                self._adjacency[(kind, NodeKind.CONTEXT, context_id)].append(non_context_id)
                bytes_written += edge.byte_size()
            return bytes_written

    def get_connected_nodes(
        self,
        anchor_kind: NodeKind,
        anchor_id: int,
        target_kind: NodeKind,
    ) -> list[Node]:
        edge_kind = edge_kind_between(anchor_kind, target_kind)
        if edge_kind is None:
            raise StoreOperationFailed(
                f"No context edge links {anchor_kind.value} and {target_kind.value}",
                operation="get_connected_nodes",
            )
        with self._lock:
            self._check_open("get_connected_nodes")
            if anchor_id not in self._nodes[anchor_kind]:
                raise StoreOperationFailed(
                    f"No {anchor_kind.value} with id {anchor_id}",
                    operation="get_connected_nodes",
                )
            target_ids = dict.fromkeys(self._adjacency.get((edge_kind, anchor_kind, anchor_id), []))
            return [self._nodes[target_kind][node_id] for node_id in target_ids]

    def close(self) -> None:
        with self._lock:
            if not self._closed:
                self._closed = True
                logger.debug("In-memory store closed")
