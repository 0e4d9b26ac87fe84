"""
Metadata Store Interface.

Synchronous API the benchmark drives. Every method raises
StoreOperationFailed when the underlying call fails; callers never see
backend-specific error types.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from mdbench.store.schema import Edge, EdgeKind, Node, NodeKind


class MetadataStore(ABC):
    """Abstract graph metadata store."""

    @abstractmethod
    def put_types(self, kind: NodeKind, names: Sequence[str]) -> list[int]:
        """
        Register node types.

        Args:
            kind: Node kind the types apply to
            names: Type names, unique within the kind

        Returns:
            Type ids in the same order as ``names``
        """

    @abstractmethod
    def get_type_ids(self, kind: NodeKind) -> list[int]:
        """Return the ids of all types registered for a node kind."""

    @abstractmethod
    def put_nodes(self, nodes: Sequence[Node]) -> list[int]:
        """Insert nodes and return their store-assigned ids."""

    @abstractmethod
    def get_node_ids(self, kind: NodeKind) -> list[int]:
        """Return the ids of all nodes of a kind."""

    @abstractmethod
    def get_edges(self, kind: EdgeKind) -> list[Edge]:
        """Return all edges of a kind."""

    @abstractmethod
    def count(self, kind: NodeKind | EdgeKind) -> int:
        """Count nodes or edges of a kind."""

    @abstractmethod
    def insert_edges(
        self,
        kind: EdgeKind,
        endpoints: Sequence[tuple[int, int]],
    ) -> int:
        """
        Insert context edges.

        Args:
            kind: Edge kind
            endpoints: (non_context_id, context_id) pairs; duplicates allowed

        Returns:
            Serialized size in bytes of the inserted edges
        """

    @abstractmethod
    def get_connected_nodes(
        self,
        anchor_kind: NodeKind,
        anchor_id: int,
        target_kind: NodeKind,
    ) -> list[Node]:
        """Return nodes of ``target_kind`` linked to the anchor by a context edge."""

    def close(self) -> None:
        """Release backend resources."""

    def __enter__(self) -> "MetadataStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def edge_kind_between(a: NodeKind, b: NodeKind) -> EdgeKind | None:
    """Edge kind that links two node kinds, or None if they cannot be linked."""
    kinds = {a, b}
    if kinds == {NodeKind.ARTIFACT, NodeKind.CONTEXT}:
        return EdgeKind.ATTRIBUTION
    if kinds == {NodeKind.EXECUTION, NodeKind.CONTEXT}:
        return EdgeKind.ASSOCIATION
    return None
