"""
Work Items and their Generator.

A work item is the fully resolved plan of one future operation. Workloads
build all of their items once during prepare() from a StoreSnapshot, so
execution never has to consult the store to decide what to do.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

import numpy as np
import structlog

from mdbench.benchmark.sampler import PopularitySampler, ZipfPopularitySampler
from mdbench.config.workload_config import (
    FillContextEdgesConfig,
    FillContextEdgesSpecification,
    ReadNodesViaContextEdgesConfig,
    ReadNodesViaContextEdgesSpecification,
)
from mdbench.core.errors import InsufficientPopulation
from mdbench.store.base import MetadataStore
from mdbench.store.schema import Edge, EdgeKind, NodeKind

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FillContextEdgesWorkItem:
    """Edges to insert in one operation."""

    edge_kind: EdgeKind
    endpoints: tuple[tuple[int, int], ...]

    @property
    def num_edges(self) -> int:
        return len(self.endpoints)


@dataclass(frozen=True)
class ReadNodesWorkItem:
    """Anchor whose neighbors are read in one operation."""

    anchor_kind: NodeKind
    anchor_id: int
    target_kind: NodeKind
    edge_kind: EdgeKind


WorkItem = FillContextEdgesWorkItem | ReadNodesWorkItem


@dataclass(frozen=True)
class ContextEdgeRoute:
    """Direction of a read across context edges."""

    anchor_kind: NodeKind
    edge_kind: EdgeKind
    target_kind: NodeKind


READ_ROUTES: dict[ReadNodesViaContextEdgesSpecification, ContextEdgeRoute] = {
    ReadNodesViaContextEdgesSpecification.ARTIFACTS_BY_CONTEXT: ContextEdgeRoute(
        NodeKind.CONTEXT, EdgeKind.ATTRIBUTION, NodeKind.ARTIFACT
    ),
    ReadNodesViaContextEdgesSpecification.EXECUTIONS_BY_CONTEXT: ContextEdgeRoute(
        NodeKind.CONTEXT, EdgeKind.ASSOCIATION, NodeKind.EXECUTION
    ),
    ReadNodesViaContextEdgesSpecification.CONTEXTS_BY_ARTIFACT: ContextEdgeRoute(
        NodeKind.ARTIFACT, EdgeKind.ATTRIBUTION, NodeKind.CONTEXT
    ),
    ReadNodesViaContextEdgesSpecification.CONTEXTS_BY_EXECUTION: ContextEdgeRoute(
        NodeKind.EXECUTION, EdgeKind.ASSOCIATION, NodeKind.CONTEXT
    ),
}

FILL_EDGE_KINDS: dict[FillContextEdgesSpecification, EdgeKind] = {
    FillContextEdgesSpecification.ATTRIBUTION: EdgeKind.ATTRIBUTION,
    FillContextEdgesSpecification.ASSOCIATION: EdgeKind.ASSOCIATION,
}


@dataclass(frozen=True)
class StoreSnapshot:
    """Read-only view of what existed in the store at preparation time."""

    node_ids: dict[NodeKind, tuple[int, ...]] = field(default_factory=dict)
    edges: dict[EdgeKind, tuple[Edge, ...]] = field(default_factory=dict)

    @classmethod
    def capture(
        cls,
        store: MetadataStore,
        node_kinds: Iterable[NodeKind] = (),
        edge_kinds: Iterable[EdgeKind] = (),
    ) -> "StoreSnapshot":
        """Query the store once for the given node and edge kinds."""
        snapshot = cls(
            node_ids={kind: tuple(store.get_node_ids(kind)) for kind in node_kinds},
            edges={kind: tuple(store.get_edges(kind)) for kind in edge_kinds},
        )
        logger.debug(
            "Captured store snapshot",
            nodes={k.value: len(v) for k, v in snapshot.node_ids.items()},
            edges={k.value: len(v) for k, v in snapshot.edges.items()},
        )
        return snapshot

    def nodes_of(self, kind: NodeKind) -> tuple[int, ...]:
        return self.node_ids.get(kind, ())

    def edge_participants(self, edge_kind: EdgeKind, node_kind: NodeKind) -> tuple[int, ...]:
        """Sorted ids of ``node_kind`` nodes at either end of at least one edge."""
        if node_kind is NodeKind.CONTEXT:
            ids = {e.context_id for e in self.edges.get(edge_kind, ())}
        elif node_kind is edge_kind.non_context_kind:
            ids = {e.non_context_id for e in self.edges.get(edge_kind, ())}
        else:
            ids = set()
        return tuple(sorted(ids))


class WorkItemGenerator:
    """Builds the ordered work item list for a workload configuration."""

    def __init__(
        self,
        sampler: PopularitySampler | None = None,
        seed: int | None = None,
    ):
        self._sampler = sampler or ZipfPopularitySampler(seed=seed)
        self._rng = np.random.default_rng(seed)

    def generate(
        self,
        config: FillContextEdgesConfig | ReadNodesViaContextEdgesConfig,
        num_items: int,
        snapshot: StoreSnapshot,
    ) -> list[WorkItem]:
        """
        Generate ``num_items`` work items.

        Raises:
            InsufficientPopulation: a population the configuration needs is empty
        """
        if config.kind == "fill_context_edges":
            return self._generate_fill_context_edges(config, num_items, snapshot)
        elif config.kind == "read_nodes_via_context_edges":
            return self._generate_read_nodes(config, num_items, snapshot)
        raise ValueError(f"Unknown workload kind: {config.kind}")

    def _generate_fill_context_edges(
        self,
        config: FillContextEdgesConfig,
        num_items: int,
        snapshot: StoreSnapshot,
    ) -> list[WorkItem]:
        edge_kind = FILL_EDGE_KINDS[config.specification]
        non_context_ids = snapshot.nodes_of(edge_kind.non_context_kind)
        context_ids = snapshot.nodes_of(NodeKind.CONTEXT)

        for kind, population in (
            (edge_kind.non_context_kind, non_context_ids),
            (NodeKind.CONTEXT, context_ids),
        ):
            if not population:
                raise InsufficientPopulation(
                    f"Cannot fill {edge_kind.value} edges: no {kind.value} nodes exist",
                    entity_kind=kind.value,
                )

        items: list[WorkItem] = []
        for _ in range(num_items):
            num_edges = int(
                self._rng.integers(
                    config.num_edges.minimum, config.num_edges.maximum, endpoint=True
                )
            )
            endpoints = tuple(
                (
                    non_context_ids[
                        self._sampler.sample(
                            len(non_context_ids),
                            config.non_context_node_popularity.concentration,
                        )
                    ],
                    context_ids[
                        self._sampler.sample(
                            len(context_ids),
                            config.context_node_popularity.concentration,
                        )
                    ],
                )
                for _ in range(num_edges)
            )
            items.append(FillContextEdgesWorkItem(edge_kind=edge_kind, endpoints=endpoints))
        return items

    def _generate_read_nodes(
        self,
        config: ReadNodesViaContextEdgesConfig,
        num_items: int,
        snapshot: StoreSnapshot,
    ) -> list[WorkItem]:
        route = READ_ROUTES[config.specification]
        anchors = snapshot.edge_participants(route.edge_kind, route.anchor_kind)

        if not anchors:
            raise InsufficientPopulation(
                f"Cannot read {route.target_kind.value} nodes: no {route.anchor_kind.value} "
                f"takes part in a {route.edge_kind.value} edge",
                entity_kind=route.anchor_kind.value,
            )

        return [
            ReadNodesWorkItem(
                anchor_kind=route.anchor_kind,
                anchor_id=anchors[
                    self._sampler.sample(len(anchors), config.anchor_popularity.concentration)
                ],
                target_kind=route.target_kind,
                edge_kind=route.edge_kind,
            )
            for _ in range(num_items)
        ]
