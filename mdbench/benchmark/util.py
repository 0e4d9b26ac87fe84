"""
Store Seeding Helpers.

Populate an empty store with types and nodes so that edge workloads have
something to connect.
"""

import random

import structlog

from mdbench.store.base import MetadataStore
from mdbench.store.schema import Node, NodeKind

logger = structlog.get_logger(__name__)


def insert_types_in_db(
    store: MetadataStore,
    num_artifact_types: int,
    num_execution_types: int,
    num_context_types: int,
) -> dict[NodeKind, list[int]]:
    """Insert ``<kind>_type_<i>`` types for each node kind and return their ids."""
    counts = {
        NodeKind.ARTIFACT: num_artifact_types,
        NodeKind.EXECUTION: num_execution_types,
        NodeKind.CONTEXT: num_context_types,
    }
    type_ids = {
        kind: store.put_types(kind, [f"{kind.value}_type_{i}" for i in range(count)])
        for kind, count in counts.items()
    }
    logger.info("Inserted types", **{k.value: len(v) for k, v in type_ids.items()})
    return type_ids


def insert_nodes_in_db(
    store: MetadataStore,
    num_artifacts: int,
    num_executions: int,
    num_contexts: int,
    seed: int | None = None,
) -> dict[NodeKind, list[int]]:
    """
    Insert nodes of randomly chosen existing types.

    Raises:
        ValueError: nodes were requested for a kind that has no types
    """
    rng = random.Random(seed)
    counts = {
        NodeKind.ARTIFACT: num_artifacts,
        NodeKind.EXECUTION: num_executions,
        NodeKind.CONTEXT: num_contexts,
    }

    node_ids: dict[NodeKind, list[int]] = {}
    for kind, count in counts.items():
        if count == 0:
            node_ids[kind] = []
            continue
        type_ids = store.get_type_ids(kind)
        if not type_ids:
            raise ValueError(f"Cannot insert {kind.value} nodes: no {kind.value} types exist")
        nodes = [
            Node(
                kind=kind,
                type_id=rng.choice(type_ids),
                name=f"{kind.value}_{i}",
                properties=_node_properties(kind, i, rng),
            )
            for i in range(count)
        ]
        node_ids[kind] = store.put_nodes(nodes)

    logger.info("Inserted nodes", **{k.value: len(v) for k, v in node_ids.items()})
    return node_ids


def _node_properties(kind: NodeKind, index: int, rng: random.Random) -> dict[str, object]:
    if kind is NodeKind.ARTIFACT:
        return {"uri": f"/data/artifact_{index}", "size": rng.randint(1, 1 << 20)}
    if kind is NodeKind.EXECUTION:
        return {"state": rng.choice(["NEW", "RUNNING", "COMPLETE", "FAILED"]), "attempt": 1}
    return {"owner": f"user_{rng.randint(0, 9)}"}
