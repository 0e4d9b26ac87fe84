"""
Metadata Store Module.

Synchronous graph metadata store interface and its backends.
"""

from mdbench.store.base import MetadataStore, edge_kind_between
from mdbench.store.factory import create_metadata_store
from mdbench.store.memory import InMemoryMetadataStore
from mdbench.store.neo4j_store import Neo4jMetadataStore
from mdbench.store.schema import (
    Edge,
    EdgeKind,
    Node,
    NodeKind,
    NodeType,
)

__all__ = [
    # Schema
    "NodeKind",
    "EdgeKind",
    "NodeType",
    "Node",
    "Edge",
    # Stores
    "MetadataStore",
    "InMemoryMetadataStore",
    "Neo4jMetadataStore",
    "create_metadata_store",
    "edge_kind_between",
]
