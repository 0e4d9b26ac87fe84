"""
Metadata Store Schema Models.

Defines node kinds, edge kinds, and the value models exchanged with the store.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class NodeKind(str, Enum):
    """Node kinds in the metadata graph."""

    ARTIFACT = "artifact"
    EXECUTION = "execution"
    CONTEXT = "context"


class EdgeKind(str, Enum):
    """Context edge kinds. Every edge points from a non-context node to a context."""

    ATTRIBUTION = "attribution"  # Artifact -> Context
    ASSOCIATION = "association"  # Execution -> Context

    @property
    def non_context_kind(self) -> NodeKind:
        if self is EdgeKind.ATTRIBUTION:
            return NodeKind.ARTIFACT
        return NodeKind.EXECUTION


class NodeType(BaseModel):
    """Type registered for a node kind."""

    id: int | None = Field(default=None, description="Store-assigned identifier")
    kind: NodeKind = Field(..., description="Kind of node this type applies to")
    name: str = Field(..., description="Unique type name within its kind")


class Node(BaseModel):
    """Artifact, execution, or context node."""

    id: int | None = Field(default=None, description="Store-assigned identifier")
    kind: NodeKind = Field(..., description="Node kind")
    type_id: int = Field(..., description="Identifier of the node's type")
    name: str = Field(default="", description="Node name")
    properties: dict[str, Any] = Field(default_factory=dict, description="Opaque properties")

    def byte_size(self) -> int:
        """Size of the serialized node in bytes."""
        return len(self.model_dump_json().encode("utf-8"))


class Edge(BaseModel):
    """Attribution or association between a non-context node and a context."""

    kind: EdgeKind = Field(..., description="Edge kind")
    non_context_id: int = Field(..., description="Artifact or execution id")
    context_id: int = Field(..., description="Context id")

    def byte_size(self) -> int:
        """Size of the serialized edge in bytes."""
        return len(self.model_dump_json().encode("utf-8"))
