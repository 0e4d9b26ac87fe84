"""
Workload Configuration Models.

A WorkloadConfig selects exactly one workload family through the ``kind``
discriminator and carries the total number of operations. A BenchConfig
bundles several workloads with the thread environment they run under.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, model_validator


class PopularityConfig(BaseModel):
    """
    Skew of entity selection.

    Higher concentration gives near-uniform selection; lower concentration
    lets a small subset of entities dominate.
    """

    concentration: float = Field(default=1.0, gt=0, description="Concentration parameter")


class UniformRange(BaseModel):
    """Inclusive integer range sampled uniformly."""

    minimum: int = Field(..., ge=1, description="Inclusive lower bound")
    maximum: int = Field(..., ge=1, description="Inclusive upper bound")

    @model_validator(mode="after")
    def check_bounds(self) -> "UniformRange":
        if self.maximum < self.minimum:
            raise ValueError(f"maximum ({self.maximum}) must be >= minimum ({self.minimum})")
        return self


class FillContextEdgesSpecification(str, Enum):
    """Which context edge kind to write."""

    ATTRIBUTION = "ATTRIBUTION"
    ASSOCIATION = "ASSOCIATION"


class ReadNodesViaContextEdgesSpecification(str, Enum):
    """Which nodes to read across existing context edges."""

    ARTIFACTS_BY_CONTEXT = "ARTIFACTS_BY_CONTEXT"
    EXECUTIONS_BY_CONTEXT = "EXECUTIONS_BY_CONTEXT"
    CONTEXTS_BY_ARTIFACT = "CONTEXTS_BY_ARTIFACT"
    CONTEXTS_BY_EXECUTION = "CONTEXTS_BY_EXECUTION"


class FillContextEdgesConfig(BaseModel):
    """Writes attributions or associations between existing nodes and contexts."""

    kind: Literal["fill_context_edges"] = "fill_context_edges"
    specification: FillContextEdgesSpecification
    non_context_node_popularity: PopularityConfig = Field(default_factory=PopularityConfig)
    context_node_popularity: PopularityConfig = Field(default_factory=PopularityConfig)
    num_edges: UniformRange = Field(..., description="Edges inserted per operation")


class ReadNodesViaContextEdgesConfig(BaseModel):
    """Reads the nodes connected to an anchor node through context edges."""

    kind: Literal["read_nodes_via_context_edges"] = "read_nodes_via_context_edges"
    specification: ReadNodesViaContextEdgesSpecification
    anchor_popularity: PopularityConfig = Field(
        default_factory=lambda: PopularityConfig(concentration=1000.0)
    )


WorkloadFamilyConfig = Annotated[
    Union[FillContextEdgesConfig, ReadNodesViaContextEdgesConfig],
    Field(discriminator="kind"),
]


class WorkloadConfig(BaseModel):
    """One workload family plus its operation count."""

    num_operations: int = Field(..., ge=0, description="Total operations to run")
    workload: WorkloadFamilyConfig


class ThreadEnvConfig(BaseModel):
    """Concurrency of a benchmark run."""

    num_threads: int = Field(default=1, ge=1, description="Concurrent worker threads")


class SeedDataConfig(BaseModel):
    """Types and nodes inserted before any workload runs."""

    num_types: int = Field(default=0, ge=0, description="Types per node kind")
    num_nodes: int = Field(default=0, ge=0, description="Nodes per node kind")

    @model_validator(mode="after")
    def check_types_for_nodes(self) -> "SeedDataConfig":
        if self.num_nodes > 0 and self.num_types == 0:
            raise ValueError("num_types must be positive when num_nodes is")
        return self


class BenchConfig(BaseModel):
    """Complete benchmark description."""

    workload_configs: list[WorkloadConfig] = Field(default_factory=list)
    thread_env_config: ThreadEnvConfig = Field(default_factory=ThreadEnvConfig)
    seed: int | None = Field(default=None, description="Random seed for work item generation")
    seed_data: SeedDataConfig | None = Field(default=None)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BenchConfig":
        return cls.model_validate(data)


def load_bench_config(path: str | Path) -> BenchConfig:
    """Load a benchmark configuration from a YAML or JSON file."""
    path = Path(path)
    if path.suffix in (".yaml", ".yml"):
        import yaml

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    elif path.suffix == ".json":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    else:
        raise ValueError(f"Unsupported file format: {path.suffix}")

    return BenchConfig.from_dict(data or {})
