"""
Configuration Module.

Runtime settings and declarative benchmark configuration.
"""

from mdbench.config.settings import Settings, get_settings
from mdbench.config.workload_config import (
    BenchConfig,
    FillContextEdgesConfig,
    FillContextEdgesSpecification,
    PopularityConfig,
    ReadNodesViaContextEdgesConfig,
    ReadNodesViaContextEdgesSpecification,
    SeedDataConfig,
    ThreadEnvConfig,
    UniformRange,
    WorkloadConfig,
    load_bench_config,
)

__all__ = [
    "Settings",
    "get_settings",
    "BenchConfig",
    "FillContextEdgesConfig",
    "FillContextEdgesSpecification",
    "PopularityConfig",
    "ReadNodesViaContextEdgesConfig",
    "ReadNodesViaContextEdgesSpecification",
    "SeedDataConfig",
    "ThreadEnvConfig",
    "UniformRange",
    "WorkloadConfig",
    "load_bench_config",
]
