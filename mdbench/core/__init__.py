"""
Core Infrastructure Module.

Provides the error taxonomy shared by the store adapters and workloads.
"""

from mdbench.core.errors import (
    BenchmarkError,
    EmptyPopulation,
    InsufficientPopulation,
    StoreOperationFailed,
    WorkloadStateError,
)

__all__ = [
    "BenchmarkError",
    "EmptyPopulation",
    "InsufficientPopulation",
    "StoreOperationFailed",
    "WorkloadStateError",
]
