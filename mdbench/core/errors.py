"""
Benchmark Error Taxonomy.

Errors raised by the workload engine:
- EmptyPopulation: sampler asked to choose from zero candidates
- InsufficientPopulation: a required entity kind is absent from the store
- StoreOperationFailed: the store call itself failed
- WorkloadStateError: a workload was driven out of lifecycle order
"""

from typing import Any


class BenchmarkError(Exception):
    """Base class for workload engine errors."""

    pass


class EmptyPopulation(BenchmarkError):
    """Raised when a sampler is asked to choose from an empty population."""

    def __init__(self, population_size: int):
        super().__init__(f"Cannot sample from a population of size {population_size}")
        self.population_size = population_size


class InsufficientPopulation(BenchmarkError):
    """Raised when a work item cannot be built because an entity kind is missing."""

    def __init__(self, message: str, entity_kind: str):
        super().__init__(message)
        self.entity_kind = entity_kind


class StoreOperationFailed(BenchmarkError):
    """
    Raised when a metadata store call fails.

    When raised out of a workload's execute(), ``op_stats`` carries the
    failed OpStats so the driver can still fold it into its totals.
    """

    def __init__(self, message: str, operation: str = "unknown", op_stats: Any = None):
        super().__init__(message)
        self.operation = operation
        self.op_stats = op_stats


class WorkloadStateError(BenchmarkError):
    """Raised when prepare/execute/tear_down are called out of order."""

    def __init__(self, workload: str, state: str, action: str):
        super().__init__(f"Cannot {action} workload '{workload}' in state '{state}'")
        self.workload = workload
        self.state = state
        self.action = action
