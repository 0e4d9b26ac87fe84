"""
Workload Abstraction.

A workload is bound to one configuration and driven in two phases:
prepare() once, single-threaded, then execute(i) for each index, possibly
from many threads. Work items are read-only after prepare(), so concurrent
execute() calls need no locking here.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import Enum
from typing import Generic, TypeVar

import structlog

from mdbench.benchmark.stats import OpStats
from mdbench.benchmark.work_items import StoreSnapshot, WorkItemGenerator
from mdbench.core.errors import StoreOperationFailed, WorkloadStateError
from mdbench.store.base import MetadataStore

logger = structlog.get_logger(__name__)

ItemT = TypeVar("ItemT")


class WorkloadState(str, Enum):
    """Workload lifecycle states."""

    UNINITIALIZED = "uninitialized"
    PREPARED = "prepared"
    DONE = "done"


class Workload(ABC, Generic[ItemT]):
    """Abstract base class for benchmark workloads."""

    name: str = "workload"
    description: str = ""

    def __init__(
        self,
        num_operations: int,
        generator: WorkItemGenerator | None = None,
    ):
        if num_operations < 0:
            raise ValueError(f"num_operations must be >= 0, got {num_operations}")
        self._num_operations = num_operations
        self._generator = generator or WorkItemGenerator()
        self._work_items: tuple[ItemT, ...] = ()
        self._state = WorkloadState.UNINITIALIZED

    @property
    def state(self) -> WorkloadState:
        return self._state

    @property
    def num_operations(self) -> int:
        return self._num_operations

    @property
    def work_items(self) -> Sequence[ItemT]:
        return self._work_items

    def prepare(self, store: MetadataStore) -> None:
        """
        Build the work item list from the current store contents.

        Raises:
            InsufficientPopulation: a required entity kind is missing
            StoreOperationFailed: the store could not be queried
            WorkloadStateError: prepare() was already called
        """
        if self._state is not WorkloadState.UNINITIALIZED:
            raise WorkloadStateError(self.name, self._state.value, "prepare")

        start_time = time.perf_counter()
        snapshot = self._capture_snapshot(store)
        items = self._generate(snapshot)
        if len(items) != self._num_operations:
            raise RuntimeError(
                f"Generated {len(items)} work items, expected {self._num_operations}"
            )

        self._work_items = tuple(items)
        self._state = WorkloadState.PREPARED
        logger.info(
            "Workload prepared",
            workload=self.name,
            num_operations=self._num_operations,
            setup_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )

    def execute(self, index: int, store: MetadataStore) -> OpStats:
        """
        Run the planned operation at ``index``.

        Returns:
            Successful OpStats with elapsed time and bytes transferred

        Raises:
            StoreOperationFailed: the store call failed; ``op_stats`` holds
                the failed OpStats
            IndexError: index outside ``[0, num_operations)``
        """
        if self._state is not WorkloadState.PREPARED:
            raise WorkloadStateError(self.name, self._state.value, "execute")
        if not 0 <= index < len(self._work_items):
            raise IndexError(f"Work item index {index} out of range [0, {len(self._work_items)})")

        item = self._work_items[index]
        start_time = time.perf_counter()
        try:
            bytes_transferred = self._execute_item(item, store)
        except StoreOperationFailed as e:
            elapsed = time.perf_counter() - start_time
            raise StoreOperationFailed(
                str(e),
                operation=e.operation,
                op_stats=OpStats(succeeded=False, elapsed_seconds=elapsed),
            ) from e

        return OpStats(
            succeeded=True,
            elapsed_seconds=time.perf_counter() - start_time,
            bytes_transferred=bytes_transferred,
        )

    def tear_down(self) -> None:
        """Release the work items. The workload cannot be executed afterwards."""
        self._work_items = ()
        self._state = WorkloadState.DONE

    @abstractmethod
    def _capture_snapshot(self, store: MetadataStore) -> StoreSnapshot:
        """Query the parts of the store this workload samples from."""

    @abstractmethod
    def _generate(self, snapshot: StoreSnapshot) -> list[ItemT]:
        """Build exactly num_operations work items."""

    @abstractmethod
    def _execute_item(self, item: ItemT, store: MetadataStore) -> int:
        """Issue the store call for one item and return the bytes transferred."""
