"""
Pytest Configuration and Shared Fixtures.

This module provides shared fixtures for testing the workload engine.
"""

from collections.abc import Callable, Generator
from unittest.mock import patch

import pytest

from mdbench.benchmark.fill_context_edges import FillContextEdges
from mdbench.benchmark.util import insert_nodes_in_db, insert_types_in_db
from mdbench.benchmark.work_items import WorkItemGenerator
from mdbench.config.settings import Settings, get_settings
from mdbench.config.workload_config import (
    FillContextEdgesConfig,
    FillContextEdgesSpecification,
    PopularityConfig,
    UniformRange,
)
from mdbench.store.memory import InMemoryMetadataStore

NUM_EXISTING_TYPES = 100
NUM_EXISTING_NODES = 100
NUM_EXISTING_CONTEXT_EDGE_OPS = 100


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> Generator[Settings, None, None]:
    """Provide test settings with mock values."""
    with patch.dict(
        "os.environ",
        {
            "STORE_BACKEND": "FAKE",
            "STORE_NEO4J_URI": "bolt://localhost:7687",
            "STORE_NEO4J_PASSWORD": "password123",
            "BENCH_NUM_THREADS": "4",
            "BENCH_SEED": "7",
        },
    ):
        get_settings.cache_clear()
        yield get_settings()
    get_settings.cache_clear()


# =============================================================================
# Config Fixtures
# =============================================================================


def make_fill_config(
    specification: FillContextEdgesSpecification,
    concentration: float = 1000.0,
    minimum: int = 1,
    maximum: int = 10,
) -> FillContextEdgesConfig:
    """Fill config used to seed context edges."""
    return FillContextEdgesConfig(
        specification=specification,
        non_context_node_popularity=PopularityConfig(concentration=concentration),
        context_node_popularity=PopularityConfig(concentration=concentration),
        num_edges=UniformRange(minimum=minimum, maximum=maximum),
    )


@pytest.fixture
def fill_config_factory() -> Callable[..., FillContextEdgesConfig]:
    return make_fill_config


# =============================================================================
# Store Fixtures
# =============================================================================


def fill_context_edges(
    store: InMemoryMetadataStore,
    specification: FillContextEdgesSpecification,
    num_operations: int,
    seed: int | None = None,
) -> None:
    """Insert context edges by running a FillContextEdges workload to completion."""
    workload = FillContextEdges(
        make_fill_config(specification),
        num_operations,
        WorkItemGenerator(seed=seed),
    )
    workload.prepare(store)
    for i in range(workload.num_operations):
        workload.execute(i, store)
    workload.tear_down()


@pytest.fixture
def store() -> Generator[InMemoryMetadataStore, None, None]:
    """Empty in-memory store."""
    store = InMemoryMetadataStore()
    yield store
    store.close()


@pytest.fixture
def store_with_nodes(store: InMemoryMetadataStore) -> InMemoryMetadataStore:
    """Store with 100 types and 100 nodes of every kind, no edges."""
    insert_types_in_db(store, NUM_EXISTING_TYPES, NUM_EXISTING_TYPES, NUM_EXISTING_TYPES)
    insert_nodes_in_db(store, NUM_EXISTING_NODES, NUM_EXISTING_NODES, NUM_EXISTING_NODES, seed=1)
    return store


@pytest.fixture
def store_with_edges(store_with_nodes: InMemoryMetadataStore) -> InMemoryMetadataStore:
    """Store with nodes plus 100 attribution and 100 association fill operations."""
    fill_context_edges(
        store_with_nodes,
        FillContextEdgesSpecification.ATTRIBUTION,
        NUM_EXISTING_CONTEXT_EDGE_OPS,
        seed=2,
    )
    fill_context_edges(
        store_with_nodes,
        FillContextEdgesSpecification.ASSOCIATION,
        NUM_EXISTING_CONTEXT_EDGE_OPS,
        seed=3,
    )
    return store_with_nodes
