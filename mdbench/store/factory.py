"""
Metadata Store Factory.

Creates the store backend selected in StoreSettings.
"""

import structlog

from mdbench.config.settings import StoreSettings, get_settings
from mdbench.store.base import MetadataStore
from mdbench.store.memory import InMemoryMetadataStore
from mdbench.store.neo4j_store import Neo4jMetadataStore

logger = structlog.get_logger(__name__)


def create_metadata_store(settings: StoreSettings | None = None) -> MetadataStore:
    """
    Create and connect a metadata store.

    Args:
        settings: Store settings; defaults to the application settings

    Returns:
        Ready-to-use store
    """
    settings = settings or get_settings().store

    if settings.backend == "fake":
        logger.info("Using in-memory metadata store")
        return InMemoryMetadataStore()

    store = Neo4jMetadataStore(settings)
    store.connect()
    return store
