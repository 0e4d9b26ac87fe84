"""
Neo4j Metadata Store.

Maps the metadata graph onto Neo4j:
- nodes are labelled Artifact / Execution / Context and carry an integer ``id``
- types are labelled ArtifactType / ExecutionType / ContextType
- edges are ATTRIBUTION / ASSOCIATION relationships pointing at the context

Integer ids come from per-label IdSequence nodes so that ids stay stable
and comparable with the in-memory store.
"""

import json
from collections.abc import Generator, Sequence
from contextlib import contextmanager
from typing import Any

import structlog
from neo4j import Driver, GraphDatabase, ManagedTransaction, Session
from neo4j.exceptions import DriverError, Neo4jError

from mdbench.config.settings import StoreSettings, get_settings
from mdbench.core.errors import StoreOperationFailed
from mdbench.store.base import MetadataStore, edge_kind_between
from mdbench.store.schema import Edge, EdgeKind, Node, NodeKind

logger = structlog.get_logger(__name__)


NODE_LABELS = {
    NodeKind.ARTIFACT: "Artifact",
    NodeKind.EXECUTION: "Execution",
    NodeKind.CONTEXT: "Context",
}

TYPE_LABELS = {
    NodeKind.ARTIFACT: "ArtifactType",
    NodeKind.EXECUTION: "ExecutionType",
    NodeKind.CONTEXT: "ContextType",
}

RELATIONSHIP_TYPES = {
    EdgeKind.ATTRIBUTION: "ATTRIBUTION",
    EdgeKind.ASSOCIATION: "ASSOCIATION",
}


class Neo4jMetadataStore(MetadataStore):
    """Metadata store backed by a Neo4j database."""

    SCHEMA_CONSTRAINTS = [
        f"CREATE CONSTRAINT {label.lower()}_id IF NOT EXISTS FOR (n:{label}) REQUIRE n.id IS UNIQUE"
        for label in [*NODE_LABELS.values(), *TYPE_LABELS.values()]
    ]

    ALLOCATE_IDS = """
    MERGE (s:IdSequence {name: $sequence})
    ON CREATE SET s.next = 1
    WITH s, s.next AS first
    SET s.next = first + $count
    RETURN first
    """

    def __init__(self, settings: StoreSettings | None = None) -> None:
        """Initialize the store with optional custom settings."""
        self._driver: Driver | None = None
        self._settings = settings or get_settings().store

    def connect(self) -> None:
        """Open the driver and make sure the schema constraints exist."""
        if self._driver is not None:
            return

        try:
            self._driver = GraphDatabase.driver(
                self._settings.neo4j_uri,
                auth=(
                    self._settings.neo4j_username,
                    self._settings.neo4j_password.get_secret_value(),
                ),
                max_connection_pool_size=self._settings.max_connection_pool_size,
            )
            self._driver.verify_connectivity()
        except (DriverError, Neo4jError) as e:
            self._driver = None
            raise StoreOperationFailed(f"Cannot connect to Neo4j: {e}", operation="connect") from e

        logger.info("Connected to Neo4j", uri=self._settings.neo4j_uri)
        for constraint in self.SCHEMA_CONSTRAINTS:
            self._run("setup_schema", constraint)

    def close(self) -> None:
        """Close the database connection."""
        if self._driver is not None:
            self._driver.close()
            self._driver = None
            logger.info("Disconnected from Neo4j")

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Get a database session."""
        if self._driver is None:
            self.connect()

        assert self._driver is not None
        with self._driver.session(database=self._settings.neo4j_database) as session:
            yield session

    def _run(
        self,
        operation: str,
        query: str,
        params: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Run one query and return its records, translating driver errors."""
        try:
            with self.session() as session:
                result = session.run(query, params or {})
                return result.data()
        except (DriverError, Neo4jError) as e:
            logger.warning("Neo4j query failed", operation=operation, error=str(e))
            raise StoreOperationFailed(str(e), operation=operation) from e

    def _write(
        self,
        operation: str,
        query: str,
        params: dict[str, Any],
        expected: int,
    ) -> None:
        """
        Run a batch write in one managed transaction.

        The query must return a single ``applied`` count. A short count raises
        inside the transaction function, so the driver rolls the batch back.
        """

        def work(tx: ManagedTransaction) -> None:
            records = tx.run(query, params).data()
            applied = records[0]["applied"] if records else 0
            if applied != expected:
                raise StoreOperationFailed(
                    f"Applied {applied} of {expected} rows; batch rolled back",
                    operation=operation,
                )

        try:
            with self.session() as session:
                session.execute_write(work)
        except (DriverError, Neo4jError) as e:
            logger.warning("Neo4j write failed", operation=operation, error=str(e))
            raise StoreOperationFailed(str(e), operation=operation) from e

    def _allocate_ids(self, sequence: str, count: int) -> list[int]:
        if count == 0:
            return []
        records = self._run(
            "allocate_ids", self.ALLOCATE_IDS, {"sequence": sequence, "count": count}
        )
        first = records[0]["first"]
        return list(range(first, first + count))

    # =========================================================================
    # Types and Nodes
    # =========================================================================

    def put_types(self, kind: NodeKind, names: Sequence[str]) -> list[int]:
        label = TYPE_LABELS[kind]
        records = self._run(
            "put_types",
            f"MATCH (t:{label}) WHERE t.name IN $names RETURN t.name AS name, t.id AS id",
            {"names": list(names)},
        )
        existing = {r["name"]: r["id"] for r in records}

        new_names = list(dict.fromkeys(n for n in names if n not in existing))
        new_ids = self._allocate_ids(label, len(new_names))
        if new_names:
            self._write(
                "put_types",
                f"""
                UNWIND $rows AS row
                CREATE (t:{label} {{id: row.id, name: row.name}})
                RETURN count(t) AS applied
                """,
                {"rows": [{"id": i, "name": n} for i, n in zip(new_ids, new_names)]},
                expected=len(new_names),
            )
            existing.update(zip(new_names, new_ids))

        return [existing[name] for name in names]

    def get_type_ids(self, kind: NodeKind) -> list[int]:
        records = self._run(
            "get_type_ids",
            f"MATCH (t:{TYPE_LABELS[kind]}) RETURN t.id AS id ORDER BY id",
        )
        return [r["id"] for r in records]

    def put_nodes(self, nodes: Sequence[Node]) -> list[int]:
        ids: list[int | None] = [n.id for n in nodes]
        for kind in NodeKind:
            positions = [i for i, n in enumerate(nodes) if n.kind is kind]
            if not positions:
                continue

            label = NODE_LABELS[kind]
            allocated = iter(
                self._allocate_ids(label, sum(1 for i in positions if ids[i] is None))
            )
            for i in positions:
                if ids[i] is None:
                    ids[i] = next(allocated)

            rows = [
                {
                    "id": ids[i],
                    "type_id": nodes[i].type_id,
                    "name": nodes[i].name,
                    "properties_json": json.dumps(nodes[i].properties, sort_keys=True),
                }
                for i in positions
            ]
            # A row whose type is unknown drops out of the MATCH and fails the batch
            self._write(
                "put_nodes",
                f"""
                UNWIND $rows AS row
                MATCH (t:{TYPE_LABELS[kind]} {{id: row.type_id}})
                MERGE (n:{label} {{id: row.id}})
                SET n.type_id = row.type_id,
                    n.name = row.name,
                    n.properties_json = row.properties_json
                RETURN count(n) AS applied
                """,
                {"rows": rows},
                expected=len(rows),
            )

        return [i for i in ids if i is not None]

    def get_node_ids(self, kind: NodeKind) -> list[int]:
        records = self._run(
            "get_node_ids",
            f"MATCH (n:{NODE_LABELS[kind]}) RETURN n.id AS id ORDER BY id",
        )
        return [r["id"] for r in records]

    def count(self, kind: NodeKind | EdgeKind) -> int:
        if isinstance(kind, EdgeKind):
            query = f"MATCH ()-[r:{RELATIONSHIP_TYPES[kind]}]->() RETURN count(r) AS count"
        else:
            query = f"MATCH (n:{NODE_LABELS[kind]}) RETURN count(n) AS count"
        records = self._run("count", query)
        return records[0]["count"] if records else 0

    # =========================================================================
    # Context Edges
    # =========================================================================

    def get_edges(self, kind: EdgeKind) -> list[Edge]:
        records = self._run(
            "get_edges",
            f"""
            MATCH (a:{NODE_LABELS[kind.non_context_kind]})-[:{RELATIONSHIP_TYPES[kind]}]->(c:Context)
            RETURN a.id AS non_context_id, c.id AS context_id
            """,
        )
        return [Edge(kind=kind, **r) for r in records]

    def insert_edges(
        self,
        kind: EdgeKind,
        endpoints: Sequence[tuple[int, int]],
    ) -> int:
        if not endpoints:
            return 0
        rows = [{"non_context_id": a, "context_id": c} for a, c in endpoints]
        self._write(
            "insert_edges",
            f"""
            UNWIND $rows AS row
            MATCH (a:{NODE_LABELS[kind.non_context_kind]} {{id: row.non_context_id}})
            MATCH (c:Context {{id: row.context_id}})
            CREATE (a)-[:{RELATIONSHIP_TYPES[kind]}]->(c)
            RETURN count(*) AS applied
            """,
            {"rows": rows},
            expected=len(rows),
        )
        return sum(
            Edge(kind=kind, non_context_id=a, context_id=c).byte_size() for a, c in endpoints
        )

    def get_connected_nodes(
        self,
        anchor_kind: NodeKind,
        anchor_id: int,
        target_kind: NodeKind,
    ) -> list[Node]:
        edge_kind = edge_kind_between(anchor_kind, target_kind)
        if edge_kind is None:
            raise StoreOperationFailed(
                f"No context edge links {anchor_kind.value} and {target_kind.value}",
                operation="get_connected_nodes",
            )
        records = self._run(
            "get_connected_nodes",
            f"""
            MATCH (anchor:{NODE_LABELS[anchor_kind]} {{id: $anchor_id}})
            OPTIONAL MATCH (anchor)-[:{RELATIONSHIP_TYPES[edge_kind]}]-(n:{NODE_LABELS[target_kind]})
            WITH anchor, collect(DISTINCT n) AS nodes
            UNWIND CASE WHEN size(nodes) = 0 THEN [null] ELSE nodes END AS n
            RETURN n.id AS id, n.type_id AS type_id, n.name AS name,
                   n.properties_json AS properties_json
            """,
            {"anchor_id": anchor_id},
        )
        if not records:
            raise StoreOperationFailed(
                f"No {anchor_kind.value} with id {anchor_id}",
                operation="get_connected_nodes",
            )
        return [
            Node(
                id=r["id"],
                kind=target_kind,
                type_id=r["type_id"],
                name=r["name"] or "",
                properties=json.loads(r["properties_json"] or "{}"),
            )
            for r in records
            if r["id"] is not None
        ]
