"""
Bolt adapters built on the official neo4j driver.

Nodes are identified by their element id on both sides. Labels and
relationship types are not parameterizable in Cypher, so each batch is split
into groups sharing a label set (or relationship type) and every group is
created with a single UNWIND statement inside the batch transaction.
"""

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, Hashable, Iterator, List, Sequence, TypeVar

import neo4j

from ...exceptions import SourceUnavailableError
from ...mapping import MappingTable
from ...models import Node, NodeMapping, Relationship
from ...options import CopyOptions
from ..interface import (
    AccessMode,
    DatabaseAdministrator,
    DatabaseInfo,
    DataReader,
    DataWriter,
)

logger = logging.getLogger(__name__)

SYSTEM_DATABASE = "system"

READ_NODES_QUERY = "MATCH (n) RETURN n"
READ_RELATIONSHIPS_QUERY = "MATCH ()-[r]->() RETURN r"
COUNT_NODES_QUERY = "MATCH (n) RETURN count(n) AS count"
COUNT_RELATIONSHIPS_QUERY = "MATCH ()-[r]->() RETURN count(r) AS count"

CREATE_NODES_QUERY = """
UNWIND $rows AS row
CREATE (n{labels})
SET n = row.p
RETURN row.s AS sourceNodeId, elementId(n) AS targetNodeId
"""

CREATE_RELATIONSHIPS_QUERY = """
UNWIND $rows AS row
MATCH (a) WHERE elementId(a) = row.s
MATCH (b) WHERE elementId(b) = row.t
CREATE (a)-[r:{type}]->(b)
SET r = row.p
RETURN count(r) AS created
"""

T = TypeVar("T")


def escape_name(name: str) -> str:
    """Quote a label, relationship type or database name for Cypher."""
    return "`" + name.replace("`", "``") + "`"


def label_expression(labels) -> str:
    return "".join(f":{escape_name(label)}" for label in sorted(labels))


def group_by(
    items: Sequence[T], key: Callable[[T], Hashable]
) -> Dict[Hashable, List[T]]:
    groups: Dict[Hashable, List[T]] = defaultdict(list)
    for item in items:
        groups[key(item)].append(item)
    return dict(groups)


def to_node(value: Any) -> Node:
    """Convert a driver node into a :class:`Node`."""
    return Node(
        id=value.element_id,
        labels=frozenset(value.labels),
        properties=dict(value.items()),
    )


def to_relationship(value: Any) -> Relationship:
    """Convert a driver relationship into a :class:`Relationship`."""
    return Relationship(
        id=value.element_id,
        start_node_id=value.start_node.element_id,
        end_node_id=value.end_node.element_id,
        type=value.type,
        properties=dict(value.items()),
    )


class BoltReader(DataReader):
    """Streams the content of a database through read sessions."""

    def __init__(self, driver: neo4j.Driver, database: str):
        self.driver = driver
        self.database = database

    def _session(self) -> neo4j.Session:
        return self.driver.session(
            database=self.database, default_access_mode=neo4j.READ_ACCESS
        )

    def read_nodes(self) -> Iterator[Node]:
        with self._session() as session:
            logger.info("Start reading nodes from %s", self.database)
            for record in session.run(READ_NODES_QUERY):
                yield to_node(record[0])
        logger.info("Reading nodes from %s complete", self.database)

    def read_relationships(self) -> Iterator[Relationship]:
        with self._session() as session:
            logger.info("Start reading relationships from %s", self.database)
            for record in session.run(READ_RELATIONSHIPS_QUERY):
                yield to_relationship(record[0])
        logger.info("Reading relationships from %s complete", self.database)

    def _count(self, query: str) -> int:
        with self._session() as session:
            return session.run(query).single()["count"]

    def total_node_count(self) -> int:
        return self._count(COUNT_NODES_QUERY)

    def total_relationship_count(self) -> int:
        return self._count(COUNT_RELATIONSHIPS_QUERY)


class BoltWriter(DataWriter):
    """Creates batches in a target database, one write transaction per batch."""

    def __init__(self, driver: neo4j.Driver, database: str):
        self.driver = driver
        self.database = database

    def _session(self) -> neo4j.Session:
        return self.driver.session(database=self.database)

    def write_nodes(
        self, nodes: Sequence[Node], options: CopyOptions
    ) -> List[NodeMapping]:
        groups = {}
        for labels, group in group_by(
            nodes, lambda node: tuple(sorted(node.labels))
        ).items():
            groups[labels] = [
                {"s": node.id, "p": options.node_properties(node)} for node in group
            ]
        with self._session() as session:
            return session.execute_write(self._create_nodes, groups)

    @staticmethod
    def _create_nodes(tx: neo4j.ManagedTransaction, groups) -> List[NodeMapping]:
        mappings: List[NodeMapping] = []
        for labels, rows in groups.items():
            query = CREATE_NODES_QUERY.format(labels=label_expression(labels))
            result = tx.run(query, rows=rows)
            mappings.extend(
                NodeMapping(record["sourceNodeId"], record["targetNodeId"])
                for record in result
            )
        return mappings

    def write_relationships(
        self,
        relationships: Sequence[Relationship],
        mapping_table: MappingTable,
        options: CopyOptions,
    ) -> int:
        # Resolve endpoints before opening a transaction
        groups = {}
        for rel_type, group in group_by(relationships, lambda rel: rel.type).items():
            groups[rel_type] = [
                {
                    "s": mapping_table.lookup(rel.start_node_id),
                    "t": mapping_table.lookup(rel.end_node_id),
                    "p": options.relationship_properties(rel),
                }
                for rel in group
            ]
        with self._session() as session:
            return session.execute_write(self._create_relationships, groups)

    @staticmethod
    def _create_relationships(tx: neo4j.ManagedTransaction, groups) -> int:
        created = 0
        for rel_type, rows in groups.items():
            query = CREATE_RELATIONSHIPS_QUERY.format(type=escape_name(rel_type))
            created += tx.run(query, rows=rows).single()["created"]
        return created


class BoltAdministrator(DatabaseAdministrator):
    """Runs administration commands against the system database."""

    def __init__(self, driver: neo4j.Driver):
        self.driver = driver

    def database_info(self, database: str) -> DatabaseInfo:
        with self.driver.session(database=SYSTEM_DATABASE) as session:
            records = list(session.run(f"SHOW DATABASE {escape_name(database)}"))
        if not records:
            raise SourceUnavailableError(database)
        record = records[0]
        return DatabaseInfo(
            name=database, status=record["currentStatus"], access=record["access"]
        )

    def set_access_mode(self, database: str, mode: AccessMode) -> None:
        logger.info("Setting database %s to %s mode", database, mode.value)
        query = f"ALTER DATABASE {escape_name(database)} SET ACCESS {mode.value} WAIT"
        with self.driver.session(database=SYSTEM_DATABASE) as session:
            session.execute_write(lambda tx: tx.run(query).consume())
