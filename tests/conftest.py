"""Shared in-memory reader and writer used by the unit tests."""

import random
import threading
import time
from typing import Any, Dict, Iterator, List, Optional, Sequence

import pytest

from graph_db_copy.database.interface import DataReader, DataWriter
from graph_db_copy.mapping import MappingTable
from graph_db_copy.models import Node, NodeMapping, Relationship
from graph_db_copy.options import CopyOptions


class FakeReader(DataReader):
    """Serves nodes and relationships from lists and records what was read."""

    def __init__(
        self,
        nodes: Sequence[Node] = (),
        relationships: Sequence[Relationship] = (),
        events: Optional[List[str]] = None,
    ):
        self.nodes = list(nodes)
        self.relationships = list(relationships)
        self.events = events if events is not None else []
        self.closed: List[str] = []

    def _stream(self, kind: str, items: List[Any]) -> Iterator[Any]:
        self.events.append(f"read-{kind}")
        try:
            for item in items:
                yield item
        finally:
            self.closed.append(kind)

    def read_nodes(self) -> Iterator[Node]:
        return self._stream("nodes", self.nodes)

    def read_relationships(self) -> Iterator[Relationship]:
        return self._stream("relationships", self.relationships)

    def total_node_count(self) -> int:
        return len(self.nodes)

    def total_relationship_count(self) -> int:
        return len(self.relationships)


class FakeWriter(DataWriter):
    """
    Stores written entities in memory.

    Batches can be slowed down by a random delay to shuffle completion order,
    and ``fail_node_batch`` / ``fail_relationship_batch`` make the n-th call
    of a phase raise ``failure``.
    """

    def __init__(
        self,
        max_delay: float = 0.0,
        fail_node_batch: Optional[int] = None,
        fail_relationship_batch: Optional[int] = None,
        failure: Optional[Exception] = None,
        events: Optional[List[str]] = None,
        seed: int = 7,
    ):
        self.max_delay = max_delay
        self.fail_node_batch = fail_node_batch
        self.fail_relationship_batch = fail_relationship_batch
        self.failure = failure or RuntimeError("write failed")
        self.events = events if events is not None else []
        self._random = random.Random(seed)
        self._lock = threading.Lock()
        self.in_flight = 0
        self.max_in_flight = 0
        self.node_calls = 0
        self.relationship_calls = 0
        self.created_nodes: Dict[str, Node] = {}
        self.created_relationships: List[Relationship] = []
        self.node_batch_sizes: List[int] = []
        self.relationship_batch_sizes: List[int] = []

    def _enter(self, kind: str) -> int:
        with self._lock:
            if kind == "nodes":
                call = self.node_calls
                self.node_calls += 1
            else:
                call = self.relationship_calls
                self.relationship_calls += 1
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            self.events.append(f"start-{kind}")
            delay = self._random.uniform(0, self.max_delay)
        if delay:
            time.sleep(delay)
        return call

    def _exit(self, kind: str) -> None:
        with self._lock:
            self.in_flight -= 1
            self.events.append(f"end-{kind}")

    def write_nodes(
        self, nodes: Sequence[Node], options: CopyOptions
    ) -> List[NodeMapping]:
        call = self._enter("nodes")
        try:
            if call == self.fail_node_batch:
                raise self.failure
            mappings = []
            with self._lock:
                self.node_batch_sizes.append(len(nodes))
                for node in nodes:
                    target_id = f"t-{node.id}"
                    self.created_nodes[target_id] = Node(
                        target_id, node.labels, options.node_properties(node)
                    )
                    mappings.append(NodeMapping(node.id, target_id))
            return mappings
        finally:
            self._exit("nodes")

    def write_relationships(
        self,
        relationships: Sequence[Relationship],
        mapping_table: MappingTable,
        options: CopyOptions,
    ) -> int:
        call = self._enter("relationships")
        try:
            if call == self.fail_relationship_batch:
                raise self.failure
            created = [
                Relationship(
                    id=f"t-{rel.id}",
                    start_node_id=mapping_table.lookup(rel.start_node_id),
                    end_node_id=mapping_table.lookup(rel.end_node_id),
                    type=rel.type,
                    properties=options.relationship_properties(rel),
                )
                for rel in relationships
            ]
            with self._lock:
                self.relationship_batch_sizes.append(len(relationships))
                self.created_relationships.extend(created)
            return len(created)
        finally:
            self._exit("relationships")


def make_graph(node_count: int, relationship_count: int):
    """Build a chain-like graph with labels and properties on everything."""
    nodes = [
        Node.create(
            f"n{i}",
            labels=["Person"] if i % 2 else ["Person", "Admin"],
            properties={"name": f"node-{i}", "rank": i, "secret": "x"},
        )
        for i in range(node_count)
    ]
    relationships = [
        Relationship(
            id=f"r{i}",
            start_node_id=f"n{i % node_count}",
            end_node_id=f"n{(i + 1) % node_count}",
            type="KNOWS" if i % 3 else "FOLLOWS",
            properties={"since": 2000 + i, "secret": "y"},
        )
        for i in range(relationship_count)
    ]
    return nodes, relationships


@pytest.fixture
def events() -> List[str]:
    return []


@pytest.fixture
def small_graph():
    return make_graph(25, 40)
