"""
Graph entity models.

This module contains the value types read from a source database and handed
to a writer. They carry source-scoped identities only; target identities are
produced by the writer and tracked in the mapping table.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, NamedTuple, Optional


@dataclass(frozen=True)
class Node:
    """A labeled node with its properties."""

    id: Any
    labels: FrozenSet[str] = frozenset()
    properties: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        id: Any,
        labels: Iterable[str] = (),
        properties: Optional[Dict[str, Any]] = None,
    ) -> "Node":
        return cls(id=id, labels=frozenset(labels), properties=dict(properties or {}))


@dataclass(frozen=True)
class Relationship:
    """A typed, directed relationship between two source nodes."""

    id: Any
    start_node_id: Any
    end_node_id: Any
    type: str
    properties: Dict[str, Any] = field(default_factory=dict)


class NodeMapping(NamedTuple):
    """Identity of a copied node in the source and in the target."""

    source_id: Any
    target_id: Any
