"""
Copy options and property filtering.
"""

from dataclasses import dataclass
from typing import Any, AbstractSet, ClassVar, Dict, FrozenSet, Mapping, Optional

from .models import Node, Relationship

DEFAULT_BATCH_SIZE = 1000
DEFAULT_WRITER_CONCURRENCY = 4


def filter_properties(
    properties: Mapping[str, Any], excluded: AbstractSet[str]
) -> Dict[str, Any]:
    """Return a copy of ``properties`` without the keys in ``excluded``."""
    return {key: value for key, value in properties.items() if key not in excluded}


@dataclass(frozen=True)
class CopyOptions:
    """Immutable settings shared by every stage of a copy."""

    exclude_node_properties: FrozenSet[str] = frozenset()
    exclude_relationship_properties: FrozenSet[str] = frozenset()
    batch_size: int = DEFAULT_BATCH_SIZE
    writer_concurrency: int = DEFAULT_WRITER_CONCURRENCY
    relationship_concurrency: Optional[int] = None

    DEFAULT: ClassVar["CopyOptions"]

    def __post_init__(self):
        # Accept any iterable of names but store frozensets
        object.__setattr__(
            self, "exclude_node_properties", frozenset(self.exclude_node_properties)
        )
        object.__setattr__(
            self,
            "exclude_relationship_properties",
            frozenset(self.exclude_relationship_properties),
        )
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.writer_concurrency <= 0:
            raise ValueError(
                f"writer_concurrency must be positive, got {self.writer_concurrency}"
            )
        if (
            self.relationship_concurrency is not None
            and self.relationship_concurrency <= 0
        ):
            raise ValueError(
                "relationship_concurrency must be positive, got "
                f"{self.relationship_concurrency}"
            )

    @property
    def relationship_writer_concurrency(self) -> int:
        if self.relationship_concurrency is None:
            return self.writer_concurrency
        return self.relationship_concurrency

    def node_properties(self, node: Node) -> Dict[str, Any]:
        return filter_properties(node.properties, self.exclude_node_properties)

    def relationship_properties(self, relationship: Relationship) -> Dict[str, Any]:
        return filter_properties(
            relationship.properties, self.exclude_relationship_properties
        )


CopyOptions.DEFAULT = CopyOptions()
