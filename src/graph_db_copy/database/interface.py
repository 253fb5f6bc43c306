"""
Abstract interfaces for the database side of a copy.

A reader streams entities out of the source, a writer creates them in the
target and an administrator inspects and changes database access modes. The
transfer pipeline only talks to these interfaces so that transports can be
swapped and tested in isolation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Sequence

from ..mapping import MappingTable
from ..models import Node, NodeMapping, Relationship
from ..options import CopyOptions


class AccessMode(Enum):
    """Database access modes that can be set on a database."""

    READ_ONLY = "READ ONLY"
    READ_WRITE = "READ WRITE"


@dataclass(frozen=True)
class DatabaseInfo:
    """Operational state of a database as reported by the server."""

    name: str
    status: str
    access: str

    @property
    def is_online(self) -> bool:
        return self.status == "online"

    @property
    def is_read_write(self) -> bool:
        return self.access == "read-write"

    @property
    def is_read_only(self) -> bool:
        return self.access == "read-only"


class DataReader(ABC):
    """Reads every node and relationship of a source database."""

    @abstractmethod
    def read_nodes(self) -> Iterator[Node]:
        """Lazily stream all nodes. The iterator can be consumed once."""

    @abstractmethod
    def read_relationships(self) -> Iterator[Relationship]:
        """Lazily stream all relationships. The iterator can be consumed once."""

    @abstractmethod
    def total_node_count(self) -> int:
        pass

    @abstractmethod
    def total_relationship_count(self) -> int:
        pass


class DataWriter(ABC):
    """
    Creates batches of entities in a target database.

    Implementations must apply the property exclusions of the given options
    and must be safe to call from several threads at once.
    """

    @abstractmethod
    def write_nodes(
        self, nodes: Sequence[Node], options: CopyOptions
    ) -> List[NodeMapping]:
        """
        Create the given nodes.

        Returns:
            One mapping per created node
        """

    @abstractmethod
    def write_relationships(
        self,
        relationships: Sequence[Relationship],
        mapping_table: MappingTable,
        options: CopyOptions,
    ) -> int:
        """
        Create the given relationships between already copied nodes.

        Returns:
            Number of relationships created

        Raises:
            MissingIdentityMappingError: If an endpoint was never copied
        """


class DatabaseAdministrator(ABC):
    """Administrative access to a database server."""

    @abstractmethod
    def database_info(self, database: str) -> DatabaseInfo:
        """
        Raises:
            SourceUnavailableError: If the database does not exist
        """

    @abstractmethod
    def set_access_mode(self, database: str, mode: AccessMode) -> None:
        pass
