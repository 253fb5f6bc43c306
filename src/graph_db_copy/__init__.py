"""
Graph DB Copy - Copy a Neo4j database to another database over the network.

This package reads every node and relationship from a source database and
recreates them in a target database through the Bolt protocol, optionally
keeping the source read-only for the duration of the copy.
"""

__version__ = "0.1.0"

from .core import DataTransfer, SourceStateGuard, transfer
from .database import BoltAdministrator, BoltReader, BoltWriter
from .exceptions import (
    CopyError,
    GuardStateConflictError,
    MissingIdentityMappingError,
    SourceUnavailableError,
    WriteFailureError,
)
from .mapping import MappingTable
from .models import Node, NodeMapping, Relationship
from .options import CopyOptions

__all__ = [
    "DataTransfer",
    "SourceStateGuard",
    "transfer",
    "BoltAdministrator",
    "BoltReader",
    "BoltWriter",
    "CopyError",
    "GuardStateConflictError",
    "MissingIdentityMappingError",
    "SourceUnavailableError",
    "WriteFailureError",
    "MappingTable",
    "Node",
    "NodeMapping",
    "Relationship",
    "CopyOptions",
]
