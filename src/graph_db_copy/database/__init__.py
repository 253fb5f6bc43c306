"""
Database access layer: reader, writer and administrator interfaces plus
their transport-specific implementations.
"""

from .interface import (
    AccessMode,
    DatabaseAdministrator,
    DatabaseInfo,
    DataReader,
    DataWriter,
)
from .adapters import BoltAdministrator, BoltReader, BoltWriter

__all__ = [
    "AccessMode",
    "DatabaseAdministrator",
    "DatabaseInfo",
    "DataReader",
    "DataWriter",
    "BoltAdministrator",
    "BoltReader",
    "BoltWriter",
]
