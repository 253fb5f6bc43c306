"""
Database adapter implementations for different transports.
"""

from .bolt import BoltAdministrator, BoltReader, BoltWriter

__all__ = [
    "BoltAdministrator",
    "BoltReader",
    "BoltWriter",
]
