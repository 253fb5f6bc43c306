"""
Source to target node identity mapping.

A table is created for a single copy. Node writers insert into it
concurrently during the node phase; relationship writers only read from it
once every node batch has completed.
"""

import threading
from typing import Any, Dict, Iterable

from .exceptions import MissingIdentityMappingError
from .models import NodeMapping


class MappingTable:
    """Thread-safe map from source node id to target node id."""

    def __init__(self):
        self._lock = threading.Lock()
        self._targets: Dict[Any, Any] = {}

    def insert(self, mappings: Iterable[NodeMapping]) -> None:
        entries = [(mapping.source_id, mapping.target_id) for mapping in mappings]
        with self._lock:
            self._targets.update(entries)

    def lookup(self, source_id: Any) -> Any:
        """
        Return the target id of a copied node.

        Raises:
            MissingIdentityMappingError: If the node was never copied
        """
        with self._lock:
            try:
                return self._targets[source_id]
            except KeyError:
                raise MissingIdentityMappingError(source_id) from None

    def __contains__(self, source_id: Any) -> bool:
        with self._lock:
            return source_id in self._targets

    def __len__(self) -> int:
        with self._lock:
            return len(self._targets)
