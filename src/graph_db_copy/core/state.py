"""
Source database state guard.

Copying a database that keeps changing produces a target with missing or
duplicated entities. When locking is enabled the guard switches the source
to read-only access for the duration of the copy and switches it back
afterwards if, and only if, it was the one that changed it.
"""

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional

from ..database.interface import AccessMode, DatabaseAdministrator, DatabaseInfo
from ..exceptions import GuardStateConflictError, SourceUnavailableError

logger = logging.getLogger(__name__)


class GuardMode(Enum):
    """How the source database is treated during a copy."""

    NONE = "none"
    LOCKING = "locking"


class GuardState(Enum):
    """Lifecycle of a guard."""

    UNINITIALIZED = "uninitialized"
    INSPECTED = "inspected"
    PROTECTED = "protected"
    ALREADY_PROTECTED = "already_protected"
    RESTORED = "restored"


class SourceStateGuard:
    """
    Keeps the source database read-only while a copy runs.

    Use :meth:`protect` to scope the protection::

        guard = SourceStateGuard.locking(BoltAdministrator(driver), "neo4j")
        with guard.protect():
            transfer(reader, writer, options)
    """

    def __init__(
        self,
        mode: GuardMode,
        administrator: Optional[DatabaseAdministrator] = None,
        database: Optional[str] = None,
    ):
        if mode == GuardMode.LOCKING and (administrator is None or not database):
            raise ValueError("A locking guard needs an administrator and a database")
        self.mode = mode
        self.administrator = administrator
        self.database = database
        self.state = GuardState.UNINITIALIZED
        self.database_info: Optional[DatabaseInfo] = None
        self.was_mutated_by_guard = False

    @classmethod
    def disabled(cls) -> "SourceStateGuard":
        return cls(GuardMode.NONE)

    @classmethod
    def locking(
        cls, administrator: DatabaseAdministrator, database: str
    ) -> "SourceStateGuard":
        return cls(GuardMode.LOCKING, administrator, database)

    def activate(self) -> None:
        """
        Make the source read-only.

        Raises:
            SourceUnavailableError: If the database is missing or not online
            GuardStateConflictError: If the guard was already activated or the
                database access mode cannot be handled
        """
        if self.state != GuardState.UNINITIALIZED:
            raise GuardStateConflictError(
                self.database or "<unguarded>",
                f"guard cannot be activated from state {self.state.value}",
            )

        if self.mode == GuardMode.NONE:
            self.state = GuardState.ALREADY_PROTECTED
            return

        info = self.administrator.database_info(self.database)
        self.database_info = info
        self.state = GuardState.INSPECTED

        if not info.is_online:
            raise SourceUnavailableError(self.database, info.status)

        if info.is_read_write:
            self.administrator.set_access_mode(self.database, AccessMode.READ_ONLY)
            self.was_mutated_by_guard = True
            self.state = GuardState.PROTECTED
        elif info.is_read_only:
            logger.info("Database %s is already read-only", self.database)
            self.state = GuardState.ALREADY_PROTECTED
        else:
            raise GuardStateConflictError(
                self.database, f"unsupported access mode '{info.access}'"
            )

    def deactivate(self) -> None:
        """Restore the access mode found by :meth:`activate`. Idempotent."""
        if self.state not in (GuardState.PROTECTED, GuardState.ALREADY_PROTECTED):
            return
        if self.was_mutated_by_guard:
            self.administrator.set_access_mode(self.database, AccessMode.READ_WRITE)
            self.was_mutated_by_guard = False
        self.state = GuardState.RESTORED

    @contextmanager
    def protect(self) -> Iterator["SourceStateGuard"]:
        self.activate()
        try:
            yield self
        finally:
            try:
                self.deactivate()
            except Exception as e:
                logger.error(
                    "Failed to restore access mode of database %s: %s",
                    self.database,
                    e,
                )
                if e.__context__ is not None:
                    logger.error("Copy had already failed: %r", e.__context__)
                raise
