"""
Configuration management utilities for the copy tool.

This module handles configuration parsing, validation, and default settings.
Values come from environment variables (optionally loaded from a .env file)
and can be overridden from the command line.
"""

import os
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional
from urllib.parse import urlparse

from ..options import DEFAULT_BATCH_SIZE, DEFAULT_WRITER_CONCURRENCY, CopyOptions

DEFAULT_URI = "bolt://localhost:7687"
DEFAULT_USERNAME = "neo4j"
DEFAULT_DATABASE = "neo4j"

SUPPORTED_SCHEMES = {
    "bolt",
    "bolt+s",
    "bolt+ssc",
    "neo4j",
    "neo4j+s",
    "neo4j+ssc",
}


def parse_property_list(value: Optional[str]) -> FrozenSet[str]:
    """Parse a comma-separated list of property names."""
    if not value:
        return frozenset()
    return frozenset(name.strip() for name in value.split(",") if name.strip())


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    return int(value)


@dataclass
class ConnectionConfig:
    """Connection settings for one side of the copy."""

    uri: str = DEFAULT_URI
    username: str = DEFAULT_USERNAME
    password: str = ""
    database: str = DEFAULT_DATABASE

    @classmethod
    def from_environment(cls, prefix: str) -> "ConnectionConfig":
        return cls(
            uri=os.getenv(f"{prefix}_URI", DEFAULT_URI),
            username=os.getenv(f"{prefix}_USERNAME", DEFAULT_USERNAME),
            password=os.getenv(f"{prefix}_PASSWORD", ""),
            database=os.getenv(f"{prefix}_DATABASE", DEFAULT_DATABASE),
        )


@dataclass
class CopyConfig:
    """Configuration class for copy settings."""

    source: ConnectionConfig = field(default_factory=ConnectionConfig)
    target: ConnectionConfig = field(default_factory=ConnectionConfig)

    exclude_node_properties: FrozenSet[str] = frozenset()
    exclude_relationship_properties: FrozenSet[str] = frozenset()
    batch_size: int = DEFAULT_BATCH_SIZE
    concurrency: int = DEFAULT_WRITER_CONCURRENCY
    relationship_concurrency: Optional[int] = None
    lock_source_database: bool = False
    show_progress: bool = True

    @classmethod
    def from_environment(cls) -> "CopyConfig":
        """Create configuration from environment variables."""
        return cls(
            source=ConnectionConfig.from_environment("SOURCE"),
            target=ConnectionConfig.from_environment("TARGET"),
            exclude_node_properties=parse_property_list(
                os.getenv("EXCLUDE_NODE_PROPERTIES")
            ),
            exclude_relationship_properties=parse_property_list(
                os.getenv("EXCLUDE_RELATIONSHIP_PROPERTIES")
            ),
            batch_size=int(os.getenv("COPY_BATCH_SIZE", str(DEFAULT_BATCH_SIZE))),
            concurrency=int(
                os.getenv("COPY_CONCURRENCY", str(DEFAULT_WRITER_CONCURRENCY))
            ),
            relationship_concurrency=_parse_optional_int(
                os.getenv("COPY_RELATIONSHIP_CONCURRENCY")
            ),
            lock_source_database=_parse_bool(os.getenv("LOCK_SOURCE_DATABASE")),
        )

    def to_copy_options(self) -> CopyOptions:
        return CopyOptions(
            exclude_node_properties=self.exclude_node_properties,
            exclude_relationship_properties=self.exclude_relationship_properties,
            batch_size=self.batch_size,
            writer_concurrency=self.concurrency,
            relationship_concurrency=self.relationship_concurrency,
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            Tuple of (is_valid, validation_errors)
        """
        errors: list[str] = []

        for side, connection in (("source", self.source), ("target", self.target)):
            scheme = urlparse(connection.uri).scheme
            if scheme not in SUPPORTED_SCHEMES:
                errors.append(
                    f"Invalid {side} address '{connection.uri}'. Scheme must be "
                    f"one of: {sorted(SUPPORTED_SCHEMES)}"
                )
            if not connection.database:
                errors.append(f"The {side} database name is required")

        if (
            self.source.uri == self.target.uri
            and self.source.database == self.target.database
        ):
            errors.append("Source and target must not be the same database")

        if self.batch_size <= 0:
            errors.append(f"Invalid batch size: {self.batch_size}")
        if self.concurrency <= 0:
            errors.append(f"Invalid concurrency: {self.concurrency}")
        if (
            self.relationship_concurrency is not None
            and self.relationship_concurrency <= 0
        ):
            errors.append(
                f"Invalid relationship concurrency: {self.relationship_concurrency}"
            )

        return len(errors) == 0, errors


def format_property_list(names: Iterable[str]) -> str:
    return ", ".join(sorted(names)) or "-"


def print_config_summary(config: CopyConfig) -> None:
    """Print a summary of the configuration."""
    print("🔧 Configuration Summary:")
    print("-" * 30)
    print(f"Source: {config.source.uri} ({config.source.database})")
    print(f"Target: {config.target.uri} ({config.target.database})")
    print(
        "Excluded node properties: "
        f"{format_property_list(config.exclude_node_properties)}"
    )
    print(
        "Excluded relationship properties: "
        f"{format_property_list(config.exclude_relationship_properties)}"
    )
    print(f"Batch size: {config.batch_size}")
    print(f"Writers: {config.concurrency}")
    print(f"Lock source: {'✅ Yes' if config.lock_source_database else 'No'}")
    print()
