"""
Environment and Database Connection Utilities

This module handles loading configuration from the environment, creating
drivers and probing database connections before a copy starts.
"""

import logging
from typing import Dict, List, Optional, Tuple

import neo4j
from neo4j.exceptions import DriverError, Neo4jError
from dotenv import load_dotenv

from .config import ConnectionConfig, CopyConfig

logger = logging.getLogger(__name__)


class CopyEnvironmentError(Exception):
    """Custom exception for configuration errors."""


class DatabaseConnectionError(Exception):
    """Custom exception for database connection errors."""


def load_environment() -> None:
    """Load environment variables from .env file."""
    load_dotenv()


def get_environment_variables() -> Dict[str, str]:
    """Get the supported environment variables and their descriptions."""
    variables: Dict[str, str] = {}
    for prefix in ("SOURCE", "TARGET"):
        side = prefix.lower()
        variables.update(
            {
                f"{prefix}_URI": f"The {side} address (default: bolt://localhost:7687)",
                f"{prefix}_USERNAME": f"The {side} username (default: neo4j)",
                f"{prefix}_PASSWORD": f"The {side} password (prompted when empty)",
                f"{prefix}_DATABASE": f"The {side} database name (default: neo4j)",
            }
        )
    variables.update(
        {
            "EXCLUDE_NODE_PROPERTIES": "Comma-separated node properties to skip",
            "EXCLUDE_RELATIONSHIP_PROPERTIES": (
                "Comma-separated relationship properties to skip"
            ),
            "COPY_BATCH_SIZE": "Entities per write transaction (default: 1000)",
            "COPY_CONCURRENCY": "Concurrent batch writers (default: 4)",
            "COPY_RELATIONSHIP_CONCURRENCY": (
                "Concurrent relationship writers (default: COPY_CONCURRENCY)"
            ),
            "LOCK_SOURCE_DATABASE": "Make the source read-only while copying",
            "GRAPH_DB_COPY_LOG_LEVEL": "Logging level (default: INFO)",
        }
    )
    return variables


def setup_and_validate_environment() -> CopyConfig:
    """
    Load the environment and build the configuration from it.

    Raises:
        CopyEnvironmentError: If a variable cannot be parsed
    """
    load_environment()
    try:
        config = CopyConfig.from_environment()
    except ValueError as e:
        raise CopyEnvironmentError(f"Invalid environment variable value: {e}") from e

    logger.info("Environment variables loaded successfully")
    return config


def validate_config(config: CopyConfig) -> None:
    """
    Raises:
        CopyEnvironmentError: If the configuration is invalid
    """
    is_valid, errors = config.validate()
    if not is_valid:
        error_msg = "Invalid configuration:\n"
        for error in errors:
            error_msg += f"  - {error}\n"
        raise CopyEnvironmentError(error_msg)


def create_driver(connection: ConnectionConfig) -> neo4j.Driver:
    """Create a driver for one side of the copy."""
    return neo4j.GraphDatabase.driver(
        connection.uri, auth=(connection.username, connection.password)
    )


def probe_connection(driver: neo4j.Driver) -> Tuple[bool, Optional[str]]:
    """
    Test a database connection.

    Returns:
        Tuple of (is_connected, error_message)
    """
    try:
        driver.verify_connectivity()
        return True, None
    except (Neo4jError, DriverError) as e:
        return False, f"Connection error: {e}"


def probe_all_connections(
    config: CopyConfig, source_driver: neo4j.Driver, target_driver: neo4j.Driver
) -> None:
    """
    Probe the source and target connections.

    Raises:
        DatabaseConnectionError: If any connection fails
    """
    errors: List[str] = []

    for side, connection, driver in (
        ("Source", config.source, source_driver),
        ("Target", config.target, target_driver),
    ):
        logger.info("Testing %s connection...", side.lower())
        connected, error = probe_connection(driver)
        if not connected:
            errors.append(f"{side} ({connection.uri}): {error}")
        else:
            logger.info("✅ %s connection successful to %s", side, connection.uri)

    if errors:
        error_msg = "Database connection failures:\n"
        for error in errors:
            error_msg += f"  - {error}\n"
        raise DatabaseConnectionError(error_msg)


def print_environment_help() -> None:
    """Print helpful environment setup information."""
    print("\nConfiguration can be given as arguments or in a .env file.")
    print("\nExample .env file:")
    print("SOURCE_URI=neo4j+s://source-server:7687")
    print("SOURCE_DATABASE=movies")
    print("SOURCE_PASSWORD=your_source_password")
    print("TARGET_URI=neo4j+s://target-server:7687")
    print("TARGET_DATABASE=movies")
    print("TARGET_PASSWORD=your_target_password")

    print("\nSupported environment variables:")
    for var, desc in get_environment_variables().items():
        print(f"  - {var}: {desc}")


def print_troubleshooting_help() -> None:
    """Print troubleshooting information."""
    print("\nTroubleshooting steps:")
    print("1. Check the source and target addresses and credentials")
    print("2. Ensure both servers are running and reachable from this machine")
    print("3. Check that both databases exist and the source database is online")
    print("4. Locking the source requires an admin user on the source server")
