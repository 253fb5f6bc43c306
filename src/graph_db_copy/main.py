"""
Graph database copy - Main Entry Point

Copy the content of a Neo4j database to another Neo4j database, via the
network, through the Bolt protocol.
Run with: graph-db-copy --help
"""

import argparse
import getpass
import logging
import os
import sys
from typing import Optional

from . import __version__
from .core import ProgressReporter, SourceStateGuard, transfer
from .database import BoltAdministrator, BoltReader, BoltWriter
from .exceptions import CopyError
from .utils import (
    CopyConfig,
    CopyEnvironmentError,
    DatabaseConnectionError,
    create_driver,
    load_environment,
    parse_property_list,
    print_config_summary,
    print_environment_help,
    print_troubleshooting_help,
    probe_all_connections,
    setup_and_validate_environment,
    validate_config,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

LOG_LEVEL_CHOICES = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"]


def _upper_env(name: str) -> Optional[str]:
    value = os.getenv(name)
    return value.upper() if value else None


def parse_cli_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments. Unset options fall back to the environment."""

    parser = argparse.ArgumentParser(
        prog="graph-db-copy",
        description=(
            "Copy the content of a Neo4j database to another Neo4j database, "
            "via the network, through the bolt protocol."
        ),
    )

    parser.add_argument(
        "-sa",
        "--source-address",
        help="The source database address (ex: neo4j+s://my-server:7687). "
        "Overrides SOURCE_URI.",
    )
    parser.add_argument(
        "-su",
        "--source-username",
        help="The source database username to connect as (default: neo4j)",
    )
    parser.add_argument(
        "-sp",
        "--source-password",
        help="The source database password, prompted for when not given",
    )
    parser.add_argument(
        "-sd", "--source-database", help="The source database to copy from"
    )
    parser.add_argument(
        "-ta",
        "--target-address",
        help="The target database address (ex: neo4j+s://my-server:7687). "
        "Overrides TARGET_URI.",
    )
    parser.add_argument(
        "-tu",
        "--target-username",
        help="The target database username to connect as (default: neo4j)",
    )
    parser.add_argument(
        "-tp",
        "--target-password",
        help="The target database password, prompted for when not given",
    )
    parser.add_argument(
        "-td", "--target-database", help="The target database to copy into"
    )
    parser.add_argument(
        "-enp",
        "--exclude-node-properties",
        help="Comma-separated list of node properties to exclude from the copy",
    )
    parser.add_argument(
        "-erp",
        "--exclude-relationship-properties",
        help="Comma-separated list of relationship properties to exclude from "
        "the copy",
    )
    parser.add_argument(
        "-lock",
        "--lock-source-database",
        action="store_true",
        default=None,
        help="Set the source database to read-only mode while copying",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        help="Number of entities written per transaction (default: 1000)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        help="Number of batches written concurrently (default: 4)",
    )
    parser.add_argument(
        "--relationship-concurrency",
        type=int,
        help="Number of relationship batches written concurrently "
        "(default: same as --concurrency)",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Do not display progress bars",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVEL_CHOICES,
        default=_upper_env("GRAPH_DB_COPY_LOG_LEVEL"),
        type=str.upper,
        help="Logging level. Overrides GRAPH_DB_COPY_LOG_LEVEL.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    return parser.parse_args(argv)


def _configure_log_level(level_name: Optional[str]) -> None:
    """Configure global logging level if provided."""

    if not level_name:
        return

    numeric_level = getattr(logging, level_name.upper(), None)
    if not isinstance(numeric_level, int):
        logger.warning("Unknown log level '%s'; falling back to INFO", level_name)
        numeric_level = logging.INFO

    logging.getLogger().setLevel(numeric_level)
    for handler in logging.getLogger().handlers:
        handler.setLevel(numeric_level)
    logger.setLevel(numeric_level)


def apply_cli_overrides(config: CopyConfig, args: argparse.Namespace) -> CopyConfig:
    """Overwrite configuration values with the arguments that were given."""
    for side, connection in (("source", config.source), ("target", config.target)):
        for attribute, option in (
            ("uri", "address"),
            ("username", "username"),
            ("password", "password"),
            ("database", "database"),
        ):
            value = getattr(args, f"{side}_{option}")
            if value is not None:
                setattr(connection, attribute, value)

    if args.exclude_node_properties is not None:
        config.exclude_node_properties = parse_property_list(
            args.exclude_node_properties
        )
    if args.exclude_relationship_properties is not None:
        config.exclude_relationship_properties = parse_property_list(
            args.exclude_relationship_properties
        )
    if args.lock_source_database is not None:
        config.lock_source_database = args.lock_source_database
    if args.batch_size is not None:
        config.batch_size = args.batch_size
    if args.concurrency is not None:
        config.concurrency = args.concurrency
    if args.relationship_concurrency is not None:
        config.relationship_concurrency = args.relationship_concurrency
    if args.no_progress:
        config.show_progress = False
    return config


def prompt_missing_passwords(config: CopyConfig) -> None:
    """Ask for the passwords that were not configured, when attached to a TTY."""
    if not sys.stdin.isatty():
        return
    for side, connection in (("source", config.source), ("target", config.target)):
        if not connection.password:
            connection.password = getpass.getpass(
                f"Password for {side} {connection.username}@{connection.uri}: "
            )


def print_banner() -> None:
    """Print application banner."""
    print("=" * 60)
    print("🚀 Graph Database Copy")
    print("=" * 60)
    print()


def run_copy(config: CopyConfig) -> int:
    """
    Run the copy with the specified configuration.

    Returns:
        Number of relationships written
    """
    with create_driver(config.source) as source_driver, create_driver(
        config.target
    ) as target_driver:
        probe_all_connections(config, source_driver, target_driver)

        if config.lock_source_database:
            guard = SourceStateGuard.locking(
                BoltAdministrator(source_driver), config.source.database
            )
        else:
            guard = SourceStateGuard.disabled()

        return transfer(
            BoltReader(source_driver, config.source.database),
            BoltWriter(target_driver, config.target.database),
            config.to_copy_options(),
            guard=guard,
            progress_factory=ProgressReporter if config.show_progress else None,
        )


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the copy tool."""
    load_environment()
    args = parse_cli_args(argv)

    _configure_log_level(args.log_level)

    print_banner()

    try:
        config = apply_cli_overrides(setup_and_validate_environment(), args)
        prompt_missing_passwords(config)
        validate_config(config)
        print_config_summary(config)

        relationships_written = run_copy(config)

        print(f"\n✅ Copy completed - {relationships_written} relationships written")

    except CopyEnvironmentError as e:
        print("\n❌ Configuration Error:")
        print(str(e))
        print_environment_help()
        sys.exit(1)

    except DatabaseConnectionError as e:
        print("\n❌ Database Connection Error:")
        print(str(e))
        print_troubleshooting_help()
        sys.exit(1)

    except CopyError as e:
        print(f"\n❌ Copy failed ({type(e).__name__}): {e}")
        logger.error("Copy failed: %s", e, exc_info=True)
        sys.exit(1)

    except KeyboardInterrupt:
        print("\n\n⚠️  Copy cancelled by user")
        sys.exit(130)

    except Exception as e:  # pylint: disable=broad-except
        print(f"\n❌ Unexpected Error: {e}")
        logger.error("Unexpected error in main: %s", e, exc_info=True)
        print_troubleshooting_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
