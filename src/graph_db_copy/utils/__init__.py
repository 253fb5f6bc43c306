"""
Utilities package for the copy tool.

This package contains configuration management, environment loading and
connection probing helpers.
"""

from .config import (
    ConnectionConfig,
    CopyConfig,
    parse_property_list,
    print_config_summary,
)
from .environment import (
    CopyEnvironmentError,
    DatabaseConnectionError,
    create_driver,
    load_environment,
    print_environment_help,
    print_troubleshooting_help,
    probe_all_connections,
    probe_connection,
    setup_and_validate_environment,
    validate_config,
)

__all__ = [
    # Configuration utilities
    "ConnectionConfig",
    "CopyConfig",
    "parse_property_list",
    "print_config_summary",
    # Environment utilities
    "CopyEnvironmentError",
    "DatabaseConnectionError",
    "create_driver",
    "load_environment",
    "print_environment_help",
    "print_troubleshooting_help",
    "probe_all_connections",
    "probe_connection",
    "setup_and_validate_environment",
    "validate_config",
]
