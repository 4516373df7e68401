"""
Configuration management for the localexec package.

This module provides a clean interface for loading, validating, and accessing
configuration data from a TOML file with singleton pattern management.
"""

# Main configuration interface
from .manager import (
    DEFAULT_CONFIG_FILE_PATH,
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    set_config_path,
)

# For advanced usage - direct access to loaders and validators
from .loader import get_section, read_config_file
from .validators import validate_executor_config, validate_thread_pool_config

__all__ = [
    # Main interface
    "DEFAULT_CONFIG_FILE_PATH",
    "get_config",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "get_config_info",
    # Advanced interface
    "read_config_file",
    "get_section",
    "validate_executor_config",
    "validate_thread_pool_config",
]
