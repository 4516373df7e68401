"""
Validation and error handling for the localexec package.

This module provides input validation, the job error taxonomy and
consistent error reporting across the application.
"""

from .exceptions import (
    CommandConfigurationError,
    CommandExitCodeError,
    CommandInterruptedError,
    CommandLaunchError,
    ErrorSeverity,
    JobExecutionError,
    UnableToInterruptJobError,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
    handle_subprocess_error,
)

from .validators import (
    validate_directory,
    validate_encoding,
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
)

__all__ = [
    # Errors
    "ErrorSeverity",
    "ValidationError",
    "JobExecutionError",
    "CommandConfigurationError",
    "CommandLaunchError",
    "CommandInterruptedError",
    "CommandExitCodeError",
    "UnableToInterruptJobError",
    # Handlers
    "handle_error",
    "handle_config_error",
    "handle_subprocess_error",
    "handle_cli_error",
    # Validators
    "validate_directory",
    "validate_encoding",
    "validate_enum_choice",
    "validate_non_empty_string",
    "validate_positive_float",
    "validate_positive_integer",
]
