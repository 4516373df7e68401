"""
Exception types and error handling helpers.

Two families of errors are defined here. ValidationError reports a bad
configuration value or job parameter. JobExecutionError and its subclasses
report why one execution of the command job failed; UnableToInterruptJobError
is raised to the caller of an interrupt request instead.

handle_error() and its thin wrappers give every layer the same way of logging
a failure before deciding whether to propagate it.
"""

import logging
import sys
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Union

if TYPE_CHECKING:
    from ..models.runtime import TerminationOutcome

logger = logging.getLogger(__name__)
_module_logger = logger


class ErrorSeverity(Enum):
    """Log level an error is reported at."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def log_level(self) -> int:
        return logging.getLevelName(self.name)


class ValidationError(Exception):
    """
    A configuration value or job parameter is invalid.

    Attributes:
        field_name: Dotted name of the offending key, e.g. ``executor.destroy_method``
        value: The rejected value
    """

    def __init__(self, message: str, field_name: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.field_name = field_name
        self.value = value


class JobExecutionError(Exception):
    """Base class for failures of a single job execution."""


class CommandConfigurationError(JobExecutionError):
    """A job parameter is missing or invalid; no process was started."""

    def __init__(self, message: str, parameter: Optional[str] = None):
        super().__init__(message)
        self.parameter = parameter


class CommandLaunchError(JobExecutionError):
    """The operating system failed to start the command process."""


class CommandInterruptedError(JobExecutionError):
    """The wait for the command process to finish was interrupted."""


class CommandExitCodeError(JobExecutionError):
    """The command process finished with a non-zero exit code."""

    def __init__(self, exit_code: int):
        super().__init__(f"Command finished with non-zero exit code: {exit_code}")
        self.exit_code = exit_code


class UnableToInterruptJobError(Exception):
    """
    Raised when an interrupt request cannot stop the running command.

    Attributes:
        pid: Process ID of the surviving process, if it could be determined
        outcome: The termination outcome reported by the terminator, if any
    """

    def __init__(self, message: str, pid: Optional[int] = None,
                 outcome: Optional["TerminationOutcome"] = None):
        super().__init__(message)
        self.pid = pid
        self.outcome = outcome


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log ``error`` as "Error in <context>: <error>" and optionally re-raise it.

    Tracebacks are attached at DEBUG and CRITICAL severity only.

    Args:
        error: The exception being handled
        context: What was being done when it happened
        severity: ErrorSeverity member or its name, case-insensitive
        reraise: Re-raise ``error`` after logging
        logger: Logger to report to; this module's logger if None
    """
    if isinstance(severity, str):
        severity = ErrorSeverity(severity.lower())

    target = logger or _module_logger
    with_traceback = severity in (ErrorSeverity.DEBUG, ErrorSeverity.CRITICAL)
    target.log(severity.log_level, f"Error in {context}: {error}", exc_info=error if with_traceback else None)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """handle_error() for configuration loading and validation."""
    handle_error(error, f"config {context}", **kwargs)


def handle_subprocess_error(error: Exception, command: str, **kwargs) -> None:
    """handle_error() for failures to start or talk to a child process."""
    handle_error(error, f"subprocess command '{command}'", **kwargs)


def handle_cli_error(error: Exception, context: str, exit_code: int = 1,
                     severity: ErrorSeverity = ErrorSeverity.ERROR, **kwargs) -> None:
    """Log a fatal command-line error and terminate with ``exit_code``."""
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)
    sys.exit(exit_code)
