"""
localexec: run a local command as a schedulable, interruptible job.

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Data structures and type definitions
- validation: Error taxonomy, error handling and value validation
- system: Command line tokenization and process status helpers
- executor: Process launching, output reading and thread pools
- orchestration: The command job and its termination protocol
- cli: Command-line interface

Usage:
    From command line:
        localexec --command CMD [--command-args ARGS] [--command-work-dir DIR]

    Programmatically:
        from localexec import JobExecutionContext, LocalCommandExecutorJob
        from localexec.executor import initialize_global_thread_pools

        pool = initialize_global_thread_pools()
        job = LocalCommandExecutorJob(pool)
        context = JobExecutionContext({"command": "ls", "commandArgs": "-l"})
        job.execute(context)
"""

from .config import clear_config_cache, get_config, set_config_path

from .models import (
    AppConfig,
    CommandSpec,
    ExecutionResult,
    ExecutorConfig,
    ProcessState,
    ProcessStatus,
    TerminationKind,
    TerminationOutcome,
    ThreadPoolConfig,
)

from .orchestration import JobExecutionContext, LocalCommandExecutorJob, ProcessTerminator

from .system import prepare_command_line, tokenize_command_args

from .validation import (
    CommandConfigurationError,
    CommandExitCodeError,
    CommandInterruptedError,
    CommandLaunchError,
    JobExecutionError,
    UnableToInterruptJobError,
    ValidationError,
)

from .cli import main_cli

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "JobExecutionContext",
    "LocalCommandExecutorJob",
    "ProcessTerminator",
    "main_cli",
    # Models
    "AppConfig",
    "ExecutorConfig",
    "ThreadPoolConfig",
    "CommandSpec",
    "ExecutionResult",
    "ProcessState",
    "ProcessStatus",
    "TerminationKind",
    "TerminationOutcome",
    # System utilities
    "prepare_command_line",
    "tokenize_command_args",
    # Errors
    "ValidationError",
    "JobExecutionError",
    "CommandConfigurationError",
    "CommandLaunchError",
    "CommandInterruptedError",
    "CommandExitCodeError",
    "UnableToInterruptJobError",
]
