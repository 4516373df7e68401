"""
Data models for the command executor.

Configuration Models:
- Executor settings (destroy protocol, output handling)
- Output-reader thread pool settings

Runtime Models:
- Command description and execution result
- Process status probe values
- Termination outcomes
"""

from .config import AppConfig, ExecutorConfig, ThreadPoolConfig

from .runtime import (
    CommandSpec,
    ExecutionResult,
    ProcessState,
    ProcessStatus,
    TerminationKind,
    TerminationOutcome,
)

__all__ = [
    # Configuration
    "AppConfig",
    "ExecutorConfig",
    "ThreadPoolConfig",
    # Runtime
    "CommandSpec",
    "ExecutionResult",
    "ProcessState",
    "ProcessStatus",
    "TerminationKind",
    "TerminationOutcome",
]
