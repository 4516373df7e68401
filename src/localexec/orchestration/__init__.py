"""
Job orchestration for the localexec package.

This module ties the pieces of a command execution together: the job that
launches the command and waits for it, the terminator that stops it on
request, and the state the two share across threads.
"""

from .context import JobExecutionContext
from .job import (
    JDM_KEY_COMMAND,
    JDM_KEY_COMMAND_ARGS,
    JDM_KEY_COMMAND_WORK_DIR,
    AbstractJob,
    LocalCommandExecutorJob,
)
from .process_manager import ProcessTerminator, failure_message
from .shared_state import ProcessHandleSlot, RuntimeState

__all__ = [
    "JobExecutionContext",
    "JDM_KEY_COMMAND",
    "JDM_KEY_COMMAND_ARGS",
    "JDM_KEY_COMMAND_WORK_DIR",
    "AbstractJob",
    "LocalCommandExecutorJob",
    "ProcessTerminator",
    "failure_message",
    "ProcessHandleSlot",
    "RuntimeState",
]
