"""
Runtime data models.

This module contains the data structures that describe one command execution:
the command to run, the status of the launched process, the result of the
execution and the outcome of a termination request.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class CommandSpec:
    """
    Immutable description of the command a job executes.

    The working directory, when present, has already been checked to be an
    existing directory by the time a CommandSpec is built.
    """

    # Executable path or name; always the first element of the command line.
    path: str
    # Raw, unparsed argument string as supplied by the caller.
    raw_args: Optional[str] = None
    # Working directory for the process; None means inherit the caller's.
    work_dir: Optional[Path] = None


@dataclass(frozen=True)
class ExecutionResult:
    """Result of a command process that was launched and ran to completion."""

    exit_code: int
    # Combined stdout/stderr text, or None if the process wrote nothing.
    output: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


class ProcessState(Enum):
    """Liveness of a process as reported by a status probe."""
    ALIVE = "alive"
    EXITED = "exited"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ProcessStatus:
    """
    Value returned by a non-blocking status probe.

    ``exit_code`` is only set when ``state`` is EXITED and the code is known.
    """

    state: ProcessState
    exit_code: Optional[int] = None

    @property
    def is_alive(self) -> bool:
        """True unless the process is known to have exited."""
        return self.state is not ProcessState.EXITED


class TerminationKind(Enum):
    """Tag of a TerminationOutcome."""
    KILLED = "killed"
    ALREADY_NOT_RUNNING = "already_not_running"
    FAILED_WITH_PID = "failed_with_pid"
    FAILED_NO_PID = "failed_no_pid"


@dataclass(frozen=True)
class TerminationOutcome:
    """
    Outcome of a bounded destroy protocol run against one process.

    Attributes:
        kind: Which terminal state the protocol reached
        attempts: Number of destroy signals that were sent
        pid: Process ID, only present for FAILED_WITH_PID
    """

    kind: TerminationKind
    attempts: int = 0
    pid: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.kind in (TerminationKind.KILLED, TerminationKind.ALREADY_NOT_RUNNING)

    @classmethod
    def failed(cls, attempts: int, pid: Optional[int]) -> "TerminationOutcome":
        """Build the failure outcome, tagged by whether a PID is known."""
        if pid is None:
            return cls(TerminationKind.FAILED_NO_PID, attempts=attempts)
        return cls(TerminationKind.FAILED_WITH_PID, attempts=attempts, pid=pid)
