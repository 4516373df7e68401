"""
Bounded, retrying termination of a command process.

The ProcessTerminator runs on whichever thread delivers an interrupt request,
concurrently with the executing thread that is blocked waiting for the same
process to exit. It never waits on or closes the process itself; it only
sends destroy signals and probes liveness.
"""

import logging
import threading
from typing import Any, Optional

from ..models.config import ExecutorConfig
from ..models.runtime import TerminationKind, TerminationOutcome
from ..system.processes import get_process_pid, is_process_alive
from ..validation import UnableToInterruptJobError

logger = logging.getLogger(__name__)

DESTROY_METHODS = ("kill", "terminate")


class ProcessTerminator:
    """
    Repeatedly destroys a process until it is confirmed dead or all
    attempts are used up.

    Each attempt sends one destroy signal and then pauses for ``retry_delay``
    seconds before the next liveness check. There is no graceful phase: with
    the default ``destroy_method`` every signal is SIGKILL (TerminateProcess
    on Windows).
    """

    def __init__(self, max_attempts: int = 10, retry_delay: float = 1.0,
                 destroy_method: str = "kill"):
        """
        Args:
            max_attempts: Maximum number of destroy signals to send
            retry_delay: Seconds between a destroy signal and the next liveness check
            destroy_method: "kill" for a forceful kill, "terminate" for SIGTERM
        """
        if destroy_method not in DESTROY_METHODS:
            raise ValueError(f"destroy_method must be one of {DESTROY_METHODS}, got {destroy_method}")
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.destroy_method = destroy_method
        self._wakeup = threading.Event()

    @classmethod
    def from_config(cls, config: ExecutorConfig) -> "ProcessTerminator":
        return cls(
            max_attempts=config.max_destroy_attempts,
            retry_delay=config.destroy_retry_delay,
            destroy_method=config.destroy_method,
        )

    def terminate(self, process: Optional[Any]) -> TerminationOutcome:
        """
        Run the destroy protocol against a process.

        Args:
            process: The launched subprocess.Popen-like handle, or None if
                nothing has been launched yet

        Returns:
            KILLED or ALREADY_NOT_RUNNING on success; FAILED_WITH_PID or
            FAILED_NO_PID when the process survived every attempt

        Raises:
            UnableToInterruptJobError: Immediately, if ``process`` is None
        """
        if process is None:
            logger.warning("The command process has not been started yet.")
            raise UnableToInterruptJobError(
                "Cannot kill the command process because it has not been started."
            )

        self._wakeup.clear()
        pid = get_process_pid(process)

        if not is_process_alive(process):
            logger.info(f"The command process is not running anymore: {_describe(process)}")
            return TerminationOutcome(TerminationKind.ALREADY_NOT_RUNNING)

        attempts = 0
        while attempts < self.max_attempts and is_process_alive(process):
            attempts += 1
            logger.info(
                f"Attempting to kill the started command process: {_describe(process)}. "
                f"Attempt count: {attempts}"
            )
            self._destroy(process)
            self._pause()

        if is_process_alive(process):
            logger.warning(f"Failed to kill the started command process: {_describe(process)}")
            return TerminationOutcome.failed(attempts, pid)

        logger.info(f"Successfully killed the started command process: {_describe(process)}")
        return TerminationOutcome(TerminationKind.KILLED, attempts=attempts)

    def wake(self) -> None:
        """Cut the current pause short, e.g. once the process is known to have exited."""
        self._wakeup.set()

    def _destroy(self, process: Any) -> None:
        try:
            if self.destroy_method == "kill":
                process.kill()
            else:
                process.terminate()
        except ProcessLookupError:
            # Exited between the liveness check and the signal.
            pass
        except OSError as e:
            logger.warning(f"Error sending destroy signal to {_describe(process)}: {e}")

    def _pause(self) -> None:
        # A wake-up only shortens the pause; the liveness check decides.
        self._wakeup.wait(self.retry_delay)


def failure_message(outcome: TerminationOutcome) -> str:
    """Human-readable explanation for a failed termination outcome."""
    if outcome.kind is TerminationKind.FAILED_WITH_PID:
        return (
            f"Cannot kill the started command process [pid={outcome.pid}]. "
            "Please kill the process in the operating system to stop this job."
        )
    return (
        "Cannot kill the started command process. "
        "Please kill the process in the operating system to stop this job."
    )


def _describe(process: Any) -> str:
    return f"pid={getattr(process, 'pid', None)} args={getattr(process, 'args', None)}"
