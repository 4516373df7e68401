"""
Local command executor job.

This module provides LocalCommandExecutorJob, a job that executes a local
command given in its job data map, waits for it to finish and reports the
command's exit code as the job result. The following job data map parameters
are supported:

command
    The command to execute (required).
commandArgs
    Optional space-separated command line arguments. An argument that contains
    spaces must be enclosed in double or single quotes.
commandWorkDir
    Optional work directory for the command. Must be an existing directory.

A non-zero exit code fails the job. A running command can be stopped from
another thread with interrupt().
"""

import logging
import subprocess
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol

from ..config import get_config
from ..executor.launcher import ProcessLauncher
from ..executor.output_reader import StandardOutputReader
from ..models.config import ExecutorConfig
from ..models.runtime import CommandSpec, ExecutionResult, TerminationOutcome
from ..system.commands import prepare_command_line
from ..validation import (
    CommandConfigurationError,
    CommandExitCodeError,
    CommandInterruptedError,
    CommandLaunchError,
    ErrorSeverity,
    JobExecutionError,
    UnableToInterruptJobError,
    ValidationError,
    handle_error,
    validate_directory,
)
from .context import JobExecutionContext
from .process_manager import ProcessTerminator, failure_message
from .shared_state import RuntimeState

logger = logging.getLogger(__name__)

JDM_KEY_COMMAND = "command"
JDM_KEY_COMMAND_ARGS = "commandArgs"
JDM_KEY_COMMAND_WORK_DIR = "commandWorkDir"


class TaskSubmitter(Protocol):
    """Anything that can run a callable in the background and return a Future."""

    def submit(self, fn, *args, **kwargs) -> Future: ...


class AbstractJob(ABC):
    """
    Base class for jobs that must not run concurrently with themselves.

    Subclasses implement execute_job(); execute() guards against concurrent
    execution of the same instance and logs job failures.
    """

    def __init__(self):
        self._execution_lock = threading.Lock()

    def execute(self, context: JobExecutionContext) -> None:
        """
        Run the job once.

        Raises:
            RuntimeError: If this job instance is already executing
            JobExecutionError: If the job execution fails
        """
        if not self._execution_lock.acquire(blocking=False):
            raise RuntimeError("Job is already running")

        try:
            logger.debug(f"Inside job: {context.job_key}")
            self.execute_job(context)
        except JobExecutionError as e:
            handle_error(
                error=e,
                context=f"job {context.job_key}",
                severity=ErrorSeverity.ERROR,
                reraise=True,
                logger=logger,
            )
        finally:
            self._execution_lock.release()

    @abstractmethod
    def execute_job(self, context: JobExecutionContext) -> None:
        """Job body; raise JobExecutionError to signal failure."""


class LocalCommandExecutorJob(AbstractJob):
    """
    Executes a local command and reports its exit code.

    The command's combined stdout/stderr is drained on ``output_executor``
    while the executing thread blocks on the process exit. The captured
    output is logged and stored on the context.
    """

    def __init__(
        self,
        output_executor: TaskSubmitter,
        config: Optional[ExecutorConfig] = None,
        launcher: Optional[ProcessLauncher] = None,
    ):
        """
        Args:
            output_executor: Shared pool the output reader task is submitted to
            config: Executor settings; read from the global configuration if None
            launcher: Process launcher; one using the configured encoding if None
        """
        super().__init__()
        self.config = config or get_config().executor
        self.output_executor = output_executor
        self.launcher = launcher or ProcessLauncher(encoding=self.config.output_encoding)
        self.terminator = ProcessTerminator.from_config(self.config)
        self.state = RuntimeState()

    def interrupt(self) -> TerminationOutcome:
        """
        Stop the running command process.

        Blocks until the process is confirmed dead or the destroy attempts are
        used up. Safe to call from any thread while execute() is running.

        Returns:
            The termination outcome; always a successful one

        Raises:
            UnableToInterruptJobError: If no process has been started yet, or
                the process survived every destroy attempt
        """
        logger.info("Received interrupt request to stop this job.")

        outcome = self.terminator.terminate(self.state.process_slot.get())
        if not outcome.succeeded:
            raise UnableToInterruptJobError(failure_message(outcome), pid=outcome.pid, outcome=outcome)
        return outcome

    def interrupt_wait(self) -> None:
        """Make the executing thread stop waiting for the process to exit."""
        self.state.wait_interrupted.set()

    def execute_job(self, context: JobExecutionContext) -> None:
        # A new run starts with an empty handle slot and a fresh wait flag.
        state = RuntimeState()
        self.state = state

        command_spec = self._build_command_spec(context.merged_job_data_map)
        command_line = prepare_command_line(command_spec.path, command_spec.raw_args)

        logger.info(f"Executing local command using command line: {command_line}")
        process = self.launcher.launch(command_line, command_spec.work_dir)
        state.process_slot.publish(process)

        output_future = self._submit_output_reader(process)

        try:
            exit_code = self._wait_for_exit(process, state)
        except CommandInterruptedError:
            # Still running; its output is logged when the reader finishes.
            output_future.add_done_callback(self._log_late_output)
            raise
        self.terminator.wake()

        logger.debug(f"Local command finished with exit code: {exit_code}")
        # The exit code is the job's result even when the job fails below.
        context.result = exit_code

        output = self._collect_output(output_future)
        self._log_output(output)

        context.execution_result = ExecutionResult(exit_code=exit_code, output=output)

        if exit_code != 0:
            raise CommandExitCodeError(exit_code)

    def _build_command_spec(self, job_data: Mapping[str, Any]) -> CommandSpec:
        """Read and check the job data map parameters before anything is started."""
        command = job_data.get(JDM_KEY_COMMAND)
        if command is None:
            raise CommandConfigurationError(
                f"Missing required '{JDM_KEY_COMMAND}' job data map parameter.",
                parameter=JDM_KEY_COMMAND,
            )
        if not isinstance(command, str) or not command.strip():
            raise CommandConfigurationError(
                f"The '{JDM_KEY_COMMAND}' job data map parameter must be a non-empty string.",
                parameter=JDM_KEY_COMMAND,
            )

        command_args = job_data.get(JDM_KEY_COMMAND_ARGS)
        if command_args is not None:
            command_args = str(command_args)

        command_work_dir = job_data.get(JDM_KEY_COMMAND_WORK_DIR)
        work_dir: Optional[Path] = None
        if command_work_dir is not None:
            try:
                work_dir = validate_directory(command_work_dir, field_name=JDM_KEY_COMMAND_WORK_DIR)
            except ValidationError as e:
                raise CommandConfigurationError(
                    f"Command work directory '{Path(command_work_dir).absolute()}' specified in the "
                    f"'{JDM_KEY_COMMAND_WORK_DIR}' job data map parameter does not exist.",
                    parameter=JDM_KEY_COMMAND_WORK_DIR,
                ) from e

        return CommandSpec(path=command, raw_args=command_args, work_dir=work_dir)

    def _submit_output_reader(self, process: subprocess.Popen) -> Future:
        try:
            return self.output_executor.submit(StandardOutputReader(process.stdout))
        except Exception as e:
            # Without a reader the pipe fills up and the command blocks forever.
            logger.error(f"Cannot read output of command process {process.pid}; killing it.")
            process.kill()
            process.wait()
            process.stdout.close()
            raise CommandLaunchError("Error submitting the command output reader task.") from e

    def _wait_for_exit(self, process: subprocess.Popen, state: RuntimeState) -> int:
        """Block until the process exits or interrupt_wait() is called."""
        while True:
            if state.wait_interrupted.is_set():
                raise CommandInterruptedError("Command process has been interrupted.")
            try:
                return process.wait(timeout=self.config.wait_poll_interval)
            except subprocess.TimeoutExpired:
                continue

    def _collect_output(self, output_future: Future) -> Optional[str]:
        try:
            return output_future.result(timeout=self.config.output_result_timeout)
        except Exception as e:
            logger.warning("Error getting process output.", exc_info=e)
            return None

    def _log_output(self, output: Optional[str]) -> None:
        if output is None or not output.strip():
            logger.info("Local command produced no output.")
        else:
            logger.info(f"Local command produced the following output:\n{output}")

    def _log_late_output(self, output_future: Future) -> None:
        """Done-callback for the reader of a command whose wait was interrupted."""
        if output_future.cancelled():
            logger.warning("Output reader of the interrupted command was cancelled.")
            return
        error = output_future.exception()
        if error is not None:
            logger.warning("Error getting process output.", exc_info=error)
            return
        self._log_output(output_future.result())
