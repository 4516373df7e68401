"""
Unit tests for LocalCommandExecutorJob.

Parameter handling, the execution guard and the failure paths around the
output reader are tested here; end-to-end runs of real commands live in the
integration tests.
"""

import threading
from concurrent.futures import Future
from dataclasses import replace
from unittest.mock import Mock, patch

import pytest

from localexec.models import TerminationKind
from localexec.orchestration import JobExecutionContext, LocalCommandExecutorJob
from localexec.validation import (
    CommandConfigurationError,
    CommandInterruptedError,
    CommandLaunchError,
    JobExecutionError,
    UnableToInterruptJobError,
)


def _failing_launcher():
    launcher = Mock()
    launcher.launch.side_effect = CommandLaunchError("Error starting command process.")
    return launcher


def _run_in_thread(job, context):
    """Start job.execute() on a worker thread; returns (thread, errors list)."""
    errors = []

    def target():
        try:
            job.execute(context)
        except Exception as e:
            errors.append(e)

    thread = threading.Thread(target=target, name="JobExecutor", daemon=True)
    thread.start()
    return thread, errors


@pytest.mark.unit
class TestJobParameters:
    """Test cases for reading the job data map."""

    def test_missing_command(self, executor_config, output_pool):
        launcher = Mock()
        job = LocalCommandExecutorJob(output_pool, config=executor_config, launcher=launcher)
        context = JobExecutionContext({"commandArgs": "-l"})

        with pytest.raises(CommandConfigurationError, match="Missing required 'command'") as exc_info:
            job.execute(context)

        assert exc_info.value.parameter == "command"
        launcher.launch.assert_not_called()
        assert context.result is None

    @pytest.mark.parametrize("command", ["", "   ", 42])
    def test_invalid_command(self, executor_config, output_pool, command):
        launcher = Mock()
        job = LocalCommandExecutorJob(output_pool, config=executor_config, launcher=launcher)

        with pytest.raises(CommandConfigurationError, match="non-empty string"):
            job.execute(JobExecutionContext({"command": command}))

        launcher.launch.assert_not_called()

    def test_missing_work_dir(self, executor_config, output_pool, temp_dir):
        launcher = Mock()
        job = LocalCommandExecutorJob(output_pool, config=executor_config, launcher=launcher)
        missing = temp_dir / "missing"
        context = JobExecutionContext({"command": "ls", "commandWorkDir": str(missing)})

        with pytest.raises(CommandConfigurationError) as exc_info:
            job.execute(context)

        assert str(exc_info.value) == (
            f"Command work directory '{missing.absolute()}' specified in the "
            "'commandWorkDir' job data map parameter does not exist."
        )
        assert exc_info.value.parameter == "commandWorkDir"
        launcher.launch.assert_not_called()
        assert context.result is None

    def test_command_line_and_work_dir_reach_launcher(self, executor_config, output_pool, temp_dir):
        launcher = _failing_launcher()
        job = LocalCommandExecutorJob(output_pool, config=executor_config, launcher=launcher)
        context = JobExecutionContext(
            {"command": "/bin/tool", "commandArgs": '-f "a b" -x', "commandWorkDir": str(temp_dir)}
        )

        with pytest.raises(CommandLaunchError):
            job.execute(context)

        launcher.launch.assert_called_once_with(["/bin/tool", "-f", "a b", "-x"], temp_dir)
        assert context.result is None
        assert context.execution_result is None

    def test_launch_logs_command_line(self, executor_config, output_pool, caplog):
        caplog.set_level("INFO", logger="localexec.orchestration.job")
        job = LocalCommandExecutorJob(output_pool, config=executor_config, launcher=_failing_launcher())

        with pytest.raises(CommandLaunchError):
            job.execute(JobExecutionContext({"command": "tool", "commandArgs": "x"}))

        assert "Executing local command using command line: ['tool', 'x']" in caplog.text


@pytest.mark.unit
class TestJobConfiguration:
    """Test cases for how a job picks up its settings."""

    def test_config_from_global_configuration(self, config_files):
        from localexec.config import set_config_path

        set_config_path(config_files["config"])
        job = LocalCommandExecutorJob(Mock())

        assert job.config.max_destroy_attempts == 5
        assert job.terminator.max_attempts == 5
        assert job.terminator.retry_delay == 0.05
        assert job.launcher.encoding == "utf-8"

    def test_explicit_config(self, executor_config):
        job = LocalCommandExecutorJob(Mock(), config=replace(executor_config, destroy_method="terminate"))

        assert job.terminator.destroy_method == "terminate"


@pytest.mark.unit
class TestJobExecutionGuard:
    """Test cases for the concurrent execution guard."""

    def test_rejects_concurrent_execution(self, executor_config, output_pool):
        launcher = Mock()
        job = LocalCommandExecutorJob(output_pool, config=executor_config, launcher=launcher)
        job._execution_lock.acquire()
        try:
            with pytest.raises(RuntimeError, match="already running"):
                job.execute(JobExecutionContext({"command": "ls"}))
        finally:
            job._execution_lock.release()

        launcher.launch.assert_not_called()

    def test_guard_released_after_failure(self, executor_config, output_pool):
        job = LocalCommandExecutorJob(output_pool, config=executor_config, launcher=_failing_launcher())

        for _ in range(2):
            with pytest.raises(JobExecutionError):
                job.execute(JobExecutionContext({"command": "tool"}))

        assert not job._execution_lock.locked()


@pytest.mark.unit
class TestJobInterrupt:
    """Test cases for LocalCommandExecutorJob.interrupt."""

    def test_interrupt_before_execute(self, executor_config, output_pool):
        job = LocalCommandExecutorJob(output_pool, config=executor_config)

        with pytest.raises(UnableToInterruptJobError, match="has not been started"):
            job.interrupt()

    def test_interrupt_after_failed_launch(self, executor_config, output_pool):
        job = LocalCommandExecutorJob(output_pool, config=executor_config, launcher=_failing_launcher())
        with pytest.raises(CommandLaunchError):
            job.execute(JobExecutionContext({"command": "tool"}))

        with pytest.raises(UnableToInterruptJobError, match="has not been started"):
            job.interrupt()

    def test_interrupt_after_rerun_with_bad_parameters(self, executor_config, output_pool, python_exe):
        job = LocalCommandExecutorJob(output_pool, config=executor_config)
        job.execute(JobExecutionContext({"command": python_exe, "commandArgs": "-c pass"}))

        with pytest.raises(CommandConfigurationError):
            job.execute(JobExecutionContext({}))

        with pytest.raises(UnableToInterruptJobError, match="has not been started"):
            job.interrupt()

    def test_run_state_replaced_before_parameter_checks(self, executor_config, output_pool):
        job = LocalCommandExecutorJob(output_pool, config=executor_config)
        previous = job.state
        seen = []

        def record_state(job_data):
            seen.append(job.state)
            job.interrupt_wait()
            raise CommandConfigurationError("stop here", parameter="command")

        with patch.object(job, "_build_command_spec", side_effect=record_state):
            with pytest.raises(CommandConfigurationError):
                job.execute(JobExecutionContext({"command": "tool"}))

        assert seen[0] is job.state
        assert seen[0] is not previous
        assert job.state.wait_interrupted.is_set()
        assert not previous.wait_interrupted.is_set()

    def test_interrupt_failure_reports_pid(self, executor_config, output_pool, fake_process_class):
        job = LocalCommandExecutorJob(
            output_pool, config=replace(executor_config, max_destroy_attempts=2, destroy_retry_delay=0.01)
        )
        process = fake_process_class(survive_signals=None)
        job.state.process_slot.publish(process)

        with patch("localexec.orchestration.process_manager.get_process_pid", return_value=4321):
            with pytest.raises(UnableToInterruptJobError) as exc_info:
                job.interrupt()

        assert exc_info.value.pid == 4321
        assert exc_info.value.outcome.kind is TerminationKind.FAILED_WITH_PID
        assert "[pid=4321]" in str(exc_info.value)
        assert process.kill_calls == 2

    def test_interrupt_failure_without_pid(self, executor_config, output_pool, fake_process_class):
        job = LocalCommandExecutorJob(
            output_pool, config=replace(executor_config, max_destroy_attempts=1, destroy_retry_delay=0.01)
        )
        job.state.process_slot.publish(fake_process_class(survive_signals=None))

        with patch("localexec.orchestration.process_manager.get_process_pid", return_value=None):
            with pytest.raises(UnableToInterruptJobError) as exc_info:
                job.interrupt()

        assert exc_info.value.pid is None
        assert exc_info.value.outcome.kind is TerminationKind.FAILED_NO_PID

    def test_interrupt_kills_published_process(self, executor_config, output_pool, fake_process_class):
        job = LocalCommandExecutorJob(output_pool, config=executor_config)
        process = fake_process_class(survive_signals=2)
        job.state.process_slot.publish(process)

        outcome = job.interrupt()

        assert outcome.kind is TerminationKind.KILLED
        assert outcome.attempts == 3


@pytest.mark.unit
class TestJobOutputHandling:
    """Test cases for failures around the output reader task."""

    def test_output_task_failure_is_tolerated(self, executor_config, python_exe, caplog):
        failed = Future()
        failed.set_exception(RuntimeError("reader crashed"))
        pool = Mock()
        pool.submit.return_value = failed
        job = LocalCommandExecutorJob(pool, config=executor_config)
        context = JobExecutionContext({"command": python_exe, "commandArgs": "-c pass"})

        job.execute(context)

        assert context.result == 0
        assert context.execution_result.output is None
        assert "Error getting process output." in caplog.text
        job.state.process_slot.get().stdout.close()

    def test_output_timeout_keeps_result(self, executor_config, python_exe):
        pool = Mock()
        pool.submit.return_value = Future()
        job = LocalCommandExecutorJob(pool, config=replace(executor_config, output_result_timeout=0.2))
        context = JobExecutionContext({"command": python_exe, "commandArgs": "-c pass"})

        job.execute(context)

        assert context.result == 0
        assert context.execution_result.output is None
        job.state.process_slot.get().stdout.close()

    def test_submit_failure_kills_process(self, executor_config, python_exe):
        pool = Mock()
        pool.submit.side_effect = RuntimeError("Thread pool is shutdown")
        job = LocalCommandExecutorJob(pool, config=executor_config)
        context = JobExecutionContext({"command": python_exe, "commandArgs": '-c "import time; time.sleep(60)"'})

        with pytest.raises(CommandLaunchError, match="output reader") as exc_info:
            job.execute(context)

        process = job.state.process_slot.get()
        assert process.poll() is not None
        assert process.stdout.closed
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert context.result is None


@pytest.mark.unit
class TestJobInterruptedWait:
    """Test cases for abandoning the wait with interrupt_wait()."""

    def test_interrupt_wait_then_kill(self, executor_config, output_pool, python_exe, test_utils):
        job = LocalCommandExecutorJob(output_pool, config=executor_config)
        context = JobExecutionContext(
            {"command": python_exe, "commandArgs": '-c "import time; time.sleep(60)"'}
        )

        thread, errors = _run_in_thread(job, context)
        process = test_utils.wait_for_process(job)

        job.interrupt_wait()
        thread.join(timeout=10)

        assert not thread.is_alive()
        assert len(errors) == 1
        assert isinstance(errors[0], CommandInterruptedError)
        assert context.result is None
        assert process.poll() is None

        outcome = job.interrupt()

        assert outcome.kind is TerminationKind.KILLED
        assert process.wait(timeout=10) != 0

    def test_output_of_interrupted_command_is_logged(
        self, executor_config, output_pool, python_exe, test_utils, caplog
    ):
        caplog.set_level("INFO", logger="localexec.orchestration.job")
        job = LocalCommandExecutorJob(output_pool, config=executor_config)
        context = JobExecutionContext({
            "command": python_exe,
            "commandArgs": "-c \"import time; print('warming up', flush=True); time.sleep(60)\"",
        })

        thread, errors = _run_in_thread(job, context)
        test_utils.wait_for_process(job)
        job.interrupt_wait()
        thread.join(timeout=10)

        assert isinstance(errors[0], CommandInterruptedError)
        assert "produced the following output" not in caplog.text

        job.interrupt()

        assert test_utils.wait_for_condition(lambda: "warming up" in caplog.text)
        assert "Local command produced the following output:\nwarming up" in caplog.text
