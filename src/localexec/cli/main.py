"""
Command-line interface for running a local command as a job.

This module plays the part of the scheduler: it builds the job data map from
command-line options, runs a LocalCommandExecutorJob on the main thread and
turns SIGINT/SIGTERM into interrupt requests delivered on a separate thread.

Usage:
    localexec --command CMD [--command-args ARGS] [--command-work-dir DIR]

Example:
    localexec --command /usr/bin/make --command-args '-C "my project" all'
"""

import argparse
import logging
import signal
import sys
import threading
import tomllib
from pathlib import Path
from typing import Dict, List, Optional

from ..config import get_config, set_config_path
from ..executor import initialize_global_thread_pools, shutdown_global_thread_pools
from ..orchestration import (
    JDM_KEY_COMMAND,
    JDM_KEY_COMMAND_ARGS,
    JDM_KEY_COMMAND_WORK_DIR,
    JobExecutionContext,
    LocalCommandExecutorJob,
)
from ..validation import (
    CommandExitCodeError,
    CommandInterruptedError,
    JobExecutionError,
    UnableToInterruptJobError,
    ValidationError,
    handle_cli_error,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"

EXIT_INTERRUPTED = 130


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="localexec",
        description="Execute a local command as a job and exit with its exit code.",
    )
    parser.add_argument(
        "--command",
        required=True,
        help="The command to execute (executable path or name).",
    )
    parser.add_argument(
        "--command-args",
        help="Space-separated arguments; enclose an argument containing spaces in double or single quotes.",
    )
    parser.add_argument(
        "--command-work-dir",
        help="Work directory for the command. Must be an existing directory.",
    )
    parser.add_argument(
        "--job-key",
        default="localexec.command",
        help="Name of the job used in log messages.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config.toml. Defaults to conf/config.toml.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
    )
    return parser


def build_job_data_map(args: argparse.Namespace) -> Dict[str, str]:
    """Map command-line options to job data map parameters, skipping unset ones."""
    job_data = {JDM_KEY_COMMAND: args.command}
    if args.command_args is not None:
        job_data[JDM_KEY_COMMAND_ARGS] = args.command_args
    if args.command_work_dir is not None:
        job_data[JDM_KEY_COMMAND_WORK_DIR] = args.command_work_dir
    return job_data


def to_process_exit_code(exit_code: int) -> int:
    """Map a child exit code to one this process can exit with.

    A child killed by signal N reports -N; shells report that as 128 + N.
    """
    if exit_code < 0:
        return 128 - exit_code
    return exit_code


def _interrupt_job(job: LocalCommandExecutorJob) -> None:
    try:
        outcome = job.interrupt()
        logger.info(f"Interrupt completed: {outcome.kind.value} after {outcome.attempts} attempt(s)")
    except UnableToInterruptJobError as e:
        logger.error(str(e))


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Run one command job and exit with the command's exit code.

    Exit codes:
        the command's own exit code (128 + N if it was killed by signal N),
        1 for configuration and launch errors,
        130 if the wait for the command was interrupted.

    Raises:
        SystemExit: Always.
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.config is not None:
        set_config_path(args.config)

    try:
        app_config = get_config()
    except (FileNotFoundError, ValidationError, tomllib.TOMLDecodeError) as e:
        handle_cli_error(error=e, context="configuration loading", exit_code=1, logger=logger)

    executor_config = app_config.executor
    output_pool = initialize_global_thread_pools(executor_config.output_pool)
    job = LocalCommandExecutorJob(output_pool, config=executor_config)
    context = JobExecutionContext(merged_job_data_map=build_job_data_map(args), job_key=args.job_key)

    interrupt_requested = threading.Event()

    def signal_handler(signum, frame):
        if interrupt_requested.is_set():
            logger.warning("Interrupt already in progress. Please be patient.")
            return
        interrupt_requested.set()
        logger.info(f"Signal {signal.strsignal(signum)} received. Interrupting the running command...")
        threading.Thread(target=_interrupt_job, args=(job,), name="JobInterrupter", daemon=True).start()

    original_handlers = {}
    try:
        for signum in (signal.SIGINT, signal.SIGTERM):
            original_handlers[signum] = signal.signal(signum, signal_handler)
    except ValueError as e:
        # signal.signal() only works on the main thread.
        logger.warning(f"Failed to set up signal handlers: {e}")

    exit_code = 0
    try:
        job.execute(context)
    except CommandExitCodeError as e:
        exit_code = to_process_exit_code(e.exit_code)
    except CommandInterruptedError:
        exit_code = EXIT_INTERRUPTED
    except JobExecutionError:
        exit_code = 1
    finally:
        for signum, handler in original_handlers.items():
            signal.signal(signum, handler)
        shutdown_global_thread_pools(wait=True)

    sys.exit(exit_code)


if __name__ == "__main__":
    main_cli()
