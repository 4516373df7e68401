"""
Command process launching.

This module starts the child process for a job: argument list passed straight
to the OS (no shell), standard error merged into standard output, and an
optional working directory.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from ..validation import (
    CommandConfigurationError,
    CommandLaunchError,
    ErrorSeverity,
    handle_subprocess_error,
)

logger = logging.getLogger(__name__)


class ProcessLauncher:
    """
    Starts exactly one command process per call to launch().
    """

    def __init__(self, encoding: str = "utf-8"):
        """
        Args:
            encoding: Text encoding used to decode the process output;
                undecodable bytes are replaced rather than raising
        """
        self.encoding = encoding

    def launch(self, command_line: List[str], work_dir: Optional[Path] = None) -> subprocess.Popen:
        """
        Start the command process.

        Args:
            command_line: Command path followed by its arguments
            work_dir: Working directory for the process, or None to inherit ours

        Returns:
            The started process; its ``stdout`` carries stdout and stderr combined

        Raises:
            CommandConfigurationError: If the command line is empty or work_dir
                is not an existing directory. No process is started.
            CommandLaunchError: If the operating system fails to start the process
        """
        if not command_line or not command_line[0]:
            raise CommandConfigurationError("Command path must not be empty.", parameter="command")

        if work_dir is not None and not Path(work_dir).is_dir():
            raise CommandConfigurationError(
                f"Command work directory '{Path(work_dir).absolute()}' does not exist.",
                parameter="commandWorkDir",
            )

        try:
            process = subprocess.Popen(
                command_line,
                cwd=work_dir,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding=self.encoding,
                errors="replace",
            )
        except (OSError, ValueError) as e:
            handle_subprocess_error(
                e, " ".join(command_line), severity=ErrorSeverity.ERROR, reraise=False, logger=logger
            )
            raise CommandLaunchError("Error starting command process.") from e

        logger.debug(f"Command process started with PID {process.pid}")
        return process
