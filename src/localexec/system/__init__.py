"""
System interaction utilities for command execution.

This module provides:

- Command line preparation: splitting a raw argument string into process
  arguments with double- and single-quote grouping
- Process liveness probing without blocking
- Best-effort PID discovery for diagnostics
"""

from .commands import join_command_args, prepare_command_line, tokenize_command_args

from .processes import get_process_pid, is_process_alive, probe_process_status

__all__ = [
    # Commands
    "join_command_args",
    "prepare_command_line",
    "tokenize_command_args",
    # Processes
    "get_process_pid",
    "is_process_alive",
    "probe_process_status",
]
