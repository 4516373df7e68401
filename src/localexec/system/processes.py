"""
Process status and identification helpers.

This module provides the non-blocking liveness probe used by the destroy
protocol and a best-effort PID lookup used for diagnostics. Neither helper
raises: failures degrade to ProcessState.UNKNOWN or to a missing PID.
"""

import logging
from typing import Any, Optional

import psutil

from ..models.runtime import ProcessState, ProcessStatus

logger = logging.getLogger(__name__)


def get_process_pid(process: Any) -> Optional[int]:
    """Return the operating-system PID of a process handle, if discoverable.

    The PID is only reported while psutil can still see a process with that
    ID. A process we may not inspect still counts as present.

    Args:
        process: A subprocess.Popen-like handle.

    Returns:
        The PID, or None if the handle exposes none or it no longer exists.
    """
    pid = getattr(process, "pid", None)
    if not isinstance(pid, int) or pid <= 0:
        return None

    try:
        psutil.Process(pid)
    except psutil.NoSuchProcess:
        return None
    except psutil.AccessDenied:
        return pid
    except Exception as e:
        logger.debug(f"PID lookup failed for {process}: {e}")
        return None
    return pid


def probe_process_status(process: Any) -> ProcessStatus:
    """Query whether a process is still running without blocking.

    The handle's own poll() is authoritative. If it cannot answer, psutil is
    asked about the PID instead.

    Args:
        process: A subprocess.Popen-like handle.

    Returns:
        ALIVE while no exit status is available, EXITED once one is,
        UNKNOWN if neither source can tell.
    """
    try:
        exit_code = process.poll()
    except OSError as e:
        logger.debug(f"poll() failed for {process}: {e}")
        return _probe_with_psutil(getattr(process, "pid", None))

    # poll() also returns None while another thread is reaping the child;
    # the next probe will see the exit code.
    if exit_code is None:
        return ProcessStatus(ProcessState.ALIVE)
    return ProcessStatus(ProcessState.EXITED, exit_code=exit_code)


def is_process_alive(process: Any) -> bool:
    """Return False only when the process is known to have exited."""
    return probe_process_status(process).is_alive


def _probe_with_psutil(pid: Optional[int]) -> ProcessStatus:
    """Derive a process status from psutil when the handle cannot."""
    if pid is None:
        return ProcessStatus(ProcessState.UNKNOWN)

    try:
        status = psutil.Process(pid).status()
    except psutil.NoSuchProcess:
        return ProcessStatus(ProcessState.EXITED)
    except psutil.AccessDenied:
        return ProcessStatus(ProcessState.UNKNOWN)
    except Exception as e:
        logger.debug(f"psutil status lookup failed for PID {pid}: {e}")
        return ProcessStatus(ProcessState.UNKNOWN)

    if status in (psutil.STATUS_ZOMBIE, psutil.STATUS_DEAD):
        return ProcessStatus(ProcessState.EXITED)
    return ProcessStatus(ProcessState.ALIVE)
