"""
State shared between the executing thread and an interrupting thread.

The process handle is the only resource both threads touch. It is published
exactly once by the executing thread after launch and read by whichever
thread handles an interrupt request.
"""

import subprocess
import threading
from dataclasses import dataclass, field
from typing import Optional


class ProcessHandleSlot:
    """
    Set-once holder for the process handle of one execution.

    Readers either see no handle yet or the one published handle; a handle is
    never replaced or removed.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._process: Optional[subprocess.Popen] = None

    def publish(self, process: subprocess.Popen) -> None:
        """
        Make the launched process visible to other threads.

        Raises:
            RuntimeError: If a handle was already published in this slot
        """
        with self._lock:
            if self._process is not None:
                raise RuntimeError("A process handle has already been published")
            self._process = process

    def get(self) -> Optional[subprocess.Popen]:
        """Return the published process, or None if none was launched yet."""
        with self._lock:
            return self._process

    @property
    def is_published(self) -> bool:
        return self.get() is not None


@dataclass
class RuntimeState:
    """
    Per-execution state of a LocalCommandExecutorJob.

    A fresh instance is created for every execution.
    """

    process_slot: ProcessHandleSlot = field(default_factory=ProcessHandleSlot)
    # Set by interrupt_wait() to abandon the blocking wait for process exit.
    wait_interrupted: threading.Event = field(default_factory=threading.Event)
