"""
Shared thread pools for process output reading.

Each command execution drains its child's combined output on a worker of a
shared pool while the executing thread blocks on the child's exit. Pools are
registered by name with a ThreadPoolManager; jobs receive the pool they use
by injection rather than looking it up themselves.

A reader task only finishes when its pipe reaches end of data, which can be
later than the exit of the command if the command left children behind that
inherited the pipe. Shutdown therefore waits for in-flight readers for at
most ``ThreadPoolConfig.shutdown_timeout`` seconds.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional, Set

from ..models.config import ThreadPoolConfig
from ..validation import ErrorSeverity, handle_error

logger = logging.getLogger(__name__)


@dataclass
class PoolStats:
    """Task counters of one pool."""
    tasks_submitted: int = 0
    tasks_completed: int = 0
    tasks_failed: int = 0
    tasks_cancelled: int = 0


class ManagedThreadPoolExecutor:
    """
    ThreadPoolExecutor wrapper with an explicit start, a bounded shutdown and
    task counters.

    ``submit(fn, *args, **kwargs) -> Future`` is all a job needs from its
    output pool.
    """

    def __init__(self, config: ThreadPoolConfig):
        self.config = config
        self.executor: Optional[ThreadPoolExecutor] = None
        self.is_shutdown = False
        self._pending: Set[Future] = set()
        self._counters = PoolStats()
        self._lock = threading.Lock()

    @property
    def stats(self) -> Dict[str, int]:
        with self._lock:
            return asdict(self._counters)

    def start(self) -> None:
        """
        Create the worker threads' executor.

        Raises:
            RuntimeError: If the pool is already running
        """
        if self.executor is not None:
            raise RuntimeError(f"Thread pool '{self.config.pool_name}' already started")

        self.executor = ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix=self.config.thread_name_prefix,
        )
        self.is_shutdown = False
        logger.info(f"Output pool '{self.config.pool_name}' started ({self.config.max_workers} workers)")

    def submit(self, fn: Callable, *args, **kwargs) -> Future:
        """
        Schedule ``fn(*args, **kwargs)`` on a worker.

        Raises:
            RuntimeError: If the pool was never started, has been shut down,
                or the underlying executor refuses the task
        """
        executor = self.executor
        if executor is None:
            raise RuntimeError(f"Thread pool '{self.config.pool_name}' not started")
        if self.is_shutdown:
            raise RuntimeError(f"Thread pool '{self.config.pool_name}' is shutdown")

        try:
            future = executor.submit(fn, *args, **kwargs)
        except RuntimeError as e:
            # Raced with shutdown().
            with self._lock:
                self._counters.tasks_failed += 1
            handle_error(
                error=e,
                context=f"submitting task to pool '{self.config.pool_name}'",
                severity=ErrorSeverity.ERROR,
                reraise=True,
                logger=logger,
            )

        with self._lock:
            self._counters.tasks_submitted += 1
            self._pending.add(future)
        future.add_done_callback(self._on_task_done)
        return future

    def shutdown(self, wait: bool = True, cancel_futures: bool = False) -> None:
        """
        Stop accepting tasks and release the workers.

        Args:
            wait: Wait up to ``config.shutdown_timeout`` seconds for running
                readers before letting go of the workers
            cancel_futures: Cancel tasks that have not started yet
        """
        executor = self.executor
        if executor is None or self.is_shutdown:
            return
        self.is_shutdown = True

        if wait:
            with self._lock:
                pending = set(self._pending)
            _, not_done = wait_futures(pending, timeout=self.config.shutdown_timeout)
            if not_done:
                logger.warning(
                    f"{len(not_done)} task(s) of pool '{self.config.pool_name}' still running after "
                    f"{self.config.shutdown_timeout}s; not waiting for them"
                )
                wait = False

        try:
            executor.shutdown(wait=wait, cancel_futures=cancel_futures)
        except Exception as e:
            handle_error(
                error=e,
                context=f"shutting down pool '{self.config.pool_name}'",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )
        finally:
            self.executor = None
            with self._lock:
                self._pending.clear()

        logger.info(f"Output pool '{self.config.pool_name}' shut down")

    def get_stats(self) -> Dict[str, Any]:
        """Counters plus the number of pending tasks and the success rate in percent."""
        with self._lock:
            stats: Dict[str, Any] = asdict(self._counters)
            stats["active_futures"] = len(self._pending)

        finished = stats["tasks_completed"] + stats["tasks_failed"]
        stats["success_rate"] = 100.0 * stats["tasks_completed"] / finished if finished else 0.0
        stats["is_shutdown"] = self.is_shutdown
        return stats

    def _on_task_done(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
            if future.cancelled():
                self._counters.tasks_cancelled += 1
            elif future.exception() is None:
                self._counters.tasks_completed += 1
            else:
                self._counters.tasks_failed += 1

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown(wait=True)


class ThreadPoolManager:
    """
    Registry of named, started pools.
    """

    def __init__(self):
        self.pools: Dict[str, ManagedThreadPoolExecutor] = {}
        self.is_initialized = False

    def initialize(self, configs: Dict[str, ThreadPoolConfig]) -> None:
        """
        Start one pool per entry of ``configs``, keyed by the mapping's names.

        Either every pool starts or none is left running.
        """
        if self.is_initialized:
            logger.warning(f"Thread pool manager already initialized with {sorted(self.pools)}")
            return

        for name, config in configs.items():
            pool = ManagedThreadPoolExecutor(config)
            try:
                pool.start()
            except Exception as e:
                self.shutdown_all(wait=False)
                handle_error(
                    error=e,
                    context=f"starting pool '{name}'",
                    severity=ErrorSeverity.ERROR,
                    reraise=True,
                    logger=logger,
                )
            self.pools[name] = pool

        self.is_initialized = True

    def get_pool(self, pool_name: str) -> Optional[ManagedThreadPoolExecutor]:
        return self.pools.get(pool_name)

    def get_all_stats(self) -> Dict[str, Dict[str, Any]]:
        return {name: pool.get_stats() for name, pool in self.pools.items()}

    def shutdown_all(self, wait: bool = True) -> None:
        """Shut every pool down and forget about them."""
        while self.pools:
            name, pool = self.pools.popitem()
            try:
                pool.shutdown(wait=wait)
            except Exception as e:
                logger.warning(f"Error shutting down pool '{name}': {e}")
        self.is_initialized = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown_all(wait=True)


_manager: Optional[ThreadPoolManager] = None
_manager_lock = threading.Lock()


def get_thread_pool_manager() -> ThreadPoolManager:
    """Return the process-wide pool manager, creating it on first use."""
    global _manager
    with _manager_lock:
        if _manager is None:
            _manager = ThreadPoolManager()
        return _manager


def initialize_global_thread_pools(
    output_pool_config: Optional[ThreadPoolConfig] = None,
) -> ManagedThreadPoolExecutor:
    """
    Start the process-wide output-reader pool and return it.

    Calling it again while the pool is running returns the running pool.
    """
    config = output_pool_config or ThreadPoolConfig()
    manager = get_thread_pool_manager()
    manager.initialize({config.pool_name: config})

    pool = manager.get_pool(config.pool_name)
    if pool is None:
        raise RuntimeError(
            f"Thread pools already initialized without an output pool named '{config.pool_name}'"
        )
    return pool


def shutdown_global_thread_pools(wait: bool = True) -> None:
    """Shut down all process-wide pools and discard the manager."""
    global _manager
    with _manager_lock:
        manager, _manager = _manager, None
    if manager is not None:
        manager.shutdown_all(wait=wait)
