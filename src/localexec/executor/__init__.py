"""
Command process execution for the localexec package.

This module provides process launching, output draining and the shared
thread pools the output readers run on.
"""

from .launcher import ProcessLauncher
from .output_reader import StandardOutputReader
from .thread_pool import (
    ManagedThreadPoolExecutor,
    ThreadPoolManager,
    get_thread_pool_manager,
    initialize_global_thread_pools,
    shutdown_global_thread_pools,
)

__all__ = [
    "ProcessLauncher",
    "StandardOutputReader",
    "ManagedThreadPoolExecutor",
    "ThreadPoolManager",
    "get_thread_pool_manager",
    "initialize_global_thread_pools",
    "shutdown_global_thread_pools",
]
