"""
Configuration data models.

This module contains the configuration structures for the command executor
and its shared output-reader thread pool, loaded from `config.toml`.
"""

from dataclasses import dataclass, field


@dataclass
class ThreadPoolConfig:
    """
    Configuration for the shared pool that drains process output, loaded from
    the `[executor.output_pool]` table.
    """

    # Name under which the pool is registered with the thread pool manager.
    pool_name: str = "process_output"
    max_workers: int = 4
    thread_name_prefix: str = "ProcessOutputReader"
    shutdown_timeout: float = 10.0


@dataclass
class ExecutorConfig:
    """
    Configuration for command execution and termination, loaded from the
    `[executor]` table.
    """

    # Destroy protocol
    max_destroy_attempts: int = 10
    destroy_retry_delay: float = 1.0
    destroy_method: str = "kill"  # "kill" (forceful) or "terminate"

    # Output handling
    output_encoding: str = "utf-8"
    output_result_timeout: float = 30.0

    # Interval at which the waiting thread checks for an interrupted wait.
    wait_poll_interval: float = 0.5

    output_pool: ThreadPoolConfig = field(default_factory=ThreadPoolConfig)


@dataclass
class AppConfig:
    """
    Top-level container for the application configuration.
    """

    executor: ExecutorConfig
