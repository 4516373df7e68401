"""
Configuration validation utilities.

This module turns the raw `[executor]` table of config.toml into validated
configuration objects. Missing keys take their defaults; invalid values raise
ValidationError naming the dotted key.
"""

import logging
from typing import Any, Dict

from ..models.config import ExecutorConfig, ThreadPoolConfig
from ..validation import (
    ValidationError,
    validate_encoding,
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
)

logger = logging.getLogger(__name__)

_DEFAULT_EXECUTOR = ExecutorConfig()
_DEFAULT_POOL = ThreadPoolConfig()


def validate_thread_pool_config(pool_data: Dict[str, Any],
                                section: str = "executor.output_pool") -> ThreadPoolConfig:
    """
    Validate and create a ThreadPoolConfig from raw configuration data.

    Args:
        pool_data: Raw `[executor.output_pool]` table
        section: Dotted section name used in error messages

    Returns:
        Validated ThreadPoolConfig instance

    Raises:
        ValidationError: If validation fails
    """
    if not isinstance(pool_data, dict):
        raise ValidationError(f"{section} must be a table", field_name=section, value=pool_data)

    return ThreadPoolConfig(
        pool_name=validate_non_empty_string(
            pool_data.get("pool_name", _DEFAULT_POOL.pool_name),
            field_name=f"{section}.pool_name",
        ),
        max_workers=validate_positive_integer(
            pool_data.get("max_workers", _DEFAULT_POOL.max_workers),
            min_value=1,
            max_value=64,
            field_name=f"{section}.max_workers",
        ),
        thread_name_prefix=validate_non_empty_string(
            pool_data.get("thread_name_prefix", _DEFAULT_POOL.thread_name_prefix),
            field_name=f"{section}.thread_name_prefix",
        ),
        shutdown_timeout=validate_positive_float(
            pool_data.get("shutdown_timeout", _DEFAULT_POOL.shutdown_timeout),
            min_value=0.0,
            max_value=600.0,
            field_name=f"{section}.shutdown_timeout",
        ),
    )


def validate_executor_config(executor_data: Dict[str, Any]) -> ExecutorConfig:
    """
    Validate and create an ExecutorConfig from raw configuration data.

    Args:
        executor_data: Raw `[executor]` table from config.toml

    Returns:
        Validated ExecutorConfig instance

    Raises:
        ValidationError: If validation fails
    """
    if not isinstance(executor_data, dict):
        raise ValidationError("executor must be a table", field_name="executor", value=executor_data)

    max_destroy_attempts = validate_positive_integer(
        executor_data.get("max_destroy_attempts", _DEFAULT_EXECUTOR.max_destroy_attempts),
        min_value=1,
        max_value=1000,
        field_name="executor.max_destroy_attempts",
    )

    destroy_retry_delay = validate_positive_float(
        executor_data.get("destroy_retry_delay", _DEFAULT_EXECUTOR.destroy_retry_delay),
        min_value=0.0,
        max_value=60.0,
        field_name="executor.destroy_retry_delay",
    )

    destroy_method = validate_enum_choice(
        executor_data.get("destroy_method", _DEFAULT_EXECUTOR.destroy_method),
        choices=["kill", "terminate"],
        field_name="executor.destroy_method",
        case_sensitive=False,
    )

    output_encoding = validate_encoding(
        executor_data.get("output_encoding", _DEFAULT_EXECUTOR.output_encoding),
        field_name="executor.output_encoding",
    )

    output_result_timeout = validate_positive_float(
        executor_data.get("output_result_timeout", _DEFAULT_EXECUTOR.output_result_timeout),
        min_value=0.1,
        max_value=3600.0,
        field_name="executor.output_result_timeout",
    )

    wait_poll_interval = validate_positive_float(
        executor_data.get("wait_poll_interval", _DEFAULT_EXECUTOR.wait_poll_interval),
        min_value=0.01,
        max_value=10.0,
        field_name="executor.wait_poll_interval",
    )

    output_pool = validate_thread_pool_config(executor_data.get("output_pool", {}))

    return ExecutorConfig(
        max_destroy_attempts=max_destroy_attempts,
        destroy_retry_delay=destroy_retry_delay,
        destroy_method=destroy_method,
        output_encoding=output_encoding,
        output_result_timeout=output_result_timeout,
        wait_poll_interval=wait_poll_interval,
        output_pool=output_pool,
    )
