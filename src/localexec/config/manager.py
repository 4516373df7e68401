"""
Process-wide configuration access.

The configuration is read from one TOML file the first time it is needed and
cached until the path changes or the cache is cleared. Jobs created without an
explicit ExecutorConfig take theirs from here.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from ..models.config import AppConfig
from ..validation import ErrorSeverity, handle_config_error
from .loader import get_section, read_config_file
from .validators import validate_executor_config

logger = logging.getLogger(__name__)

# <repository root>/conf/config.toml
DEFAULT_CONFIG_FILE_PATH = Path(__file__).parent.parent.parent.parent / "conf" / "config.toml"

_config_path: Path = DEFAULT_CONFIG_FILE_PATH
_cached_config: Optional[AppConfig] = None
_config_lock = threading.Lock()


def set_config_path(config_path: Path) -> None:
    """Read the configuration from ``config_path`` from now on; drops the cached one."""
    global _config_path, _cached_config
    with _config_lock:
        _config_path = Path(config_path)
        _cached_config = None
    logger.info(f"Configuration path set to: {config_path}")


def clear_config_cache() -> None:
    """Force the next get_config() call to read the file again."""
    global _cached_config
    with _config_lock:
        _cached_config = None


def get_config() -> AppConfig:
    """
    Return the application configuration, reading it on first use.

    A missing file at DEFAULT_CONFIG_FILE_PATH means built-in defaults; a
    missing file at any other configured path is an error.

    Raises:
        FileNotFoundError: If an explicitly configured file is missing
        ValidationError: If a value in the file is invalid
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    global _cached_config
    with _config_lock:
        if _cached_config is None:
            _cached_config = _read_app_config(_config_path)
        return _cached_config


def is_config_loaded() -> bool:
    return _cached_config is not None


def get_config_info() -> Dict[str, Any]:
    """Where the configuration comes from and a few of its values, for diagnostics."""
    config = _cached_config
    return {
        "config_loaded": config is not None,
        "config_path": str(_config_path),
        "max_destroy_attempts": config.executor.max_destroy_attempts if config else None,
    }


def _read_app_config(config_path: Path) -> AppConfig:
    if config_path == DEFAULT_CONFIG_FILE_PATH and not config_path.exists():
        logger.warning(f"No configuration file at {config_path}, using built-in defaults")
        return AppConfig(executor=validate_executor_config({}))

    try:
        executor = validate_executor_config(get_section(read_config_file(config_path), "executor"))
    except Exception as e:
        handle_config_error(
            error=e,
            context=f"loading {config_path}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger,
        )
        raise

    logger.info(
        f"Configuration loaded: max_destroy_attempts={executor.max_destroy_attempts}, "
        f"destroy_retry_delay={executor.destroy_retry_delay}, destroy_method={executor.destroy_method}"
    )
    return AppConfig(executor=executor)
