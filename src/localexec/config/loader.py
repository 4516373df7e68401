"""
Reading of the TOML configuration file.

Only parsing happens here; turning tables into configuration objects is the
job of the validators module.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict

from ..validation import ErrorSeverity, handle_config_error

logger = logging.getLogger(__name__)


def read_config_file(config_path: Path) -> Dict[str, Any]:
    """
    Parse a config.toml file.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    logger.info(f"Reading configuration file {config_path}")
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {config_path}") from None
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {config_path}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger,
        )
        raise


def get_section(config_data: Dict[str, Any], name: str) -> Any:
    """Return the top-level table ``name``, or an empty table if it is absent."""
    return config_data.get(name, {})
