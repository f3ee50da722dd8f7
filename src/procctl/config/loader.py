"""
Reading `config.toml` from disk.

Only parsing happens here; turning the raw tables into dataclasses is the
job of :mod:`procctl.config.validators`.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict

from ..validation import ErrorSeverity, handle_config_error

logger = logging.getLogger(__name__)


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Parse the TOML document at ``file_path``.

    Raises:
        FileNotFoundError: If there is no file at ``file_path``
        tomllib.TOMLDecodeError: If the document is not valid TOML
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise FileNotFoundError(f"{description} not found: {file_path}")

    logger.debug(f"Reading {description} {file_path}")
    try:
        with file_path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {file_path.name}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise


def load_main_config(config_path: Path) -> Dict[str, Any]:
    """Parse the main `config.toml`."""
    return load_toml_file(config_path, "main configuration file")
