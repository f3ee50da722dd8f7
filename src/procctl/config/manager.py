"""
Process-wide configuration access.

The configuration is read once, on the first get_config() call, and cached
until the path changes or clear_config_cache() is called.
"""

import logging
from pathlib import Path
from typing import Optional

from ..models.config import AppConfig
from ..validation import ErrorSeverity, handle_config_error
from .loader import load_main_config
from .validators import validate_app_config

logger = logging.getLogger(__name__)

_CONFIG: Optional[AppConfig] = None

# <repo>/conf/config.toml; set_config_path() (the CLI --config flag) overrides it.
_DEFAULT_CONFIG_FILE_PATH = Path(__file__).parent.parent.parent.parent / "conf" / "config.toml"
_CONFIG_FILE_PATH = _DEFAULT_CONFIG_FILE_PATH


def set_config_path(config_path: Path) -> None:
    """
    Read configuration from ``config_path`` from now on.

    Drops the cached configuration. Unlike the default location, a path set
    here must exist when the configuration is next loaded.
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = Path(config_path)
    _CONFIG = None
    logger.debug(f"Configuration path set to: {config_path}")


def reset_config_path() -> None:
    """Go back to the default configuration file location."""
    set_config_path(_DEFAULT_CONFIG_FILE_PATH)


def clear_config_cache() -> None:
    """Forget the loaded configuration; the next get_config() re-reads the file."""
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def _load_config(config_path: Path) -> AppConfig:
    # No file at the default location is fine: the library works without one
    if config_path == _DEFAULT_CONFIG_FILE_PATH and not config_path.exists():
        logger.debug(f"No configuration file at {config_path}, using built-in defaults")
        return AppConfig()

    try:
        app_config = validate_app_config(load_main_config(config_path), config_path.parent)
    except FileNotFoundError as e:
        handle_config_error(
            error=e,
            context=f"loading {config_path}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise
    except Exception as e:
        handle_config_error(
            error=e,
            context=f"validating {config_path}",
            severity=ErrorSeverity.ERROR,
            reraise=True,
            logger=logger
        )
        raise

    logger.debug(f"Loaded configuration from {config_path}")
    return app_config


def get_config() -> AppConfig:
    """
    Return the process-wide AppConfig, loading it on first use.

    Raises:
        FileNotFoundError: If a path set with set_config_path() is missing
        ValidationError: If a value is out of range or of the wrong type
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _load_config(_CONFIG_FILE_PATH)
    return _CONFIG


def is_config_loaded() -> bool:
    """True once get_config() has loaded and cached a configuration."""
    return _CONFIG is not None


def get_config_info() -> dict:
    """Describe the configuration state: whether it is loaded, and from where."""
    return {
        "config_loaded": is_config_loaded(),
        "config_path": str(_CONFIG_FILE_PATH),
        "config_exists": _CONFIG_FILE_PATH.exists(),
    }
