"""
Configuration validation utilities.

Each section of `config.toml` has a validator that fills in defaults and
turns the raw TOML table into its dataclass.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from ..constants import TimeoutConstants
from ..models.config import AppConfig, LockConfig, LoggingConfig, ProcessConfig
from ..validation import (
    ValidationError,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ValidationError(f"[{name}] must be a table", field_name=name, value=section)
    return section


def validate_process_config(process_data: Dict[str, Any]) -> ProcessConfig:
    """
    Validate and create a ProcessConfig from the raw `[process]` table.

    Raises:
        ValidationError: If validation fails
    """
    stop_timeout = validate_positive_float(
        process_data.get("stop_timeout", TimeoutConstants.STOP_TIMEOUT),
        min_value=0.0,
        max_value=3600.0,  # 1h maximum
        field_name="process.stop_timeout",
    )

    poll_interval = validate_positive_float(
        process_data.get("poll_interval", TimeoutConstants.POLL_INTERVAL),
        min_value=0.001,  # 1ms minimum
        max_value=60.0,
        field_name="process.poll_interval",
    )

    wait_poll_interval = validate_positive_float(
        process_data.get("wait_poll_interval", TimeoutConstants.WAIT_POLL_INTERVAL),
        min_value=0.001,
        max_value=10.0,
        field_name="process.wait_poll_interval",
    )

    return ProcessConfig(
        stop_timeout=stop_timeout,
        poll_interval=poll_interval,
        wait_poll_interval=wait_poll_interval,
    )


def validate_lock_config(lock_data: Dict[str, Any], config_dir: Path) -> LockConfig:
    """
    Validate and create a LockConfig from the raw `[lock]` table.

    A relative `directory` is resolved against the directory holding the
    configuration file. An empty string means "use the system temp dir".

    Raises:
        ValidationError: If validation fails
    """
    directory_value = lock_data.get("directory", "")
    if not isinstance(directory_value, str):
        raise ValidationError(
            "lock.directory must be a string",
            field_name="lock.directory",
            value=directory_value,
        )
    directory = None
    if directory_value.strip():
        directory = Path(directory_value).expanduser()
        if not directory.is_absolute():
            directory = config_dir / directory

    retries = validate_positive_integer(
        lock_data.get("retries", TimeoutConstants.LOCK_RETRIES),
        min_value=1,
        max_value=1000,
        field_name="lock.retries",
    )

    retry_delay = validate_positive_float(
        lock_data.get("retry_delay", TimeoutConstants.LOCK_RETRY_DELAY),
        min_value=0.0,
        max_value=60.0,
        field_name="lock.retry_delay",
    )

    return LockConfig(directory=directory, retries=retries, retry_delay=retry_delay)


def validate_logging_config(logging_data: Dict[str, Any]) -> LoggingConfig:
    """Validate the `[logging]` table."""
    level = validate_enum_choice(
        logging_data.get("level", "INFO"),
        choices=LOG_LEVELS,
        field_name="logging.level",
        case_sensitive=False,
    )
    return LoggingConfig(level=level)


def validate_app_config(config_data: Dict[str, Any], config_dir: Path) -> AppConfig:
    """
    Validate every section and assemble the AppConfig.

    Args:
        config_data: Parsed TOML document
        config_dir: Directory of the configuration file, for relative paths

    Raises:
        ValidationError: If any section is invalid
    """
    return AppConfig(
        process=validate_process_config(_section(config_data, "process")),
        lock=validate_lock_config(_section(config_data, "lock"), config_dir),
        logging=validate_logging_config(_section(config_data, "logging")),
    )
