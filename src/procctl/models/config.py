"""
Configuration data models.

This module contains the configuration structures for process control,
lock files and logging, loaded from `config.toml`.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..constants import TimeoutConstants


@dataclass
class ProcessConfig:
    """
    Settings for starting, stopping and waiting on processes (`[process]`).
    """

    # Seconds to wait for a graceful exit before escalating to a kill.
    stop_timeout: float = TimeoutConstants.STOP_TIMEOUT
    # Delay between liveness checks while stopping, and after a forced kill.
    poll_interval: float = TimeoutConstants.POLL_INTERVAL
    # Delay between liveness checks in wait_for_exit.
    wait_poll_interval: float = TimeoutConstants.WAIT_POLL_INTERVAL


@dataclass
class LockConfig:
    """
    Settings for lock files (`[lock]`).
    """

    # Directory for lock files created by name. None means the system temp dir.
    directory: Optional[Path] = None
    # Attempts made by LockFile.acquire_with_retry.
    retries: int = TimeoutConstants.LOCK_RETRIES
    # Seconds between those attempts.
    retry_delay: float = TimeoutConstants.LOCK_RETRY_DELAY


@dataclass
class LoggingConfig:
    """
    Settings for the CLI log output (`[logging]`).
    """

    level: str = "INFO"


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    process: ProcessConfig = field(default_factory=ProcessConfig)
    lock: LockConfig = field(default_factory=LockConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
