"""
Exception types and error-handling helpers.

This module holds the error taxonomy used across procctl together with the
small set of logging helpers that give errors a consistent shape in the logs.
"""

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


# Severities that also log the traceback
_WITH_TRACEBACK = {ErrorSeverity.DEBUG, ErrorSeverity.CRITICAL}


class ValidationError(Exception):
    """
    A configuration value, termination policy or API argument is invalid.

    ``field_name`` uses the dotted config name where there is one
    (``process.stop_timeout``), so messages point at the offending key.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


class ProcessControlError(Exception):
    """Base class for process lifecycle errors."""


class SpawnError(ProcessControlError):
    """The child process could not be created."""

    def __init__(self, command: str, reason: str):
        super().__init__(f"Cannot start '{command}': {reason}")
        self.command = command
        self.reason = reason


class TerminationFailure(ProcessControlError):
    """The process survived a forced kill."""

    def __init__(self, pid: int):
        super().__init__(f"Process {pid} is still running after a forced kill")
        self.pid = pid


class LockContention(ProcessControlError):
    """Another live process holds the lock file."""

    def __init__(self, path: Union[str, Path], holder_pid: Optional[int]):
        super().__init__(f"Lock {path} is held by process {holder_pid}")
        self.path = Path(path)
        self.holder_pid = holder_pid


class QueryError(ProcessControlError):
    """The process table could not be enumerated."""


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log ``error`` as "Error in <context>: <error>" and optionally re-raise it.

    Args:
        error: The exception that occurred
        context: Where it happened, e.g. "stopping PID 42"
        severity: ErrorSeverity or its lowercase/uppercase name
        reraise: Re-raise ``error`` after logging
        logger: Logger to write to (defaults to this module's logger)
    """
    target = logger or globals()['logger']
    if isinstance(severity, str):
        severity = ErrorSeverity(severity.lower())

    target.log(
        getattr(logging, severity.name),
        f"Error in {context}: {error}",
        exc_info=severity in _WITH_TRACEBACK,
    )

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_file_error(error: Exception, context: str, **kwargs) -> None:
    """Handle file-related errors."""
    handle_error(error, f"file {context}", **kwargs)


def handle_subprocess_error(error: Exception, command: str, **kwargs) -> None:
    """Handle errors raised while starting ``command``."""
    handle_error(error, f"subprocess command '{command}'", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """Log a CLI error and exit with ``exit_code`` (default 1)."""
    exit_code = kwargs.pop('exit_code', 1)
    severity = kwargs.pop('severity', ErrorSeverity.ERROR)
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)
    sys.exit(exit_code)
