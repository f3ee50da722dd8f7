"""
procctl: process lifecycle and lock-file coordination.

This package starts detached processes, finds them by name or command line,
stops them with a graceful-then-forced policy, waits for them to exit, and
uses PID-stamped lock files for single-instance execution.

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Data structures and type definitions
- validation: Error taxonomy, error handling and input validation
- system: OS interaction (spawning, process table, clock)
- lifecycle: ProcessController and LockFile
- cli: Command-line interface

Usage:
    From command line:
        procctl stop 1234 --timeout 10

    Programmatically:
        from procctl import ProcessController, LockFile
        controller = ProcessController()
        handle = controller.spawn("sleep", ["30"], output_path="/tmp/sleep.log")
        controller.terminate(handle.pid)
"""

# Main interfaces
from .config import clear_config_cache, get_config, set_config_path
from .lifecycle import LockFile, ProcessController, acquire_lock, release_lock

# Model classes for external use
from .models import (
    AppConfig,
    LockConfig,
    ProcessConfig,
    ProcessHandle,
    ProcessInfo,
    TerminationOutcome,
    TerminationPolicy,
)

# Errors
from .validation import (
    LockContention,
    ProcessControlError,
    QueryError,
    SpawnError,
    TerminationFailure,
    ValidationError,
)

# System utilities
from .system import Clock, SystemClock, is_pid_running

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "ProcessController",
    "LockFile",
    "acquire_lock",
    "release_lock",
    "get_config",
    "set_config_path",
    "clear_config_cache",
    # Models
    "AppConfig",
    "LockConfig",
    "ProcessConfig",
    "ProcessHandle",
    "ProcessInfo",
    "TerminationOutcome",
    "TerminationPolicy",
    # Errors
    "ProcessControlError",
    "SpawnError",
    "TerminationFailure",
    "LockContention",
    "QueryError",
    "ValidationError",
    # System utilities
    "Clock",
    "SystemClock",
    "is_pid_running",
]
