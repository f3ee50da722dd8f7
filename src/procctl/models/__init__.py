"""
Data models for the process-control library.

Configuration Models:
- Application-wide configuration settings
- Process timing and lock-file settings

Process Models:
- Handles for spawned processes
- Process-table snapshots
- Termination policies and outcomes

All models are dataclasses or enums.
"""

# Configuration models
from .config import AppConfig, LockConfig, LoggingConfig, ProcessConfig

# Process models
from .policy import TerminationOutcome, TerminationPolicy
from .process import ProcessHandle, ProcessInfo

__all__ = [
    # Configuration
    "AppConfig",
    "LockConfig",
    "LoggingConfig",
    "ProcessConfig",
    # Process
    "ProcessHandle",
    "ProcessInfo",
    "TerminationOutcome",
    "TerminationPolicy",
]
