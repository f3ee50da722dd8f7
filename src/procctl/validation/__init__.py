"""
Validation and error handling for the procctl package.

This module provides input validation, the process-control error taxonomy
and consistent error reporting across the library and the CLI.
"""

# Core exception classes and error handling
from .exceptions import (
    ErrorSeverity,
    LockContention,
    ProcessControlError,
    QueryError,
    SpawnError,
    TerminationFailure,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
    handle_file_error,
    handle_subprocess_error,
)

# Retry helper
from .strategies import simple_retry

# Validation functions
from .validators import (
    validate_enum_choice,
    validate_pid,
    validate_positive_float,
    validate_positive_integer,
)

__all__ = [
    # Core functionality
    "ErrorSeverity",
    "ValidationError",
    "handle_error",
    "handle_config_error",
    "handle_file_error",
    "handle_subprocess_error",
    "handle_cli_error",
    # Process-control errors
    "ProcessControlError",
    "SpawnError",
    "TerminationFailure",
    "LockContention",
    "QueryError",
    # Retry
    "simple_retry",
    # Validators
    "validate_enum_choice",
    "validate_pid",
    "validate_positive_float",
    "validate_positive_integer",
]
