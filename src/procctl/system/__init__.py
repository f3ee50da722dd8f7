"""
System interaction utilities.

This package holds everything that touches the operating system directly:

- Process creation with output redirection and detachment
- Process table queries (liveness, pattern lookup, details)
- The clock abstraction used by polling loops
"""

# Time source
from .clock import Clock, SystemClock

# Process creation
from .commands import spawn_process, split_arguments

# Process table queries
from .processes import (
    find_pids,
    get_process_info,
    is_pid_running,
    list_processes,
    snapshot_processes,
)

__all__ = [
    # Clock
    "Clock",
    "SystemClock",
    # Commands
    "spawn_process",
    "split_arguments",
    # Processes
    "find_pids",
    "get_process_info",
    "is_pid_running",
    "list_processes",
    "snapshot_processes",
]
