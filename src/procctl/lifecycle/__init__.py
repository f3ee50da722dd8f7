"""
Process lifecycle and lock-file coordination.
"""

from .lock_file import LockFile, acquire_lock, release_lock
from .process_controller import ProcessController

__all__ = [
    "LockFile",
    "ProcessController",
    "acquire_lock",
    "release_lock",
]
