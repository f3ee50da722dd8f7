"""
Process data models.

A ProcessHandle identifies a process started by ProcessController.spawn;
a ProcessInfo is a point-in-time description of any process in the table.
"""

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class ProcessHandle:
    """
    Handle for a spawned child process.

    Liveness is not stored on the handle; pass it to
    ProcessController.is_running to ask the OS.
    """

    pid: int
    command: List[str]
    working_dir: Path
    output_path: Optional[Path] = None
    popen: Optional[subprocess.Popen] = field(default=None, repr=False, compare=False)

    @property
    def returncode(self) -> Optional[int]:
        """Exit code of the child, or None while it is still running."""
        if self.popen is None:
            return None
        # poll() also reaps the child so it does not linger as a zombie
        return self.popen.poll()


@dataclass
class ProcessInfo:
    """
    Snapshot of one entry in the process table.
    """

    pid: int
    name: str
    status: str
    username: Optional[str] = None
    cpu_percent: float = 0.0
    memory_rss: int = 0
    memory_vms: int = 0
    create_time: Optional[float] = None
    cmdline: List[str] = field(default_factory=list)

    @property
    def command_line(self) -> str:
        """The full invocation, or the bare name when argv is unavailable."""
        return " ".join(self.cmdline) if self.cmdline else self.name
