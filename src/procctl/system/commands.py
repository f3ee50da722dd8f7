"""
Child process creation.

Starts external programs detached from the caller, with their combined
output appended to a file or discarded, much like `nohup cmd >> log 2>&1 &`.
"""

import logging
import os
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

from ..models.process import ProcessHandle
from ..validation import ErrorSeverity, SpawnError, handle_subprocess_error

logger = logging.getLogger(__name__)


def _detach_options() -> Dict[str, Any]:
    """Popen options that keep the child out of the caller's foreground."""
    if os.name == "nt":
        return {
            "creationflags": subprocess.CREATE_NEW_PROCESS_GROUP | subprocess.DETACHED_PROCESS,
        }
    return {"start_new_session": True}


def split_arguments(arguments: Union[str, Sequence[str], None]) -> list:
    """Normalise arguments given either as a shell-like string or a sequence."""
    if arguments is None:
        return []
    if isinstance(arguments, str):
        return shlex.split(arguments)
    return [str(arg) for arg in arguments]


def spawn_process(
    command: str,
    arguments: Union[str, Sequence[str], None] = (),
    working_dir: Union[str, Path, None] = None,
    output_path: Union[str, Path, None] = None,
) -> ProcessHandle:
    """Start ``command`` in the background and return a handle to it.

    Args:
        command: Executable name (looked up on PATH) or path.
        arguments: Argument list, or a single string split shell-style.
        working_dir: Directory to run in; defaults to the current directory.
        output_path: File that receives stdout and stderr (appended,
            interleaved). Output is discarded when omitted.

    Returns:
        ProcessHandle for the new process.

    Raises:
        SpawnError: If the executable is missing, the working directory is
            invalid, the output file cannot be opened, or the OS refuses to
            create the process.
    """
    if not command:
        raise SpawnError(str(command), "no command given")

    try:
        argv_tail = split_arguments(arguments)
    except ValueError as e:
        raise SpawnError(command, f"cannot parse arguments: {e}") from e

    cwd = Path(working_dir) if working_dir is not None else Path.cwd()
    if not cwd.is_dir():
        raise SpawnError(command, f"working directory does not exist: {cwd}")

    executable = shutil.which(command)
    if executable is None:
        raise SpawnError(command, "executable not found")

    argv = [executable] + argv_tail
    sink = None
    if output_path is not None:
        output_path = Path(output_path)
        try:
            sink = open(output_path, "ab")
        except OSError as e:
            raise SpawnError(command, f"cannot open output file {output_path}: {e}") from e

    try:
        popen = subprocess.Popen(
            argv,
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=sink if sink is not None else subprocess.DEVNULL,
            stderr=subprocess.STDOUT,
            **_detach_options(),
        )
    except OSError as e:
        # the caller reports the SpawnError
        handle_subprocess_error(e, command, severity=ErrorSeverity.DEBUG, reraise=False, logger=logger)
        raise SpawnError(command, str(e)) from e
    finally:
        # the child holds its own descriptor
        if sink is not None:
            sink.close()

    logger.info(f"Started '{command}' with PID: {popen.pid} in directory {cwd}")
    return ProcessHandle(
        pid=popen.pid,
        command=argv,
        working_dir=cwd,
        output_path=output_path,
        popen=popen,
    )
