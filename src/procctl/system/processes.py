"""
Process table queries.

This module wraps psutil for the read-only side of process control:
liveness checks, pattern lookups and process details. Every function here
treats OS query failures as "nothing there" rather than raising, because an
unreadable or vanished process is the common case when scanning the table.
"""

import logging
import os
import re
from typing import Any, Dict, List, Optional, Pattern

import psutil

from ..models.process import ProcessInfo
from ..validation import QueryError, ValidationError

logger = logging.getLogger(__name__)

_INFO_ATTRS = [
    "pid",
    "name",
    "status",
    "username",
    "cpu_percent",
    "memory_info",
    "create_time",
    "cmdline",
]


def is_pid_running(pid: Any) -> bool:
    """Return True if ``pid`` names a live, non-zombie process.

    Never raises: bad identifiers, missing processes, zombies and any
    psutil/OS error all yield False. On some platforms a reused PID is
    indistinguishable from the original process.
    """
    try:
        pid = int(pid)
    except (TypeError, ValueError):
        return False
    if pid <= 0:
        return False

    try:
        process = psutil.Process(pid)
        if not process.is_running():
            return False
        return process.status() not in (psutil.STATUS_ZOMBIE, psutil.STATUS_DEAD)
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return False
    except (psutil.Error, OSError) as e:
        logger.debug(f"Error checking status of PID {pid}: {e}")
        return False


def snapshot_processes(attrs: List[str]) -> List[Dict[str, Any]]:
    """Read ``attrs`` for every process in the table.

    Attributes that cannot be read for a given process come back as None.

    Raises:
        QueryError: If the process table itself cannot be enumerated.
    """
    try:
        return [proc.info for proc in psutil.process_iter(attrs, ad_value=None)]
    except (psutil.Error, OSError) as e:
        raise QueryError(f"Cannot enumerate processes: {e}") from e


def _compile_pattern(pattern: str) -> Pattern[str]:
    if not pattern or not isinstance(pattern, str):
        raise ValidationError(
            "pattern must be a non-empty string", field_name="pattern", value=pattern
        )
    try:
        return re.compile(pattern)
    except re.error:
        logger.debug(f"Pattern '{pattern}' is not a valid regex, matching it literally")
        return re.compile(re.escape(pattern))


def _match_target(info: Dict[str, Any], match_full_command_line: bool) -> str:
    name = info.get("name") or ""
    if not match_full_command_line:
        return name
    cmdline = info.get("cmdline")
    return " ".join(cmdline) if cmdline else name


def find_pids(pattern: str, match_full_command_line: bool = False) -> List[int]:
    """Return the PIDs whose name (or full command line) matches ``pattern``.

    ``pattern`` is a regular expression searched anywhere in the target, so a
    plain word behaves as a substring match. The calling process is never
    included. Order follows the process table.
    """
    matcher = _compile_pattern(pattern)
    own_pid = os.getpid()

    try:
        entries = snapshot_processes(["pid", "name", "cmdline"])
    except QueryError as e:
        logger.warning(f"{e}; treating as no matches for '{pattern}'")
        return []

    pids = []
    for info in entries:
        pid = info.get("pid")
        if pid is None or pid == own_pid:
            continue
        if matcher.search(_match_target(info, match_full_command_line)):
            pids.append(pid)

    logger.debug(f"Pattern '{pattern}' matched PIDs: {pids}")
    return pids


def _to_process_info(info: Dict[str, Any]) -> ProcessInfo:
    memory = info.get("memory_info")
    return ProcessInfo(
        pid=info["pid"],
        name=info.get("name") or "",
        status=info.get("status") or "unknown",
        username=info.get("username"),
        cpu_percent=info.get("cpu_percent") or 0.0,
        memory_rss=getattr(memory, "rss", 0) if memory is not None else 0,
        memory_vms=getattr(memory, "vms", 0) if memory is not None else 0,
        create_time=info.get("create_time"),
        cmdline=list(info.get("cmdline") or []),
    )


def get_process_info(pid: int) -> Optional[ProcessInfo]:
    """Describe a single process, or return None if it cannot be read."""
    try:
        process = psutil.Process(int(pid))
        with process.oneshot():
            info = process.as_dict(attrs=_INFO_ATTRS, ad_value=None)
    except (psutil.NoSuchProcess, psutil.AccessDenied, TypeError, ValueError):
        return None
    except (psutil.Error, OSError) as e:
        logger.debug(f"Error reading details of PID {pid}: {e}")
        return None
    return _to_process_info(info)


def list_processes(pattern: Optional[str] = None) -> List[ProcessInfo]:
    """List every process, or those whose command line matches ``pattern``."""
    matcher = _compile_pattern(pattern) if pattern is not None else None

    try:
        entries = snapshot_processes(_INFO_ATTRS)
    except QueryError as e:
        logger.warning(f"{e}; returning an empty process list")
        return []

    result = []
    for info in entries:
        if info.get("pid") is None:
            continue
        if matcher is not None and not matcher.search(_match_target(info, True)):
            continue
        result.append(_to_process_info(info))
    return result
