"""
Command-line interface for procctl.

Thin argparse front end over ProcessController and LockFile. Exit status is
0 on success and 1 when the requested state was not reached (process not
running, stop failed, wait timed out, lock held elsewhere).
"""

import argparse
import logging
import os
import sys
import tomllib
from pathlib import Path
from typing import List, Optional

from ..config import get_config, set_config_path
from ..lifecycle import LockFile, ProcessController
from ..models import TerminationOutcome, TerminationPolicy
from ..validation import (
    ProcessControlError,
    ValidationError,
    handle_cli_error,
    validate_pid,
    validate_positive_float,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"


def _configure_logging(args: argparse.Namespace) -> None:
    if args.quiet:
        level = logging.WARNING
    elif args.verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, get_config().logging.level, logging.INFO)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )


def _pid(value: str) -> int:
    try:
        return validate_pid(value, field_name="PID")
    except ValidationError as e:
        raise argparse.ArgumentTypeError(str(e))


def _seconds(value: str) -> float:
    try:
        return validate_positive_float(value, min_value=0.0, field_name="timeout")
    except ValidationError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="procctl",
        description="Start, find, stop and wait for processes; manage PID lock files.",
    )
    parser.add_argument("--config", type=Path, help="Path to a config.toml file.")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors.")

    sub = parser.add_subparsers(dest="command", required=True)

    start = sub.add_parser(
        "start",
        help="Start a detached process and print its PID.",
        usage="%(prog)s [--cwd DIR] [--output FILE] PROGRAM [ARGS ...]",
        description="Start PROGRAM detached. Options for start go before PROGRAM; "
        "everything after it, options included, is passed to the program.",
    )
    start.add_argument("--cwd", type=Path, help="Working directory for the process.")
    start.add_argument("--output", type=Path, help="Append stdout/stderr to this file.")
    start.add_argument("program")
    start.add_argument("arguments", nargs=argparse.REMAINDER)

    status = sub.add_parser("status", help="Exit 0 if the process is running.")
    status.add_argument("pid", type=_pid)

    find = sub.add_parser("find", help="Print PIDs whose name matches a pattern.")
    find.add_argument("pattern")
    find.add_argument("--full", action="store_true", help="Match the full command line.")

    stop = sub.add_parser("stop", help="Stop a process, escalating to a kill.")
    stop.add_argument("pid", type=_pid)
    stop.add_argument("--force", action="store_true", help="Kill without a graceful request.")
    stop.add_argument("--timeout", type=_seconds, help="Seconds to wait for a graceful exit.")

    stop_all = sub.add_parser("stop-all", help="Stop every process matching a pattern.")
    stop_all.add_argument("pattern")
    stop_all.add_argument("--force", action="store_true")
    stop_all.add_argument("--full", action="store_true", help="Match the full command line.")
    stop_all.add_argument("--timeout", type=_seconds)

    wait = sub.add_parser("wait", help="Wait for a process to exit.")
    wait.add_argument("pid", type=_pid)
    wait.add_argument("--timeout", type=_seconds, default=0.0, help="0 waits forever.")

    info = sub.add_parser("info", help="Show details for one process.")
    info.add_argument("pid", type=_pid)

    listing = sub.add_parser("list", help="List processes, optionally filtered.")
    listing.add_argument("pattern", nargs="?")

    lock = sub.add_parser("lock", help="Acquire a PID lock file.")
    lock.add_argument("path", type=Path)
    lock.add_argument("--pid", type=_pid, help="PID to record (defaults to the process that ran procctl, e.g. the calling shell script).")
    lock.add_argument("--exclusive", action="store_true", help="Create the file atomically.")

    unlock = sub.add_parser("unlock", help="Remove a PID lock file.")
    unlock.add_argument("path", type=Path)

    return parser


def _policy(controller: ProcessController, args: argparse.Namespace) -> TerminationPolicy:
    base = controller.default_policy(force=args.force)
    if args.timeout is None:
        return base
    return TerminationPolicy(force=base.force, timeout=args.timeout, poll_interval=base.poll_interval)


def _format_info_row(info) -> str:
    return f"{info.pid:>7}  {info.status:<10}  {info.memory_rss // 1024:>9}K  {info.command_line}"


def run(args: argparse.Namespace, controller: Optional[ProcessController] = None) -> int:
    """Execute a parsed command and return the process exit status."""
    controller = controller or ProcessController()

    if args.command == "start":
        handle = controller.spawn(args.program, args.arguments, args.cwd, args.output)
        print(handle.pid)
        return 0

    if args.command == "status":
        running = controller.is_running(args.pid)
        print("running" if running else "stopped")
        return 0 if running else 1

    if args.command == "find":
        for pid in controller.find_by_pattern(args.pattern, args.full):
            print(pid)
        return 0

    if args.command == "stop":
        outcome = controller.terminate(args.pid, _policy(controller, args))
        print(outcome.value)
        return 1 if outcome is TerminationOutcome.FAILED else 0

    if args.command == "stop-all":
        print(controller.terminate_all_matching(args.pattern, _policy(controller, args), args.full))
        return 0

    if args.command == "wait":
        exited = controller.wait_for_exit(args.pid, args.timeout)
        return 0 if exited else 1

    if args.command == "info":
        info = controller.get_process_info(args.pid)
        if info is None:
            logger.error(f"No process with PID {args.pid}")
            return 1
        print(f"pid:      {info.pid}")
        print(f"name:     {info.name}")
        print(f"status:   {info.status}")
        print(f"user:     {info.username or '-'}")
        print(f"rss:      {info.memory_rss}")
        print(f"vms:      {info.memory_vms}")
        print(f"command:  {info.command_line}")
        return 0

    if args.command == "list":
        for info in controller.list_processes(args.pattern):
            print(_format_info_row(info))
        return 0

    if args.command == "lock":
        # procctl itself exits at once; the lock belongs to whoever invoked it
        holder = args.pid if args.pid is not None else os.getppid()
        lock = LockFile(args.path, pid=holder, exclusive=args.exclusive)
        if lock.acquire():
            return 0
        print(f"held by {lock.holder_pid()}", file=sys.stderr)
        return 1

    if args.command == "unlock":
        LockFile(args.path).release()
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line entry point.

    Raises:
        SystemExit: Always, with the command's exit status.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.config is not None:
        set_config_path(args.config)

    try:
        _configure_logging(args)
    except (FileNotFoundError, tomllib.TOMLDecodeError, ValidationError) as e:
        handle_cli_error(error=e, context="configuration loading", exit_code=2, logger=logger)

    try:
        exit_code = run(args)
    except (ProcessControlError, ValidationError) as e:
        handle_cli_error(error=e, context=args.command, exit_code=1, logger=logger)
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        exit_code = 130

    sys.exit(exit_code)


if __name__ == "__main__":
    main_cli()
