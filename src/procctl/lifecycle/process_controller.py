"""
Process lifecycle management.

This module starts detached child processes, looks processes up in the
process table, waits for them to exit and stops them with an escalating
policy: a graceful request, a bounded wait, then a forced kill.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

import psutil

from ..config import get_config
from ..models import (
    AppConfig,
    ProcessHandle,
    ProcessInfo,
    TerminationOutcome,
    TerminationPolicy,
)
from ..system import (
    Clock,
    SystemClock,
    find_pids,
    get_process_info,
    is_pid_running,
    list_processes,
    spawn_process,
)
from ..validation import ErrorSeverity, TerminationFailure, handle_error

logger = logging.getLogger(__name__)


class ProcessController:
    """
    Start, inspect, wait for and stop OS processes.

    The controller keeps no state between calls apart from its clock and
    configuration; everything else is read from the OS process table.
    """

    def __init__(self, clock: Optional[Clock] = None, config: Optional[AppConfig] = None):
        self.clock = clock or SystemClock()
        self._config = config

    @property
    def config(self) -> AppConfig:
        return self._config if self._config is not None else get_config()

    def default_policy(self, force: bool = False) -> TerminationPolicy:
        """Termination policy built from the `[process]` configuration."""
        return TerminationPolicy.from_config(self.config.process, force=force)

    # ------------------------------------------------------------------
    # Starting and querying
    # ------------------------------------------------------------------

    def spawn(
        self,
        command: str,
        arguments: Union[str, Sequence[str], None] = (),
        working_dir: Union[str, Path, None] = None,
        output_path: Union[str, Path, None] = None,
    ) -> ProcessHandle:
        """
        Start ``command`` detached from the caller.

        See :func:`procctl.system.spawn_process` for the argument details.

        Raises:
            SpawnError: If the process cannot be created.
        """
        return spawn_process(command, arguments, working_dir, output_path)

    # alias
    start_detached = spawn

    def is_running(self, pid: Union[int, ProcessHandle]) -> bool:
        """
        Whether a process is alive right now.

        Accepts a PID or a handle from spawn(). A spawned child that has
        exited is reaped here and reported as stopped.
        """
        if isinstance(pid, ProcessHandle):
            if pid.returncode is not None:
                return False
            pid = pid.pid
        return is_pid_running(pid)

    def find_by_pattern(self, pattern: str, match_full_command_line: bool = False) -> List[int]:
        return find_pids(pattern, match_full_command_line)

    def get_process_info(self, pid: int) -> Optional[ProcessInfo]:
        return get_process_info(pid)

    def list_processes(self, pattern: Optional[str] = None) -> List[ProcessInfo]:
        return list_processes(pattern)

    # ------------------------------------------------------------------
    # Termination
    # ------------------------------------------------------------------

    def terminate(
        self,
        pid: int,
        policy: Optional[TerminationPolicy] = None,
        check: bool = False,
    ) -> TerminationOutcome:
        """
        Stop a process, escalating from a graceful request to a kill.

        1. A process that is not running yields ALREADY_STOPPED at once.
        2. Unless ``policy.force`` is set, a graceful stop is requested and
           the process is polled every ``policy.poll_interval`` seconds for
           up to ``policy.timeout`` seconds.
        3. If it is still alive (or ``force`` was set) it is killed, given
           one more poll interval, and checked a final time.

        Args:
            pid: Process to stop.
            policy: Escalation settings; defaults to the configured policy.
            check: Raise TerminationFailure instead of returning FAILED.

        Returns:
            The TerminationOutcome of this call.
        """
        policy = policy or self.default_policy()

        if not self.is_running(pid):
            logger.debug(f"Process {pid} is not running, nothing to stop")
            return TerminationOutcome.ALREADY_STOPPED

        graceful_sent = False
        if not policy.force:
            try:
                psutil.Process(pid).terminate()
                graceful_sent = True
                logger.debug(f"Sent graceful stop request to PID {pid}")
            except psutil.NoSuchProcess:
                logger.info(f"Process {pid} exited before the stop request was delivered")
                return TerminationOutcome.STOPPED_GRACEFULLY
            except psutil.AccessDenied:
                logger.warning(f"Access denied sending stop request to PID {pid}, escalating to kill")

            if graceful_sent:
                if self._poll_until_exit(pid, policy.timeout, policy.poll_interval):
                    logger.info(f"Process {pid} stopped gracefully")
                    return TerminationOutcome.STOPPED_GRACEFULLY
                logger.warning(f"Process {pid} still running after {policy.timeout}s, forcing kill")

        outcome = self._force_kill(pid, policy, graceful_sent)
        if check and outcome is TerminationOutcome.FAILED:
            raise TerminationFailure(pid)
        return outcome

    def _force_kill(self, pid: int, policy: TerminationPolicy, graceful_sent: bool) -> TerminationOutcome:
        try:
            psutil.Process(pid).kill()
        except psutil.NoSuchProcess:
            # Exited between the last poll and the kill
            logger.info(f"Process {pid} exited before it could be killed")
            if graceful_sent:
                return TerminationOutcome.STOPPED_GRACEFULLY
            return TerminationOutcome.ALREADY_STOPPED
        except psutil.AccessDenied:
            logger.error(f"Access denied killing PID {pid}")
            return TerminationOutcome.FAILED

        self.clock.sleep(policy.poll_interval)

        if self.is_running(pid):
            logger.error(f"Process {pid} survived a forced kill")
            return TerminationOutcome.FAILED

        logger.info(f"Process {pid} stopped forcibly")
        return TerminationOutcome.STOPPED_FORCIBLY

    def terminate_all_matching(
        self,
        pattern: str,
        policy: Optional[TerminationPolicy] = None,
        match_full_command_line: bool = False,
    ) -> int:
        """
        Stop every process matching ``pattern``.

        Each match is handled independently; an error on one does not stop
        the rest.

        Returns:
            Number of processes this call actually stopped. Matches that were
            already gone (ALREADY_STOPPED) and failures are not counted.
        """
        policy = policy or self.default_policy()
        pids = self.find_by_pattern(pattern, match_full_command_line)

        stopped = 0
        for pid in pids:
            try:
                outcome = self.terminate(pid, policy)
            except Exception as e:
                handle_error(
                    error=e,
                    context=f"stopping PID {pid}",
                    severity=ErrorSeverity.WARNING,
                    reraise=False,
                    logger=logger,
                )
                continue
            if outcome.stopped:
                stopped += 1
            elif outcome is TerminationOutcome.FAILED:
                logger.warning(f"Could not stop PID {pid} matching '{pattern}'")

        logger.info(f"Stopped {stopped} of {len(pids)} processes matching '{pattern}'")
        return stopped

    # ------------------------------------------------------------------
    # Waiting
    # ------------------------------------------------------------------

    def _poll_until_exit(self, pid: int, timeout: Optional[float], interval: float) -> bool:
        """Poll until ``pid`` is gone; False once ``timeout`` has elapsed.

        A ``timeout`` of None means no upper bound.
        """
        deadline = None if timeout is None else self.clock.monotonic() + timeout
        while self.is_running(pid):
            if deadline is None:
                self.clock.sleep(interval)
                continue
            remaining = deadline - self.clock.monotonic()
            if remaining <= 0:
                return False
            self.clock.sleep(min(interval, remaining))
        return True

    def wait_for_exit(self, pid: int, timeout: Optional[float] = None) -> bool:
        """
        Block until ``pid`` exits.

        Args:
            pid: Process to wait for.
            timeout: Seconds to wait; None or 0 waits without limit.

        Returns:
            True if the process is gone, False if it outlived ``timeout``.
        """
        interval = self.config.process.wait_poll_interval
        exited = self._poll_until_exit(pid, timeout or None, interval)
        if not exited:
            logger.debug(f"Timed out after {timeout}s waiting for PID {pid}")
        return exited

    async def wait_for_exit_async(self, pid: int, timeout: Optional[float] = None) -> bool:
        """
        Same contract as :meth:`wait_for_exit`, suspending with asyncio.

        The coroutine can be cancelled, or bounded with asyncio.wait_for.
        """
        interval = self.config.process.wait_poll_interval
        deadline = None if not timeout else self.clock.monotonic() + timeout
        while self.is_running(pid):
            if deadline is None:
                await asyncio.sleep(interval)
                continue
            remaining = deadline - self.clock.monotonic()
            if remaining <= 0:
                logger.debug(f"Timed out after {timeout}s waiting for PID {pid}")
                return False
            await asyncio.sleep(min(interval, remaining))
        return True
