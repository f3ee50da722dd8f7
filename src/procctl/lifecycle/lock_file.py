"""
PID-stamped lock files for single-instance execution.

A lock file is a plain text file holding the decimal PID of its holder. A
file whose PID is not a live process is stale and is reclaimed by the next
acquirer.

The default acquisition is read, check, then write. Two processes racing on
the same path can therefore both succeed. Pass ``exclusive=True`` to create
the file with O_CREAT | O_EXCL and to reclaim stale files by renaming them
aside first, which lets only one of them win.
"""

import contextlib
import logging
import os
import tempfile
import uuid
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

from ..config import get_config
from ..system import is_pid_running
from ..validation import (
    ErrorSeverity,
    LockContention,
    ValidationError,
    handle_file_error,
    simple_retry,
)

logger = logging.getLogger(__name__)


def _parse_pid(content: Optional[str]) -> Optional[int]:
    if content is None:
        return None
    try:
        return int(content.strip())
    except ValueError:
        return None


class LockFile:
    """
    A lock file at a caller-chosen path.

    Args:
        path: Location of the lock file.
        pid: Identifier written on acquisition; defaults to this process.
        exclusive: Create the file atomically instead of check-then-write.
        is_running: Liveness check for stored PIDs.
    """

    def __init__(
        self,
        path: Union[str, Path],
        pid: Optional[int] = None,
        exclusive: bool = False,
        is_running: Optional[Callable[[int], bool]] = None,
    ):
        if path is None or not str(path).strip():
            raise ValidationError(
                "lock file path must not be empty", field_name="path", value=path
            )
        self.path = Path(path)
        self.pid = pid if pid is not None else os.getpid()
        self.exclusive = exclusive
        self._is_running = is_running or is_pid_running

    @classmethod
    def in_directory(cls, name: str, directory: Union[str, Path, None] = None, **kwargs) -> "LockFile":
        """Lock file ``name`` under ``directory``, the configured lock dir, or the temp dir."""
        if directory is None:
            directory = get_config().lock.directory or Path(tempfile.gettempdir())
        return cls(Path(directory) / name, **kwargs)

    def __repr__(self) -> str:
        return f"LockFile(path={str(self.path)!r}, pid={self.pid})"

    def _read(self) -> Optional[str]:
        try:
            return self.path.read_text()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.debug(f"Cannot read lock file {self.path}: {e}")
            return None

    def holder_pid(self) -> Optional[int]:
        """PID stored in the file, or None if missing or unreadable."""
        return _parse_pid(self._read())

    def is_held(self) -> bool:
        """True when the file names a live process."""
        holder = self.holder_pid()
        return holder is not None and self._is_running(holder)

    def is_stale(self) -> bool:
        """True when the file exists but its holder is not running."""
        return self.path.exists() and not self.is_held()

    def acquire(self) -> bool:
        """
        Take the lock for ``self.pid``.

        Returns:
            True if the lock was written, False if a live process holds it
            (this process included) or the file could not be written.
        """
        if self.path.exists():
            content = self._read()
            holder = _parse_pid(content)
            if holder is not None and self._is_running(holder):
                logger.warning(f"Lock {self.path} already held by process {holder}")
                return False
            logger.warning(f"Removing stale lock file {self.path} (process {holder} not running)")
            if not self._reclaim(content):
                logger.warning(f"Lock {self.path} was taken by another process while reclaiming it")
                return False

        try:
            self._write()
        except FileExistsError:
            logger.warning(f"Lock {self.path} was created by another process first")
            return False
        except OSError as e:
            handle_file_error(
                error=e,
                context=f"creating lock {self.path}",
                severity=ErrorSeverity.ERROR,
                reraise=False,
                logger=logger,
            )
            return False

        logger.debug(f"Acquired lock {self.path} for PID {self.pid}")
        return True

    def _reclaim(self, stale_content: Optional[str]) -> bool:
        """
        Remove a stale lock file whose content was ``stale_content``.

        In exclusive mode the file is first renamed aside, which only one
        acquirer can do. If what was moved is no longer the stale lock (another
        acquirer reclaimed it and wrote its own PID in the meantime) it is
        linked back into place and the reclaim is abandoned.
        """
        if not self.exclusive:
            self._remove()
            return True

        aside = self.path.with_name(f".{self.path.name}.{uuid.uuid4().hex}.stale")
        try:
            os.rename(self.path, aside)
        except FileNotFoundError:
            # Already removed by someone else; the O_EXCL create decides
            return True
        except OSError as e:
            logger.debug(f"Could not move stale lock {self.path} aside: {e}")
            return False

        try:
            if aside.read_text() == stale_content:
                return True
            try:
                # link() never replaces an existing file
                os.link(aside, self.path)
            except OSError as e:
                logger.warning(f"Could not restore lock {self.path}: {e}")
            return False
        except OSError as e:
            logger.debug(f"Cannot read moved lock file {aside}: {e}")
            return False
        finally:
            aside.unlink(missing_ok=True)

    def _write(self) -> None:
        data = f"{self.pid}\n".encode()
        if not self.exclusive:
            self.path.write_bytes(data)
            return
        fd = os.open(str(self.path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        try:
            os.write(fd, data)
        finally:
            os.close(fd)

    def _remove(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.debug(f"Could not remove lock file {self.path}: {e}")

    def release(self) -> None:
        """Delete the lock file. Missing files and unlink errors are ignored."""
        self._remove()
        logger.debug(f"Released lock {self.path}")

    def acquire_with_retry(
        self,
        attempts: Optional[int] = None,
        delay: Optional[float] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> bool:
        """
        Call :meth:`acquire` up to ``attempts`` times, ``delay`` seconds apart.

        Defaults come from the `[lock]` configuration.
        """
        if attempts is None or delay is None:
            lock_config = get_config().lock
            attempts = attempts if attempts is not None else lock_config.retries
            delay = delay if delay is not None else lock_config.retry_delay

        def attempt() -> bool:
            if not self.acquire():
                raise LockContention(self.path, self.holder_pid())
            return True

        try:
            return simple_retry(
                attempt,
                max_attempts=attempts,
                delay=delay,
                context=f"acquiring lock {self.path}",
                sleep=sleep,
            )
        except LockContention:
            return False

    @contextlib.contextmanager
    def hold(self) -> Iterator["LockFile"]:
        """
        Hold the lock for the duration of a ``with`` block.

        Raises:
            LockContention: If another live process holds the lock.
        """
        if not self.acquire():
            raise LockContention(self.path, self.holder_pid())
        try:
            yield self
        finally:
            self.release()


def acquire_lock(path: Union[str, Path]) -> bool:
    """Acquire the lock at ``path`` for the current process."""
    return LockFile(path).acquire()


def release_lock(path: Union[str, Path]) -> None:
    """Remove the lock at ``path``; never raises."""
    if path is None or not str(path).strip():
        return
    LockFile(path).release()
