"""PID lock file that keeps two imports from running at the same time.

The lock file is published with ``os.link`` from a private claim file that
already holds the owner's PID, so it is never seen empty. On POSIX the owner
also keeps an ``flock`` on it for the whole run; a leftover file is only taken
over while holding that lock and when its PID names a dead process.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING
from uuid import uuid4

if sys.platform != "win32":
    import fcntl

if TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType

log = getLogger(__name__)

_ATTEMPTS = 3


class RunAlreadyActiveError(RuntimeError):
    """Raised when another import holds the run lock."""

    def __init__(self, pid: int | None = None) -> None:
        self.pid = pid
        message = "An import is already running"
        if pid is not None:
            message = f"{message} (PID {pid})"
        super().__init__(message)


def _is_process_running(pid: int) -> bool:
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True


def _try_lock(fd: int) -> bool:
    if sys.platform == "win32":
        return True
    try:
        fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
    except BlockingIOError:
        return False
    return True


def _parse_pid(content: bytes) -> int | None:
    text = content.decode("ascii", errors="replace").strip()
    try:
        return int(text)
    except ValueError:
        return None


@dataclass
class RunLock:
    """Exclusive lock held for the duration of one import."""

    path: Path
    acquired: bool = False
    _fd: int | None = field(default=None, init=False, repr=False)

    def acquire(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        claim = self._write_claim()
        try:
            for _ in range(_ATTEMPTS):
                try:
                    os.link(claim, self.path)
                except FileExistsError:
                    if self._take_over_stale(claim):
                        break
                    continue
                break
            else:
                raise RunAlreadyActiveError(self._read_pid())
        except BaseException:
            self._close()
            raise
        finally:
            claim.unlink(missing_ok=True)
        self.acquired = True

    def release(self) -> None:
        if not self.acquired:
            return
        try:
            self.path.unlink(missing_ok=True)
        finally:
            self._close()
            self.acquired = False

    def __enter__(self) -> RunLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    def _write_claim(self) -> Path:
        claim = self.path.with_name(f"{self.path.name}.{os.getpid()}.{uuid4().hex[:8]}")
        fd = os.open(claim, os.O_CREAT | os.O_EXCL | os.O_RDWR, 0o644)
        self._fd = fd
        try:
            _try_lock(fd)
            os.write(fd, str(os.getpid()).encode("ascii"))
        except OSError:
            self._close()
            claim.unlink(missing_ok=True)
            raise
        return claim

    def _take_over_stale(self, claim: Path) -> bool:
        """Replace a dead owner's lock with ``claim``; False means look again."""

        try:
            fd = os.open(self.path, os.O_RDONLY)
        except FileNotFoundError:
            return False
        try:
            if not _try_lock(fd):
                raise RunAlreadyActiveError(self._read_pid())
            pid = _parse_pid(os.read(fd, 32))
            if pid is None:
                log.warning(
                    "Run lock %s holds no PID; remove it if no import is running", self.path
                )
                raise RunAlreadyActiveError
            if _is_process_running(pid):
                raise RunAlreadyActiveError(pid)
            try:
                if os.stat(self.path).st_ino != os.fstat(fd).st_ino:
                    return False
            except FileNotFoundError:
                return False
            log.warning("Taking over stale run lock %s (PID %s)", self.path, pid)
            os.replace(claim, self.path)
            return True
        finally:
            os.close(fd)

    def _close(self) -> None:
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None

    def _read_pid(self) -> int | None:
        try:
            return _parse_pid(self.path.read_bytes())
        except OSError:
            return None
