"""
Reader/Writer Lock

Many concurrent readers or one writer. A waiting writer blocks new
readers, so a removal is never starved by a steady stream of listings.

Writer acquisition is bounded (timeout) and cancellable (threading.Event).
A writer that gives up leaves no trace: waiting readers are woken and the
lock state is exactly what it was before the attempt.

Usage:
    lock = ReadWriteLock()

    with lock.read_locked():
        scan()

    if lock.acquire_write(timeout=0.5):
        try:
            mutate()
        finally:
            lock.release_write()
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from bucketring.core import constants as C


class ReadWriteLock:
    """Non-reentrant reader/writer lock with writer preference."""

    __slots__ = ("_cond", "_readers", "_writer", "_writers_waiting")

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------
    def acquire_read(self) -> None:
        """Block until no writer holds or awaits the lock."""
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            if self._readers == 0:
                raise RuntimeError("release_read() called without a read lock held")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    # -------------------------------------------------------------------------
    # Write side
    # -------------------------------------------------------------------------
    def acquire_write(
        self,
        timeout: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> bool:
        """
        Acquire exclusive access.

        Args:
            timeout: Maximum seconds to wait, None waits indefinitely
            cancel: Event that aborts the wait once set

        Returns:
            True if the lock is now held, False on timeout or cancellation
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        acquired = False

        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    if cancel is not None and cancel.is_set():
                        return False

                    wait_for: Optional[float] = None
                    if deadline is not None:
                        wait_for = deadline - time.monotonic()
                        if wait_for <= 0:
                            return False
                    if cancel is not None:
                        # Event.set() does not notify our condition
                        wait_for = (
                            C.CANCEL_POLL_INTERVAL_S
                            if wait_for is None
                            else min(wait_for, C.CANCEL_POLL_INTERVAL_S)
                        )
                    self._cond.wait(wait_for)

                self._writer = True
                acquired = True
                return True
            finally:
                self._writers_waiting -= 1
                if not acquired:
                    self._cond.notify_all()

    def release_write(self) -> None:
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write() called without the write lock held")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------
    @property
    def readers(self) -> int:
        """Number of read holds currently outstanding."""
        with self._cond:
            return self._readers

    @property
    def is_write_locked(self) -> bool:
        with self._cond:
            return self._writer

    def __repr__(self) -> str:
        return f"ReadWriteLock(readers={self.readers}, writer={self.is_write_locked})"
