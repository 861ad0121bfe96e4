"""
Per-repository guard preventing overlapping pulls.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import threading
from contextlib import contextmanager


class GuardBusy(Exception):
    """
    Raised by SyncGuard.hold when a pull is already in flight
    """


class SyncGuard:
    """
    Non-blocking mutual exclusion token for a single repository.

    Callers that fail to acquire the guard are expected to drop their
    work rather than wait for it.
    """

    def __init__(self):
        self._lock = threading.Lock()


    @property
    def locked(self) -> bool:
        return self._lock.locked()


    def try_acquire(self) -> bool:
        """
        Acquire the guard if it is free. Never blocks.
        """

        return self._lock.acquire(blocking=False)


    def release(self) -> None:
        """
        Release a guard obtained through try_acquire. Raises
        RuntimeError if the guard is not held.
        """

        self._lock.release()


    @contextmanager
    def hold(self):
        """
        Hold the guard for the duration of the with block, raising
        GuardBusy if it is already held.
        """

        if not self.try_acquire():
            raise GuardBusy()
        try:
            yield self
        finally:
            self.release()


    def __repr__(self):
        return f'<SyncGuard locked={self.locked}>'


# The end.
