"""Single-flight admission for the shared browser session."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from ..errors import BusyError


class SingleFlightGuard:
    """Admit at most one caller at a time; reject the rest instead of queueing them."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def acquire(self) -> bool:
        """Take the guard without blocking; ``False`` when someone else holds it."""

        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        self._lock.release()

    @contextmanager
    def hold(self) -> Iterator[None]:
        """Hold the guard for the ``with`` block or raise :class:`BusyError` immediately."""

        if not self.acquire():
            raise BusyError()
        try:
            yield
        finally:
            self.release()
