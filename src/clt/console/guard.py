"""Process-wide exclusivity of interactive sessions.

Only one interactive session may own the terminal at a time.  A second
session, whether started concurrently or from inside the running one, is a
programming error and is rejected with :class:`AlreadyRunningError` naming
the offending call site.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
from contextlib import contextmanager
from typing import Awaitable, Callable, Iterator, TypeVar

from clt.console.errors import AlreadyRunningError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def caller_site(skip_package: bool = True) -> str:
    """Return ``file:line`` of the first caller outside this package."""
    frame = sys._getframe(1)
    while frame is not None:
        filename = os.path.abspath(frame.f_code.co_filename)
        inside = filename.startswith(_PACKAGE_DIR + os.sep)
        if not (skip_package and inside) and "contextlib" not in filename:
            return f"{filename}:{frame.f_lineno}"
        frame = frame.f_back  # type: ignore[assignment]
    return "<unknown>"


class ExclusivityGuard:
    """A flag guarded by a lock, acquired for the duration of a session."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active = False
        self._owner: str | None = None

    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._active

    def _acquire(self, call_site: str) -> None:
        with self._lock:
            if self._active:
                logger.error(
                    "Rejected interactive session at %s; session from %s is running",
                    call_site,
                    self._owner,
                )
                raise AlreadyRunningError(call_site, self._owner)
            self._active = True
            self._owner = call_site

    def _release(self) -> None:
        with self._lock:
            self._active = False
            self._owner = None

    @contextmanager
    def session(self, call_site: str | None = None) -> Iterator[None]:
        """Hold the guard for the enclosed block.

        The guard is released on every exit path, including exceptions and
        task cancellation.
        """
        self._acquire(call_site or caller_site())
        try:
            yield
        finally:
            self._release()

    async def run_exclusive(
        self,
        action: Callable[[], Awaitable[T]],
        call_site: str | None = None,
    ) -> T:
        """Await ``action()`` while holding the guard."""
        with self.session(call_site or caller_site()):
            return await action()


interactive_guard = ExclusivityGuard()
