"""Per-task console context.

Tracks the container that nested interactive runs should attach to.  The
value lives in a :class:`contextvars.ContextVar`, so every asyncio task
sees the container that was active when it was created.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import Any, Iterator

_active_container: contextvars.ContextVar[Any | None] = contextvars.ContextVar(
    "clt_console_active_container", default=None
)


def active_container() -> Any | None:
    """Return the container nested runs attach to, if any."""
    return _active_container.get()


@contextmanager
def container_scope(container: Any) -> Iterator[Any]:
    """Make *container* the active container for the enclosed block."""
    token = _active_container.set(container)
    try:
        yield container
    finally:
        _active_container.reset(token)
