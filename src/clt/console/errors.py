"""Exceptions raised by the console engine.

Every error derives from :class:`ConsoleError` so callers can catch the
whole family with a single ``except`` clause.
"""

from __future__ import annotations


class ConsoleError(Exception):
    """Base class for console engine errors."""


class AlreadyRunningError(ConsoleError):
    """Another interactive session already owns the terminal.

    This is a programming error: interactive components may only be nested
    through a container (see :meth:`clt.console.console.Console.task`).
    """

    def __init__(self, call_site: str, owner_call_site: str | None = None) -> None:
        self.call_site = call_site
        self.owner_call_site = owner_call_site
        message = (
            "Some interactive component is already running.\n\n"
            "This could happen if you tried to launch several interactive "
            "console components concurrently.\n"
            "It's allowed only inside of `Console.task`.\n\n"
            f"Rejected call site: {call_site}"
        )
        if owner_call_site is not None:
            message += f"\nRunning session started at: {owner_call_site}"
        super().__init__(message)


class EventStreamFinishedError(ConsoleError):
    """The terminal input stream was closed while a session was running."""

    def __init__(self) -> None:
        super().__init__("Terminal input stream finished unexpectedly")


class ComponentFinishedWithoutResultError(ConsoleError):
    """A component reported completion but produced no result."""

    def __init__(self, component: object) -> None:
        self.component = component
        super().__init__(f"Component {component!r} finished without a result")


class NotAtTTYError(ConsoleError):
    """An interactive feature was requested outside of a real terminal."""

    def __init__(self, component: object | None = None) -> None:
        self.component = component
        if component is None:
            message = "Interactive console features require a TTY"
        else:
            message = f"Component {component!r} requires a TTY"
        super().__init__(message)


class UnknownEscapeSequenceError(ConsoleError):
    """The decoder received a byte sequence it could not classify."""

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f"Unknown escape sequence {printable_sequence(raw)!r}")


def printable_sequence(raw: str) -> str:
    """Replace ESC bytes with ``^`` so a sequence can be logged safely."""
    return raw.replace("\x1b", "^")


class InputCancelledError(ConsoleError):
    """The user dismissed an input prompt with the escape key."""

    def __init__(self, prompt: str) -> None:
        self.prompt = prompt
        super().__init__(f"Input cancelled: {prompt}")
