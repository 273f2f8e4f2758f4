"""Terminal abstraction for cbreak-mode stdin/stdout interaction.

Provides the ``Terminal`` protocol the render loop consumes and a concrete
``ProcessTerminal`` implementation that manages cbreak mode, polls stdin
for input, reads escape sequences and emits cursor and screen control codes
via ANSI escape sequences.
"""

from __future__ import annotations

import logging
import os
import select
import sys
import termios
import time
import tty
from typing import IO, Protocol

from clt.console.keys import (
    ESC,
    CursorReport,
    EscapeSequence,
    is_complete_sequence,
    parse_escape_sequence,
)
from clt.console.render import Position, Size

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_TO_END_OF_LINE = "\x1b[K"
_CLEAR_BELOW = "\x1b[J"
_CURSOR_UP_FMT = "\x1b[{}A"
_CURSOR_DOWN_FMT = "\x1b[{}B"
_CURSOR_COLUMN_FMT = "\x1b[{}G"
_QUERY_CURSOR_POSITION = "\x1b[6n"

# How long to wait for the rest of an escape sequence before deciding that
# a lone ESC was the escape key.
_ESCAPE_TIMEOUT = 0.05
_CURSOR_REPORT_TIMEOUT = 0.5

_DEFAULT_SIZE = Size(rows=24, cols=80)


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for the terminal operations the render loop needs."""

    @property
    def is_atty(self) -> bool: ...

    def size(self) -> Size: ...

    def read_cursor_position(self) -> Position: ...

    def key_pressed(self) -> bool: ...

    def read_char(self) -> str: ...

    def read_escape_sequence(self) -> EscapeSequence: ...

    def write(self, text: str) -> None: ...

    def writeln(self, text: str = "") -> None: ...

    def move_up(self, lines: int = 1) -> None: ...

    def move_down(self, lines: int = 1) -> None: ...

    def move_to_column(self, column: int) -> None: ...

    def clear_to_end_of_line(self) -> None: ...

    def clear_below(self) -> None: ...

    def cursor_on(self) -> None: ...

    def cursor_off(self) -> None: ...

    def enable_non_blocking_mode(self) -> None: ...

    def disable_non_blocking_mode(self) -> None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Concrete terminal implementation backed by ``sys.stdin``/``sys.stdout``.

    Non-blocking mode switches stdin to cbreak mode (no line buffering, no
    echo) via :mod:`tty` and :mod:`termios`; input is polled with
    :func:`select.select` so reads never block the render loop.
    """

    def __init__(self, stdin: IO[str] | None = None, stdout: IO[str] | None = None) -> None:
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self._original_termios: list | None = None
        self._write_log_path: str = os.environ.get("CLT_CONSOLE_WRITE_LOG", "")

    # -- properties ---------------------------------------------------------

    @property
    def is_atty(self) -> bool:
        try:
            return os.isatty(self._stdout.fileno())
        except (ValueError, OSError):
            return False

    def size(self) -> Size:
        try:
            size = os.get_terminal_size(self._stdout.fileno())
        except (ValueError, OSError):
            return _DEFAULT_SIZE
        return Size(rows=size.lines, cols=size.columns)

    # -- mode ---------------------------------------------------------------

    def enable_non_blocking_mode(self) -> None:
        """Switch stdin to cbreak mode, remembering the previous settings."""
        if self._original_termios is not None:
            return
        fd = self._stdin.fileno()
        self._original_termios = termios.tcgetattr(fd)
        tty.setcbreak(fd)

    def disable_non_blocking_mode(self) -> None:
        """Restore the terminal settings saved by enable_non_blocking_mode."""
        if self._original_termios is None:
            return
        fd = self._stdin.fileno()
        try:
            termios.tcsetattr(fd, termios.TCSADRAIN, self._original_termios)
        finally:
            self._original_termios = None

    # -- input --------------------------------------------------------------

    def _wait_readable(self, timeout: float) -> bool:
        try:
            ready, _, _ = select.select([self._stdin.fileno()], [], [], timeout)
        except (ValueError, OSError):
            return False
        return bool(ready)

    def key_pressed(self) -> bool:
        return self._wait_readable(0)

    def read_char(self) -> str:
        """Read one UTF-8 encoded character; ``""`` when stdin is closed."""
        fd = self._stdin.fileno()
        first = os.read(fd, 1)
        if not first:
            return ""
        lead = first[0]
        if lead < 0x80:
            length = 1
        elif lead >> 5 == 0b110:
            length = 2
        elif lead >> 4 == 0b1110:
            length = 3
        elif lead >> 3 == 0b11110:
            length = 4
        else:
            length = 1
        data = first
        while len(data) < length:
            more = os.read(fd, length - len(data))
            if not more:
                break
            data += more
        return data.decode("utf-8", errors="replace")

    def read_escape_sequence(self) -> EscapeSequence:
        """Read the rest of a sequence whose ESC has already been consumed."""
        data = ESC
        while not is_complete_sequence(data):
            if not self._wait_readable(_ESCAPE_TIMEOUT):
                break
            char = self.read_char()
            if not char:
                break
            data += char
        return parse_escape_sequence(data)

    def read_cursor_position(self) -> Position:
        """Query the cursor position with ``CSI 6 n``.

        Falls back to the origin when the terminal does not answer.
        """
        if not self.is_atty:
            return Position(0, 0)

        switched = self._original_termios is None
        if switched:
            self.enable_non_blocking_mode()
        try:
            self.write(_QUERY_CURSOR_POSITION)
            deadline = time.monotonic() + _CURSOR_REPORT_TIMEOUT
            while time.monotonic() < deadline:
                if not self._wait_readable(deadline - time.monotonic()):
                    break
                if self.read_char() != ESC:
                    continue
                sequence = self.read_escape_sequence()
                if isinstance(sequence, CursorReport):
                    return sequence.position
        finally:
            if switched:
                self.disable_non_blocking_mode()

        logger.debug("Terminal did not report the cursor position")
        return Position(0, 0)

    # -- output -------------------------------------------------------------

    def write(self, text: str) -> None:
        """Write to stdout and optionally to the write log."""
        try:
            self._stdout.write(text)
            self._stdout.flush()
        except OSError:
            pass

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a") as f:
                    f.write(text)
            except OSError:
                pass

    def writeln(self, text: str = "") -> None:
        self.write(text + "\n")

    def move_up(self, lines: int = 1) -> None:
        if lines > 0:
            self.write(_CURSOR_UP_FMT.format(lines))

    def move_down(self, lines: int = 1) -> None:
        if lines > 0:
            self.write(_CURSOR_DOWN_FMT.format(lines))

    def move_to_column(self, column: int) -> None:
        """Move to the one-based *column* of the current line."""
        self.write(_CURSOR_COLUMN_FMT.format(max(column, 1)))

    def clear_to_end_of_line(self) -> None:
        self.write(_CLEAR_TO_END_OF_LINE)

    def clear_below(self) -> None:
        self.write(_CLEAR_BELOW)

    def cursor_on(self) -> None:
        self.write(_SHOW_CURSOR)

    def cursor_off(self) -> None:
        self.write(_HIDE_CURSOR)
