"""Turns raw terminal input into control events."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from clt.console.errors import (
    EventStreamFinishedError,
    UnknownEscapeSequenceError,
    printable_sequence,
)
from clt.console.events import TICK, ControlEvent, InputChar, InputEscapeSequence
from clt.console.keys import ESC, CursorReport, KeySequence, ScreenReport, UnknownSequence

if TYPE_CHECKING:
    from clt.console.presenter import RenderingState
    from clt.console.terminal import Terminal

logger = logging.getLogger(__name__)


class EventDecoder:
    """Produces exactly one :data:`ControlEvent` per call to :meth:`next_event`.

    Terminal reports (cursor position, window size) are folded into the
    rendering state and never surface as events.  Unknown sequences are
    skipped with a warning, or raised as
    :class:`UnknownEscapeSequenceError` when *strict* is set.
    """

    def __init__(self, terminal: Terminal, strict: bool = False) -> None:
        self.terminal = terminal
        self.strict = strict

    def next_event(self, state: RenderingState) -> ControlEvent:
        while self.terminal.key_pressed():
            char = self.terminal.read_char()
            if not char:
                raise EventStreamFinishedError()
            if char != ESC:
                return InputChar(char)

            sequence = self.terminal.read_escape_sequence()
            if isinstance(sequence, KeySequence):
                return InputEscapeSequence(sequence.code, sequence.meta)
            if isinstance(sequence, CursorReport):
                state.last_render_cursor_pos = sequence.position
                continue
            if isinstance(sequence, ScreenReport):
                state.terminal_size = sequence.size
                continue
            if isinstance(sequence, UnknownSequence):
                if self.strict:
                    raise UnknownEscapeSequenceError(sequence.raw)
                logger.warning(
                    "Skipping unknown escape sequence %s",
                    printable_sequence(sequence.raw),
                )
                continue

        return TICK
