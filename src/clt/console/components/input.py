"""Input component - single-line text prompt with an editable cursor."""

from __future__ import annotations

from typing import Any

from clt.console.component import BaseComponent
from clt.console.errors import InputCancelledError
from clt.console.events import ControlEvent, InputChar, InputEscapeSequence
from clt.console.keys import KeyCode
from clt.console.render import Position, Render, Size
from clt.console.renderer import FunctionRenderer, Renderer, with_state
from clt.console.text import StyledText
from clt.console.utils import visible_width

_BACKSPACE_CHARS = ("\x7f", "\b")
_SUBMIT_CHARS = ("\r", "\n")


def _draw_input(state: tuple[str, str, int, bool], preferred_size: Size | None) -> Render:
    prompt, value, cursor, finished = state
    marker = StyledText.of("✓" if finished else "?", foreground="green", bold=True)
    head = marker + " " + StyledText.of(prompt, bold=True) + " "
    line = head + StyledText.of(value, foreground="cyan" if finished else None)
    if finished:
        return Render((line,))
    column = head.width + visible_width(value[:cursor])
    return Render((line,), Position(0, column))


_input_renderer = FunctionRenderer(_draw_input).with_cache()


class Input(BaseComponent[str]):
    """Asks the user for one line of text.

    Enter submits the value; escape fails the component with
    :class:`InputCancelledError`.
    """

    requires_tty = True

    def __init__(self, prompt: str, default: str = "") -> None:
        super().__init__()
        self._prompt = prompt
        self._value = default
        self._cursor = len(default)

    @property
    def value(self) -> str:
        return self._value

    @property
    def cursor(self) -> int:
        return self._cursor

    def handle(self, event: ControlEvent) -> None:
        if self.result is not None:
            return
        if isinstance(event, InputChar):
            self._handle_char(event.char)
        elif isinstance(event, InputEscapeSequence):
            self._handle_key(event.code)

    def _handle_char(self, char: str) -> None:
        if char in _SUBMIT_CHARS:
            self.finish(self._value)
            return
        if char in _BACKSPACE_CHARS:
            if self._cursor > 0:
                self._value = self._value[: self._cursor - 1] + self._value[self._cursor :]
                self._cursor -= 1
            return
        if not char.isprintable():
            return
        self._value = self._value[: self._cursor] + char + self._value[self._cursor :]
        self._cursor += len(char)

    def _handle_key(self, code: KeyCode) -> None:
        if code is KeyCode.ESCAPE:
            self.fail(InputCancelledError(self._prompt))
        elif code is KeyCode.LEFT:
            self._cursor = max(self._cursor - 1, 0)
        elif code is KeyCode.RIGHT:
            self._cursor = min(self._cursor + 1, len(self._value))
        elif code is KeyCode.HOME:
            self._cursor = 0
        elif code is KeyCode.END:
            self._cursor = len(self._value)
        elif code is KeyCode.DELETE:
            self._value = self._value[: self._cursor] + self._value[self._cursor + 1 :]

    def _state(self) -> tuple[str, str, int, bool]:
        return (self._prompt, self._value, self._cursor, self.result is not None)

    def render(self, preferred_size: Size | None) -> Render:
        return _input_renderer.render(self._state(), preferred_size)

    def renderer(self) -> Renderer[Any]:
        return with_state(_input_renderer, self._state())

    def __repr__(self) -> str:
        return f"Input({self._prompt!r})"
