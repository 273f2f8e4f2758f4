"""Text component - displays static styled lines and finishes immediately."""

from __future__ import annotations

from typing import Any, Iterable

from clt.console.component import BaseComponent
from clt.console.render import Render, Size
from clt.console.renderer import FunctionRenderer, Renderer, with_state
from clt.console.text import StyledText, styled


def _draw_text(lines: tuple[StyledText, ...], preferred_size: Size | None) -> Render:
    return Render(lines)


_text_renderer = FunctionRenderer(_draw_text).with_cache()


class Text(BaseComponent[None]):
    """Text component - displays static styled lines and finishes immediately."""

    def __init__(self, *lines: StyledText | str) -> None:
        super().__init__()
        self._lines: tuple[StyledText, ...] = tuple(styled(line) for line in lines)
        self.finish(None)

    @classmethod
    def from_lines(cls, lines: Iterable[StyledText | str]) -> Text:
        return cls(*lines)

    @property
    def lines(self) -> tuple[StyledText, ...]:
        return self._lines

    def render(self, preferred_size: Size | None) -> Render:
        return _text_renderer.render(self._lines, preferred_size)

    def renderer(self) -> Renderer[Any]:
        return with_state(_text_renderer, self._lines)

    def __repr__(self) -> str:
        first = self._lines[0].plain if self._lines else ""
        return f"Text({first!r})"
