"""Loader component - spinner that runs until an awaitable completes."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, TypeVar

from clt.console.component import BaseComponent
from clt.console.events import ControlEvent, Tick
from clt.console.render import Render, Size
from clt.console.renderer import FunctionRenderer, Renderer, with_state
from clt.console.text import StyledText

T = TypeVar("T")

SPINNER_FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")

# Ticks per spinner frame: at 30 fps the spinner advances every ~100ms
_TICKS_PER_FRAME = 3


def status_prefix(frame: int, finished: bool, failed: bool) -> StyledText:
    """Spinner frame while running, check mark or cross once done."""
    if failed:
        return StyledText.of("✗", foreground="red", bold=True)
    if finished:
        return StyledText.of("✓", foreground="green", bold=True)
    return StyledText.of(SPINNER_FRAMES[frame % len(SPINNER_FRAMES)], foreground="cyan")


def _draw_loader(state: tuple[str, int, bool, bool], preferred_size: Size | None) -> Render:
    message, frame, finished, failed = state
    prefix = status_prefix(frame, finished, failed)
    text = StyledText.of(message, dim=not (finished or failed))
    return Render((prefix + " " + text,))


_loader_renderer = FunctionRenderer(_draw_loader).with_cache()


class Loader(BaseComponent[T]):
    """Shows a spinner next to *message* until *work* completes.

    *work* is scheduled on the running event loop as soon as the loader is
    created, so it progresses whether or not the loader is being rendered.
    The loader's result is the result (or exception) of *work*.
    """

    def __init__(
        self,
        message: str,
        work: Awaitable[T],
        collapse_when_done: bool = False,
    ) -> None:
        super().__init__()
        self._message = message
        self._ticks = 0
        self._collapse_when_done = collapse_when_done
        self._task: asyncio.Future[T] = asyncio.ensure_future(work)
        self.track(self._task)

    @property
    def message(self) -> str:
        return self._message

    def set_message(self, message: str) -> None:
        self._message = message

    @property
    def can_be_collapsed(self) -> bool:
        return self._collapse_when_done

    def cancel(self) -> None:
        self._task.cancel()

    def handle(self, event: ControlEvent) -> None:
        if isinstance(event, Tick):
            self._ticks += 1

    def _state(self) -> tuple[str, int, bool, bool]:
        result = self.result
        finished = result is not None
        failed = finished and not result.is_success  # type: ignore[union-attr]
        return (self._message, self._ticks // _TICKS_PER_FRAME, finished, failed)

    def render(self, preferred_size: Size | None) -> Render:
        return _loader_renderer.render(self._state(), preferred_size)

    def renderer(self) -> Renderer[Any]:
        return with_state(_loader_renderer, self._state())

    def __repr__(self) -> str:
        return f"Loader({self._message!r})"
