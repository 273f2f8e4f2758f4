"""Task component - a titled container whose children are nested runs."""

from __future__ import annotations

from typing import TypeVar

from clt.console.component import ContainerComponent, is_finished
from clt.console.components.loader import status_prefix
from clt.console.events import ControlEvent, Tick
from clt.console.render import Position, Render, Size
from clt.console.renderer import render_now
from clt.console.text import StyledText

T = TypeVar("T")

_INDENT = "  "
_TICKS_PER_FRAME = 3


def _indent(render: Render) -> Render:
    cursor = render.cursor_position
    if cursor is not None:
        cursor = Position(cursor.row, cursor.col + len(_INDENT))
    return Render(tuple(StyledText.join((_INDENT, line)) for line in render.lines), cursor)


class TaskComponent(ContainerComponent[T]):
    """Shows *title* with a spinner and, indented below, every child.

    The task finishes when the future passed to :meth:`track` completes.
    Finished children that can be collapsed are hidden; once the task has
    succeeded, all children collapse unless *keep_children* is set.
    """

    def __init__(self, title: str, keep_children: bool = False) -> None:
        super().__init__()
        self._title = title
        self._ticks = 0
        self._keep_children = keep_children

    @property
    def title(self) -> str:
        return self._title

    def handle_own(self, event: ControlEvent) -> None:
        if isinstance(event, Tick):
            self._ticks += 1

    def render_header(self, preferred_size: Size | None) -> Render:
        result = self.result
        finished = result is not None
        failed = finished and not result.is_success  # type: ignore[union-attr]
        prefix = status_prefix(self._ticks // _TICKS_PER_FRAME, finished, failed)
        return Render((prefix + " " + StyledText.of(self._title, bold=True),))

    def render(self, preferred_size: Size | None) -> Render:
        combined = self.render_header(preferred_size)
        result = self.result
        if result is not None and result.is_success and not self._keep_children:
            return combined
        for child in self.children:
            if is_finished(child) and child.can_be_collapsed:
                continue
            combined = combined + _indent(render_now(child.renderer(), preferred_size))
        return combined

    def __repr__(self) -> str:
        return f"TaskComponent({self._title!r})"
