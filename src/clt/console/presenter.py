"""Differential presentation of frames on the terminal.

The presenter keeps a :class:`RenderingState` describing what is currently
on screen and, for each new :class:`Render`, rewrites only the visible
lines whose content changed.  Only the last ``rows - 1`` lines of a frame
are ever shown; older lines scroll off above the visible window and are
not re-emitted.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from clt.console.render import Position, Render, Size

if TYPE_CHECKING:
    from clt.console.terminal import Terminal

logger = logging.getLogger(__name__)


class RenderingState:
    """What the previous diff pass left on the screen.

    Assigning a different ``terminal_size`` forces the next pass to be a
    full render.
    """

    def __init__(
        self,
        terminal_size: Size,
        last_render_cursor_pos: Position | None = None,
        last_render: Render = Render.EMPTY,
        last_rendered_lines: int = 0,
        full_render: bool = True,
    ) -> None:
        self._terminal_size = terminal_size
        self.last_render_cursor_pos = last_render_cursor_pos or Position(0, 0)
        self.last_render = last_render
        self.last_rendered_lines = last_rendered_lines
        self.full_render = full_render

    @property
    def terminal_size(self) -> Size:
        return self._terminal_size

    @terminal_size.setter
    def terminal_size(self, size: Size) -> None:
        if size != self._terminal_size:
            logger.debug(
                "Terminal resized from %sx%s to %sx%s, forcing full render",
                self._terminal_size.cols,
                self._terminal_size.rows,
                size.cols,
                size.rows,
            )
            self.full_render = True
        self._terminal_size = size

    @property
    def hidden_lines(self) -> int:
        """Lines of the last render that scrolled off above the window."""
        return len(self.last_render.lines) - self.last_rendered_lines

    def request_full_render(self) -> None:
        self.full_render = True

    def __repr__(self) -> str:
        return (
            f"RenderingState(size={self._terminal_size}, "
            f"lines={self.last_rendered_lines}, full={self.full_render})"
        )


class DiffPresenter:
    """Writes frames to a :class:`Terminal`, rewriting only changed lines."""

    def __init__(self, terminal: Terminal) -> None:
        self.terminal = terminal

    # ------------------------------------------------------------------
    # Cursor helpers
    # ------------------------------------------------------------------

    def move_to_render_start(self, state: RenderingState) -> None:
        """Put the cursor at column 1 of the first visible line of the last frame.

        After a pass the cursor sits either on the frame's cursor position
        or just below the frame.
        """
        cursor = state.last_render.cursor_position
        if cursor is not None:
            lines_to_move_up = max(cursor.row - state.hidden_lines, 0)
        else:
            lines_to_move_up = state.last_rendered_lines

        if lines_to_move_up > 0:
            self.terminal.move_up(lines_to_move_up)
        self.terminal.move_to_column(1)

    def clean_last_render(self, state: RenderingState) -> None:
        """Erase the last frame from the screen."""
        self.move_to_render_start(state)
        self.terminal.clear_below()

    # ------------------------------------------------------------------
    # Diff pass
    # ------------------------------------------------------------------

    def render(self, render: Render, state: RenderingState) -> int:
        """Present *render* and update *state*.

        Returns the number of lines that were rewritten.
        """
        terminal = self.terminal
        terminal.cursor_off()
        self.move_to_render_start(state)

        size = state.terminal_size
        new_actual_lines = len(render.lines)
        lines_to_render = max(min(size.rows - 1, new_actual_lines), 0)
        first_line_to_render = new_actual_lines - lines_to_render

        old_lines = state.last_render.lines
        old_first_visible = state.hidden_lines
        rewritten = 0

        for row, index in enumerate(range(first_line_to_render, new_actual_lines)):
            line = render.lines[index]
            old_index = old_first_visible + row
            if (
                not state.full_render
                and 0 <= old_index < len(old_lines)
                and old_lines[old_index] == line
            ):
                terminal.move_down(1)
                continue

            terminal.write(line.trimmed(size.cols).stylize())
            terminal.clear_to_end_of_line()
            terminal.writeln()
            rewritten += 1

        terminal.clear_below()

        cursor_row = state.last_render_cursor_pos.row + lines_to_render - state.last_rendered_lines
        state.last_render_cursor_pos = Position(
            min(size.rows, cursor_row), state.last_render_cursor_pos.col
        )
        state.last_render = render
        state.last_rendered_lines = lines_to_render
        state.full_render = False

        position = render.cursor_position
        if position is not None:
            lines_up = min(new_actual_lines - position.row, lines_to_render)
            if lines_up > 0:
                terminal.move_up(lines_up)
            terminal.move_to_column(position.col + 1)
            terminal.cursor_on()

        return rewritten

    # ------------------------------------------------------------------
    # Plain output
    # ------------------------------------------------------------------

    def render_non_interactive(self, render: Render, interactive: bool) -> None:
        """Emit every line sequentially, without diffing or cursor movement.

        Styles are materialized only when writing to an interactive
        terminal.
        """
        for line in render.lines:
            if interactive:
                self.terminal.writeln(line.stylize())
            else:
                self.terminal.writeln(line.plain)
        if interactive:
            self.terminal.cursor_on()
