"""Geometry and frame value types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Iterable

from clt.console.text import StyledText, styled


@dataclass(frozen=True)
class Size:
    """Terminal geometry snapshot."""

    rows: int
    cols: int


@dataclass(frozen=True)
class Position:
    """A cell position.

    ``row`` is zero-based and relative to the first line of a render;
    ``col`` is zero-based.
    """

    row: int = 0
    col: int = 0


@dataclass(frozen=True)
class Render:
    """The immutable output of rendering a component's state.

    Holds the styled lines of the frame and, optionally, where the hardware
    cursor should be placed once the frame has been drawn.
    """

    lines: tuple[StyledText, ...] = field(default_factory=tuple)
    cursor_position: Position | None = None

    EMPTY: ClassVar[Render]

    @classmethod
    def of(
        cls,
        lines: Iterable[StyledText | str],
        cursor_position: Position | None = None,
    ) -> Render:
        return cls(tuple(styled(line) for line in lines), cursor_position)

    @property
    def actual_line_count(self) -> int:
        """Number of physical lines once embedded newlines are split."""
        return sum(len(line.plain.splitlines()) or 1 for line in self.lines)

    def __add__(self, other: Render) -> Render:
        """Stack *other* below this render.

        The cursor of *other* wins (shifted by this render's height); when it
        has none, this render's cursor is kept.
        """
        cursor = self.cursor_position
        if other.cursor_position is not None:
            cursor = Position(
                other.cursor_position.row + len(self.lines),
                other.cursor_position.col,
            )
        return Render(self.lines + other.lines, cursor)


Render.EMPTY = Render()
