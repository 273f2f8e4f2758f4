"""Styled text lines.

A :class:`StyledText` is an immutable run of :class:`Fragment` values, each
carrying plain text plus a :class:`Style`.  The engine never parses markup:
components build styled text directly and the presenter materializes it
into SGR escape codes only when writing to a TTY.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator, Union

from clt.console.utils import take_columns, visible_width

# ---------------------------------------------------------------------------
# Colours
# ---------------------------------------------------------------------------

_COLOR_CODES: dict[str, int] = {
    "black": 0,
    "red": 1,
    "green": 2,
    "yellow": 3,
    "blue": 4,
    "magenta": 5,
    "cyan": 6,
    "white": 7,
}

# str  ->  named colour, optionally prefixed with "bright_"
# int  ->  index into the 256-colour palette
Color = Union[str, int]

_RESET = "\x1b[0m"


def _color_params(color: Color, background: bool) -> str:
    if isinstance(color, int):
        if not 0 <= color <= 255:
            raise ValueError(f"Palette colour out of range: {color}")
        return f"{48 if background else 38};5;{color}"

    name = color
    bright = name.startswith("bright_")
    if bright:
        name = name[len("bright_"):]
    try:
        index = _COLOR_CODES[name]
    except KeyError:
        raise ValueError(f"Unknown colour name: {color!r}") from None

    base = 40 if background else 30
    if bright:
        base += 60
    return str(base + index)


# ---------------------------------------------------------------------------
# Style / Fragment
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Style:
    """Visual attributes of a text fragment."""

    foreground: Color | None = None
    background: Color | None = None
    bold: bool = False
    dim: bool = False
    italic: bool = False
    underline: bool = False
    inverse: bool = False

    @property
    def is_plain(self) -> bool:
        return self == _PLAIN

    def sgr(self) -> str:
        """Return the SGR escape sequence selecting this style."""
        params: list[str] = []
        if self.bold:
            params.append("1")
        if self.dim:
            params.append("2")
        if self.italic:
            params.append("3")
        if self.underline:
            params.append("4")
        if self.inverse:
            params.append("7")
        if self.foreground is not None:
            params.append(_color_params(self.foreground, background=False))
        if self.background is not None:
            params.append(_color_params(self.background, background=True))
        if not params:
            return ""
        return f"\x1b[{';'.join(params)}m"


_PLAIN = Style()


@dataclass(frozen=True)
class Fragment:
    """A run of text sharing one :class:`Style`."""

    text: str
    style: Style = _PLAIN

    def stylize(self) -> str:
        sgr = self.style.sgr()
        if not sgr or not self.text:
            return self.text
        return f"{sgr}{self.text}{_RESET}"


# ---------------------------------------------------------------------------
# StyledText
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StyledText:
    """One line of styled text."""

    fragments: tuple[Fragment, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, text: str, style: Style | None = None, **attributes: object) -> StyledText:
        """Build a single-fragment line.

        Style attributes may be passed either as a :class:`Style` or as
        keyword arguments (``StyledText.of("done", foreground="green")``).
        """
        if style is None:
            style = Style(**attributes)  # type: ignore[arg-type]
        elif attributes:
            style = replace(style, **attributes)  # type: ignore[arg-type]
        return cls((Fragment(text, style),))

    @classmethod
    def join(cls, parts: Iterable[StyledText | Fragment | str]) -> StyledText:
        """Concatenate lines, fragments and plain strings into one line."""
        fragments: list[Fragment] = []
        for part in parts:
            if isinstance(part, StyledText):
                fragments.extend(part.fragments)
            elif isinstance(part, Fragment):
                fragments.append(part)
            else:
                fragments.append(Fragment(part))
        return cls(tuple(fragments))

    def __iter__(self) -> Iterator[Fragment]:
        return iter(self.fragments)

    def __add__(self, other: StyledText | Fragment | str) -> StyledText:
        return StyledText.join((self, other))

    def __str__(self) -> str:
        return self.plain

    @property
    def plain(self) -> str:
        """The text without any styling."""
        return "".join(f.text for f in self.fragments)

    @property
    def width(self) -> int:
        return visible_width(self.plain)

    def stylize(self) -> str:
        """Materialize the line into a string with SGR escape codes."""
        return "".join(f.stylize() for f in self.fragments)

    def trimmed(self, cols: int) -> StyledText:
        """Return the line cut to at most *cols* visible columns."""
        if cols <= 0:
            return StyledText()
        if self.width <= cols:
            return self

        fragments: list[Fragment] = []
        remaining = cols
        for fragment in self.fragments:
            if remaining <= 0:
                break
            fragment_width = visible_width(fragment.text)
            if fragment_width <= remaining:
                fragments.append(fragment)
                remaining -= fragment_width
                continue
            cut = take_columns(fragment.text, remaining)
            if cut:
                fragments.append(Fragment(cut, fragment.style))
            break
        return StyledText(tuple(fragments))


def styled(text: StyledText | str) -> StyledText:
    """Coerce a plain string into a single unstyled :class:`StyledText`."""
    if isinstance(text, StyledText):
        return text
    return StyledText((Fragment(text),))
