"""Escape sequence parsing for terminal keyboard input and reports.

Classifies the bytes following an ESC into a key press (with modifier
flags), a cursor position report, a window size report, or an unknown
sequence.  Also decides whether the bytes read so far form a complete
sequence, so a reader knows when to stop consuming input.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Union

from clt.console.render import Position, Size

ESC = "\x1b"


class KeyCode(enum.Enum):
    """Non-character keys reported through escape sequences."""

    ESCAPE = "escape"
    UP = "up"
    DOWN = "down"
    RIGHT = "right"
    LEFT = "left"
    HOME = "home"
    END = "end"
    INSERT = "insert"
    DELETE = "delete"
    PAGE_UP = "pageUp"
    PAGE_DOWN = "pageDown"
    CLEAR = "clear"
    BACK_TAB = "backTab"
    F1 = "f1"
    F2 = "f2"
    F3 = "f3"
    F4 = "f4"
    F5 = "f5"
    F6 = "f6"
    F7 = "f7"
    F8 = "f8"
    F9 = "f9"
    F10 = "f10"
    F11 = "f11"
    F12 = "f12"


class MetaCode(enum.Enum):
    """Modifier flags, valued by their xterm modifier bit."""

    SHIFT = 1
    ALT = 2
    CTRL = 4
    META = 8


# ---------------------------------------------------------------------------
# Sequence tables
# ---------------------------------------------------------------------------

# Final byte of ``ESC [ ... <final>`` / ``ESC O <final>`` -> key
_LETTER_KEYS: dict[str, KeyCode] = {
    "A": KeyCode.UP,
    "B": KeyCode.DOWN,
    "C": KeyCode.RIGHT,
    "D": KeyCode.LEFT,
    "H": KeyCode.HOME,
    "F": KeyCode.END,
    "E": KeyCode.CLEAR,
    "Z": KeyCode.BACK_TAB,
    "P": KeyCode.F1,
    "Q": KeyCode.F2,
    "R": KeyCode.F3,
    "S": KeyCode.F4,
}

# Numeric parameter of ``ESC [ <n> ~`` -> key
_TILDE_KEYS: dict[int, KeyCode] = {
    1: KeyCode.HOME,
    2: KeyCode.INSERT,
    3: KeyCode.DELETE,
    4: KeyCode.END,
    5: KeyCode.PAGE_UP,
    6: KeyCode.PAGE_DOWN,
    7: KeyCode.HOME,
    8: KeyCode.END,
    11: KeyCode.F1,
    12: KeyCode.F2,
    13: KeyCode.F3,
    14: KeyCode.F4,
    15: KeyCode.F5,
    17: KeyCode.F6,
    18: KeyCode.F7,
    19: KeyCode.F8,
    20: KeyCode.F9,
    21: KeyCode.F10,
    23: KeyCode.F11,
    24: KeyCode.F12,
}

_CSI_RE = re.compile(r"^\x1b\[([0-9;]*)([A-Za-z~])$")
_SS3_RE = re.compile(r"^\x1bO([A-Za-z])$")


# ---------------------------------------------------------------------------
# Parse results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeySequence:
    code: KeyCode
    meta: tuple[MetaCode, ...] = ()


@dataclass(frozen=True)
class CursorReport:
    """Answer to a ``CSI 6 n`` query, converted to zero-based coordinates."""

    position: Position


@dataclass(frozen=True)
class ScreenReport:
    """Answer to a ``CSI 18 t`` query: the text area size in cells."""

    size: Size


@dataclass(frozen=True)
class UnknownSequence:
    raw: str


EscapeSequence = Union[KeySequence, CursorReport, ScreenReport, UnknownSequence]


# ---------------------------------------------------------------------------
# Modifiers
# ---------------------------------------------------------------------------


def decode_modifiers(param: int) -> tuple[MetaCode, ...]:
    """Decode an xterm modifier parameter (``1 + bits``) into flags."""
    bits = max(param - 1, 0)
    return tuple(m for m in MetaCode if bits & m.value)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _int_params(raw: str) -> list[int] | None:
    if not raw:
        return []
    try:
        return [int(p) if p else 0 for p in raw.split(";")]
    except ValueError:
        return None


def parse_escape_sequence(data: str) -> EscapeSequence:  # noqa: C901
    """Classify a complete escape sequence (including the leading ESC)."""
    if data == ESC:
        return KeySequence(KeyCode.ESCAPE)

    match = _SS3_RE.match(data)
    if match is not None:
        key = _LETTER_KEYS.get(match.group(1))
        if key is not None:
            return KeySequence(key)
        return UnknownSequence(data)

    match = _CSI_RE.match(data)
    if match is None:
        return UnknownSequence(data)

    params = _int_params(match.group(1))
    final = match.group(2)
    if params is None:
        return UnknownSequence(data)

    # Cursor position report: ESC [ row ; col R
    if final == "R" and len(params) == 2:
        row, col = params
        return CursorReport(Position(max(row - 1, 0), max(col - 1, 0)))

    # Text area size report: ESC [ 8 ; rows ; cols t
    if final == "t":
        if len(params) == 3 and params[0] == 8:
            return ScreenReport(Size(rows=params[1], cols=params[2]))
        return UnknownSequence(data)

    if final == "~":
        if not params:
            return UnknownSequence(data)
        key = _TILDE_KEYS.get(params[0])
        if key is None:
            return UnknownSequence(data)
        meta = decode_modifiers(params[1]) if len(params) > 1 else ()
        return KeySequence(key, meta)

    key = _LETTER_KEYS.get(final)
    if key is None:
        return UnknownSequence(data)
    if key is KeyCode.BACK_TAB:
        return KeySequence(key, (MetaCode.SHIFT,))
    # ESC [ 1 ; <mod> <letter>
    meta = decode_modifiers(params[1]) if len(params) > 1 else ()
    return KeySequence(key, meta)


# ---------------------------------------------------------------------------
# Completeness
# ---------------------------------------------------------------------------


def is_complete_sequence(data: str) -> bool:
    """Return ``True`` when *data* is a complete escape sequence.

    *data* must start with ESC.  A lone ESC is incomplete: the reader decides
    with a timeout whether it is the escape key.
    """
    if not data.startswith(ESC):
        return True
    if len(data) == 1:
        return False

    after_esc = data[1:]

    # CSI: parameters then a final byte in 0x40..0x7E
    if after_esc.startswith("["):
        if len(after_esc) < 2:
            return False
        return 0x40 <= ord(after_esc[-1]) <= 0x7E

    # SS3: one more byte
    if after_esc.startswith("O"):
        return len(after_esc) >= 2

    # OSC: terminated by BEL or ST
    if after_esc.startswith("]"):
        return data.endswith("\x07") or data.endswith(f"{ESC}\\")

    # Meta key sequences: ESC followed by a single character
    return True
