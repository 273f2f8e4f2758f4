"""Control events delivered to components once per loop iteration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from clt.console.keys import KeyCode, MetaCode


@dataclass(frozen=True)
class Tick:
    """No input was pending: an idle iteration of the render loop."""


@dataclass(frozen=True)
class InputChar:
    """A plain character typed by the user."""

    char: str


@dataclass(frozen=True)
class InputEscapeSequence:
    """A special key, possibly combined with modifiers."""

    code: KeyCode
    meta: tuple[MetaCode, ...] = ()

    def has(self, meta: MetaCode) -> bool:
        return meta in self.meta


ControlEvent = Union[Tick, InputChar, InputEscapeSequence]

TICK = Tick()
