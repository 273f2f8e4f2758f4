"""Console engine settings.

Defaults can be overridden from the environment:

* ``CLT_CONSOLE_FPS``         -- target frames per second of the tick loop
* ``CLT_CONSOLE_STRICT=1``    -- abort on unknown escape sequences
* ``CLT_CONSOLE_CACHE_SIZE``  -- capacity of the process-wide render cache
* ``CLT_CONSOLE_INTERACTIVE`` -- ``0``/``1`` to force interactivity off/on
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

DEFAULT_TARGET_FPS = 30
DEFAULT_RENDER_CACHE_SIZE = 500


@dataclass
class ConsoleSettings:
    """Tunables of :class:`clt.console.handler.ConsoleHandler`."""

    target_fps: int = DEFAULT_TARGET_FPS
    strict_escape_sequences: bool = False
    render_cache_size: int = DEFAULT_RENDER_CACHE_SIZE
    # None -> decided by whether the terminal is a TTY
    interactive: bool | None = None

    def __post_init__(self) -> None:
        if self.target_fps <= 0:
            raise ValueError(f"target_fps must be positive, got {self.target_fps}")
        if self.render_cache_size <= 0:
            raise ValueError(
                f"render_cache_size must be positive, got {self.render_cache_size}"
            )

    @property
    def tick_interval(self) -> float:
        """Delay between idle ticks, in seconds."""
        return int(1000 / self.target_fps) / 1000

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ConsoleSettings:
        env = os.environ if environ is None else environ

        settings = cls()
        fps = env.get("CLT_CONSOLE_FPS")
        if fps:
            settings.target_fps = int(fps)
        cache_size = env.get("CLT_CONSOLE_CACHE_SIZE")
        if cache_size:
            settings.render_cache_size = int(cache_size)
        settings.strict_escape_sequences = env.get("CLT_CONSOLE_STRICT") == "1"
        interactive = env.get("CLT_CONSOLE_INTERACTIVE")
        if interactive in ("0", "1"):
            settings.interactive = interactive == "1"
        settings.__post_init__()
        return settings
