"""The interactive render loop.

``ConsoleHandler.run`` drives a root component through a fixed-cadence tick
loop: decode one event, hand it to the component, render, present the diff,
and sleep one tick interval after idle ticks, until the component reports a
result.  It then erases the interactive frame and prints one final plain
render so the terminal keeps a readable transcript.

Runs started while a container is active (see
:func:`clt.console.context.container_scope`) do not touch the terminal:
the component is attached to the container and polled on the same cadence,
so only the outermost run ever writes to the terminal.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from clt.console.component import Component, is_unfinished
from clt.console.config import ConsoleSettings
from clt.console.context import active_container
from clt.console.decoder import EventDecoder
from clt.console.errors import ComponentFinishedWithoutResultError, NotAtTTYError
from clt.console.events import Tick
from clt.console.guard import ExclusivityGuard, caller_site, interactive_guard
from clt.console.presenter import DiffPresenter, RenderingState
from clt.console.render import Position
from clt.console.renderer import render_now
from clt.console.terminal import ProcessTerminal, Terminal

logger = logging.getLogger(__name__)


class ConsoleHandler:
    """Owns the terminal for the duration of an interactive run."""

    def __init__(
        self,
        terminal: Terminal | None = None,
        settings: ConsoleSettings | None = None,
        guard: ExclusivityGuard | None = None,
    ) -> None:
        self.terminal: Terminal = terminal if terminal is not None else ProcessTerminal()
        self.settings = settings if settings is not None else ConsoleSettings()
        self.guard = guard if guard is not None else interactive_guard
        self.presenter = DiffPresenter(self.terminal)
        self.decoder = EventDecoder(
            self.terminal, strict=self.settings.strict_escape_sequences
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def tick_interval(self) -> float:
        return self.settings.tick_interval

    @property
    def is_at_tty(self) -> bool:
        return self.terminal.is_atty

    @property
    def is_interactive(self) -> bool:
        if self.settings.interactive is not None:
            return self.settings.interactive and self.is_at_tty
        return self.is_at_tty

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self, component: Component, call_site: str | None = None) -> Any:
        """Drive *component* until it produces a result and return its value.

        Raises whatever the component failed with, or a
        :class:`clt.console.errors.ConsoleError` when the run itself fails.
        """
        container = active_container()
        if container is not None:
            return await self._run_as_child(container, component)

        with self.guard.session(call_site or caller_site()):
            logger.debug("Interactive session started for %r", component)
            try:
                return await self._run_session(component)
            finally:
                logger.debug("Interactive session finished for %r", component)

    async def _run_as_child(self, container: Any, component: Component) -> Any:
        if getattr(component, "requires_tty", False) and not self.is_interactive:
            raise NotAtTTYError(component)
        index = container.add_child(component)
        logger.debug("Attached %s", container.tree.path(index))
        await self._wait_until_finished(component)
        return self._result_of(component)

    async def _wait_until_finished(self, component: Component) -> None:
        while is_unfinished(component):
            await asyncio.sleep(self.tick_interval)

    async def _run_session(self, component: Component) -> Any:
        terminal = self.terminal
        interactive = self.is_interactive

        state = RenderingState(
            terminal_size=terminal.size(),
            last_render_cursor_pos=(
                terminal.read_cursor_position() if interactive else Position(0, 0)
            ),
        )

        if interactive:
            terminal.enable_non_blocking_mode()
            try:
                await self._tick_loop(component, state)
            except asyncio.CancelledError:
                logger.debug("Interactive session cancelled, finalizing %r", component)
                self._finalize(component, state, interactive)
                raise
            finally:
                terminal.disable_non_blocking_mode()
                terminal.cursor_on()
        else:
            if is_unfinished(component):
                if getattr(component, "requires_tty", False):
                    raise NotAtTTYError(component)
                try:
                    await self._wait_until_finished(component)
                except asyncio.CancelledError:
                    self._finalize(component, state, interactive)
                    raise

        self._finalize(component, state, interactive)
        return self._result_of(component)

    async def _tick_loop(self, component: Component, state: RenderingState) -> None:
        while True:
            event = self.decoder.next_event(state)
            component.handle(event)

            state.terminal_size = self.terminal.size()
            frame = render_now(component.renderer(), state.terminal_size)
            self.presenter.render(frame, state)

            if not is_unfinished(component):
                break
            if isinstance(event, Tick):
                await asyncio.sleep(self.tick_interval)

        self.presenter.clean_last_render(state)

    def _finalize(self, component: Component, state: RenderingState, interactive: bool) -> None:
        frame = render_now(component.renderer(), state.terminal_size)
        self.presenter.render_non_interactive(frame, interactive)

    def _result_of(self, component: Component) -> Any:
        result = component.result
        if result is None:
            logger.error("%r finished without a result", component)
            raise ComponentFinishedWithoutResultError(component)
        return result.get()
