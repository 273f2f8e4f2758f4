"""Tests for the render loop -- ConsoleHandler.run.

Every handler gets its own ExclusivityGuard and a VirtualTerminal, and runs
at a high frame rate so the tick loop spins quickly.
"""

from __future__ import annotations

import asyncio

import pytest

from clt.console.component import BaseComponent
from clt.console.components import Input, Text
from clt.console.config import ConsoleSettings
from clt.console.errors import (
    AlreadyRunningError,
    EventStreamFinishedError,
    InputCancelledError,
    NotAtTTYError,
    UnknownEscapeSequenceError,
)
from clt.console.events import ControlEvent, InputChar, Tick
from clt.console.guard import ExclusivityGuard
from clt.console.handler import ConsoleHandler
from clt.console.render import Render, Size

from .virtual_terminal import VirtualTerminal

FAST = ConsoleSettings(target_fps=1000)


def make_handler(
    terminal: VirtualTerminal | None = None,
    settings: ConsoleSettings = FAST,
    guard: ExclusivityGuard | None = None,
) -> tuple[ConsoleHandler, VirtualTerminal]:
    terminal = terminal if terminal is not None else VirtualTerminal()
    handler = ConsoleHandler(terminal, settings, guard if guard is not None else ExclusivityGuard())
    return handler, terminal


# ---------------------------------------------------------------------------
# Minimal test components
# ---------------------------------------------------------------------------


class TickCounter(BaseComponent[int]):
    """Finishes with the tick count after *limit* ticks."""

    def __init__(self, limit: int) -> None:
        super().__init__()
        self.limit = limit
        self.ticks = 0
        self.events: list[ControlEvent] = []

    def handle(self, event: ControlEvent) -> None:
        self.events.append(event)
        if isinstance(event, Tick):
            self.ticks += 1
            if self.ticks >= self.limit:
                self.finish(self.ticks)

    def render(self, preferred_size: Size | None) -> Render:
        return Render.of([f"ticks: {self.ticks}"])


class Forever(BaseComponent[None]):
    """Never finishes on its own."""

    def render(self, preferred_size: Size | None) -> Render:
        return Render.of(["working"])


# ---------------------------------------------------------------------------
# Interactivity
# ---------------------------------------------------------------------------


class TestInteractivity:
    def test_tty_is_interactive(self) -> None:
        handler, _ = make_handler(VirtualTerminal(is_atty=True))
        assert handler.is_interactive is True

    def test_non_tty_is_not_interactive(self) -> None:
        handler, _ = make_handler(VirtualTerminal(is_atty=False))
        assert handler.is_interactive is False

    def test_settings_can_disable_interactivity(self) -> None:
        settings = ConsoleSettings(target_fps=1000, interactive=False)
        handler, _ = make_handler(VirtualTerminal(is_atty=True), settings)
        assert handler.is_interactive is False

    def test_settings_cannot_force_interactivity_without_tty(self) -> None:
        settings = ConsoleSettings(target_fps=1000, interactive=True)
        handler, _ = make_handler(VirtualTerminal(is_atty=False), settings)
        assert handler.is_interactive is False

    def test_tick_interval_follows_settings(self) -> None:
        handler, _ = make_handler(settings=ConsoleSettings(target_fps=30))
        assert handler.tick_interval == pytest.approx(0.033)


# ---------------------------------------------------------------------------
# Interactive runs
# ---------------------------------------------------------------------------


class TestInteractiveRun:
    @pytest.mark.asyncio
    async def test_finished_component_renders_once_and_returns(self) -> None:
        handler, terminal = make_handler()
        assert await handler.run(Text("hello")) is None
        assert terminal.enable_count == 1
        assert terminal.disable_count == 1
        assert terminal.ops[-2:] == [("writeln", "hello"), ("cursor_on",)]

    @pytest.mark.asyncio
    async def test_ticks_until_finished(self) -> None:
        handler, terminal = make_handler()
        assert await handler.run(TickCounter(3)) == 3
        assert ("writeln", "ticks: 3") in terminal.ops
        assert terminal.non_blocking is False

    @pytest.mark.asyncio
    async def test_interactive_frame_is_erased_before_final_render(self) -> None:
        handler, terminal = make_handler()
        await handler.run(TickCounter(1))
        final = terminal.ops.index(("writeln", "ticks: 1"))
        assert terminal.ops[final - 2 : final] == [("clear_below",), ("cursor_on",)]

    @pytest.mark.asyncio
    async def test_input_events_are_delivered_in_order(self) -> None:
        handler, terminal = make_handler()
        terminal.feed("hi\r")
        assert await handler.run(Input("Name")) == "hi"

    @pytest.mark.asyncio
    async def test_escape_sequences_drive_input(self) -> None:
        handler, terminal = make_handler()
        terminal.feed("ab\x1b[DX\r")
        assert await handler.run(Input("Name")) == "aXb"

    @pytest.mark.asyncio
    async def test_component_failure_propagates(self) -> None:
        handler, terminal = make_handler()
        terminal.feed("\x1b")
        with pytest.raises(InputCancelledError):
            await handler.run(Input("Name"))
        assert terminal.disable_count == 1

    @pytest.mark.asyncio
    async def test_closed_input_stream_fails_and_restores_mode(self) -> None:
        handler, terminal = make_handler()
        terminal.close_input()
        with pytest.raises(EventStreamFinishedError):
            await handler.run(Input("Name"))
        assert terminal.non_blocking is False
        assert terminal.cursor_visible is True
        assert handler.guard.is_active is False

    @pytest.mark.asyncio
    async def test_strict_mode_aborts_on_unknown_sequence(self) -> None:
        settings = ConsoleSettings(target_fps=1000, strict_escape_sequences=True)
        handler, terminal = make_handler(settings=settings)
        terminal.feed("\x1b[99~")
        with pytest.raises(UnknownEscapeSequenceError):
            await handler.run(Input("Name"))
        assert terminal.disable_count == 1

    @pytest.mark.asyncio
    async def test_unknown_sequence_is_skipped_by_default(self) -> None:
        handler, terminal = make_handler()
        terminal.feed("\x1b[99~ok\r")
        assert await handler.run(Input("Name")) == "ok"

    @pytest.mark.asyncio
    async def test_resize_forces_full_render(self) -> None:
        handler, terminal = make_handler()
        component = Forever()
        task = asyncio.ensure_future(handler.run(component))
        await asyncio.sleep(0.02)
        terminal.clear_ops()
        await asyncio.sleep(0.02)
        assert terminal.written() == []

        terminal.resize(rows=10)
        await asyncio.sleep(0.02)
        component.finish(None)
        await task
        assert ("write", "working") in terminal.ops


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancel_restores_terminal_and_finalizes_once(self) -> None:
        handler, terminal = make_handler()
        task = asyncio.ensure_future(handler.run(Forever()))
        await asyncio.sleep(0.02)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert terminal.enable_count == 1
        assert terminal.disable_count == 1
        assert terminal.cursor_visible is True
        assert terminal.ops.count(("writeln", "working")) == 1
        assert handler.guard.is_active is False

    @pytest.mark.asyncio
    async def test_cancel_non_interactive_run_finalizes_once(self) -> None:
        handler, terminal = make_handler(VirtualTerminal(is_atty=False))
        task = asyncio.ensure_future(handler.run(Forever()))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert terminal.ops == [("writeln", "working")]


# ---------------------------------------------------------------------------
# Non-interactive runs
# ---------------------------------------------------------------------------


class TestNonInteractiveRun:
    @pytest.mark.asyncio
    async def test_plain_output_without_mode_switch(self) -> None:
        handler, terminal = make_handler(VirtualTerminal(is_atty=False))
        assert await handler.run(Text("hello", "world")) is None
        assert terminal.ops == [("writeln", "hello"), ("writeln", "world")]
        assert terminal.enable_count == 0

    @pytest.mark.asyncio
    async def test_tty_only_component_is_rejected(self) -> None:
        handler, _ = make_handler(VirtualTerminal(is_atty=False))
        with pytest.raises(NotAtTTYError):
            await handler.run(Input("Name"))
        assert handler.guard.is_active is False

    @pytest.mark.asyncio
    async def test_waits_for_async_completion(self) -> None:
        handler, terminal = make_handler(VirtualTerminal(is_atty=False))
        component = Forever()
        asyncio.get_running_loop().call_later(0.01, component.finish, None)
        await handler.run(component)
        assert terminal.ops == [("writeln", "working")]


# ---------------------------------------------------------------------------
# Exclusivity
# ---------------------------------------------------------------------------


class TestExclusiveSessions:
    @pytest.mark.asyncio
    async def test_concurrent_session_is_rejected(self) -> None:
        guard = ExclusivityGuard()
        first, _ = make_handler(guard=guard)
        second, second_terminal = make_handler(guard=guard)

        task = asyncio.ensure_future(first.run(Forever()))
        await asyncio.sleep(0.01)
        try:
            with pytest.raises(AlreadyRunningError) as excinfo:
                await second.run(Text("nope"), call_site="second:1")
            assert excinfo.value.call_site == "second:1"
            assert second_terminal.ops == []
        finally:
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
        assert guard.is_active is False

    @pytest.mark.asyncio
    async def test_sequential_sessions_are_allowed(self) -> None:
        guard = ExclusivityGuard()
        handler, _ = make_handler(guard=guard)
        await handler.run(Text("one"))
        await handler.run(Text("two"))
        assert guard.is_active is False

    @pytest.mark.asyncio
    async def test_session_started_from_inside_a_session_is_rejected(self) -> None:
        handler, _ = make_handler()
        errors: list[BaseException] = []

        class Nested(BaseComponent[None]):
            def __init__(self) -> None:
                super().__init__()
                self._inner: asyncio.Task | None = None

            def handle(self, event: ControlEvent) -> None:
                if self._inner is None:
                    self._inner = asyncio.ensure_future(handler.run(Text("inner")))
                    self._inner.add_done_callback(
                        lambda t: errors.append(t.exception()) or self.finish(None)
                    )

        await handler.run(Nested())
        assert len(errors) == 1
        assert isinstance(errors[0], AlreadyRunningError)


class TestEventDelivery:
    @pytest.mark.asyncio
    async def test_one_event_per_iteration(self) -> None:
        handler, terminal = make_handler()
        terminal.feed("ab")
        component = TickCounter(1)
        await handler.run(component)
        assert component.events == [InputChar("a"), InputChar("b"), Tick()]
