"""High-level entry point for running console components."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

from clt.console.cache import configure_render_cache, get_render_cache
from clt.console.component import Component
from clt.console.components import Input, Loader, TaskComponent, Text
from clt.console.config import ConsoleSettings
from clt.console.context import container_scope
from clt.console.guard import caller_site
from clt.console.handler import ConsoleHandler
from clt.console.text import StyledText

T = TypeVar("T")


class Console:
    """Runs components on a :class:`ConsoleHandler`.

    Example::

        console = Console()

        async def build() -> int:
            await console.loader("Compiling", compile_sources())
            return await console.loader("Linking", link())

        exit_code = await console.task("Build", build)
    """

    def __init__(self, handler: ConsoleHandler | None = None) -> None:
        if handler is None:
            settings = ConsoleSettings.from_env()
            if get_render_cache().capacity != settings.render_cache_size:
                configure_render_cache(settings.render_cache_size)
            handler = ConsoleHandler(settings=settings)
        self.handler = handler

    @property
    def is_interactive(self) -> bool:
        return self.handler.is_interactive

    async def run(self, component: Component) -> Any:
        return await self.handler.run(component, call_site=caller_site())

    async def task(self, title: str, work: Callable[[], Awaitable[T]]) -> T:
        """Run *work* under a :class:`TaskComponent` titled *title*.

        Components run from inside *work* attach to the task instead of
        starting their own interactive session.
        """
        container: TaskComponent[T] = TaskComponent(title)

        async def _drive() -> T:
            with container_scope(container):
                return await work()

        runner = asyncio.ensure_future(_drive())
        container.track(runner)
        try:
            return await self.handler.run(container, call_site=caller_site())
        finally:
            if not runner.done():
                runner.cancel()

    async def message(self, *lines: StyledText | str) -> None:
        await self.run(Text(*lines))

    async def loader(self, message: str, work: Awaitable[T], collapse_when_done: bool = False) -> T:
        return await self.run(Loader(message, work, collapse_when_done=collapse_when_done))

    async def input(self, prompt: str, default: str = "") -> str:
        return await self.run(Input(prompt, default))
