"""Renderers turn a state value into a :class:`Render`.

A renderer is anything with ``render(state, preferred_size) -> Render``.
Components expose a renderer with their state already baked in, so the
render loop only ever calls ``renderer.render(None, size)``.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Protocol, TypeVar

from clt.console import cache as _cache
from clt.console.cache import LRUCache, RenderCacheKey
from clt.console.render import Render, Size

S = TypeVar("S")
S_contra = TypeVar("S_contra", contravariant=True)


class Renderer(Protocol[S_contra]):
    """Produces a frame from a state value."""

    def render(self, state: S_contra, preferred_size: Size | None) -> Render: ...


class FunctionRenderer(Generic[S]):
    """Adapts a plain ``(state, preferred_size) -> Render`` function."""

    def __init__(self, fn: Callable[[S, Size | None], Render]) -> None:
        self._fn = fn

    def render(self, state: S, preferred_size: Size | None) -> Render:
        return self._fn(state, preferred_size)

    def with_cache(self, cache: LRUCache[RenderCacheKey, Render] | None = None) -> CachedRenderer[S]:
        return with_cache(self, cache)

    def with_state(self, state: S) -> BakedStateRenderer[S]:
        return with_state(self, state)


class CachedRenderer(Generic[S]):
    """Memoizes an upstream renderer by ``(state, preferred_size)``.

    The state must be hashable.  Without an explicit cache the process-wide
    render cache is used.
    """

    def __init__(
        self,
        upstream: Renderer[S],
        cache: LRUCache[RenderCacheKey, Render] | None = None,
    ) -> None:
        self.upstream = upstream
        self._cache = cache

    def render(self, state: S, preferred_size: Size | None) -> Render:
        cache = self._cache if self._cache is not None else _cache.get_render_cache()
        key = RenderCacheKey(state, preferred_size)  # type: ignore[arg-type]
        return cache.refer(key, lambda: self.upstream.render(state, preferred_size))


class BakedStateRenderer(Generic[S]):
    """Binds a state to an upstream renderer; the state argument is ignored."""

    def __init__(self, upstream: Renderer[S], baked_state: S) -> None:
        self.upstream = upstream
        self.baked_state = baked_state

    def render(self, state: Any = None, preferred_size: Size | None = None) -> Render:
        return self.upstream.render(self.baked_state, preferred_size)


def with_cache(
    renderer: Renderer[S],
    cache: LRUCache[RenderCacheKey, Render] | None = None,
) -> CachedRenderer[S]:
    return CachedRenderer(renderer, cache)


def with_state(renderer: Renderer[S], state: S) -> BakedStateRenderer[S]:
    return BakedStateRenderer(renderer, state)


def render_now(renderer: Renderer[Any], preferred_size: Size | None) -> Render:
    """Render a state-baked renderer."""
    return renderer.render(None, preferred_size)
