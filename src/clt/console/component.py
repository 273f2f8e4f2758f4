"""Console components: the stateful nodes driven by the render loop.

Provides the ``Component`` protocol, a ``Result`` value for a component's
outcome, ``BaseComponent`` for leaf components, ``ContainerComponent`` for
components that acquire children at runtime, and ``ComponentTree``, the
index-addressed arena recording which container owns which child.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Generic, Iterator, Protocol, TypeVar

from clt.console.events import ControlEvent, Tick
from clt.console.render import Render, Size
from clt.console.renderer import Renderer, render_now

__all__ = [
    "Result",
    "Component",
    "BaseComponent",
    "ContainerComponent",
    "ComponentTree",
    "ComponentRenderer",
    "is_finished",
    "is_unfinished",
]

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a component: a value or the exception it failed with."""

    value: T | None = None
    error: BaseException | None = None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> Result[T]:
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    def get(self) -> T:
        """Return the value, or raise the stored exception."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class Component(Protocol):
    """A component the render loop can drive.

    ``requires_tty`` is optional -- checked at the call-site via
    ``getattr``.  Components that cannot finish without user input set it
    so that non-interactive runs fail fast.
    """

    @property
    def result(self) -> Result[Any] | None:
        """``None`` while the component is still running."""
        ...

    @property
    def can_be_collapsed(self) -> bool:
        """Whether a finished component may be hidden by its container."""
        ...

    def handle(self, event: ControlEvent) -> None:
        """Consume one control event."""
        ...

    def renderer(self) -> Renderer[Any]:
        """Return a renderer with the component's current state baked in."""
        ...


def is_finished(component: Component) -> bool:
    return component.result is not None


def is_unfinished(component: Component) -> bool:
    return component.result is None


# ---------------------------------------------------------------------------
# Leaf base
# ---------------------------------------------------------------------------


class BaseComponent(Generic[T]):
    """Convenience base for leaf components.

    Subclasses override :meth:`handle` and :meth:`render`, and call
    :meth:`finish` or :meth:`fail` once they are done.
    """

    requires_tty: bool = False

    def __init__(self) -> None:
        self._result: Result[T] | None = None

    @property
    def result(self) -> Result[T] | None:
        return self._result

    @property
    def can_be_collapsed(self) -> bool:
        return False

    def finish(self, value: T) -> None:
        if self._result is None:
            self._result = Result.success(value)

    def fail(self, error: BaseException) -> None:
        if self._result is None:
            self._result = Result.failure(error)

    def track(self, future: asyncio.Future[T]) -> None:
        """Finish with the outcome of *future* once it completes."""
        future.add_done_callback(self._complete_from)

    def _complete_from(self, future: asyncio.Future[T]) -> None:
        if future.cancelled():
            self.fail(asyncio.CancelledError())
            return
        error = future.exception()
        if error is not None:
            self.fail(error)
        else:
            self.finish(future.result())

    def handle(self, event: ControlEvent) -> None:
        pass

    def render(self, preferred_size: Size | None) -> Render:
        return Render.EMPTY

    def renderer(self) -> Renderer[Any]:
        return ComponentRenderer(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# ---------------------------------------------------------------------------
# Arena
# ---------------------------------------------------------------------------


@dataclass
class _Node:
    component: Any
    parent: int | None
    children: list[int] = field(default_factory=list)


class ComponentTree:
    """Index-addressed arena of components.

    Ownership is expressed by the ``children`` index lists.  The ``parent``
    index is a lookup relation used for diagnostics only; entries are never
    removed, so indices stay valid for the lifetime of the tree.
    """

    def __init__(self) -> None:
        self._nodes: list[_Node] = []

    def __len__(self) -> int:
        return len(self._nodes)

    def add(self, component: Any, parent: int | None = None) -> int:
        if parent is not None and not 0 <= parent < len(self._nodes):
            raise IndexError(f"No component at index {parent}")
        index = len(self._nodes)
        self._nodes.append(_Node(component, parent))
        if parent is not None:
            self._nodes[parent].children.append(index)
        return index

    def component(self, index: int) -> Any:
        return self._nodes[index].component

    def parent(self, index: int) -> int | None:
        return self._nodes[index].parent

    def children(self, index: int) -> list[int]:
        return list(self._nodes[index].children)

    def ancestors(self, index: int) -> Iterator[int]:
        parent = self._nodes[index].parent
        while parent is not None:
            yield parent
            parent = self._nodes[parent].parent

    def path(self, index: int) -> str:
        """Human readable location of a component, root first."""
        chain = [index, *self.ancestors(index)]
        return " > ".join(repr(self._nodes[i].component) for i in reversed(chain))


# ---------------------------------------------------------------------------
# Container
# ---------------------------------------------------------------------------


class ContainerComponent(BaseComponent[T]):
    """A component that owns a list of child components.

    Children are appended at runtime (typically by nested
    :meth:`clt.console.handler.ConsoleHandler.run` calls) and are never
    removed.  The container renders its own header followed by every child
    that is not collapsed.
    """

    def __init__(self) -> None:
        super().__init__()
        self.tree = ComponentTree()
        self.index = self.tree.add(self)

    # -- children -----------------------------------------------------------

    @property
    def children(self) -> list[Any]:
        return [self.tree.component(i) for i in self.tree.children(self.index)]

    @property
    def parent(self) -> Any | None:
        parent = self.tree.parent(self.index)
        return None if parent is None else self.tree.component(parent)

    def add_child(self, child: Any) -> int:
        """Append *child* and return its index in the tree."""
        index = self.tree.add(child, self.index)
        if isinstance(child, ContainerComponent):
            child._adopt(self.tree, index)
        return index

    def _adopt(self, tree: ComponentTree, index: int) -> None:
        """Move this container (and its subtree) into *tree* at *index*."""
        children = self.children
        self.tree = tree
        self.index = index
        for child in children:
            self.add_child(child)

    def describe(self) -> str:
        return self.tree.path(self.index)

    # -- events -------------------------------------------------------------

    def handle(self, event: ControlEvent) -> None:
        """Deliver ticks to every running child, input to the newest one."""
        running = [c for c in self.children if is_unfinished(c)]
        if isinstance(event, Tick):
            for child in running:
                child.handle(event)
        elif running:
            running[-1].handle(event)
        self.handle_own(event)

    def handle_own(self, event: ControlEvent) -> None:
        """Hook for the container's own reaction to *event*."""

    # -- rendering ----------------------------------------------------------

    def render_header(self, preferred_size: Size | None) -> Render:
        return Render.EMPTY

    def render(self, preferred_size: Size | None) -> Render:
        combined = self.render_header(preferred_size)
        for child in self.children:
            if is_finished(child) and child.can_be_collapsed:
                continue
            combined = combined + render_now(child.renderer(), preferred_size)
        return combined


class ComponentRenderer:
    """Renders a component's current state.

    The state argument is ignored: the component itself is the state.
    """

    def __init__(self, component: Any) -> None:
        self._component = component

    def render(self, state: Any = None, preferred_size: Size | None = None) -> Render:
        return self._component.render(preferred_size)
