"""clt-console: interactive terminal rendering engine with differential output."""

# Render cache
from clt.console.cache import (
    LRUCache,
    RenderCacheKey,
    configure_render_cache,
    get_render_cache,
)

# Components
from clt.console.component import (
    BaseComponent,
    Component,
    ComponentRenderer,
    ComponentTree,
    ContainerComponent,
    Result,
    is_finished,
    is_unfinished,
)
from clt.console.components import Input, Loader, TaskComponent, Text

# Configuration
from clt.console.config import ConsoleSettings

# Console facade
from clt.console.console import Console

# Context
from clt.console.context import active_container, container_scope

# Input decoding
from clt.console.decoder import EventDecoder

# Errors
from clt.console.errors import (
    AlreadyRunningError,
    ComponentFinishedWithoutResultError,
    ConsoleError,
    EventStreamFinishedError,
    InputCancelledError,
    NotAtTTYError,
    UnknownEscapeSequenceError,
)

# Events
from clt.console.events import (
    TICK,
    ControlEvent,
    InputChar,
    InputEscapeSequence,
    Tick,
)

# Exclusivity
from clt.console.guard import ExclusivityGuard, interactive_guard

# Render loop
from clt.console.handler import ConsoleHandler

# Keys
from clt.console.keys import (
    CursorReport,
    EscapeSequence,
    KeyCode,
    KeySequence,
    MetaCode,
    ScreenReport,
    UnknownSequence,
    parse_escape_sequence,
)

# Presentation
from clt.console.presenter import DiffPresenter, RenderingState

# Frames
from clt.console.render import Position, Render, Size

# Renderers
from clt.console.renderer import (
    BakedStateRenderer,
    CachedRenderer,
    FunctionRenderer,
    Renderer,
    with_cache,
    with_state,
)

# Terminal interface and implementation
from clt.console.terminal import ProcessTerminal, Terminal

# Styled text
from clt.console.text import Fragment, Style, StyledText

__all__ = [
    # Render cache
    "LRUCache",
    "RenderCacheKey",
    "configure_render_cache",
    "get_render_cache",
    # Components
    "BaseComponent",
    "Component",
    "ComponentRenderer",
    "ComponentTree",
    "ContainerComponent",
    "Result",
    "is_finished",
    "is_unfinished",
    "Input",
    "Loader",
    "TaskComponent",
    "Text",
    # Configuration
    "ConsoleSettings",
    # Console facade
    "Console",
    # Context
    "active_container",
    "container_scope",
    # Input decoding
    "EventDecoder",
    # Errors
    "AlreadyRunningError",
    "ComponentFinishedWithoutResultError",
    "ConsoleError",
    "EventStreamFinishedError",
    "InputCancelledError",
    "NotAtTTYError",
    "UnknownEscapeSequenceError",
    # Events
    "TICK",
    "ControlEvent",
    "InputChar",
    "InputEscapeSequence",
    "Tick",
    # Exclusivity
    "ExclusivityGuard",
    "interactive_guard",
    # Render loop
    "ConsoleHandler",
    # Keys
    "CursorReport",
    "EscapeSequence",
    "KeyCode",
    "KeySequence",
    "MetaCode",
    "ScreenReport",
    "UnknownSequence",
    "parse_escape_sequence",
    # Presentation
    "DiffPresenter",
    "RenderingState",
    # Frames
    "Position",
    "Render",
    "Size",
    # Renderers
    "BakedStateRenderer",
    "CachedRenderer",
    "FunctionRenderer",
    "Renderer",
    "with_cache",
    "with_state",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    # Styled text
    "Fragment",
    "Style",
    "StyledText",
]
