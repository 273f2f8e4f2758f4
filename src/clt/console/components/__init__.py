"""Console components."""

from clt.console.components.input import Input
from clt.console.components.loader import Loader
from clt.console.components.task import TaskComponent
from clt.console.components.text import Text

__all__ = [
    "Input",
    "Loader",
    "TaskComponent",
    "Text",
]
