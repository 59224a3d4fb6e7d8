"""svgraster render engine: session state, painter, scheduler."""

from svgraster.engine.registry import element, get_registry
from svgraster.engine.context import RenderSession
from svgraster.engine.painter import Canvas, Painter

__all__ = [
    "element",
    "get_registry",
    "RenderSession",
    "Canvas",
    "Painter",
]
