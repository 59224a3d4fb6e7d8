"""svgraster — an SVG-to-raster rendering engine on cairo."""

from svgraster.engine.config import RenderOptions
from svgraster.engine.painter import Canvas
from svgraster.engine.scheduler import RenderScheduler, render
from svgraster.svg.parser import Document, SvgLoadError, load_document

__version__ = "0.1.0"

__all__ = [
    "Canvas",
    "Document",
    "RenderOptions",
    "RenderScheduler",
    "SvgLoadError",
    "load_document",
    "render",
]
