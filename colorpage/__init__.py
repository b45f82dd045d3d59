"""
Coloring Page Package

Turns photos into coloring pages (line-art display image plus boundary
mask) and paints onto a transparent overlay with region-locked fill,
brush, eraser, watercolor and rainbow tools, with bounded undo/redo.
"""

__version__ = "0.1.0"

from .models import RGBA, Point, PixelBuffer, BoundaryMask, BlendMode, Tool
from .config.engine_config import EngineConfig
from .coloring_page import ColoringPageGenerator, ColoringPageResult
from .edge_mask.builder import EdgeMaskBuilder
from .fill.engine import FloodFillEngine, KidsFloodFillEngine
from .stroke.compositor import StrokeCompositor
from .history import OverlayHistory
from .session import PaintSession, SessionMode
from .processing.worker import ColoringPageWorker

__all__ = [
    "RGBA",
    "Point",
    "PixelBuffer",
    "BoundaryMask",
    "BlendMode",
    "Tool",
    "EngineConfig",
    "ColoringPageGenerator",
    "ColoringPageResult",
    "EdgeMaskBuilder",
    "FloodFillEngine",
    "KidsFloodFillEngine",
    "StrokeCompositor",
    "OverlayHistory",
    "PaintSession",
    "SessionMode",
    "ColoringPageWorker",
]
