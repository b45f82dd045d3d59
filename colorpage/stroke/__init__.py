"""
Stroke Module

Brush, eraser, watercolor, rainbow and glow compositing plus text stamping.
"""

from .compositor import StrokeCompositor, stroke_coverage, clip_segment, blend_normal, blend_erase, blend_copy
from .rainbow import rainbow_color, advance_rainbow_phase, RAINBOW_CYCLE_LENGTH
from .text import draw_text

__all__ = [
    "StrokeCompositor",
    "stroke_coverage",
    "clip_segment",
    "blend_normal",
    "blend_erase",
    "blend_copy",
    "rainbow_color",
    "advance_rainbow_phase",
    "RAINBOW_CYCLE_LENGTH",
    "draw_text",
]
