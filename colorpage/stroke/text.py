"""
Text stamping onto the overlay.
"""

import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from ..models import RGBA, PixelBuffer, PointLike, as_point
from ..render import canvas_pixels
from .compositor import blend_normal

logger = logging.getLogger(__name__)


def draw_text(
    overlay: Optional[PixelBuffer],
    text: str,
    at: PointLike,
    color: RGBA,
    canvas_size: Tuple[float, float],
    font_scale: float = 1.0,
    thickness: int = 2,
    font: int = cv2.FONT_HERSHEY_SIMPLEX,
) -> Optional[PixelBuffer]:
    """
    Draw anti-aliased text with its top-left corner at `at`.

    Args:
        overlay: Current overlay (None = transparent)
        text: Text to draw (empty text is a no-op)
        at: Top-left corner in pixel space
        color: Text color
        canvas_size: (width, height) of the canvas
        font_scale: cv2 font scale
        thickness: Stroke thickness of the glyphs
        font: cv2 Hershey font face

    Returns:
        New overlay buffer, or the input overlay if the request was rejected
    """
    width, height = int(round(canvas_size[0])), int(round(canvas_size[1]))
    point = as_point(at)
    if not text or width <= 0 or height <= 0 or not point.is_finite():
        return overlay

    (_, text_height), _ = cv2.getTextSize(text, font, font_scale, thickness)
    origin = (int(round(point.x)), int(round(point.y)) + text_height)

    coverage = np.zeros((height, width), dtype=np.uint8)
    cv2.putText(coverage, text, origin, font, font_scale, 255, thickness, cv2.LINE_AA)
    if not coverage.any():
        logger.debug("Text fell entirely outside the canvas")
        return overlay

    dst = canvas_pixels(overlay, width, height).astype(np.float32)
    out = blend_normal(dst, coverage.astype(np.float32) / 255.0, color)
    return PixelBuffer.from_rgba(np.clip(np.rint(out), 0, 255).astype(np.uint8))
