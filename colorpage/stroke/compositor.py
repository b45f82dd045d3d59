"""
Stroke compositing onto the paint overlay.

Every call draws one round-capped segment into a copy of the prior
overlay and returns the copy. Callers build multi-segment strokes by
threading last_point -> current_point across calls.
"""

import logging
import math
from typing import Optional, Tuple

import cv2
import numpy as np

from ..config.engine_config import StrokeSettings
from ..models import RGBA, BlendMode, PixelBuffer, Point, PointLike, as_point
from ..render import canvas_pixels
from .rainbow import rainbow_color

logger = logging.getLogger(__name__)

# cv2 fixed-point bits for sub-pixel stroke endpoints
_SHIFT = 4
_SCALE = 1 << _SHIFT

# cv2 rejects thicker lines
MAX_THICKNESS = 32767


def _fixed(point: Point) -> Tuple[int, int]:
    return (int(round(point.x * _SCALE)), int(round(point.y * _SCALE)))


def clip_segment(
    start: Point,
    end: Point,
    bounds: Tuple[float, float, float, float],
) -> Optional[Tuple[Point, Point]]:
    """
    Clip a segment to an axis-aligned rectangle (Liang-Barsky).

    Args:
        start: Segment start
        end: Segment end
        bounds: (x_min, y_min, x_max, y_max)

    Returns:
        Clipped (start, end), or None if the segment misses the rectangle
    """
    x_min, y_min, x_max, y_max = bounds
    dx, dy = end.x - start.x, end.y - start.y
    t0, t1 = 0.0, 1.0

    for p, q in (
        (-dx, start.x - x_min),
        (dx, x_max - start.x),
        (-dy, start.y - y_min),
        (dy, y_max - start.y),
    ):
        if p == 0:
            if q < 0:
                return None
            continue
        t = q / p
        if p < 0:
            if t > t1:
                return None
            t0 = max(t0, t)
        else:
            if t < t0:
                return None
            t1 = min(t1, t)

    return (
        Point(start.x + t0 * dx, start.y + t0 * dy),
        Point(start.x + t1 * dx, start.y + t1 * dy),
    )


def stroke_coverage(
    size: Tuple[int, int],
    start: Point,
    end: Point,
    width: float,
    antialias: bool = True,
) -> np.ndarray:
    """
    Coverage of a round-capped segment.

    Args:
        size: Canvas (width, height)
        start: Segment start (pixel centers at integer coordinates)
        end: Segment end
        width: Stroke width in pixels
        antialias: Soft edges when True, hard 0/1 coverage otherwise

    Returns:
        float32 (height, width) array in [0.0, 1.0]
    """
    w, h = size
    canvas = np.zeros((h, w), dtype=np.uint8)
    line_type = cv2.LINE_AA if antialias else cv2.LINE_8

    # Wider than this already covers the whole canvas from any on-canvas point
    width = min(width, float(2 * (w + h)), float(MAX_THICKNESS))
    thickness = max(1, int(round(width)))

    # Caps past this margin cannot reach the canvas
    margin = width + 1.0
    clipped = clip_segment(start, end, (-margin, -margin, w - 1 + margin, h - 1 + margin))
    if clipped is None:
        return canvas.astype(np.float32)

    p0, p1 = _fixed(clipped[0]), _fixed(clipped[1])
    if p0 == p1:
        radius = max(0, int(round(width * 0.5 * _SCALE)))
        cv2.circle(canvas, p0, radius, 255, thickness=-1, lineType=line_type, shift=_SHIFT)
    else:
        cv2.line(canvas, p0, p1, 255, thickness=thickness, lineType=line_type, shift=_SHIFT)

    return canvas.astype(np.float32) / 255.0


def blend_normal(dst: np.ndarray, coverage: np.ndarray, color: RGBA) -> np.ndarray:
    """Premultiplied source-over of a solid color through a coverage mask."""
    src = np.array(color.premultiplied(), dtype=np.float32)
    cov = coverage[:, :, np.newaxis]
    alpha = color.a / 255.0
    return src * cov + dst * (1.0 - alpha * cov)


def blend_erase(dst: np.ndarray, coverage: np.ndarray) -> np.ndarray:
    """Clear operator: removes paint in proportion to coverage."""
    return dst * (1.0 - coverage[:, :, np.newaxis])


def blend_copy(dst: np.ndarray, coverage: np.ndarray, color: RGBA) -> np.ndarray:
    """Replace operator: covered pixels take the stroke color outright."""
    out = dst.copy()
    out[coverage > 0] = np.array(color.premultiplied(), dtype=np.float32)
    return out


class StrokeCompositor:
    """
    Draws single stroke segments under one of the BlendMode policies.

    Example:
        >>> compositor = StrokeCompositor()
        >>> overlay = compositor.draw(None, (10, 10), (60, 40), RGBA(0, 0, 255),
        ...                           width=12, opacity=0.8, canvas_size=(200, 200))
    """

    def __init__(self, settings: Optional[StrokeSettings] = None):
        """
        Initialize compositor.

        Args:
            settings: Opacity floor, rainbow and glow constants
        """
        self.settings = settings or StrokeSettings()

    def effective_color(self, color: RGBA, opacity: float) -> RGBA:
        """Color alpha scaled by opacity clamped to [min_opacity, 1.0]."""
        return color.with_opacity(opacity, self.settings.min_opacity)

    def draw(
        self,
        overlay: Optional[PixelBuffer],
        start: PointLike,
        end: PointLike,
        color: RGBA,
        width: float,
        opacity: float = 1.0,
        canvas_size: Optional[Tuple[float, float]] = None,
        mode: BlendMode = BlendMode.NORMAL,
        rainbow_phase: float = 0.0,
    ) -> Optional[PixelBuffer]:
        """
        Draw one segment from `start` to `end`.

        Args:
            overlay: Current overlay (None = transparent)
            start: Segment start in pixel space
            end: Segment end in pixel space
            color: Brush color (ignored by ERASE and RAINBOW)
            width: Stroke width in pixels
            opacity: Tool opacity, floored at min_opacity
            canvas_size: (width, height); defaults to the overlay size
            mode: Compositing policy
            rainbow_phase: Hue position for RAINBOW

        Returns:
            New overlay buffer, or the input overlay if the request was rejected
        """
        if canvas_size is None:
            if overlay is None:
                logger.debug("Stroke rejected: no canvas size and no overlay")
                return overlay
            canvas_size = overlay.size

        cw, ch = int(round(canvas_size[0])), int(round(canvas_size[1]))
        if cw <= 0 or ch <= 0:
            logger.debug(f"Stroke rejected: invalid canvas size {canvas_size}")
            return overlay

        p0, p1 = as_point(start), as_point(end)
        if not (p0.is_finite() and p1.is_finite()) or not math.isfinite(width) or width <= 0:
            logger.debug("Stroke rejected: non-finite point or non-positive width")
            return overlay

        size = (cw, ch)
        dst = canvas_pixels(overlay, cw, ch).astype(np.float32)

        if mode == BlendMode.ERASE:
            out = blend_erase(dst, stroke_coverage(size, p0, p1, width))
        elif mode == BlendMode.COPY:
            # Hard coverage keeps repeated passes byte-identical
            coverage = stroke_coverage(size, p0, p1, width, antialias=False)
            out = blend_copy(dst, coverage, self.effective_color(color, opacity))
        elif mode == BlendMode.RAINBOW:
            hue = rainbow_color(rainbow_phase, self.settings.rainbow_alpha)
            out = self._glow_stroke(dst, size, p0, p1, width, self.effective_color(hue, opacity))
        elif mode == BlendMode.GLOW:
            out = self._glow_stroke(dst, size, p0, p1, width, self.effective_color(color, opacity))
        else:
            coverage = stroke_coverage(size, p0, p1, width)
            out = blend_normal(dst, coverage, self.effective_color(color, opacity))

        return PixelBuffer.from_rgba(np.clip(np.rint(out), 0, 255).astype(np.uint8))

    def _glow_stroke(
        self,
        dst: np.ndarray,
        size: Tuple[int, int],
        start: Point,
        end: Point,
        width: float,
        color: RGBA,
    ) -> np.ndarray:
        """Soft wide halo first, then the main stroke over it."""
        blur = max(self.settings.glow_min_blur, width * self.settings.glow_blur_ratio)
        blur = min(blur, float(max(size)))
        halo = stroke_coverage(size, start, end, width + 2.0 * blur)
        halo = cv2.GaussianBlur(halo, (0, 0), sigmaX=blur / 2.0)

        halo_alpha = int(round(color.a * self.settings.glow_alpha))
        halo_color = RGBA(color.r, color.g, color.b, halo_alpha)

        out = blend_normal(dst, halo, halo_color)
        return blend_normal(out, stroke_coverage(size, start, end, width), color)
