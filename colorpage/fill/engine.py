"""
Region-locked bucket fill.

One stack-based 4-connected flood fill, parameterized by a boundary
predicate, drives both the mask-constrained (photo) engine and the
base-image sampling (kids) engine.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from ..config.engine_config import FillSettings, KidsFillSettings
from ..models import RGBA, BoundaryMask, PixelBuffer, PointLike, as_point, channels_close
from ..render import canvas_pixels
from .predicates import BaseImageBoundary, BoundaryPredicate, MaskBoundary

logger = logging.getLogger(__name__)


@dataclass
class FillOutcome:
    """Result of a single flood fill pass."""
    painted: int
    capped: bool = False

    @property
    def changed(self) -> bool:
        return self.painted > 0


def flood_fill(
    rgba: np.ndarray,
    start: Tuple[int, int],
    fill: Tuple[int, int, int, int],
    blocked: np.ndarray,
    tolerance: int,
    max_pixels: int,
) -> FillOutcome:
    """
    Paint the contiguous region around `start` that matches the start color.

    Explicit stack (no recursion), visited bitmap, 4-connectivity. A
    pixel is painted when it is not blocked and its color is within
    `tolerance` of the start pixel's color. Stops once `max_pixels`
    pixels are painted and reports the partial result.

    Args:
        rgba: Contiguous (height, width, 4) uint8 array, modified in place
        start: (x, y) start pixel, must be in bounds
        fill: Premultiplied RGBA bytes to write
        blocked: (height, width) bool array of pixels the fill may not enter
        tolerance: Per-channel tolerance for matching the target color
        max_pixels: Hard cap on painted pixels

    Returns:
        FillOutcome with the painted count and whether the cap stopped the fill
    """
    height, width = rgba.shape[:2]
    total = width * height
    sx, sy = start

    # Each pixel is examined at most once and only ever overwritten after
    # its own visit, so matching against a snapshot equals matching live.
    target = rgba[sy, sx].astype(np.int16)
    distance = np.abs(rgba.astype(np.int16) - target).max(axis=2)
    open_flags = ((distance <= tolerance) & ~blocked).ravel().tobytes()

    visited = bytearray(total)
    stack = [sy * width + sx]
    painted = []
    capped = False

    while stack:
        idx = stack.pop()
        if visited[idx]:
            continue
        visited[idx] = 1

        if not open_flags[idx]:
            continue

        if len(painted) >= max_pixels:
            capped = True
            break
        painted.append(idx)

        x = idx % width
        if x > 0:
            stack.append(idx - 1)
        if x < width - 1:
            stack.append(idx + 1)
        if idx >= width:
            stack.append(idx - width)
        if idx < total - width:
            stack.append(idx + width)

    if painted:
        rgba.reshape(total, 4)[np.array(painted, dtype=np.intp)] = fill

    return FillOutcome(painted=len(painted), capped=capped)


def _canvas_dims(canvas_size: Optional[Tuple[float, float]]) -> Optional[Tuple[int, int]]:
    if canvas_size is None:
        return None
    w, h = canvas_size
    return int(round(w)), int(round(h))


def fill_region(
    overlay: Optional[PixelBuffer],
    predicate: BoundaryPredicate,
    start: PointLike,
    fill: Tuple[int, int, int, int],
    tolerance: int,
    max_pixels: int,
    min_size: int = 1,
) -> Optional[PixelBuffer]:
    """
    Validate a fill request against a predicate and run the flood fill.

    Rejections (canvas too small, start outside the canvas or on a
    boundary, start already the fill color) and fills that paint nothing
    return the input overlay object unchanged.

    Args:
        overlay: Current overlay (None = transparent)
        predicate: Boundary predicate; its size is the canvas size
        start: Pixel-space start point
        fill: Premultiplied fill bytes
        tolerance: Color matching tolerance
        max_pixels: Painted pixel cap
        min_size: Smallest accepted canvas side

    Returns:
        New overlay buffer or the input overlay
    """
    width, height = predicate.size
    if width < min_size or height < min_size:
        logger.debug(f"Fill rejected: canvas {width}x{height} too small")
        return overlay

    point = as_point(start)
    if not point.is_finite():
        return overlay
    sx, sy = point.rounded()
    if sx < 0 or sy < 0 or sx >= width or sy >= height:
        logger.debug(f"Fill rejected: start ({sx}, {sy}) outside {width}x{height}")
        return overlay

    if predicate.is_boundary(sx, sy):
        return overlay

    rgba = canvas_pixels(overlay, width, height)
    if channels_close(tuple(rgba[sy, sx]), fill, tolerance):
        return overlay

    outcome = flood_fill(rgba, (sx, sy), fill, predicate.blocked_array(), tolerance, max_pixels)
    if outcome.capped:
        logger.debug(f"Fill stopped at the {max_pixels} pixel cap")
    if not outcome.changed:
        return overlay

    return PixelBuffer.from_rgba(rgba)


class FloodFillEngine:
    """
    Mask-constrained bucket fill (photo mode).

    The boundary mask dimensions are the canonical canvas size. Rejected
    inputs return the given overlay object unchanged; successful fills
    return a new buffer.

    Example:
        >>> engine = FloodFillEngine()
        >>> overlay = engine.fill(None, page.mask, (120, 80), RGBA(255, 0, 0))
    """

    def __init__(self, settings: Optional[FillSettings] = None):
        """
        Initialize engine.

        Args:
            settings: Tolerance and pixel cap
        """
        self.settings = settings or FillSettings()

    def fill(
        self,
        overlay: Optional[PixelBuffer],
        mask: BoundaryMask,
        start: PointLike,
        fill_color: RGBA,
        canvas_size: Optional[Tuple[float, float]] = None,
    ) -> Optional[PixelBuffer]:
        """
        Fill the region under `start` with `fill_color`.

        Args:
            overlay: Current overlay (None = transparent)
            mask: Boundary mask for the page
            start: Pixel-space start point
            fill_color: Fill color (alpha already scaled by opacity)
            canvas_size: (width, height) reported by the caller; rejected if not positive

        Returns:
            New overlay buffer, or the input overlay when nothing was filled
        """
        dims = _canvas_dims(canvas_size)
        if dims is not None and (dims[0] <= 0 or dims[1] <= 0):
            logger.debug(f"Fill rejected: invalid canvas size {canvas_size}")
            return overlay

        return fill_region(
            overlay,
            MaskBoundary(mask),
            start,
            fill_color.premultiplied(),
            self.settings.tolerance,
            self.settings.max_pixels,
        )


class KidsFloodFillEngine:
    """
    Bucket fill that stops at outline-colored pixels of the base image.

    No precomputed mask: the base image is sampled against the outline
    color (default black) and an edge-shrink margin keeps paint off the
    line art.
    """

    def __init__(self, settings: Optional[KidsFillSettings] = None):
        self.settings = settings or KidsFillSettings()

    def fill(
        self,
        base_image: Union[PixelBuffer, np.ndarray, None],
        overlay: Optional[PixelBuffer],
        start: PointLike,
        fill_color: RGBA,
        opacity: float = 1.0,
        canvas_size: Optional[Tuple[float, float]] = None,
        boundary_color: Optional[RGBA] = None,
    ) -> Optional[PixelBuffer]:
        """
        Fill the region under `start`, reading boundaries from the base image.

        Args:
            base_image: Line-art base (PixelBuffer or cv2 image)
            overlay: Current overlay (None = transparent)
            start: Pixel-space start point
            fill_color: Fill color
            opacity: Tool opacity, clamped to [0.05, 1.0] and applied to alpha
            canvas_size: (width, height); defaults to the base image size
            boundary_color: Outline color override

        Returns:
            New overlay buffer, or the input overlay when nothing was filled
        """
        base = base_image if isinstance(base_image, PixelBuffer) else PixelBuffer.from_image(base_image)
        if base is None or base.width == 0 or base.height == 0:
            logger.warning("Base image cannot be rasterized; fill skipped")
            return overlay

        dims = _canvas_dims(canvas_size) or base.size
        width, height = dims
        if width <= 2 or height <= 2:
            logger.debug(f"Fill rejected: canvas {width}x{height} too small")
            return overlay

        base_rgba = base.rgba
        if base.size != (width, height):
            base_rgba = cv2.resize(base_rgba, (width, height), interpolation=cv2.INTER_LINEAR)

        predicate = BaseImageBoundary(
            base_rgba,
            boundary_color or self.settings.boundary_color,
            tolerance=self.settings.boundary_tolerance,
            edge_shrink_radius=self.settings.edge_shrink_radius,
        )
        fill = fill_color.with_opacity(opacity).premultiplied()

        return fill_region(
            overlay,
            predicate,
            start,
            fill,
            self.settings.start_tolerance,
            self.settings.max_pixels,
            min_size=3,
        )
