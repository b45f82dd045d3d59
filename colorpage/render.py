"""
Canvas helpers: blank buffers, base + overlay compositing, previews.

Persistence code calls these to get pixels to encode; nothing here
touches storage.
"""

from typing import Optional

import cv2
import numpy as np

from .models import RGBA, WHITE, PixelBuffer


def transparent_canvas(width: int, height: int) -> Optional[PixelBuffer]:
    """Fully transparent overlay, or None for a non-positive size."""
    if width <= 0 or height <= 0:
        return None
    return PixelBuffer.allocate(width, height)


def blank_base(width: int = 2048, height: int = 2048, background: RGBA = WHITE) -> PixelBuffer:
    """
    Solid-color "paper" base for free painting without a photo.

    Sizes below 1 are clamped to 1.
    """
    width = max(1, int(width))
    height = max(1, int(height))
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[:, :] = background.premultiplied()
    return PixelBuffer.from_rgba(rgba)


def canvas_pixels(overlay: Optional[PixelBuffer], width: int, height: int) -> np.ndarray:
    """
    Contiguous RGBA copy of the overlay at canvas size.

    A missing overlay is a fresh transparent canvas; an overlay of another
    size is resampled to the canvas.
    """
    if overlay is None or overlay.width == 0 or overlay.height == 0:
        return np.zeros((height, width, 4), dtype=np.uint8)
    if overlay.size != (width, height):
        resized = cv2.resize(overlay.rgba, (width, height), interpolation=cv2.INTER_LINEAR)
        return np.ascontiguousarray(resized)
    return np.ascontiguousarray(overlay.rgba).copy()


def source_over(dst: np.ndarray, src: np.ndarray) -> np.ndarray:
    """
    Premultiplied source-over of two same-sized RGBA uint8 arrays.

    Returns:
        New uint8 array
    """
    top = src.astype(np.float32)
    bottom = dst.astype(np.float32)
    inverse_alpha = 1.0 - top[:, :, 3:4] / 255.0
    out = top + bottom * inverse_alpha
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def composite(base: PixelBuffer, overlay: Optional[PixelBuffer]) -> PixelBuffer:
    """
    Base image with the paint overlay on top, at the base image's size.

    Args:
        base: Display image (coloring page or blank base)
        overlay: User paint (None = nothing painted)

    Returns:
        New composited buffer
    """
    if overlay is None:
        return base.copy()
    paint = canvas_pixels(overlay, base.width, base.height)
    return PixelBuffer.from_rgba(source_over(base.rgba, paint))


def scale_to_max_edge(buffer: PixelBuffer, max_edge: int) -> PixelBuffer:
    """Downscale so the longer side is at most max_edge (never upscales)."""
    longest = max(buffer.width, buffer.height)
    if max_edge <= 0 or longest <= max_edge:
        return buffer.copy()
    factor = max_edge / longest
    new_size = (max(1, int(round(buffer.width * factor))), max(1, int(round(buffer.height * factor))))
    return PixelBuffer.from_rgba(cv2.resize(buffer.rgba, new_size, interpolation=cv2.INTER_AREA))


def render_preview(
    base: Optional[PixelBuffer],
    overlay: Optional[PixelBuffer],
    max_edge: int = 420,
) -> Optional[PixelBuffer]:
    """
    Opaque thumbnail: white paper, base, then overlay, scaled down.

    Args:
        base: Base image (may be None for overlay-only previews)
        overlay: Paint overlay
        max_edge: Longest side of the preview

    Returns:
        Preview buffer, or None if there is nothing to render
    """
    if base is not None and base.width > 0 and base.height > 0:
        paper = blank_base(base.width, base.height, WHITE)
        full = composite(composite(paper, base), overlay)
    elif overlay is not None and overlay.width > 0 and overlay.height > 0:
        paper = blank_base(overlay.width, overlay.height, WHITE)
        full = composite(paper, overlay)
    else:
        return None
    return scale_to_max_edge(full, max_edge)


def to_export_image(buffer: PixelBuffer) -> np.ndarray:
    """Straight-alpha BGRA image for cv2.imwrite / cv2.imencode."""
    return buffer.to_bgra()
