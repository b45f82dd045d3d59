"""
Boundary predicates for flood fill.

A predicate answers two questions: is a pixel itself a boundary (start
rejection), and does a pixel block propagation (which for the base-image
variant also includes the edge-shrink margin around the outline).
"""

from typing import Tuple

import cv2
import numpy as np

from ..models import RGBA, BoundaryMask


class BoundaryPredicate:
    """Interface shared by the mask-lookup and base-image-sampling variants."""

    width: int = 0
    height: int = 0

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def is_boundary(self, x: int, y: int) -> bool:
        """True for boundary pixels and for any out-of-bounds coordinate."""
        raise NotImplementedError

    def blocked_array(self) -> np.ndarray:
        """(height, width) bool array of pixels the fill must not enter."""
        raise NotImplementedError


class MaskBoundary(BoundaryPredicate):
    """Lookup into a precomputed BoundaryMask."""

    def __init__(self, mask: BoundaryMask):
        self.mask = mask
        self.width, self.height = mask.size

    def is_boundary(self, x: int, y: int) -> bool:
        return self.mask.is_boundary(x, y)

    def blocked_array(self) -> np.ndarray:
        return self.mask.bits


class BaseImageBoundary(BoundaryPredicate):
    """
    Boundary computed by sampling the base image against an outline color.

    Pixels within `tolerance` (per channel) of `boundary_color` are
    boundaries. With `edge_shrink_radius > 0`, any pixel whose square
    neighborhood contains a boundary pixel also blocks the fill, which
    keeps paint from hugging the line art and leaving halos.

    Example:
        >>> predicate = BaseImageBoundary(base.rgba, BLACK, tolerance=40)
        >>> predicate.is_boundary(5, 5)
    """

    def __init__(
        self,
        base_rgba: np.ndarray,
        boundary_color: RGBA,
        tolerance: int = 40,
        edge_shrink_radius: int = 1,
    ):
        """
        Args:
            base_rgba: (height, width, 4) premultiplied base image pixels
            boundary_color: Outline color to stop at
            tolerance: Per-channel closeness to the outline color
            edge_shrink_radius: Safety margin around outline pixels
        """
        self.height, self.width = base_rgba.shape[:2]
        self.boundary_color = boundary_color
        self.tolerance = tolerance
        self.edge_shrink_radius = edge_shrink_radius

        reference = np.array(boundary_color.premultiplied(), dtype=np.int16)
        diff = np.abs(base_rgba.astype(np.int16) - reference)
        self._hits = diff.max(axis=2) <= tolerance

    def is_boundary(self, x: int, y: int) -> bool:
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return True
        return bool(self._hits[y, x])

    def is_near_boundary(self, x: int, y: int) -> bool:
        """True when any pixel within edge_shrink_radius is a boundary."""
        r = self.edge_shrink_radius
        if r <= 0:
            return self.is_boundary(x, y)
        window = self._hits[max(0, y - r):y + r + 1, max(0, x - r):x + r + 1]
        return bool(window.any())

    def blocked_array(self) -> np.ndarray:
        r = self.edge_shrink_radius
        if r <= 0:
            return self._hits
        kernel = np.ones((2 * r + 1, 2 * r + 1), dtype=np.uint8)
        return cv2.dilate(self._hits.astype(np.uint8), kernel).astype(bool)
