"""
Boundary mask derivation from bright-edge luminance maps.
"""

import logging
from typing import Optional

import cv2
import numpy as np

from ..config.engine_config import EdgeMaskSettings
from ..models import BoundaryMask
from .edges import edge_map, luminance

logger = logging.getLogger(__name__)


def threshold_luminance(lum: np.ndarray, threshold: int) -> np.ndarray:
    """Binary uint8 mask (1 = edge) where luminance is strictly above threshold."""
    return (lum > threshold).astype(np.uint8)


def dilate_mask(mask: np.ndarray, radius: int) -> np.ndarray:
    """
    Grow a binary mask by a square (2r+1) x (2r+1) neighborhood.

    Closes 1-pixel gaps in detected edges so fills cannot leak through.

    Args:
        mask: Binary uint8 mask
        radius: Dilation radius in pixels (0 returns the mask unchanged)

    Returns:
        Dilated binary mask
    """
    if radius <= 0 or mask.size == 0:
        return mask
    kernel = np.ones((2 * radius + 1, 2 * radius + 1), dtype=np.uint8)
    return cv2.dilate(mask, kernel, iterations=1)


def _is_rasterizable(image: Optional[np.ndarray]) -> bool:
    if image is None or not isinstance(image, np.ndarray):
        return False
    if image.dtype != np.uint8 or image.size == 0:
        return False
    if image.ndim == 2:
        return True
    return image.ndim == 3 and image.shape[2] in (3, 4)


class EdgeMaskBuilder:
    """
    Converts images into BoundaryMasks.

    `build` runs the whole photo -> edges -> mask transform, while
    `from_edge_map` only thresholds and dilates an edge map that was
    already computed (so display and mask share one edge map).

    Example:
        >>> builder = EdgeMaskBuilder()
        >>> mask = builder.build(cv2.imread("photo.jpg"))
        >>> mask.is_boundary(10, 10)
    """

    def __init__(self, settings: Optional[EdgeMaskSettings] = None):
        """
        Initialize builder.

        Args:
            settings: Threshold, dilation and edge filter settings
        """
        self.settings = settings or EdgeMaskSettings()

    def build(self, source_image: Optional[np.ndarray]) -> BoundaryMask:
        """
        Build a boundary mask from a source photo.

        Args:
            source_image: Grayscale, BGR or BGRA uint8 image

        Returns:
            BoundaryMask sized like the image, or an empty mask if the
            image cannot be rasterized
        """
        if not _is_rasterizable(source_image):
            logger.warning("Source image cannot be rasterized; returning empty mask")
            return BoundaryMask.empty()

        edges = edge_map(
            source_image,
            intensity=self.settings.edge_intensity,
            gray_contrast=self.settings.gray_contrast,
        )
        return self.from_edge_map(edges)

    def from_edge_map(self, edges: Optional[np.ndarray]) -> BoundaryMask:
        """
        Threshold and dilate a bright-edge map.

        Args:
            edges: Edge map where boundaries are bright

        Returns:
            BoundaryMask with the edge map's pixel dimensions
        """
        if not _is_rasterizable(edges):
            logger.warning("Edge map cannot be rasterized; returning empty mask")
            return BoundaryMask.empty()

        lum = luminance(edges)
        binary = threshold_luminance(lum, self.settings.luminance_threshold)
        thick = dilate_mask(binary, self.settings.dilation_radius)

        mask = BoundaryMask(thick.astype(bool))
        logger.debug(
            f"Built {mask.width}x{mask.height} boundary mask "
            f"(coverage {mask.coverage_ratio:.3f})"
        )
        return mask
