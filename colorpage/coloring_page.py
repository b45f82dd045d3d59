"""
Coloring page generation: photo -> ink-on-paper display image + boundary mask.

The display image and the mask are derived from the same edge map, so a
pixel coordinate on screen addresses the same pixel in the mask.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import cv2
import numpy as np

from .config.engine_config import ColoringPageSettings, EdgeMaskSettings
from .edge_mask.builder import EdgeMaskBuilder
from .edge_mask.edges import color_controls, edge_map, invert, multiply, to_bgr
from .models import BoundaryMask, PixelBuffer

logger = logging.getLogger(__name__)


@dataclass
class ColoringPageResult:
    """
    Output of the photo pipeline.

    Attributes:
        display_image: Soft photo base with multiplied ink lines (opaque)
        mask: Boundary mask with the display image's pixel dimensions
    """
    display_image: PixelBuffer
    mask: BoundaryMask

    @property
    def size(self) -> Tuple[int, int]:
        """Canonical canvas size (width, height) for all pixel-space math."""
        return self.mask.size if not self.mask.is_empty else self.display_image.size

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "width": self.display_image.width,
            "height": self.display_image.height,
            "mask": self.mask.to_dict(),
        }


def normalize_orientation(image: np.ndarray, orientation: int = 1) -> np.ndarray:
    """
    Apply an EXIF orientation code (1-8) so the image is upright.

    Args:
        image: Input image
        orientation: EXIF orientation tag value

    Returns:
        Upright image (the input itself for orientation 1 or unknown codes)
    """
    if orientation == 2:
        return cv2.flip(image, 1)
    elif orientation == 3:
        return cv2.rotate(image, cv2.ROTATE_180)
    elif orientation == 4:
        return cv2.flip(image, 0)
    elif orientation == 5:
        return cv2.transpose(image)
    elif orientation == 6:
        return cv2.rotate(image, cv2.ROTATE_90_CLOCKWISE)
    elif orientation == 7:
        return cv2.flip(cv2.transpose(image), -1)
    elif orientation == 8:
        return cv2.rotate(image, cv2.ROTATE_90_COUNTERCLOCKWISE)
    return image


def scale_to_max_dimension(image: np.ndarray, max_dimension: int) -> np.ndarray:
    """
    Downscale so the longer side is at most max_dimension. Never upscales.

    Args:
        image: Input image
        max_dimension: Maximum length of the longer side (<= 0 disables)

    Returns:
        Scaled image (the input itself when no scaling is needed)
    """
    height, width = image.shape[:2]
    longest = max(width, height)
    if max_dimension <= 0 or longest <= max_dimension:
        return image

    scale = max_dimension / longest
    new_width = max(1, int(round(width * scale)))
    new_height = max(1, int(round(height * scale)))
    return cv2.resize(image, (new_width, new_height), interpolation=cv2.INTER_AREA)


def load_photo(path: str) -> Optional[np.ndarray]:
    """
    Read a photo from disk (EXIF orientation applied by cv2).

    Returns:
        BGR image, or None if the file cannot be decoded
    """
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        logger.warning(f"Could not decode photo: {path}")
    return image


class ColoringPageGenerator:
    """
    Turns a photo into a coloring page.

    Pure and CPU-bound with no shared mutable state, so it is safe to run
    on a background worker.

    Example:
        >>> generator = ColoringPageGenerator()
        >>> page = generator.generate(cv2.imread("dog.jpg"), max_dimension=1400)
        >>> page.mask.size == page.display_image.size
        True
    """

    def __init__(
        self,
        settings: Optional[ColoringPageSettings] = None,
        mask_settings: Optional[EdgeMaskSettings] = None,
    ):
        self.settings = settings or ColoringPageSettings()
        self.mask_builder = EdgeMaskBuilder(mask_settings)

    def generate(
        self,
        photo: Optional[np.ndarray],
        max_dimension: Optional[int] = None,
        orientation: int = 1,
    ) -> ColoringPageResult:
        """
        Generate the display image and boundary mask.

        Args:
            photo: Decoded photo (grayscale, BGR or BGRA uint8)
            max_dimension: Longest side of the output (default from settings)
            orientation: EXIF orientation of the photo

        Returns:
            ColoringPageResult; an unusable photo yields a 0x0 display image
            and an empty mask
        """
        if photo is None or not isinstance(photo, np.ndarray) or photo.size == 0 \
                or photo.dtype != np.uint8:
            logger.warning("Photo cannot be rasterized; returning empty coloring page")
            return ColoringPageResult(
                display_image=PixelBuffer.allocate(0, 0),
                mask=BoundaryMask.empty(),
            )

        if max_dimension is None:
            max_dimension = self.settings.max_dimension

        upright = normalize_orientation(photo, orientation)
        scaled = to_bgr(scale_to_max_dimension(upright, max_dimension))

        soft_base = color_controls(
            scaled,
            saturation=self.settings.base_saturation,
            contrast=self.settings.base_contrast,
            brightness=self.settings.base_brightness,
        )

        mask_settings = self.mask_builder.settings
        edges = edge_map(
            scaled,
            intensity=mask_settings.edge_intensity,
            gray_contrast=mask_settings.gray_contrast,
        )

        ink = color_controls(
            invert(edges),
            contrast=self.settings.ink_contrast,
            brightness=self.settings.ink_brightness,
        )
        display_image = PixelBuffer.from_image(multiply(ink, soft_base))

        # Mask comes from the raw (un-inverted) edges: bright = boundary
        mask = self.mask_builder.from_edge_map(edges)
        if mask.size != display_image.size:
            logger.warning("Boundary mask unavailable; falling back to a boundary-free canvas")
            mask = BoundaryMask.blank(display_image.width, display_image.height)

        logger.info(
            f"Generated {display_image.width}x{display_image.height} coloring page "
            f"(boundary coverage {mask.coverage_ratio:.3f})"
        )
        return ColoringPageResult(display_image=display_image, mask=mask)
