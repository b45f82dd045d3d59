"""
Edge Mask Module

Derives binary boundary masks from bright-edge luminance maps.
"""

from .builder import EdgeMaskBuilder, threshold_luminance, dilate_mask
from .edges import edge_map, edge_intensity, luminance, color_controls, to_grayscale

__all__ = [
    "EdgeMaskBuilder",
    "threshold_luminance",
    "dilate_mask",
    "edge_map",
    "edge_intensity",
    "luminance",
    "color_controls",
    "to_grayscale",
]
