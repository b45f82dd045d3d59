"""
Bucket Fill Module

Tolerance-based, boundary-respecting flood fill over the overlay buffer.
"""

from .engine import FloodFillEngine, KidsFloodFillEngine, FillOutcome, flood_fill, fill_region
from .predicates import BoundaryPredicate, MaskBoundary, BaseImageBoundary

__all__ = [
    "FloodFillEngine",
    "KidsFloodFillEngine",
    "FillOutcome",
    "flood_fill",
    "fill_region",
    "BoundaryPredicate",
    "MaskBoundary",
    "BaseImageBoundary",
]
