"""
Engine configuration dataclasses.
"""

from .engine_config import (
    EdgeMaskSettings,
    ColoringPageSettings,
    FillSettings,
    KidsFillSettings,
    StrokeSettings,
    HistorySettings,
    EngineConfig,
)

__all__ = [
    "EdgeMaskSettings",
    "ColoringPageSettings",
    "FillSettings",
    "KidsFillSettings",
    "StrokeSettings",
    "HistorySettings",
    "EngineConfig",
]
