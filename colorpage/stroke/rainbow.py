"""
Rainbow brush color helpers.

Hue advances with distance traveled, so the same path gives the same
colors whatever the pointer speed or event rate.
"""

import colorsys

from ..models import RGBA, PointLike, as_point

RAINBOW_CYCLE_LENGTH = 260.0


def rainbow_color(phase: float, alpha: float = 1.0) -> RGBA:
    """
    Fully saturated color at a point on the hue wheel.

    Args:
        phase: Hue position; wrapped into [0.0, 1.0)
        alpha: Opacity 0.0-1.0

    Returns:
        RGBA color
    """
    hue = phase % 1.0
    r, g, b = colorsys.hsv_to_rgb(hue, 1.0, 1.0)
    a = max(0.0, min(alpha, 1.0))
    return RGBA(int(round(r * 255)), int(round(g * 255)), int(round(b * 255)), int(round(a * 255)))


def advance_rainbow_phase(
    phase: float,
    start: PointLike,
    end: PointLike,
    cycle_length: float = RAINBOW_CYCLE_LENGTH,
) -> float:
    """
    Move the phase forward by the segment length, one cycle per `cycle_length` px.

    A zero-length segment leaves the phase unchanged (apart from wrapping).
    """
    distance = as_point(start).distance_to(as_point(end))
    return (phase + distance / cycle_length) % 1.0
