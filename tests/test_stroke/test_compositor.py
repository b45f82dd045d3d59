"""Tests for stroke compositing."""

import math

import pytest
import numpy as np

from colorpage.config import StrokeSettings
from colorpage.models import RGBA, BlendMode, PixelBuffer, Point
from colorpage.stroke import StrokeCompositor, stroke_coverage, clip_segment, blend_copy

RED = RGBA(255, 0, 0, 255)
BLUE = RGBA(0, 0, 255, 255)
CANVAS = (50, 50)


def _horizontal(compositor, overlay, color=RED, width=6.0, opacity=1.0, mode=BlendMode.NORMAL, **kwargs):
    return compositor.draw(
        overlay, (10, 25), (40, 25), color, width,
        opacity=opacity, canvas_size=CANVAS, mode=mode, **kwargs
    )


class TestStrokeCoverage:
    """Tests for segment coverage masks."""

    def test_center_fully_covered(self):
        """Test the stroke center has full coverage and far pixels none."""
        coverage = stroke_coverage(CANVAS, Point(10, 25), Point(40, 25), 6.0)

        assert coverage.dtype == np.float32
        assert coverage[25, 25] == 1.0
        assert coverage[5, 25] == 0.0

    def test_zero_length_is_dot(self):
        """Test a tap draws a round dot."""
        coverage = stroke_coverage(CANVAS, Point(20, 20), Point(20, 20), 8.0)

        assert coverage[20, 20] > 0.9
        assert coverage[20, 30] == 0.0

    def test_hard_coverage_is_binary(self):
        """Test non-antialiased coverage only holds 0 and 1."""
        coverage = stroke_coverage(CANVAS, Point(10, 25), Point(40, 27), 6.0, antialias=False)
        assert set(np.unique(coverage)) <= {0.0, 1.0}


class TestStrokeCompositor:
    """Tests for StrokeCompositor."""

    def test_normal_draws_opaque_color(self):
        """Test a normal stroke paints its color."""
        result = _horizontal(StrokeCompositor(), None)

        assert result.size == CANVAS
        assert result.get_pixel(25, 25) == RED
        assert result.get_pixel(25, 5) == RGBA(0, 0, 0, 0)

    def test_normal_accumulates(self):
        """Test overlapping translucent strokes build up alpha."""
        compositor = StrokeCompositor()
        once = _horizontal(compositor, None, opacity=0.5)
        twice = _horizontal(compositor, once, opacity=0.5)

        assert once.get_pixel(25, 25).a == 127
        assert twice.get_pixel(25, 25).a > once.get_pixel(25, 25).a

    def test_watercolor_does_not_accumulate(self):
        """Test a COPY stroke repeated over itself is unchanged."""
        compositor = StrokeCompositor()
        once = _horizontal(compositor, None, opacity=0.5, mode=BlendMode.COPY)
        twice = _horizontal(compositor, once, opacity=0.5, mode=BlendMode.COPY)

        assert once == twice
        assert once.get_pixel(25, 25).a == 127

    def test_watercolor_replaces_color(self):
        """Test COPY overwrites existing paint rather than mixing."""
        compositor = StrokeCompositor()
        red = _horizontal(compositor, None)
        blue = _horizontal(compositor, red, color=BLUE, opacity=0.5, mode=BlendMode.COPY)

        assert blue.get_pixel(25, 25) == RGBA(0, 0, 127, 127)

    def test_erase_clears(self):
        """Test erasing over a stroke removes it."""
        compositor = StrokeCompositor()
        painted = _horizontal(compositor, None)
        erased = _horizontal(compositor, painted, width=16.0, mode=BlendMode.ERASE)

        assert erased.is_transparent()

    def test_erase_ignores_color(self):
        """Test erase never adds paint."""
        erased = _horizontal(StrokeCompositor(), None, color=BLUE, mode=BlendMode.ERASE)
        assert erased.is_transparent()

    def test_opacity_floor(self):
        """Test opacity below the floor is raised to min_opacity."""
        result = _horizontal(StrokeCompositor(), None, opacity=0.0)
        assert result.get_pixel(25, 25).a == int(255 * 0.05)

    def test_custom_opacity_floor(self):
        """Test the configured floor is used."""
        compositor = StrokeCompositor(StrokeSettings(min_opacity=0.5))
        result = _horizontal(compositor, None, opacity=0.1)
        assert result.get_pixel(25, 25).a == 127

    def test_rainbow_uses_phase_color(self):
        """Test rainbow color depends on the phase, not the brush color."""
        compositor = StrokeCompositor()
        red = _horizontal(compositor, None, color=BLUE, mode=BlendMode.RAINBOW, rainbow_phase=0.0)
        cyan = _horizontal(compositor, None, color=BLUE, mode=BlendMode.RAINBOW, rainbow_phase=0.5)

        red_px = red.get_pixel(25, 25)
        cyan_px = cyan.get_pixel(25, 25)
        assert red_px.r > red_px.g
        assert red_px.b < 50
        assert cyan_px.g > cyan_px.r
        assert cyan_px.b > cyan_px.r

    def test_glow_has_soft_halo(self):
        """Test glow paints a faint halo outside the main stroke."""
        result = _horizontal(StrokeCompositor(), None, width=4.0, mode=BlendMode.GLOW)

        core = result.get_pixel(25, 25).a
        halo = result.get_pixel(25, 29).a
        assert core == 255
        assert 0 < halo < core

    def test_rejections_return_input(self):
        """Test invalid requests return the input overlay unchanged."""
        compositor = StrokeCompositor()
        overlay = PixelBuffer.allocate(50, 50)

        assert compositor.draw(overlay, (1, 1), (5, 5), RED, 0.0, canvas_size=CANVAS) is overlay
        assert compositor.draw(overlay, (math.nan, 1), (5, 5), RED, 4.0, canvas_size=CANVAS) is overlay
        assert compositor.draw(overlay, (1, 1), (5, 5), RED, 4.0, canvas_size=(0, 50)) is overlay
        assert compositor.draw(None, (1, 1), (5, 5), RED, 4.0) is None

    def test_canvas_size_defaults_to_overlay(self):
        """Test the overlay size is used when no canvas size is given."""
        overlay = PixelBuffer.allocate(30, 20)
        result = StrokeCompositor().draw(overlay, (2, 2), (20, 10), RED, 3.0)
        assert result.size == (30, 20)

    def test_input_not_mutated(self):
        """Test the caller's overlay is never modified in place."""
        overlay = PixelBuffer.allocate(50, 50)
        _horizontal(StrokeCompositor(), overlay)
        assert overlay.is_transparent()


class TestBlendCopy:
    """Tests for the replace operator."""

    def test_uncovered_pixels_kept(self):
        """Test pixels outside coverage keep their value."""
        dst = np.full((2, 2, 4), 7.0, dtype=np.float32)
        coverage = np.array([[1.0, 0.0], [0.0, 0.0]], dtype=np.float32)
        out = blend_copy(dst, coverage, RED)

        assert tuple(out[0, 0]) == (255, 0, 0, 255)
        assert tuple(out[1, 1]) == (7, 7, 7, 7)


class TestOutOfRangeStrokes:
    """Tests for endpoints and widths far beyond the canvas."""

    def test_far_endpoint_is_clipped(self):
        """Test a segment running far off the canvas still draws its visible part."""
        result = StrokeCompositor().draw(None, (0, 0), (1e10, 0), RED, 4.0, 1.0, (10, 10))

        assert result.size == (10, 10)
        assert result.get_pixel(5, 0).a > 0
        assert result.get_pixel(5, 9).a == 0

    def test_segment_missing_canvas_draws_nothing(self):
        """Test a segment entirely off the canvas leaves it transparent."""
        result = StrokeCompositor().draw(None, (-1e9, -1e9), (1e10, -1e9), RED, 4.0, 1.0, (10, 10))
        assert result.is_transparent()

    def test_far_dot_draws_nothing(self):
        """Test a tap far off the canvas leaves it transparent."""
        result = StrokeCompositor().draw(None, (1e12, 1e12), (1e12, 1e12), RED, 4.0, 1.0, (10, 10))
        assert result.is_transparent()

    def test_huge_width_covers_canvas(self):
        """Test an oversized width is capped and paints the whole canvas."""
        result = StrokeCompositor().draw(None, (0, 0), (5, 0), RED, 1e6, 1.0, (10, 10))
        assert (result.rgba[:, :, 3] > 0).all()

    def test_huge_width_dot(self):
        """Test an oversized round dot does not overflow."""
        result = StrokeCompositor().draw(None, (5, 5), (5, 5), RED, 1e9, 1.0, (10, 10))
        assert (result.rgba[:, :, 3] > 0).all()

    def test_huge_width_glow(self):
        """Test glow with an oversized width stays bounded."""
        result = StrokeCompositor().draw(
            None, (0, 0), (1e10, 1e10), RED, 1e6, 1.0, (10, 10), BlendMode.GLOW
        )
        assert result.get_pixel(5, 5).a > 0


class TestClipSegment:
    """Tests for segment clipping."""

    def test_inside_unchanged(self):
        """Test a segment inside the bounds is returned as is."""
        start, end = clip_segment(Point(1, 1), Point(4, 3), (0, 0, 10, 10))
        assert start == Point(1, 1)
        assert end == Point(4, 3)

    def test_clips_to_edge(self):
        """Test both ends are pulled onto the bounds."""
        start, end = clip_segment(Point(-10, 5), Point(20, 5), (0, 0, 10, 10))
        assert start.x == pytest.approx(0.0, abs=1e-9)
        assert end.x == pytest.approx(10.0)
        assert start.y == end.y == 5

    def test_miss(self):
        """Test segments outside the bounds are rejected."""
        assert clip_segment(Point(-5, -5), Point(-1, 20), (0, 0, 10, 10)) is None
        assert clip_segment(Point(0, 11), Point(10, 11), (0, 0, 10, 10)) is None
