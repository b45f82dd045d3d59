"""Tests for the mask-constrained flood fill."""

import math

import pytest
import numpy as np

from colorpage.config import EdgeMaskSettings, FillSettings
from colorpage.edge_mask import EdgeMaskBuilder
from colorpage.fill import FloodFillEngine, flood_fill, fill_region, MaskBoundary
from colorpage.models import RGBA, BoundaryMask, PixelBuffer

from tests.fixtures.canvas_fixtures import (
    create_ring_mask,
    ring_interior,
    create_ring_edge_map,
    chebyshev_distance,
)

RED = RGBA(255, 0, 0, 255)
BLUE = RGBA(0, 0, 255, 255)


class TestFloodFillCore:
    """Tests for the generic stack flood fill."""

    def test_fills_matching_region(self):
        """Test an unblocked transparent canvas is filled completely."""
        rgba = np.zeros((5, 7, 4), dtype=np.uint8)
        blocked = np.zeros((5, 7), dtype=bool)
        outcome = flood_fill(rgba, (3, 2), (255, 0, 0, 255), blocked, 14, 1000)

        assert outcome.painted == 35
        assert not outcome.capped
        assert (rgba == (255, 0, 0, 255)).all()

    def test_four_connectivity(self):
        """Test diagonal gaps do not leak."""
        rgba = np.zeros((3, 3, 4), dtype=np.uint8)
        blocked = np.zeros((3, 3), dtype=bool)
        blocked[0, 1] = blocked[1, 0] = True
        outcome = flood_fill(rgba, (0, 0), (1, 2, 3, 255), blocked, 0, 100)

        assert outcome.painted == 1

    def test_cap_reports_partial(self):
        """Test the pixel cap stops the fill exactly."""
        rgba = np.zeros((20, 20, 4), dtype=np.uint8)
        blocked = np.zeros((20, 20), dtype=bool)
        outcome = flood_fill(rgba, (10, 10), (255, 0, 0, 255), blocked, 14, 50)

        assert outcome.painted == 50
        assert outcome.capped
        assert np.count_nonzero(rgba[:, :, 3]) == 50


class TestFloodFillEngine:
    """Tests for FloodFillEngine."""

    def test_ring_scenario(self):
        """Test a fill inside a closed ring paints only the interior."""
        mask = create_ring_mask(size=10, center=5, radius=4)
        overlay = PixelBuffer.allocate(10, 10)
        result = FloodFillEngine().fill(overlay, mask, (5, 5), RED)

        inside = ring_interior(size=10, center=5, radius=4)
        rgba = result.rgba
        assert (rgba[inside] == (255, 0, 0, 255)).all()
        assert (rgba[~inside] == 0).all()

    def test_ring_from_edge_map(self):
        """Test a thresholded and dilated ring encloses its interior."""
        mask = EdgeMaskBuilder().from_edge_map(create_ring_edge_map())
        distance = chebyshev_distance()

        # Radius 2 dilation widens the ring at distance 6 to 4..8
        assert np.array_equal(mask.bits, np.abs(distance - 6) <= 2)

        result = FloodFillEngine().fill(None, mask, (10, 10), RED)
        painted = result.rgba[:, :, 3] > 0
        assert np.array_equal(painted, distance < 4)

    def test_ring_from_edge_map_outside(self):
        """Test a fill outside the dilated ring never crosses it."""
        mask = EdgeMaskBuilder().from_edge_map(create_ring_edge_map())
        result = FloodFillEngine().fill(None, mask, (0, 0), RED)

        painted = result.rgba[:, :, 3] > 0
        assert np.array_equal(painted, chebyshev_distance() > 8)

    def test_ring_three_pixels_thick(self):
        """Test a radius 1 dilation gives a 3px ring with a wider interior."""
        builder = EdgeMaskBuilder(EdgeMaskSettings(dilation_radius=1))
        mask = builder.from_edge_map(create_ring_edge_map())
        distance = chebyshev_distance()

        result = FloodFillEngine().fill(None, mask, (10, 10), RED)
        painted = result.rgba[:, :, 3] > 0
        assert np.array_equal(painted, distance < 5)
        assert not painted[np.abs(distance - 6) <= 1].any()

    def test_none_overlay_treated_as_transparent(self):
        """Test a missing overlay starts from a transparent canvas."""
        mask = create_ring_mask()
        result = FloodFillEngine().fill(None, mask, (5, 5), RED)

        assert result is not None
        assert result.size == (10, 10)
        assert result.get_pixel(5, 5) == RED

    def test_start_on_boundary_is_noop(self):
        """Test a start pixel on the boundary returns the input overlay."""
        mask = create_ring_mask()
        overlay = PixelBuffer.allocate(10, 10)
        result = FloodFillEngine().fill(overlay, mask, (1, 5), RED)

        assert result is overlay
        assert overlay.is_transparent()

    def test_start_out_of_bounds_is_noop(self):
        """Test out-of-bounds and non-finite starts are rejected."""
        mask = BoundaryMask.blank(10, 10)
        overlay = PixelBuffer.allocate(10, 10)
        engine = FloodFillEngine()

        assert engine.fill(overlay, mask, (-1, 5), RED) is overlay
        assert engine.fill(overlay, mask, (5, 10), RED) is overlay
        assert engine.fill(overlay, mask, (math.nan, 5), RED) is overlay

    def test_invalid_canvas_size_is_noop(self):
        """Test a non-positive canvas size is rejected."""
        mask = BoundaryMask.blank(10, 10)
        overlay = PixelBuffer.allocate(10, 10)
        assert FloodFillEngine().fill(overlay, mask, (5, 5), RED, canvas_size=(0, 10)) is overlay

    def test_empty_mask_is_noop(self):
        """Test a failed (empty) mask never fills."""
        assert FloodFillEngine().fill(None, BoundaryMask.empty(), (0, 0), RED) is None

    def test_idempotent(self):
        """Test a second identical fill changes nothing."""
        mask = create_ring_mask()
        engine = FloodFillEngine()
        first = engine.fill(None, mask, (5, 5), RED)
        second = engine.fill(first, mask, (5, 5), RED)

        assert second is first

    def test_stays_inside_ring_with_existing_paint_outside(self):
        """Test containment: paint outside the ring is untouched."""
        mask = create_ring_mask()
        engine = FloodFillEngine()
        outside = engine.fill(None, mask, (0, 0), BLUE)
        result = engine.fill(outside, mask, (5, 5), RED)

        assert result.get_pixel(0, 0) == BLUE
        assert result.get_pixel(5, 5) == RED
        assert result.get_pixel(1, 1) == RGBA(0, 0, 0, 0)

    def test_existing_paint_stops_fill(self):
        """Test differently colored paint acts as a region edge."""
        mask = BoundaryMask.blank(10, 10)
        overlay = PixelBuffer.allocate(10, 10)
        overlay.rgba[:, 5] = BLUE.as_tuple()
        result = FloodFillEngine().fill(overlay, mask, (2, 2), RED)

        assert result.get_pixel(4, 2) == RED
        assert result.get_pixel(5, 2) == BLUE
        assert result.get_pixel(7, 2) == RGBA(0, 0, 0, 0)

    def test_recolor_region(self):
        """Test filling a painted region with a new color replaces it."""
        mask = create_ring_mask()
        engine = FloodFillEngine()
        red = engine.fill(None, mask, (5, 5), RED)
        blue = engine.fill(red, mask, (5, 5), BLUE)

        assert blue.get_pixel(3, 3) == BLUE

    def test_translucent_fill_premultiplied(self):
        """Test the overlay stores premultiplied fill bytes."""
        mask = BoundaryMask.blank(4, 4)
        result = FloodFillEngine().fill(None, mask, (1, 1), RGBA(255, 0, 0, 128))
        assert result.get_pixel(0, 0) == RGBA(128, 0, 0, 128)

    def test_fractional_start_rounds(self):
        """Test fractional start coordinates round to the nearest pixel."""
        mask = create_ring_mask()
        overlay = PixelBuffer.allocate(10, 10)
        # (1.4, 5) rounds onto the ring; (1.6, 5) rounds inside it
        assert FloodFillEngine().fill(overlay, mask, (1.4, 5), RED) is overlay
        assert FloodFillEngine().fill(overlay, mask, (1.6, 5), RED) is not overlay

    def test_cap_from_settings(self):
        """Test the configured pixel cap bounds the painted area."""
        mask = BoundaryMask.blank(100, 100)
        engine = FloodFillEngine(FillSettings(max_pixels=500))
        result = engine.fill(None, mask, (50, 50), RED)

        assert np.count_nonzero(result.rgba[:, :, 3]) == 500

    def test_input_not_mutated(self):
        """Test the caller's overlay is never modified in place."""
        mask = BoundaryMask.blank(6, 6)
        overlay = PixelBuffer.allocate(6, 6)
        FloodFillEngine().fill(overlay, mask, (3, 3), RED)

        assert overlay.is_transparent()


class TestFillRegion:
    """Tests for the shared fill validation."""

    def test_min_size(self):
        """Test canvases below min_size are rejected."""
        predicate = MaskBoundary(BoundaryMask.blank(2, 2))
        assert fill_region(None, predicate, (0, 0), (255, 0, 0, 255), 10, 100, min_size=3) is None

    def test_start_already_fill_color(self):
        """Test a start pixel already close to the fill color is a no-op."""
        predicate = MaskBoundary(BoundaryMask.blank(4, 4))
        overlay = PixelBuffer.allocate(4, 4)
        overlay.rgba[:, :] = (250, 0, 0, 255)
        assert fill_region(overlay, predicate, (1, 1), (255, 0, 0, 255), 14, 100) is overlay
