"""
Single-document paint session driven by gesture phases.

The presentation layer resolves touches to pixel-space points and calls
begin/move/end; the session routes them to the fill engine or the stroke
compositor, keeps the live overlay and commits history snapshots.
"""

import logging
from enum import Enum
from typing import Optional

from .coloring_page import ColoringPageResult
from .config.engine_config import EngineConfig
from .fill.engine import FloodFillEngine, KidsFloodFillEngine
from .history import OverlayHistory, snapshot_to_overlay
from .models import BLACK, RGBA, WHITE, BlendMode, BoundaryMask, PixelBuffer, Point, PointLike, Tool, as_point
from .render import blank_base, composite, render_preview, transparent_canvas
from .stroke.compositor import StrokeCompositor
from .stroke.rainbow import advance_rainbow_phase

logger = logging.getLogger(__name__)

# A bucket tap that drifts this far (px) is treated as a drag and ignored
BUCKET_DRAG_THRESHOLD = 2.0

# Hue nudge for the first point of a rainbow gesture
RAINBOW_START_STEP = 0.01

_STROKE_MODES = {
    Tool.BRUSH: BlendMode.NORMAL,
    Tool.WATERCOLOR: BlendMode.COPY,
    Tool.RAINBOW: BlendMode.RAINBOW,
    Tool.ERASER: BlendMode.ERASE,
}


class SessionMode(Enum):
    """Which bucket engine the session uses."""
    PHOTO = "photo"  # Precomputed boundary mask
    KIDS = "kids"  # Outline sampled from the base image


class PaintSession:
    """
    One coloring document: base image, optional mask, overlay and history.

    Calls are synchronous and must not overlap; one gesture finishes
    before the next begins.

    Example:
        >>> session = PaintSession.from_coloring_page(page)
        >>> session.tool = Tool.BUCKET
        >>> session.begin((120, 80)); session.end()
        >>> session.undo()
    """

    def __init__(
        self,
        base_image: PixelBuffer,
        mask: Optional[BoundaryMask] = None,
        mode: SessionMode = SessionMode.PHOTO,
        config: Optional[EngineConfig] = None,
        overlay: Optional[PixelBuffer] = None,
    ):
        """
        Initialize session.

        Args:
            base_image: Display image the overlay is painted over
            mask: Boundary mask (photo mode); blank mask when omitted
            mode: Bucket engine selection
            config: Engine configuration
            overlay: Previously saved overlay to resume from
        """
        self.config = config or EngineConfig.default()
        self.base_image = base_image
        self.mode = mode

        if mask is None or mask.is_empty:
            mask = BoundaryMask.blank(base_image.width, base_image.height)
        self.mask = mask

        self.tool = Tool.BRUSH
        self.color: RGBA = BLACK
        self.width = 12.0
        self.opacity = 1.0
        self.rainbow_phase = 0.0

        self.overlay = overlay
        self.history = OverlayHistory(self.config.history.limit, overlay)

        self.fill_engine = FloodFillEngine(self.config.fill)
        self.kids_fill_engine = KidsFloodFillEngine(self.config.kids_fill)
        self.compositor = StrokeCompositor(self.config.stroke)

        self._gesture_start: Optional[Point] = None
        self._last_point: Optional[Point] = None
        self._bucket_done = False

    @classmethod
    def from_coloring_page(
        cls,
        page: ColoringPageResult,
        config: Optional[EngineConfig] = None,
        overlay: Optional[PixelBuffer] = None,
    ) -> "PaintSession":
        """Photo-mode session over a generated coloring page."""
        return cls(page.display_image, page.mask, SessionMode.PHOTO, config, overlay)

    @classmethod
    def blank(
        cls,
        width: int = 2048,
        height: int = 2048,
        background: RGBA = WHITE,
        config: Optional[EngineConfig] = None,
    ) -> "PaintSession":
        """Kids-mode session on plain paper."""
        return cls(blank_base(width, height, background), mode=SessionMode.KIDS, config=config)

    @property
    def canvas_size(self):
        """(width, height) used for all pixel-space math."""
        return self.mask.size

    @property
    def in_gesture(self) -> bool:
        return self._gesture_start is not None

    # ------------------------------------------------------------------
    # Gesture phases
    # ------------------------------------------------------------------

    def begin(self, point: PointLike) -> Optional[PixelBuffer]:
        """Start a gesture at `point`."""
        p = as_point(point)
        self._gesture_start = p
        self._last_point = None
        self._bucket_done = False
        self._apply(p)
        return self.overlay

    def move(self, point: PointLike) -> Optional[PixelBuffer]:
        """Continue the current gesture."""
        if self._gesture_start is None:
            return self.begin(point)
        self._apply(as_point(point))
        return self.overlay

    def end(self) -> Optional[PixelBuffer]:
        """Finish the gesture; strokes commit one snapshot here."""
        if self._gesture_start is None:
            return self.overlay

        self._gesture_start = None
        self._last_point = None

        # Bucket already committed when it filled
        if self.tool != Tool.BUCKET:
            snapshot = self.overlay
            if snapshot is not None and snapshot.is_transparent():
                snapshot = None
            self.history.commit(snapshot)
        return self.overlay

    # ------------------------------------------------------------------
    # Document actions
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Remove all paint (undoable)."""
        self.overlay = None
        self.history.commit(None)

    def undo(self) -> Optional[PixelBuffer]:
        snapshot = self.history.undo()
        if snapshot is not None:
            self.overlay = snapshot_to_overlay(snapshot)
        return self.overlay

    def redo(self) -> Optional[PixelBuffer]:
        snapshot = self.history.redo()
        if snapshot is not None:
            self.overlay = snapshot_to_overlay(snapshot)
        return self.overlay

    def composite(self) -> PixelBuffer:
        """Base image with the overlay on top (what the user sees)."""
        return composite(self.base_image, self.overlay)

    def preview(self, max_edge: int = 420) -> Optional[PixelBuffer]:
        return render_preview(self.base_image, self.overlay, max_edge)

    # ------------------------------------------------------------------
    # Tool routing
    # ------------------------------------------------------------------

    def _apply(self, point: Point) -> None:
        width, height = self.canvas_size
        if self.overlay is None:
            self.overlay = transparent_canvas(width, height)

        if self.tool == Tool.BUCKET:
            self._apply_bucket(point)
            return

        mode = _STROKE_MODES[self.tool]
        start = self._last_point or point

        if self.tool == Tool.RAINBOW:
            if self._last_point is not None:
                self.rainbow_phase = advance_rainbow_phase(
                    self.rainbow_phase,
                    self._last_point,
                    point,
                    self.config.stroke.rainbow_cycle_length,
                )
            else:
                self.rainbow_phase = (self.rainbow_phase + RAINBOW_START_STEP) % 1.0

        self.overlay = self.compositor.draw(
            self.overlay,
            start,
            point,
            self.color,
            self.width,
            self.opacity,
            (width, height),
            mode,
            self.rainbow_phase,
        )
        self._last_point = point

    def _apply_bucket(self, point: Point) -> None:
        if self._bucket_done:
            return
        if self._gesture_start is not None and \
                point.distance_to(self._gesture_start) >= BUCKET_DRAG_THRESHOLD:
            return

        self._bucket_done = True
        self._last_point = None

        if self.mode == SessionMode.KIDS:
            filled = self.kids_fill_engine.fill(
                self.base_image,
                self.overlay,
                point,
                self.color,
                self.opacity,
                self.canvas_size,
            )
        else:
            filled = self.fill_engine.fill(
                self.overlay,
                self.mask,
                point,
                self.color.with_opacity(self.opacity, self.config.stroke.min_opacity),
                self.canvas_size,
            )

        if filled is self.overlay:
            logger.debug(f"Bucket at ({point.x:.1f}, {point.y:.1f}) filled nothing")
            return

        self.overlay = filled
        self.history.commit(self.overlay)
