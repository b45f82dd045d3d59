"""
Core pixel data structures shared by every paint tool.

PixelBuffer is the overlay/display buffer (RGBA8, premultiplied alpha),
BoundaryMask marks impassable line-art pixels, RGBA and Point are the
small value types tools are invoked with.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

import cv2
import numpy as np


class Tool(Enum):
    """Paint tools a user can pick."""
    BUCKET = "bucket"
    BRUSH = "brush"
    WATERCOLOR = "watercolor"
    RAINBOW = "rainbow"
    ERASER = "eraser"


class BlendMode(Enum):
    """
    Compositing policy for a single stroke segment.

    NORMAL accumulates with source-over, ERASE punches transparency,
    COPY replaces destination pixels outright (no build-up on overlap),
    RAINBOW and GLOW add a soft halo pass behind the main stroke.
    """
    NORMAL = "normal"
    ERASE = "erase"
    COPY = "copy"
    RAINBOW = "rainbow"
    GLOW = "glow"


@dataclass(frozen=True)
class RGBA:
    """
    8-bit color with straight (non-premultiplied) alpha.

    Attributes:
        r: Red channel (0-255)
        g: Green channel (0-255)
        b: Blue channel (0-255)
        a: Alpha channel (0-255)
    """
    r: int
    g: int
    b: int
    a: int = 255

    def __post_init__(self):
        """Validate channel ranges."""
        for name in ("r", "g", "b", "a"):
            value = getattr(self, name)
            if not 0 <= int(value) <= 255:
                raise ValueError(f"{name} must be between 0 and 255, got {value}")

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.r, self.g, self.b, self.a)

    def with_opacity(self, opacity: float, minimum: float = 0.05) -> "RGBA":
        """
        Scale alpha by a tool opacity, clamped to [minimum, 1.0].

        The floor keeps a fully transparent brush from being selected
        by accident.
        """
        clamped = max(minimum, min(float(opacity), 1.0))
        return RGBA(self.r, self.g, self.b, int(self.a * clamped))

    def premultiplied(self) -> Tuple[int, int, int, int]:
        """Bytes as stored in a premultiplied buffer."""
        if self.a == 255:
            return self.as_tuple()
        scale = self.a / 255.0
        return (
            int(round(self.r * scale)),
            int(round(self.g * scale)),
            int(round(self.b * scale)),
            self.a,
        )

    def is_close(self, other: "RGBA", tolerance: int) -> bool:
        """Per-channel absolute difference test."""
        return channels_close(self.as_tuple(), other.as_tuple(), tolerance)

    @classmethod
    def from_hex(cls, value: str) -> "RGBA":
        """
        Parse '#rrggbb' or '#rrggbbaa'.

        Raises:
            ValueError: If the string is not a valid hex color
        """
        text = value.strip().lstrip("#")
        if len(text) not in (6, 8):
            raise ValueError(f"Invalid hex color: {value!r}")
        try:
            channels = [int(text[i:i + 2], 16) for i in range(0, len(text), 2)]
        except ValueError:
            raise ValueError(f"Invalid hex color: {value!r}")
        return cls(*channels)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"r": self.r, "g": self.g, "b": self.b, "a": self.a}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RGBA":
        """Create from dictionary."""
        return cls(
            r=data.get("r", 0),
            g=data.get("g", 0),
            b=data.get("b", 0),
            a=data.get("a", 255),
        )


BLACK = RGBA(0, 0, 0, 255)
WHITE = RGBA(255, 255, 255, 255)
TRANSPARENT = RGBA(0, 0, 0, 0)


def channels_close(a: Tuple[int, ...], b: Tuple[int, ...], tolerance: int) -> bool:
    """True when every channel differs by at most `tolerance`."""
    return all(abs(int(x) - int(y)) <= tolerance for x, y in zip(a, b))


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


@dataclass(frozen=True)
class Point:
    """A resolved pixel-space coordinate (may be fractional)."""
    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def rounded(self) -> Tuple[int, int]:
        """Nearest integer pixel, rounding halves away from zero."""
        return (_round_half_away(self.x), _round_half_away(self.y))

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


PointLike = Union[Point, Tuple[float, float]]


def as_point(value: PointLike) -> Point:
    """Accept a Point or an (x, y) pair."""
    if isinstance(value, Point):
        return value
    x, y = value
    return Point(float(x), float(y))


class PixelBuffer:
    """
    Width x height RGBA8 buffer with premultiplied alpha.

    Rows may be padded: `pixels` has shape (height, bytes_per_row) and only
    the first width*4 bytes of each row are pixel data.

    Example:
        >>> overlay = PixelBuffer.allocate(640, 480)
        >>> overlay.rgba[10, 20] = (255, 0, 0, 255)
    """

    __slots__ = ("width", "height", "bytes_per_row", "pixels")

    def __init__(
        self,
        width: int,
        height: int,
        pixels: np.ndarray,
        bytes_per_row: Optional[int] = None,
    ):
        """
        Wrap an existing uint8 row array.

        Args:
            width: Width in pixels
            height: Height in pixels
            pixels: uint8 array of shape (height, bytes_per_row)
            bytes_per_row: Row stride in bytes (default width * 4)

        Raises:
            ValueError: If the dimensions or array do not satisfy the layout invariants
        """
        if bytes_per_row is None:
            bytes_per_row = width * 4
        if width < 0 or height < 0:
            raise ValueError(f"dimensions must be >= 0, got {width}x{height}")
        if bytes_per_row < width * 4:
            raise ValueError(
                f"bytes_per_row must be >= width * 4 ({width * 4}), got {bytes_per_row}"
            )
        if pixels.dtype != np.uint8:
            raise ValueError(f"pixels must be uint8, got {pixels.dtype}")
        if pixels.size != height * bytes_per_row:
            raise ValueError(
                f"pixels must hold height * bytes_per_row = {height * bytes_per_row} bytes, "
                f"got {pixels.size}"
            )
        self.width = int(width)
        self.height = int(height)
        self.bytes_per_row = int(bytes_per_row)
        self.pixels = pixels.reshape(height, bytes_per_row)

    @classmethod
    def allocate(cls, width: int, height: int) -> "PixelBuffer":
        """Zero-filled (fully transparent) buffer."""
        return cls(width, height, np.zeros((height, width * 4), dtype=np.uint8))

    @classmethod
    def from_rgba(cls, rgba: np.ndarray) -> "PixelBuffer":
        """Copy an (h, w, 4) premultiplied uint8 array into a new buffer."""
        height, width = rgba.shape[:2]
        data = np.ascontiguousarray(rgba, dtype=np.uint8).reshape(height, width * 4).copy()
        return cls(width, height, data)

    @classmethod
    def from_bytes(
        cls,
        width: int,
        height: int,
        raw: bytes,
        bytes_per_row: Optional[int] = None,
    ) -> "PixelBuffer":
        """Create from raw premultiplied row bytes."""
        data = np.frombuffer(raw, dtype=np.uint8).copy()
        return cls(width, height, data, bytes_per_row)

    @classmethod
    def from_image(cls, image: Optional[np.ndarray]) -> Optional["PixelBuffer"]:
        """
        Rasterize a cv2 image (BGR, BGRA or grayscale) into a premultiplied buffer.

        Args:
            image: Image as returned by cv2.imread

        Returns:
            New PixelBuffer, or None if the image cannot be rasterized
        """
        if image is None or not isinstance(image, np.ndarray) or image.size == 0:
            return None
        if image.dtype != np.uint8:
            return None

        if image.ndim == 2:
            rgba = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
        elif image.ndim == 3 and image.shape[2] == 3:
            rgba = cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
        elif image.ndim == 3 and image.shape[2] == 4:
            rgba = premultiply(cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA))
        else:
            return None

        return cls.from_rgba(rgba)

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height)."""
        return (self.width, self.height)

    @property
    def rgba(self) -> np.ndarray:
        """Writable (height, width, 4) view of the pixel data."""
        return self.pixels[:, : self.width * 4].reshape(self.height, self.width, 4)

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_pixel(self, x: int, y: int) -> RGBA:
        """
        Stored (premultiplied) channels at (x, y).

        Raises:
            IndexError: If (x, y) is outside the buffer
        """
        if not self.contains(x, y):
            raise IndexError(f"({x}, {y}) outside {self.width}x{self.height} buffer")
        r, g, b, a = (int(v) for v in self.rgba[y, x])
        return RGBA(r, g, b, a)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.width, self.height, self.pixels.copy(), self.bytes_per_row)

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()

    def to_bgra(self) -> np.ndarray:
        """Straight-alpha BGRA image suitable for cv2.imwrite."""
        return cv2.cvtColor(unpremultiply(self.rgba), cv2.COLOR_RGBA2BGRA)

    def is_transparent(self) -> bool:
        return not np.any(self.rgba[:, :, 3])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.size == other.size and np.array_equal(self.rgba, other.rgba)

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height}, bytes_per_row={self.bytes_per_row})"


def premultiply(rgba: np.ndarray) -> np.ndarray:
    """Premultiply an (h, w, 4) straight-alpha uint8 array."""
    out = rgba.astype(np.float32)
    alpha = out[:, :, 3:4] / 255.0
    out[:, :, :3] *= alpha
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def unpremultiply(rgba: np.ndarray) -> np.ndarray:
    """Inverse of premultiply; fully transparent pixels stay zero."""
    out = rgba.astype(np.float32)
    alpha = out[:, :, 3:4]
    safe = np.where(alpha > 0, alpha, 1.0)
    out[:, :, :3] = np.where(alpha > 0, out[:, :, :3] * 255.0 / safe, 0.0)
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


class BoundaryMask:
    """
    Binary per-pixel map of impassable line-art pixels.

    Out-of-bounds queries always report a boundary so fills can never
    escape the canvas through bad coordinates.
    """

    __slots__ = ("width", "height", "bits")

    def __init__(self, bits: np.ndarray):
        """
        Args:
            bits: (height, width) array; non-zero marks a boundary pixel
        """
        if bits.ndim != 2:
            raise ValueError(f"bits must be 2-dimensional, got shape {bits.shape}")
        frozen = np.ascontiguousarray(bits, dtype=bool).copy()
        frozen.setflags(write=False)
        self.bits = frozen
        self.height, self.width = frozen.shape

    @classmethod
    def empty(cls) -> "BoundaryMask":
        """Zero-sized mask returned when a source cannot be rasterized."""
        return cls(np.zeros((0, 0), dtype=bool))

    @classmethod
    def blank(cls, width: int, height: int) -> "BoundaryMask":
        """All-false mask (boundary-free canvas)."""
        return cls(np.zeros((height, width), dtype=bool))

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @property
    def coverage_ratio(self) -> float:
        """Fraction of pixels marked as boundary."""
        if self.is_empty:
            return 0.0
        return float(np.count_nonzero(self.bits)) / self.bits.size

    def is_boundary(self, x: int, y: int) -> bool:
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return True
        return bool(self.bits[y, x])

    def to_image(self) -> np.ndarray:
        """uint8 image with boundaries at 255, others 0."""
        return self.bits.astype(np.uint8) * 255

    def to_dict(self) -> Dict[str, Any]:
        """Summary for JSON output."""
        return {
            "width": self.width,
            "height": self.height,
            "boundary_pixels": int(np.count_nonzero(self.bits)),
            "coverage_ratio": round(self.coverage_ratio, 4),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoundaryMask):
            return NotImplemented
        return np.array_equal(self.bits, other.bits)

    def __repr__(self) -> str:
        return f"BoundaryMask({self.width}x{self.height})"
