"""
Engine configuration for mask derivation, fills, strokes and history.

The tolerance and threshold constants were tuned by eye on real photos
and line art; they are kept configurable rather than derived.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Tuple

from ..models import RGBA, BLACK


@dataclass
class EdgeMaskSettings:
    """Settings for deriving a boundary mask from a bright-edge map."""
    luminance_threshold: int = 65
    dilation_radius: int = 2
    edge_intensity: float = 2.6
    gray_contrast: float = 1.15

    def __post_init__(self):
        """Validate edge mask settings."""
        if not (0 <= self.luminance_threshold <= 255):
            raise ValueError(
                f"luminance_threshold must be between 0 and 255, got {self.luminance_threshold}"
            )
        if self.dilation_radius < 0:
            raise ValueError(f"dilation_radius must be >= 0, got {self.dilation_radius}")
        if self.edge_intensity <= 0:
            raise ValueError(f"edge_intensity must be > 0, got {self.edge_intensity}")
        if self.gray_contrast <= 0:
            raise ValueError(f"gray_contrast must be > 0, got {self.gray_contrast}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "luminance_threshold": self.luminance_threshold,
            "dilation_radius": self.dilation_radius,
            "edge_intensity": self.edge_intensity,
            "gray_contrast": self.gray_contrast,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EdgeMaskSettings":
        """Create from dictionary."""
        return cls(
            luminance_threshold=data.get("luminance_threshold", 65),
            dilation_radius=data.get("dilation_radius", 2),
            edge_intensity=data.get("edge_intensity", 2.6),
            gray_contrast=data.get("gray_contrast", 1.15),
        )


@dataclass
class ColoringPageSettings:
    """
    Look of the generated coloring page.

    Attributes:
        max_dimension: Longest side of the working canvas (never upscaled)
        base_saturation: Saturation of the soft photo base
        base_contrast: Contrast of the soft photo base
        base_brightness: Brightness offset of the soft photo base (-1.0 to 1.0)
        ink_contrast: Contrast applied to the inverted edge layer
        ink_brightness: Brightness offset applied to the inverted edge layer
    """
    max_dimension: int = 1400
    base_saturation: float = 0.15
    base_contrast: float = 1.05
    base_brightness: float = 0.05
    ink_contrast: float = 2.2
    ink_brightness: float = -0.05

    def __post_init__(self):
        """Validate coloring page settings."""
        if self.max_dimension < 1:
            raise ValueError(f"max_dimension must be >= 1, got {self.max_dimension}")
        if self.base_saturation < 0:
            raise ValueError(f"base_saturation must be >= 0, got {self.base_saturation}")
        if self.base_contrast <= 0 or self.ink_contrast <= 0:
            raise ValueError("contrast values must be > 0")
        for name in ("base_brightness", "ink_brightness"):
            value = getattr(self, name)
            if not (-1.0 <= value <= 1.0):
                raise ValueError(f"{name} must be between -1.0 and 1.0, got {value}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "max_dimension": self.max_dimension,
            "base_saturation": self.base_saturation,
            "base_contrast": self.base_contrast,
            "base_brightness": self.base_brightness,
            "ink_contrast": self.ink_contrast,
            "ink_brightness": self.ink_brightness,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColoringPageSettings":
        """Create from dictionary."""
        return cls(
            max_dimension=data.get("max_dimension", 1400),
            base_saturation=data.get("base_saturation", 0.15),
            base_contrast=data.get("base_contrast", 1.05),
            base_brightness=data.get("base_brightness", 0.05),
            ink_contrast=data.get("ink_contrast", 2.2),
            ink_brightness=data.get("ink_brightness", -0.05),
        )


@dataclass
class FillSettings:
    """Mask-constrained bucket fill (photo mode)."""
    tolerance: int = 14
    max_pixels: int = 300_000

    def __post_init__(self):
        """Validate fill settings."""
        if not (0 <= self.tolerance <= 255):
            raise ValueError(f"tolerance must be between 0 and 255, got {self.tolerance}")
        if self.max_pixels < 1:
            raise ValueError(f"max_pixels must be >= 1, got {self.max_pixels}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"tolerance": self.tolerance, "max_pixels": self.max_pixels}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FillSettings":
        """Create from dictionary."""
        return cls(
            tolerance=data.get("tolerance", 14),
            max_pixels=data.get("max_pixels", 300_000),
        )


@dataclass
class KidsFillSettings:
    """
    Base-image sampling bucket fill (kids mode).

    Attributes:
        boundary_tolerance: How close a base pixel must be to boundary_color to stop the fill
        start_tolerance: Tolerance for "already this color" checks on the overlay
        max_pixels: Safety cap on painted pixels
        edge_shrink_radius: Keep paint this many pixels away from the outline (0 disables)
        boundary_color: Outline color in the base image
    """
    boundary_tolerance: int = 40
    start_tolerance: int = 10
    max_pixels: int = 450_000
    edge_shrink_radius: int = 1
    boundary_color: RGBA = BLACK

    def __post_init__(self):
        """Validate kids fill settings."""
        for name in ("boundary_tolerance", "start_tolerance"):
            value = getattr(self, name)
            if not (0 <= value <= 255):
                raise ValueError(f"{name} must be between 0 and 255, got {value}")
        if self.max_pixels < 1:
            raise ValueError(f"max_pixels must be >= 1, got {self.max_pixels}")
        if self.edge_shrink_radius < 0:
            raise ValueError(f"edge_shrink_radius must be >= 0, got {self.edge_shrink_radius}")

        if isinstance(self.boundary_color, str):
            object.__setattr__(self, "boundary_color", RGBA.from_hex(self.boundary_color))
        elif isinstance(self.boundary_color, dict):
            object.__setattr__(self, "boundary_color", RGBA.from_dict(self.boundary_color))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "boundary_tolerance": self.boundary_tolerance,
            "start_tolerance": self.start_tolerance,
            "max_pixels": self.max_pixels,
            "edge_shrink_radius": self.edge_shrink_radius,
            "boundary_color": self.boundary_color.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KidsFillSettings":
        """Create from dictionary."""
        return cls(
            boundary_tolerance=data.get("boundary_tolerance", 40),
            start_tolerance=data.get("start_tolerance", 10),
            max_pixels=data.get("max_pixels", 450_000),
            edge_shrink_radius=data.get("edge_shrink_radius", 1),
            boundary_color=data.get("boundary_color", BLACK),
        )


@dataclass
class StrokeSettings:
    """
    Stroke compositing constants.

    Attributes:
        min_opacity: Floor applied to every user opacity
        rainbow_cycle_length: Pixels of travel per full hue cycle
        rainbow_alpha: Alpha of the main rainbow stroke
        glow_alpha: Alpha of the halo pass drawn behind glow/rainbow strokes
        glow_blur_ratio: Halo blur as a fraction of stroke width
        glow_min_blur: Minimum halo blur in pixels
    """
    min_opacity: float = 0.05
    rainbow_cycle_length: float = 260.0
    rainbow_alpha: float = 0.88
    glow_alpha: float = 0.30
    glow_blur_ratio: float = 0.25
    glow_min_blur: float = 2.0

    def __post_init__(self):
        """Validate stroke settings."""
        if not (0.0 < self.min_opacity <= 1.0):
            raise ValueError(f"min_opacity must be in (0.0, 1.0], got {self.min_opacity}")
        if self.rainbow_cycle_length <= 0:
            raise ValueError(
                f"rainbow_cycle_length must be > 0, got {self.rainbow_cycle_length}"
            )
        for name in ("rainbow_alpha", "glow_alpha"):
            value = getattr(self, name)
            if not (0.0 <= value <= 1.0):
                raise ValueError(f"{name} must be between 0.0 and 1.0, got {value}")
        if self.glow_blur_ratio < 0 or self.glow_min_blur < 0:
            raise ValueError("glow blur values must be >= 0")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "min_opacity": self.min_opacity,
            "rainbow_cycle_length": self.rainbow_cycle_length,
            "rainbow_alpha": self.rainbow_alpha,
            "glow_alpha": self.glow_alpha,
            "glow_blur_ratio": self.glow_blur_ratio,
            "glow_min_blur": self.glow_min_blur,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StrokeSettings":
        """Create from dictionary."""
        return cls(
            min_opacity=data.get("min_opacity", 0.05),
            rainbow_cycle_length=data.get("rainbow_cycle_length", 260.0),
            rainbow_alpha=data.get("rainbow_alpha", 0.88),
            glow_alpha=data.get("glow_alpha", 0.30),
            glow_blur_ratio=data.get("glow_blur_ratio", 0.25),
            glow_min_blur=data.get("glow_min_blur", 2.0),
        )


@dataclass
class HistorySettings:
    """Undo/redo retention."""
    limit: int = 30

    def __post_init__(self):
        """Validate history settings."""
        if self.limit < 1:
            raise ValueError(f"limit must be >= 1, got {self.limit}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"limit": self.limit}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistorySettings":
        """Create from dictionary."""
        return cls(limit=data.get("limit", 30))


_SECTIONS: Tuple[Tuple[str, type], ...] = (
    ("edge_mask", EdgeMaskSettings),
    ("coloring_page", ColoringPageSettings),
    ("fill", FillSettings),
    ("kids_fill", KidsFillSettings),
    ("stroke", StrokeSettings),
    ("history", HistorySettings),
)


@dataclass
class EngineConfig:
    """
    Complete engine configuration.

    Sections may be passed as dictionaries (e.g. straight from YAML) and
    are converted to their settings dataclasses on construction.
    """
    edge_mask: EdgeMaskSettings = field(default_factory=EdgeMaskSettings)
    coloring_page: ColoringPageSettings = field(default_factory=ColoringPageSettings)
    fill: FillSettings = field(default_factory=FillSettings)
    kids_fill: KidsFillSettings = field(default_factory=KidsFillSettings)
    stroke: StrokeSettings = field(default_factory=StrokeSettings)
    history: HistorySettings = field(default_factory=HistorySettings)

    def __post_init__(self):
        """Convert dictionary sections to settings objects."""
        for name, settings_cls in _SECTIONS:
            value = getattr(self, name)
            if isinstance(value, dict):
                object.__setattr__(self, name, settings_cls.from_dict(value))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {name: getattr(self, name).to_dict() for name, _ in _SECTIONS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """Create from dictionary (e.g., from YAML config)."""
        kwargs = {}
        for name, settings_cls in _SECTIONS:
            section = data.get(name)
            if section:
                kwargs[name] = settings_cls.from_dict(section)
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "EngineConfig":
        """Load configuration from YAML file."""
        import yaml

        with open(yaml_path, "r") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Malformed YAML in {yaml_path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping, got {type(data).__name__}")
        data = data.get("colorpage", data)
        if not isinstance(data, dict):
            raise ValueError(f"'colorpage' section must be a mapping, got {type(data).__name__}")

        for name, _ in _SECTIONS:
            section = data.get(name)
            if section is not None and not isinstance(section, dict):
                raise ValueError(f"'{name}' section must be a mapping, got {type(section).__name__}")

        return cls.from_dict(data)

    @classmethod
    def default(cls) -> "EngineConfig":
        """Create default configuration."""
        return cls()
