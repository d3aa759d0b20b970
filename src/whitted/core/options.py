"""Render options.

RenderOptions collects every parameter of a render that is not part of the
scene: image size, field of view, recursion depth, background color and
the bias used to offset secondary ray origins.

Example:
    >>> from whitted.core.options import RenderOptions
    >>> options = RenderOptions(width=320, height=240, fov=60.0)
    >>> options.validate()
"""

from dataclasses import asdict, dataclass
from typing import Any

# Largest supported image dimension (framebuffer is preallocated)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Deepest supported recursion (bounded by the shading stack capacity)
MAX_RECURSION_DEPTH = 32


@dataclass
class RenderOptions:
    """Configuration for a render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        fov: Field of view in degrees.
        max_depth: Maximum number of reflection/refraction bounces.
        background_color: Color returned by rays that hit nothing (RGB).
        bias: Distance secondary ray origins are pushed off the surface.
    """

    width: int = 1600
    height: int = 1600
    fov: float = 90.0
    max_depth: int = 5
    background_color: tuple[float, float, float] = (0.235294, 0.67451, 0.843137)
    bias: float = 1e-5

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    def validate(self) -> None:
        """Check that the options describe a renderable image.

        Raises:
            ValueError: If any option is out of range.
        """
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if not 0.0 < self.fov < 180.0:
            raise ValueError(f"Field of view must be in (0, 180) degrees, got {self.fov}")
        if self.max_depth < 0 or self.max_depth > MAX_RECURSION_DEPTH:
            raise ValueError(
                f"max_depth must be in [0, {MAX_RECURSION_DEPTH}], got {self.max_depth}"
            )
        if len(self.background_color) != 3:
            raise ValueError("Background color must have 3 components")
        if self.bias <= 0.0:
            raise ValueError(f"Bias must be positive, got {self.bias}")

    def to_dict(self) -> dict[str, Any]:
        """Export the options to a JSON-compatible dictionary."""
        data = asdict(self)
        data["background_color"] = list(self.background_color)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderOptions":
        """Build options from a dictionary; missing keys keep their defaults."""
        defaults = cls()
        color = data.get("background_color", defaults.background_color)
        return cls(
            width=int(data.get("width", defaults.width)),
            height=int(data.get("height", defaults.height)),
            fov=float(data.get("fov", defaults.fov)),
            max_depth=int(data.get("max_depth", defaults.max_depth)),
            background_color=(color[0], color[1], color[2]),
            bias=float(data.get("bias", defaults.bias)),
        )
