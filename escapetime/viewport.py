"""
Mapping between output pixels and the complex plane.

A Viewport is a center, a scale (plane units per pixel, shared by both
axes so the image is never stretched) and the output size. Pixel (0, 0) is
the top-left corner; the imaginary axis points up.
"""

import math
from dataclasses import dataclass

import numpy as np
from numba import jit


# Classic whole-set overview: x in [-2, 1], y in [-1.5, 1.5]
DEFAULT_BOUNDS = (-2.0, 1.0, -1.5, 1.5)  # x_min, x_max, y_min, y_max


@jit(nopython=True, cache=True)
def axis_coordinate(p, size, center, scale):
    """
    Map a pixel index on one axis to a plane coordinate.

    A single-pixel axis maps straight to the center. Pass a negative scale
    for the vertical axis.
    """
    if size == 1:
        return center
    return center + (p - size / 2.0) * scale


@dataclass(frozen=True)
class Viewport:
    """
    Immutable pixel-to-plane mapping for one render.

    Attributes:
        center: Complex coordinate shown at pixel (width/2, height/2)
        scale: Plane units per pixel, > 0
        width, height: Output dimensions in pixels, > 0

    Raises:
        ValueError if any attribute violates its bound
    """

    center: complex
    scale: float
    width: int
    height: int

    def __post_init__(self):
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
            object.__setattr__(self, name, int(value))
        center = complex(self.center)
        if not (math.isfinite(center.real) and math.isfinite(center.imag)):
            raise ValueError(f"center must be finite, got {center!r}")
        scale = float(self.scale)
        if not math.isfinite(scale) or scale <= 0:
            raise ValueError(f"scale must be a positive finite number, got {self.scale!r}")
        # Normalize types on the frozen instance
        object.__setattr__(self, "center", center)
        object.__setattr__(self, "scale", scale)

    @classmethod
    def from_bounds(cls, x_min, x_max, y_min, y_max, width, height):
        """
        Build the viewport that fits a plane rectangle into width x height.

        The larger of the two required scales is used so the whole
        rectangle stays visible without distortion.
        """
        if x_max <= x_min or y_max <= y_min:
            raise ValueError(f"empty bounds: {(x_min, x_max, y_min, y_max)}")
        if width <= 0 or height <= 0:
            raise ValueError(f"width and height must be positive, got {width}x{height}")
        scale = max((x_max - x_min) / width, (y_max - y_min) / height)
        center = complex((x_min + x_max) / 2.0, (y_min + y_max) / 2.0)
        return cls(center=center, scale=scale, width=width, height=height)

    @classmethod
    def default(cls, width, height):
        """The classic whole-set view."""
        return cls.from_bounds(*DEFAULT_BOUNDS, width, height)

    @property
    def aspect(self):
        return self.width / self.height

    @property
    def bounds(self):
        """(x_min, x_max, y_min, y_max) of the plane area covered by the image."""
        half_w = self.width * self.scale / 2.0
        half_h = self.height * self.scale / 2.0
        c = self.center
        return (c.real - half_w, c.real + half_w, c.imag - half_h, c.imag + half_h)

    def zoomed(self, factor, px=None, py=None):
        """
        Return a viewport zoomed by factor around a pixel.

        factor > 1 zooms in. The pixel defaults to the image center and
        becomes the new center.
        """
        if not factor > 0 or not math.isfinite(factor):
            raise ValueError(f"zoom factor must be a positive finite number, got {factor!r}")
        if px is None:
            px = self.width / 2.0
        if py is None:
            py = self.height / 2.0
        return Viewport(
            center=pixel_to_complex(px, py, self),
            scale=self.scale / factor,
            width=self.width,
            height=self.height,
        )

    def translated(self, dx, dy):
        """Return a viewport shifted by (dx, dy) pixels."""
        shift = complex(dx * self.scale, -dy * self.scale)
        return Viewport(center=self.center + shift, scale=self.scale,
                        width=self.width, height=self.height)

    def resized(self, width, height):
        """Same center and scale, new output size."""
        return Viewport(center=self.center, scale=self.scale, width=width, height=height)


def pixel_to_complex(px, py, viewport):
    """
    Map a pixel coordinate to the complex plane.

    Args:
        px, py: Pixel coordinates (0-indexed, origin top-left); may be fractional
        viewport: Viewport to map through

    Returns:
        complex
    """
    c = viewport.center
    re = axis_coordinate(float(px), viewport.width, c.real, viewport.scale)
    im = axis_coordinate(float(py), viewport.height, c.imag, -viewport.scale)
    return complex(re, im)


def complex_to_pixel(c, viewport):
    """
    Inverse of pixel_to_complex, up to rounding.

    A single-pixel axis always maps back to pixel 0.

    Returns:
        (px, py) as floats
    """
    c = complex(c)
    center = viewport.center
    if viewport.width == 1:
        px = 0.0
    else:
        px = (c.real - center.real) / viewport.scale + viewport.width / 2.0
    if viewport.height == 1:
        py = 0.0
    else:
        py = (center.imag - c.imag) / viewport.scale + viewport.height / 2.0
    return px, py
