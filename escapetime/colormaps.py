"""
Palettes and the escape-result to RGBA color mapping.

Each palette holds a lookup table of shape (NUM_COLORS, 4) with RGBA values
(uint8). The high resolution allows for smooth interpolation between
adjacent entries. Bounded points always get the palette's interior color.

Two kinds of palette exist:
- linear: t = value / max_iter, clamped to [0, 1]
- periodic: t = (value / period) mod 1, so the gradient repeats every
  `period` iterations regardless of the iteration cap

To add a new palette:
1. Define a create_palette_xxx() function that returns a Palette
2. Add it to the COLORMAPS dictionary at the bottom of this file
"""

from dataclasses import dataclass

import numpy as np
from numba import jit, prange


NUM_COLORS = 4096  # Resolution of the lookup table

BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)
RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
CYAN = (0, 255, 255, 255)
MAGENTA = (255, 0, 255, 255)
YELLOW = (255, 255, 0, 255)


@dataclass(frozen=True, eq=False)
class Palette:
    """
    A pure mapping from escape values to colors.

    Attributes:
        name: Display name
        colors: (NUM_COLORS, 4) uint8 lookup table
        interior: RGBA color of bounded points
        periodic: Repeat the gradient every `period` iterations
        period: Iterations per gradient cycle (periodic palettes only)
    """

    name: str
    colors: np.ndarray
    interior: tuple = BLACK
    periodic: bool = False
    period: float = 64.0

    def __post_init__(self):
        colors = np.ascontiguousarray(self.colors, dtype=np.uint8)
        if colors.ndim != 2 or colors.shape[1] != 4 or colors.shape[0] < 2:
            raise ValueError(f"palette colors must have shape (N >= 2, 4), got {colors.shape}")
        colors.setflags(write=False)
        object.__setattr__(self, "colors", colors)
        if len(self.interior) != 4 or not all(0 <= int(v) <= 255 for v in self.interior):
            raise ValueError(f"interior must be an RGBA tuple of 0..255 values, got {self.interior!r}")
        object.__setattr__(self, "interior", tuple(int(v) for v in self.interior))
        if self.periodic and not self.period > 0:
            raise ValueError(f"period must be positive, got {self.period!r}")

    def with_interior(self, interior):
        return Palette(self.name, self.colors, interior, self.periodic, self.period)

    def kernel_args(self):
        """Arguments consumed by apply_palette_band after the value arrays."""
        return (
            self.colors,
            np.array(self.interior, dtype=np.uint8),
            self.periodic,
            float(self.period),
        )


def linear_gradient(stops, num_colors=NUM_COLORS):
    """
    Evenly spaced linear gradient through RGBA color stops.

    Returns:
        (num_colors, 4) uint8 array
    """
    stops = np.asarray(stops, dtype=np.float64)
    if stops.ndim != 2 or stops.shape[1] != 4 or len(stops) < 2:
        raise ValueError("need at least two RGBA color stops")
    t = np.linspace(0.0, 1.0, num_colors)
    positions = np.linspace(0.0, 1.0, len(stops))
    table = np.empty((num_colors, 4), dtype=np.float64)
    for channel in range(4):
        table[:, channel] = np.interp(t, positions, stops[:, channel])
    return np.clip(np.rint(table), 0, 255).astype(np.uint8)


def cosine_gradient(a, b, c, d, num_colors=NUM_COLORS):
    """
    Periodic gradient color(t) = a + b·cos(2π(c·t + d)) per RGB channel.

    With integer c the first and last entries match, so the table wraps
    seamlessly. Alpha is opaque.
    """
    t = np.linspace(0.0, 1.0, num_colors)[:, None]
    a, b, c, d = (np.asarray(v, dtype=np.float64)[None, :] for v in (a, b, c, d))
    rgb = a + b * np.cos(2.0 * np.pi * (c * t + d))
    table = np.empty((num_colors, 4), dtype=np.uint8)
    table[:, :3] = np.clip(np.rint(rgb * 255.0), 0, 255).astype(np.uint8)
    table[:, 3] = 255
    return table


def create_palette_classic():
    """
    Classic: white -> black -> green -> blue -> yellow.

    Five evenly spaced stops; the default palette.
    """
    return Palette("Classic", linear_gradient([WHITE, BLACK, GREEN, BLUE, YELLOW]))


def create_palette_hot():
    """
    Hot: black -> red -> orange -> yellow -> white.

    Classic "fire" look. Uses a power curve to spend more time in the
    bright colors.
    """
    t = np.linspace(0.0, 1.0, NUM_COLORS) ** 0.8
    colors = np.empty((NUM_COLORS, 4), dtype=np.uint8)
    colors[:, 0] = (255 * np.minimum(1, t * 2.5)).astype(np.uint8)
    colors[:, 1] = (255 * np.clip((t - 0.4) * 2.5, 0, 1)).astype(np.uint8)
    colors[:, 2] = (255 * np.clip((t - 0.7) * 3.3, 0, 1)).astype(np.uint8)
    colors[:, 3] = 255
    return Palette("Hot", colors)


def create_palette_ocean():
    """Ocean: deep blue -> cyan -> white."""
    t = np.linspace(0.0, 1.0, NUM_COLORS)
    colors = np.empty((NUM_COLORS, 4), dtype=np.uint8)
    colors[:, 0] = (255 * np.clip((t - 0.5) * 2, 0, 1)).astype(np.uint8)
    colors[:, 1] = (255 * t).astype(np.uint8)
    colors[:, 2] = (50 + 205 * t).astype(np.uint8)
    colors[:, 3] = 255
    return Palette("Ocean", colors)


def create_palette_grayscale():
    """Grayscale: black -> white. Good for seeing raw iteration structure."""
    return Palette("Grayscale", linear_gradient([BLACK, WHITE]))


def create_palette_rainbow():
    """Rainbow: one full hue rotation, repeating every 32 iterations."""
    return Palette(
        "Rainbow",
        linear_gradient([RED, YELLOW, GREEN, CYAN, BLUE, MAGENTA, RED]),
        periodic=True,
        period=32.0,
    )


def create_palette_cosine():
    """Cosine: smooth blue/orange bands driven by a cosine per channel."""
    return Palette(
        "Cosine",
        cosine_gradient((0.5, 0.5, 0.5), (0.5, 0.5, 0.5), (1.0, 1.0, 1.0), (0.0, 0.10, 0.20)),
        periodic=True,
        period=48.0,
    )


@jit(nopython=True, cache=True)
def palette_position(value, max_iter, periodic, period):
    """Normalized table position in [0, 1]. NaN maps to 0."""
    if periodic:
        t = (value / period) % 1.0
    elif max_iter > 0:
        t = value / max_iter
    else:
        t = 0.0
    if not t == t:
        t = 0.0
    return min(max(t, 0.0), 1.0)


@jit(nopython=True, nogil=True, cache=True)
def apply_palette_band(values, escaped, max_iter, colormap, interior, periodic, period,
                       row_start, row_stop, out):
    """
    Color rows [row_start, row_stop) with linear interpolation between
    adjacent table entries.

    Args:
        values: (h, w) float64 escape values (smooth or integer counts)
        escaped: (h, w) bool, False for bounded points
        max_iter: Maximum iteration value
        colormap: (N, 4) uint8 lookup table
        interior: (4,) uint8 color of bounded points
        periodic, period: Palette repetition settings
        row_start, row_stop: Row range to color
        out: (h, w, 4) uint8 output, modified in place
    """
    width = values.shape[1]
    num_colors = colormap.shape[0]
    for py in range(row_start, row_stop):
        for px in range(width):
            if not escaped[py, px]:
                for ch in range(4):
                    out[py, px, ch] = interior[ch]
                continue
            t = palette_position(values[py, px], max_iter, periodic, period)
            fidx = t * (num_colors - 1)
            idx0 = int(fidx)
            idx1 = min(idx0 + 1, num_colors - 1)
            frac = fidx - idx0
            for ch in range(4):
                out[py, px, ch] = np.uint8(colormap[idx0, ch] * (1.0 - frac) + colormap[idx1, ch] * frac)


@jit(nopython=True, parallel=True, cache=True)
def _apply_palette_parallel(values, escaped, max_iter, colormap, interior, periodic, period, out):
    height = values.shape[0]
    for py in prange(height):
        apply_palette_band(values, escaped, max_iter, colormap, interior, periodic, period,
                           py, py + 1, out)


def apply_palette(grid, max_iterations, palette, smooth=True):
    """
    Color a whole EscapeGrid.

    Args:
        grid: EscapeGrid from compute_escape_grid
        max_iterations: Iteration cap used for the render
        palette: Palette
        smooth: Color by fractional iteration counts

    Returns:
        (h, w, 4) uint8 RGBA array
    """
    values = np.ascontiguousarray(grid.values(smooth), dtype=np.float64)
    escaped = np.ascontiguousarray(grid.escaped, dtype=np.bool_)
    if values.shape != escaped.shape or values.ndim != 2:
        raise ValueError(f"shape mismatch: {values.shape} vs {escaped.shape}")
    out = np.empty(values.shape + (4,), dtype=np.uint8)
    _apply_palette_parallel(values, escaped, int(max_iterations), *palette.kernel_args(), out)
    return out


def color_for(result, max_iterations, palette=None, smooth=True):
    """
    Color of a single EscapeResult.

    Uses the same kernel as full renders, so a pixel and its color_for
    value always agree.

    Returns:
        (r, g, b, a) tuple of ints in 0..255
    """
    if palette is None:
        palette = get_default_palette()
    value = result.smooth if smooth else float(result.iteration)
    values = np.array([[value]], dtype=np.float64)
    escaped = np.array([[result.escaped]], dtype=np.bool_)
    out = np.empty((1, 1, 4), dtype=np.uint8)
    apply_palette_band(values, escaped, int(max_iterations), *palette.kernel_args(), 0, 1, out)
    return tuple(int(v) for v in out[0, 0])


# Registry of all available palettes.
# Keys are display names, values are factory functions.
COLORMAPS = {
    'Classic': create_palette_classic,
    'Hot': create_palette_hot,
    'Ocean': create_palette_ocean,
    'Grayscale': create_palette_grayscale,
    'Rainbow': create_palette_rainbow,
    'Cosine': create_palette_cosine,
}


def get_palette(name):
    """
    Get a palette by name (case-insensitive).

    Raises:
        KeyError if name not found
    """
    for key, factory in COLORMAPS.items():
        if key.lower() == str(name).lower():
            return factory()
    raise KeyError(name)


def get_default_palette():
    """Get the default palette (Classic)."""
    return create_palette_classic()


def list_palette_names():
    """Get list of available palette names."""
    return list(COLORMAPS.keys())
