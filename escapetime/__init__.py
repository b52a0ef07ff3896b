"""
Escape-time fractal engine.

Computes the Mandelbrot set and related escape-time fractals with
Numba-compiled kernels, evaluating row bands on a pool of worker threads.

Quick Start:
    from escapetime import Viewport, render, get_palette, Evaluator
    rgba = render(Viewport.default(800, 600), 256, 4.0,
                  Evaluator.OPTIMIZED, get_palette("Classic"))

Or from command line:
    python -m escapetime --evaluator cosine --palette Cosine

Package Structure:
    - complex_math.py: complex arithmetic on (re, im) float pairs
    - compute.py: evaluators, smooth iteration counts, band kernel
    - viewport.py: pixel <-> complex-plane mapping
    - renderer.py: row-partitioned grid driver
    - colormaps.py: palettes and color mapping
    - config.py: settings file and validated RenderConfig
    - log.py: console logging setup
    - app.py: command line entry point and preview window
"""

from .colormaps import (
    COLORMAPS,
    Palette,
    apply_palette,
    color_for,
    get_palette,
    list_palette_names,
)
from .compute import EscapeGrid, EscapeResult, Evaluator, evaluate, list_evaluator_names
from .config import ConfigurationError, RenderConfig, load_config
from .renderer import MandelbrotRenderer, compute_escape_grid, partition_rows, render
from .viewport import Viewport, complex_to_pixel, pixel_to_complex

__version__ = "1.0.0"
__all__ = [
    "COLORMAPS",
    "ConfigurationError",
    "EscapeGrid",
    "EscapeResult",
    "Evaluator",
    "MandelbrotRenderer",
    "Palette",
    "RenderConfig",
    "Viewport",
    "apply_palette",
    "color_for",
    "complex_to_pixel",
    "compute_escape_grid",
    "evaluate",
    "get_palette",
    "list_evaluator_names",
    "list_palette_names",
    "load_config",
    "partition_rows",
    "pixel_to_complex",
    "render",
]
