"""
Escape-time evaluation using Numba JIT compilation.

This module contains the performance-critical per-point functions. They
handle:
- The three interchangeable evaluators (basic, optimized, cosine)
- Smooth (fractional) iteration counts for banding-free coloring
- Band computation: evaluating a contiguous range of rows into shared arrays

Counting convention:
    z_0 = 0 and z_{n+1} = f(z_n, c). A point escapes at iteration n, the
    smallest n >= 1 with |z_n|² >= escape_radius_squared (a NaN modulus also
    counts as escaped). Escape iterations therefore lie in 1..max_iter.
    A point that has not escaped after max_iter steps is bounded and is
    reported with iteration == max_iter. max_iter == 0 means every point is
    immediately bounded.

Supported evaluators:
- 0: z² + c, no shortcuts (basic)
- 1: z² + c with cardioid / period-2 bulb pre-checks (optimized)
- 2: c·cos(z) (cosine)
"""

import enum
import math
from dataclasses import dataclass

import numpy as np
from numba import jit

from .complex_math import c_add, c_cos, c_mul, c_norm2, c_sqr
from .viewport import axis_coordinate


# Evaluator IDs
EVALUATOR_BASIC = 0      # z² + c
EVALUATOR_OPTIMIZED = 1  # z² + c, interior pre-checks
EVALUATOR_COSINE = 2     # c·cos(z)

DEFAULT_ESCAPE_RADIUS_SQUARED = 4.0

# Interior orbits stay within |z| <= 2, so the cardioid and bulb shortcuts
# only agree with the full loop when the escape radius is at least 2
PRECHECK_MIN_ESCAPE_R2 = 4.0

# Iteration counts are stored in int32 grids
MAX_ITERATIONS = int(np.iinfo(np.int32).max)


class Evaluator(enum.IntEnum):
    """Selectable escape-time algorithm. The value is the kernel's evaluator id."""

    BASIC = EVALUATOR_BASIC
    OPTIMIZED = EVALUATOR_OPTIMIZED
    COSINE = EVALUATOR_COSINE

    @classmethod
    def parse(cls, value):
        """
        Resolve an evaluator from an Evaluator, an int id or a name.

        Raises:
            ValueError if the value names no evaluator
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(
                    f"unknown evaluator {value!r}, expected one of {list_evaluator_names()}"
                ) from None
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"unknown evaluator id {value!r}") from None


def list_evaluator_names():
    """Get list of available evaluator names."""
    return [e.name.lower() for e in Evaluator]


@dataclass(frozen=True)
class EscapeResult:
    """
    Outcome of evaluating a single point.

    Attributes:
        iteration: Escape iteration (1-indexed), or max_iter when bounded
        smooth: Fractional iteration count, in [0, iteration + 1]
        escaped: False when the point stayed bounded
    """

    iteration: int
    smooth: float
    escaped: bool

    @property
    def bounded(self):
        return not self.escaped


@dataclass(frozen=True, eq=False)
class EscapeGrid:
    """
    Per-pixel escape data for a whole viewport, row-major.

    Attributes:
        iterations: (h, w) int32, escape iteration or max_iter when bounded
        smooth: (h, w) float64 fractional iteration counts
        escaped: (h, w) bool, False for bounded points
        max_iterations: Iteration cap used
    """

    iterations: np.ndarray
    smooth: np.ndarray
    escaped: np.ndarray
    max_iterations: int

    @property
    def shape(self):
        return self.iterations.shape

    def values(self, smooth=True):
        """Escape values as float64, smooth or integer counts."""
        if smooth:
            return self.smooth
        return self.iterations.astype(np.float64)


@jit(nopython=True, cache=True)
def in_main_cardioid(cr, ci):
    """Closed-form test for the interior of the main cardioid (boundary excluded)."""
    xq = cr - 0.25
    q = xq * xq + ci * ci
    return q * (q + xq) < 0.25 * ci * ci


@jit(nopython=True, cache=True)
def in_period2_bulb(cr, ci):
    """Closed-form test for the interior of the period-2 disc centred on -1."""
    xp = cr + 1.0
    return xp * xp + ci * ci < 0.0625


@jit(nopython=True, cache=True)
def iterate_function(zr, zi, cr, ci, evaluator_id):
    """
    Apply one iteration of the selected evaluator's map.

    Args:
        zr, zi: Real and imaginary parts of z
        cr, ci: Real and imaginary parts of c
        evaluator_id: Which map to use (see EVALUATOR_* constants)

    Returns:
        (new_zr, new_zi): The next z value
    """
    if evaluator_id == EVALUATOR_COSINE:
        wr, wi = c_cos(zr, zi)
        return c_mul(cr, ci, wr, wi)
    sr, si = c_sqr(zr, zi)
    return c_add(sr, si, cr, ci)


@jit(nopython=True, cache=True)
def get_function_degree(evaluator_id):
    """Degree of the map for smooth coloring. Transcendental maps use 2."""
    return 2.0


@jit(nopython=True, cache=True)
def escape_time(cr, ci, max_iter, escape_r2, evaluator_id):
    """
    Iterate one point.

    Returns:
        (iteration, zn2, escaped) where zn2 is |z|² at the last step taken
    """
    if evaluator_id == EVALUATOR_OPTIMIZED and escape_r2 >= PRECHECK_MIN_ESCAPE_R2:
        if in_main_cardioid(cr, ci) or in_period2_bulb(cr, ci):
            return max_iter, 0.0, False

    zr, zi = 0.0, 0.0
    iteration = 0
    while iteration < max_iter:
        zr, zi = iterate_function(zr, zi, cr, ci, evaluator_id)
        iteration += 1
        zn2 = c_norm2(zr, zi)
        # Written as "not <" so that NaN counts as escaped
        if not zn2 < escape_r2:
            return iteration, zn2, True
    return max_iter, c_norm2(zr, zi), False


@jit(nopython=True, cache=True)
def smooth_iteration(iteration, zn2, escape_r2, degree):
    """
    Continuous iteration count n + 1 - log(log|z_n| / log R) / log d.

    R is the escape radius, floored at 2 so that log R stays positive.
    Non-finite intermediate values fall back to the integer count and the
    result is clamped to [0, n + 1].
    """
    log_escape = 0.5 * np.log(max(escape_r2, 4.0))
    value = float(iteration)
    if zn2 > 1.0 and np.isfinite(zn2):
        log_zn = 0.5 * np.log(zn2)
        nu = np.log(log_zn / log_escape) / np.log(degree)
        value = iteration + 1.0 - nu
        if not np.isfinite(value):
            value = float(iteration)
    return min(max(value, 0.0), iteration + 1.0)


@jit(nopython=True, nogil=True, cache=True)
def compute_escape_band(center_re, center_im, scale, width, height,
                        row_start, row_stop, max_iter, escape_r2, evaluator_id,
                        iterations, smooth, escaped):
    """
    Evaluate rows [row_start, row_stop) of a viewport, writing into shared arrays.

    Each caller owns a disjoint row range, so concurrent calls on the same
    arrays never touch the same element. Releases the GIL.

    Args:
        center_re, center_im: Viewport center
        scale: Plane units per pixel
        width, height: Full image dimensions
        row_start, row_stop: Row range to compute
        max_iter: Maximum iterations
        escape_r2: Squared escape radius
        evaluator_id: Which evaluator to use (see EVALUATOR_* constants)
        iterations, smooth, escaped: (height, width) output arrays
    """
    degree = get_function_degree(evaluator_id)
    for py in range(row_start, row_stop):
        ci = axis_coordinate(py, height, center_im, -scale)
        for px in range(width):
            cr = axis_coordinate(px, width, center_re, scale)
            n, zn2, esc = escape_time(cr, ci, max_iter, escape_r2, evaluator_id)
            iterations[py, px] = n
            escaped[py, px] = esc
            if esc:
                smooth[py, px] = smooth_iteration(n, zn2, escape_r2, degree)
            else:
                smooth[py, px] = max_iter


def check_parameters(max_iterations, escape_radius_squared):
    """
    Validate the numeric render parameters.

    Raises:
        ValueError on a negative or non-integral iteration cap, or a
        non-positive / non-finite squared escape radius
    """
    if isinstance(max_iterations, bool) or not isinstance(max_iterations, (int, np.integer)):
        raise ValueError(f"max_iterations must be an integer, got {max_iterations!r}")
    if max_iterations < 0:
        raise ValueError(f"max_iterations must be >= 0, got {max_iterations}")
    if max_iterations > MAX_ITERATIONS:
        raise ValueError(f"max_iterations must be <= {MAX_ITERATIONS}, got {max_iterations}")
    escape_radius_squared = float(escape_radius_squared)
    if not math.isfinite(escape_radius_squared) or escape_radius_squared <= 0:
        raise ValueError(
            f"escape_radius_squared must be a positive finite number, got {escape_radius_squared}"
        )
    return int(max_iterations), escape_radius_squared


def evaluate(c, max_iterations, escape_radius_squared=DEFAULT_ESCAPE_RADIUS_SQUARED,
             evaluator=Evaluator.BASIC):
    """
    Evaluate escape behaviour for one complex coordinate.

    Args:
        c: Point of the complex plane (anything complex() accepts)
        max_iterations: Iteration cap, >= 0
        escape_radius_squared: Squared escape radius, conventionally 4.0
        evaluator: Evaluator, id or name

    Returns:
        EscapeResult
    """
    max_iterations, escape_radius_squared = check_parameters(max_iterations, escape_radius_squared)
    evaluator = Evaluator.parse(evaluator)
    c = complex(c)

    n, zn2, esc = escape_time(c.real, c.imag, max_iterations, escape_radius_squared, int(evaluator))
    if not esc:
        return EscapeResult(iteration=max_iterations, smooth=float(max_iterations), escaped=False)
    degree = get_function_degree(int(evaluator))
    value = smooth_iteration(n, zn2, escape_radius_squared, degree)
    return EscapeResult(iteration=int(n), smooth=float(value), escaped=True)


def warmup_jit():
    """
    Warm up JIT compilation with a tiny band for every evaluator.

    Call this once at startup to pre-compile the Numba functions,
    avoiding a delay on first actual use.
    """
    iterations = np.zeros((2, 2), dtype=np.int32)
    smooth = np.zeros((2, 2), dtype=np.float64)
    escaped = np.zeros((2, 2), dtype=np.bool_)
    for evaluator in Evaluator:
        compute_escape_band(-0.5, 0.0, 1.0, 2, 2, 0, 2, 10,
                            DEFAULT_ESCAPE_RADIUS_SQUARED, int(evaluator),
                            iterations, smooth, escaped)
