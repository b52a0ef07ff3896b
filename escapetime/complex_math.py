"""
Complex arithmetic on (re, im) float pairs.

The escape-time kernels never touch Python complex objects: every value is
carried as two float64 numbers and every operation returns a new pair. All
functions are pure and total over finite inputs. Overflow to infinity is
allowed and propagates, so the kernels classify it as an escape.

Squared modulus (c_norm2) is used everywhere instead of the modulus to keep
the square root off the hot path.
"""

import numpy as np
from numba import jit


# cosh/sinh overflow float64 a little above 710
HYPERBOLIC_CLAMP = 700.0


@jit(nopython=True, cache=True)
def c_add(ar, ai, br, bi):
    """a + b"""
    return ar + br, ai + bi


@jit(nopython=True, cache=True)
def c_sub(ar, ai, br, bi):
    """a - b"""
    return ar - br, ai - bi


@jit(nopython=True, cache=True)
def c_mul(ar, ai, br, bi):
    """a * b"""
    return ar * br - ai * bi, ar * bi + ai * br


@jit(nopython=True, cache=True)
def c_sqr(zr, zi):
    """z², one multiplication cheaper than c_mul(z, z)."""
    return zr * zr - zi * zi, 2.0 * zr * zi


@jit(nopython=True, cache=True)
def c_scale(zr, zi, k):
    """z * k for a real k."""
    return zr * k, zi * k


@jit(nopython=True, cache=True)
def c_conj(zr, zi):
    return zr, -zi


@jit(nopython=True, cache=True)
def c_norm2(zr, zi):
    """Squared modulus |z|². Never negative for finite input."""
    return zr * zr + zi * zi


@jit(nopython=True, cache=True)
def c_exp(zr, zi):
    """
    Complex exponential e^z = e^re * (cos(im) + i·sin(im)).

    The real part is clamped so e^re stays finite.
    """
    exp_zr = np.exp(min(zr, HYPERBOLIC_CLAMP))
    return exp_zr * np.cos(zi), exp_zr * np.sin(zi)


@jit(nopython=True, cache=True)
def c_cos(zr, zi):
    """
    Complex cosine cos(z) = (e^{iz} + e^{-iz}) / 2.

    Expanded as cos(re)·cosh(im) - i·sin(re)·sinh(im). The imaginary part
    is clamped to ±HYPERBOLIC_CLAMP before cosh/sinh so a huge |im| yields a
    huge finite value instead of inf (inf * 0 would otherwise give NaN).
    """
    yi = max(-HYPERBOLIC_CLAMP, min(zi, HYPERBOLIC_CLAMP))
    return np.cos(zr) * np.cosh(yi), -np.sin(zr) * np.sinh(yi)
