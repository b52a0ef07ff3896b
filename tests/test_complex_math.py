import cmath
import math

import pytest

from escapetime.complex_math import (
    c_add,
    c_conj,
    c_cos,
    c_exp,
    c_mul,
    c_norm2,
    c_scale,
    c_sqr,
    c_sub,
)


def test_add_sub():
    assert c_add(1.0, 2.0, 3.0, -4.0) == (4.0, -2.0)
    assert c_sub(1.0, 2.0, 3.0, -4.0) == (-2.0, 6.0)


def test_mul_matches_builtin_complex():
    a = complex(1.5, -2.25)
    b = complex(-0.5, 3.0)
    re, im = c_mul(a.real, a.imag, b.real, b.imag)
    assert complex(re, im) == pytest.approx(a * b)


def test_sqr_agrees_with_mul():
    assert c_sqr(0.3, -1.7) == pytest.approx(c_mul(0.3, -1.7, 0.3, -1.7))


def test_scale_and_conj():
    assert c_scale(1.0, -2.0, 3.0) == (3.0, -6.0)
    assert c_conj(1.0, 2.0) == (1.0, -2.0)


@pytest.mark.parametrize("zr, zi", [(0.0, 0.0), (3.0, 4.0), (-1e-200, 1e-200), (-7.5, 0.25)])
def test_norm2_is_never_negative(zr, zi):
    assert c_norm2(zr, zi) >= 0.0


def test_norm2_is_squared_modulus():
    assert c_norm2(3.0, 4.0) == 25.0


def test_overflow_propagates_as_infinity():
    re, im = c_sqr(1e200, 0.0)
    assert math.isinf(c_norm2(re, im))


def test_exp_and_cos_match_cmath():
    z = complex(0.7, -1.3)
    assert complex(*c_exp(z.real, z.imag)) == pytest.approx(cmath.exp(z))
    assert complex(*c_cos(z.real, z.imag)) == pytest.approx(cmath.cos(z))


def test_cos_large_imaginary_stays_finite():
    re, im = c_cos(0.5, 1e6)
    assert math.isfinite(re) and math.isfinite(im)
    re, im = c_cos(0.5, -1e6)
    assert math.isfinite(re) and math.isfinite(im)
