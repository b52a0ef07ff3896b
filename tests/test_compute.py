import math

import numpy as np
import pytest

from escapetime.compute import (
    EscapeResult,
    Evaluator,
    escape_time,
    evaluate,
    in_main_cardioid,
    in_period2_bulb,
    list_evaluator_names,
    smooth_iteration,
)


ALL_EVALUATORS = list(Evaluator)

# Well inside the main cardioid or the period-2 bulb
INTERIOR_POINTS = [0j, -0.5 + 0j, 0.2 + 0.1j, -0.1 + 0.6j, -1.0 + 0j, -1.1 + 0.1j, -0.9 - 0.15j]

# A spread of points around the set, inside and outside the pre-checked regions
SAMPLE_POINTS = [
    complex(re, im)
    for re in np.linspace(-2.2, 0.8, 13)
    for im in np.linspace(-1.3, 1.3, 9)
]


@pytest.mark.parametrize("evaluator", ALL_EVALUATORS)
@pytest.mark.parametrize("max_iterations", [1, 10, 1000])
def test_origin_is_bounded(evaluator, max_iterations):
    result = evaluate(0j, max_iterations, 4.0, evaluator)
    assert result.bounded
    assert result.iteration == max_iterations
    assert result.smooth == max_iterations


@pytest.mark.parametrize("evaluator", ALL_EVALUATORS)
def test_two_escapes_at_first_iteration(evaluator):
    # z_1 = 2, |z_1|² = 4 >= 4: escape iterations are counted from 1
    result = evaluate(2 + 0j, 100, 4.0, evaluator)
    assert result.escaped
    assert result.iteration == 1


def test_counting_convention_for_known_orbit():
    # c = 1: z = 1, 2, 5 -> |z|² = 1, 4: escapes at iteration 2
    assert evaluate(1 + 0j, 50, 4.0).iteration == 2
    # With a larger radius it takes one more step (|5|² = 25)
    assert evaluate(1 + 0j, 50, 16.0).iteration == 3


@pytest.mark.parametrize("evaluator", ALL_EVALUATORS)
def test_zero_iterations_is_bounded(evaluator):
    result = evaluate(10 + 10j, 0, 4.0, evaluator)
    assert result == EscapeResult(iteration=0, smooth=0.0, escaped=False)


def test_iteration_cap_is_respected():
    # c = 1 needs two iterations to escape
    assert evaluate(1 + 0j, 1, 4.0).bounded
    assert evaluate(1 + 0j, 2, 4.0).escaped


@pytest.mark.parametrize("c", INTERIOR_POINTS)
@pytest.mark.parametrize("max_iterations", [2, 3, 50, 500])
def test_optimized_agrees_with_basic_inside(c, max_iterations):
    basic = evaluate(c, max_iterations, 4.0, Evaluator.BASIC)
    optimized = evaluate(c, max_iterations, 4.0, Evaluator.OPTIMIZED)
    assert basic.bounded and optimized.bounded


@pytest.mark.parametrize("c", SAMPLE_POINTS)
def test_optimized_is_transparent(c):
    for max_iterations in (5, 64):
        for radius2 in (0.01, 1.0, 4.0, 100.0):
            basic = evaluate(c, max_iterations, radius2, Evaluator.BASIC)
            optimized = evaluate(c, max_iterations, radius2, Evaluator.OPTIMIZED)
            assert basic == optimized


@pytest.mark.parametrize("c", [0.2 + 0.1j, -1 + 0j, -0.5 + 0j])
@pytest.mark.parametrize("radius2", [0.01, 1.0])
def test_small_escape_radius_disables_interior_shortcuts(c, radius2):
    # Interior points whose first iterate z_1 = c lies outside the radius escape at once
    basic = evaluate(c, 50, radius2, Evaluator.BASIC)
    optimized = evaluate(c, 50, radius2, Evaluator.OPTIMIZED)
    assert optimized == basic
    if abs(c) ** 2 >= radius2:
        assert optimized.escaped and optimized.iteration == 1


def test_cardioid_and_bulb_checks():
    assert in_main_cardioid(0.0, 0.0)
    assert in_main_cardioid(-0.5, 0.3)
    assert not in_main_cardioid(0.25, 0.0)  # cusp, boundary excluded
    assert not in_main_cardioid(0.5, 0.0)
    assert not in_main_cardioid(-1.0, 0.0)
    assert in_period2_bulb(-1.0, 0.0)
    assert in_period2_bulb(-1.2, 0.1)
    assert not in_period2_bulb(-0.75, 0.0)
    assert not in_period2_bulb(-1.25, 0.0)


def test_optimized_skips_interior_without_iterating():
    n, zn2, escaped = escape_time(0.0, 0.0, 1000, 4.0, int(Evaluator.OPTIMIZED))
    assert (n, zn2, escaped) == (1000, 0.0, False)


def test_cosine_differs_from_quadratic():
    # First step is z_1 = c for both families; they diverge afterwards
    c = 0.9 + 0.9j
    quadratic = evaluate(c, 200, 4.0, Evaluator.BASIC)
    cosine = evaluate(c, 200, 4.0, Evaluator.COSINE)
    assert quadratic.escaped
    assert cosine.iteration != quadratic.iteration or cosine.escaped != quadratic.escaped


def test_cosine_large_point_escapes_at_first_iteration():
    result = evaluate(3 + 0j, 100, 4.0, Evaluator.COSINE)
    assert result.escaped
    assert result.iteration == 1


def test_overflow_counts_as_escape():
    # |c|² overflows to inf on the first step
    result = evaluate(complex(1e200, 1e200), 10, 4.0, Evaluator.BASIC)
    assert result.escaped
    assert result.iteration == 1
    assert math.isfinite(result.smooth)


@pytest.mark.parametrize("c", SAMPLE_POINTS[::7])
def test_smooth_value_is_within_bounds(c):
    result = evaluate(c, 100, 4.0)
    if result.escaped:
        assert 0.0 <= result.smooth <= result.iteration + 1
    else:
        assert result.smooth == 100


def test_smooth_iteration_is_continuous_refinement():
    # |z| exactly at the radius gives n + 1
    assert smooth_iteration(5, 4.0, 4.0, 2.0) == pytest.approx(6.0)
    # Larger final modulus gives a smaller value
    assert smooth_iteration(5, 1e4, 4.0, 2.0) < smooth_iteration(5, 10.0, 4.0, 2.0)


def test_smooth_iteration_falls_back_on_non_finite():
    assert smooth_iteration(7, float("inf"), 4.0, 2.0) == 7.0
    assert smooth_iteration(7, float("nan"), 4.0, 2.0) == 7.0
    assert smooth_iteration(3, 0.5, 4.0, 2.0) == 3.0


def test_smooth_iteration_is_clamped():
    # Radius below 2: |z| can be below the floored radius, value clamps to n + 1
    assert smooth_iteration(4, 1.5, 1.0, 2.0) == 5.0


@pytest.mark.parametrize("bad", [-1, 2.5, True, "10"])
def test_invalid_max_iterations(bad):
    with pytest.raises(ValueError):
        evaluate(0j, bad, 4.0)


@pytest.mark.parametrize("bad", [0.0, -4.0, float("nan"), float("inf")])
def test_invalid_escape_radius(bad):
    with pytest.raises(ValueError):
        evaluate(0j, 10, bad)


def test_evaluator_parse():
    assert Evaluator.parse("basic") is Evaluator.BASIC
    assert Evaluator.parse(" Optimized ") is Evaluator.OPTIMIZED
    assert Evaluator.parse(2) is Evaluator.COSINE
    assert Evaluator.parse(Evaluator.COSINE) is Evaluator.COSINE
    with pytest.raises(ValueError):
        Evaluator.parse("julia")
    with pytest.raises(ValueError):
        Evaluator.parse(7)
    assert list_evaluator_names() == ["basic", "optimized", "cosine"]
