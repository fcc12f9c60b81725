import math

import numpy as np
import pytest

from genode.algorithms.dynamics.rhs import create_vector_field
from genode.algorithms.integrators.dense import (hermite, hermite_quintic,
                                                 hermite_stencil,
                                                 locate_interval)
from genode.algorithms.integrators.rk import integrate

METHODS = ["Tsit5", "DP5", "Vern6"]


def _rotation_rhs(t, y):
    return [-y[1], y[0]]


@pytest.fixture(scope="module")
def rotation():
    return create_vector_field(_rotation_rhs, 2, name="rotation")


@pytest.fixture(scope="module", params=METHODS)
def solution(request, rotation):
    return integrate(rotation, [1.0, 0.0], 0.0, 3.0, method=request.param, atol=1e-8, rtol=1e-8)


def test_locate_interval():
    times = [0.0, 1.0, 2.0, 3.0]
    assert locate_interval(times, 0.0) == 0
    assert locate_interval(times, 0.5) == 0
    assert locate_interval(times, 1.0) == 1
    assert locate_interval(times, 2.9) == 2
    assert locate_interval(times, 3.0) == 2


def test_hermite_reproduces_cubics():
    # y = t**3 on [1, 2]
    y = hermite(1.0, 2.0, np.array([1.0]), np.array([8.0]), np.array([3.0]), np.array([12.0]), 1.5)
    assert y[0] == pytest.approx(1.5**3, abs=1e-14)


def test_quintic_hermite_reproduces_quintics():
    # y = t**5 on nodes 0, 1, 2
    states = [np.array([0.0]), np.array([1.0]), np.array([32.0])]
    derivs = [np.array([0.0]), np.array([5.0]), np.array([80.0])]
    for t in (0.5, 1.25, 1.9):
        y = hermite_quintic([0.0, 1.0, 2.0], states, derivs, t)
        assert y[0] == pytest.approx(t**5, abs=1e-13)


def test_hermite_stencil_takes_longer_neighbour():
    times = [0.0, 1.0, 3.0, 5.5, 5.6]
    assert hermite_stencil(times, 0) == (0, 1, 2)
    assert hermite_stencil(times, 1) == (1, 2, 3)
    assert hermite_stencil(times, 2) == (1, 2, 3)
    assert hermite_stencil(times, 3) == (2, 3, 4)
    assert hermite_stencil([0.0, 1.0, 1.1], 0) is None
    assert hermite_stencil([0.0, 1.0], 0) is None


def test_exact_at_nodes(solution):
    for j in (0, len(solution) // 2, len(solution) - 1):
        y = solution.interpolate(solution.times[j])
        assert np.array_equal(y, solution.states[j])


def test_repeated_queries_are_bit_identical(solution):
    t = 1.2345
    first = solution.interpolate(t)
    for _ in range(3):
        assert np.array_equal(solution.interpolate(t), first)


def test_accuracy_between_nodes(solution):
    ts = np.linspace(0.0, 3.0, 61)
    ys = solution.sample(ts)
    assert ys.shape == (61, 2)
    exact = np.column_stack([np.cos(ts), np.sin(ts)])
    err = np.max(np.abs(ys - exact))
    assert err < 1e-4, f"{solution.tableau.name}: dense output error {err}"


@pytest.mark.parametrize("method", METHODS)
def test_midpoint_error_tracks_node_error(rotation, method):
    """Dense output between nodes is as accurate as the steps themselves."""
    sol = integrate(rotation, [1.0, 0.0], 0.0, 10.0, method=method, atol=1e-10, rtol=1e-10)
    times = sol.times
    exact_nodes = np.column_stack([np.cos(times), np.sin(times)])
    node_err = np.max(np.abs(sol.states - exact_nodes))

    mids = (times[:-1] + times[1:]) / 2
    exact_mids = np.column_stack([np.cos(mids), np.sin(mids)])
    dense_err = np.max(np.abs(sol.sample(mids) - exact_mids))
    assert dense_err < 10 * node_err, f"{method}: dense {dense_err:.2e}, nodes {node_err:.2e}"


def test_continuity_at_nodes(solution):
    j = len(solution) // 2
    tj = solution.times[j]
    delta = 1e-9
    left = solution.interpolate(tj - delta)
    right = solution.interpolate(tj + delta)
    assert np.max(np.abs(left - solution.states[j])) < 1e-8
    assert np.max(np.abs(right - solution.states[j])) < 1e-8


def test_outside_domain_raises(solution):
    with pytest.raises(ValueError):
        solution.interpolate(-0.1)
    with pytest.raises(ValueError):
        solution.interpolate(3.0 + 1e-9)


def test_interpolation_does_not_evaluate_field():
    calls = []

    def rhs(t, y):
        calls.append(t)
        return [-y[0]]

    field = create_vector_field(rhs, 1, name="decay")
    sol = integrate(field, [1.0], 0.0, 1.0, method="DP5")
    n_calls = len(calls)
    assert n_calls == sol.n_fevals
    sol.sample(np.linspace(0.0, 1.0, 25))
    assert len(calls) == n_calls
    assert sol.interpolate(0.5)[0] == pytest.approx(math.exp(-0.5), rel=1e-6)


def test_extended_precision_dense_output():
    field = create_vector_field(lambda t, y: [-y[0]], 1, name="decay")
    sol = integrate(field, [1], 0, 1, method="DP5", precision="extended", atol="1e-16", rtol="1e-16")
    ctx = sol.precision.ctx
    y = sol.interpolate("0.5")[0]
    assert isinstance(y, ctx.mpf)
    assert abs(y - ctx.exp(ctx.mpf("-0.5"))) < ctx.mpf("1e-12")
