import math

import numpy as np
import pytest
from scipy.integrate import solve_ivp

from genode.algorithms.dynamics.rhs import create_vector_field
from genode.algorithms.integrators.rk import (AdaptiveRK, FixedStepRK,
                                              _AdaptiveStepRK, integrate)
from genode.algorithms.integrators.tableau import Tableau
from genode.algorithms.utils.exceptions import (DimensionMismatch,
                                                IntegrationError,
                                                NonFiniteState,
                                                StepSizeUnderflow)

METHODS = ["Tsit5", "DP5", "Vern6"]


def _rotation_rhs(t, y):
    return [-y[1], y[0]]


def _exact_rotation(t):
    return np.array([math.cos(t), math.sin(t)])


@pytest.fixture(scope="module")
def rotation():
    return create_vector_field(_rotation_rhs, 2, name="rotation")


@pytest.fixture(scope="module")
def lotka_volterra():
    def rhs(t, y):
        return [1.5 * y[0] - y[0] * y[1], -3.0 * y[1] + y[0] * y[1]]
    return create_vector_field(rhs, 2, name="lotka_volterra")


@pytest.mark.parametrize("method", METHODS)
def test_rotation_accuracy(rotation, method):
    sol = integrate(rotation, [1.0, 0.0], 0.0, 10.0, method=method, atol=1e-10, rtol=1e-10)
    assert sol.success
    assert sol.t_final == 10.0, "Final step must land exactly on t_end"
    err = np.max(np.abs(sol.y_final - _exact_rotation(10.0)))
    assert err < 1e-7, f"{method}: final error too large: {err}"
    assert sol.n_accepted == len(sol.times) - 1
    assert np.all(np.diff(sol.times) > 0)


@pytest.mark.parametrize("method", METHODS)
def test_vs_solve_ivp(lotka_volterra, method):
    y0 = [10.0, 5.0]
    sol = integrate(lotka_volterra, y0, 0.0, 5.0, method=method, atol=1e-10, rtol=1e-10)
    ref = solve_ivp(lambda t, y: lotka_volterra.rhs(t, y), (0.0, 5.0), y0,
                    method="DOP853", rtol=1e-12, atol=1e-12)
    np.testing.assert_allclose(sol.y_final, ref.y[:, -1], rtol=1e-6, atol=1e-8,
                               err_msg=f"{method} disagrees with solve_ivp")


@pytest.mark.parametrize("method", METHODS)
def test_fsal_evaluation_count(rotation, method):
    sol = integrate(rotation, [1.0, 0.0], 0.0, 1.0, method=method)
    stages = sol.tableau.stages
    # one initial evaluation, then s - 1 new evaluations per attempted step
    expected = 1 + (stages - 1) * (sol.n_accepted + sol.n_rejected)
    assert sol.n_fevals == expected


@pytest.mark.parametrize("method", METHODS)
def test_fixed_step_order(rotation, method):
    """Halving the step divides the global error by about 2**order."""
    errors = []
    for n in (10, 20):
        rk = FixedStepRK(method)
        sol = rk.integrate(rotation, [1.0, 0.0], np.linspace(0.0, 2.0, n + 1))
        errors.append(np.max(np.abs(sol.y_final - _exact_rotation(2.0))))
    observed = math.log2(errors[0] / errors[1])
    order = FixedStepRK(method).order
    assert order - 0.6 < observed < order + 1.2, f"{method}: observed order {observed:.2f}"


@pytest.mark.parametrize("method", METHODS)
def test_tightening_tolerance_reduces_error(rotation, method):
    errors = []
    for tol in (1e-6, 1e-9):
        sol = integrate(rotation, [1.0, 0.0], 0.0, 5.0, method=method, atol=tol, rtol=tol)
        errors.append(np.max(np.abs(sol.y_final - _exact_rotation(5.0))))
    assert errors[1] < errors[0] / 10, f"{method}: errors {errors}"
    assert errors[1] < 1e-7


@pytest.mark.parametrize("method", METHODS)
def test_tolerance_ladder(rotation, method):
    """Global error scales like tol and the step count like tol**(-1/order)."""
    tols = np.array([1e-6, 1e-7, 1e-8, 1e-9])
    errors, steps = [], []
    for tol in tols:
        sol = integrate(rotation, [1.0, 0.0], 0.0, 10.0, method=method, atol=tol, rtol=tol)
        exact = np.column_stack([np.cos(sol.times), np.sin(sol.times)])
        errors.append(np.max(np.abs(sol.states - exact)))
        steps.append(sol.n_accepted)

    err_slope = np.polyfit(np.log(tols), np.log(errors), 1)[0]
    step_slope = np.polyfit(np.log(1 / tols), np.log(steps), 1)[0]
    order = AdaptiveRK(method).order
    assert 0.75 < err_slope < 1.25, f"{method}: error ~ tol**{err_slope:.2f}"
    assert abs(step_slope - 1 / order) < 0.05, f"{method}: steps ~ tol**-{step_slope:.3f}"


def test_runs_are_bit_reproducible(lotka_volterra):
    a = integrate(lotka_volterra, [10.0, 5.0], 0.0, 3.0, method="Vern6")
    b = integrate(lotka_volterra, [10.0, 5.0], 0.0, 3.0, method="Vern6")
    assert np.array_equal(a.times, b.times)
    assert np.array_equal(a.states, b.states)


def test_solution_arrays_are_read_only(rotation):
    sol = integrate(rotation, [1.0, 0.0], 0.0, 1.0)
    with pytest.raises(ValueError):
        sol.states[0, 0] = 2.0
    y = sol.y_final
    y[0] = 2.0
    assert sol.states[-1, 0] != 2.0


def test_factory():
    assert type(AdaptiveRK("tsit5")).__name__ == "_Tsit5"
    assert AdaptiveRK("Vern6").order == 6
    assert AdaptiveRK("DP5", precision="narrow").precision.dtype == np.float32
    with pytest.raises(ValueError):
        AdaptiveRK("RK45")
    with pytest.raises(ValueError):
        AdaptiveRK("Tsit5", rtol=0.0)
    with pytest.raises(ValueError):
        integrate(create_vector_field(_rotation_rhs, 2), [1.0, 0.0], 0.0, 1.0, precision="half")


def test_custom_tableau_through_factory(rotation):
    heun_euler = Tableau(name="HeunEuler", A=[[0, 0], [1, 0]], b=["1/2", "1/2"], b_hat=[1, 0],
                         c=[0, 1], order=2, embedded_order=1)
    rk = AdaptiveRK(heun_euler, rtol=1e-6, atol=1e-6)
    assert isinstance(rk, _AdaptiveStepRK)
    sol = rk.integrate(rotation, [1.0, 0.0], 0.0, 1.0)
    assert np.max(np.abs(sol.y_final - _exact_rotation(1.0))) < 1e-3


def test_invalid_span(rotation):
    with pytest.raises(ValueError):
        integrate(rotation, [1.0, 0.0], 1.0, 1.0)
    with pytest.raises(ValueError):
        integrate(rotation, [1.0, 0.0], 1.0, 0.0)


def test_dimension_mismatch(rotation):
    with pytest.raises(DimensionMismatch):
        integrate(rotation, [1.0, 0.0, 0.0], 0.0, 1.0)

    bad = create_vector_field(lambda t, y: [y[0]], 2, name="short")
    with pytest.raises(DimensionMismatch):
        integrate(bad, [1.0, 0.0], 0.0, 1.0)


def test_rhs_signature_is_checked():
    field = create_vector_field(lambda y: [y[0]], 1, name="one_arg")
    with pytest.raises(ValueError):
        integrate(field, [1.0], 0.0, 1.0)


def test_non_finite_state_carries_partial_solution():
    def rhs(t, y):
        return [math.inf if t > 0.5 else 1.0]
    field = create_vector_field(rhs, 1, name="explodes")
    with pytest.raises(NonFiniteState) as excinfo:
        integrate(field, [0.0], 0.0, 1.0)
    exc = excinfo.value
    assert isinstance(exc, IntegrationError)
    partial = exc.solution
    assert partial.status == "NonFiniteState"
    assert len(partial.times) >= 2
    assert partial.t_final <= 0.5 + 1e-12
    assert exc.t == partial.t_final
    np.testing.assert_array_equal(exc.y, partial.y_final)
    # the partial trajectory still supports dense output
    partial.interpolate(partial.t_final / 2)


def test_step_size_underflow():
    def rhs(t, y):
        return [0.0 if t < 0.5 else 1e30 * math.sin(1e6 * t)]
    field = create_vector_field(rhs, 1, name="jump")
    with pytest.raises(StepSizeUnderflow) as excinfo:
        integrate(field, [0.0], 0.0, 1.0, max_step=0.1)
    assert excinfo.value.solution.t_final <= 0.5


def test_consecutive_rejection_limit():
    def rhs(t, y):
        return [0.0 if t < 0.5 else 1e30 * math.sin(1e6 * t)]
    field = create_vector_field(rhs, 1, name="jump")
    with pytest.raises(StepSizeUnderflow, match="consecutive"):
        integrate(field, [0.0], 0.0, 1.0, max_step=0.1, max_rejects=2)


def test_max_steps(rotation):
    with pytest.raises(IntegrationError) as excinfo:
        integrate(rotation, [1.0, 0.0], 0.0, 100.0, max_steps=5)
    assert type(excinfo.value) is IntegrationError
    assert excinfo.value.solution.n_accepted == 5


def test_max_step_and_first_step(rotation):
    sol = integrate(rotation, [1.0, 0.0], 0.0, 1.0, max_step=0.05, first_step=0.01)
    steps = np.diff(sol.times)
    assert steps[0] == pytest.approx(0.01)
    assert np.all(steps <= 0.05 + 1e-15)


def test_callback_terminates(rotation):
    seen = []

    def stop_after_half(t, y):
        seen.append(t)
        return t >= 0.5

    sol = integrate(rotation, [1.0, 0.0], 0.0, 2.0, callback=stop_after_half)
    assert sol.status == "terminated"
    assert not sol.success
    assert 0.5 <= sol.t_final < 2.0
    assert seen[-1] == sol.t_final
    assert len(seen) == sol.n_accepted


def test_fixed_step_grid_validation(rotation):
    rk = FixedStepRK("Tsit5")
    with pytest.raises(ValueError):
        rk.integrate(rotation, [1.0, 0.0], [0.0])
    with pytest.raises(ValueError):
        rk.integrate(rotation, [1.0, 0.0], [0.0, 0.5, 0.5])


def test_unknown_options_are_rejected(rotation):
    with pytest.raises(TypeError):
        integrate(rotation, [1.0, 0.0], 0.0, 1.0, max_stpes=5)
    with pytest.raises(TypeError):
        AdaptiveRK("Tsit5", tol=1e-6)
    with pytest.raises(TypeError):
        FixedStepRK("DP5", rtol=1e-6)
    with pytest.raises(TypeError):
        FixedStepRK("DP5").integrate(rotation, [1.0, 0.0], [0.0, 1.0], dt=0.1)
