import numpy as np
import pytest

from genode.algorithms.dynamics.genetics import (system2_modified,
                                                 system2_original,
                                                 system3_modified,
                                                 system3_modified_steady_state,
                                                 system3_original,
                                                 system3_original_steady_state,
                                                 total_mass)
from genode.algorithms.utils.precision import get_precision


@pytest.mark.parametrize("field, y", [
    (system3_original, [0.5, 0.25, 0.25]),
    (system3_modified, [0.5, 0.25, 0.25]),
    (system2_original, [0.25, 0.75]),
    (system2_modified, [0.25, 0.75]),
])
def test_models_have_zero_total_rate_on_simplex(field, y):
    dy = field(0.0, np.array(y))
    assert len(dy) == field.dim
    assert abs(sum(dy)) < 1e-15


def test_original_total_rate_is_s_squared_minus_s():
    y = np.array([0.3, 0.4, 0.5])
    s = y.sum()
    assert sum(system3_original(0.0, y)) == pytest.approx(s * s - s, rel=1e-14)


def test_modified_total_rate_vanishes_off_simplex():
    y = np.array([0.3, 0.4, 0.5])
    assert abs(sum(system3_modified(0.0, y))) < 1e-15
    assert abs(sum(system2_modified(0.0, np.array([0.1, 0.7])))) < 1e-15


def test_model_values():
    dy = system3_modified(0.0, np.array([0.5, 0.25, 0.25]))
    np.testing.assert_allclose(dy, [0.25**2 / 4 - 0.125, -(0.25**2) / 2 + 0.25, 0.25**2 / 4 - 0.125])
    dy = system2_original(0.0, np.array([0.25, 0.75]))
    expected_1 = 0.7 * 0.25**2 + 0.25 * 0.75 + 0.3 * 0.75**2 - 0.25
    assert dy[0] == pytest.approx(expected_1)


@pytest.mark.parametrize("q1", np.linspace(0.0, 1.0, 31) ** 2)
def test_steady_state_manifold_is_equilibrium(q1):
    y = system3_original_steady_state(q1)
    assert total_mass(y) == pytest.approx(1.0)
    assert np.all(y >= -1e-15)
    np.testing.assert_allclose(system3_original(0.0, y), 0.0, atol=1e-14)
    np.testing.assert_allclose(system3_modified(0.0, y), 0.0, atol=1e-14)


@pytest.mark.parametrize("kind", ["narrow", "standard", "extended"])
def test_models_evaluate_in_every_precision(kind):
    prec = get_precision(kind)
    y = system3_original_steady_state("0.25", precision=prec)
    assert y.dtype == prec.dtype
    dy = prec.asarray(system3_original(prec.scalar(0), y))
    assert dy.dtype == prec.dtype
    assert all(abs(v) <= 4 * prec.eps for v in dy)


def test_modified_steady_state():
    y = system3_modified_steady_state(0.2, 0.4)
    np.testing.assert_allclose(y, [0.2, 0.4, 0.2])
    np.testing.assert_allclose(system3_modified(0.0, y), 0.0, atol=1e-15)
    with pytest.raises(ValueError):
        system3_modified_steady_state(0.0, 0.4)


def test_steady_state_rejects_out_of_range():
    with pytest.raises(ValueError):
        system3_original_steady_state(1.5)


def test_total_mass_of_trajectory():
    states = np.array([[0.5, 0.25, 0.25], [0.2, 0.3, 0.4]])
    np.testing.assert_allclose(total_mass(states), [1.0, 0.9])
