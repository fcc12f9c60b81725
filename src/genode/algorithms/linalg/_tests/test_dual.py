import numpy as np
import pytest

from genode.algorithms.linalg.dual import Dual
from genode.algorithms.utils.precision import get_precision


def _var(value, j, n=2):
    grad = np.zeros(n)
    grad[j] = 1.0
    return Dual(value, grad)


def test_arithmetic_rules():
    x = _var(3.0, 0)
    y = _var(2.0, 1)

    f = x * y + x / y - 2 * x + 1
    assert f.value == pytest.approx(3.0 * 2.0 + 1.5 - 6.0 + 1)
    np.testing.assert_allclose(f.grad, [2.0 + 0.5 - 2.0, 3.0 - 3.0 / 4.0])

    g = 1 / x - y
    assert g.value == pytest.approx(1 / 3 - 2)
    np.testing.assert_allclose(g.grad, [-1 / 9, -1.0])

    h = 5 - x
    assert h.value == 2.0
    np.testing.assert_allclose(h.grad, [-1.0, 0.0])


def test_powers():
    x = _var(2.0, 0, n=1)
    assert (x ** 3).value == 8.0
    assert (x ** 3).grad[0] == 12.0
    assert (x ** 0).value == 1.0
    assert (x ** 0).grad[0] == 0.0
    assert (x ** 0.5).grad[0] == pytest.approx(0.5 / np.sqrt(2.0))
    with pytest.raises(TypeError):
        x ** x


def test_numpy_scalars_dispatch_to_dual():
    x = _var(2.0, 0, n=1)
    out = np.float64(3.0) * x
    assert isinstance(out, Dual)
    assert out.grad[0] == 3.0
    out = np.float32(1.0) - x
    assert isinstance(out, Dual)


def test_comparisons_use_value():
    x = _var(-2.0, 0, n=1)
    assert x < 0
    assert x <= -2
    assert not x > _var(1.0, 0, n=1)
    assert abs(x).value == 2.0
    assert abs(x).grad[0] == -1.0
    assert (-x).grad[0] == -1.0
    assert (+x) is x


def test_extended_precision_channels():
    prec = get_precision("extended")
    seeds = prec.asarray([[1, 0], [0, 1]])
    x = Dual(prec.scalar("0.1"), seeds[0])
    y = Dual(prec.scalar("0.3"), seeds[1])
    f = 3 * x * y / 10
    assert isinstance(f.value, prec.ctx.mpf)
    assert abs(f.grad[0] - prec.scalar("0.09")) < 10 * prec.eps
    assert abs(f.grad[1] - prec.scalar("0.03")) < 10 * prec.eps
