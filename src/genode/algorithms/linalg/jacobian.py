"""Jacobian matrices of vector fields at a given state.

Two strategies are available:

- :attr:`JacobianStrategy.DUAL` evaluates the field once on
  :class:`~genode.algorithms.linalg.dual.Dual` numbers and is exact to the
  working precision;
- :attr:`JacobianStrategy.FINITE_DIFFERENCE` uses central differences with
  step ``sqrt(eps) * max(|y_j|, 1)`` and is accurate to roughly
  ``sqrt(eps)``.

For polynomial fields the two agree to within
``10 * sqrt(eps) * max(1, |J|)``.
"""

from enum import Enum

import numpy as np

from genode.algorithms.dynamics.rhs import as_vector_field
from genode.algorithms.linalg.dual import Dual
from genode.algorithms.utils.precision import (PrecisionLike, _Precision,
                                               get_precision)
from genode.utils.log_config import logger


class JacobianStrategy(Enum):
    """How the Jacobian of a vector field is obtained.

    Parameters
    ----------
    DUAL : str
        Forward-mode automatic differentiation.
    FINITE_DIFFERENCE : str
        Central finite differences.
    """
    DUAL = "dual"
    FINITE_DIFFERENCE = "finite_difference"

    def __str__(self) -> str:
        return self.value


def compute_jacobian(field,
                     y,
                     t=0,
                     precision: PrecisionLike = "standard",
                     strategy=JacobianStrategy.DUAL) -> np.ndarray:
    """
    Compute the Jacobian ``df_i/dy_j`` of *field* at ``(t, y)``.

    Parameters
    ----------
    field : vector field
        Object exposing ``dim`` and ``rhs(t, y)``.
    y : array_like
        State at which to linearise, of length ``field.dim``.
    t : scalar, default 0
        Time argument passed to the field.
    precision : str or precision object, default "standard"
        Precision of the computation and of the returned matrix.
    strategy : :class:`JacobianStrategy` or str, default "dual"
        Differentiation strategy.  Fields declaring ``supports_dual=False``
        always use finite differences.

    Returns
    -------
    numpy.ndarray
        Square matrix of shape ``(dim, dim)`` in the active precision.

    Raises
    ------
    DimensionMismatch
        If *y* or the field output do not have length ``field.dim``.
    """
    field = as_vector_field(field)
    prec = get_precision(precision)
    strategy = JacobianStrategy(strategy)

    y = prec.asarray(y)
    field.validate_state(y)
    t = prec.scalar(t)

    if strategy is JacobianStrategy.DUAL and not field.supports_dual:
        logger.info(f"{field.name} does not support dual numbers; using finite differences")
        strategy = JacobianStrategy.FINITE_DIFFERENCE

    if strategy is JacobianStrategy.DUAL:
        return _jacobian_dual(field, y, t, prec)
    return _jacobian_finite_difference(field, y, t, prec)


def _jacobian_dual(field, y: np.ndarray, t, prec: _Precision) -> np.ndarray:
    n = field.dim
    seeds = prec.asarray(np.eye(n, dtype=np.int64))

    y_dual = np.empty(n, dtype=object)
    for j in range(n):
        y_dual[j] = Dual(y[j], seeds[j].copy())

    out = field.rhs(t, y_dual)
    field.validate_derivative(out)

    jac = prec.zeros((n, n))
    for i, fi in enumerate(out):
        # Components that do not depend on the state stay zero.
        if isinstance(fi, Dual):
            jac[i, :] = fi.grad
    return jac


def _jacobian_finite_difference(field, y: np.ndarray, t, prec: _Precision) -> np.ndarray:
    n = field.dim
    jac = prec.zeros((n, n))
    sqrt_eps = prec.sqrt_eps

    for j in range(n):
        h = sqrt_eps * max(abs(y[j]), 1)
        y_plus = y.copy()
        y_minus = y.copy()
        y_plus[j] = y[j] + h
        y_minus[j] = y[j] - h

        f_plus = field.rhs(t, y_plus)
        f_minus = field.rhs(t, y_minus)
        field.validate_derivative(f_plus)
        field.validate_derivative(f_minus)

        # Divide by the representable step actually taken.
        dy = y_plus[j] - y_minus[j]
        jac[:, j] = (prec.asarray(f_plus) - prec.asarray(f_minus)) / dy
    return jac
