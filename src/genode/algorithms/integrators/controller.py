"""Proportional-integral step size control for embedded Runge-Kutta pairs.

The new step is ``h * factor`` with::

    factor = safety * err**(-1/q) * (err_prev/err)**(beta/q)

clipped to ``[min_factor, max_factor]`` (and to at most 1 after a rejected
step), where ``q`` is the order of the propagating method and ``err`` the
scaled RMS norm of the local error estimate.
"""

from fractions import Fraction
from typing import Any

from genode.algorithms.integrators.tableau import Tableau
from genode.algorithms.utils.precision import _Precision


class _PIController:
    """PI controller with constants converted to the active precision.

    Parameters
    ----------
    tableau : :class:`~genode.algorithms.integrators.tableau.Tableau`
        Source of the order and of the controller constants.
    precision : :class:`~genode.algorithms.utils.precision._Precision`
        Precision of the error norms and step sizes.
    """

    # Lower bound on the stored error norm; an exactly zero error would
    # otherwise pin the next factor to min_factor.
    ERR_PREV_FLOOR = "1e-4"

    def __init__(self, tableau: Tableau, precision: _Precision):
        q = tableau.order
        self.precision = precision
        self.safety = precision.scalar(tableau.safety)
        self.min_factor = precision.scalar(tableau.min_factor)
        self.max_factor = precision.scalar(tableau.max_factor)
        self._k_i = precision.scalar(Fraction(-1, q))
        self._k_p = precision.scalar(tableau.beta / q)
        self._one = precision.scalar(1)
        self._floor = precision.scalar(self.ERR_PREV_FLOOR)
        self.err_prev = self._one

    def _raw_factor(self, err) -> Any:
        if err == 0:
            return self.max_factor
        return self.safety * err ** self._k_i * (self.err_prev / err) ** self._k_p

    def accept(self, err) -> Any:
        """Return the step growth factor after an accepted step and record *err*."""
        factor = min(self.max_factor, max(self.min_factor, self._raw_factor(err)))
        self.err_prev = max(err, self._floor)
        return factor

    def reject(self, err) -> Any:
        """Return the shrink factor after a rejected step."""
        return min(self._one, max(self.min_factor, self._raw_factor(err)))
