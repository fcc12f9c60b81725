"""Result containers of the Runge-Kutta integrators."""

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

import numpy as np

from genode.algorithms.integrators.dense import (continuous_extension, hermite,
                                                 hermite_quintic,
                                                 hermite_stencil,
                                                 locate_interval)
from genode.algorithms.integrators.tableau import Tableau
from genode.algorithms.utils.precision import _Precision


@dataclass(frozen=True)
class StepResult:
    """Outcome of one proposed step.

    Attributes
    ----------
    t : scalar
        Time at the start of the step.
    h : scalar
        Step size that was tried.
    y_new : numpy.ndarray
        Proposed state at ``t + h``.
    error_norm : scalar
        Scaled RMS norm of the local error estimate.
    stages : numpy.ndarray
        Stage derivatives, shape (s, dim).
    accepted : bool
        Whether ``error_norm <= 1``.
    """

    t: Any
    h: Any
    y_new: np.ndarray
    error_norm: Any
    stages: np.ndarray
    accepted: bool


@dataclass(frozen=True, eq=False)
class Solution:
    """
    Container for integration results.

    The container is immutable: the arrays are flagged read-only and every
    query returns a fresh array.

    Attributes
    ----------
    times : numpy.ndarray
        Accepted step endpoints, strictly increasing, shape (n_points,)
    states : numpy.ndarray
        States at :attr:`times`, shape (n_points, n_dim)
    derivatives : numpy.ndarray
        Vector field at :attr:`times`, shape (n_points, n_dim)
    stages : tuple of numpy.ndarray
        Stage derivatives of every accepted interval, each of shape
        (n_stages, n_dim); ``len(stages) == n_points - 1``
    tableau : :class:`~genode.algorithms.integrators.tableau.Tableau`
        Method that produced the trajectory.
    precision : :class:`~genode.algorithms.utils.precision._Precision`
        Precision of the stored arrays.
    n_accepted, n_rejected, n_fevals : int
        Solver statistics.
    status : str
        ``"success"``, ``"terminated"`` (stopped by a callback) or the name
        of the failure for a partial solution.
    """

    times: np.ndarray
    states: np.ndarray
    derivatives: np.ndarray
    stages: Tuple[np.ndarray, ...]
    tableau: Optional[Tableau] = None
    precision: Optional[_Precision] = None
    n_accepted: int = 0
    n_rejected: int = 0
    n_fevals: int = 0
    status: str = "success"

    def __post_init__(self):
        if len(self.times) != len(self.states):
            raise ValueError(
                f"Times and states must have same length: "
                f"{len(self.times)} != {len(self.states)}"
            )
        if len(self.derivatives) != len(self.times):
            raise ValueError(
                "Derivatives must have the same length as times "
                f"({len(self.derivatives)} != {len(self.times)})"
            )
        if len(self.stages) != max(len(self.times) - 1, 0):
            raise ValueError(
                f"Expected one stage bundle per interval, got {len(self.stages)} "
                f"for {len(self.times)} points"
            )
        for arr in (self.times, self.states, self.derivatives):
            arr.flags.writeable = False
        for k in self.stages:
            k.flags.writeable = False

    @property
    def success(self) -> bool:
        return self.status == "success"

    @property
    def t0(self):
        return self.times[0]

    @property
    def t_final(self):
        return self.times[-1]

    @property
    def y_final(self) -> np.ndarray:
        return self.states[-1].copy()

    def __len__(self) -> int:
        return len(self.times)

    def _as_time(self, t):
        if self.precision is not None:
            return self.precision.scalar(t)
        return t

    def interpolate(self, t) -> np.ndarray:
        """Evaluate the dense output at a single time.

        Parameters
        ----------
        t : scalar
            Query time in ``[times[0], times[-1]]``.

        Returns
        -------
        numpy.ndarray
            State of shape ``(n_dim,)`` in the precision of the solution.

        Raises
        ------
        ValueError
            If *t* lies outside the integration interval.
        """
        t = self._as_time(t)
        times = self.times
        if t < times[0] or t > times[-1]:
            raise ValueError(
                f"Interpolation time {t} must lie within the solution interval "
                f"[{times[0]}, {times[-1]}]"
            )

        j = locate_interval(times, t) if len(times) > 1 else 0
        if t == times[j]:
            return self.states[j].copy()
        if t == times[j + 1]:
            return self.states[j + 1].copy()

        t0, t1 = times[j], times[j + 1]
        K = self.stages[j]
        if self.tableau is not None and self.tableau.has_dense_output:
            P = self.tableau.coefficients(self.precision).P
            return continuous_extension(t0, t1, self.states[j], K, P, t)
        stencil = hermite_stencil(times, j)
        if stencil is None:
            return hermite(t0, t1, self.states[j], self.states[j + 1],
                           self.derivatives[j], self.derivatives[j + 1], t)
        return hermite_quintic([times[i] for i in stencil],
                               [self.states[i] for i in stencil],
                               [self.derivatives[i] for i in stencil], t)

    def sample(self, times: Sequence) -> np.ndarray:
        """Evaluate the dense output at every time in *times*.

        Returns
        -------
        numpy.ndarray
            Array of shape ``(len(times), n_dim)``.
        """
        out = np.empty((len(times), self.states.shape[1]), dtype=self.states.dtype)
        for i, t in enumerate(times):
            out[i] = self.interpolate(t)
        return out
