"""Provide the explicit embedded Runge-Kutta integrators.

Adaptive drivers for the Tsitouras 5(4), Dormand-Prince 5(4) and Verner 6(5)
pairs are provided together with a fixed-step driver (used for order
verification) and small convenience factories that select an implementation
by method name.

All arithmetic goes through the active precision: states are numpy arrays of
``float32``, ``float64`` or ``mpf`` objects, and times, step sizes and
tolerances are scalars of the same kind.

References
----------
Hairer, E.; Norsett, S.; Wanner, G. (1993). "Solving Ordinary Differential
Equations I".

Dormand, J. R.; Prince, P. J. (1980). "A family of embedded Runge-Kutta
formulas".

Tsitouras, Ch. (2011). "Runge-Kutta pairs of order 5(4) satisfying only the
first column simplifying assumption".

Verner, J. H. (2010). "Numerically optimal Runge-Kutta pairs with
interpolants".
"""

import inspect
import math
from typing import Callable, Optional

import numpy as np

from genode.algorithms.dynamics.base import _VectorField
from genode.algorithms.integrators.base import _Integrator
from genode.algorithms.integrators.controller import _PIController
from genode.algorithms.integrators.tableau import (DP5, TSIT5, VERN6, Tableau,
                                                   get_tableau)
from genode.algorithms.integrators.types import Solution, StepResult
from genode.algorithms.utils.config import (DEFAULT_METHOD, DEFAULT_PRECISION,
                                            MAX_REJECTS, MAX_STEPS,
                                            MIN_STEP_FACTOR, TOL)
from genode.algorithms.utils.exceptions import (IntegrationError,
                                                NonFiniteState,
                                                StepSizeUnderflow)
from genode.algorithms.utils.precision import (PrecisionLike, _Precision,
                                               log_precision_info)
from genode.utils.log_config import logger


class _RHSEvaluator:
    """Evaluate a vector field and convert its output to the active precision.

    The number of evaluations is recorded in :attr:`n_evals`.
    """

    def __init__(self, field: _VectorField, precision: _Precision):
        self.field = field
        self.precision = precision
        self.n_evals = 0

    def __call__(self, t, y: np.ndarray) -> np.ndarray:
        self.n_evals += 1
        out = self.field.rhs(t, y)
        self.field.validate_derivative(out)
        return self.precision.asarray(out)


def _build_rhs_wrapper(field: _VectorField, precision: _Precision) -> _RHSEvaluator:
    """Return a counting ``(t, y)`` evaluator of *field*.

    Raises
    ------
    ValueError
        If ``field.rhs`` does not accept ``(t, y)``.
    """
    rhs_func = field.rhs
    try:
        sig = inspect.signature(rhs_func)
    except (TypeError, ValueError):
        sig = None
    if sig is not None:
        params = list(sig.parameters.values())
        variadic = any(p.kind is p.VAR_POSITIONAL for p in params)
        if len(params) < 2 and not variadic:
            raise ValueError(
                f"{field.name}.rhs must accept (t, y); got signature {sig}"
            )
    return _RHSEvaluator(field, precision)


class _RungeKuttaBase(_Integrator):
    """Provide shared functionality of explicit Runge-Kutta schemes.

    The class stores a Butcher tableau and provides the low level helper
    :meth:`_rk_embedded_step` that advances one step and returns the local
    error estimate of the embedded pair.

    Parameters
    ----------
    tableau : :class:`~genode.algorithms.integrators.tableau.Tableau` or str
        Method coefficients or registered method name.
    precision : str or precision object, default "standard"
        Arithmetic of the integration.
    """

    def __init__(self, tableau, precision: PrecisionLike = DEFAULT_PRECISION):
        self.tableau: Tableau = get_tableau(tableau)
        super().__init__(self.tableau.name, precision=precision)
        self._coeffs = self.tableau.coefficients(self.precision)

    @property
    def order(self) -> int:
        """Return the formal order of accuracy of the propagating method."""
        return self.tableau.order

    def _rk_embedded_step(self, f: _RHSEvaluator, t, y: np.ndarray, h, k0: np.ndarray, t_new):
        """Advance *y* by one step of size *h*.

        Parameters
        ----------
        f : callable
            Vector field evaluator.
        t : scalar
            Current time.
        y : numpy.ndarray
            Current state.
        h : scalar
            Step size.
        k0 : numpy.ndarray
            ``f(t, y)``, reused from the previous step.
        t_new : scalar
            ``t + h``, passed explicitly so that the final step lands exactly
            on the end of the span.

        Returns
        -------
        y_new : numpy.ndarray
            Propagated state.
        err_vec : numpy.ndarray
            ``h * sum((b_i - b_hat_i) * k_i)``.
        K : numpy.ndarray
            Stage derivatives, shape (s, dim).
        """
        coeffs = self._coeffs
        s = self.tableau.stages
        fsal = self.tableau.fsal

        K = np.empty((s, y.size), dtype=self.precision.dtype)
        K[0] = k0

        n_inner = s - 1 if fsal else s
        for i in range(1, n_inner):
            y_stage = y.copy()
            for j, a_ij in coeffs.a[i]:
                y_stage = y_stage + (h * a_ij) * K[j]
            K[i] = f(t + coeffs.c[i] * h, y_stage)

        y_new = y.copy()
        for j, b_j in coeffs.b:
            y_new = y_new + (h * b_j) * K[j]

        if fsal:
            K[s - 1] = f(t_new, y_new)

        err_vec = None
        for j, e_j in coeffs.e:
            term = (h * e_j) * K[j]
            err_vec = term if err_vec is None else err_vec + term
        if err_vec is None:
            err_vec = self.precision.zeros(y.size)

        return y_new, err_vec, K

    def _error_norm(self, err_vec: np.ndarray, y: np.ndarray, y_new: np.ndarray, atol, rtol):
        """Return the scaled root-mean-square norm of *err_vec*."""
        scale = atol + rtol * np.maximum(np.abs(y), np.abs(y_new))
        ratio = err_vec / scale
        return self.precision.sqrt(np.sum(ratio * ratio) / ratio.size)

    def _build_solution(self, ts, ys, dys, Ks, n_fevals: int, n_rejected: int, status: str) -> Solution:
        dtype = self.precision.dtype
        return Solution(
            times=np.array(ts, dtype=dtype),
            states=np.stack(ys),
            derivatives=np.stack(dys),
            stages=tuple(Ks),
            tableau=self.tableau,
            precision=self.precision,
            n_accepted=len(Ks),
            n_rejected=n_rejected,
            n_fevals=n_fevals,
            status=status,
        )


class _FixedStepRK(_RungeKuttaBase):
    """Implement an explicit fixed-step Runge-Kutta scheme.

    Only the propagating weights of the tableau are used; the embedded
    estimate is ignored.  The step sizes are inferred from the spacing of
    the time grid supplied to :meth:`integrate`.
    """

    def integrate(self, field, y0, t_vals) -> Solution:
        """Integrate *field* on the grid *t_vals*.

        Parameters
        ----------
        field : vector field
            Object exposing ``dim`` and ``rhs(t, y)``.
        y0 : array_like
            Initial state.
        t_vals : array_like
            Strictly increasing time grid with at least two entries.

        Returns
        -------
        :class:`~genode.algorithms.integrators.types.Solution`
            States at every grid point.

        Raises
        ------
        ValueError
            If *t_vals* has fewer than two points or is not strictly increasing.
        NonFiniteState
            If a state becomes non-finite.
        """
        field, y = self.validate_inputs(field, y0)
        prec = self.precision
        t_vals = [prec.scalar(t) for t in t_vals]
        if len(t_vals) < 2:
            raise ValueError("Must provide at least 2 time points")
        if any(not t1 > t0 for t0, t1 in zip(t_vals[:-1], t_vals[1:])):
            raise ValueError("Time values must be strictly increasing")

        f = _build_rhs_wrapper(field, prec)
        with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
            k0 = f(t_vals[0], y)
            ts, ys, dys, Ks = [t_vals[0]], [y.copy()], [k0], []
            for t, t_new in zip(t_vals[:-1], t_vals[1:]):
                y_new, _, K = self._rk_embedded_step(f, t, y, t_new - t, k0, t_new)
                if not prec.isfinite(y_new):
                    partial = self._build_solution(ts, ys, dys, Ks, f.n_evals, 0, NonFiniteState.__name__)
                    raise NonFiniteState(
                        f"{self.name}: non-finite state at t = {t_new}",
                        solution=partial, t=t, y=y.copy(),
                    )
                k0 = K[-1] if self.tableau.fsal else f(t_new, y_new)
                y = y_new
                ts.append(t_new)
                ys.append(y.copy())
                dys.append(k0)
                Ks.append(K)
        return self._build_solution(ts, ys, dys, Ks, f.n_evals, 0, "success")


class FixedStepRK:
    """Factory for fixed-step drivers of the registered tableaus.

    Examples
    --------
    >>> rk = FixedStepRK("Vern6")
    >>> sol = rk.integrate(field, y0, np.linspace(0.0, 1.0, 11))
    """

    def __new__(cls, method=DEFAULT_METHOD, **opts):
        return _FixedStepRK(get_tableau(method), **opts)


class _AdaptiveStepRK(_RungeKuttaBase):
    """Implement an embedded adaptive Runge-Kutta integrator with PI controller.

    Parameters
    ----------
    tableau : :class:`~genode.algorithms.integrators.tableau.Tableau` or str
        Method coefficients or registered name.
    rtol, atol : float or str, optional
        Relative and absolute error tolerances, converted to the active
        precision (decimal strings are read exactly).  Defaults are read from
        :data:`~genode.algorithms.utils.config.TOL`.
    precision : str or precision object, default "standard"
        Arithmetic of the integration.
    first_step : float, optional
        Initial step size.  Chosen by a heuristic when omitted.
    max_step : float, optional
        Upper bound on the step size.  Infinity by default.
    min_step : float, optional
        Step size floor.  When *None* it is ``10 * eps * max(|t|, 1)``.
    max_rejects : int, optional
        Consecutive rejections tolerated before failing.
    max_steps : int, optional
        Accepted steps tolerated before failing.

    Raises
    ------
    ValueError
        If a tolerance or step bound is not positive.
    """

    def __init__(self,
                 tableau,
                 rtol=TOL,
                 atol=TOL,
                 precision: PrecisionLike = DEFAULT_PRECISION,
                 first_step=None,
                 max_step=math.inf,
                 min_step=None,
                 max_rejects: int = MAX_REJECTS,
                 max_steps: int = MAX_STEPS):
        super().__init__(tableau, precision=precision)
        prec = self.precision
        self._rtol = prec.scalar(rtol)
        self._atol = prec.scalar(atol)
        if not (self._rtol > 0 and self._atol > 0):
            raise ValueError(f"Tolerances must be positive, got rtol={rtol}, atol={atol}")

        self._first_step = None if first_step is None else prec.scalar(first_step)
        if self._first_step is not None and not self._first_step > 0:
            raise ValueError(f"first_step must be positive, got {first_step}")

        self._max_step = None if max_step is None or max_step == math.inf else prec.scalar(max_step)
        if self._max_step is not None and not self._max_step > 0:
            raise ValueError(f"max_step must be positive, got {max_step}")

        self._min_step = None if min_step is None else prec.scalar(min_step)
        self._max_rejects = int(max_rejects)
        self._max_steps = int(max_steps)

    @property
    def rtol(self):
        return self._rtol

    @property
    def atol(self):
        return self._atol

    def _step_floor(self, t):
        if self._min_step is not None:
            return self._min_step
        return MIN_STEP_FACTOR * self.precision.eps * max(abs(t), 1)

    def _select_initial_step(self, t0, y: np.ndarray, k0: np.ndarray, t_end):
        """Return the first step size.

        Uses ``0.01 * d0 / d1`` with ``d0``, ``d1`` the scaled norms of the
        state and of its derivative, or ``1e-6`` when either is tiny.
        """
        prec = self.precision
        if self._first_step is not None:
            h = self._first_step
        else:
            scale = self._atol + self._rtol * np.abs(y)
            d0 = prec.sqrt(np.sum((y / scale) ** 2) / y.size)
            d1 = prec.sqrt(np.sum((k0 / scale) ** 2) / y.size)
            tiny = prec.scalar("1e-5")
            if d0 < tiny or d1 < tiny:
                h = prec.scalar("1e-6")
            else:
                h = prec.scalar("0.01") * d0 / d1
        if self._max_step is not None and h > self._max_step:
            h = self._max_step
        span = t_end - t0
        if h > span:
            h = span
        floor = self._step_floor(t0)
        if h < floor:
            h = floor
        return h

    def step(self, f: _RHSEvaluator, t, y: np.ndarray, h, k0: np.ndarray, t_new=None) -> StepResult:
        """Propose a single step and report whether it is acceptable."""
        if t_new is None:
            t_new = t + h
        y_new, err_vec, K = self._rk_embedded_step(f, t, y, h, k0, t_new)
        err = self._error_norm(err_vec, y, y_new, self._atol, self._rtol)
        return StepResult(t=t, h=h, y_new=y_new, error_norm=err, stages=K, accepted=bool(err <= 1))

    def integrate(self,
                  field,
                  y0,
                  t0,
                  t_end,
                  callback: Optional[Callable[[object, np.ndarray], bool]] = None) -> Solution:
        """Integrate *field* from ``(t0, y0)`` to *t_end*.

        Parameters
        ----------
        field : vector field
            Object exposing ``dim`` and ``rhs(t, y)``.
        y0 : array_like
            Initial state of length ``field.dim``.
        t0, t_end : scalar
            Integration span; ``t_end`` must be greater than ``t0``.
        callback : callable, optional
            ``callback(t, y)`` is invoked after every accepted step; a truthy
            return value stops the integration at that step.

        Returns
        -------
        :class:`~genode.algorithms.integrators.types.Solution`
            Accepted steps with their stage derivatives.

        Raises
        ------
        ValueError
            If the span is empty or reversed.
        DimensionMismatch
            If the state or the field output has the wrong length.
        StepSizeUnderflow
            If the step size falls below its floor or too many consecutive
            steps are rejected.
        NonFiniteState
            If a proposed state or error norm is not finite.
        IntegrationError
            If the maximum number of steps is exceeded.
        """
        prec = self.precision
        field, y = self.validate_inputs(field, y0)
        t0 = prec.scalar(t0)
        t_end = prec.scalar(t_end)
        if not t_end > t0:
            raise ValueError(f"t_end ({t_end}) must be greater than t0 ({t0})")

        log_precision_info(prec)
        logger.info(
            f"Integrating {field.name} with {self.name} on [{t0}, {t_end}] "
            f"({prec}, rtol={self._rtol}, atol={self._atol})"
        )

        f = _build_rhs_wrapper(field, prec)
        controller = _PIController(self.tableau, prec)
        fsal = self.tableau.fsal

        n_rejected = 0
        status = "success"

        with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
            k0 = f(t0, y)
            ts, ys, dys, Ks = [t0], [y.copy()], [k0], []

            def _fail(exc_type, message, t, y):
                partial = self._build_solution(ts, ys, dys, Ks, f.n_evals, n_rejected, exc_type.__name__)
                logger.warning(f"{self.name}: {message}")
                return exc_type(message, solution=partial, t=t, y=y.copy())

            if not prec.isfinite(k0):
                raise _fail(NonFiniteState, f"non-finite derivative at t = {t0}", t0, y)

            h = self._select_initial_step(t0, y, k0, t_end)
            t = t0
            rejects_in_row = 0

            while t < t_end:
                if len(Ks) >= self._max_steps:
                    raise _fail(IntegrationError,
                                f"maximum number of steps ({self._max_steps}) exceeded at t = {t}", t, y)

                floor = self._step_floor(t)
                if self._max_step is not None and h > self._max_step:
                    h = self._max_step

                remaining = t_end - t
                if h >= remaining or remaining - h < floor:
                    h = remaining
                    t_new = t_end
                else:
                    t_new = t + h

                result = self.step(f, t, y, h, k0, t_new)
                err = result.error_norm

                if not (prec.isfinite(result.y_new) and prec.isfinite([err])):
                    raise _fail(NonFiniteState,
                                f"non-finite state proposed at t = {t_new} (h = {h})", t, y)

                if result.accepted:
                    K = result.stages
                    t, y = t_new, result.y_new
                    k0 = K[-1] if fsal else f(t, y)
                    ts.append(t)
                    ys.append(y.copy())
                    dys.append(k0)
                    Ks.append(K)
                    rejects_in_row = 0
                    h = h * controller.accept(err)
                    logger.debug(f"accepted t = {t}, err = {err}, next h = {h}")

                    if callback is not None and callback(t, y.copy()):
                        status = "terminated"
                        logger.info(f"{self.name}: integration terminated by callback at t = {t}")
                        break
                else:
                    n_rejected += 1
                    rejects_in_row += 1
                    logger.debug(f"rejected t = {t}, h = {h}, err = {err}")
                    if rejects_in_row > self._max_rejects:
                        raise _fail(StepSizeUnderflow,
                                    f"{rejects_in_row} consecutive step rejections at t = {t}", t, y)
                    h = h * controller.reject(err)
                    if h < floor:
                        raise _fail(StepSizeUnderflow,
                                    f"step size underflow at t = {t} (h = {h} < {floor})", t, y)

        solution = self._build_solution(ts, ys, dys, Ks, f.n_evals, n_rejected, status)
        logger.info(
            f"{self.name}: {solution.n_accepted} accepted, {solution.n_rejected} rejected steps, "
            f"{solution.n_fevals} evaluations"
        )
        return solution


class _Tsit5(_AdaptiveStepRK):
    """Implement the Tsitouras 5(4) adaptive Runge-Kutta method.

    Seven stages with FSAL; dense output from Tsitouras' free 4th-order
    interpolant.
    """

    def __init__(self, **opts):
        super().__init__(TSIT5, **opts)


class _DP5(_AdaptiveStepRK):
    """Implement the Dormand-Prince 5(4) adaptive Runge-Kutta method.

    Seven stages with FSAL; dense output by the 4th-order continuous
    extension of Dormand and Prince.
    """

    def __init__(self, **opts):
        super().__init__(DP5, **opts)


class _Vern6(_AdaptiveStepRK):
    """Implement Verner's "most robust" 6(5) adaptive Runge-Kutta method.

    Nine stages with FSAL; dense output by quintic Hermite interpolation
    over the step and its longer neighbour.
    """

    def __init__(self, **opts):
        super().__init__(VERN6, **opts)


class AdaptiveRK:
    """Implement a factory class for creating adaptive step-size Runge-Kutta integrators.

    Examples
    --------
    >>> tsit5 = AdaptiveRK("Tsit5", rtol=1e-8, atol=1e-8)
    >>> vern6 = AdaptiveRK("Vern6", precision="extended")
    """
    _map = {"tsit5": _Tsit5, "dp5": _DP5, "vern6": _Vern6}

    def __new__(cls, method=DEFAULT_METHOD, **opts):
        """Create an adaptive step-size Runge-Kutta integrator.

        Parameters
        ----------
        method : str or :class:`~genode.algorithms.integrators.tableau.Tableau`
            ``"Tsit5"``, ``"DP5"`` or ``"Vern6"`` (case-insensitive), or a
            custom tableau.
        **opts
            Keyword arguments of :class:`_AdaptiveStepRK`.

        Raises
        ------
        ValueError
            If the method is not registered.
        """
        if isinstance(method, Tableau):
            return _AdaptiveStepRK(method, **opts)
        key = str(method).lower()
        if key not in cls._map:
            raise ValueError(f"Unknown method {method!r}; available: Tsit5, DP5, Vern6")
        return cls._map[key](**opts)


def integrate(field,
              y0,
              t0,
              t_end,
              method=DEFAULT_METHOD,
              atol=TOL,
              rtol=TOL,
              precision: PrecisionLike = DEFAULT_PRECISION,
              callback: Optional[Callable[[object, np.ndarray], bool]] = None,
              **options) -> Solution:
    """
    Integrate *field* from ``(t0, y0)`` to *t_end* with an adaptive method.

    Parameters
    ----------
    field : vector field
        Object exposing ``dim`` and ``rhs(t, y)``, e.g. one created with
        :func:`~genode.algorithms.dynamics.rhs.create_vector_field`.
    y0 : array_like
        Initial state.
    t0, t_end : scalar
        Integration span.
    method : str, default "Tsit5"
        ``"Tsit5"``, ``"DP5"`` or ``"Vern6"``.
    atol, rtol : float or str, default 1e-8
        Absolute and relative tolerances, converted to *precision*.
    precision : str, default "standard"
        ``"narrow"``, ``"standard"`` or ``"extended"``.
    callback : callable, optional
        ``callback(t, y) -> bool`` called after every accepted step; a truthy
        return stops the integration.
    **options
        ``first_step``, ``max_step``, ``min_step``, ``max_rejects`` and
        ``max_steps``; see :class:`_AdaptiveStepRK`.

    Returns
    -------
    :class:`~genode.algorithms.integrators.types.Solution`
        The accepted trajectory with dense output.

    Raises
    ------
    IntegrationError
        Subclasses :class:`StepSizeUnderflow` and :class:`NonFiniteState`
        carry the partial solution computed before the failure.
    TypeError
        If an option is not a keyword of :class:`_AdaptiveStepRK`.
    """
    integrator = AdaptiveRK(method, rtol=rtol, atol=atol, precision=precision, **options)
    return integrator.integrate(field, y0, t0, t_end, callback=callback)
