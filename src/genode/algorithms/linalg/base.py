"""Local stability classification of equilibria."""

import numpy as np

from genode.algorithms.linalg.backend import _LinalgBackend
from genode.algorithms.linalg.jacobian import JacobianStrategy, compute_jacobian
from genode.algorithms.linalg.types import Stability, StabilityReport
from genode.algorithms.utils.precision import PrecisionLike, get_precision
from genode.utils.log_config import logger


def classify_jacobian(jacobian,
                      precision: PrecisionLike = "standard",
                      tol=None) -> StabilityReport:
    """
    Classify the linearisation *jacobian* from its spectrum.

    Parameters
    ----------
    jacobian : array_like
        Square matrix.
    precision : str or precision object, default "standard"
        Precision in which the spectrum is computed.
    tol : scalar, optional
        Real parts not exceeding *tol* count as non-positive.  Defaults to
        ``sqrt(eps)`` of the active precision, so that eigenvalues that are
        zero in exact arithmetic (e.g. along a manifold of equilibria) are not
        reported as unstable because of rounding.

    Returns
    -------
    :class:`~genode.algorithms.linalg.types.StabilityReport`

    Raises
    ------
    DimensionMismatch
        If *jacobian* is not square.
    """
    prec = get_precision(precision)
    backend = _LinalgBackend(prec)

    jac = backend.validate_matrix(jacobian)
    eigenvalues = backend.eigenvalues(jac)
    max_real = backend.max_real_part(eigenvalues)

    tolerance = prec.sqrt_eps if tol is None else prec.scalar(tol)
    label = Stability.STABLE if max_real <= tolerance else Stability.UNSTABLE

    logger.debug(f"Spectrum {eigenvalues}: max real part {max_real} -> {label}")
    return StabilityReport(
        label=label,
        max_real_eigenvalue=max_real,
        eigenvalues=eigenvalues,
        tolerance=tolerance,
        jacobian=jac,
    )


def classify_equilibrium(field,
                         y0,
                         precision: PrecisionLike = "standard",
                         strategy=JacobianStrategy.DUAL,
                         tol=None,
                         t=0) -> StabilityReport:
    """
    Linearise *field* at *y0* and classify the equilibrium.

    The state is not checked to be an equilibrium; the classification is
    that of the linearisation at *y0*.

    Parameters
    ----------
    field : vector field
        Object exposing ``dim`` and ``rhs(t, y)``.
    y0 : array_like
        Candidate equilibrium.
    precision : str or precision object, default "standard"
        Precision of the Jacobian and of the eigenvalue computation.
    strategy : :class:`~genode.algorithms.linalg.jacobian.JacobianStrategy` or str
        How the Jacobian is obtained.
    tol : scalar, optional
        Stability threshold on the real parts; see :func:`classify_jacobian`.
    t : scalar, default 0
        Time at which non-autonomous fields are linearised.

    Returns
    -------
    :class:`~genode.algorithms.linalg.types.StabilityReport`
    """
    prec = get_precision(precision)
    jac = compute_jacobian(field, y0, t=t, precision=prec, strategy=strategy)
    report = classify_jacobian(jac, precision=prec, tol=tol)
    logger.info(f"Equilibrium at {np.asarray(y0).tolist()} is {report.label}")
    return report
