"""Population genetics models of allele frequency dynamics.

The state holds genotype frequencies ``q`` whose components sum to one.  The
"original" models add the normalising term ``-q_i`` to the selection
dynamics, the "modified" models are rearranged so that ``sum(dq/dt) = 0``
holds identically.  Both forms keep the simplex invariant in exact
arithmetic; only the modified form keeps it under rounding.

All constants are written with Python integers so that the same function
evaluates exactly for every precision and on dual numbers.
"""

from typing import Sequence

import numpy as np

from genode.algorithms.dynamics.rhs import create_vector_field
from genode.algorithms.utils.precision import PrecisionLike, get_precision


def _system3_original_rhs(t, q):
    """
    Three-genotype selection model in its original (non-conservative) form.

    Parameters
    ----------
    t : scalar
        Time (unused, the model is autonomous)
    q : array_like
        Genotype frequencies ``[q1, q2, q3]``

    Returns
    -------
    list
        Time derivative ``[dq1, dq2, dq3]``

    Notes
    -----
    The sum of the derivatives equals ``s**2 - s`` with ``s = q1 + q2 + q3``,
    so ``s = 1`` is an unstable invariant manifold: rounding errors that push
    ``s`` off one grow like ``exp(t)``.
    """
    q1, q2, q3 = q[0], q[1], q[2]
    dq1 = q1*q1 + q1*q2 + q2*q2/4 - q1
    dq2 = q2*q2/2 + q1*q2 + 2*q1*q3 + q2*q3 - q2
    dq3 = q2*q2/4 + q2*q3 + q3*q3 - q3
    return [dq1, dq2, dq3]


def _system3_modified_rhs(t, q):
    """Three-genotype model rewritten so that the derivatives sum to zero."""
    q1, q2, q3 = q[0], q[1], q[2]
    dq1 = q2*q2/4 - q1*q3
    dq2 = -q2*q2/2 + 2*q1*q3
    dq3 = q2*q2/4 - q1*q3
    return [dq1, dq2, dq3]


def _system2_original_rhs(t, q):
    q1, q2 = q[0], q[1]
    dq1 = 7*q1*q1/10 + q1*q2 + 3*q2*q2/10 - q1
    dq2 = 7*q2*q2/10 + q1*q2 + 3*q1*q1/10 - q2
    return [dq1, dq2]


def _system2_modified_rhs(t, q):
    q1, q2 = q[0], q[1]
    dq1 = 3*(q2*q2 - q1*q1)/10
    dq2 = 3*(q1*q1 - q2*q2)/10
    return [dq1, dq2]


system3_original = create_vector_field(_system3_original_rhs, 3, name="system3_original")
system3_modified = create_vector_field(_system3_modified_rhs, 3, name="system3_modified")
system2_original = create_vector_field(_system2_original_rhs, 2, name="system2_original")
system2_modified = create_vector_field(_system2_modified_rhs, 2, name="system2_modified")


def system3_original_steady_state(q1, precision: PrecisionLike = "standard") -> np.ndarray:
    """
    Return the point of the Hardy-Weinberg manifold parametrised by *q1*.

    Every point ``[q1, 2*(sqrt(q1) - q1), 1 + q1 - 2*sqrt(q1)]`` with
    ``0 <= q1 <= 1`` is an equilibrium of :data:`system3_original` and of
    :data:`system3_modified`.

    Parameters
    ----------
    q1 : scalar or str
        Frequency of the first genotype, in ``[0, 1]``
    precision : str or precision object, default "standard"
        Precision of the returned state

    Returns
    -------
    numpy.ndarray
        Equilibrium state of shape (3,)
    """
    prec = get_precision(precision)
    q1 = prec.scalar(q1)
    if q1 < 0 or q1 > 1:
        raise ValueError(f"q1 must lie in [0, 1], got {q1}")
    r = prec.sqrt(q1)
    return prec.asarray([q1, 2*(r - q1), 1 + q1 - 2*r])


def system3_modified_steady_state(q1, q2, precision: PrecisionLike = "standard") -> np.ndarray:
    """Return the equilibrium of :data:`system3_modified` with given ``q1, q2``.

    The third component follows from ``q2**2 = 4*q1*q3``.
    """
    prec = get_precision(precision)
    q1, q2 = prec.scalar(q1), prec.scalar(q2)
    if q1 == 0:
        raise ValueError("q1 must be non-zero to determine q3 = q2**2 / (4*q1)")
    return prec.asarray([q1, q2, q2*q2/(4*q1)])


def total_mass(states: Sequence) -> np.ndarray:
    """Return the sum of the components of each state (last axis)."""
    states = np.asarray(states)
    return np.sum(states, axis=-1)
