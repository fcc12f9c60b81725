"""Dense output for accepted Runge-Kutta steps.

Three interpolants are available for an interval ``[t_j, t_{j+1}]``:

- the method specific continuous extension, when the tableau provides a
  ``P`` matrix (Tsitouras, Dormand-Prince), of the same local order as the
  method's embedded solution;
- otherwise a quintic Hermite interpolant over the interval and its longer
  neighbour, built from three stored states and their derivatives;
- a cubic Hermite interpolant of the endpoint states and derivatives when
  no usable neighbour exists (a single step, or a neighbour much shorter
  than the interval).

None evaluates the vector field.  All reproduce the stored states, and
queries that hit a stored node return the stored state exactly.
"""

from bisect import bisect_right
from typing import Optional, Tuple

import numpy as np


def locate_interval(times, t) -> int:
    """Return ``j`` with ``times[j] <= t <= times[j+1]`` (the last interval for ``t = times[-1]``)."""
    j = bisect_right(times, t) - 1
    return min(max(j, 0), len(times) - 2)


def hermite(t0, t1, y0, y1, f0, f1, t) -> np.ndarray:
    """Evaluate the cubic Hermite interpolant of ``(y0, f0)``, ``(y1, f1)`` at *t*."""
    h = t1 - t0
    s = (t - t0) / h
    s2 = s * s
    s3 = s2 * s
    h00 = 2 * s3 - 3 * s2 + 1
    h10 = s3 - 2 * s2 + s
    h01 = -2 * s3 + 3 * s2
    h11 = s3 - s2
    return h00 * y0 + h10 * (h * f0) + h01 * y1 + h11 * (h * f1)


def hermite_stencil(times, j) -> Optional[Tuple[int, int, int]]:
    """Pick three node indices around interval *j* for the quintic interpolant.

    The longer of the two neighbouring intervals is used.  Returns ``None``
    when interval *j* has no neighbour or the longer one is shorter than an
    eighth of it.
    """
    h = times[j + 1] - times[j]
    left = times[j] - times[j - 1] if j > 0 else None
    right = times[j + 2] - times[j + 1] if j + 2 < len(times) else None
    if left is None and right is None:
        return None
    if right is None or (left is not None and left >= right):
        if left * 8 < h:
            return None
        return j - 1, j, j + 1
    if right * 8 < h:
        return None
    return j, j + 1, j + 2


def hermite_quintic(nodes, states, derivs, t) -> np.ndarray:
    """Evaluate the quintic Hermite interpolant of three nodes at *t*.

    Parameters
    ----------
    nodes : sequence of scalar
        Three increasing times.
    states, derivs : sequence of numpy.ndarray
        States and derivatives at *nodes*.
    t : scalar
        Query time.

    Notes
    -----
    Newton form over the doubled nodes ``x0, x0, x1, x1, x2, x2``; the first
    divided difference over a repeated node is the stored derivative.
    """
    z = [nodes[i // 2] for i in range(6)]
    table = [states[i // 2] for i in range(6)]
    coeffs = [table[0]]
    for k in range(1, 6):
        nxt = []
        for i in range(6 - k):
            if k == 1 and i % 2 == 0:
                nxt.append(derivs[i // 2])
            else:
                nxt.append((table[i + 1] - table[i]) / (z[i + k] - z[i]))
        table = nxt
        coeffs.append(table[0])

    acc = coeffs[5]
    for k in range(4, -1, -1):
        acc = coeffs[k] + (t - z[k]) * acc
    return acc


def continuous_extension(t0, t1, y0, K: np.ndarray, P, t) -> np.ndarray:
    """Evaluate ``y0 + h * sum_r K[r] * sum_c P[r][c] * theta**(c+1)``.

    Parameters
    ----------
    t0, t1 : scalar
        Interval endpoints.
    y0 : numpy.ndarray
        State at *t0*.
    K : numpy.ndarray
        Stage derivatives of the interval, shape (s, dim).
    P : sequence of sequences
        Interpolation coefficients of shape (s, degree) in the precision of
        the states.
    t : scalar
        Query time.
    """
    h = t1 - t0
    theta = (t - t0) / h

    powers = []
    val = theta
    for _ in range(len(P[0])):
        powers.append(val)
        val = val * theta

    acc = None
    for r, row in enumerate(P):
        weight = sum(p * w for p, w in zip(row, powers) if p != 0)
        if weight == 0:
            continue
        term = K[r] * weight
        acc = term if acc is None else acc + term
    if acc is None:
        return y0.copy()
    return y0 + h * acc
