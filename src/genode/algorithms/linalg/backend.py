"""Eigenvalue backend dispatching on the active precision."""

from typing import Any

import numpy as np

from genode.algorithms.utils.exceptions import DimensionMismatch
from genode.algorithms.utils.precision import _Precision


class _LinalgBackend:
    """Compute spectra of square matrices in a given precision.

    Native precisions go through :func:`numpy.linalg.eigvals`; extended
    precision uses the QR algorithm of :mod:`mpmath`.

    Parameters
    ----------
    precision : :class:`~genode.algorithms.utils.precision._Precision`
        Precision of the matrices handed to the backend.
    """

    def __init__(self, precision: _Precision):
        self.precision = precision

    def validate_matrix(self, matrix) -> np.ndarray:
        matrix = self.precision.asarray(matrix)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise DimensionMismatch(f"Expected a square matrix, got shape {matrix.shape}")
        if matrix.shape[0] == 0:
            raise DimensionMismatch("Cannot classify an empty matrix")
        return matrix

    def eigenvalues(self, matrix) -> np.ndarray:
        return self.precision.eigvals(self.validate_matrix(matrix))

    def max_real_part(self, eigenvalues: np.ndarray) -> Any:
        return max(self.precision.real(lam) for lam in eigenvalues)
