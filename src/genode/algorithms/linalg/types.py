"""Types and dataclasses for the linear stability module."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np


class Stability(Enum):
    """
    Linear stability of an equilibrium.

    Parameters
    ----------
    STABLE : str
        No eigenvalue has real part above the tolerance.
    UNSTABLE : str
        At least one eigenvalue has real part above the tolerance.
    """
    STABLE = "stable"
    UNSTABLE = "unstable"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class StabilityReport:
    """Outcome of a local stability classification.

    Parameters
    ----------
    label : :class:`Stability`
        Classification of the equilibrium.
    max_real_eigenvalue : scalar
        Largest real part over the spectrum, in the active precision.
    eigenvalues : numpy.ndarray
        Full spectrum of the Jacobian.
    tolerance : scalar
        Threshold used to absorb numerical noise around zero.
    jacobian : numpy.ndarray
        The linearisation that was classified.
    """

    label: Stability
    max_real_eigenvalue: Any
    eigenvalues: np.ndarray
    tolerance: Any
    jacobian: np.ndarray

    @property
    def is_stable(self) -> bool:
        return self.label is Stability.STABLE

    def __str__(self) -> str:
        return f"{self.label} (max Re(lambda) = {self.max_real_eigenvalue}, tol = {self.tolerance})"
