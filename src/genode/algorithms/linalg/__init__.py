"""Jacobians and local stability analysis."""

from .base import classify_equilibrium, classify_jacobian
from .dual import Dual
from .jacobian import JacobianStrategy, compute_jacobian
from .types import Stability, StabilityReport

__all__ = [
    "Dual",
    "JacobianStrategy",
    "compute_jacobian",
    "Stability",
    "StabilityReport",
    "classify_jacobian",
    "classify_equilibrium",
]
