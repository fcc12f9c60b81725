"""Explicit embedded Runge-Kutta integrators with dense output."""

from .base import _Integrator
from .rk import AdaptiveRK, FixedStepRK, integrate
from .tableau import (DP5, TABLEAUS, TSIT5, VERN6, Tableau, available_methods,
                      get_tableau)
from .types import Solution, StepResult

__all__ = [
    "_Integrator",
    "AdaptiveRK",
    "FixedStepRK",
    "integrate",
    "Tableau",
    "TABLEAUS",
    "TSIT5",
    "DP5",
    "VERN6",
    "get_tableau",
    "available_methods",
    "Solution",
    "StepResult",
]
