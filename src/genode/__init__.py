"""genode: adaptive Runge-Kutta integration in narrow, standard and extended
precision, with local stability analysis of equilibria.
"""

from genode.algorithms.dynamics import (RHSVectorField, create_vector_field,
                                        system2_modified, system2_original,
                                        system3_modified,
                                        system3_modified_steady_state,
                                        system3_original,
                                        system3_original_steady_state,
                                        total_mass)
from genode.algorithms.integrators import (TABLEAUS, AdaptiveRK, FixedStepRK,
                                           Solution, Tableau, available_methods,
                                           get_tableau, integrate)
from genode.algorithms.linalg import (JacobianStrategy, Stability,
                                      StabilityReport, classify_equilibrium,
                                      classify_jacobian, compute_jacobian)
from genode.algorithms.utils.exceptions import (DimensionMismatch,
                                                GenodeError, IntegrationError,
                                                InvalidTableau, NonFiniteState,
                                                StepSizeUnderflow)
from genode.algorithms.utils.precision import PrecisionKind, get_precision

__version__ = "0.1.0"

__all__ = [
    "integrate",
    "AdaptiveRK",
    "FixedStepRK",
    "Solution",
    "Tableau",
    "TABLEAUS",
    "get_tableau",
    "available_methods",
    "classify_equilibrium",
    "classify_jacobian",
    "compute_jacobian",
    "JacobianStrategy",
    "Stability",
    "StabilityReport",
    "RHSVectorField",
    "create_vector_field",
    "system2_original",
    "system2_modified",
    "system3_original",
    "system3_modified",
    "system3_original_steady_state",
    "system3_modified_steady_state",
    "total_mass",
    "PrecisionKind",
    "get_precision",
    "GenodeError",
    "IntegrationError",
    "StepSizeUnderflow",
    "NonFiniteState",
    "InvalidTableau",
    "DimensionMismatch",
]
