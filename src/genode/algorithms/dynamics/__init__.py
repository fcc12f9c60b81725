"""Vector fields and the biological models built on them."""

from .base import VectorFieldProtocol, _VectorField
from .genetics import (system2_modified, system2_original, system3_modified,
                       system3_modified_steady_state, system3_original,
                       system3_original_steady_state, total_mass)
from .rhs import RHSVectorField, as_vector_field, create_vector_field

__all__ = [
    "VectorFieldProtocol",
    "_VectorField",
    "RHSVectorField",
    "create_vector_field",
    "as_vector_field",
    "system2_original",
    "system2_modified",
    "system3_original",
    "system3_modified",
    "system3_original_steady_state",
    "system3_modified_steady_state",
    "total_mass",
]
