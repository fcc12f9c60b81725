from typing import Callable, Sequence

import numpy as np

from genode.algorithms.dynamics.base import VectorFieldProtocol, _VectorField


class RHSVectorField(_VectorField):
    def __init__(self,
                 rhs_func: Callable[[object, np.ndarray], Sequence],
                 dim: int,
                 name: str = "Generic RHS",
                 supports_dual: bool = True):
        """Wrap an arbitrary RHS into a :class:`_VectorField` instance.

        The supplied *rhs_func* is called as ``rhs_func(t, y)`` where *y* is a
        numpy array whose elements are scalars of the active precision (or
        dual numbers during Jacobian evaluation).  It may return any sequence
        of length *dim*; conversion to the state precision is done by the
        caller.
        """
        if not callable(rhs_func):
            raise TypeError(f"rhs_func must be callable, got {type(rhs_func).__name__}")
        super().__init__(dim, name=name, supports_dual=supports_dual)
        self._rhs = rhs_func

    @property
    def rhs(self) -> Callable[[object, np.ndarray], Sequence]:
        return self._rhs

    def __repr__(self) -> str:
        return f"RHSVectorField(name='{self.name}', dim={self.dim})"


def create_vector_field(rhs_func: Callable[[object, np.ndarray], Sequence],
                        dim: int,
                        name: str = "Generic RHS",
                        supports_dual: bool = True) -> RHSVectorField:
    return RHSVectorField(rhs_func, dim, name, supports_dual=supports_dual)


def as_vector_field(field, name: str = None) -> _VectorField:
    """Return *field* as a :class:`_VectorField`.

    Objects already deriving from :class:`_VectorField` are returned
    unchanged; anything else satisfying
    :class:`~genode.algorithms.dynamics.base.VectorFieldProtocol` is wrapped.
    Bare callables are rejected because their dimension is unknown.
    """
    if isinstance(field, _VectorField):
        return field
    if isinstance(field, VectorFieldProtocol):
        return RHSVectorField(
            field.rhs,
            field.dim,
            name=name or getattr(field, "name", type(field).__name__),
            supports_dual=getattr(field, "supports_dual", True),
        )
    raise TypeError(
        f"Expected a vector field with 'dim' and 'rhs', got {type(field).__name__}; "
        "wrap plain functions with create_vector_field(rhs, dim)"
    )
