"""Provide the vector field abstractions consumed by the integrators.

A vector field is a pure callable ``rhs(t, y)`` returning the time derivative
of a state of fixed dimension.  The callable must not capture mutable state:
the integrators evaluate it many times per step and rely on it for
bit-reproducible trajectories.
"""

from abc import ABC, abstractmethod
from typing import Callable, Protocol, Sequence, runtime_checkable

import numpy as np

from genode.algorithms.utils.exceptions import DimensionMismatch


@runtime_checkable
class VectorFieldProtocol(Protocol):
    """
    Protocol defining the interface for vector fields.

    This protocol specifies the minimum interface that any vector field
    must implement to be compatible with the integrator framework and the
    Jacobian builder.
    """

    @property
    def dim(self) -> int:
        """Dimension of the state space."""
        ...

    @property
    def rhs(self) -> Callable[[object, np.ndarray], Sequence]:
        ...


class _VectorField(ABC):
    """
    Abstract base class for vector fields.

    This class provides common functionality for all vector fields
    while requiring subclasses to implement the specific dynamics.

    Parameters
    ----------
    dim : int
        Dimension of the state space
    name : str, optional
        Human readable identifier
    supports_dual : bool, default True
        Whether :attr:`rhs` can be evaluated on
        :class:`~genode.algorithms.linalg.dual.Dual` numbers.  Fields that
        call out to compiled code or use non-arithmetic operations should set
        this to False so that Jacobians fall back to finite differences.
    """

    def __init__(self, dim: int, name: str = None, supports_dual: bool = True):
        if dim <= 0:
            raise ValueError(f"Dimension must be positive, got {dim}")
        self._dim = int(dim)
        self.name = name if name is not None else self.__class__.__name__
        self.supports_dual = bool(supports_dual)

    @property
    def dim(self) -> int:
        """Dimension of the state space."""
        return self._dim

    @property
    @abstractmethod
    def rhs(self) -> Callable[[object, np.ndarray], Sequence]:
        pass

    def __call__(self, t, y):
        return self.rhs(t, y)

    def validate_state(self, y: Sequence) -> None:
        """
        Validate that a state vector has the correct dimension.

        Parameters
        ----------
        y : sequence
            State vector to validate

        Raises
        ------
        DimensionMismatch
            If the state vector has incorrect dimension
        """
        if np.ndim(y) != 1 or len(y) != self.dim:
            raise DimensionMismatch(
                f"State vector shape {np.shape(y)} incompatible with {self.name} of dimension {self.dim}"
            )

    def validate_derivative(self, dy: Sequence) -> None:
        """Validate that an evaluation of :attr:`rhs` has the correct length."""
        try:
            n = len(dy)
        except TypeError:
            raise DimensionMismatch(
                f"{self.name} returned a scalar; expected a sequence of length {self.dim}"
            ) from None
        if n != self.dim:
            raise DimensionMismatch(
                f"{self.name} returned {n} components; expected {self.dim}"
            )
