"""Provide abstract interfaces for numerical time integration.

References
----------
Hairer, E., Norsett, S. P., & Wanner, G. (1993). "Solving Ordinary
Differential Equations I: Non-stiff Problems".
"""

from abc import ABC, abstractmethod
from typing import Optional

from genode.algorithms.dynamics.base import VectorFieldProtocol, _VectorField
from genode.algorithms.dynamics.rhs import as_vector_field
from genode.algorithms.integrators.types import Solution
from genode.algorithms.utils.precision import PrecisionLike, get_precision


class _Integrator(ABC):
    """Define the minimal interface that every concrete integrator must satisfy.

    Parameters
    ----------
    name : str
        Human-readable identifier of the method.
    precision : str or precision object, default "standard"
        Arithmetic used for states, times and tolerances.

    Notes
    -----
    Subclasses *must* implement the abstract members :attr:`order` and
    :meth:`integrate`.
    """

    def __init__(self, name: str, precision: PrecisionLike = "standard"):
        self.name = name
        self.precision = get_precision(precision)

    @property
    @abstractmethod
    def order(self) -> Optional[int]:
        """Order of accuracy of the integrator.

        Returns
        -------
        int or None
            Order of the method, or None if not applicable
        """
        pass

    @abstractmethod
    def integrate(self, field: VectorFieldProtocol, y0, *args, **kwargs) -> Solution:
        """Integrate *field* from the initial state *y0*.

        Returns
        -------
        :class:`~genode.algorithms.integrators.types.Solution`
            Integration results containing times, states and stage data

        Raises
        ------
        ValueError
            If the inputs do not form a valid integration task
        """
        pass

    def validate_inputs(self, field, y0) -> tuple:
        """Return ``(field, y0)`` coerced to a vector field and a state array.

        Raises
        ------
        TypeError
            If *field* does not expose ``dim`` and ``rhs``.
        DimensionMismatch
            If ``len(y0)`` differs from ``field.dim``.
        """
        field: _VectorField = as_vector_field(field)
        y0 = self.precision.asarray(y0)
        field.validate_state(y0)
        return field, y0

    def __str__(self):
        return f"genode-{self.name}"

    def __repr__(self):
        return f"{self.__class__.__name__}(name='{self.name}', precision='{self.precision}')"
