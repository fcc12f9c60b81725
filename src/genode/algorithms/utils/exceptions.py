"""
Custom exceptions for the algorithms package.
"""


class GenodeError(Exception):
    """Base exception for genode errors.

    Parameters
    ----------
    message : str
        The error message.
    """

    def __init__(self, message: str):
        super().__init__(message)


class InvalidTableau(GenodeError):
    """Raised when a Butcher tableau violates its consistency conditions.

    Parameters
    ----------
    message : str
        The error message.
    """

    def __init__(self, message: str):
        super().__init__(message)


class DimensionMismatch(GenodeError, ValueError):
    """Raised when state, vector field or Jacobian dimensions disagree.

    Parameters
    ----------
    message : str
        The error message.
    """

    def __init__(self, message: str):
        super().__init__(message)


class IntegrationError(GenodeError):
    """Raised when an integration cannot reach the end of its time span.

    The trajectory accumulated up to the failure is attached so that callers
    can still inspect (or plot) it.

    Parameters
    ----------
    message : str
        The error message.
    solution : :class:`~genode.algorithms.integrators.types.Solution` or None
        Partial solution containing every step committed before the failure.
    t : scalar or None
        Time of the last valid state.
    y : numpy.ndarray or None
        Last valid state.
    """

    def __init__(self, message: str, solution=None, t=None, y=None):
        super().__init__(message)
        self.solution = solution
        self.t = t
        self.y = y


class StepSizeUnderflow(IntegrationError):
    """Raised when step rejections drive the step size below its floor."""


class NonFiniteState(IntegrationError):
    """Raised when a proposed state contains NaN or infinite components."""
