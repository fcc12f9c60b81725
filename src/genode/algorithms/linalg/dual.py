"""Forward-mode automatic differentiation with multi-channel dual numbers.

A :class:`Dual` carries a value together with its gradient with respect to
every component of the state.  Evaluating a vector field once on a state of
duals therefore yields the full Jacobian.  Values and gradients are kept in
whatever scalar type they were seeded with, so the derivatives are exact to
the working precision.
"""

from numbers import Integral

import numpy as np


class Dual:
    """Number of the form ``value + sum_j grad[j]*eps_j`` with ``eps_i*eps_j = 0``.

    Parameters
    ----------
    value : scalar
        Real part, in the active precision.
    grad : numpy.ndarray
        Derivative channels, one per independent variable.
    """

    __slots__ = ("value", "grad")

    # Let Python dispatch ``numpy_scalar * Dual`` to the reflected operators
    # instead of numpy broadcasting over an object array.
    __array_ufunc__ = None

    def __init__(self, value, grad):
        self.value = value
        self.grad = grad

    def _lift(self, other) -> "Dual":
        if isinstance(other, Dual):
            return other
        return Dual(other, self.grad * 0)

    def __add__(self, other):
        if isinstance(other, Dual):
            return Dual(self.value + other.value, self.grad + other.grad)
        return Dual(self.value + other, self.grad)

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        if isinstance(other, Dual):
            return Dual(self.value - other.value, self.grad - other.grad)
        return Dual(self.value - other, self.grad)

    def __rsub__(self, other):
        return Dual(other - self.value, -self.grad)

    def __mul__(self, other):
        if isinstance(other, Dual):
            return Dual(self.value * other.value,
                        self.grad * other.value + other.grad * self.value)
        return Dual(self.value * other, self.grad * other)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __truediv__(self, other):
        if isinstance(other, Dual):
            denom = other.value * other.value
            return Dual(self.value / other.value,
                        (self.grad * other.value - other.grad * self.value) / denom)
        return Dual(self.value / other, self.grad / other)

    def __rtruediv__(self, other):
        return self._lift(other).__truediv__(self)

    def __pow__(self, exponent):
        if isinstance(exponent, Dual):
            raise TypeError("Dual exponents are not supported")
        if isinstance(exponent, Integral):
            n = int(exponent)
            if n == 0:
                return Dual(self.value ** 0, self.grad * 0)
            return Dual(self.value ** n, self.grad * (n * self.value ** (n - 1)))
        return Dual(self.value ** exponent,
                    self.grad * (exponent * self.value ** (exponent - 1)))

    def __neg__(self):
        return Dual(-self.value, -self.grad)

    def __pos__(self):
        return self

    def __abs__(self):
        return -self if self.value < 0 else self

    # Comparisons look at the value only, so branches in a field follow the
    # primal evaluation.
    def __lt__(self, other):
        return self.value < _primal(other)

    def __le__(self, other):
        return self.value <= _primal(other)

    def __gt__(self, other):
        return self.value > _primal(other)

    def __ge__(self, other):
        return self.value >= _primal(other)

    def __eq__(self, other):
        return self.value == _primal(other)

    def __ne__(self, other):
        return self.value != _primal(other)

    __hash__ = None

    def __repr__(self) -> str:
        return f"Dual({self.value!r}, {list(self.grad)!r})"


def _primal(x):
    return x.value if isinstance(x, Dual) else x
