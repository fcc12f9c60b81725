"""
Precision utilities for multi-precision arithmetic.

This module provides the numeric scalar abstraction shared by the integrators
and the stability analysis.  Three kinds are available:

- ``"narrow"``: IEEE single precision (``numpy.float32``),
- ``"standard"``: IEEE double precision (``numpy.float64``),
- ``"extended"``: arbitrary precision through a private :mod:`mpmath` context.

States are always :class:`numpy.ndarray` instances; extended precision uses an
``object`` array of ``mpf`` values so that the same vectorised arithmetic
works for every kind.  Algorithms only ever talk to a :class:`_Precision`
instance and never hard-code a bit width.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from fractions import Fraction
from functools import lru_cache
from numbers import Integral, Rational
from typing import Any, Union

import numpy as np
from mpmath.ctx_mp import MPContext

from genode.algorithms.utils.config import (MPMATH_DPS, NUMPY_DTYPE_NARROW,
                                            NUMPY_DTYPE_STANDARD)
from genode.utils.log_config import logger


class PrecisionKind(Enum):
    """Floating point representation used by an integration or analysis.

    Parameters
    ----------
    NARROW : str
        IEEE-754 single precision.
    STANDARD : str
        IEEE-754 double precision.
    EXTENDED : str
        Arbitrary precision (mpmath), configurable number of decimal digits.
    """
    NARROW = "narrow"
    STANDARD = "standard"
    EXTENDED = "extended"

    def __str__(self) -> str:
        return self.value


class _Precision(ABC):
    """Define the arithmetic capabilities required by the numerical core."""

    kind: PrecisionKind

    @property
    @abstractmethod
    def dtype(self) -> np.dtype:
        """Return the numpy dtype used to store states."""

    @property
    @abstractmethod
    def eps(self) -> Any:
        """Return the machine epsilon as a scalar of this precision."""

    @abstractmethod
    def scalar(self, value: Any) -> Any:
        """Convert *value* (decimal literal, int, float or Fraction) to a scalar."""

    @abstractmethod
    def asarray(self, values: Any) -> np.ndarray:
        """Return a fresh array holding *values* in this precision."""

    @abstractmethod
    def sqrt(self, x: Any) -> Any:
        """Return the square root of a scalar."""

    @abstractmethod
    def isfinite(self, values: Any) -> bool:
        """Return True when every element of *values* is finite."""

    @abstractmethod
    def eigvals(self, matrix: np.ndarray) -> np.ndarray:
        """Return the eigenvalues of a square matrix of this precision."""

    @abstractmethod
    def real(self, z: Any) -> Any:
        """Return the real part of a (possibly complex) scalar."""

    def zeros(self, shape) -> np.ndarray:
        """Return an array of zeros in this precision."""
        return self.asarray(np.zeros(shape, dtype=np.int64))

    def to_reference(self, values: Any) -> np.ndarray:
        """Return a float64 copy of *values* (the reference precision)."""
        return np.array(values, dtype=np.float64)

    @property
    def sqrt_eps(self) -> Any:
        return self.sqrt(self.eps)

    def __str__(self) -> str:
        return str(self.kind)


def _as_fraction(value: Any) -> Fraction:
    """Return the exact rational represented by a decimal literal or number."""
    if isinstance(value, Fraction):
        return value
    if isinstance(value, str):
        return Fraction(value.strip())
    if isinstance(value, (Integral, Rational)):
        return Fraction(value)
    # Floats are read through their shortest repr so that 1e-8 means 10**-8.
    return Fraction(repr(float(value)))


@dataclass(frozen=True)
class _NativePrecision(_Precision):
    """Hardware floating point precision backed by a numpy dtype.

    Parameters
    ----------
    kind : :class:`PrecisionKind`
        Either narrow or standard.
    dtype_name : str
        Name of the numpy floating dtype, e.g. ``"float32"``.
    """

    kind: PrecisionKind
    dtype_name: str

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.dtype_name)

    @property
    def eps(self):
        return np.finfo(self.dtype).eps

    def scalar(self, value):
        t = self.dtype.type
        if isinstance(value, (float, np.floating)):
            return t(value)
        if isinstance(value, np.ndarray) and value.ndim == 0:
            return t(value)
        try:
            return t(float(_as_fraction(value)))
        except (TypeError, ValueError):
            # mpf values, "inf", "nan"
            return t(float(value))

    def asarray(self, values):
        return np.array(values, dtype=self.dtype)

    def sqrt(self, x):
        return np.sqrt(self.dtype.type(x))

    def isfinite(self, values) -> bool:
        return bool(np.all(np.isfinite(values)))

    def eigvals(self, matrix):
        return np.linalg.eigvals(np.asarray(matrix, dtype=self.dtype))

    def real(self, z):
        return np.real(z)


@dataclass(frozen=True)
class _ExtendedPrecision(_Precision):
    """Arbitrary precision arithmetic through a private mpmath context.

    A dedicated :class:`mpmath.ctx_mp.MPContext` is created per instance so
    that no global mpmath state is touched; values created by
    :meth:`scalar` carry the context and its working precision with them.

    Parameters
    ----------
    dps : int
        Number of significant decimal digits.
    """

    dps: int = MPMATH_DPS
    kind: PrecisionKind = PrecisionKind.EXTENDED
    ctx: MPContext = field(default=None, compare=False, hash=False, repr=False)

    def __post_init__(self):
        if self.dps <= 0:
            raise ValueError(f"Decimal digits must be positive, got {self.dps}")
        ctx = MPContext()
        ctx.dps = self.dps
        object.__setattr__(self, "ctx", ctx)

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(object)

    @property
    def eps(self):
        return self.ctx.eps

    def scalar(self, value):
        ctx = self.ctx
        if isinstance(value, str):
            text = value.strip()
            if "/" in text:
                frac = Fraction(text)
                return ctx.mpf(frac.numerator) / frac.denominator
            return ctx.mpf(text)
        if isinstance(value, Fraction):
            return ctx.mpf(value.numerator) / value.denominator
        if isinstance(value, bool):
            return ctx.mpf(int(value))
        if isinstance(value, Integral):
            return ctx.mpf(int(value))
        if isinstance(value, (float, np.floating)):
            if not math.isfinite(value):
                return ctx.mpf(float(value))
            return ctx.mpf(repr(float(value)))
        return ctx.mpf(value)

    def asarray(self, values):
        arr = np.asarray(values, dtype=object)
        out = np.empty(arr.shape, dtype=object)
        for idx, v in np.ndenumerate(arr):
            out[idx] = self.scalar(v)
        return out

    def sqrt(self, x):
        return self.ctx.sqrt(x)

    def isfinite(self, values) -> bool:
        return all(self.ctx.isfinite(v) for v in np.ravel(np.asarray(values, dtype=object)))

    def eigvals(self, matrix):
        mat = self.ctx.matrix(np.asarray(matrix, dtype=object).tolist())
        eigenvalues = self.ctx.eig(mat, left=False, right=False)
        return np.array(list(eigenvalues), dtype=object)

    def real(self, z):
        return self.ctx.re(z)

    def __str__(self) -> str:
        return f"{self.kind}({self.dps} digits)"


PrecisionLike = Union[str, PrecisionKind, _Precision]


@lru_cache(maxsize=None)
def _make_precision(kind: PrecisionKind, dps: int) -> _Precision:
    if kind is PrecisionKind.NARROW:
        return _NativePrecision(kind, NUMPY_DTYPE_NARROW)
    if kind is PrecisionKind.STANDARD:
        return _NativePrecision(kind, NUMPY_DTYPE_STANDARD)
    return _ExtendedPrecision(dps=dps)


def get_precision(kind: PrecisionLike = PrecisionKind.STANDARD, dps: int = None) -> _Precision:
    """Return the precision object for *kind*.

    Parameters
    ----------
    kind : str, :class:`PrecisionKind` or precision instance
        ``"narrow"``, ``"standard"`` or ``"extended"``.  A precision instance
        is returned unchanged.
    dps : int, optional
        Decimal digits for extended precision. Defaults to
        :data:`~genode.algorithms.utils.config.MPMATH_DPS`.

    Returns
    -------
    :class:`_Precision`
        A cached, immutable precision object.

    Raises
    ------
    ValueError
        If *kind* does not name a known precision.
    """
    if isinstance(kind, _Precision):
        return kind
    try:
        kind = PrecisionKind(kind)
    except ValueError:
        valid = ", ".join(k.value for k in PrecisionKind)
        raise ValueError(f"Unknown precision kind {kind!r}; expected one of {valid}") from None
    if kind is not PrecisionKind.EXTENDED:
        dps = 0
    elif dps is None:
        dps = MPMATH_DPS
    return _make_precision(kind, int(dps))


def log_precision_info(precision: _Precision) -> None:
    """Log the active precision settings."""
    if precision.kind is PrecisionKind.EXTENDED:
        logger.debug(f"Using arbitrary precision with {precision.dps} decimal places")
    else:
        logger.debug(f"Using {precision.kind} precision (dtype: {precision.dtype})")
