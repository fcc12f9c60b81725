"""Butcher tableaus of the embedded Runge-Kutta pairs.

Coefficients are held as exact :class:`fractions.Fraction` values and are
converted once per precision (see :meth:`Tableau.coefficients`), so the same
tableau drives narrow, standard and extended precision integrations.
"""

from dataclasses import dataclass
from fractions import Fraction
from functools import lru_cache
from types import MappingProxyType
from typing import Any, List, Optional, Tuple

from genode.algorithms.integrators.coefficients import dp5, tsit5, vern6
from genode.algorithms.utils.exceptions import InvalidTableau
from genode.algorithms.utils.precision import _as_fraction, _Precision

# Published decimal coefficients (Tsitouras) only satisfy the consistency
# conditions to about 16 digits.
CONSISTENCY_TOL = Fraction(1, 10**12)


def _row(values) -> Tuple[Fraction, ...]:
    return tuple(_as_fraction(v) for v in values)


@dataclass(frozen=True)
class Tableau:
    """Explicit embedded Runge-Kutta pair.

    Parameters
    ----------
    name : str
        Registry key of the method.
    A : sequence of sequences
        Strictly lower triangular stage matrix of shape (s, s).
    b, b_hat : sequence
        Weights of the propagating and of the embedded solution.
    c : sequence
        Stage nodes in units of the step size.
    order, embedded_order : int
        Formal orders; they must differ by exactly one.
    fsal : bool
        Whether the last stage is evaluated at ``(t + h, y_new)`` so that it
        can be reused as the first stage of the next step.
    P : sequence of sequences, optional
        Continuous extension: ``y(t + theta*h) = y + h * sum_r k_r *
        sum_c P[r][c] * theta**(c+1)``.
    safety, min_factor, max_factor, beta :
        PI step size controller constants.

    Raises
    ------
    InvalidTableau
        If the coefficients violate the consistency conditions.
    """

    name: str
    A: Tuple[Tuple[Fraction, ...], ...]
    b: Tuple[Fraction, ...]
    b_hat: Tuple[Fraction, ...]
    c: Tuple[Fraction, ...]
    order: int
    embedded_order: int
    fsal: bool = False
    P: Optional[Tuple[Tuple[Fraction, ...], ...]] = None
    safety: Fraction = Fraction(9, 10)
    min_factor: Fraction = Fraction(1, 5)
    max_factor: Fraction = Fraction(10)
    beta: Fraction = Fraction(1, 5)

    def __post_init__(self):
        object.__setattr__(self, "A", tuple(_row(r) for r in self.A))
        object.__setattr__(self, "b", _row(self.b))
        object.__setattr__(self, "b_hat", _row(self.b_hat))
        object.__setattr__(self, "c", _row(self.c))
        if self.P is not None:
            object.__setattr__(self, "P", tuple(_row(r) for r in self.P))
        for attr in ("safety", "min_factor", "max_factor", "beta"):
            object.__setattr__(self, attr, _as_fraction(getattr(self, attr)))
        self._validate()

    @property
    def stages(self) -> int:
        return len(self.c)

    @property
    def e(self) -> Tuple[Fraction, ...]:
        """Error weights ``b - b_hat``."""
        return tuple(bi - bh for bi, bh in zip(self.b, self.b_hat))

    @property
    def has_dense_output(self) -> bool:
        return self.P is not None

    def _validate(self) -> None:
        s = len(self.c)
        name = self.name
        if s == 0:
            raise InvalidTableau(f"{name}: tableau has no stages")
        if len(self.A) != s or any(len(row) != s for row in self.A):
            raise InvalidTableau(f"{name}: A must be a {s}x{s} matrix")
        if len(self.b) != s or len(self.b_hat) != s:
            raise InvalidTableau(f"{name}: b and b_hat must have length {s}")

        for i, row in enumerate(self.A):
            if any(row[j] != 0 for j in range(i, s)):
                raise InvalidTableau(f"{name}: A is not strictly lower triangular (row {i})")
            if abs(sum(row) - self.c[i]) > CONSISTENCY_TOL:
                raise InvalidTableau(
                    f"{name}: row {i} of A sums to {float(sum(row))!r}, expected c[{i}] = {float(self.c[i])!r}"
                )

        if abs(sum(self.b) - 1) > CONSISTENCY_TOL:
            raise InvalidTableau(f"{name}: weights b sum to {float(sum(self.b))!r}, expected 1")
        if abs(sum(self.b_hat) - 1) > CONSISTENCY_TOL:
            raise InvalidTableau(f"{name}: weights b_hat sum to {float(sum(self.b_hat))!r}, expected 1")
        if self.order - self.embedded_order != 1:
            raise InvalidTableau(
                f"{name}: order {self.order} and embedded order {self.embedded_order} must differ by one"
            )

        if self.fsal and (self.c[-1] != 1 or self.A[-1] != self.b):
            raise InvalidTableau(f"{name}: FSAL requires the last row of A to equal b and c[-1] = 1")

        if self.P is not None:
            if len(self.P) != s:
                raise InvalidTableau(f"{name}: P must have {s} rows")
            for r, (row, bi) in enumerate(zip(self.P, self.b)):
                # theta = 1 must reproduce the step endpoint.
                if abs(sum(row) - bi) > CONSISTENCY_TOL:
                    raise InvalidTableau(f"{name}: row {r} of P does not sum to b[{r}]")

        if not (0 < self.min_factor <= 1 <= self.max_factor) or not (0 < self.safety <= 1):
            raise InvalidTableau(f"{name}: invalid step size controller constants")

    def coefficients(self, precision: _Precision) -> "_TableauCoefficients":
        """Return the coefficients converted to *precision* (cached)."""
        return _convert(self, precision)

    def __str__(self) -> str:
        return f"{self.name} ({self.order}({self.embedded_order}), {self.stages} stages)"


@dataclass(frozen=True)
class _TableauCoefficients:
    """Tableau coefficients as scalars of a given precision.

    Zero entries are dropped: every weight list holds ``(index, value)`` pairs
    for the non-zero coefficients only.
    """

    a: Tuple[Tuple[Tuple[int, Any], ...], ...]
    b: Tuple[Tuple[int, Any], ...]
    e: Tuple[Tuple[int, Any], ...]
    c: Tuple[Any, ...]
    P: Optional[Tuple[Tuple[Any, ...], ...]]


def _sparse(prec: _Precision, values) -> Tuple[Tuple[int, Any], ...]:
    return tuple((j, prec.scalar(v)) for j, v in enumerate(values) if v != 0)


@lru_cache(maxsize=None)
def _convert(tableau: Tableau, precision: _Precision) -> _TableauCoefficients:
    P = None
    if tableau.P is not None:
        P = tuple(tuple(precision.scalar(v) for v in row) for row in tableau.P)
    return _TableauCoefficients(
        a=tuple(_sparse(precision, row) for row in tableau.A),
        b=_sparse(precision, tableau.b),
        e=_sparse(precision, tableau.e),
        c=tuple(precision.scalar(v) for v in tableau.c),
        P=P,
    )


TSIT5 = Tableau(
    name="Tsit5",
    A=tsit5.A,
    b=tsit5.B_HIGH,
    b_hat=tsit5.B_LOW,
    c=tsit5.C,
    order=5,
    embedded_order=4,
    fsal=True,
    P=tsit5.P,
)

DP5 = Tableau(
    name="DP5",
    A=dp5.A,
    b=dp5.B_HIGH,
    b_hat=dp5.B_LOW,
    c=dp5.C,
    order=5,
    embedded_order=4,
    fsal=True,
    P=dp5.P,
)

VERN6 = Tableau(
    name="Vern6",
    A=vern6.A,
    b=vern6.B_HIGH,
    b_hat=vern6.B_LOW,
    c=vern6.C,
    order=6,
    embedded_order=5,
    fsal=True,
    beta=Fraction(6, 25),
)

TABLEAUS = MappingProxyType({t.name: t for t in (TSIT5, DP5, VERN6)})


def available_methods() -> List[str]:
    return list(TABLEAUS)


def get_tableau(method) -> Tableau:
    """Return the registered tableau for *method*.

    Parameters
    ----------
    method : str or :class:`Tableau`
        Method name (case-insensitive) or a tableau, returned unchanged.

    Raises
    ------
    ValueError
        If *method* is not a registered name.
    """
    if isinstance(method, Tableau):
        return method
    for name, tableau in TABLEAUS.items():
        if name.lower() == str(method).lower():
            return tableau
    raise ValueError(f"Unknown method {method!r}; available: {', '.join(TABLEAUS)}")
