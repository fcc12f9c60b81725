"""Verner 6(5) "most robust" coefficients.

Verner, J. H. (2010). "Numerically optimal Runge-Kutta pairs with
interpolants". Numerical Algorithms 53 (2-3): 383-396.
"""

from fractions import Fraction as F

N_STAGES = 9

C = (F(0), F(9, 50), F(1, 6), F(1, 4), F(53, 100), F(3, 5), F(4, 5), F(1), F(1))

_Z = F(0)

A = (
    (_Z, _Z, _Z, _Z, _Z, _Z, _Z, _Z, _Z),
    (F(9, 50), _Z, _Z, _Z, _Z, _Z, _Z, _Z, _Z),
    (F(29, 324), F(25, 324), _Z, _Z, _Z, _Z, _Z, _Z, _Z),
    (F(1, 16), _Z, F(3, 16), _Z, _Z, _Z, _Z, _Z, _Z),
    (F(79129, 250000), _Z, F(-261237, 250000), F(19663, 15625), _Z, _Z, _Z, _Z, _Z),
    (F(1336883, 4909125), _Z, F(-25476, 30875), F(194159, 185250), F(8225, 78546),
     _Z, _Z, _Z, _Z),
    (F(-2459386, 14727375), _Z, F(19504, 30875), F(2377474, 13615875), F(-6157250, 5773131),
     F(902, 735), _Z, _Z, _Z),
    (F(2699, 7410), _Z, F(-252, 1235), F(-1393253, 3993990), F(236875, 72618),
     F(-135, 49), F(15, 22), _Z, _Z),
    (F(11, 144), _Z, _Z, F(256, 693), _Z, F(125, 504), F(125, 528), F(5, 72), _Z),
)

B_HIGH = (F(11, 144), _Z, _Z, F(256, 693), _Z, F(125, 504), F(125, 528), F(5, 72), _Z)

B_LOW = (F(28, 477), _Z, _Z, F(212, 441), F(-312500, 366177), F(2125, 1764), _Z,
         F(-2105, 35532), F(2995, 17766))
