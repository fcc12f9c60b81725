"""Dormand-Prince 5(4) coefficients with the 4th-order continuous extension.

Dormand, J. R.; Prince, P. J. (1980). "A family of embedded Runge-Kutta
formulas". Journal of Computational and Applied Mathematics 6 (1): 19-26.
"""

from fractions import Fraction as F

N_STAGES = 7

C = (F(0), F(1, 5), F(3, 10), F(4, 5), F(8, 9), F(1), F(1))

A = (
    (F(0), F(0), F(0), F(0), F(0), F(0), F(0)),
    (F(1, 5), F(0), F(0), F(0), F(0), F(0), F(0)),
    (F(3, 40), F(9, 40), F(0), F(0), F(0), F(0), F(0)),
    (F(44, 45), F(-56, 15), F(32, 9), F(0), F(0), F(0), F(0)),
    (F(19372, 6561), F(-25360, 2187), F(64448, 6561), F(-212, 729), F(0), F(0), F(0)),
    (F(9017, 3168), F(-355, 33), F(46732, 5247), F(49, 176), F(-5103, 18656), F(0), F(0)),
    (F(35, 384), F(0), F(500, 1113), F(125, 192), F(-2187, 6784), F(11, 84), F(0)),
)

B_HIGH = (F(35, 384), F(0), F(500, 1113), F(125, 192), F(-2187, 6784), F(11, 84), F(0))

B_LOW = (F(5179, 57600), F(0), F(7571, 16695), F(393, 640), F(-92097, 339200),
         F(187, 2100), F(1, 40))

# y(t + theta*h) = y + h * sum_r k_r * sum_c P[r][c] * theta**(c+1)
INTERPOLATOR_POWER = 4

P = (
    (F(1), F(-8048581381, 2820520608), F(8663915743, 2820520608), F(-12715105075, 11282082432)),
    (F(0), F(0), F(0), F(0)),
    (F(0), F(131558114200, 32700410799), F(-68118460800, 10900136933), F(87487479700, 32700410799)),
    (F(0), F(-1754552775, 470086768), F(14199869525, 1410260304), F(-10690763975, 1880347072)),
    (F(0), F(127303824393, 49829197408), F(-318862633887, 49829197408), F(701980252875, 199316789632)),
    (F(0), F(-282668133, 205662961), F(2019193451, 616988883), F(-1453857185, 822651844)),
    (F(0), F(40617522, 29380423), F(-110615467, 29380423), F(69997945, 29380423)),
)
