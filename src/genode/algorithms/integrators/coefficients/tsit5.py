"""Tsitouras 5(4) coefficients.

Tsitouras, Ch. (2011). "Runge-Kutta pairs of order 5(4) satisfying only the
first column simplifying assumption". Computers & Mathematics with
Applications 62 (2): 770-775.

The published coefficients, including those of the free 4th-order
interpolant, are decimal; they are stored here as the exact
rationals of their 16-digit decimal expansions.
"""

from fractions import Fraction

N_STAGES = 7


def _d(text: str) -> Fraction:
    return Fraction(text)


C = (_d("0"), _d("0.161"), _d("0.327"), _d("0.9"), _d("0.9800255409045097"), _d("1"), _d("1"))

A = (
    (_d("0"), _d("0"), _d("0"), _d("0"), _d("0"), _d("0"), _d("0")),
    (_d("0.161"), _d("0"), _d("0"), _d("0"), _d("0"), _d("0"), _d("0")),
    (_d("-0.008480655492356992"), _d("0.335480655492357"), _d("0"), _d("0"), _d("0"), _d("0"), _d("0")),
    (_d("2.897153057105495"), _d("-6.359448489975075"), _d("4.362295432869581"),
     _d("0"), _d("0"), _d("0"), _d("0")),
    (_d("5.32586482843926"), _d("-11.74888356406283"), _d("7.495539342889836"),
     _d("-0.09249506636175525"), _d("0"), _d("0"), _d("0")),
    (_d("5.86145544294642"), _d("-12.92096931784711"), _d("8.159367898576159"),
     _d("-0.071584973281401"), _d("-0.02826905039406838"), _d("0"), _d("0")),
    (_d("0.09646076681806523"), _d("0.01"), _d("0.4798896504144996"), _d("1.379008574103742"),
     _d("-3.290069515436081"), _d("2.324710524099774"), _d("0")),
)

B_HIGH = (_d("0.09646076681806523"), _d("0.01"), _d("0.4798896504144996"),
          _d("1.379008574103742"), _d("-3.290069515436081"), _d("2.324710524099774"), _d("0"))

# B_HIGH - B_LOW
E = (_d("-0.00178001105222577714"), _d("-0.0008164344596567469"), _d("0.007880878010261995"),
     _d("-0.1447110071732629"), _d("0.5823571654525552"), _d("-0.45808210592918697"),
     Fraction(1, 66))

B_LOW = tuple(b - e for b, e in zip(B_HIGH, E))

INTERPOLATOR_POWER = 4

# Free 4th-order interpolant: b_i(theta) = sum_c P[i][c] * theta**(c+1)
P = (
    (_d("1.0"), _d("-2.763706197274826"), _d("2.9132554618219126"), _d("-1.0530884977290216")),
    (_d("0"), _d("0.13169999999999998"), _d("-0.2234"), _d("0.1017")),
    (_d("0"), _d("3.9302962368947516"), _d("-5.941033872131505"), _d("2.490627285651253")),
    (_d("0"), _d("-12.411077166933676"), _d("30.33818863028232"), _d("-16.548102889244902")),
    (_d("0"), _d("37.50931341651104"), _d("-88.1789048947664"), _d("47.37952196281928")),
    (_d("0"), _d("-27.896526289197286"), _d("65.09189467479366"), _d("-34.87065786149661")),
    (_d("0"), _d("1.5"), _d("-4.0"), _d("2.5")),
)
