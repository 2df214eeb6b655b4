# funcviz/engine/special_functions.py
"""
Numerical approximations of special functions that have no closed form.

Every public function here is TOTAL:
- domain violations return NaN (never raise)
- floating point errors from the math module (overflow / domain) fold into NaN
- scalars in -> float out; numpy arrays in -> float array out (element-wise)

Coefficients are the classic fixed constants:
- Bessel J0/J1/Y0/Y1: two-regime rational / asymptotic forms (Numerical Recipes)
- erf: Abramowitz & Stegun 7.1.26
- gamma: Lanczos, g=7, 8 coefficients
"""

import functools
import math
from typing import Callable

import numpy as np

NAN = math.nan

# Branch point of the principal Lambert W branch: -1/e
LAMBERT_W_BRANCH_POINT = -0.36787944117144232

_TWO_OVER_PI = 0.636619772
_PI_OVER_4 = 0.785398164
_THREE_PI_OVER_4 = 2.356194491

_LANCZOS_COEFFS = (
    676.5203681218851,
    -1259.1392167224028,
    771.32342877765313,
    -176.61502916214059,
    12.507343278686905,
    -0.13857109526572012,
    9.9843695780195716e-6,
    1.5056327351493116e-7,
)
_LANCZOS_BASE = 0.99999999999980993

_ZETA_MAX_TERMS = 1000
_ZETA_TOLERANCE = 1e-10

_LAMBERT_W_MAX_ITER = 10
_LAMBERT_W_TOLERANCE = 1e-10


def _is_integer(v: float) -> bool:
    # False for NaN / inf as well
    return float(v).is_integer()


def _elementwise(fn: Callable[..., float]) -> Callable:
    """
    Wrap a scalar approximation so it is total and accepts numpy arrays.
    """
    @functools.wraps(fn)
    def scalar(*args):
        try:
            return float(fn(*(float(a) for a in args)))
        except (ArithmeticError, ValueError):
            return NAN

    vectorized = np.vectorize(scalar, otypes=[float])

    @functools.wraps(fn)
    def wrapper(*args):
        if any(np.ndim(a) > 0 for a in args):
            return vectorized(*args)
        return scalar(*args)

    return wrapper


# ============================================================================
# BESSEL FUNCTIONS
# ============================================================================

@_elementwise
def bessel_j0(x: float) -> float:
    """Bessel function of the first kind, order 0."""
    if x == 0:
        return 1.0

    ax = abs(x)
    if ax < 8.0:
        y = x * x
        ans1 = 57568490574.0 + y * (-13362590354.0 + y * (651619640.7 + y * (
            -11214424.18 + y * (77392.33017 + y * -184.9052456))))
        ans2 = 57568490411.0 + y * (1029532985.0 + y * (9494680.718 + y * (
            59272.64853 + y * (267.8532712 + y * 1.0))))
        return ans1 / ans2

    z = 8.0 / ax
    y = z * z
    xx = ax - _PI_OVER_4
    ans1 = 1.0 + y * (-0.1098628627e-2 + y * (0.2734510407e-4 + y * (
        -0.2073370639e-5 + y * 0.2093887211e-6)))
    ans2 = -0.1562499995e-1 + y * (0.1430488765e-3 + y * (-0.6911147651e-5 + y * (
        0.7621095161e-6 - y * 0.934935152e-7)))
    return math.sqrt(_TWO_OVER_PI / ax) * (math.cos(xx) * ans1 - z * math.sin(xx) * ans2)


@_elementwise
def bessel_j1(x: float) -> float:
    """Bessel function of the first kind, order 1. Odd: J1(-x) = -J1(x)."""
    if x == 0:
        return 0.0

    ax = abs(x)
    if ax < 8.0:
        y = x * x
        ans1 = x * (72362614232.0 + y * (-7895059235.0 + y * (242396853.1 + y * (
            -2972611.439 + y * (15704.4826 + y * -30.16036606)))))
        ans2 = 144725228442.0 + y * (2300535178.0 + y * (18583304.74 + y * (
            99447.43394 + y * (376.9991397 + y * 1.0))))
        return ans1 / ans2

    z = 8.0 / ax
    y = z * z
    xx = ax - _THREE_PI_OVER_4
    ans1 = 1.0 + y * (0.183105e-2 + y * (-0.3516396496e-4 + y * (
        0.2457520174e-5 + y * -0.240337019e-6)))
    ans2 = 0.04687499995 + y * (-0.2002690873e-3 + y * (0.8449199096e-5 + y * (
        -0.88228987e-6 + y * 0.105787412e-6)))
    ans = math.sqrt(_TWO_OVER_PI / ax) * (math.cos(xx) * ans1 - z * math.sin(xx) * ans2)
    return -ans if x < 0.0 else ans


@_elementwise
def bessel_y0(x: float) -> float:
    """Bessel function of the second kind, order 0. Defined for x > 0."""
    if not x > 0:
        return NAN

    if x < 8.0:
        y = x * x
        ans1 = -2957821389.0 + y * (7062834065.0 + y * (-512359803.6 + y * (
            10879881.29 + y * (-86327.92757 + y * 228.4622733))))
        ans2 = 40076544269.0 + y * (745249964.8 + y * (7189466.438 + y * (
            47447.2647 + y * (226.1030244 + y * 1.0))))
        return ans1 / ans2 + _TWO_OVER_PI * bessel_j0(x) * math.log(x)

    z = 8.0 / x
    y = z * z
    xx = x - _PI_OVER_4
    ans1 = 1.0 + y * (-0.1098628627e-2 + y * (0.2734510407e-4 + y * (
        -0.2073370639e-5 + y * 0.2093887211e-6)))
    ans2 = -0.1562499995e-1 + y * (0.1430488765e-3 + y * (-0.6911147651e-5 + y * (
        0.7621095161e-6 + y * -0.934945152e-7)))
    return math.sqrt(_TWO_OVER_PI / x) * (math.sin(xx) * ans1 + z * math.cos(xx) * ans2)


@_elementwise
def bessel_y1(x: float) -> float:
    """Bessel function of the second kind, order 1. Defined for x > 0."""
    if not x > 0:
        return NAN

    if x < 8.0:
        y = x * x
        ans1 = x * (-0.4900604943e13 + y * (0.127527439e13 + y * (-0.5153438139e11 + y * (
            0.7349264551e9 + y * (-0.4237922726e7 + y * 0.8511937935e4)))))
        ans2 = 0.249958057e14 + y * (0.4244419664e12 + y * (0.3733650367e10 + y * (
            0.2245904002e8 + y * (0.102042605e6 + y * (0.3549632885e3 + y)))))
        return ans1 / ans2 + _TWO_OVER_PI * (bessel_j1(x) * math.log(x) - 1.0 / x)

    z = 8.0 / x
    y = z * z
    xx = x - _THREE_PI_OVER_4
    ans1 = 1.0 + y * (0.183105e-2 + y * (-0.3516396496e-4 + y * (
        0.2457520174e-5 + y * -0.240337019e-6)))
    ans2 = 0.04687499995 + y * (-0.2002690873e-3 + y * (0.8449199096e-5 + y * (
        -0.88228987e-6 + y * 0.105787412e-6)))
    return math.sqrt(_TWO_OVER_PI / x) * (math.sin(xx) * ans1 + z * math.cos(xx) * ans2)


# ============================================================================
# ERROR FUNCTIONS
# ============================================================================

@_elementwise
def erf(x: float) -> float:
    """Error function, A&S 7.1.26 (max abs error ~1.5e-7). Odd."""
    sign_ = 1.0 if x >= 0 else -1.0
    x = abs(x)

    a1 = 0.254829592
    a2 = -0.284496736
    a3 = 1.421413741
    a4 = -1.453152027
    a5 = 1.061405429
    p = 0.3275911

    t = 1.0 / (1.0 + p * x)
    y = 1.0 - ((((a5 * t + a4) * t + a3) * t + a2) * t + a1) * t * math.exp(-x * x)
    return sign_ * y


@_elementwise
def erfc(x: float) -> float:
    return 1.0 - erf(x)


@_elementwise
def erfcx(x: float) -> float:
    """Scaled complementary error function exp(x^2) * erfc(x)."""
    return math.exp(x * x) * erfc(x)


# ============================================================================
# GAMMA FAMILY
# ============================================================================

@_elementwise
def gamma(x: float) -> float:
    """
    Gamma function.
    - poles (non-positive integers) -> NaN
    - x < 0.5 -> reflection  pi / (sin(pi x) * gamma(1 - x))
    - otherwise Lanczos (g=7)
    The factor t^(x + 0.5) of the Lanczos form overflows long before gamma
    itself does (around x = 143, while gamma(171) is still finite), so from
    there on +inf is returned instead of the true value.
    """
    if x <= 0 and _is_integer(x):
        return NAN

    if x < 0.5:
        return math.pi / (math.sin(math.pi * x) * gamma(1 - x))

    x -= 1
    a = _LANCZOS_BASE
    for i, coeff in enumerate(_LANCZOS_COEFFS):
        a += coeff / (x + i + 1)

    t = x + len(_LANCZOS_COEFFS) - 0.5
    try:
        return math.sqrt(2 * math.pi) * math.pow(t, x + 0.5) * math.exp(-t) * a
    except OverflowError:
        return math.inf


@_elementwise
def lngamma(x: float) -> float:
    """ln(|gamma(x)|)."""
    return math.log(abs(gamma(x)))


@_elementwise
def digamma(x: float) -> float:
    """Derivative of ln(gamma). Reflection for x < 0, recurrence, then asymptotic series."""
    if x <= 0 and _is_integer(x):
        return NAN

    if x < 0:
        return digamma(1 - x) - math.pi / math.tan(math.pi * x)

    result = 0.0
    while x < 10:
        result -= 1 / x
        x += 1

    r = 1 / x
    result += math.log(x) - 0.5 * r
    r *= r
    result -= r * (1 / 12 - r * (1 / 120 - r * (1 / 252 - r * (1 / 240 - r * (1 / 132 - (r * 691) / 32760)))))
    return result


# ============================================================================
# OTHER SPECIAL FUNCTIONS
# ============================================================================

@_elementwise
def sinc(x: float) -> float:
    return 1.0 if x == 0 else math.sin(x) / x


@_elementwise
def sign(x: float) -> float:
    if x > 0:
        return 1.0
    if x < 0:
        return -1.0
    return 0.0


@_elementwise
def heaviside(x: float) -> float:
    if x > 0:
        return 1.0
    if x < 0:
        return 0.0
    return 0.5


@_elementwise
def lambert_w(x: float) -> float:
    """
    Principal branch of Lambert W (w * e^w = x), via Halley's method.
    NaN below the branch point -1/e.
    """
    if x < LAMBERT_W_BRANCH_POINT:
        return NAN

    w = x if x < 1 else math.log(x)

    for _ in range(_LAMBERT_W_MAX_ITER):
        ew = math.exp(w)
        wewx = w * ew - x
        w1 = w + 1
        delta = wewx / (ew * w1 - ((w + 2) * wewx) / (2 * w1))
        w -= delta
        if abs(delta) < _LAMBERT_W_TOLERANCE:
            break

    return w


@_elementwise
def zeta(x: float) -> float:
    """
    Riemann zeta for x > 1 through the Dirichlet eta series:
        zeta(s) = eta(s) / (1 - 2^(1-s))
    """
    if not x > 1:
        return NAN

    total = 0.0
    for n in range(1, _ZETA_MAX_TERMS):
        # n^-x underflows to 0 where n^x would overflow
        term = (1.0 if n % 2 else -1.0) * math.pow(n, -x)
        total += term
        if abs(term) < _ZETA_TOLERANCE:
            break

    return total / (1 - math.pow(2, 1 - x))


@_elementwise
def factorial(n: float) -> float:
    """n! for non-negative integers, NaN otherwise."""
    if n < 0 or not _is_integer(n):
        return NAN

    result = 1.0
    for i in range(2, int(n) + 1):
        result *= i
        if result == math.inf:
            break
    return result


@_elementwise
def binomial(n: float, k: float) -> float:
    """
    n choose k, computed multiplicatively. Invalid or out-of-range arguments give 0.
    """
    if k < 0 or n < 0 or not _is_integer(n) or not _is_integer(k):
        return 0.0
    if k > n:
        return 0.0
    if k == 0 or k == n:
        return 1.0

    # C(n, k) == C(n, n - k)
    if k > n - k:
        k = n - k

    result = 1.0
    for i in range(1, int(k) + 1):
        result *= n - (k - i)
        result /= i
        if result == math.inf:
            break
    return result
