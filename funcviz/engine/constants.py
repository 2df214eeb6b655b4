# funcviz/engine/constants.py
"""
Project-wide small constants & enums.

Import examples:
    from .constants import FunctionType, Dimension, LineStyle, FALLBACK_EXPRESSIONS
"""

from typing import Final, Set, Dict, List


# --------- Function types / modes ---------

class FunctionType:
    """
    Declared type of a plotted function. Only selects rewrite heuristics
    before evaluation; every library function is callable whatever the type.
    """
    POLYNOMIAL: Final[str] = "polynomial"
    TRIGONOMETRIC: Final[str] = "trigonometric"
    EXPONENTIAL: Final[str] = "exponential"
    LOGARITHMIC: Final[str] = "logarithmic"
    SPECIAL: Final[str] = "special"
    BESSEL: Final[str] = "bessel"
    ERROR: Final[str] = "error"
    GAMMA: Final[str] = "gamma"
    HYPERBOLIC: Final[str] = "hyperbolic"

    ALL: Final[Set[str]] = {
        POLYNOMIAL, TRIGONOMETRIC, EXPONENTIAL, LOGARITHMIC, SPECIAL,
        BESSEL, ERROR, GAMMA, HYPERBOLIC,
    }

    LABELS: Final[Dict[str, str]] = {
        POLYNOMIAL: "Polynomial",
        TRIGONOMETRIC: "Trigonometric",
        EXPONENTIAL: "Exponential",
        LOGARITHMIC: "Logarithmic",
        SPECIAL: "Special",
        BESSEL: "Bessel Functions",
        ERROR: "Error Functions",
        GAMMA: "Gamma Functions",
        HYPERBOLIC: "Hyperbolic",
    }


class Dimension:
    """Plot dimension requested from the AI generator / sampler."""
    TWO_D: Final[str] = "2d"
    THREE_D: Final[str] = "3d"

    ALL: Final[Set[str]] = {TWO_D, THREE_D}


class LineStyle:
    SOLID: Final[str] = "solid"
    DASHED: Final[str] = "dashed"
    DOTTED: Final[str] = "dotted"

    ALL: Final[Set[str]] = {SOLID, DASHED, DOTTED}

    # matplotlib linestyle codes
    MPL: Final[Dict[str, str]] = {SOLID: "-", DASHED: "--", DOTTED: ":"}


# --------- Fallbacks ---------

# Used whenever AI generation fails, so the caller always gets something plottable.
FALLBACK_EXPRESSIONS: Final[Dict[str, str]] = {
    Dimension.TWO_D: "sin(x)",
    Dimension.THREE_D: "sin(x)*cos(y)",
}


# --------- Examples (shown by GET /api/functions) ---------

FUNCTION_EXAMPLES: Final[Dict[str, List[str]]] = {
    FunctionType.POLYNOMIAL: ["x^2", "3*x^3 - 2*x + 1", "x^4 - 4*x^2 + 4"],
    FunctionType.TRIGONOMETRIC: ["sin(x)", "cos(2*x)", "tan(x/2)"],
    FunctionType.EXPONENTIAL: ["exp(x)", "2^x", "exp(-x^2/2)"],
    FunctionType.LOGARITHMIC: ["log(x)", "log10(x)", "log2(x)"],
    FunctionType.SPECIAL: ["sinc(x)", "sign(x)", "heaviside(x)"],
    FunctionType.BESSEL: ["besselJ0(x)", "besselJ1(x)", "besselY0(x)"],
    FunctionType.ERROR: ["erf(x)", "erfc(x)", "erfcx(x)"],
    FunctionType.GAMMA: ["gamma(x)", "lngamma(x)", "digamma(x)"],
    FunctionType.HYPERBOLIC: ["sinh(x)", "cosh(x)", "tanh(x)"],
}

FUNCTION_3D_EXAMPLES: Final[Dict[str, str]] = {
    "Simple Plane": "x + y",
    "Paraboloid": "x^2 + y^2",
    "Sine Wave": "sin(sqrt(x^2 + y^2))",
    "Ripple": "sin(x*x + y*y) / (x*x + y*y + 0.1)",
    "Saddle": "x^2 - y^2",
    "Gaussian": "exp(-(x^2 + y^2)/5)",
    "Mexican Hat": "(1 - (x^2 + y^2)/4) * exp(-(x^2 + y^2)/8)",
    "Sinc Product": "sinc(x) * sinc(y)",
    "Bessel": "besselJ0(sqrt(x^2 + y^2) * 2)",
}


# --------- Colours ---------

COLOR_SCHEMES: Final[Dict[str, List[str]]] = {
    "default": ["#3b82f6", "#ef4444", "#10b981", "#f59e0b", "#8b5cf6", "#ec4899", "#06b6d4", "#84cc16", "#f43f5e"],
    "pastel": ["#67e8f9", "#a5b4fc", "#fca5a5", "#86efac", "#fde68a", "#d8b4fe", "#f9a8d4", "#99f6e4", "#d9f99d"],
    "vibrant": ["#2563eb", "#dc2626", "#059669", "#d97706", "#7c3aed", "#db2777", "#0891b2", "#65a30d", "#e11d48"],
    "monochrome": ["#000000", "#333333", "#666666", "#999999", "#cccccc", "#f2f2f2"],
}
