# funcviz/engine/expression_evaluator.py
"""
Safe evaluation of user expressions like "x^2 + besselJ0(x)".

Pipeline:
    text --rewrite_expression--> python-ish text ("^" -> "**")
         --ast.parse + whitelist--> closure tree (CompiledExpression)
         --scope = FUNCTION_LIBRARY + CONSTANTS + bindings--> value

Arithmetic runs on numpy float64, so division by zero, log(0), sqrt(-1) follow
IEEE-754 (inf / nan) instead of raising. `evaluate()` is fail-soft: any problem
(bad syntax, unknown name, non-finite result) comes back as NaN.
"""

import ast
import math
import re
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple

import numpy as np

from . import special_functions as sf
from . import utils
from .constants import FunctionType

logger = utils.setup_logger(__name__)

NAN = math.nan

# Longer input is rejected before parsing
MAX_EXPRESSION_LENGTH = 1024


class ExpressionError(ValueError):
    """Raised when an expression cannot be parsed, validated or compiled."""


# ============================================================================
# FUNCTION LIBRARY (fixed, read-only)
# ============================================================================

FUNCTION_LIBRARY: Mapping[str, Callable[..., Any]] = MappingProxyType({
    # base trig / exp / log / hyperbolic
    "sin": np.sin,
    "cos": np.cos,
    "tan": np.tan,
    "asin": np.arcsin,
    "acos": np.arccos,
    "atan": np.arctan,
    "sinh": np.sinh,
    "cosh": np.cosh,
    "tanh": np.tanh,
    "exp": np.exp,
    "log": np.log,
    "log10": np.log10,
    "log2": np.log2,
    "sqrt": np.sqrt,
    "abs": np.abs,
    "pow": np.power,

    # Bessel
    "besselJ0": sf.bessel_j0,
    "besselJ1": sf.bessel_j1,
    "besselY0": sf.bessel_y0,
    "besselY1": sf.bessel_y1,

    # error functions
    "erf": sf.erf,
    "erfc": sf.erfc,
    "erfcx": sf.erfcx,

    # gamma family
    "gamma": sf.gamma,
    "lngamma": sf.lngamma,
    "digamma": sf.digamma,

    # other special functions
    "sinc": sf.sinc,
    "sign": sf.sign,
    "heaviside": sf.heaviside,
    "lambertW": sf.lambert_w,
    "zeta": sf.zeta,
    "factorial": sf.factorial,
    "binomial": sf.binomial,
})

# Everything not listed takes exactly one argument.
_FUNCTION_ARITY: Mapping[str, int] = MappingProxyType({
    "pow": 2,
    "binomial": 2,
})

CONSTANTS: Mapping[str, float] = MappingProxyType({
    "PI": math.pi,
    "E": math.e,
})

_BINARY_OPS: Dict[type, Callable[[Any, Any], Any]] = {
    ast.Add: np.add,
    ast.Sub: np.subtract,
    ast.Mult: np.multiply,
    ast.Div: np.true_divide,
    ast.Pow: np.power,
}

_UNARY_OPS: Dict[type, Callable[[Any], Any]] = {
    ast.UAdd: np.positive,
    ast.USub: np.negative,
}


def function_arity(name: str) -> int:
    return _FUNCTION_ARITY.get(name, 1)


# ============================================================================
# TEXTUAL REWRITE
# ============================================================================

# e**x, e**(x+1), e**-x  (only applied for the "exponential" type hint)
_E_POWER_RE = re.compile(r"\be\*\*(-?\([^()]*\)|-?[A-Za-z0-9_.]+)")


def rewrite_expression(expression: str, function_type: Optional[str] = None) -> str:
    """
    Turn DSL text into text the host parser understands.
    - '^' -> '**' everywhere (expressions contain no string literals)
    - exponential hint: 'e**<operand>' -> 'exp(<operand>)' unless exp( is already used
    """
    s = str(expression).replace("^", "**")

    if function_type == FunctionType.EXPONENTIAL:
        if "e**" in s and "exp(" not in s:
            s = _E_POWER_RE.sub(r"exp(\1)", s)

    return s


# ============================================================================
# COMPILATION (ast whitelist -> closure tree)
# ============================================================================

Scope = Mapping[str, Any]
Node = Callable[[Scope], Any]


def _compile_constant(node: ast.Constant) -> Node:
    value = node.value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ExpressionError(f"Only numeric literals are allowed, got {value!r}")
    try:
        const = np.float64(float(value))
    except OverflowError:
        raise ExpressionError(f"Numeric literal out of range: {value!r}")
    return lambda scope: const


def _compile_name(node: ast.Name, variables: Sequence[str]) -> Node:
    name = node.id
    if name in variables:
        return lambda scope: scope[name]
    if name in CONSTANTS:
        const = np.float64(CONSTANTS[name])
        return lambda scope: const
    if name in FUNCTION_LIBRARY:
        raise ExpressionError(f"'{name}' is a function; call it like {name}(x)")
    raise ExpressionError(f"Unknown identifier '{name}'")


def _compile_call(node: ast.Call, variables: Sequence[str]) -> Node:
    if not isinstance(node.func, ast.Name):
        raise ExpressionError("Only named library functions can be called")

    name = node.func.id
    fn = FUNCTION_LIBRARY.get(name)
    if fn is None:
        if name in variables or name in CONSTANTS:
            raise ExpressionError(f"'{name}' is not a function")
        raise ExpressionError(f"Unknown function '{name}'")

    if node.keywords or any(isinstance(a, ast.Starred) for a in node.args):
        raise ExpressionError(f"'{name}' only takes plain positional arguments")

    expected = function_arity(name)
    if len(node.args) != expected:
        raise ExpressionError(
            f"'{name}' takes {expected} argument{'s' if expected != 1 else ''}, got {len(node.args)}"
        )

    args = [_compile_node(a, variables) for a in node.args]
    if expected == 1:
        (arg,) = args
        return lambda scope: fn(arg(scope))
    return lambda scope: fn(*(a(scope) for a in args))


def _compile_node(node: ast.AST, variables: Sequence[str]) -> Node:
    if isinstance(node, ast.Expression):
        return _compile_node(node.body, variables)

    if isinstance(node, ast.Constant):
        return _compile_constant(node)

    if isinstance(node, ast.Name):
        return _compile_name(node, variables)

    if isinstance(node, ast.UnaryOp):
        op = _UNARY_OPS.get(type(node.op))
        if op is None:
            raise ExpressionError(f"Unary operator not permitted: {type(node.op).__name__}")
        operand = _compile_node(node.operand, variables)
        return lambda scope: op(operand(scope))

    if isinstance(node, ast.BinOp):
        op = _BINARY_OPS.get(type(node.op))
        if op is None:
            raise ExpressionError(f"Operator not permitted: {type(node.op).__name__}")
        left = _compile_node(node.left, variables)
        right = _compile_node(node.right, variables)
        return lambda scope: op(left(scope), right(scope))

    if isinstance(node, ast.Call):
        return _compile_call(node, variables)

    raise ExpressionError(f"Unsupported syntax: {type(node).__name__}")


class CompiledExpression:
    """
    A validated expression bound to a fixed set of variable names.

    Call `evaluate()` with scalars (returns float, NaN on failure) or
    `evaluate_array()` with numpy arrays (returns float array, NaN where non-finite).
    """

    def __init__(self, source: str, rewritten: str, variables: Tuple[str, ...], root: Node):
        self.source = source
        self.rewritten = rewritten
        self.variables = variables
        self._root = root

    def __repr__(self) -> str:
        return f"CompiledExpression({self.source!r}, variables={self.variables})"

    def _scope(self, bindings: Mapping[str, Any], as_array: bool) -> Dict[str, Any]:
        missing = [v for v in self.variables if v not in bindings]
        if missing:
            raise ExpressionError(f"Missing value for variable(s): {', '.join(missing)}")
        if as_array:
            return {v: np.asarray(bindings[v], dtype=float) for v in self.variables}
        return {v: np.float64(bindings[v]) for v in self.variables}

    def evaluate(self, bindings: Mapping[str, float]) -> float:
        try:
            scope = self._scope(bindings, as_array=False)
            with np.errstate(all="ignore"):
                result = self._root(scope)
            value = float(result)
        except Exception as e:
            logger.debug(f"Evaluation of '{self.source}' failed at {dict(bindings)}: {e}")
            return NAN
        return value if math.isfinite(value) else NAN

    def evaluate_array(self, bindings: Mapping[str, Any]) -> np.ndarray:
        """
        Element-wise evaluation over broadcastable arrays.
        Constant expressions are broadcast to the full grid shape.
        """
        scope = self._scope(bindings, as_array=True)
        shape = np.broadcast(*scope.values()).shape if scope else ()
        try:
            with np.errstate(all="ignore"):
                result = np.asarray(self._root(scope), dtype=float)
            out = np.array(np.broadcast_to(result, shape), dtype=float)
        except Exception as e:
            logger.debug(f"Array evaluation of '{self.source}' failed: {e}")
            return np.full(shape, NAN)
        out[~np.isfinite(out)] = NAN
        return out


def compile_expression(
    expression: str,
    variables: Iterable[str] = ("x",),
    function_type: Optional[str] = None,
) -> CompiledExpression:
    """
    Rewrite, parse and validate an expression. Raises ExpressionError.
    """
    if expression is None or not str(expression).strip():
        raise ExpressionError("Expression is required")

    source = str(expression).strip()
    if len(source) > MAX_EXPRESSION_LENGTH:
        raise ExpressionError(f"Expression is too long (max {MAX_EXPRESSION_LENGTH} characters)")

    variables = tuple(variables)
    for name in variables:
        if name in FUNCTION_LIBRARY or name in CONSTANTS:
            raise ExpressionError(f"'{name}' cannot be used as a variable name")

    rewritten = rewrite_expression(source, function_type)
    try:
        tree = ast.parse(rewritten, mode="eval")
    except SyntaxError as e:
        raise ExpressionError(f"Invalid syntax in '{source}': {e.msg}") from e
    except (ValueError, RecursionError) as e:
        raise ExpressionError(f"Could not parse '{source}': {e}") from e

    try:
        root = _compile_node(tree, variables)
    except RecursionError as e:
        raise ExpressionError(f"Expression is nested too deeply: '{source}'") from e

    return CompiledExpression(source, rewritten, variables, root)


def validate_expression(
    expression: str,
    variables: Iterable[str] = ("x",),
    function_type: Optional[str] = None,
) -> Optional[str]:
    """Returns a human-readable problem, or None if the expression compiles."""
    try:
        compile_expression(expression, variables, function_type)
    except ExpressionError as e:
        return str(e)
    return None


# ============================================================================
# PUBLIC ENTRY POINT
# ============================================================================

def evaluate(
    expression: str,
    bindings: Mapping[str, float],
    function_type: Optional[str] = None,
) -> float:
    """
    Evaluate `expression` under `bindings` (e.g. {"x": 3.0}).
    Returns a finite float, or NaN if the point cannot be plotted for any reason.
    """
    try:
        compiled = compile_expression(expression, tuple(bindings), function_type)
    except ExpressionError as e:
        logger.debug(f"Could not compile '{expression}': {e}")
        return NAN
    return compiled.evaluate(bindings)
