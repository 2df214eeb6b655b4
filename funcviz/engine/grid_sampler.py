# funcviz/engine/grid_sampler.py
"""
grid_sampler.py: turns expressions into ordered point sequences for plotting.

2D: n steps over [x.min, x.max] -> n + 1 rows (both ends included).
    A function that fails at some x only blanks ITS value (NaN) in that row.
3D: (g + 1) x (g + 1) lattice, x outer / y inner.
    Non-finite nodes are DROPPED, so a function may emit fewer than (g + 1)^2
    points; use triangulate_grid() to find out whether the result is still a
    square lattice.

Every call recomputes from scratch; nothing is cached between calls and no
state is shared between functions.
"""

import math
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from funcviz.config import settings
from . import utils
from .expression_evaluator import CompiledExpression, ExpressionError, compile_expression
from .models import FunctionConfig, Range, SamplePoint, SamplePoint3D, SampleRow

logger = utils.setup_logger(__name__)

VARIABLES_2D = ("x",)
VARIABLES_3D = ("x", "y")


# ============================================================================
# SIZE HELPERS
# ============================================================================

def clamp_resolution(resolution: int) -> int:
    return min(max(int(resolution), settings.RESOLUTION_MIN), settings.RESOLUTION_MAX)


def clamp_grid_size(grid_size: int) -> int:
    return min(max(int(grid_size), settings.GRID_SIZE_MIN), settings.GRID_SIZE_MAX)


def axis_values(rng: Range, steps: int) -> np.ndarray:
    """
    steps + 1 positions: rng.min + i * step for i = 0..steps,
    with step = (rng.max - rng.min) / steps.
    """
    if isinstance(steps, bool) or int(steps) != steps or steps <= 0:
        raise ValueError(f"Number of steps must be a positive integer, got {steps!r}")
    steps = int(steps)
    step = (rng.max - rng.min) / steps
    return rng.min + np.arange(steps + 1, dtype=float) * step


def _try_compile(expression: str, variables: Tuple[str, ...], function_type: Optional[str]) -> Optional[CompiledExpression]:
    try:
        return compile_expression(expression, variables, function_type)
    except ExpressionError as e:
        logger.warning(f"Cannot plot '{utils.truncate(str(expression), 60)}': {e}")
        return None


def _evaluate_series(compiled: Optional[CompiledExpression], bindings: Dict[str, np.ndarray], shape) -> np.ndarray:
    if compiled is None:
        return np.full(shape, math.nan)
    return compiled.evaluate_array(bindings)


# ============================================================================
# 2D
# ============================================================================

def sample_series_2d(
    expression: str,
    x_range: Range,
    resolution: int = settings.DEFAULT_RESOLUTION,
    function_type: Optional[str] = None,
) -> List[SamplePoint]:
    """Samples of a single expression; blanked points carry NaN."""
    xs = axis_values(x_range, resolution)
    compiled = _try_compile(expression, VARIABLES_2D, function_type)
    values = _evaluate_series(compiled, {"x": xs}, xs.shape)
    return [SamplePoint(x=float(x), value=float(v)) for x, v in zip(xs, values)]


def sample_2d(
    functions: Iterable[FunctionConfig],
    x_range: Range,
    resolution: int = settings.DEFAULT_RESOLUTION,
) -> List[SampleRow]:
    """
    One row per x. Only visible, non-3D functions are sampled; each one independently.
    """
    xs = axis_values(x_range, resolution)

    series: Dict[str, np.ndarray] = {}
    for func in functions:
        if not func.visible or func.is_3d:
            continue
        compiled = _try_compile(func.expression, VARIABLES_2D, func.type)
        series[func.id] = _evaluate_series(compiled, {"x": xs}, xs.shape)

    rows: List[SampleRow] = []
    for i, x in enumerate(xs):
        rows.append(SampleRow(x=float(x), values={fid: float(vals[i]) for fid, vals in series.items()}))
    return rows


# ============================================================================
# 3D
# ============================================================================

def sample_3d(
    function: FunctionConfig,
    x_range: Range,
    y_range: Range,
    grid_size: int = settings.DEFAULT_GRID_SIZE,
) -> List[SamplePoint3D]:
    """
    Lattice samples of z = f(x, y). Nodes where z is not finite are left out.
    """
    xs = axis_values(x_range, grid_size)
    ys = axis_values(y_range, grid_size)
    grid_x, grid_y = np.meshgrid(xs, ys, indexing="ij")

    compiled = _try_compile(function.expression, VARIABLES_3D, function.type)
    zs = _evaluate_series(compiled, {"x": grid_x, "y": grid_y}, grid_x.shape)

    points: List[SamplePoint3D] = []
    for i, x in enumerate(xs):
        for j, y in enumerate(ys):
            z = zs[i, j]
            if math.isfinite(z):
                points.append(SamplePoint3D(x=float(x), y=float(y), z=float(z), function_id=function.id))

    expected = expected_lattice_size(grid_size)
    if compiled is not None and len(points) != expected:
        logger.debug(f"Function '{function.id}': dropped {expected - len(points)} of {expected} lattice nodes")
    return points


def sample_3d_all(
    functions: Iterable[FunctionConfig],
    x_range: Range,
    y_range: Range,
    grid_size: int = settings.DEFAULT_GRID_SIZE,
) -> Dict[str, List[SamplePoint3D]]:
    """Samples every visible 3D function; keyed by function id, in input order."""
    return {
        func.id: sample_3d(func, x_range, y_range, grid_size)
        for func in functions
        if func.visible and func.is_3d
    }


# ============================================================================
# SURFACE TRIANGULATION
# ============================================================================

def expected_lattice_size(grid_size: int) -> int:
    """Node count of a complete (g + 1) x (g + 1) lattice."""
    return (int(grid_size) + 1) ** 2


def triangulate_grid(point_count: int, expected_count: Optional[int] = None) -> List[Tuple[int, int, int]]:
    """
    Two triangles per lattice cell, indices into the emitted point list.
    Returns [] unless point_count is a perfect square. When expected_count is
    given, point_count must also equal it: drops can leave a square count
    (e.g. 1/(x*y) on an even grid loses a full row and column) whose indices
    no longer line up with the lattice.
    """
    if expected_count is not None and point_count != expected_count:
        return []

    side = math.isqrt(point_count) if point_count >= 0 else 0
    if side * side != point_count or side < 2:
        return []

    triangles: List[Tuple[int, int, int]] = []
    for i in range(side - 1):
        for j in range(side - 1):
            a = i * side + j
            b = a + 1
            c = (i + 1) * side + j
            d = c + 1
            triangles.append((a, b, c))
            triangles.append((b, d, c))
    return triangles
