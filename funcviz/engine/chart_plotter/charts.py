"""
charts.py: Per-function plotting implementations

- plot_function_series: one 2D curve; NaN samples become gaps in the line
- plot_surface:         one 3D function; triangulated lattice when the point
                        count is a perfect square, scatter otherwise

Figure creation and entry points live in plotter.py.
"""

from typing import List, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

from ..grid_sampler import triangulate_grid
from ..models import FunctionConfig, SamplePoint3D, SampleRow
from .. import utils as engine_utils
from .utils import mpl_linestyle

logger = engine_utils.setup_logger(__name__)


# ============================================================================
# 2D CURVES
# ============================================================================

def plot_function_series(
    ax: plt.Axes,
    rows: Sequence[SampleRow],
    func: FunctionConfig,
    color: str,
) -> None:
    x_vals = np.array([row.x for row in rows], dtype=float)
    y_vals = np.array([row.values.get(func.id, np.nan) for row in rows], dtype=float)

    if not np.isfinite(y_vals).any():
        logger.warning(f"⚠️ Function '{func.id}' ({func.expression}) has no plottable points")

    # matplotlib breaks the line at NaN, which is exactly the gap we want
    ax.plot(
        x_vals,
        y_vals,
        label=func.expression,
        linewidth=2.5,
        linestyle=mpl_linestyle(func.line_style),
        color=color,
    )


# ============================================================================
# 3D SURFACES
# ============================================================================

def plot_surface(
    ax,
    points: List[SamplePoint3D],
    func: FunctionConfig,
    color: str,
    material: str = "normal",
    expected_count: Optional[int] = None,
) -> None:
    """
    expected_count is the size of the full lattice; the surface is only
    triangulated when every node of it was emitted.
    """
    if not points:
        logger.warning(f"⚠️ Function '{func.id}' ({func.expression}) has no plottable points")
        return

    xs = np.array([p.x for p in points], dtype=float)
    ys = np.array([p.y for p in points], dtype=float)
    zs = np.array([p.z for p in points], dtype=float)

    triangles = triangulate_grid(len(points), expected_count)

    if material == "points" or not triangles:
        if material != "points":
            logger.info(
                f"Function '{func.id}': {len(points)} points do not form the full lattice, drawing points only"
            )
        ax.scatter(xs, ys, zs, color=color, s=4, label=func.expression)
        return

    if material == "wireframe":
        for a, b, c in triangles:
            idx = [a, b, c, a]
            ax.plot(xs[idx], ys[idx], zs[idx], color=color, linewidth=0.4)
        return

    ax.plot_trisurf(xs, ys, zs, triangles=triangles, color=color, alpha=0.85, linewidth=0.1, edgecolor=color)
