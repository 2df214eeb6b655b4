"""
plotter.py: Chart Plotter entry points

This file contains ONLY:
- plot_functions_2d (rows from grid_sampler.sample_2d -> Figure)
- plot_surfaces_3d  (points from grid_sampler.sample_3d_all -> Figure)

Per-function drawing lives in `charts.py`; appearance/export helpers in `utils.py`.
"""

from typing import Any, Dict, List, Optional, Sequence

import matplotlib.pyplot as plt

from ..grid_sampler import expected_lattice_size
from ..models import FunctionConfig, GraphSettings, SamplePoint3D, SampleRow
from .charts import plot_function_series, plot_surface
from .utils import get_color, setup_3d_appearance, setup_plot_appearance


def plot_functions_2d(
    rows: Sequence[SampleRow],
    functions: Sequence[FunctionConfig],
    settings: Optional[GraphSettings] = None,
    options: Optional[Dict[str, Any]] = None,
) -> plt.Figure:
    """
    Draw every visible 2D function that has a column in `rows`.
    """
    settings = settings or GraphSettings()
    options = dict(options or {})
    scheme = options.pop("color_scheme", "default")

    fig, ax = plt.subplots(figsize=(12, 8))

    sampled_ids = set(rows[0].values) if rows else set()
    drawn = 0
    for func in functions:
        if func.is_3d or not func.visible or func.id not in sampled_ids:
            continue
        color = func.color or get_color(drawn, scheme)
        plot_function_series(ax, rows, func, color)
        drawn += 1

    config: Dict[str, Any] = {"x_range": settings.x_range, "y_range": settings.y_range}
    config.update(options)
    setup_plot_appearance(ax, config)

    fig.tight_layout()
    return fig


def plot_surfaces_3d(
    points_by_function: Dict[str, List[SamplePoint3D]],
    functions: Sequence[FunctionConfig],
    settings: Optional[GraphSettings] = None,
    options: Optional[Dict[str, Any]] = None,
) -> plt.Figure:
    """
    Draw each sampled 3D function. `material` option: "normal" | "wireframe" | "points".
    settings.grid_size must be the size the points were sampled with; a function
    missing any lattice node is drawn as points.
    """
    settings = settings or GraphSettings()
    options = dict(options or {})
    scheme = options.pop("color_scheme", "default")
    material = options.pop("material", "normal")

    fig = plt.figure(figsize=(10, 8))
    ax = fig.add_subplot(projection="3d")

    expected = expected_lattice_size(settings.grid_size)
    by_id = {f.id: f for f in functions}
    for i, (function_id, points) in enumerate(points_by_function.items()):
        func = by_id.get(function_id) or FunctionConfig(id=function_id, expression=function_id, is_3d=True)
        color = func.color or get_color(i, scheme)
        plot_surface(ax, points, func, color, material=material, expected_count=expected)

    config: Dict[str, Any] = {
        "x_range": settings.x_range,
        "y_range": settings.y_range,
        "z_range": settings.z_range,
    }
    config.update(options)
    setup_3d_appearance(ax, config)
    return fig
