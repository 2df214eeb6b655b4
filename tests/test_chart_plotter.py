import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

from funcviz.engine.chart_plotter import figure_to_png, plot_functions_2d, plot_surfaces_3d
from funcviz.engine.chart_plotter.utils import get_color, mpl_linestyle
from funcviz.engine.constants import COLOR_SCHEMES
from funcviz.engine.grid_sampler import sample_2d, sample_3d_all
from funcviz.engine.models import FunctionConfig, GraphSettings, Range


def test_colors_cycle_through_scheme():
    default = COLOR_SCHEMES["default"]
    assert get_color(0) == default[0]
    assert get_color(len(default)) == default[0]
    assert get_color(1, "pastel") == COLOR_SCHEMES["pastel"][1]
    assert get_color(1, "no-such-scheme") == default[1]


def test_linestyles():
    assert mpl_linestyle("solid") == "-"
    assert mpl_linestyle("Dashed") == "--"
    assert mpl_linestyle("dotted") == ":"
    assert mpl_linestyle("zigzag") == "-"


def test_2d_figure_draws_one_line_per_visible_function():
    functions = [
        FunctionConfig(id="a", expression="x^2"),
        FunctionConfig(id="b", expression="1/x", line_style="dotted"),
        FunctionConfig(id="c", expression="x", visible=False),
    ]
    graph = GraphSettings(x_range=Range(-2.0, 2.0), y_range=Range(-5.0, 5.0))
    rows = sample_2d(functions, graph.x_range, 50)

    fig = plot_functions_2d(rows, functions, graph)
    ax = fig.axes[0]
    labels = [line.get_label() for line in ax.get_lines() if not line.get_label().startswith("_")]
    assert labels == ["x^2", "1/x"]
    assert ax.get_xlim() == (-2.0, 2.0)
    assert ax.get_ylim() == (-5.0, 5.0)
    plt.close(fig)


def test_3d_figure_and_png_export():
    functions = [
        FunctionConfig(id="s", expression="sin(x)*cos(y)", is_3d=True),
        FunctionConfig(id="r", expression="log(x)", is_3d=True),
    ]
    graph = GraphSettings(x_range=Range(-3.0, 3.0), y_range=Range(-3.0, 3.0), z_range=None, grid_size=10)
    points = sample_3d_all(functions, graph.x_range, graph.y_range, graph.grid_size)

    fig = plot_surfaces_3d(points, functions, graph)
    assert fig.axes[0].name == "3d"
    png = figure_to_png(fig, dpi=40)
    assert png.startswith(b"\x89PNG")
    assert not plt.fignum_exists(fig.number)


def test_model_from_camel_case_dict():
    f = FunctionConfig.from_dict(
        {"id": "f1", "expression": "x*y", "type": "polynomial", "lineStyle": "dashed", "is3D": True}
    )
    assert f.line_style == "dashed"
    assert f.is_3d is True
    assert f.visible is True
    assert f.color == ""


def _has_surface(ax):
    return any(isinstance(c, Poly3DCollection) for c in ax.collections)


def test_dropped_nodes_leaving_a_square_count_are_drawn_as_points():
    functions = [FunctionConfig(id="h", expression="1/(x*y)", is_3d=True)]
    graph = GraphSettings(x_range=Range(-10.0, 10.0), y_range=Range(-10.0, 10.0), z_range=None, grid_size=10)
    points = sample_3d_all(functions, graph.x_range, graph.y_range, graph.grid_size)
    assert len(points["h"]) == 100

    fig = plot_surfaces_3d(points, functions, graph)
    ax = fig.axes[0]
    assert not _has_surface(ax)
    assert len(ax.collections) == 1
    plt.close(fig)


def test_complete_lattice_is_drawn_as_surface():
    functions = [FunctionConfig(id="s", expression="x*y", is_3d=True)]
    graph = GraphSettings(x_range=Range(-10.0, 10.0), y_range=Range(-10.0, 10.0), z_range=None, grid_size=10)
    points = sample_3d_all(functions, graph.x_range, graph.y_range, graph.grid_size)

    fig = plot_surfaces_3d(points, functions, graph)
    assert _has_surface(fig.axes[0])
    plt.close(fig)
