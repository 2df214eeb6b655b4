from .plotter import plot_functions_2d, plot_surfaces_3d
from .utils import figure_to_png

__all__ = ["plot_functions_2d", "plot_surfaces_3d", "figure_to_png"]
