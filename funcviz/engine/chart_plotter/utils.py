"""
utils.py: Shared helpers for the chart_plotter package

Used by both:
- plotter.py (figure creation / entry points / PNG export)
- charts.py  (actual plotting of 2D series and 3D surfaces)
"""

import io
from typing import Any, Dict, Optional

import matplotlib.pyplot as plt

from funcviz.config import settings
from ..constants import COLOR_SCHEMES, LineStyle
from ..models import Range


# ============================================================================
# COLOR / STYLE
# ============================================================================

def get_color(index: int, scheme: str = "default") -> str:
    """Deterministic colour for the index-th plotted function."""
    colors = COLOR_SCHEMES.get(scheme) or COLOR_SCHEMES["default"]
    return colors[index % len(colors)]


def mpl_linestyle(line_style: str) -> str:
    return LineStyle.MPL.get(str(line_style).strip().lower(), "-")


# ============================================================================
# PLOT APPEARANCE
# ============================================================================

def setup_plot_appearance(ax: plt.Axes, config: Dict[str, Any]) -> None:
    ax.set_xlabel(config.get("x_label", "x"), fontsize=13, fontweight="bold")
    ax.set_ylabel(config.get("y_label", "y"), fontsize=13, fontweight="bold")

    if "title" in config:
        ax.set_title(config["title"], fontsize=15, fontweight="bold", pad=20)

    if config.get("grid", settings.SHOW_GRID):
        ax.grid(True, alpha=0.3)

    x_range: Optional[Range] = config.get("x_range")
    if isinstance(x_range, Range):
        ax.set_xlim(x_range.min, x_range.max)

    y_range: Optional[Range] = config.get("y_range")
    if isinstance(y_range, Range):
        ax.set_ylim(y_range.min, y_range.max)

    handles, labels = ax.get_legend_handles_labels()
    pairs = [(h, l) for h, l in zip(handles, labels) if str(l).strip()]
    if pairs:
        h2, l2 = zip(*pairs)
        ax.legend(h2, l2, loc=config.get("legend_location", "best"), fontsize=11)

    if config.get("axes_through_origin", True):
        ax.axhline(0, color="k", alpha=0.3, linewidth=0.8)
        ax.axvline(0, color="k", alpha=0.3, linewidth=0.8)


def setup_3d_appearance(ax, config: Dict[str, Any]) -> None:
    ax.set_xlabel(config.get("x_label", "x"))
    ax.set_ylabel(config.get("y_label", "y"))
    ax.set_zlabel(config.get("z_label", "z"))

    if "title" in config:
        ax.set_title(config["title"], fontsize=15, fontweight="bold")

    for setter, key in ((ax.set_xlim, "x_range"), (ax.set_ylim, "y_range"), (ax.set_zlim, "z_range")):
        rng = config.get(key)
        if isinstance(rng, Range):
            setter(rng.min, rng.max)


# ============================================================================
# EXPORT
# ============================================================================

def figure_to_png(fig: plt.Figure, dpi: Optional[int] = None) -> bytes:
    """Render to PNG bytes and close the figure."""
    buf = io.BytesIO()
    try:
        fig.savefig(buf, format="png", dpi=dpi or settings.RENDER_DPI, bbox_inches="tight")
    finally:
        plt.close(fig)
    return buf.getvalue()
