# funcviz/engine/models.py
"""
Plain data carried between the evaluator, the sampler and the outer layers.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from funcviz.config import settings
from .constants import FunctionType, LineStyle


@dataclass(frozen=True)
class Range:
    """Closed interval [min, max]. min <= max is the caller's responsibility."""

    min: float
    max: float


def default_range() -> Range:
    return Range(settings.DEFAULT_RANGE_MIN, settings.DEFAULT_RANGE_MAX)


@dataclass(frozen=True)
class FunctionConfig:
    id: str
    expression: str
    type: str = FunctionType.POLYNOMIAL
    color: str = ""  # empty -> next colour of the scheme when rendering
    visible: bool = True
    line_style: str = LineStyle.SOLID
    is_3d: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FunctionConfig":
        """Accepts both snake_case and the camelCase keys used by browser clients."""
        return cls(
            id=str(data.get("id", "")),
            expression=str(data.get("expression", "")),
            type=str(data.get("type", FunctionType.POLYNOMIAL)),
            color=str(data.get("color") or ""),
            visible=bool(data.get("visible", True)),
            line_style=str(data.get("line_style", data.get("lineStyle", LineStyle.SOLID))),
            is_3d=bool(data.get("is_3d", data.get("is3D", False))),
        )


@dataclass(frozen=True)
class SamplePoint:
    """One 2D sample of one function. value is NaN when the point can't be plotted."""

    x: float
    value: float


@dataclass(frozen=True)
class SampleRow:
    """One x position with a value (or NaN) per 2D function id."""

    x: float
    values: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class SamplePoint3D:
    x: float
    y: float
    z: float
    function_id: str = ""


@dataclass
class GraphSettings:
    x_range: Range = field(default_factory=default_range)
    y_range: Range = field(default_factory=default_range)
    z_range: Optional[Range] = field(default_factory=default_range)
    resolution: int = settings.DEFAULT_RESOLUTION
    grid_size: int = settings.DEFAULT_GRID_SIZE
