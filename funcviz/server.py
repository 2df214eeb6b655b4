# funcviz/server.py
"""
HTTP surface over the engine.

Run:
    uvicorn funcviz.server:app --reload
"""

import os

# Headless rendering; must be set before pyplot is imported anywhere
os.environ.setdefault("MPLBACKEND", "Agg")

from typing import Any, Dict, List, Literal, Optional  # noqa: E402

from fastapi import FastAPI, HTTPException  # noqa: E402
from fastapi.responses import Response  # noqa: E402
from pydantic import BaseModel, ConfigDict, Field  # noqa: E402

from funcviz import __version__  # noqa: E402
from funcviz.config import settings  # noqa: E402
from funcviz.engine import ai_generator, grid_sampler, utils  # noqa: E402
from funcviz.engine.chart_plotter import figure_to_png, plot_functions_2d, plot_surfaces_3d  # noqa: E402
from funcviz.engine.constants import (  # noqa: E402
    FUNCTION_3D_EXAMPLES,
    FUNCTION_EXAMPLES,
    FunctionType,
)
from funcviz.engine.expression_evaluator import (  # noqa: E402
    CONSTANTS,
    FUNCTION_LIBRARY,
    evaluate,
    validate_expression,
)
from funcviz.engine.models import FunctionConfig, GraphSettings, Range  # noqa: E402

logger = utils.setup_logger(__name__)

app = FastAPI(title="funcviz", version=__version__)


# --- Models for our API requests ---

class RangeModel(BaseModel):
    min: float
    max: float

    def to_range(self) -> Range:
        return Range(self.min, self.max)


def _default_range_model() -> RangeModel:
    return RangeModel(min=settings.DEFAULT_RANGE_MIN, max=settings.DEFAULT_RANGE_MAX)


class FunctionModel(BaseModel):
    # Browser clients send lineStyle / is3D; snake_case works too
    model_config = ConfigDict(populate_by_name=True)

    id: str
    expression: str
    type: str = FunctionType.POLYNOMIAL
    color: str = ""
    visible: bool = True
    line_style: Literal["solid", "dashed", "dotted"] = Field("solid", alias="lineStyle")
    is_3d: bool = Field(False, alias="is3D")

    def to_config(self) -> FunctionConfig:
        return FunctionConfig.from_dict(self.model_dump())


class GenerateRequest(BaseModel):
    prompt: str = ""
    dimension: Literal["2d", "3d"] = "2d"
    model: Optional[str] = None  # "groq" | "gemini"; defaults to settings.AI_PROVIDER


class EvaluateRequest(BaseModel):
    expression: str
    x: float
    y: Optional[float] = None
    function_type: Optional[str] = None


class Sample2DRequest(BaseModel):
    functions: List[FunctionModel]
    x_range: RangeModel = Field(default_factory=_default_range_model)
    y_range: RangeModel = Field(default_factory=_default_range_model)  # display only
    resolution: int = Field(settings.DEFAULT_RESOLUTION, ge=settings.RESOLUTION_MIN, le=settings.RESOLUTION_MAX)


class Sample3DRequest(BaseModel):
    functions: List[FunctionModel]
    x_range: RangeModel = Field(default_factory=_default_range_model)
    y_range: RangeModel = Field(default_factory=_default_range_model)
    z_range: Optional[RangeModel] = None  # display only
    grid_size: int = Field(settings.DEFAULT_GRID_SIZE, ge=settings.GRID_SIZE_MIN, le=settings.GRID_SIZE_MAX)
    material: Literal["normal", "wireframe", "points"] = "normal"


# --- helpers ---

def _function_errors(functions: List[FunctionModel], variables) -> Dict[str, str]:
    """Per-function syntax problems, so the client can flag them next to the input."""
    errors: Dict[str, str] = {}
    for f in functions:
        problem = validate_expression(f.expression, variables, f.type)
        if problem:
            errors[f.id] = problem
    return errors


def _check_range(name: str, rng: RangeModel) -> None:
    if rng.min > rng.max:
        raise HTTPException(status_code=422, detail=f"{name}.min must not exceed {name}.max")


# --- Endpoints ---

@app.get("/api/functions")
def list_functions() -> Dict[str, Any]:
    return {
        "functions": sorted(FUNCTION_LIBRARY),
        "constants": sorted(CONSTANTS),
        "types": [{"value": k, "label": v} for k, v in FunctionType.LABELS.items()],
        "examples": FUNCTION_EXAMPLES,
        "examples_3d": [{"label": k, "value": v} for k, v in FUNCTION_3D_EXAMPLES.items()],
    }


@app.post("/api/generate-function")
def generate_function(request: GenerateRequest) -> Dict[str, Any]:
    if not request.prompt.strip():
        raise HTTPException(status_code=400, detail="Prompt is required")

    try:
        generator = ai_generator.default_generator(request.model)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = ai_generator.generate_expression(request.prompt, request.dimension, generator=generator)
    body: Dict[str, Any] = {"expression": result.expression}
    if result.error:
        body["error"] = result.error
    return body


@app.post("/api/evaluate")
def evaluate_expression(request: EvaluateRequest) -> Dict[str, Any]:
    bindings = {"x": request.x}
    if request.y is not None:
        bindings["y"] = request.y
    value = evaluate(request.expression, bindings, request.function_type)
    return {"value": utils.finite_or_none(value)}


@app.post("/api/sample/2d")
def sample_2d(request: Sample2DRequest) -> Dict[str, Any]:
    _check_range("x_range", request.x_range)
    functions = [f.to_config() for f in request.functions]
    rows = grid_sampler.sample_2d(functions, request.x_range.to_range(), request.resolution)

    points = []
    for row in rows:
        point: Dict[str, Any] = {"x": row.x}
        for fid, value in row.values.items():
            point[fid] = utils.finite_or_none(value)
        points.append(point)

    sampled = [f for f in request.functions if f.visible and not f.is_3d]
    return {"points": points, "errors": _function_errors(sampled, grid_sampler.VARIABLES_2D)}


@app.post("/api/sample/3d")
def sample_3d(request: Sample3DRequest) -> Dict[str, Any]:
    _check_range("x_range", request.x_range)
    _check_range("y_range", request.y_range)
    functions = [f.to_config() for f in request.functions]
    by_function = grid_sampler.sample_3d_all(
        functions, request.x_range.to_range(), request.y_range.to_range(), request.grid_size
    )

    expected = grid_sampler.expected_lattice_size(request.grid_size)
    sampled = [f for f in request.functions if f.visible and f.is_3d]
    return {
        "points": {
            fid: [{"x": p.x, "y": p.y, "z": p.z} for p in pts]
            for fid, pts in by_function.items()
        },
        "complete": {fid: len(pts) == expected for fid, pts in by_function.items()},
        "errors": _function_errors(sampled, grid_sampler.VARIABLES_3D),
    }


@app.post("/api/render/2d")
def render_2d(request: Sample2DRequest) -> Response:
    _check_range("x_range", request.x_range)
    functions = [f.to_config() for f in request.functions]
    graph_settings = GraphSettings(
        x_range=request.x_range.to_range(),
        y_range=request.y_range.to_range(),
        resolution=request.resolution,
    )
    rows = grid_sampler.sample_2d(functions, graph_settings.x_range, graph_settings.resolution)
    png = figure_to_png(plot_functions_2d(rows, functions, graph_settings))
    return Response(content=png, media_type="image/png")


@app.post("/api/render/3d")
def render_3d(request: Sample3DRequest) -> Response:
    _check_range("x_range", request.x_range)
    _check_range("y_range", request.y_range)
    functions = [f.to_config() for f in request.functions]
    graph_settings = GraphSettings(
        x_range=request.x_range.to_range(),
        y_range=request.y_range.to_range(),
        z_range=request.z_range.to_range() if request.z_range else None,
        grid_size=request.grid_size,
    )
    by_function = grid_sampler.sample_3d_all(
        functions, graph_settings.x_range, graph_settings.y_range, graph_settings.grid_size
    )
    fig = plot_surfaces_3d(by_function, functions, graph_settings, {"material": request.material})
    return Response(content=figure_to_png(fig), media_type="image/png")
