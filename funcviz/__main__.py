"""
Command line entry point.

Examples:
  python -m funcviz eval "x^2 + besselJ0(x)" --x 3
  python -m funcviz sample "sin(x)" "foo(x)" --x-min -10 --x-max 10 --resolution 200
  python -m funcviz plot "x^2" "gamma(x)" --out plot.png
  python -m funcviz plot "sin(sqrt(x^2 + y^2))" --3d --grid-size 40 --out surface.png
  python -m funcviz generate "a damped oscillation" --dimension 2d
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Force headless backend before importing pyplot anywhere
os.environ.setdefault("MPLBACKEND", "Agg")

from funcviz.config import settings  # noqa: E402
from funcviz.engine import ai_generator, grid_sampler, utils  # noqa: E402
from funcviz.engine.constants import Dimension, FunctionType  # noqa: E402
from funcviz.engine.expression_evaluator import evaluate, validate_expression  # noqa: E402
from funcviz.engine.models import FunctionConfig, GraphSettings, Range  # noqa: E402


def _functions_from_args(expressions: List[str], function_type: str, is_3d: bool) -> List[FunctionConfig]:
    return [
        FunctionConfig(id=f"f{i}", expression=expr, type=function_type, is_3d=is_3d)
        for i, expr in enumerate(expressions, start=1)
    ]


def _settings_from_args(args: argparse.Namespace) -> GraphSettings:
    return GraphSettings(
        x_range=Range(args.x_min, args.x_max),
        y_range=Range(args.y_min, args.y_max),
        z_range=Range(args.z_min, args.z_max) if args.z_min is not None and args.z_max is not None else None,
        resolution=grid_sampler.clamp_resolution(args.resolution),
        grid_size=grid_sampler.clamp_grid_size(args.grid_size),
    )


def _report_problems(functions: List[FunctionConfig]) -> None:
    variables = grid_sampler.VARIABLES_3D if any(f.is_3d for f in functions) else grid_sampler.VARIABLES_2D
    for f in functions:
        problem = validate_expression(f.expression, variables, f.type)
        if problem:
            print(f"⚠️ {f.id} = {f.expression}: {problem}", file=sys.stderr)


# ---------- sub-commands ----------

def cmd_eval(args: argparse.Namespace) -> int:
    bindings: Dict[str, float] = {"x": args.x}
    if args.y is not None:
        bindings["y"] = args.y
    value = evaluate(args.expression, bindings, args.type)
    print(json.dumps({"expression": args.expression, **bindings, "value": utils.finite_or_none(value)}))
    return 0


def cmd_sample(args: argparse.Namespace) -> int:
    functions = _functions_from_args(args.expressions, args.type, args.three_d)
    graph = _settings_from_args(args)
    _report_problems(functions)

    payload: Dict[str, Any]
    if args.three_d:
        by_function = grid_sampler.sample_3d_all(functions, graph.x_range, graph.y_range, graph.grid_size)
        payload = {
            f.id: [{"x": p.x, "y": p.y, "z": p.z} for p in by_function[f.id]]
            for f in functions
        }
    else:
        rows = grid_sampler.sample_2d(functions, graph.x_range, graph.resolution)
        payload = {
            "points": [
                {"x": r.x, **{fid: utils.finite_or_none(v) for fid, v in r.values.items()}}
                for r in rows
            ]
        }
    print(json.dumps(payload, indent=args.indent))
    return 0


def cmd_plot(args: argparse.Namespace) -> int:
    from funcviz.engine.chart_plotter import figure_to_png, plot_functions_2d, plot_surfaces_3d

    functions = _functions_from_args(args.expressions, args.type, args.three_d)
    graph = _settings_from_args(args)
    _report_problems(functions)

    if args.three_d:
        by_function = grid_sampler.sample_3d_all(functions, graph.x_range, graph.y_range, graph.grid_size)
        fig = plot_surfaces_3d(by_function, functions, graph, {"material": args.material})
    else:
        rows = grid_sampler.sample_2d(functions, graph.x_range, graph.resolution)
        fig = plot_functions_2d(rows, functions, graph)

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(figure_to_png(fig, dpi=args.dpi))
    print(f"✅ Saved {out}")
    return 0


def cmd_generate(args: argparse.Namespace) -> int:
    try:
        generator = ai_generator.default_generator(args.provider)
        result = ai_generator.generate_expression(args.prompt, args.dimension, generator=generator)
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2

    if result.error:
        print(f"⚠️ {result.error}", file=sys.stderr)
    print(result.expression)
    return 0


# ---------- parser ----------

def _add_range_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--x-min", type=float, default=settings.DEFAULT_RANGE_MIN)
    p.add_argument("--x-max", type=float, default=settings.DEFAULT_RANGE_MAX)
    p.add_argument("--y-min", type=float, default=settings.DEFAULT_RANGE_MIN)
    p.add_argument("--y-max", type=float, default=settings.DEFAULT_RANGE_MAX)
    p.add_argument("--z-min", type=float, default=None)
    p.add_argument("--z-max", type=float, default=None)
    p.add_argument("--resolution", type=int, default=settings.DEFAULT_RESOLUTION,
                   help=f"2D steps ({settings.RESOLUTION_MIN}-{settings.RESOLUTION_MAX})")
    p.add_argument("--grid-size", type=int, default=settings.DEFAULT_GRID_SIZE,
                   help=f"3D lattice steps per axis ({settings.GRID_SIZE_MIN}-{settings.GRID_SIZE_MAX})")
    p.add_argument("--3d", dest="three_d", action="store_true", help="z = f(x, y) instead of y = f(x)")
    p.add_argument("--type", default=FunctionType.POLYNOMIAL, choices=sorted(FunctionType.ALL))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="funcviz", description="Evaluate, sample and plot math expressions.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_eval = sub.add_parser("eval", help="Evaluate one expression at a point")
    p_eval.add_argument("expression")
    p_eval.add_argument("--x", type=float, required=True)
    p_eval.add_argument("--y", type=float, default=None)
    p_eval.add_argument("--type", default=None, choices=sorted(FunctionType.ALL))
    p_eval.set_defaults(func=cmd_eval)

    p_sample = sub.add_parser("sample", help="Print sampled points as JSON")
    p_sample.add_argument("expressions", nargs="+")
    _add_range_args(p_sample)
    p_sample.add_argument("--indent", type=int, default=None)
    p_sample.set_defaults(func=cmd_sample)

    p_plot = sub.add_parser("plot", help="Render expressions to a PNG")
    p_plot.add_argument("expressions", nargs="+")
    _add_range_args(p_plot)
    p_plot.add_argument("--out", default="plot.png")
    p_plot.add_argument("--dpi", type=int, default=settings.RENDER_DPI)
    p_plot.add_argument("--material", default="normal", choices=["normal", "wireframe", "points"])
    p_plot.set_defaults(func=cmd_plot)

    p_gen = sub.add_parser("generate", help="Ask the AI service for an expression")
    p_gen.add_argument("prompt")
    p_gen.add_argument("--dimension", default=Dimension.TWO_D, choices=sorted(Dimension.ALL))
    p_gen.add_argument("--provider", default=None, help="groq | gemini (default: AI_PROVIDER)")
    p_gen.set_defaults(func=cmd_generate)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
