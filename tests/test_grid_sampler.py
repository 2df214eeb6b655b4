import math

import numpy as np
import pytest

from funcviz.config import settings
from funcviz.engine.grid_sampler import (
    axis_values,
    clamp_grid_size,
    clamp_resolution,
    expected_lattice_size,
    sample_2d,
    sample_3d,
    sample_3d_all,
    sample_series_2d,
    triangulate_grid,
)
from funcviz.engine.models import FunctionConfig, Range


def _f(fid, expression, **kw):
    return FunctionConfig(id=fid, expression=expression, **kw)


# ---------- axis ----------

def test_axis_values_include_both_ends():
    xs = axis_values(Range(-2.0, 2.0), 4)
    np.testing.assert_array_equal(xs, [-2.0, -1.0, 0.0, 1.0, 2.0])


@pytest.mark.parametrize("steps", [0, -3, 2.5, True])
def test_axis_values_reject_bad_steps(steps):
    with pytest.raises(ValueError):
        axis_values(Range(0.0, 1.0), steps)


def test_clamps():
    assert clamp_resolution(10) == settings.RESOLUTION_MIN
    assert clamp_resolution(10_000) == settings.RESOLUTION_MAX
    assert clamp_resolution(123) == 123
    assert clamp_grid_size(1) == settings.GRID_SIZE_MIN
    assert clamp_grid_size(1000) == settings.GRID_SIZE_MAX
    assert clamp_grid_size(42) == 42


# ---------- 2D ----------

def test_sine_over_default_range():
    rows = sample_2d([_f("f1", "sin(x)")], Range(-10.0, 10.0), 200)
    assert len(rows) == 201
    assert rows[0].x == -10.0
    assert rows[-1].x == pytest.approx(10.0)
    assert rows[0].values["f1"] == pytest.approx(math.sin(-10.0))
    assert all(math.isfinite(r.values["f1"]) for r in rows)


def test_functions_are_sampled_independently():
    rows = sample_2d([_f("bad", "foo(x)"), _f("good", "x^2")], Range(-10.0, 10.0), 200)
    assert len(rows) == 201
    assert all(math.isnan(r.values["bad"]) for r in rows)
    assert [r.values["good"] for r in rows] == pytest.approx([r.x ** 2 for r in rows])


def test_pole_blanks_only_its_own_row():
    rows = sample_2d([_f("f1", "1/x"), _f("f2", "x + 1")], Range(-2.0, 2.0), 4)
    values = [r.values["f1"] for r in rows]
    assert math.isnan(values[2])
    assert values[:2] == [-0.5, -1.0]
    assert values[3:] == [1.0, 0.5]
    assert [r.values["f2"] for r in rows] == [-1.0, 0.0, 1.0, 2.0, 3.0]


def test_hidden_and_3d_functions_are_skipped():
    rows = sample_2d(
        [_f("shown", "x"), _f("hidden", "x", visible=False), _f("surface", "x*y", is_3d=True)],
        Range(0.0, 1.0),
        50,
    )
    assert set(rows[0].values) == {"shown"}


def test_no_functions_still_yields_x_rows():
    rows = sample_2d([], Range(0.0, 1.0), 50)
    assert len(rows) == 51
    assert rows[10].values == {}


def test_type_hint_reaches_the_evaluator():
    rows = sample_2d([_f("f1", "e^x", type="exponential")], Range(0.0, 1.0), 50)
    assert rows[-1].values["f1"] == pytest.approx(math.e)


def test_sample_series_2d():
    points = sample_series_2d("sqrt(x)", Range(-1.0, 1.0), 50)
    assert len(points) == 51
    assert math.isnan(points[0].value)
    assert points[-1].value == pytest.approx(1.0)


def test_sampling_is_repeatable():
    funcs = [_f("f1", "gamma(x) + besselJ0(x)")]
    first = sample_2d(funcs, Range(-5.0, 5.0), 100)
    second = sample_2d(funcs, Range(-5.0, 5.0), 100)
    np.testing.assert_array_equal(
        [r.values["f1"] for r in first], [r.values["f1"] for r in second]
    )


# ---------- 3D ----------

def test_full_lattice_order_and_corners():
    points = sample_3d(_f("s", "x + y", is_3d=True), Range(-1.0, 1.0), Range(-1.0, 1.0), 2)
    assert len(points) == 9
    assert (points[0].x, points[0].y, points[0].z) == (-1.0, -1.0, -2.0)
    assert (points[-1].x, points[-1].y, points[-1].z) == (1.0, 1.0, 2.0)
    # x outer, y inner
    assert [p.y for p in points[:3]] == [-1.0, 0.0, 1.0]
    assert {p.x for p in points[:3]} == {-1.0}
    assert all(p.function_id == "s" for p in points)


def test_non_finite_nodes_are_dropped():
    points = sample_3d(_f("s", "sqrt(x)", is_3d=True), Range(-1.0, 1.0), Range(-1.0, 1.0), 2)
    assert len(points) == 6
    assert all(p.x >= 0 for p in points)
    assert triangulate_grid(len(points)) == []


def test_unknown_function_yields_no_points():
    points = sample_3d(_f("s", "foo(x, y)", is_3d=True), Range(-1.0, 1.0), Range(-1.0, 1.0), 10)
    assert points == []


def test_sample_3d_all_only_visible_3d():
    result = sample_3d_all(
        [
            _f("a", "x*y", is_3d=True),
            _f("b", "x", is_3d=False),
            _f("c", "x - y", is_3d=True, visible=False),
            _f("d", "sin(x)*cos(y)", is_3d=True),
        ],
        Range(-1.0, 1.0),
        Range(-1.0, 1.0),
        10,
    )
    assert list(result) == ["a", "d"]
    assert len(result["a"]) == 121
    assert len(result["d"]) == 121


# ---------- triangulation ----------

def test_triangulate_three_by_three():
    triangles = triangulate_grid(9)
    assert len(triangles) == 8
    assert triangles[0] == (0, 1, 3)
    assert triangles[1] == (1, 4, 3)
    assert max(max(t) for t in triangles) == 8


@pytest.mark.parametrize("count", [0, 1, 2, 8, 10, 120])
def test_triangulate_rejects_non_lattices(count):
    assert triangulate_grid(count) == []


def test_triangulate_default_grid():
    g = settings.DEFAULT_GRID_SIZE
    assert len(triangulate_grid((g + 1) ** 2)) == 2 * g * g


def test_square_count_after_drops_is_not_triangulated():
    # x = 0 row and y = 0 column are dropped: 121 - 21 = 100 = 10^2
    points = sample_3d(_f("s", "1/(x*y)", is_3d=True), Range(-10.0, 10.0), Range(-10.0, 10.0), 10)
    assert len(points) == 100
    assert expected_lattice_size(10) == 121
    assert triangulate_grid(len(points), expected_lattice_size(10)) == []


def test_complete_lattice_is_triangulated_with_expected_count():
    points = sample_3d(_f("s", "x*y", is_3d=True), Range(-10.0, 10.0), Range(-10.0, 10.0), 10)
    assert len(triangulate_grid(len(points), expected_lattice_size(10))) == 2 * 10 * 10
