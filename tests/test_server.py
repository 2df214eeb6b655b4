import pytest
from fastapi.testclient import TestClient

from funcviz.engine import ai_generator
from funcviz.server import app

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def client():
    return TestClient(app)


class _Stub:
    def __init__(self, reply=None, exc=None):
        self.reply = reply
        self.exc = exc

    def generate(self, prompt, dimension):
        if self.exc is not None:
            raise self.exc
        return self.reply


# ---------- catalogue / evaluate ----------

def test_list_functions(client):
    r = client.get("/api/functions")
    assert r.status_code == 200
    body = r.json()
    assert "besselJ0" in body["functions"]
    assert "lambertW" in body["functions"]
    assert body["constants"] == ["E", "PI"]
    assert {"value": "bessel", "label": "Bessel Functions"} in body["types"]
    assert "x^2" in body["examples"]["polynomial"]


def test_evaluate(client):
    r = client.post("/api/evaluate", json={"expression": "x^2", "x": 3})
    assert r.status_code == 200
    assert r.json() == {"value": 9.0}


def test_evaluate_with_y_and_type(client):
    r = client.post("/api/evaluate", json={"expression": "x*y", "x": 2, "y": 4})
    assert r.json() == {"value": 8.0}
    r = client.post("/api/evaluate", json={"expression": "e^x", "x": 0, "function_type": "exponential"})
    assert r.json() == {"value": 1.0}


@pytest.mark.parametrize("expression,x", [("1/x", 0), ("foo(x)", 1), ("sqrt(x)", -1)])
def test_evaluate_unplottable_is_null(client, expression, x):
    r = client.post("/api/evaluate", json={"expression": expression, "x": x})
    assert r.status_code == 200
    assert r.json() == {"value": None}


# ---------- sampling ----------

def test_sample_2d_defaults(client):
    r = client.post("/api/sample/2d", json={"functions": [{"id": "f1", "expression": "sin(x)"}]})
    assert r.status_code == 200
    body = r.json()
    assert len(body["points"]) == 201
    assert body["points"][0]["x"] == -10.0
    assert body["errors"] == {}


def test_sample_2d_reports_errors_and_blanks(client):
    payload = {
        "functions": [
            {"id": "bad", "expression": "foo(x)"},
            {"id": "pole", "expression": "1/x"},
        ],
        "x_range": {"min": -2, "max": 2},
        "resolution": 50,
    }
    body = client.post("/api/sample/2d", json=payload).json()
    assert len(body["points"]) == 51
    assert body["errors"] == {"bad": "Unknown function 'foo'"}
    assert all(p["bad"] is None for p in body["points"])
    middle = body["points"][25]
    assert middle["x"] == pytest.approx(0.0)
    assert middle["pole"] is None
    assert body["points"][0]["pole"] == pytest.approx(-0.5)


@pytest.mark.parametrize("resolution", [10, 49, 501])
def test_sample_2d_resolution_bounds(client, resolution):
    r = client.post(
        "/api/sample/2d",
        json={"functions": [{"id": "f1", "expression": "x"}], "resolution": resolution},
    )
    assert r.status_code == 422


def test_sample_2d_inverted_range(client):
    r = client.post(
        "/api/sample/2d",
        json={"functions": [{"id": "f1", "expression": "x"}], "x_range": {"min": 5, "max": -5}},
    )
    assert r.status_code == 422


def test_sample_3d(client):
    payload = {
        "functions": [
            {"id": "s", "expression": "sin(x)*cos(y)", "is_3d": True},
            {"id": "r", "expression": "sqrt(x)", "is_3d": True},
            {"id": "flat", "expression": "x"},
        ],
        "grid_size": 10,
    }
    body = client.post("/api/sample/3d", json=payload).json()
    assert set(body["points"]) == {"s", "r"}
    assert len(body["points"]["s"]) == 121
    assert body["complete"] == {"s": True, "r": False}
    assert len(body["points"]["r"]) < 121
    assert body["points"]["s"][0] == {"x": -10.0, "y": -10.0, "z": pytest.approx(0.54402111 * -0.83907153, abs=1e-6)}
    assert body["errors"] == {}


def test_sample_3d_grid_bounds(client):
    r = client.post(
        "/api/sample/3d",
        json={"functions": [{"id": "s", "expression": "x*y", "is_3d": True}], "grid_size": 5},
    )
    assert r.status_code == 422


# ---------- AI generation ----------

def test_generate_requires_prompt(client):
    r = client.post("/api/generate-function", json={"prompt": "  "})
    assert r.status_code == 400


def test_generate_unknown_model(client):
    r = client.post("/api/generate-function", json={"prompt": "a wave", "model": "nope"})
    assert r.status_code == 400


def test_generate_success(client, monkeypatch):
    monkeypatch.setattr(ai_generator, "default_generator", lambda provider=None: _Stub(reply="`x^2 - y^2`"))
    r = client.post("/api/generate-function", json={"prompt": "a saddle", "dimension": "3d"})
    assert r.status_code == 200
    assert r.json() == {"expression": "x^2 - y^2"}


def test_generate_falls_back(client, monkeypatch):
    monkeypatch.setattr(
        ai_generator, "default_generator",
        lambda provider=None: _Stub(exc=ai_generator.GenerationError("request timed out after 10s")),
    )
    r = client.post("/api/generate-function", json={"prompt": "a wave"})
    assert r.status_code == 200
    body = r.json()
    assert body["expression"] == "sin(x)"
    assert "timed out" in body["error"]


# ---------- rendering ----------

def test_render_2d_png(client):
    payload = {
        "functions": [
            {"id": "f1", "expression": "sin(x)", "line_style": "dashed"},
            {"id": "f2", "expression": "1/x", "color": "#ff0000"},
        ],
        "resolution": 50,
    }
    r = client.post("/api/render/2d", json=payload)
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"
    assert r.content.startswith(PNG_MAGIC)


@pytest.mark.parametrize("material", ["normal", "wireframe", "points"])
def test_render_3d_png(client, material):
    payload = {
        "functions": [
            {"id": "s", "expression": "x^2 - y^2", "is_3d": True},
            {"id": "r", "expression": "sqrt(x*y)", "is_3d": True},
        ],
        "grid_size": 10,
        "material": material,
    }
    r = client.post("/api/render/3d", json=payload)
    assert r.status_code == 200
    assert r.content.startswith(PNG_MAGIC)


def test_camel_case_function_fields(client):
    payload = {
        "functions": [
            {"id": "s", "expression": "x*y", "is3D": True, "lineStyle": "dotted"},
            {"id": "snake", "expression": "x + y", "is_3d": True},
            {"id": "flat", "expression": "x", "is3D": False},
        ],
        "grid_size": 10,
    }
    body = client.post("/api/sample/3d", json=payload).json()
    assert set(body["points"]) == {"s", "snake"}
    assert body["complete"] == {"s": True, "snake": True}


def test_square_count_after_drops_is_not_complete(client):
    payload = {
        "functions": [{"id": "h", "expression": "1/(x*y)", "is3D": True}],
        "grid_size": 10,
    }
    body = client.post("/api/sample/3d", json=payload).json()
    assert len(body["points"]["h"]) == 100
    assert body["complete"] == {"h": False}
