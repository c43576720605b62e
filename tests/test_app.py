import pytest

from meshtone.app import create_app
from meshtone.config import Settings

MESH = {
    "points": [
        {"id": "a", "x": 10, "y": 20, "color": "#ff0000"},
        {"id": "b", "x": 80, "y": 90, "color": "#0000ff", "influence": 30},
    ],
    "params": {"influence": 50, "vignette": 0},
}


@pytest.fixture()
def client():
    app = create_app(Settings(max_steps=16, max_render_pixels=10_000))
    app.testing = True
    return app.test_client()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_interpolate(client):
    response = client.get("/interpolate?colors=000000,ffffff&steps=3&space=rgb")
    assert response.status_code == 200
    palette = response.get_json()
    assert palette[0] == "#000000" and palette[-1] == "#ffffff"
    assert palette[1] in ("#7f7f7f", "#808080")


def test_interpolate_rejects_bad_input(client):
    assert client.get("/interpolate?steps=100").status_code == 400
    assert client.get("/interpolate?steps=abc").status_code == 400
    response = client.get("/interpolate?space=cmyk")
    assert response.status_code == 400
    assert "error" in response.get_json()
    assert client.get("/interpolate?colors=zzz,000").status_code == 400


def test_mix(client):
    body = client.get("/mix?a=ff0000&b=0000ff&ratio=0.5").get_json()
    assert body["color"].startswith("#") and len(body["oklab"]) == 3
    assert client.get("/mix?ratio=2").status_code == 400


def test_mix_many(client):
    response = client.post("/mix-many", json={"colors": ["#ff0000", "#0000ff"], "weights": [1, 0]})
    assert response.get_json() == {"color": "#ff0000"}
    assert client.post("/mix-many", json={"colors": ["#ff0000"], "weights": [0]}).status_code == 400
    assert client.post("/mix-many", data="nope").status_code == 400


def test_blend(client):
    assert client.get("/blend?base=ffffff&overlay=000000&mode=multiply").get_json() == {"color": "#000000"}
    previews = client.get("/blend?base=3b82f6&overlay=f43f5e").get_json()
    assert set(previews) == {"normal", "multiply", "screen", "overlay", "soft-light"}
    assert client.get("/blend?mode=dodge").status_code == 400


def test_ramp(client):
    assert len(client.get("/ramp?base=3b82f6&steps=7").get_json()) == 7
    diverging = client.get("/ramp?start=b2182b&end=2166ac&mid=f7f7f7&steps=5").get_json()
    assert diverging[2] == "#f7f7f7"
    assert len(client.get("/ramp?preset=Viridis&steps=4").get_json()) == 4
    assert client.get("/ramp?preset=rainbow").status_code == 400


def test_duotone(client):
    body = client.get("/duotone?dark=000000&light=ffffff").get_json()
    assert body["gradient"] == "linear-gradient(135deg, #000000 0%, #ffffff 100%)"
    pairs = client.get("/duotone?colors=000000,ffffff,3b82f6").get_json()
    assert len(pairs) == 3


def test_harmony(client):
    assert client.get("/harmony?base=ff0000&kind=triadic").get_json() == ["#0000ff", "#ff0000", "#00ff00"]
    assert client.get("/harmony?kind=square").status_code == 400


def test_mesh_gradient(client):
    body = client.post("/mesh/gradient", json=MESH).get_json()
    assert body["css"].startswith("radial-gradient(at 80% 90%, #0000ff 0px, transparent 30%)")
    assert body["layers"] == 2
    assert body["style"]["backgroundImage"] == body["css"]


def test_mesh_gradient_errors(client):
    assert client.post("/mesh/gradient", json={"points": []}).status_code == 400
    assert client.post("/mesh/gradient", json={"points": [{"x": 0, "y": 0}]}).status_code == 400
    bad_params = dict(MESH, params={"blendMode": "difference"})
    assert client.post("/mesh/gradient", json=bad_params).status_code == 400


@pytest.mark.parametrize(
    "body",
    [
        {"points": [{"x": "abc", "y": 0, "color": "#fff"}]},
        {"points": [{"x": 0, "y": 0, "color": "#fff", "influence": "lots"}]},
        {"points": [5]},
        dict(MESH, params={"influence": "lots"}),
        dict(MESH, params={"animationSpeed": "fast"}),
    ],
)
def test_malformed_mesh_is_a_client_error(client, body):
    for route in ("/mesh/gradient", "/mesh/render"):
        response = client.post(route, json=body)
        assert response.status_code == 400
        assert "error" in response.get_json()


def test_mesh_render(client):
    response = client.post("/mesh/render", json=dict(MESH, width=20, height=10))
    assert response.status_code == 200
    assert response.mimetype == "image/png"
    assert response.data.startswith(b"\x89PNG")


def test_mesh_render_preview(client):
    response = client.post("/mesh/render", json=dict(MESH, width=20, height=10, preview=True))
    assert response.data.startswith(b"\x89PNG")


def test_mesh_render_size_limit(client):
    assert client.post("/mesh/render", json=dict(MESH, width=200, height=200)).status_code == 400
    assert client.post("/mesh/render", json=dict(MESH, width="wide", height=10)).status_code == 400


def test_grain(client):
    response = client.get("/grain/paper?amount=40")
    assert response.mimetype == "image/svg+xml"
    assert b"feDiffuseLighting" in response.data
    assert b'opacity="0.4"' in response.data
    assert client.get("/grain/sand").status_code == 400


def test_grain_rejects_bad_sizes(client):
    assert client.get("/grain/noise?width=-5&height=10").status_code == 400
    assert client.get("/grain/noise?width=0&height=10").status_code == 400
    assert client.get("/grain/noise?width=40").status_code == 400
    sized = client.get("/grain/noise?width=40&height=30")
    assert b'width="40" height="30"' in sized.data


def test_unknown_route(client):
    assert client.get("/nope").status_code == 404
