import numpy as np
import pytest

from meshtone.mesh import MeshPoint


@pytest.fixture()
def palettes():
    return {
        "blue": [
            {"shade": 100, "value": "#dbeafe"},
            {"shade": 300, "value": "#93c5fd"},
            {"shade": 400, "value": "#60a5fa"},
            {"shade": 500, "value": "#3b82f6"},
            {"shade": 600, "value": "#2563eb"},
            {"shade": 900, "value": "#1e3a8a"},
        ],
        "rose": [
            {"shade": 50, "value": "#fff1f2"},
            {"shade": 300, "value": "#fda4af"},
            {"shade": 500, "value": "#f43f5e"},
            {"shade": 800, "value": "#9f1239"},
        ],
    }


@pytest.fixture()
def rng():
    return np.random.default_rng(7)


@pytest.fixture()
def two_points():
    return [
        MeshPoint(10, 20, "#ff0000", id="a"),
        MeshPoint(80, 90, "#0000ff", influence=30, id="b"),
    ]
