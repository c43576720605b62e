import asyncio

import pytest

from meshtone.duotone import generate_duotone
from meshtone.effects import EffectParameters
from meshtone.errors import InvalidParameter, RasterExportError
from meshtone.export import (
    ExportChannel,
    color_ramp_payload,
    duotone_payload,
    interpolation_payload,
    mesh_payload,
    mix_payload,
)

MESH_KEYS = {"type", "points", "width", "height", "influence", "vignette", "grain", "grainType", "blendMode"}


def test_palette_payloads():
    ramp = color_ramp_payload(["#FFF", "#000"], "Greys")
    assert ramp == {"type": "create-color-ramp", "colors": ["#ffffff", "#000000"], "name": "Greys"}
    assert interpolation_payload(["#fff", "#000"], "oklab")["name"] == "Interpolation (oklab)"
    assert mix_payload(["#fff"])["type"] == "create-mix-palette"
    with pytest.raises(InvalidParameter):
        color_ramp_payload([])


def test_duotone_payload():
    payload = duotone_payload(generate_duotone("#000000", "#ffffff"))
    assert payload["type"] == "create-duotone-style"
    assert payload["duotone"]["darkColor"] == "#000000"


def test_mesh_payload(two_points):
    params = EffectParameters(vignette=20, grain=10, grain_type="film", blend_mode="screen")
    payload = mesh_payload(two_points, params)
    assert set(payload) == MESH_KEYS
    assert payload["type"] == "create-mesh-gradient"
    assert (payload["width"], payload["height"]) == (800, 600)
    assert payload["grainType"] == "film" and payload["blendMode"] == "screen"
    assert payload["points"][1] == {"id": "b", "x": 80.0, "y": 90.0, "color": "#0000ff", "influence": 30.0}
    with pytest.raises(InvalidParameter):
        mesh_payload([], params)


def test_channel_forwards_to_sink(two_points):
    received = []
    channel = ExportChannel(received.append)
    channel.color_ramp(["#fff", "#000"])
    channel.mesh(two_points, EffectParameters(), 100, 50)
    assert [p["type"] for p in received] == ["create-color-ramp", "create-mesh-gradient"]
    assert channel.sent == 2


def test_image_export_includes_png(two_points):
    received = []
    channel = ExportChannel(received.append)
    payload = asyncio.run(channel.mesh_image(two_points, EffectParameters(), 20, 10))
    assert payload["type"] == "create-mesh-gradient-image"
    assert payload["rasterBytes"].startswith(b"\x89PNG")
    assert set(payload) == MESH_KEYS | {"rasterBytes"}
    assert received == [payload]


def test_failed_image_export_sends_nothing(two_points):
    received = []
    channel = ExportChannel(received.append)
    with pytest.raises(RasterExportError):
        asyncio.run(channel.mesh_image(two_points, EffectParameters(), 0, 10))
    assert received == []
    assert channel.sent == 0
