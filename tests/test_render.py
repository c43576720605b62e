import asyncio
import io

import numpy as np
import pytest
from PIL import Image

from meshtone.effects import EffectParameters
from meshtone.errors import InvalidParameter, RasterExportError
from meshtone.mesh import MeshPoint
from meshtone.render import (
    RadialLayer,
    VignetteLayer,
    blank_png,
    build_descriptor,
    css_element,
    generate_css_gradient,
    render_png,
    render_png_async,
    render_preview,
    render_raster,
)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def test_descriptor_lists_points_in_reverse(two_points):
    css = generate_css_gradient(two_points, influence=50)
    assert css == (
        "radial-gradient(at 80% 90%, #0000ff 0px, transparent 30%), "
        "radial-gradient(at 10% 20%, #ff0000 0px, transparent 50%)"
    )


def test_paint_order_follows_point_order(two_points):
    descriptor = build_descriptor(two_points, 50)
    assert [layer.color for layer in descriptor.paint_order] == ["#ff0000", "#0000ff"]
    assert descriptor.vignette is None


def test_influence_is_clamped_in_descriptor():
    css = generate_css_gradient([MeshPoint(0, 0, "#000000")], influence=1)
    assert css.endswith("transparent 5%)")
    css = generate_css_gradient([MeshPoint(0, 0, "#000000", influence=250)], influence=50)
    assert css.endswith("transparent 100%)")


def test_vignette_layer(two_points):
    descriptor = build_descriptor(two_points, 50, vignette=40)
    assert isinstance(descriptor.layers[0], VignetteLayer)
    assert descriptor.layers[0].to_css() == "radial-gradient(circle, transparent 20%, rgba(0,0,0,0.2) 100%)"
    assert len(descriptor.layers) == 3
    assert descriptor.vignette.opacity == pytest.approx(0.2)


def test_fractional_positions_are_trimmed():
    layer = RadialLayer(33.333333, 12.5, "#abcdef", 47.0)
    assert layer.to_css() == "radial-gradient(at 33.3333% 12.5%, #abcdef 0px, transparent 47%)"


def test_empty_mesh_is_rejected():
    with pytest.raises(InvalidParameter):
        build_descriptor([], 50)


def test_css_element_carries_blend_mode(two_points):
    style = css_element(two_points, EffectParameters(blend_mode="multiply"))
    assert style["mixBlendMode"] == "multiply"
    assert style["backgroundImage"].startswith("radial-gradient(at 80% 90%")
    assert "mixBlendMode" not in css_element(two_points)


def test_raster_shape_and_range(two_points):
    img = render_raster(two_points, EffectParameters(grain=40, vignette=50), 32, 24)
    assert img.shape == (24, 32, 3)
    assert img.min() >= 0.0 and img.max() <= 1.0


def test_raster_matches_point_geometry():
    point = MeshPoint(50, 50, "#ff0000", influence=100)
    img = render_raster([point], EffectParameters(), 20, 20)
    center = img[10, 10]
    assert center[0] > 0.9 and center[1] < 0.1
    assert img[0, 0].mean() > 0.9


def test_raster_respects_influence():
    near = render_raster([MeshPoint(50, 50, "#000000", influence=10)], EffectParameters(), 40, 40)
    far = render_raster([MeshPoint(50, 50, "#000000", influence=90)], EffectParameters(), 40, 40)
    assert near[20, 30].mean() > far[20, 30].mean()


def test_vignette_darkens_corners():
    point = [MeshPoint(50, 50, "#ffffff")]
    plain = render_raster(point, EffectParameters(), 30, 30)
    dark = render_raster(point, EffectParameters(vignette=100), 30, 30)
    assert dark[0, 0].mean() < plain[0, 0].mean()
    assert dark[15, 15].mean() == pytest.approx(plain[15, 15].mean(), abs=1e-3)


def test_grain_is_reproducible_per_seed(two_points):
    params = EffectParameters(grain=50, grain_type="paper")
    a = render_raster(two_points, params, 24, 16, seed=3)
    b = render_raster(two_points, params, 24, 16, seed=3)
    assert np.array_equal(a, b)
    assert not np.array_equal(a, render_raster(two_points, EffectParameters(), 24, 16))


def test_png_encoding(two_points):
    data = render_png(two_points, EffectParameters(), 16, 8)
    assert data.startswith(PNG_SIGNATURE)
    with Image.open(io.BytesIO(data)) as img:
        assert img.size == (16, 8)
        assert img.mode == "RGB"


def test_invalid_raster_size(two_points):
    with pytest.raises(InvalidParameter):
        render_raster(two_points, EffectParameters(), 0, 10)


def test_preview_fails_closed_to_white():
    data = render_preview([], EffectParameters(), 6, 4)
    assert data == blank_png(6, 4)
    with Image.open(io.BytesIO(data)) as img:
        assert np.all(np.asarray(img) == 255)


def test_async_export_returns_png(two_points):
    data = asyncio.run(render_png_async(two_points, EffectParameters(), 12, 12))
    assert data.startswith(PNG_SIGNATURE)


def test_async_export_reports_failure():
    with pytest.raises(RasterExportError):
        asyncio.run(render_png_async([], EffectParameters(), 12, 12))


def test_concurrent_exports_are_independent(two_points):
    async def both():
        return await asyncio.gather(
            render_png_async(two_points, EffectParameters(grain=30), 10, 10, seed=1),
            render_png_async(two_points, EffectParameters(grain=30), 10, 10, seed=1),
        )

    a, b = asyncio.run(both())
    assert a == b


def test_css_element_embeds_grain(two_points):
    style = css_element(two_points, EffectParameters(grain=40, grain_type="film"))
    assert style["grainImage"].startswith('url("data:image/svg+xml,')
    assert "grainImage" not in css_element(two_points, EffectParameters())


def test_point_layers_keep_default_sizing(two_points):
    css = generate_css_gradient(two_points, influence=50)
    assert "circle" not in css and "ellipse" not in css


def test_raster_falloff_reaches_stop_on_square_output():
    point = MeshPoint(0, 0, "#000000", influence=50)
    img = render_raster([point], EffectParameters(), 41, 41)
    # the stop sits at half the diagonal: (20, 20) on a 41x41 canvas
    assert img[20, 20].mean() > 0.95
    assert img[5, 5].mean() < 0.5
