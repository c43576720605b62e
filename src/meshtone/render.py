"""Gradient renderer: layered CSS descriptor and NumPy raster.

Both targets use the same stops and reach, so they look alike:

* each point falls off from full color at its center to transparent at
  ``stop`` percent of the farthest-corner extent. CSS sizes that extent as
  an ellipse (the ``radial-gradient`` default); the raster uses a circle of
  radius equal to the farthest-corner distance, so on non-square outputs the
  raster falloff is rounder than the CSS one;
* the vignette darkens from 20% of that distance (measured from the center)
  up to ``vignette/100 * 0.5`` black at the corners;
* grain is a gray texture composited with "overlay".

Points paint in list order, the first point at the bottom. The CSS
descriptor therefore lists layers in reverse, since background layers
declared first are drawn on top.
"""

from __future__ import annotations

import asyncio
import io
import logging
from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np
from PIL import Image

from .effects import EffectParameters
from .errors import InvalidParameter, RasterExportError
from .grain import grain_data_uri, grain_opacity, grain_texture
from .mesh import MeshPoint
from .mixer import blend_channels
from .modes import BlendMode
from .spaces import Hex, hex_to_rgb01

log = logging.getLogger(__name__)

VIGNETTE_INNER = 0.2
VIGNETTE_MAX_OPACITY = 0.5


def _num(v: float) -> str:
    return f"{round(float(v), 4):g}"


@dataclass(frozen=True)
class RadialLayer:
    x: float
    y: float
    color: Hex
    stop: float

    def to_css(self) -> str:
        return (
            f"radial-gradient(at {_num(self.x)}% {_num(self.y)}%, "
            f"{self.color} 0px, transparent {_num(self.stop)}%)"
        )


@dataclass(frozen=True)
class VignetteLayer:
    strength: float

    @property
    def opacity(self) -> float:
        return self.strength / 100.0 * VIGNETTE_MAX_OPACITY

    def to_css(self) -> str:
        return (
            f"radial-gradient(circle, transparent {_num(VIGNETTE_INNER * 100)}%, "
            f"rgba(0,0,0,{_num(self.opacity)}) 100%)"
        )


Layer = Union[RadialLayer, VignetteLayer]


@dataclass(frozen=True)
class GradientDescriptor:
    """Layers in CSS declaration order (topmost first)."""

    layers: tuple[Layer, ...]

    @property
    def paint_order(self) -> tuple[Layer, ...]:
        return tuple(reversed(self.layers))

    @property
    def vignette(self) -> VignetteLayer | None:
        for layer in self.layers:
            if isinstance(layer, VignetteLayer):
                return layer
        return None

    def to_css(self) -> str:
        return ", ".join(layer.to_css() for layer in self.layers)


def build_descriptor(
    points: Sequence[MeshPoint], influence: float = 50.0, vignette: float = 0.0
) -> GradientDescriptor:
    if not points:
        raise InvalidParameter("cannot build a gradient from zero points")
    layers: list[Layer] = [
        RadialLayer(p.x, p.y, p.color, p.effective_influence(influence)) for p in points
    ]
    if vignette > 0:
        layers.append(VignetteLayer(float(vignette)))
    layers.reverse()
    return GradientDescriptor(tuple(layers))


def generate_css_gradient(
    points: Sequence[MeshPoint], influence: float = 50.0, vignette: float = 0.0
) -> str:
    """``background-image`` value for the mesh."""
    return build_descriptor(points, influence, vignette).to_css()


def css_element(
    points: Sequence[MeshPoint], params: EffectParameters | None = None
) -> dict[str, str]:
    params = params or EffectParameters()
    style = {
        "background": "#ffffff",
        "backgroundImage": generate_css_gradient(points, params.influence, params.vignette),
    }
    if params.blend_mode is not BlendMode.NORMAL:
        style["mixBlendMode"] = params.blend_mode.value
    if params.grain > 0:
        style["grainImage"] = grain_data_uri(params.grain_type, grain_opacity(params.grain))
    return style


# --- raster -------------------------------------------------------------------
def _pixel_grid(width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
    return xs + 0.5, ys + 0.5


def _farthest_corner(cx: float, cy: float, width: int, height: int) -> float:
    return float(np.hypot(max(cx, width - cx), max(cy, height - cy)))


def render_raster(
    points: Sequence[MeshPoint],
    params: EffectParameters,
    width: int,
    height: int,
    *,
    seed: int = 0,
) -> np.ndarray:
    """Composite the mesh onto a white canvas; returns (height, width, 3) in [0,1]."""
    if width < 1 or height < 1:
        raise InvalidParameter("output size must be positive")
    if not points:
        raise InvalidParameter("cannot render zero points")

    xs, ys = _pixel_grid(width, height)
    canvas = np.ones((height, width, 3), dtype=np.float64)

    for p in points:
        cx, cy = p.x / 100.0 * width, p.y / 100.0 * height
        radius = p.effective_influence(params.influence) / 100.0 * _farthest_corner(cx, cy, width, height)
        dist = np.hypot(xs - cx, ys - cy)
        alpha = np.clip(1.0 - dist / radius, 0.0, 1.0)[..., None]
        canvas = blend_channels(canvas, hex_to_rgb01(p.color), params.blend_mode, alpha)

    if params.vignette > 0:
        cx, cy = width / 2.0, height / 2.0
        reach = _farthest_corner(cx, cy, width, height)
        t = (np.hypot(xs - cx, ys - cy) / reach - VIGNETTE_INNER) / (1.0 - VIGNETTE_INNER)
        alpha = np.clip(t, 0.0, 1.0) * VignetteLayer(params.vignette).opacity
        canvas = canvas * (1.0 - alpha[..., None])

    if params.grain > 0:
        tex = grain_texture(width, height, params.grain_type, seed=seed)
        canvas = blend_channels(canvas, tex[..., None], BlendMode.OVERLAY, grain_opacity(params.grain))

    return np.clip(canvas, 0.0, 1.0)


def encode_png(rgb: np.ndarray) -> bytes:
    u8 = np.round(np.clip(rgb, 0.0, 1.0) * 255.0).astype(np.uint8)
    buf = io.BytesIO()
    Image.fromarray(u8).save(buf, format="PNG")
    return buf.getvalue()


def render_png(
    points: Sequence[MeshPoint],
    params: EffectParameters,
    width: int,
    height: int,
    *,
    seed: int = 0,
) -> bytes:
    return encode_png(render_raster(points, params, width, height, seed=seed))


async def render_png_async(
    points: Sequence[MeshPoint],
    params: EffectParameters,
    width: int,
    height: int,
    *,
    seed: int = 0,
) -> bytes:
    """Render and encode off the event loop.

    Runs to completion once started. Any failure surfaces as
    RasterExportError; no partial image is ever returned.
    """
    snapshot = tuple(points)
    try:
        return await asyncio.to_thread(render_png, snapshot, params, width, height, seed=seed)
    except Exception as exc:
        log.exception("Raster export failed (%dx%d, %d points)", width, height, len(snapshot))
        raise RasterExportError(f"raster export failed: {exc}") from exc


def blank_png(width: int, height: int) -> bytes:
    return encode_png(np.ones((max(1, height), max(1, width), 3), dtype=np.float64))


def render_preview(
    points: Sequence[MeshPoint],
    params: EffectParameters,
    width: int,
    height: int,
    *,
    seed: int = 0,
) -> bytes:
    """Preview raster; falls back to a blank white image on any failure."""
    try:
        return render_png(points, params, width, height, seed=seed)
    except Exception:
        log.exception("Preview render failed; showing blank canvas")
        return blank_png(width, height)


__all__ = [
    "RadialLayer",
    "VignetteLayer",
    "GradientDescriptor",
    "build_descriptor",
    "generate_css_gradient",
    "css_element",
    "render_raster",
    "encode_png",
    "render_png",
    "render_png_async",
    "blank_png",
    "render_preview",
]
