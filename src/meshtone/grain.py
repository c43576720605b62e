# grain.py – procedural texture overlays
#   - one fixed recipe per GrainType (turbulence frequency, octaves, finish)
#   - SVG descriptor for vector consumers, NumPy texture for the raster path
#   - textures are gray in [0,1] centred on 0.5, the neutral value of "overlay"

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping
from urllib.parse import quote

import numpy as np

from .errors import InvalidParameter
from .modes import GrainType


CANVAS_CELL = 20  # px between weave lines
MAX_GRAIN_OPACITY = 0.5


@dataclass(frozen=True)
class TurbulenceRecipe:
    base_frequency: tuple[float, float]
    octaves: int
    finish: str = "none"  # none | contrast | lighting


RECIPES: Mapping[GrainType, TurbulenceRecipe] = {
    GrainType.NOISE: TurbulenceRecipe((0.65, 0.65), 3),
    GrainType.FIBER: TurbulenceRecipe((0.01, 0.5), 3, "contrast"),
    GrainType.PAPER: TurbulenceRecipe((0.04, 0.04), 5, "lighting"),
    GrainType.FILM: TurbulenceRecipe((0.8, 0.8), 1),
}


def grain_opacity(amount: float) -> float:
    """Map a 0–100 grain amount onto layer opacity, capped at 0.5."""
    return min(max(float(amount), 0.0) / 100.0, MAX_GRAIN_OPACITY)


# --- vector descriptor --------------------------------------------------------
def _filter_markup(grain_type: GrainType, recipe: TurbulenceRecipe) -> str:
    fx, fy = recipe.base_frequency
    freq = f"{fx:g}" if fx == fy else f"{fx:g} {fy:g}"
    turbulence = (
        f'<feTurbulence type="fractalNoise" baseFrequency="{freq}" '
        f'numOctaves="{recipe.octaves}" stitchTiles="stitch"/>'
    )
    if recipe.finish == "contrast":
        finish = (
            '<feColorMatrix type="saturate" values="0"/>'
            '<feComponentTransfer><feFuncR type="linear" slope="2" intercept="-0.5"/>'
            "</feComponentTransfer>"
        )
    elif recipe.finish == "lighting":
        finish = (
            '<feDiffuseLighting lighting-color="white" surfaceScale="2">'
            '<feDistantLight azimuth="45" elevation="60"/></feDiffuseLighting>'
        )
    elif grain_type is GrainType.FILM:
        finish = '<feColorMatrix type="saturate" values="0"/>'
    else:
        finish = ""
    return f'<filter id="{grain_type.value}">{turbulence}{finish}</filter>'


def grain_svg(
    grain_type: "GrainType | str",
    opacity: float,
    width: int | None = None,
    height: int | None = None,
) -> str:
    """Standalone SVG (filter + rectangle) for the given grain type.

    Without a size the SVG is a 200×200 tile that scales to any box. A size
    needs both dimensions, each at least 1.
    """
    grain_type = GrainType.parse(grain_type)
    op = f"{float(opacity):g}"
    if (width is None) != (height is None):
        raise InvalidParameter("grain size needs both width and height")
    if width is not None and (int(width) < 1 or int(height) < 1):
        raise InvalidParameter(f"grain size must be positive, got {width}x{height}")
    if width is not None:
        size = f'width="{int(width)}" height="{int(height)}"'
    else:
        size = 'viewBox="0 0 200 200"'
    if grain_type is GrainType.CANVAS:
        body = (
            f'<defs><pattern id="canvas" width="{CANVAS_CELL}" height="{CANVAS_CELL}" '
            'patternUnits="userSpaceOnUse">'
            f'<rect width="{CANVAS_CELL}" height="{CANVAS_CELL}" fill="white"/>'
            f'<path d="M0 10h20M10 0v20" stroke="black" stroke-opacity="{float(opacity) / 5:g}" '
            'stroke-width="0.5"/></pattern></defs>'
            '<rect width="100%" height="100%" fill="url(#canvas)"/>'
        )
    else:
        body = _filter_markup(grain_type, RECIPES[grain_type]) + (
            f'<rect width="100%" height="100%" filter="url(#{grain_type.value})" opacity="{op}"/>'
        )
    return f'<svg xmlns="http://www.w3.org/2000/svg" {size}>{body}</svg>'


def grain_data_uri(grain_type: "GrainType | str", opacity: float) -> str:
    """CSS ``url(...)`` embedding the grain SVG, usable as a background-image."""
    return f'url("data:image/svg+xml,{quote(grain_svg(grain_type, opacity), safe="")}")'


# --- raster texture -----------------------------------------------------------
def _value_noise(
    height: int, width: int, fx: float, fy: float, rng: np.random.Generator
) -> np.ndarray:
    gw = int(math.ceil(width * fx)) + 2
    gh = int(math.ceil(height * fy)) + 2
    lattice = rng.random((gh, gw))

    xs = np.arange(width, dtype=np.float64) * fx
    ys = np.arange(height, dtype=np.float64) * fy
    x0 = np.floor(xs).astype(np.intp)
    y0 = np.floor(ys).astype(np.intp)
    tx = xs - x0
    ty = ys - y0
    tx = (tx * tx * (3.0 - 2.0 * tx))[None, :]
    ty = (ty * ty * (3.0 - 2.0 * ty))[:, None]

    r0, r1 = y0[:, None], y0[:, None] + 1
    c0, c1 = x0[None, :], x0[None, :] + 1
    top = lattice[r0, c0] * (1.0 - tx) + lattice[r0, c1] * tx
    bottom = lattice[r1, c0] * (1.0 - tx) + lattice[r1, c1] * tx
    return top * (1.0 - ty) + bottom * ty


def fractal_noise(
    height: int, width: int, recipe: TurbulenceRecipe, rng: np.random.Generator
) -> np.ndarray:
    fx, fy = recipe.base_frequency
    total = np.zeros((height, width), dtype=np.float64)
    amp, norm = 1.0, 0.0
    for _ in range(max(1, recipe.octaves)):
        total += amp * _value_noise(height, width, fx, fy, rng)
        norm += amp
        amp *= 0.5
        fx *= 2.0
        fy *= 2.0
    return total / norm


def _diffuse_lighting(heightmap: np.ndarray, surface_scale: float = 2.0) -> np.ndarray:
    if min(heightmap.shape) < 2:
        return np.full_like(heightmap, 0.5)
    az, el = math.radians(45.0), math.radians(60.0)
    light = np.array([math.cos(el) * math.cos(az), math.cos(el) * math.sin(az), math.sin(el)])
    gy, gx = np.gradient(heightmap * surface_scale * 8.0)
    norm = np.sqrt(gx * gx + gy * gy + 1.0)
    shade = (-gx * light[0] - gy * light[1] + light[2]) / norm
    return np.clip(shade, 0.0, 1.0)


def _canvas_weave(height: int, width: int) -> np.ndarray:
    tex = np.full((height, width), 0.5, dtype=np.float64)
    half = CANVAS_CELL // 2
    tex[(np.arange(height) % CANVAS_CELL) == half, :] = 0.0
    tex[:, (np.arange(width) % CANVAS_CELL) == half] = 0.0
    return tex


def grain_texture(
    width: int, height: int, grain_type: "GrainType | str", seed: int = 0
) -> np.ndarray:
    """Gray (height, width) texture in [0,1] for the given grain type.

    Each call builds its own generator from `seed`, so concurrent renders
    never share random state.
    """
    if width < 1 or height < 1:
        raise InvalidParameter("texture size must be positive")
    grain_type = GrainType.parse(grain_type)
    if grain_type is GrainType.CANVAS:
        return _canvas_weave(height, width)

    recipe = RECIPES[grain_type]
    rng = np.random.default_rng(seed)
    noise = fractal_noise(height, width, recipe, rng)
    if recipe.finish == "contrast":
        noise = noise * 2.0 - 0.5
    elif recipe.finish == "lighting":
        noise = _diffuse_lighting(noise)
        noise = noise - noise.mean() + 0.5
    return np.clip(noise, 0.0, 1.0)


__all__ = [
    "TurbulenceRecipe",
    "RECIPES",
    "MAX_GRAIN_OPACITY",
    "grain_opacity",
    "grain_svg",
    "grain_data_uri",
    "fractal_noise",
    "grain_texture",
]
