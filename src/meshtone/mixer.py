"""Perceptual mixing and display-domain blend modes.

``mix`` and ``mix_many`` work in Oklab, where a straight line between two
colors stays clear of the muddy midpoints an sRGB lerp produces. ``blend``
follows the compositing formulas used by design tools, which are defined on
gamma-encoded channels in [0, 1]; the same channel functions drive the raster
renderer so swatch previews and rendered meshes agree.
"""

from __future__ import annotations

from typing import Callable, Mapping, Sequence

import numpy as np

from .errors import InvalidParameter
from .modes import BlendMode
from .spaces import Hex, canon_hex, hex_to_oklab, hex_to_rgb01, oklab_to_hex, rgb01_to_hex


ChannelBlend = Callable[[np.ndarray, np.ndarray], np.ndarray]


def _check_unit(name: str, value: float) -> float:
    v = float(value)
    if not 0.0 <= v <= 1.0:
        raise InvalidParameter(f"{name} must be within [0, 1], got {value}")
    return v


def mix(a: str, b: str, ratio: float = 0.5) -> Hex:
    """Lerp two colors in Oklab; ratio 0 → a, ratio 1 → b."""
    t = _check_unit("ratio", ratio)
    la, lb = hex_to_oklab(a), hex_to_oklab(b)
    return oklab_to_hex((1.0 - t) * la + t * lb)


def mix_many(colors: Sequence[str], weights: Sequence[float] | None = None) -> Hex:
    """Weighted Oklab centroid. Weights are normalized; they need not sum to 1."""
    if len(colors) == 0:
        raise InvalidParameter("mix_many needs at least one color")
    if weights is None:
        weights = [1.0] * len(colors)
    if len(weights) != len(colors):
        raise InvalidParameter(
            f"got {len(weights)} weights for {len(colors)} colors"
        )
    w = np.asarray(weights, dtype=np.float64)
    if np.any(w < 0.0):
        raise InvalidParameter("weights must be non-negative")
    total = float(w.sum())
    if total <= 0.0:
        raise InvalidParameter("total weight must be greater than zero")
    w = w / total
    labs = np.stack([hex_to_oklab(c) for c in colors])
    return oklab_to_hex((w[:, None] * labs).sum(axis=0))


# --- per-channel compositing (gamma-encoded 0–1, elementwise) ----------------
def _normal(base: np.ndarray, top: np.ndarray) -> np.ndarray:
    return top


def _multiply(base: np.ndarray, top: np.ndarray) -> np.ndarray:
    return base * top


def _screen(base: np.ndarray, top: np.ndarray) -> np.ndarray:
    return 1.0 - (1.0 - base) * (1.0 - top)


def _overlay(base: np.ndarray, top: np.ndarray) -> np.ndarray:
    return np.where(
        base <= 0.5,
        2.0 * base * top,
        1.0 - 2.0 * (1.0 - base) * (1.0 - top),
    )


def _soft_light(base: np.ndarray, top: np.ndarray) -> np.ndarray:
    # W3C Compositing and Blending Level 1 formula
    d = np.where(base <= 0.25, ((16.0 * base - 12.0) * base + 4.0) * base, np.sqrt(base))
    return np.where(
        top <= 0.5,
        base - (1.0 - 2.0 * top) * base * (1.0 - base),
        base + (2.0 * top - 1.0) * (d - base),
    )


BLEND_FUNCS: Mapping[BlendMode, ChannelBlend] = {
    BlendMode.NORMAL: _normal,
    BlendMode.MULTIPLY: _multiply,
    BlendMode.SCREEN: _screen,
    BlendMode.OVERLAY: _overlay,
    BlendMode.SOFT_LIGHT: _soft_light,
}


def blend_channels(
    base: np.ndarray, top: np.ndarray, mode: "BlendMode | str", alpha=1.0
) -> np.ndarray:
    """Blend `top` onto `base` and alpha-composite the result over `base`.

    Works on any broadcastable arrays, so a single swatch and a full raster
    go through the same code. `alpha` may be a scalar or a per-pixel array.
    """
    fn = BLEND_FUNCS[BlendMode.parse(mode)]
    base = np.asarray(base, dtype=np.float64)
    top = np.asarray(top, dtype=np.float64)
    mixed = np.clip(fn(base, top), 0.0, 1.0)
    a = np.asarray(alpha, dtype=np.float64)
    return base * (1.0 - a) + mixed * a


def blend(base: str, overlay: str, mode: "BlendMode | str" = BlendMode.NORMAL, opacity: float = 1.0) -> Hex:
    op = _check_unit("opacity", opacity)
    mode = BlendMode.parse(mode)
    out = blend_channels(hex_to_rgb01(base), hex_to_rgb01(overlay), mode, op)
    return rgb01_to_hex(out)


def blend_previews(base: str, overlay: str, opacity: float = 1.0) -> dict[str, Hex]:
    """Every blend mode applied to the same pair, keyed by mode name."""
    canon_hex(base)
    canon_hex(overlay)
    return {m.value: blend(base, overlay, m, opacity) for m in BlendMode}


__all__ = [
    "mix",
    "mix_many",
    "BLEND_FUNCS",
    "blend_channels",
    "blend",
    "blend_previews",
]
