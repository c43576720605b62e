from __future__ import annotations

import math
from typing import Callable, Mapping, Sequence

import numpy as np

from .errors import InvalidParameter
from .modes import ColorSpace, Easing
from .spaces import HUE_CHANNEL, Hex, canon_hex, from_space, to_space

EaseFn = Callable[[float], float]

EASINGS: Mapping[Easing, EaseFn] = {
    Easing.LINEAR: lambda t: t,
    Easing.EASE_IN: lambda t: t * t,
    Easing.EASE_OUT: lambda t: 1.0 - (1.0 - t) ** 2,
    Easing.EASE_IN_OUT: lambda t: t * t * (3.0 - 2.0 * t),
}


def ease(t: float, easing: "Easing | str" = Easing.LINEAR) -> float:
    return EASINGS[Easing.parse(easing)](min(1.0, max(0.0, t)))


def _short_arc_lerp(h1: float, h2: float, t: float) -> float:
    # undefined (achromatic) hues borrow the other endpoint
    if math.isnan(h1) and math.isnan(h2):
        return 0.0
    if math.isnan(h1):
        return h2 % 360.0
    if math.isnan(h2):
        return h1 % 360.0
    d = ((h2 - h1 + 180.0) % 360.0) - 180.0
    return (h1 + t * d) % 360.0


def lerp_coords(a: np.ndarray, b: np.ndarray, t: float, space: ColorSpace) -> np.ndarray:
    """Channel-wise lerp; the hue channel of polar spaces takes the shorter arc."""
    hue_idx = HUE_CHANNEL.get(space)
    out = np.empty(3, dtype=np.float64)
    for i in range(3):
        if i == hue_idx:
            out[i] = _short_arc_lerp(float(a[i]), float(b[i]), t)
        else:
            out[i] = (1.0 - t) * a[i] + t * b[i]
    return out


def interpolate(
    colors: Sequence[str],
    steps: int,
    space: "ColorSpace | str" = ColorSpace.OKLAB,
    easing: "Easing | str" = Easing.LINEAR,
) -> list[Hex]:
    """Sample `steps` colors across evenly distributed control stops.

    Stop i sits at t = i/(N-1). Each output t is eased, the surrounding pair
    of stops is located and every channel is lerped in `space`. Samples that
    land exactly on a stop return that stop's hex untouched, so the first and
    last outputs always equal the first and last inputs.
    """
    if len(colors) < 2:
        raise InvalidParameter("interpolation needs at least 2 colors")
    if int(steps) < 2:
        raise InvalidParameter("steps must be ≥ 2")
    space = ColorSpace.parse(space)
    ease_fn = EASINGS[Easing.parse(easing)]

    stops = [canon_hex(c) for c in colors]
    coords = [to_space(c, space) for c in stops]
    segments = len(stops) - 1
    n = int(steps)

    out: list[Hex] = []
    for i in range(n):
        t = ease_fn(i / (n - 1))
        pos = min(1.0, max(0.0, t)) * segments
        seg = min(int(math.floor(pos)), segments - 1)
        local = pos - seg
        if local <= 0.0:
            out.append(stops[seg])
        elif local >= 1.0:
            out.append(stops[seg + 1])
        else:
            out.append(from_space(lerp_coords(coords[seg], coords[seg + 1], local, space), space))
    return out


def interpolate_between_two(
    a: str, b: str, steps: int, space: "ColorSpace | str" = ColorSpace.OKLAB
) -> list[Hex]:
    return interpolate([a, b], steps, space=space)


__all__ = ["EASINGS", "ease", "lerp_coords", "interpolate", "interpolate_between_two"]
