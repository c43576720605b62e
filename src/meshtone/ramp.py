from __future__ import annotations

from dataclasses import dataclass
from math import cos, isnan, pi
from typing import List, Sequence

from .errors import InvalidParameter
from .interpolate import interpolate
from .modes import ColorSpace, Mode
from .spaces import Hex, canon_hex, hex_to_hsl, hsl_to_hex


class Schedule(Mode):
    LINEAR = "linear"
    EASE = "ease"
    SHADOW = "shadow"
    HIGHLIGHT = "highlight"


def tone_schedule(
    n: int, *, schedule: "Schedule | str" = Schedule.LINEAR, gamma: float = 1.35
) -> List[float]:
    """
    Generate n positions in [0..1] inclusive.
    n counts the endpoints; the schedule only distributes the n-2 interior values.
      linear     – uniform interior spacing
      ease       – cosine ease-in/out, denser near both ends
      shadow     – concentrate interior samples toward the start
      highlight  – concentrate interior samples toward the end
    """
    if n < 2:
        raise InvalidParameter("n must be ≥ 2")
    schedule = Schedule.parse(schedule)
    g = max(1.001, float(gamma))

    out: List[float] = [0.0]
    for j in range(1, n - 1):
        u = j / (n - 1)
        if schedule is Schedule.LINEAR:
            v = u
        elif schedule is Schedule.EASE:
            v = 0.5 - 0.5 * cos(pi * u)
        elif schedule is Schedule.SHADOW:
            v = u**g
        else:
            v = 1.0 - (1.0 - u) ** g
        out.append(v)
    out.append(1.0)
    return out


@dataclass(frozen=True)
class RampPreset:
    name: str
    colors: tuple[Hex, ...]


SEQUENTIAL_PRESETS: tuple[RampPreset, ...] = (
    RampPreset("Blues", ("#f7fbff", "#08306b")),
    RampPreset("Greens", ("#f7fcf5", "#00441b")),
    RampPreset("Oranges", ("#fff5eb", "#7f2704")),
    RampPreset("Purples", ("#fcfbfd", "#3f007d")),
    RampPreset("Reds", ("#fff5f0", "#67000d")),
    RampPreset("Viridis", ("#440154", "#21918c", "#fde725")),
    RampPreset("Plasma", ("#0d0887", "#cc4778", "#f0f921")),
    RampPreset("Inferno", ("#000004", "#bc3754", "#fcffa4")),
    RampPreset("Magma", ("#000004", "#b63679", "#fcfdbf")),
    RampPreset("Warm", ("#fff7ec", "#fc8d59", "#7f0000")),
    RampPreset("Cool", ("#f7fcf0", "#41b6c4", "#081d58")),
)

DIVERGING_PRESETS: tuple[RampPreset, ...] = (
    RampPreset("Red-Blue", ("#b2182b", "#f7f7f7", "#2166ac")),
    RampPreset("Brown-Teal", ("#8c510a", "#f5f5f5", "#01665e")),
    RampPreset("Purple-Green", ("#7b3294", "#f7f7f7", "#008837")),
    RampPreset("Orange-Purple", ("#e66101", "#f7f7f7", "#5e3c99")),
    RampPreset("Pink-Green", ("#d01c8b", "#f7f7f7", "#4dac26")),
)


def generate_color_ramp(
    base: str,
    steps: int,
    *,
    lightness_range: tuple[float, float] = (10.0, 95.0),
    saturation_shift: float = 0.0,
    hue_shift: float = 0.0,
    space: "ColorSpace | str" = ColorSpace.OKLAB,
    schedule: "Schedule | str" = Schedule.LINEAR,
) -> List[Hex]:
    """Single-seed ramp sweeping HSL lightness from dark to light.

    Hue drifts by ``hue_shift * (t - 0.5)`` degrees; saturation is boosted
    (or cut) by ``saturation_shift`` percent, peaking mid-ramp. In Oklab the
    ramp is re-sampled between its two endpoints for even perceived steps.
    """
    if steps < 2:
        raise InvalidParameter("steps must be ≥ 2")
    lo, hi = (float(v) for v in lightness_range)
    if not (0.0 <= lo <= 100.0 and 0.0 <= hi <= 100.0):
        raise InvalidParameter("lightness range must lie within [0, 100]")
    space = ColorSpace.parse(space)

    h, s, _ = hex_to_hsl(canon_hex(base))
    base_h = 0.0 if isnan(h) else float(h)
    base_s = float(s)

    ramp: List[Hex] = []
    for t in tone_schedule(steps, schedule=schedule):
        lightness = lo + (hi - lo) * t
        hue = (base_h + hue_shift * (t - 0.5)) % 360.0
        sat = min(1.0, max(0.0, base_s + (saturation_shift / 100.0) * (0.5 - abs(t - 0.5))))
        ramp.append(hsl_to_hex([hue, sat, lightness / 100.0]))

    if space is ColorSpace.OKLAB:
        return interpolate([ramp[0], ramp[-1]], steps, space=ColorSpace.OKLAB)
    return ramp


def generate_data_viz_ramp(
    start: str, end: str, steps: int, mid: str | None = None
) -> List[Hex]:
    """Sequential Oklab ramp, or a diverging one through `mid`.

    A diverging ramp has both halves share the middle color, emitted once.
    """
    if mid is None:
        return interpolate([start, end], steps, space=ColorSpace.OKLAB)
    if steps < 3:
        raise InvalidParameter("diverging ramps need at least 3 steps")
    half = (steps + 1) // 2
    first = interpolate([start, mid], half, space=ColorSpace.OKLAB)
    second = interpolate([mid, end], steps - half + 1, space=ColorSpace.OKLAB)
    return first[:-1] + second


def ramp_from_preset(preset: RampPreset, steps: int) -> List[Hex]:
    return interpolate(list(preset.colors), steps, space=ColorSpace.OKLAB)


def find_preset(name: str, presets: Sequence[RampPreset] = SEQUENTIAL_PRESETS + DIVERGING_PRESETS) -> RampPreset:
    key = name.strip().lower()
    for preset in presets:
        if preset.name.lower() == key:
            return preset
    raise InvalidParameter(f"unknown ramp preset '{name}'")


__all__ = [
    "Schedule",
    "tone_schedule",
    "RampPreset",
    "SEQUENTIAL_PRESETS",
    "DIVERGING_PRESETS",
    "generate_color_ramp",
    "generate_data_viz_ramp",
    "ramp_from_preset",
    "find_preset",
]
