"""Mesh point model: grid generation, symmetry, scaling and recoloring.

Points are immutable values; every operation here returns a new tuple of
points and never edits its input. Geometry helpers (mirroring, scaling,
moving) accept any well-formed point list and degrade to a no-op instead of
raising when there is nothing to do.
"""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping, Sequence, TypedDict

import numpy as np

from .errors import InvalidParameter
from .modes import HarmonyKind, MirrorMode
from .spaces import Hex, canon_hex, hex_to_hsl, hsl_to_hex

log = logging.getLogger(__name__)

MIN_DENSITY = 2
MAX_DENSITY = 5
MIN_INFLUENCE = 5.0
MAX_INFLUENCE = 100.0
DEFAULT_MIRROR_TOLERANCE = 5.0
PREFERRED_SHADES = (300, 400, 500, 600)
FALLBACK_COLOR: Hex = "#000000"


class PaletteEntry(TypedDict):
    shade: int
    value: str


Palettes = Mapping[str, Sequence[PaletteEntry]]


def _clamp(v: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, float(v)))


def _finite(name: str, value) -> float:
    try:
        out = float(value)
    except (TypeError, ValueError):
        raise InvalidParameter(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(out):
        raise InvalidParameter(f"{name} must be finite, got {value!r}")
    return out


def new_point_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class MeshPoint:
    x: float
    y: float
    color: Hex
    influence: float | None = None
    id: str = field(default_factory=new_point_id)

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", _clamp(self.x))
        object.__setattr__(self, "y", _clamp(self.y))
        object.__setattr__(self, "color", canon_hex(self.color))
        if self.influence is not None:
            object.__setattr__(self, "influence", float(self.influence))

    def effective_influence(self, global_influence: float) -> float:
        raw = self.influence if self.influence is not None else global_influence
        return _clamp(raw, MIN_INFLUENCE, MAX_INFLUENCE)

    def to_dict(self) -> dict:
        out = {"id": self.id, "x": self.x, "y": self.y, "color": self.color}
        if self.influence is not None:
            out["influence"] = self.influence
        return out

    @classmethod
    def from_dict(cls, data: Mapping) -> "MeshPoint":
        if not isinstance(data, Mapping):
            raise InvalidParameter(f"mesh point must be an object, got {type(data).__name__}")
        try:
            x, y, color = data["x"], data["y"], data["color"]
        except KeyError as exc:
            raise InvalidParameter(f"mesh point is missing '{exc.args[0]}'") from exc
        influence = data.get("influence")
        kwargs = {}
        if data.get("id"):
            kwargs["id"] = str(data["id"])
        return cls(
            x=_finite("x", x),
            y=_finite("y", y),
            color=color,
            influence=None if influence is None else _finite("influence", influence),
            **kwargs,
        )


@dataclass(frozen=True)
class MeshState:
    points: tuple[MeshPoint, ...]
    density: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        if self.density < MIN_DENSITY:
            raise InvalidParameter(f"density must be ≥ {MIN_DENSITY}")

    def find(self, point_id: str) -> MeshPoint | None:
        for p in self.points:
            if p.id == point_id:
                return p
        return None

    def with_points(self, points: Iterable[MeshPoint]) -> "MeshState":
        return replace(self, points=tuple(points))


# --- palette sampling ---------------------------------------------------------
def random_palette_color(palettes: Palettes, rng: np.random.Generator | None = None) -> Hex:
    """Pick a color from a random family, preferring mid-range shades."""
    rng = rng or np.random.default_rng()
    families = [name for name in palettes if palettes[name]]
    if not families:
        return FALLBACK_COLOR
    tokens = palettes[families[int(rng.integers(len(families)))]]
    preferred = [t for t in tokens if t["shade"] in PREFERRED_SHADES]
    pool = preferred or list(tokens)
    return canon_hex(pool[int(rng.integers(len(pool)))]["value"])


def harmonious_colors(palettes: Palettes, rng: np.random.Generator | None = None) -> list[Hex]:
    """A contiguous run of up to five shades from one palette family."""
    rng = rng or np.random.default_rng()
    families = [name for name in palettes if palettes[name]]
    if not families:
        return [FALLBACK_COLOR]
    tokens = sorted(palettes[families[int(rng.integers(len(families)))]], key=lambda t: t["shade"])
    size = min(len(tokens), 5)
    start = int(rng.integers(len(tokens) - size + 1))
    return [canon_hex(t["value"]) for t in tokens[start : start + size]]


# --- grid ---------------------------------------------------------------------
def grid_positions(density: int) -> list[tuple[float, float]]:
    d = max(MIN_DENSITY, int(density))
    return [
        (col / (d - 1) * 100.0, row / (d - 1) * 100.0)
        for row in range(d)
        for col in range(d)
    ]


def generate_initial_mesh(
    palettes: Palettes, density: int = 3, rng: np.random.Generator | None = None
) -> list[MeshPoint]:
    """Row-major d×d grid, edges included, colored from `palettes`.

    Densities below 2 are raised to 2.
    """
    rng = rng or np.random.default_rng()
    points = [
        MeshPoint(x=x, y=y, color=random_palette_color(palettes, rng))
        for x, y in grid_positions(density)
    ]
    log.debug("generated %d mesh points (density=%s)", len(points), density)
    return points


# --- single-point edits -------------------------------------------------------
def update_point(points: Sequence[MeshPoint], point_id: str, **changes) -> list[MeshPoint]:
    return [replace(p, **changes) if p.id == point_id else p for p in points]


def move_points(
    points: Sequence[MeshPoint],
    origins: Mapping[str, tuple[float, float]],
    dx: float,
    dy: float,
) -> list[MeshPoint]:
    """Offset every point in `origins` from its recorded start position."""
    out = []
    for p in points:
        start = origins.get(p.id)
        out.append(p if start is None else replace(p, x=start[0] + dx, y=start[1] + dy))
    return out


def _near(a: float, b: float, tol: float) -> bool:
    return abs(a - b) < tol


def mirror_points(
    points: Sequence[MeshPoint],
    mode: "MirrorMode | str",
    source_id: str,
    tolerance: float = DEFAULT_MIRROR_TOLERANCE,
) -> list[MeshPoint]:
    """Copy the source point's color onto its mirrored partners.

    Partners are found by distance, not grid index: a point matches when it
    lies within `tolerance` of the source's reflection across the vertical
    axis (x), the horizontal axis (y) or the center (both; x and y partners
    are included too).
    """
    mode = MirrorMode.parse(mode)
    source = next((p for p in points if p.id == source_id), None)
    if source is None or mode is MirrorMode.NONE:
        return list(points)

    mx, my = 100.0 - source.x, 100.0 - source.y
    out = []
    for p in points:
        if p.id == source_id:
            out.append(p)
            continue
        across_x = _near(mx, p.x, tolerance) and _near(source.y, p.y, tolerance)
        across_y = _near(source.x, p.x, tolerance) and _near(my, p.y, tolerance)
        across_both = _near(mx, p.x, tolerance) and _near(my, p.y, tolerance)
        if mode is MirrorMode.X:
            hit = across_x
        elif mode is MirrorMode.Y:
            hit = across_y
        else:
            hit = across_x or across_y or across_both
        out.append(replace(p, color=source.color) if hit else p)
    return out


def scale_points(points: Sequence[MeshPoint], scale: float) -> list[MeshPoint]:
    """Scale positions about the canvas center (50, 50), clamped to [0, 100]."""
    s = float(scale)
    return [replace(p, x=50.0 + (p.x - 50.0) * s, y=50.0 + (p.y - 50.0) * s) for p in points]


# --- recoloring ---------------------------------------------------------------
HARMONY_OFFSETS: Mapping[HarmonyKind, tuple[float, float, float]] = {
    HarmonyKind.ANALOGOUS: (-30.0, 0.0, 30.0),
    HarmonyKind.TRIADIC: (-120.0, 0.0, 120.0),
    HarmonyKind.SPLIT_COMPLEMENTARY: (0.0, 150.0, 210.0),
}


def rotate_hue(color: str, degrees: float) -> Hex:
    if degrees == 0:
        return canon_hex(color)
    h, s, l = hex_to_hsl(color)
    base = 0.0 if math.isnan(h) else float(h)
    return hsl_to_hex([(base + degrees) % 360.0, s, l])


def harmony_colors(base: str, kind: "HarmonyKind | str") -> list[Hex]:
    return [rotate_hue(base, off) for off in HARMONY_OFFSETS[HarmonyKind.parse(kind)]]


def apply_palette(points: Sequence[MeshPoint], colors: Sequence[str]) -> list[MeshPoint]:
    """Recolor points 1:1 in order, cycling when `colors` is shorter.

    An empty color list leaves the points untouched.
    """
    if not colors:
        return list(points)
    canon = [canon_hex(c) for c in colors]
    return [replace(p, color=canon[i % len(canon)]) for i, p in enumerate(points)]


def apply_harmony(points: Sequence[MeshPoint], base: str, kind: "HarmonyKind | str") -> list[MeshPoint]:
    colors = harmony_colors(base, kind)
    log.debug("applying %s harmony from %s", HarmonyKind.parse(kind).value, base)
    return apply_palette(points, colors)


def adjust_mesh_global(
    points: Sequence[MeshPoint],
    hue: float = 0.0,
    saturation: float = 100.0,
    lightness: float = 100.0,
) -> list[MeshPoint]:
    """Derived copy with a hue rotation and saturation/lightness factors.

    `saturation` and `lightness` are percentages of the stored value
    (100 = unchanged). Used for display only; stored colors stay as they are.
    """
    if hue == 0 and saturation == 100 and lightness == 100:
        return list(points)
    out = []
    for p in points:
        h, s, l = hex_to_hsl(p.color)
        h = 0.0 if math.isnan(h) else float(h)
        if hue != 0:
            h = (h + hue) % 360.0
        if saturation != 100:
            s = min(1.0, max(0.0, s * saturation / 100.0))
        if lightness != 100:
            l = min(1.0, max(0.0, l * lightness / 100.0))
        out.append(replace(p, color=hsl_to_hex([h, s, l])))
    return out


@dataclass(frozen=True)
class MeshPreset:
    id: str
    name: str
    colors: tuple[Hex, ...]


MESH_PRESETS: tuple[MeshPreset, ...] = (
    MeshPreset("aurora", "Aurora", ("#00d2ff", "#3a7bd5", "#9be15d", "#00e3ae")),
    MeshPreset("sunset", "Sunset", ("#ff9966", "#ff5e62", "#ff9966", "#ffc3a0")),
    MeshPreset("holographic", "Holographic", ("#e0c3fc", "#8ec5fc", "#c2e9fb", "#ffffff")),
    MeshPreset("neon", "Neon", ("#f53844", "#42378f", "#f2f2f2", "#33e1ed")),
    MeshPreset("deep-sea", "Deep Sea", ("#2b5876", "#4e4376", "#2193b0", "#6dd5ed")),
    MeshPreset("forest", "Forest", ("#134e5e", "#71b280", "#5d9c59", "#c7e9b0")),
)


def get_preset(preset_id: str) -> MeshPreset:
    for preset in MESH_PRESETS:
        if preset.id == preset_id:
            return preset
    raise InvalidParameter(f"unknown mesh preset '{preset_id}'")


def apply_preset(points: Sequence[MeshPoint], preset: MeshPreset) -> list[MeshPoint]:
    return apply_palette(points, preset.colors)


__all__ = [
    "MIN_DENSITY",
    "MAX_DENSITY",
    "MIN_INFLUENCE",
    "MAX_INFLUENCE",
    "DEFAULT_MIRROR_TOLERANCE",
    "PaletteEntry",
    "Palettes",
    "MeshPoint",
    "MeshState",
    "new_point_id",
    "random_palette_color",
    "harmonious_colors",
    "grid_positions",
    "generate_initial_mesh",
    "update_point",
    "move_points",
    "mirror_points",
    "scale_points",
    "HARMONY_OFFSETS",
    "rotate_hue",
    "harmony_colors",
    "apply_palette",
    "apply_harmony",
    "adjust_mesh_global",
    "MeshPreset",
    "MESH_PRESETS",
    "get_preset",
    "apply_preset",
]
