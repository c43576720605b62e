from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from typing import List, Sequence

from .mixer import mix
from .spaces import Hex, canon_hex, hex_to_hsl, hex_to_rgb01, relative_luminance


@dataclass(frozen=True)
class Duotone:
    dark: Hex
    light: Hex
    name: str
    gradient: str
    css_filter: str
    id: str = field(default_factory=lambda: f"duotone-{uuid.uuid4().hex[:9]}")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "darkColor": self.dark,
            "lightColor": self.light,
            "gradient": self.gradient,
            "cssFilter": self.css_filter,
        }


def two_stop_gradient(dark: str, light: str, angle: int = 135) -> str:
    return f"linear-gradient({angle}deg, {canon_hex(dark)} 0%, {canon_hex(light)} 100%)"


def _css_filter(dark: Hex, light: Hex) -> str:
    # grayscale + sepia + hue-rotate approximation of a two-color map
    d = hex_to_rgb01(dark)
    l = hex_to_rgb01(light)
    contrast = (float(l.mean()) - float(d.mean())) * 100.0 + 100.0
    brightness = float(d.mean()) * 100.0 + 50.0
    h, s, _ = hex_to_hsl(mix(dark, light, 0.5))
    hue = 0.0 if math.isnan(h) else float(h)
    saturation = float(s) * 200.0 or 100.0
    return (
        f"grayscale(100%) sepia(100%) hue-rotate({round(hue)}deg) "
        f"saturate({round(saturation)}%) contrast({round(contrast)}%) "
        f"brightness({round(brightness)}%)"
    )


def generate_duotone(dark: str, light: str, name: str | None = None) -> Duotone:
    dark, light = canon_hex(dark), canon_hex(light)
    return Duotone(
        dark=dark,
        light=light,
        name=name or f"{dark} - {light}",
        gradient=two_stop_gradient(dark, light),
        css_filter=_css_filter(dark, light),
    )


def duotone_svg_filter(dark: str, light: str, filter_id: str) -> str:
    """SVG filter mapping luminance onto the dark→light pair."""
    d = hex_to_rgb01(dark)
    l = hex_to_rgb01(light)
    funcs = "".join(
        f'<feFunc{ch} type="table" tableValues="{d[i]:.4f} {l[i]:.4f}"/>'
        for i, ch in enumerate("RGB")
    )
    return (
        f'<filter id="{filter_id}" color-interpolation-filters="sRGB">'
        '<feColorMatrix type="matrix" values="0.33 0.33 0.33 0 0 0.33 0.33 0.33 0 0 '
        '0.33 0.33 0.33 0 0 0 0 0 1 0"/>'
        f"<feComponentTransfer>{funcs}</feComponentTransfer></filter>"
    )


def generate_duotone_palette(colors: Sequence[str]) -> List[Duotone]:
    """Every pair of `colors`, each ordered dark → light by luminance."""
    out: List[Duotone] = []
    for i in range(len(colors)):
        for j in range(i + 1, len(colors)):
            a, b = colors[i], colors[j]
            if relative_luminance(a) <= relative_luminance(b):
                out.append(generate_duotone(a, b))
            else:
                out.append(generate_duotone(b, a))
    return out


DUOTONE_PRESETS: tuple[tuple[str, Hex, Hex], ...] = (
    ("Midnight Blue", "#0a192f", "#64ffda"),
    ("Sunset", "#1a1a2e", "#f9d423"),
    ("Berry", "#2d132c", "#ee4c7c"),
    ("Ocean", "#0f2027", "#2c5364"),
    ("Forest", "#134e5e", "#71b280"),
    ("Lavender", "#2c3e50", "#9b59b6"),
    ("Coral", "#16222a", "#ff6b6b"),
    ("Mint", "#0f3443", "#34e89e"),
    ("Amber", "#3c1810", "#ffb347"),
    ("Indigo", "#1a1a40", "#4f46e5"),
    ("Rose", "#2d1f3d", "#f472b6"),
    ("Teal", "#0d3b3e", "#14b8a6"),
)


__all__ = [
    "Duotone",
    "two_stop_gradient",
    "generate_duotone",
    "duotone_svg_filter",
    "generate_duotone_palette",
    "DUOTONE_PRESETS",
]
