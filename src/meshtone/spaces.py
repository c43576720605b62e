# spaces.py – hex ⇄ working color spaces
#   - Oklab: IEC 61966-2-1 companding, M1 (linear sRGB→LMS), cube root, M2
#   - HSL / CIE LAB / CIE LCh through ColorAide
#   - every hex produced here is clipped per channel, never gamut mapped

from __future__ import annotations

import math
import string
from typing import Callable, Mapping

import numpy as np
from coloraide import Color
from colour.models import eotf_inverse_sRGB, eotf_sRGB

from .errors import InvalidColorFormat
from .modes import ColorSpace

Hex = str

# --- Oklab matrices (Björn Ottosson) ------------------------------------------
_M1 = np.array(
    [
        [0.4122214708, 0.5363325363, 0.0514459929],
        [0.2119034982, 0.6806995451, 0.1073969566],
        [0.0883024619, 0.2817188376, 0.6299787005],
    ],
    dtype=np.float64,
)
_M2 = np.array(
    [
        [0.2104542553, 0.7936177850, -0.0040720468],
        [1.9779984951, -2.4285922050, 0.4505937099],
        [0.0259040371, 0.7827717662, -0.8086757660],
    ],
    dtype=np.float64,
)
_M1_INV = np.linalg.inv(_M1)
_M2_INV = np.linalg.inv(_M2)


# --- hex boundary -------------------------------------------------------------
def canon_hex(s: str) -> Hex:
    """Normalize to '#rrggbb'; accept 3- or 6-digit hex with optional '#'."""
    if not isinstance(s, str):
        raise InvalidColorFormat(f"color must be a hex string, got {type(s).__name__}")
    raw = s.strip()
    if raw.startswith("#"):
        raw = raw[1:]
    if len(raw) == 3 and all(c in string.hexdigits for c in raw):
        raw = "".join(ch * 2 for ch in raw)
    if len(raw) != 6 or not all(c in string.hexdigits for c in raw):
        raise InvalidColorFormat(f"invalid hex color '{s}': expected 3 or 6 hex digits")
    return "#" + raw.lower()


def is_valid_hex(s: str) -> bool:
    try:
        canon_hex(s)
    except InvalidColorFormat:
        return False
    return True


def hex_to_rgb01(hex_str: str) -> np.ndarray:
    h = canon_hex(hex_str)[1:]
    return np.array([int(h[i : i + 2], 16) / 255.0 for i in (0, 2, 4)], dtype=np.float64)


def hex_to_rgb255(hex_str: str) -> tuple[int, int, int]:
    h = canon_hex(hex_str)[1:]
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def rgb01_to_hex(rgb) -> Hex:
    """Gamma-encoded sRGB in [0,1] → '#rrggbb' (round to nearest, clip)."""
    arr = np.asarray(rgb, dtype=np.float64)
    arr = np.nan_to_num(arr, nan=0.0)
    u8 = np.round(np.clip(arr, 0.0, 1.0) * 255.0).astype(np.uint8)
    return f"#{u8[0]:02x}{u8[1]:02x}{u8[2]:02x}"


# --- sRGB transfer ------------------------------------------------------------
def srgb_to_linear(rgb) -> np.ndarray:
    return np.asarray(eotf_sRGB(np.asarray(rgb, dtype=np.float64)), dtype=np.float64)


def linear_to_srgb(rgb_lin) -> np.ndarray:
    return np.asarray(eotf_inverse_sRGB(np.asarray(rgb_lin, dtype=np.float64)), dtype=np.float64)


# --- Oklab / OkLCh ------------------------------------------------------------
def srgb_to_oklab(rgb) -> np.ndarray:
    lms = _M1 @ srgb_to_linear(rgb)
    return _M2 @ np.cbrt(lms)


def oklab_to_srgb(lab) -> np.ndarray:
    lms = (_M2_INV @ np.asarray(lab, dtype=np.float64)) ** 3
    return linear_to_srgb(_M1_INV @ lms)


def hex_to_oklab(hex_str: str) -> np.ndarray:
    return srgb_to_oklab(hex_to_rgb01(hex_str))


def oklab_to_hex(lab) -> Hex:
    return rgb01_to_hex(oklab_to_srgb(lab))


def oklab_to_oklch(lab) -> np.ndarray:
    L, a, b = (float(v) for v in lab)
    c = math.hypot(a, b)
    h = math.degrees(math.atan2(b, a)) % 360.0 if c > 1e-7 else math.nan
    return np.array([L, c, h], dtype=np.float64)


def oklch_to_oklab(lch) -> np.ndarray:
    L, c, h = (float(v) for v in lch)
    if math.isnan(h):
        return np.array([L, 0.0, 0.0], dtype=np.float64)
    rad = math.radians(h)
    return np.array([L, c * math.cos(rad), c * math.sin(rad)], dtype=np.float64)


# --- ColorAide-backed spaces --------------------------------------------------
def _to_coloraide(hex_str: str, space: str) -> np.ndarray:
    coords = Color(canon_hex(hex_str)).convert(space).coords()
    return np.array([float(v) for v in coords], dtype=np.float64)


def _from_coloraide(coords, space: str) -> Hex:
    vals = [float(v) for v in coords]
    rgb = Color(space, vals).convert("srgb").coords()
    return rgb01_to_hex([float(v) for v in rgb])


def hex_to_hsl(hex_str: str) -> np.ndarray:
    """'#rrggbb' → [h (deg, NaN if achromatic), s (0–1), l (0–1)]."""
    return _to_coloraide(hex_str, "hsl")


def hsl_to_hex(hsl) -> Hex:
    h, s, l = (float(v) for v in hsl)
    return _from_coloraide([0.0 if math.isnan(h) else h % 360.0, s, l], "hsl")


def hex_to_lab(hex_str: str) -> np.ndarray:
    return _to_coloraide(hex_str, "lab")


def lab_to_hex(lab) -> Hex:
    return _from_coloraide(lab, "lab")


def hex_to_lch(hex_str: str) -> np.ndarray:
    return _to_coloraide(hex_str, "lch")


def lch_to_hex(lch) -> Hex:
    L, c, h = (float(v) for v in lch)
    return _from_coloraide([L, c, 0.0 if math.isnan(h) else h % 360.0], "lch")


def relative_luminance(hex_str: str) -> float:
    return float(Color(canon_hex(hex_str)).luminance())


# --- registry -----------------------------------------------------------------
_FORWARD: Mapping[ColorSpace, Callable[[str], np.ndarray]] = {
    ColorSpace.RGB: hex_to_rgb01,
    ColorSpace.LINEAR: lambda h: srgb_to_linear(hex_to_rgb01(h)),
    ColorSpace.HSL: hex_to_hsl,
    ColorSpace.LAB: hex_to_lab,
    ColorSpace.LCH: hex_to_lch,
    ColorSpace.OKLAB: hex_to_oklab,
    ColorSpace.OKLCH: lambda h: oklab_to_oklch(hex_to_oklab(h)),
}

_INVERSE: Mapping[ColorSpace, Callable[[np.ndarray], Hex]] = {
    ColorSpace.RGB: rgb01_to_hex,
    ColorSpace.LINEAR: lambda c: rgb01_to_hex(linear_to_srgb(np.clip(c, 0.0, 1.0))),
    ColorSpace.HSL: hsl_to_hex,
    ColorSpace.LAB: lab_to_hex,
    ColorSpace.LCH: lch_to_hex,
    ColorSpace.OKLAB: oklab_to_hex,
    ColorSpace.OKLCH: lambda c: oklab_to_hex(oklch_to_oklab(c)),
}

# index of the hue channel (degrees) for polar spaces
HUE_CHANNEL: Mapping[ColorSpace, int] = {
    ColorSpace.HSL: 0,
    ColorSpace.LCH: 2,
    ColorSpace.OKLCH: 2,
}


def to_space(hex_str: str, space: "ColorSpace | str") -> np.ndarray:
    return _FORWARD[ColorSpace.parse(space)](hex_str)


def from_space(coords, space: "ColorSpace | str") -> Hex:
    return _INVERSE[ColorSpace.parse(space)](np.asarray(coords, dtype=np.float64))


__all__ = [
    "Hex",
    "canon_hex",
    "is_valid_hex",
    "hex_to_rgb01",
    "hex_to_rgb255",
    "rgb01_to_hex",
    "srgb_to_linear",
    "linear_to_srgb",
    "srgb_to_oklab",
    "oklab_to_srgb",
    "hex_to_oklab",
    "oklab_to_hex",
    "oklab_to_oklch",
    "oklch_to_oklab",
    "hex_to_hsl",
    "hsl_to_hex",
    "hex_to_lab",
    "lab_to_hex",
    "hex_to_lch",
    "lch_to_hex",
    "relative_luminance",
    "HUE_CHANNEL",
    "to_space",
    "from_space",
]
