"""Closed enumerations for every string-valued mode the core accepts.

Each enum parses user input with :meth:`Mode.parse`, so an unknown name is
rejected at the boundary instead of leaking into a dispatch table.
"""

from __future__ import annotations

from enum import Enum

from .errors import UnsupportedMode


class Mode(str, Enum):
    @classmethod
    def parse(cls, value: "str | Mode"):
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        for member in cls:
            if member.value == key:
                return member
        supported = ", ".join(m.value for m in cls)
        raise UnsupportedMode(f"unknown {cls.__name__} '{value}' (supported: {supported})")

    def __str__(self) -> str:
        return self.value


class ColorSpace(Mode):
    RGB = "rgb"
    LINEAR = "linear"
    HSL = "hsl"
    LAB = "lab"
    LCH = "lch"
    OKLAB = "oklab"
    OKLCH = "oklch"


class Easing(Mode):
    LINEAR = "linear"
    EASE_IN = "ease-in"
    EASE_OUT = "ease-out"
    EASE_IN_OUT = "ease-in-out"


class BlendMode(Mode):
    NORMAL = "normal"
    MULTIPLY = "multiply"
    SCREEN = "screen"
    OVERLAY = "overlay"
    SOFT_LIGHT = "soft-light"


class GrainType(Mode):
    NOISE = "noise"
    FIBER = "fiber"
    PAPER = "paper"
    FILM = "film"
    CANVAS = "canvas"


class HarmonyKind(Mode):
    ANALOGOUS = "analogous"
    TRIADIC = "triadic"
    SPLIT_COMPLEMENTARY = "split-complementary"


class MirrorMode(Mode):
    NONE = "none"
    X = "x"
    Y = "y"
    BOTH = "both"


class AnimationEasing(Mode):
    SMOOTH = "smooth"
    BOUNCY = "bouncy"
    LINEAR = "linear"


__all__ = [
    "Mode",
    "ColorSpace",
    "Easing",
    "BlendMode",
    "GrainType",
    "HarmonyKind",
    "MirrorMode",
    "AnimationEasing",
]
