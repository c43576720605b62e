from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Mapping

from .errors import InvalidParameter
from .modes import AnimationEasing, BlendMode, GrainType

_ALIASES = {
    "grainType": "grain_type",
    "blendMode": "blend_mode",
    "animationSpeed": "animation_speed",
    "animationEasing": "animation_easing",
}


def _number(name: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidParameter(f"{name} must be a number, got {value!r}") from None


@dataclass(frozen=True)
class EffectParameters:
    """Session-wide render settings shared by every point of the mesh."""

    influence: float = 50.0
    vignette: float = 0.0
    grain: float = 0.0
    grain_type: GrainType = GrainType.NOISE
    blend_mode: BlendMode = BlendMode.NORMAL
    animation_speed: float = 1.0
    animation_easing: AnimationEasing = AnimationEasing.SMOOTH
    magnetism: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "grain_type", GrainType.parse(self.grain_type))
        object.__setattr__(self, "blend_mode", BlendMode.parse(self.blend_mode))
        object.__setattr__(self, "animation_easing", AnimationEasing.parse(self.animation_easing))
        for name in ("influence", "vignette", "grain"):
            value = _number(name, getattr(self, name))
            if not 0.0 <= value <= 100.0:
                raise InvalidParameter(f"{name} must be within [0, 100], got {value}")
            object.__setattr__(self, name, value)
        speed = _number("animation_speed", self.animation_speed)
        if not 0.0 <= speed < float("inf"):
            raise InvalidParameter(f"animation_speed must be a non-negative finite number, got {speed}")
        object.__setattr__(self, "animation_speed", speed)

    def update(self, **changes: Any) -> "EffectParameters":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        out = asdict(self)
        for key in ("grain_type", "blend_mode", "animation_easing"):
            out[key] = out[key].value
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EffectParameters":
        """Accepts snake_case field names or the camelCase keys used in payloads."""
        renamed = {_ALIASES.get(k, k): v for k, v in data.items()}
        known = {k: v for k, v in renamed.items() if k in cls.__dataclass_fields__}
        return cls(**known)


__all__ = ["EffectParameters"]
