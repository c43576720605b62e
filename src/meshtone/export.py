"""Export payloads handed to the host application.

Builders are pure functions of (state, parameters) -> dict. ``ExportChannel``
is passed explicitly to whatever produces artifacts and forwards each payload
to a sink callable; nothing here is discovered through global events.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from .duotone import Duotone
from .effects import EffectParameters
from .errors import InvalidParameter
from .mesh import MeshPoint
from .render import render_png_async
from .spaces import canon_hex

log = logging.getLogger(__name__)

Payload = dict[str, Any]
Sink = Callable[[Payload], None]

DEFAULT_EXPORT_WIDTH = 800
DEFAULT_EXPORT_HEIGHT = 600


def _colors(colors: Sequence[str]) -> list[str]:
    if not colors:
        raise InvalidParameter("nothing to export: empty color list")
    return [canon_hex(c) for c in colors]


def color_ramp_payload(colors: Sequence[str], name: str = "Color Ramp") -> Payload:
    return {"type": "create-color-ramp", "colors": _colors(colors), "name": name}


def interpolation_payload(colors: Sequence[str], space: str) -> Payload:
    return {
        "type": "create-interpolation-palette",
        "colors": _colors(colors),
        "name": f"Interpolation ({space})",
    }


def mix_payload(colors: Sequence[str], name: str = "Mix") -> Payload:
    return {"type": "create-mix-palette", "colors": _colors(colors), "name": name}


def duotone_payload(duotone: Duotone) -> Payload:
    return {"type": "create-duotone-style", "duotone": duotone.to_dict()}


def mesh_payload(
    points: Sequence[MeshPoint],
    params: EffectParameters,
    width: int = DEFAULT_EXPORT_WIDTH,
    height: int = DEFAULT_EXPORT_HEIGHT,
) -> Payload:
    """Mesh bundle for hosts that rebuild the gradient themselves."""
    if not points:
        raise InvalidParameter("nothing to export: mesh has zero points")
    return {
        "type": "create-mesh-gradient",
        "points": [p.to_dict() for p in points],
        "width": int(width),
        "height": int(height),
        "influence": params.influence,
        "vignette": params.vignette,
        "grain": params.grain,
        "grainType": params.grain_type.value,
        "blendMode": params.blend_mode.value,
    }


async def mesh_image_payload(
    points: Sequence[MeshPoint],
    params: EffectParameters,
    width: int = DEFAULT_EXPORT_WIDTH,
    height: int = DEFAULT_EXPORT_HEIGHT,
    *,
    seed: int = 0,
) -> Payload:
    """Mesh bundle plus the rendered PNG; raises RasterExportError on failure."""
    payload = mesh_payload(points, params, width, height)
    payload["type"] = "create-mesh-gradient-image"
    payload["rasterBytes"] = await render_png_async(points, params, width, height, seed=seed)
    return payload


class ExportChannel:
    """Explicit command channel between generators and the host."""

    def __init__(self, sink: Sink) -> None:
        self._sink = sink
        self.sent = 0

    def send(self, payload: Payload) -> Payload:
        log.info("export %s", payload.get("type"))
        self._sink(payload)
        self.sent += 1
        return payload

    def color_ramp(self, colors: Sequence[str], name: str = "Color Ramp") -> Payload:
        return self.send(color_ramp_payload(colors, name))

    def interpolation(self, colors: Sequence[str], space: str) -> Payload:
        return self.send(interpolation_payload(colors, space))

    def mix(self, colors: Sequence[str], name: str = "Mix") -> Payload:
        return self.send(mix_payload(colors, name))

    def duotone(self, duotone: Duotone) -> Payload:
        return self.send(duotone_payload(duotone))

    def mesh(
        self,
        points: Sequence[MeshPoint],
        params: EffectParameters,
        width: int = DEFAULT_EXPORT_WIDTH,
        height: int = DEFAULT_EXPORT_HEIGHT,
    ) -> Payload:
        return self.send(mesh_payload(points, params, width, height))

    async def mesh_image(
        self,
        points: Sequence[MeshPoint],
        params: EffectParameters,
        width: int = DEFAULT_EXPORT_WIDTH,
        height: int = DEFAULT_EXPORT_HEIGHT,
        *,
        seed: int = 0,
    ) -> Payload:
        # Only a complete payload ever reaches the sink.
        payload = await mesh_image_payload(points, params, width, height, seed=seed)
        return self.send(payload)


__all__ = [
    "Payload",
    "color_ramp_payload",
    "interpolation_payload",
    "mix_payload",
    "duotone_payload",
    "mesh_payload",
    "mesh_image_payload",
    "ExportChannel",
]
