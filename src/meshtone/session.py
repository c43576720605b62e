from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Mapping, Optional, Sequence

import numpy as np

from .animation import AnimationDriver, AnimationLoop, Pointer
from .effects import EffectParameters
from .errors import InvalidParameter
from .export import ExportChannel, Payload
from .imaging import extract_colors_from_image
from .mesh import (
    DEFAULT_MIRROR_TOLERANCE,
    MAX_DENSITY,
    MIN_DENSITY,
    MeshPoint,
    MeshState,
    Palettes,
    adjust_mesh_global,
    apply_harmony,
    apply_palette,
    apply_preset,
    generate_initial_mesh,
    get_preset,
    harmonious_colors,
    mirror_points,
    move_points,
    scale_points,
    update_point,
)
from .modes import HarmonyKind, MirrorMode
from .render import GradientDescriptor, build_descriptor, css_element, render_png_async

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToneAdjustment:
    hue: float = 0.0
    saturation: float = 100.0
    lightness: float = 100.0


@dataclass
class _DragGesture:
    point_id: str
    origins: dict[str, tuple[float, float]]
    moved: bool = False


class MeshSession:
    """Single owner of the mesh.

    Every edit swaps in a new immutable MeshState and records the previous
    one for undo. Tonal adjustments and animation never touch stored colors
    or positions; they only shape what ``displayed_points`` and the
    animation frames show.
    """

    def __init__(
        self,
        palettes: Palettes,
        density: int = 3,
        params: Optional[EffectParameters] = None,
        *,
        mirror_mode: "MirrorMode | str" = MirrorMode.NONE,
        mirror_tolerance: float = DEFAULT_MIRROR_TOLERANCE,
        rng: Optional[np.random.Generator] = None,
        history_limit: int = 50,
    ) -> None:
        self._palettes = palettes
        self._rng = rng or np.random.default_rng()
        self.params = params or EffectParameters()
        self.mirror_mode = MirrorMode.parse(mirror_mode)
        self.mirror_tolerance = float(mirror_tolerance)
        self.adjustment = ToneAdjustment()
        self._undo: Deque[MeshState] = deque(maxlen=history_limit)
        self._redo: list[MeshState] = []
        self._drag: Optional[_DragGesture] = None
        self._state = self._fresh_state(density)

    # ---- state ----

    @property
    def state(self) -> MeshState:
        return self._state

    @property
    def points(self) -> tuple[MeshPoint, ...]:
        return self._state.points

    @property
    def density(self) -> int:
        return self._state.density

    @property
    def displayed_points(self) -> list[MeshPoint]:
        a = self.adjustment
        return adjust_mesh_global(self.points, a.hue, a.saturation, a.lightness)

    @property
    def dragging(self) -> bool:
        return self._drag is not None

    def _fresh_state(self, density: int) -> MeshState:
        if not MIN_DENSITY <= int(density) <= MAX_DENSITY:
            raise InvalidParameter(f"density must be within [{MIN_DENSITY}, {MAX_DENSITY}], got {density}")
        d = int(density)
        return MeshState(tuple(generate_initial_mesh(self._palettes, d, self._rng)), d)

    def _commit(self, points: Sequence[MeshPoint], *, record: bool = True) -> MeshState:
        if record:
            self._undo.append(self._state)
            self._redo.clear()
        self._state = self._state.with_points(points)
        return self._state

    def _mirrored(self, points: Sequence[MeshPoint], source_id: str) -> list[MeshPoint]:
        return mirror_points(points, self.mirror_mode, source_id, self.mirror_tolerance)

    # ---- whole-mesh edits ----

    def regenerate(self, density: Optional[int] = None) -> MeshState:
        """Replace every point with a fresh grid (no positions carry over)."""
        state = self._fresh_state(self.density if density is None else density)
        self._undo.append(self._state)
        self._redo.clear()
        self._state = state
        log.debug("mesh regenerated at density %d", state.density)
        return state

    def scale(self, factor: float) -> MeshState:
        return self._commit(scale_points(self.points, factor))

    def apply_harmony(self, base: str, kind: "HarmonyKind | str") -> MeshState:
        return self._commit(apply_harmony(self.points, base, kind))

    def apply_palette_harmony(self) -> MeshState:
        return self._commit(apply_palette(self.points, harmonious_colors(self._palettes, self._rng)))

    def apply_preset(self, preset_id: str) -> MeshState:
        return self._commit(apply_preset(self.points, get_preset(preset_id)))

    def import_colors(self, colors: Sequence[str]) -> MeshState:
        return self._commit(apply_palette(self.points, colors))

    def import_image(self, data: bytes) -> MeshState:
        colors = extract_colors_from_image(data, self.density, self.density)
        return self.import_colors(colors)

    # ---- single-point edits ----

    def set_color(self, point_id: str, color: str) -> MeshState:
        points = update_point(self.points, point_id, color=color)
        return self._commit(self._mirrored(points, point_id))

    def set_influence(self, point_id: str, influence: Optional[float]) -> MeshState:
        return self._commit(update_point(self.points, point_id, influence=influence))

    def move_point(self, point_id: str, x: float, y: float) -> MeshState:
        points = update_point(self.points, point_id, x=x, y=y)
        return self._commit(self._mirrored(points, point_id))

    # ---- drag gesture ----

    def begin_drag(self, point_id: str, selection: Sequence[str] = ()) -> None:
        """Start dragging `point_id`, carrying every id in `selection` along.

        History is recorded on the first ``drag_to``, so a click without
        movement leaves no undo entry.
        """
        ids = set(selection) | {point_id}
        origins = {p.id: (p.x, p.y) for p in self.points if p.id in ids}
        if point_id not in origins:
            return
        self._drag = _DragGesture(point_id, origins)

    def drag_to(self, x: float, y: float) -> MeshState:
        if self._drag is None:
            return self._state
        ox, oy = self._drag.origins[self._drag.point_id]
        cx, cy = min(100.0, max(0.0, x)), min(100.0, max(0.0, y))
        points = move_points(self.points, self._drag.origins, cx - ox, cy - oy)
        first = not self._drag.moved
        self._drag.moved = True
        return self._commit(self._mirrored(points, self._drag.point_id), record=first)

    def end_drag(self) -> None:
        self._drag = None

    # ---- history ----

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(self._state)
        self._state = self._undo.pop()
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append(self._state)
        self._state = self._redo.pop()
        return True

    # ---- parameters ----

    def set_adjustment(self, hue: float = 0.0, saturation: float = 100.0, lightness: float = 100.0) -> None:
        self.adjustment = ToneAdjustment(hue, saturation, lightness)

    def update_params(self, **changes) -> EffectParameters:
        self.params = self.params.update(**changes)
        return self.params

    # ---- output ----

    def descriptor(self) -> GradientDescriptor:
        return build_descriptor(self.displayed_points, self.params.influence, self.params.vignette)

    def css(self) -> dict[str, str]:
        return css_element(self.displayed_points, self.params)

    async def render_png(self, width: int, height: int, *, seed: int = 0) -> bytes:
        return await render_png_async(self.displayed_points, self.params, width, height, seed=seed)

    def export(self, channel: ExportChannel, width: int = 800, height: int = 600) -> Payload:
        return channel.mesh(self.displayed_points, self.params, width, height)

    async def export_image(
        self, channel: ExportChannel, width: int = 800, height: int = 600, *, seed: int = 0
    ) -> Payload:
        return await channel.mesh_image(self.displayed_points, self.params, width, height, seed=seed)

    def frame_source(self) -> tuple[list[MeshPoint], bool]:
        return self.displayed_points, self.dragging

    def animation_loop(
        self,
        on_frame: Callable[[list], None],
        *,
        pointer: Callable[[], Optional[Pointer]] = lambda: None,
        interval: Optional[float] = None,
    ) -> AnimationLoop:
        """A loop over this session; speed, easing and magnetism follow ``params`` every frame."""
        driver = AnimationDriver()

        def sync() -> None:
            params = self.params
            driver.speed = params.animation_speed
            driver.easing = params.animation_easing
            driver.magnetism = params.magnetism

        def source() -> tuple[list[MeshPoint], bool]:
            sync()
            return self.frame_source()

        sync()
        kwargs = {} if interval is None else {"interval": interval}
        return AnimationLoop(driver, source, on_frame, pointer=pointer, **kwargs)

    @classmethod
    def from_points(
        cls,
        points: Sequence[Mapping],
        params: Optional[EffectParameters] = None,
        *,
        mirror_mode: "MirrorMode | str" = MirrorMode.NONE,
    ) -> "MeshSession":
        """Rebuild a session around an existing point list (e.g. from a request)."""
        parsed = tuple(MeshPoint.from_dict(p) for p in points)
        if not parsed:
            raise InvalidParameter("mesh has zero points")
        side = int(round(len(parsed) ** 0.5))
        session = cls({}, max(MIN_DENSITY, min(MAX_DENSITY, side)), params, mirror_mode=mirror_mode)
        session._state = session._state.with_points(parsed)
        return session

    def to_dict(self) -> dict:
        return {
            "density": self.density,
            "points": [p.to_dict() for p in self.points],
            "params": self.params.to_dict(),
            "mirrorMode": self.mirror_mode.value,
        }


__all__ = ["ToneAdjustment", "MeshSession"]
