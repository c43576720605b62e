"""Frame-driven mesh animation.

``animate_points`` is a pure function of (points, elapsed time, easing,
pointer). ``AnimationDriver`` holds the plain state of a running animation
and ``AnimationLoop`` steps it once per frame on an asyncio event loop,
rescheduling itself until stopped. Neither ever edits the stored mesh; every
frame yields a fresh, transient copy for the renderer.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import replace
from typing import Callable, Optional, Sequence, Tuple

from .mesh import MeshPoint
from .modes import AnimationEasing

log = logging.getLogger(__name__)

PHASE_STEP = 1.5  # radians between consecutive points
CAPTURE_RADIUS = 40.0
PULL_DIVISOR = 400.0
FRAME_INTERVAL = 1.0 / 60.0

Pointer = Tuple[float, float]


def oscillation(elapsed: float, index: int, easing: "AnimationEasing | str") -> Tuple[float, float]:
    """Positional offset (dx, dy) of point `index` after `elapsed` seconds."""
    easing = AnimationEasing.parse(easing)
    phase = index * PHASE_STEP
    t = elapsed
    if easing is AnimationEasing.SMOOTH:
        return math.sin(t + phase) * 3.0, math.cos(t * 0.8 + phase) * 3.0
    if easing is AnimationEasing.BOUNCY:
        return (
            math.sin(t * 1.5 + phase) * math.sin(t * 3.0) * 5.0,
            math.cos(t * 2.0 + phase) * math.sin(t * 2.5) * 5.0,
        )
    # linear: slow circular drift
    return (
        math.sin(t * 0.5 + phase) * 2.0,
        math.sin(t * 0.5 + phase + math.pi / 2.0) * 2.0,
    )


def attract(x: float, y: float, pointer: Pointer) -> Tuple[float, float]:
    """Pull (x, y) toward the pointer when it is inside the capture radius."""
    px, py = pointer
    dist = math.hypot(x - px, y - py)
    if dist >= CAPTURE_RADIUS:
        return x, y
    pull = (CAPTURE_RADIUS - dist) / PULL_DIVISOR
    return x + (px - x) * pull, y + (py - y) * pull


def animate_points(
    points: Sequence[MeshPoint],
    elapsed: float,
    easing: "AnimationEasing | str" = AnimationEasing.SMOOTH,
    *,
    pointer: Optional[Pointer] = None,
    magnetism: bool = False,
) -> list[MeshPoint]:
    easing = AnimationEasing.parse(easing)
    out = []
    for i, p in enumerate(points):
        dx, dy = oscillation(elapsed, i, easing)
        x = min(100.0, max(0.0, p.x + dx))
        y = min(100.0, max(0.0, p.y + dy))
        if magnetism and pointer is not None:
            x, y = attract(x, y, pointer)
        out.append(replace(p, x=x, y=y))
    return out


class AnimationDriver:
    """Plain animation state: start time, speed, easing and magnetism."""

    def __init__(
        self,
        speed: float = 1.0,
        easing: "AnimationEasing | str" = AnimationEasing.SMOOTH,
        magnetism: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.speed = float(speed)
        self.easing = AnimationEasing.parse(easing)
        self.magnetism = magnetism
        self._clock = clock
        self._start: Optional[float] = None

    @property
    def active(self) -> bool:
        return self._start is not None

    def start(self, now: Optional[float] = None) -> None:
        self._start = self._clock() if now is None else now

    def stop(self) -> None:
        self._start = None

    def elapsed(self, now: Optional[float] = None) -> float:
        if self._start is None:
            return 0.0
        now = self._clock() if now is None else now
        return (now - self._start) * self.speed

    def frame(
        self,
        points: Sequence[MeshPoint],
        *,
        now: Optional[float] = None,
        pointer: Optional[Pointer] = None,
        dragging: bool = False,
    ) -> list[MeshPoint]:
        """Points to render this frame.

        While inactive or while a drag is in progress the live positions are
        returned as they are.
        """
        if not self.active or dragging:
            return list(points)
        return animate_points(
            points,
            self.elapsed(now),
            self.easing,
            pointer=pointer,
            magnetism=self.magnetism,
        )


FrameSource = Callable[[], Tuple[Sequence[MeshPoint], bool]]
FrameSink = Callable[[list], None]


class AnimationLoop:
    """Self-rescheduling per-frame callback.

    Each tick reads ``source()`` → (points, dragging), asks the driver for
    the frame and hands it to ``on_frame``. ``stop()`` clears the active
    flag and cancels the pending tick, so no frame fires after it returns.
    A frame that raises stops the loop and is kept in ``error``.
    """

    def __init__(
        self,
        driver: AnimationDriver,
        source: FrameSource,
        on_frame: FrameSink,
        *,
        pointer: Callable[[], Optional[Pointer]] = lambda: None,
        interval: float = FRAME_INTERVAL,
    ) -> None:
        self.driver = driver
        self._source = source
        self._on_frame = on_frame
        self._pointer = pointer
        self._interval = interval
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._handle: Optional[asyncio.Handle] = None
        self._active = False
        self.frames = 0
        self.error: Optional[Exception] = None

    @property
    def active(self) -> bool:
        return self._active

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        if self._active:
            return
        self._loop = loop or asyncio.get_running_loop()
        self.error = None
        self._active = True
        self.driver.start()
        log.debug("animation started (speed=%s, easing=%s)", self.driver.speed, self.driver.easing.value)
        self._handle = self._loop.call_soon(self._tick)

    def stop(self) -> None:
        self._active = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self.driver.stop()
        log.debug("animation stopped after %d frames", self.frames)

    def _tick(self) -> None:
        if not self._active:
            return
        try:
            points, dragging = self._source()
            frame = self.driver.frame(points, pointer=self._pointer(), dragging=dragging)
            self.frames += 1
            self._on_frame(frame)
        except Exception as exc:
            log.exception("animation frame %d failed; stopping", self.frames)
            self.error = exc
            self.stop()
            return
        if self._active and self._loop is not None:
            self._handle = self._loop.call_later(self._interval, self._tick)


__all__ = [
    "PHASE_STEP",
    "CAPTURE_RADIUS",
    "Pointer",
    "oscillation",
    "attract",
    "animate_points",
    "AnimationDriver",
    "AnimationLoop",
]
