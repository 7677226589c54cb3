"""Frame runner — explicit-state update of the sub-solar point per frame.

Each frame takes the previous sub-solar point and a pointer sample and
returns the next sub-solar point together with the illumination for it.
No state is kept between frames other than what the caller threads
through ``FrameRunner.step``.

Notes
-----
Selection policy:

- While selection input is active, the sun snaps directly to the pointer
  (no smoothing, no velocity).
- Otherwise the previous sun is kept unchanged.
- A pointer outside the projection disk never moves the sun.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from core_engine.coordinates import LatLon, locate
from core_engine.illumination import Canvas, IlluminationEngine, IlluminationResult

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Inputs / Outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PointerSample:
    """Pointer state sampled once per frame.

    Attributes
    ----------
    x, y : float or None
        Pointer position in canvas coordinates [px]; None when the pointer
        is outside the window.
    selecting : bool
        True while the selection input (key or button) is held.
    """

    x: float | None = None
    y: float | None = None
    selecting: bool = False

    @property
    def has_position(self) -> bool:
        return self.x is not None and self.y is not None


@dataclass
class FrameResult:
    """Output of one frame.

    Attributes
    ----------
    index : int
        Zero-based frame number.
    sun : LatLon
        Sub-solar point after this frame's update; pass it to the next step.
    illumination : IlluminationResult
        Shading and marker position for ``sun``.
    """

    index: int
    sun: LatLon
    illumination: IlluminationResult


# ---------------------------------------------------------------------------
# State Update
# ---------------------------------------------------------------------------


def advance_sun(previous: LatLon, sample: PointerSample, canvas: Canvas) -> LatLon:
    """Compute the next sub-solar point from the previous one and a pointer sample.

    Parameters
    ----------
    previous : LatLon
        Sub-solar point of the previous frame.
    sample : PointerSample
        Pointer position and selection state for this frame.
    canvas : Canvas
        Canvas the pointer position refers to.

    Returns
    -------
    LatLon
        ``previous`` unless selection is active and the pointer is on the map.
    """
    if not sample.selecting or not sample.has_position:
        return previous

    point = locate(canvas.to_planar(sample.x, sample.y))
    if point is None:
        logger.debug(
            "Pointer (%.1f, %.1f) is off the map; sun unchanged", sample.x, sample.y
        )
        return previous

    return point


# ---------------------------------------------------------------------------
# Frame Runner
# ---------------------------------------------------------------------------


class FrameRunner:
    """Drives the per-frame update: pointer → sun → illumination.

    Parameters
    ----------
    engine : IlluminationEngine
        Engine used to shade each frame.
    """

    def __init__(self, engine: IlluminationEngine) -> None:
        self._engine = engine
        self._frames = 0

    @property
    def engine(self) -> IlluminationEngine:
        return self._engine

    @property
    def frame_count(self) -> int:
        return self._frames

    def step(self, sun: LatLon, sample: PointerSample | None = None) -> FrameResult:
        """Run one frame.

        Parameters
        ----------
        sun : LatLon
            Sub-solar point carried over from the previous frame.
        sample : PointerSample, optional
            Pointer input for this frame. None means no input.

        Returns
        -------
        FrameResult
            Next sub-solar point and its illumination.
        """
        if sample is None:
            sample = PointerSample()

        next_sun = advance_sun(sun, sample, self._engine.canvas)
        if next_sun != sun:
            logger.debug(
                "Frame %d: sun moved to (%.4f°, %.4f°)",
                self._frames, next_sun.lat, next_sun.lon,
            )

        result = FrameResult(
            index=self._frames,
            sun=next_sun,
            illumination=self._engine.compute(next_sun),
        )
        self._frames += 1
        return result
