"""Illumination engine — day/night shading of the projected canvas.

This module connects the canvas geometry, the coordinate model and the
parallel classification kernel to produce, for a given sub-solar point,
the set of shaded (night) pixels and the canvas position of the sun
marker.

Pipeline
--------
1. Receive the sub-solar point as a ``LatLon``.
2. Dispatch the whole canvas to ``classify_canvas()`` (Numba, parallel).
3. Project the sub-solar point back to canvas coordinates for the marker.
4. Return an ``IlluminationResult`` with the class grid and statistics.

Notes
-----
A pixel is lit when its great-circle distance from the sub-solar point is
below a quarter of the circumference, i.e. inside the hemisphere centred
on the sun. No axial tilt, refraction or twilight band is modelled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from core_engine.constants import ViewerSettings
from core_engine.coordinates import LatLon, PlanarPoint
from core_engine.terminator import PixelClass, classify_canvas, classify_point

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Canvas Geometry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Canvas:
    """Pixel canvas holding the projection disk.

    The disk centre is the canvas centre and the disk radius is half the
    canvas width. Canvas y grows downward, like pixel rows.

    Attributes
    ----------
    width, height : int
        Canvas size [px].
    """

    width: int
    height: int

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2.0, self.height / 2.0

    @property
    def half_width(self) -> float:
        """Pixels per projection unit."""
        return self.width / 2.0

    def to_planar(self, x: float, y: float) -> PlanarPoint:
        """Canvas coordinates [px] → normalised projection coordinates."""
        cx, cy = self.center
        return PlanarPoint((x - cx) / self.half_width, (y - cy) / self.half_width)

    def to_canvas(self, planar: PlanarPoint) -> tuple[float, float]:
        """Normalised projection coordinates → canvas coordinates [px]."""
        cx, cy = self.center
        return cx + self.half_width * planar.x, cy + self.half_width * planar.y

    def grid_shape(self, step: int = 1) -> tuple[int, int]:
        """Shape (rows, cols) of the sample grid for a given stride."""
        return -(-self.height // step), -(-self.width // step)

    @classmethod
    def from_config(cls, config: ViewerSettings) -> Canvas:
        return cls(config.canvas.width_px, config.canvas.height_px)


# ---------------------------------------------------------------------------
# Result Container
# ---------------------------------------------------------------------------


@dataclass
class IlluminationResult:
    """Result of one illumination pass.

    Attributes
    ----------
    classes : np.ndarray
        ``PixelClass`` code per sample pixel, int8. Shape: (rows, cols),
        sample (row, col) sits at canvas pixel (col·step, row·step).
    sun : LatLon
        Sub-solar point used for this pass.
    marker : tuple[float, float]
        Canvas position [px] of the sub-solar point.
    step : int
        Sampling stride [px].
    stats : dict[str, float]
        Summary statistics: night / day fraction of the map, off-map
        fraction of the canvas.
    """

    classes: np.ndarray
    sun: LatLon
    marker: tuple[float, float]
    step: int
    stats: dict[str, float]

    @property
    def night_mask(self) -> np.ndarray:
        """Boolean grid of shaded samples."""
        return self.classes == PixelClass.NIGHT

    @property
    def off_map_mask(self) -> np.ndarray:
        return self.classes == PixelClass.OFF_MAP

    def shaded_pixels(self) -> np.ndarray:
        """Canvas (x, y) coordinates of every shaded sample. Shape: (N, 2)."""
        rows, cols = np.nonzero(self.night_mask)
        return np.column_stack((cols * self.step, rows * self.step))


# ---------------------------------------------------------------------------
# Illumination Engine
# ---------------------------------------------------------------------------


class IlluminationEngine:
    """Computes the night-side shading of the canvas for a sub-solar point.

    Parameters
    ----------
    canvas : Canvas
        Canvas holding the projection disk.
    radius_km : float
        Sphere radius [km].
    terminator_distance_km : float
        Great-circle distance from the sub-solar point at which night
        begins [km].
    step : int
        Sampling stride [px].
    """

    def __init__(
        self,
        canvas: Canvas,
        radius_km: float = 6371.0,
        terminator_distance_km: float = 40075.0 / 4.0,
        step: int = 1,
    ) -> None:
        if step < 1:
            raise ValueError(f"step must be >= 1, got {step}")

        self._canvas = canvas
        self._radius_km = float(radius_km)
        self._terminator_distance_km = float(terminator_distance_km)
        self._step = int(step)

        rows, cols = canvas.grid_shape(self._step)
        logger.info(
            "IlluminationEngine initialized: canvas=%dx%d, samples=%dx%d, "
            "R=%.1f km, terminator=%.2f km",
            canvas.width,
            canvas.height,
            cols,
            rows,
            self._radius_km,
            self._terminator_distance_km,
        )

    @classmethod
    def from_config(cls, config: ViewerSettings) -> IlluminationEngine:
        return cls(
            canvas=Canvas.from_config(config),
            radius_km=config.earth.radius_km,
            terminator_distance_km=config.earth.terminator_distance_km,
            step=config.illumination.step_px,
        )

    @property
    def canvas(self) -> Canvas:
        return self._canvas

    @property
    def step(self) -> int:
        return self._step

    def compute(self, sun: LatLon) -> IlluminationResult:
        """Classify every sample pixel for the given sub-solar point.

        Parameters
        ----------
        sun : LatLon
            Point at which the sun is directly overhead.

        Returns
        -------
        IlluminationResult
            Class grid, marker position and statistics.
        """
        cx, cy = self._canvas.center

        classes = classify_canvas(
            self._canvas.width,
            self._canvas.height,
            self._step,
            cx,
            cy,
            self._canvas.half_width,
            float(sun.lat),
            float(sun.lon),
            self._radius_km,
            self._terminator_distance_km,
        )

        stats = self._compute_stats(classes)
        marker = self.marker_position(sun)

        logger.debug(
            "Illumination computed: sun=(%.4f°, %.4f°), night=%.1f%%, marker=(%.1f, %.1f)",
            sun.lat,
            sun.lon,
            stats["night_fraction"] * 100.0,
            marker[0],
            marker[1],
        )

        return IlluminationResult(
            classes=classes,
            sun=sun,
            marker=marker,
            step=self._step,
            stats=stats,
        )

    def classify_pixel(self, sun: LatLon, x: float, y: float) -> PixelClass:
        """Scalar reference for one canvas pixel."""
        p = self._canvas.to_planar(float(x), float(y))
        code = classify_point(
            p.x, p.y,
            float(sun.lat), float(sun.lon),
            self._radius_km,
            self._terminator_distance_km,
        )
        return PixelClass(int(code))

    def is_shaded(self, sun: LatLon, point: LatLon) -> bool:
        """True if ``point`` is on the night side for the given sun."""
        if not point.is_on_map:
            return False
        return sun.spherical_distance(point, self._radius_km) >= self._terminator_distance_km

    def marker_position(self, sun: LatLon) -> tuple[float, float]:
        """Canvas position [px] of the sub-solar point."""
        return self._canvas.to_canvas(sun.to_projection())

    @staticmethod
    def _compute_stats(classes: np.ndarray) -> dict[str, float]:
        """Compute summary statistics for a class grid."""
        total = classes.size
        if total == 0:
            return {
                "night_fraction": 0.0,
                "day_fraction": 0.0,
                "off_map_fraction": 1.0,
            }

        n_off = int(np.count_nonzero(classes == PixelClass.OFF_MAP))
        n_night = int(np.count_nonzero(classes == PixelClass.NIGHT))
        n_on = total - n_off

        if n_on == 0:
            return {
                "night_fraction": 0.0,
                "day_fraction": 0.0,
                "off_map_fraction": 1.0,
            }

        return {
            "night_fraction": n_night / n_on,
            "day_fraction": (n_on - n_night) / n_on,
            "off_map_fraction": n_off / total,
        }
