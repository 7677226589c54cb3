"""Per-pixel day/night classification — Numba parallel kernel.

Sweeps every sample pixel of the canvas, inverse-projects it onto the
sphere and compares its great-circle distance from the sub-solar point
with the terminator radius (a quarter of the circumference). All inner
loops are compiled with Numba ``@njit``; rows are distributed over threads
with ``prange``.

Design Notes
------------
- **Output layout**: ``int8`` grid of shape ``(n_rows, n_cols)`` indexed
  ``[row, col]``, one cell per sample pixel at ``(col·step, row·step)``.
  Cell values are ``PixelClass`` codes.
- **No shared state**: each cell is written once by the thread that owns
  its row, so the parallel result equals the serial one.
- **Precision**: float64 throughout, ``fastmath=False`` so the kernel
  agrees with the scalar reference in ``IlluminationEngine.classify_pixel``.
"""

from __future__ import annotations

import logging
from enum import IntEnum

import numpy as np
from numba import njit, prange

from core_engine.coordinates import haversine_km
from data_ingestion.azimuthal_equidistant import SOUTH_POLE_LAT, inverse_xy

logger = logging.getLogger(__name__)


class PixelClass(IntEnum):
    """Classification of one canvas sample."""

    OFF_MAP = -1
    DAY = 0
    NIGHT = 1


# Plain ints for the compiled kernel
_OFF_MAP: int = int(PixelClass.OFF_MAP)
_DAY: int = int(PixelClass.DAY)
_NIGHT: int = int(PixelClass.NIGHT)


@njit(cache=True, fastmath=False)
def classify_point(
    px: float,
    py: float,
    sun_lat_deg: float,
    sun_lon_deg: float,
    radius_km: float,
    threshold_km: float,
) -> int:
    """Classify one planar point as off-map, day or night.

    Parameters
    ----------
    px, py : float
        Normalised projection coordinates.
    sun_lat_deg, sun_lon_deg : float
        Sub-solar point [deg].
    radius_km : float
        Sphere radius [km].
    threshold_km : float
        Terminator distance [km]; closer than this is daylight.

    Returns
    -------
    int
        A ``PixelClass`` code.
    """
    lat, lon = inverse_xy(px, py)

    if lat < SOUTH_POLE_LAT:
        return _OFF_MAP

    if haversine_km(sun_lat_deg, sun_lon_deg, lat, lon, radius_km) < threshold_km:
        return _DAY

    return _NIGHT


@njit(cache=True, parallel=True, fastmath=False)
def classify_canvas(
    width: int,
    height: int,
    step: int,
    center_x: float,
    center_y: float,
    half_width: float,
    sun_lat_deg: float,
    sun_lon_deg: float,
    radius_km: float,
    threshold_km: float,
) -> np.ndarray:
    """Classify every sample pixel of a ``width`` × ``height`` canvas.

    Parameters
    ----------
    width, height : int
        Canvas size [px].
    step : int
        Sampling stride [px]; 1 samples every pixel.
    center_x, center_y : float
        Canvas position of the north pole [px].
    half_width : float
        Pixels per projection unit.
    sun_lat_deg, sun_lon_deg : float
        Sub-solar point [deg].
    radius_km, threshold_km : float
        Sphere radius and terminator distance [km].

    Returns
    -------
    classes : np.ndarray
        ``PixelClass`` codes. Shape: (ceil(height/step), ceil(width/step)).
    """
    n_cols = (width + step - 1) // step
    n_rows = (height + step - 1) // step
    classes = np.empty((n_rows, n_cols), dtype=np.int8)

    for row in prange(n_rows):
        py = (row * step - center_y) / half_width
        for col in range(n_cols):
            px = (col * step - center_x) / half_width
            classes[row, col] = classify_point(
                px, py, sun_lat_deg, sun_lon_deg, radius_km, threshold_km
            )

    return classes
