"""Coordinate model — geographic points, planar points, great-circle distance.

Value types for a point on the Earth's surface (``LatLon``) and a point on
the normalised azimuthal equidistant plane (``PlanarPoint``), with the
conversions between them and the Haversine great-circle distance.

References
----------
- Sinnott, R.W. (1984). "Virtues of the Haversine." Sky and Telescope,
  68(2), 159.
- Snyder, J.P. (1987). "Map Projections — A Working Manual."
  U.S. Geological Survey Professional Paper 1395, pp. 191–202.

Design Notes
------------
- The scalar distance kernel is Numba-compiled and shared with the
  per-pixel classifier in ``core_engine.terminator``, so a single pixel
  evaluated here gives bit-for-bit the same answer as the parallel sweep.
- The ``asin`` argument is clamped at 1.0 from above: at exact antipodes
  rounding can push it to 1 + ε. NaN inputs are not clamped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from numba import njit

from data_ingestion.azimuthal_equidistant import (
    SOUTH_POLE_LAT,
    forward,
    inverse,
)

logger = logging.getLogger(__name__)

# ===================================================================
# Compile-time defaults (overridable via EarthParameters)
# ===================================================================

_DEFAULT_RADIUS_KM: float = 6371.0  # IUGG mean Earth radius [km]
_DEG2RAD: float = np.pi / 180.0


# ===================================================================
# HAVERSINE — Numba JIT
# ===================================================================


@njit(cache=True, fastmath=False)
def haversine_km(
    lat1_deg: float,
    lon1_deg: float,
    lat2_deg: float,
    lon2_deg: float,
    radius_km: float,
) -> float:
    """Great-circle distance between two (lat, lon) pairs in degrees.

    Parameters
    ----------
    lat1_deg, lon1_deg : float
        First point [deg].
    lat2_deg, lon2_deg : float
        Second point [deg].
    radius_km : float
        Sphere radius [km].

    Returns
    -------
    float
        Distance along the great circle [km].
    """
    lat1 = lat1_deg * _DEG2RAD
    lon1 = lon1_deg * _DEG2RAD
    lat2 = lat2_deg * _DEG2RAD
    lon2 = lon2_deg * _DEG2RAD

    u = np.sin((lat2 - lat1) / 2.0)
    v = np.sin((lon2 - lon1) / 2.0)

    h = np.sqrt(u * u + np.cos(lat1) * np.cos(lat2) * v * v)
    if h > 1.0:
        h = 1.0

    return 2.0 * radius_km * np.arcsin(h)


def spherical_distance_batch(
    lat1_deg: np.ndarray,
    lon1_deg: np.ndarray,
    lat2_deg: np.ndarray,
    lon2_deg: np.ndarray,
    radius_km: float = _DEFAULT_RADIUS_KM,
) -> np.ndarray:
    """Vectorized Haversine distance; arguments broadcast against each other."""
    lat1 = np.asarray(lat1_deg, dtype=np.float64) * _DEG2RAD
    lon1 = np.asarray(lon1_deg, dtype=np.float64) * _DEG2RAD
    lat2 = np.asarray(lat2_deg, dtype=np.float64) * _DEG2RAD
    lon2 = np.asarray(lon2_deg, dtype=np.float64) * _DEG2RAD

    u = np.sin((lat2 - lat1) / 2.0)
    v = np.sin((lon2 - lon1) / 2.0)

    h = np.minimum(np.sqrt(u * u + np.cos(lat1) * np.cos(lat2) * v * v), 1.0)

    return 2.0 * radius_km * np.arcsin(h)


# ===================================================================
# VALUE TYPES
# ===================================================================


@dataclass(frozen=True)
class PlanarPoint:
    """A point on the normalised azimuthal equidistant plane.

    Attributes
    ----------
    x, y : float
        Planar coordinates. The unit disk is the whole sphere: the origin
        is the north pole and the unit circle is the south pole.
    """

    x: float
    y: float

    @property
    def radius(self) -> float:
        """Distance from the north pole in projection units."""
        return float(np.hypot(self.x, self.y))

    @property
    def is_on_map(self) -> bool:
        return self.radius <= 1.0


@dataclass(frozen=True)
class LatLon:
    """A point on the Earth's surface.

    Attributes
    ----------
    lat : float
        Latitude [deg]. 90 at the north pole, -90 at the south pole.
    lon : float
        Longitude [deg], (-180, 180]. 0 through London, positive west.
    """

    lat: float
    lon: float

    @property
    def is_on_map(self) -> bool:
        """False for the degenerate ``lat < -90`` result of an off-disk inverse."""
        return self.lat >= SOUTH_POLE_LAT

    def spherical_distance(
        self,
        other: LatLon,
        radius_km: float = _DEFAULT_RADIUS_KM,
    ) -> float:
        """Great-circle distance to ``other`` [km] (Haversine)."""
        return float(
            haversine_km(
                float(self.lat), float(self.lon),
                float(other.lat), float(other.lon),
                float(radius_km),
            )
        )

    def to_projection(self) -> PlanarPoint:
        """Map to x-y on the azimuthal equidistant projection."""
        x, y = forward(self.lat, self.lon)
        return PlanarPoint(x, y)

    @classmethod
    def from_projection(cls, planar: PlanarPoint) -> LatLon:
        """Recover (lat, lon) from projection coordinates.

        Outside the unit disk the latitude is below -90; use ``locate``
        for an explicit off-map result.
        """
        lat, lon = inverse(planar.x, planar.y)
        return cls(lat, lon)


# ===================================================================
# FUNCTIONAL API
# ===================================================================


def spherical_distance(
    a: LatLon,
    b: LatLon,
    radius_km: float = _DEFAULT_RADIUS_KM,
) -> float:
    """Great-circle distance between ``a`` and ``b`` [km].

    Symmetric, zero for identical points, π·R at antipodes.
    """
    return a.spherical_distance(b, radius_km)


def to_projection(point: LatLon) -> PlanarPoint:
    return point.to_projection()


def from_projection(planar: PlanarPoint) -> LatLon:
    return LatLon.from_projection(planar)


def locate(planar: PlanarPoint) -> LatLon | None:
    """Inverse-project ``planar``; ``None`` when it lies outside the map."""
    point = LatLon.from_projection(planar)
    if not point.is_on_map:
        return None
    return point
