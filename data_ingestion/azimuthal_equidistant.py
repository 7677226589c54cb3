"""North-polar azimuthal equidistant projection of the whole sphere.

Maps geodetic coordinates (latitude, longitude) onto a normalised plane
in which the unit disk holds the entire globe: the north pole sits at the
origin, the south pole is smeared around the unit circle, and the distance
from the origin is proportional to the true surface distance from the
north pole.

Notes
-----
Convention: latitude is 90° at the north pole, longitude is positive
**west** of the zero meridian.

- Forward: (lat°, lon°) → (x, y), dimensionless
- Inverse: (x, y) → (lat°, lon°)

    r = (90 − φ) / 180
    x = −r · sin(λ)
    y =  r · cos(λ)

The inverse uses θ = atan2(−x, y) and φ = 90 − 180·r. For r > 1 the
returned latitude drops below −90°: such points lie outside the map and
must be rejected by the caller (see ``on_map``).
"""

from __future__ import annotations

import logging

import numpy as np
from numba import njit

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_DEG2RAD: float = np.pi / 180.0
_RAD2DEG: float = 180.0 / np.pi
_POLE_EPS: float = 1e-12
SOUTH_POLE_LAT: float = -90.0


# ---------------------------------------------------------------------------
# Scalar kernels (shared with the per-pixel classifier)
# ---------------------------------------------------------------------------


@njit(cache=True, fastmath=False)
def inverse_xy(x: float, y: float) -> tuple[float, float]:
    """Numba kernel for the inverse projection.

    Returns the raw (lat, lon) pair in degrees; latitude is below −90°
    when (x, y) is outside the unit disk.
    """
    r = np.sqrt(x * x + y * y)
    lat = 90.0 - 180.0 * r

    # At the pole, longitude is undefined; return 0 by convention
    if r < _POLE_EPS:
        return lat, 0.0

    lon = np.arctan2(-x, y) * _RAD2DEG
    if lon <= -180.0:
        lon += 360.0

    return lat, lon


# ---------------------------------------------------------------------------
# Forward Projection: (lat, lon) → (x, y)
# ---------------------------------------------------------------------------


def forward(lat_deg: float, lon_deg: float) -> tuple[float, float]:
    """Convert geodetic (lat, lon) to azimuthal equidistant (x, y).

    Parameters
    ----------
    lat_deg : float
        Latitude in degrees, [-90, 90].
    lon_deg : float
        Longitude in degrees, positive west.

    Returns
    -------
    x, y : tuple[float, float]
        Planar coordinates; the unit disk is the whole sphere.
    """
    r = (90.0 - lat_deg) / 180.0
    th = lon_deg * _DEG2RAD

    return float(-r * np.sin(th)), float(r * np.cos(th))


def forward_batch(
    lat_deg: np.ndarray,
    lon_deg: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """Vectorized forward projection for arrays of coordinates.

    Parameters
    ----------
    lat_deg, lon_deg : np.ndarray
        Coordinates in degrees. Shape: (N,) each.

    Returns
    -------
    x, y : tuple[np.ndarray, np.ndarray]
        Planar coordinates. Shape: (N,) each.
    """
    lat_deg = np.asarray(lat_deg, dtype=np.float64)
    lon_deg = np.asarray(lon_deg, dtype=np.float64)

    r = (90.0 - lat_deg) / 180.0
    th = lon_deg * _DEG2RAD

    return -r * np.sin(th), r * np.cos(th)


# ---------------------------------------------------------------------------
# Inverse Projection: (x, y) → (lat, lon)
# ---------------------------------------------------------------------------


def inverse(x: float, y: float) -> tuple[float, float]:
    """Convert azimuthal equidistant (x, y) to geodetic (lat, lon).

    Parameters
    ----------
    x, y : float
        Planar coordinates.

    Returns
    -------
    lat_deg, lon_deg : tuple[float, float]
        Latitude and longitude in degrees. Longitude is in (-180, 180].
        Latitude is below −90° when the point is outside the unit disk.
    """
    lat, lon = inverse_xy(float(x), float(y))
    return float(lat), float(lon)


def inverse_batch(
    x: np.ndarray,
    y: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """Vectorized inverse projection for arrays of coordinates.

    Parameters
    ----------
    x, y : np.ndarray
        Planar coordinates. Shape: (N,).

    Returns
    -------
    lat_deg, lon_deg : tuple[np.ndarray, np.ndarray]
        Geodetic coordinates in degrees. Shape: (N,) each.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    r = np.sqrt(x * x + y * y)
    lat_deg = 90.0 - 180.0 * r

    lon_deg = np.arctan2(-x, y) * _RAD2DEG
    lon_deg = np.where(lon_deg <= -180.0, lon_deg + 360.0, lon_deg)

    # At the exact pole, set lon = 0 by convention
    lon_deg = np.where(r < _POLE_EPS, 0.0, lon_deg)

    return lat_deg, lon_deg


def on_map(lat_deg: float | np.ndarray) -> bool | np.ndarray:
    """True where an inverse-projected latitude lies on the sphere."""
    return lat_deg >= SOUTH_POLE_LAT
