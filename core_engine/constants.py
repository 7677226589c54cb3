"""Physical constants, viewer parameters, and configuration loader.

Every tunable value lives in one of the frozen dataclasses below. The
built-in defaults reproduce the classic 800 × 800 "Flat Earth" window; an
optional YAML file can override any subset of them.

References
----------
- Moritz, H. (2000). "Geodetic Reference System 1980." J. Geodesy, 74,
  128–133 (mean radius R₁ = 6371.0 km).
- Equatorial circumference 40 075 km (WGS 84, rounded).
"""

from __future__ import annotations

import copy
import logging
import platform
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numba
import numpy as np
import yaml

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Built-in Defaults
# ---------------------------------------------------------------------------

DEFAULT_CONFIG: dict[str, Any] = {
    "earth": {
        "radius_km": 6371.0,
        "circumference_km": 40075.0,
    },
    "canvas": {
        "width_px": 800,
        "height_px": 800,
    },
    "map": {
        "path": "map.jpg",
        "smooth": True,
    },
    "sun": {
        # Washington (because why not)
        "initial_lat_deg": 47.7511,
        "initial_lon_deg": 120.7401,
        "marker_radius_px": 10.0,
        "marker_color": [220, 220, 30],
    },
    "illumination": {
        "step_px": 1,
        "shade_color": [0, 0, 0, 220],
    },
    "viewer": {
        "title": "Flat Earth",
        "frame_interval_ms": 33,
        "select_key": " ",
        "select_with_mouse": True,
    },
}

# ---------------------------------------------------------------------------
# Configuration Data Classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EarthParameters:
    """Spherical Earth model.

    Attributes
    ----------
    radius_km : float
        Mean Earth radius [km].
    circumference_km : float
        Circumference of a great circle [km].
    """

    radius_km: float
    circumference_km: float

    @property
    def terminator_distance_km(self) -> float:
        """Great-circle distance from the sub-solar point to the terminator."""
        return self.circumference_km / 4.0


@dataclass(frozen=True)
class CanvasConfig:
    """Output canvas size.

    Attributes
    ----------
    width_px, height_px : int
        Canvas size [px]. The projection disk spans the full width.
    """

    width_px: int
    height_px: int


@dataclass(frozen=True)
class MapConfig:
    """World-map image settings.

    Attributes
    ----------
    path : Path
        Image file drawn under the shading.
    smooth : bool
        Bilinear filtering when the image is scaled to the canvas.
    """

    path: Path
    smooth: bool


@dataclass(frozen=True)
class SunConfig:
    """Sub-solar point and its marker.

    Attributes
    ----------
    initial_lat_deg, initial_lon_deg : float
        Starting sub-solar point [deg].
    marker_radius_px : float
        Marker circle radius [px].
    marker_color : tuple[int, int, int]
        Marker RGB, 0–255.
    """

    initial_lat_deg: float
    initial_lon_deg: float
    marker_radius_px: float
    marker_color: tuple[int, int, int]


@dataclass(frozen=True)
class IlluminationConfig:
    """Night-side shading settings.

    Attributes
    ----------
    step_px : int
        Sampling stride [px]; 1 classifies every pixel.
    shade_color : tuple[int, int, int, int]
        RGBA of a night tile, 0–255.
    """

    step_px: int
    shade_color: tuple[int, int, int, int]


@dataclass(frozen=True)
class ViewerConfig:
    """Interactive window settings.

    Attributes
    ----------
    title : str
        Window title.
    frame_interval_ms : int
        Delay between frames [ms].
    select_key : str
        Key that, while held, snaps the sun to the pointer.
    select_with_mouse : bool
        If True, holding the left mouse button also selects.
    """

    title: str
    frame_interval_ms: int
    select_key: str
    select_with_mouse: bool


@dataclass(frozen=True)
class ViewerSettings:
    """Top-level configuration.

    Attributes
    ----------
    earth : EarthParameters
    canvas : CanvasConfig
    map : MapConfig
    sun : SunConfig
    illumination : IlluminationConfig
    viewer : ViewerConfig
    """

    earth: EarthParameters
    canvas: CanvasConfig
    map: MapConfig
    sun: SunConfig
    illumination: IlluminationConfig
    viewer: ViewerConfig


# ---------------------------------------------------------------------------
# Configuration Loader
# ---------------------------------------------------------------------------


def load_config(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> ViewerSettings:
    """Build the configuration from defaults, an optional YAML file and overrides.

    Parameters
    ----------
    config_path : str or Path, optional
        YAML file whose sections are merged over ``DEFAULT_CONFIG``.
    overrides : dict, optional
        Nested mapping applied last (e.g. from CLI flags).

    Returns
    -------
    ViewerSettings
        Fully populated, validated configuration object.

    Raises
    ------
    FileNotFoundError
        If ``config_path`` is given and does not exist.
    ValueError
        If the file has unknown sections or any value is invalid.
    """
    raw = copy.deepcopy(DEFAULT_CONFIG)

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}

        if not isinstance(loaded, dict):
            raise ValueError(
                f"Configuration root must be a mapping, got {type(loaded).__name__}"
            )

        logger.info("Loading configuration from: %s", config_path)
        _merge(raw, loaded)

    if overrides:
        _merge(raw, overrides)

    # --- Parse earth model ---
    earth = EarthParameters(
        radius_km=_value(raw, "earth", "radius_km", float),
        circumference_km=_value(raw, "earth", "circumference_km", float),
    )

    # --- Parse canvas ---
    canvas = CanvasConfig(
        width_px=_value(raw, "canvas", "width_px", int),
        height_px=_value(raw, "canvas", "height_px", int),
    )

    # --- Parse map ---
    world_map = MapConfig(
        path=_value(raw, "map", "path", Path),
        smooth=_value(raw, "map", "smooth", bool),
    )

    # --- Parse sun ---
    sun = SunConfig(
        initial_lat_deg=_value(raw, "sun", "initial_lat_deg", float),
        initial_lon_deg=_value(raw, "sun", "initial_lon_deg", float),
        marker_radius_px=_value(raw, "sun", "marker_radius_px", float),
        marker_color=_value(raw, "sun", "marker_color", _int_tuple),
    )

    # --- Parse illumination ---
    illumination = IlluminationConfig(
        step_px=_value(raw, "illumination", "step_px", int),
        shade_color=_value(raw, "illumination", "shade_color", _int_tuple),
    )

    # --- Parse viewer ---
    viewer = ViewerConfig(
        title=_value(raw, "viewer", "title", str),
        frame_interval_ms=_value(raw, "viewer", "frame_interval_ms", int),
        select_key=_value(raw, "viewer", "select_key", str),
        select_with_mouse=_value(raw, "viewer", "select_with_mouse", bool),
    )

    config = ViewerSettings(
        earth=earth,
        canvas=canvas,
        map=world_map,
        sun=sun,
        illumination=illumination,
        viewer=viewer,
    )

    _validate_config(config)

    logger.debug(
        "Configuration loaded: canvas=%dx%d, step=%d px, sun=(%.4f°, %.4f°)",
        canvas.width_px,
        canvas.height_px,
        illumination.step_px,
        sun.initial_lat_deg,
        sun.initial_lon_deg,
    )

    return config


def _value(raw: dict[str, Any], section: str, key: str, cast: Any) -> Any:
    """Convert ``raw[section][key]`` with ``cast``; wrong types become ValueError."""
    value = raw[section][key]
    try:
        return cast(value)
    except (TypeError, ValueError) as e:
        raise ValueError(
            f"Invalid value for {section}.{key}: {value!r} ({e})"
        ) from e


def _int_tuple(values: Any) -> tuple[int, ...]:
    return tuple(int(v) for v in values)


def _merge(base: dict[str, Any], update: dict[str, Any]) -> None:
    """Merge ``update`` into ``base`` section by section, in place."""
    for section, values in update.items():
        if section not in base:
            raise ValueError(f"Unknown configuration section: {section!r}")
        if not isinstance(values, dict):
            raise ValueError(f"Configuration section {section!r} must be a mapping")
        for key, value in values.items():
            if key not in base[section]:
                raise ValueError(f"Unknown configuration key: {section}.{key}")
            base[section][key] = value


def _validate_config(config: ViewerSettings) -> None:
    """Validate constraints on configuration values.

    Parameters
    ----------
    config : ViewerSettings
        Configuration to validate.

    Raises
    ------
    ValueError
        If any value is invalid.
    """
    if config.earth.radius_km <= 0:
        raise ValueError("Earth radius must be positive.")
    if config.earth.circumference_km <= 0:
        raise ValueError("Earth circumference must be positive.")
    if config.canvas.width_px <= 0 or config.canvas.height_px <= 0:
        raise ValueError(
            f"Canvas size must be positive, got "
            f"{config.canvas.width_px}x{config.canvas.height_px}"
        )
    if config.canvas.width_px != config.canvas.height_px:
        raise ValueError(
            f"Canvas must be square to hold the projection disk, got "
            f"{config.canvas.width_px}x{config.canvas.height_px}"
        )
    if config.illumination.step_px < 1:
        raise ValueError(
            f"Sampling step must be >= 1 px, got {config.illumination.step_px}"
        )
    if not (-90.0 <= config.sun.initial_lat_deg <= 90.0):
        raise ValueError(
            f"Initial sun latitude must be in [-90, 90], got {config.sun.initial_lat_deg}"
        )
    if not (-180.0 < config.sun.initial_lon_deg <= 180.0):
        raise ValueError(
            f"Initial sun longitude must be in (-180, 180], got {config.sun.initial_lon_deg}"
        )
    if config.sun.marker_radius_px <= 0:
        raise ValueError("Marker radius must be positive.")
    _validate_color("sun.marker_color", config.sun.marker_color, 3)
    _validate_color("illumination.shade_color", config.illumination.shade_color, 4)
    if config.viewer.frame_interval_ms <= 0:
        raise ValueError("Frame interval must be positive.")

    logger.debug("Configuration validation passed.")


def _validate_color(name: str, color: tuple[int, ...], length: int) -> None:
    if len(color) != length:
        raise ValueError(f"{name} must have {length} components, got {len(color)}")
    if any(not (0 <= c <= 255) for c in color):
        raise ValueError(f"{name} components must be in [0, 255], got {color}")


def log_platform_info() -> None:
    """Log platform and library version information."""
    logger.info("=" * 70)
    logger.info("PLATFORM INFORMATION")
    logger.info("=" * 70)
    logger.info("  Python:    %s", sys.version)
    logger.info("  Platform:  %s", platform.platform())
    logger.info("  NumPy:     %s", np.__version__)
    logger.info("  Numba:     %s (threads: %d)", numba.__version__, numba.get_num_threads())
    logger.info("=" * 70)
