"""Scene drawing for the flat-Earth view.

Composes one frame with matplotlib:
- World map stretched over the canvas
- Night-side overlay (one translucent tile per shaded sample)
- Sun marker at the sub-solar point

All artists live in canvas pixel coordinates with y growing downward, so
the same drawing code serves the interactive viewer and PNG snapshots.
Snapshots go through an explicit Agg canvas and never touch the pyplot
backend.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from matplotlib.axes import Axes
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.image import AxesImage
from matplotlib.patches import Circle

from core_engine.constants import ViewerSettings
from core_engine.illumination import Canvas, IlluminationResult
from data_ingestion.map_loader import WorldMap

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Color Configuration
# ---------------------------------------------------------------------------

_BACKGROUND = "black"
DEFAULT_DPI = 100


def _rgba(color: tuple[int, ...]) -> tuple[float, ...]:
    """0–255 components → 0–1 floats (alpha defaults to opaque)."""
    c = tuple(v / 255.0 for v in color)
    return c if len(c) == 4 else c + (1.0,)


# ---------------------------------------------------------------------------
# Overlay
# ---------------------------------------------------------------------------


def build_night_overlay(
    result: IlluminationResult,
    shade_color: tuple[int, int, int, int],
) -> np.ndarray:
    """Build an RGBA image painting every shaded sample with ``shade_color``.

    Parameters
    ----------
    result : IlluminationResult
        Illumination pass to draw.
    shade_color : tuple[int, int, int, int]
        RGBA, 0–255.

    Returns
    -------
    np.ndarray
        RGBA float image, transparent outside the night side.
        Shape: (rows, cols, 4).
    """
    rows, cols = result.classes.shape
    overlay = np.zeros((rows, cols, 4), dtype=np.float32)
    overlay[result.night_mask] = _rgba(shade_color)
    return overlay


def overlay_extent(
    result: IlluminationResult,
) -> tuple[float, float, float, float]:
    """imshow extent (left, right, bottom, top) centring each tile on its sample."""
    rows, cols = result.classes.shape
    half = result.step / 2.0
    return (-half, cols * result.step - half, rows * result.step - half, -half)


# ---------------------------------------------------------------------------
# Scene
# ---------------------------------------------------------------------------


@dataclass
class SceneArtists:
    """Artists that change from frame to frame."""

    map_image: AxesImage
    overlay: AxesImage
    marker: Circle


def draw_scene(
    ax: Axes,
    world_map: WorldMap,
    result: IlluminationResult,
    canvas: Canvas,
    config: ViewerSettings,
) -> SceneArtists:
    """Draw map, night overlay and sun marker onto ``ax``.

    Parameters
    ----------
    ax : matplotlib.axes.Axes
        Target axes; limits and aspect are set here.
    world_map : WorldMap
        Base map image.
    result : IlluminationResult
        Illumination pass to draw.
    canvas : Canvas
        Canvas geometry.
    config : ViewerSettings
        Colors and marker size.

    Returns
    -------
    SceneArtists
        Handles for ``update_scene``.
    """
    ax.set_facecolor(_BACKGROUND)

    map_image = ax.imshow(
        world_map.image,
        extent=(0.0, canvas.width, canvas.height, 0.0),
        interpolation=world_map.interpolation,
        origin="upper",
        zorder=0,
    )

    overlay = ax.imshow(
        build_night_overlay(result, config.illumination.shade_color),
        extent=overlay_extent(result),
        interpolation="nearest",
        origin="upper",
        zorder=1,
    )

    # Sun is directly overhead at this point
    marker = Circle(
        result.marker,
        radius=config.sun.marker_radius_px,
        facecolor=_rgba(config.sun.marker_color),
        edgecolor="none",
        zorder=2,
    )
    ax.add_patch(marker)

    ax.set_xlim(0.0, canvas.width)
    ax.set_ylim(canvas.height, 0.0)
    ax.set_aspect("equal")
    ax.set_axis_off()

    return SceneArtists(map_image=map_image, overlay=overlay, marker=marker)


def update_scene(
    artists: SceneArtists,
    result: IlluminationResult,
    config: ViewerSettings,
) -> None:
    """Refresh overlay and marker for a new illumination pass."""
    artists.overlay.set_data(
        build_night_overlay(result, config.illumination.shade_color)
    )
    artists.marker.set_center(result.marker)


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


def render_snapshot(
    world_map: WorldMap,
    result: IlluminationResult,
    canvas: Canvas,
    config: ViewerSettings,
    output_path: Path | str,
    dpi: int = DEFAULT_DPI,
) -> Path:
    """Render one frame to an image file at the canvas resolution.

    Parameters
    ----------
    world_map : WorldMap
        Base map image.
    result : IlluminationResult
        Illumination pass to draw.
    canvas : Canvas
        Canvas geometry; the saved image is ``width`` × ``height`` px.
    config : ViewerSettings
        Colors and marker size.
    output_path : Path or str
        Destination file; the format follows the suffix.
    dpi : int
        Figure resolution.

    Returns
    -------
    Path
        The written file.
    """
    fig = Figure(
        figsize=(canvas.width / dpi, canvas.height / dpi),
        dpi=dpi,
        facecolor=_BACKGROUND,
    )
    FigureCanvasAgg(fig)
    ax = fig.add_axes((0.0, 0.0, 1.0, 1.0))

    draw_scene(ax, world_map, result, canvas, config)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=dpi, facecolor=fig.get_facecolor())
    logger.info(
        "Snapshot saved: %s (sun=(%.4f°, %.4f°), night=%.1f%%)",
        output_path,
        result.sun.lat,
        result.sun.lon,
        result.stats["night_fraction"] * 100.0,
    )

    return output_path
