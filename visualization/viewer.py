"""Interactive flat-Earth window.

Opens a pyplot figure showing the world map, the night side and the sun
marker, and re-renders on a fixed timer. Holding the select key (space by
default) or the left mouse button snaps the sun to the pointer.

Event wiring
------------
- ``motion_notify_event``  → pointer position (axes data = canvas px)
- ``axes_leave_event``     → pointer unknown
- ``key_press_event`` / ``key_release_event``       → select key state
- ``button_press_event`` / ``button_release_event`` → mouse select state
- ``FuncAnimation`` tick   → ``FrameRunner.step`` → ``update_scene``
"""

from __future__ import annotations

import logging
from typing import Any

import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation
from matplotlib.backend_bases import MouseButton

from core_engine.constants import ViewerSettings
from core_engine.coordinates import LatLon
from data_ingestion.map_loader import WorldMap
from simulation.runner import FrameResult, FrameRunner, PointerSample
from visualization.plotter import DEFAULT_DPI, SceneArtists, draw_scene, update_scene

logger = logging.getLogger(__name__)


class InteractiveViewer:
    """Matplotlib window driving a ``FrameRunner`` from pointer input.

    Parameters
    ----------
    config : ViewerSettings
        Full configuration.
    world_map : WorldMap
        Base map, already loaded.
    runner : FrameRunner
        Frame update pipeline.
    initial_sun : LatLon
        Sub-solar point shown on the first frame.
    """

    def __init__(
        self,
        config: ViewerSettings,
        world_map: WorldMap,
        runner: FrameRunner,
        initial_sun: LatLon,
    ) -> None:
        self._config = config
        self._world_map = world_map
        self._runner = runner
        self._sun = initial_sun

        self._pointer: tuple[float, float] | None = None
        self._key_held = False
        self._button_held = False
        self._animation: FuncAnimation | None = None

        canvas = runner.engine.canvas
        dpi = DEFAULT_DPI
        self._fig = plt.figure(
            figsize=(canvas.width / dpi, canvas.height / dpi),
            dpi=dpi,
            facecolor="black",
        )
        if self._fig.canvas.manager is not None:
            self._fig.canvas.manager.set_window_title(config.viewer.title)
        self._ax = self._fig.add_axes((0.0, 0.0, 1.0, 1.0))

        first = runner.step(self._sun)
        self._artists: SceneArtists = draw_scene(
            self._ax, world_map, first.illumination, canvas, config
        )

        self._connect()

        logger.info(
            "Viewer ready: %dx%d, select key=%r, mouse select=%s",
            canvas.width,
            canvas.height,
            config.viewer.select_key,
            config.viewer.select_with_mouse,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def sun(self) -> LatLon:
        return self._sun

    @property
    def figure(self):
        return self._fig

    def current_sample(self) -> PointerSample:
        """Pointer state for the next frame."""
        selecting = self._key_held or (
            self._config.viewer.select_with_mouse and self._button_held
        )
        if self._pointer is None:
            return PointerSample(selecting=selecting)
        x, y = self._pointer
        return PointerSample(x=x, y=y, selecting=selecting)

    def advance(self) -> FrameResult:
        """Run one frame and refresh the artists."""
        result = self._runner.step(self._sun, self.current_sample())
        self._sun = result.sun
        update_scene(self._artists, result.illumination, self._config)
        return result

    def run(self) -> None:
        """Start the frame timer and block until the window is closed."""
        self._animation = FuncAnimation(
            self._fig,
            self._on_frame,
            interval=self._config.viewer.frame_interval_ms,
            cache_frame_data=False,
        )
        plt.show()
        logger.info(
            "Viewer closed after %d frames; final sun=(%.4f°, %.4f°)",
            self._runner.frame_count,
            self._sun.lat,
            self._sun.lon,
        )

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _connect(self) -> None:
        mpl = self._fig.canvas
        mpl.mpl_connect("motion_notify_event", self._on_motion)
        mpl.mpl_connect("axes_leave_event", self._on_leave)
        mpl.mpl_connect("key_press_event", self._on_key_press)
        mpl.mpl_connect("key_release_event", self._on_key_release)
        mpl.mpl_connect("button_press_event", self._on_button_press)
        mpl.mpl_connect("button_release_event", self._on_button_release)

    def _on_frame(self, _frame: Any) -> list:
        self.advance()
        return [self._artists.overlay, self._artists.marker]

    def _on_motion(self, event) -> None:
        if event.inaxes is not self._ax or event.xdata is None or event.ydata is None:
            self._pointer = None
            return
        self._pointer = (float(event.xdata), float(event.ydata))

    def _on_leave(self, event) -> None:
        self._pointer = None

    def _on_key_press(self, event) -> None:
        if event.key == self._config.viewer.select_key:
            self._key_held = True

    def _on_key_release(self, event) -> None:
        if event.key == self._config.viewer.select_key:
            self._key_held = False

    def _on_button_press(self, event) -> None:
        if event.button == MouseButton.LEFT:
            self._button_held = True
            self._on_motion(event)

    def _on_button_release(self, event) -> None:
        if event.button == MouseButton.LEFT:
            self._button_held = False
