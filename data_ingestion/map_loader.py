"""World-map loader — read the azimuthal equidistant base map image.

Loads the raster drawn underneath the night shading. The image is expected
to already be in the north-polar azimuthal equidistant projection (a
square image with the disk touching all four edges); it is stretched to
the canvas at draw time through the ``imshow`` extent.

Key concerns:
- A missing or unreadable image is fatal at startup; the caller reports
  it and exits before any window is opened.
- Images are decoded with Pillow and normalised to uint8 RGBA, whatever
  the file format or palette.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


class MapLoadError(ValueError):
    """The world-map image exists but could not be decoded."""


@dataclass
class WorldMap:
    """A decoded world-map raster.

    Attributes
    ----------
    image : np.ndarray
        RGBA pixel data, uint8. Shape: (rows, cols, 4).
    path : Path
        File the image was read from.
    smooth : bool
        Whether the image should be filtered when scaled.
    """

    image: np.ndarray
    path: Path
    smooth: bool = True

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])

    @property
    def interpolation(self) -> str:
        return "bilinear" if self.smooth else "nearest"


class WorldMapLoader:
    """Loader for world-map images (JPEG, PNG, anything Pillow can decode).

    Parameters
    ----------
    smooth : bool
        If True, the returned map asks for bilinear filtering.
    """

    def __init__(self, smooth: bool = True) -> None:
        self._smooth = smooth

    def load_map(self, file_path: str | Path) -> WorldMap:
        """Read a world-map image.

        Parameters
        ----------
        file_path : str or Path
            Image file path.

        Returns
        -------
        WorldMap
            Decoded image.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        MapLoadError
            If the file cannot be decoded or holds no pixels.
        """
        file_path = Path(file_path)

        if not file_path.is_file():
            raise FileNotFoundError(f"World map not found: {file_path}")

        logger.info("Loading world map: %s", file_path)

        # Pillow signals corrupt data with OSError (incl. UnidentifiedImageError),
        # SyntaxError (bad PNG signature) or ValueError
        try:
            with Image.open(file_path) as im:
                image = np.asarray(im.convert("RGBA"))
        except (OSError, SyntaxError, ValueError) as e:
            raise MapLoadError(f"Cannot decode world map {file_path}: {e}") from e

        if image.size == 0:
            raise MapLoadError(
                f"World map {file_path} has unusable shape {image.shape}"
            )

        if image.shape[0] != image.shape[1]:
            logger.warning(
                "World map is not square (%d x %d); it will be stretched",
                image.shape[1], image.shape[0],
            )

        world_map = WorldMap(image=image, path=file_path, smooth=self._smooth)
        logger.info(
            "  Size: %d x %d, dtype: %s",
            world_map.width, world_map.height, image.dtype,
        )
        return world_map


def load_world_map(file_path: str | Path, smooth: bool = True) -> WorldMap:
    """Convenience wrapper around ``WorldMapLoader.load_map``."""
    return WorldMapLoader(smooth=smooth).load_map(file_path)
