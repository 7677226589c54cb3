"""Pytest configuration and shared fixtures for the flat-Earth tests."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")  # Non-interactive backend for headless test runs

import numpy as np
import pytest


# Add project root to path so imports work
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


def pytest_configure(config: pytest.Config) -> None:
    """Configure logging for tests."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s [%(levelname)s] %(message)s",
    )


@pytest.fixture
def map_file(tmp_path: Path) -> Path:
    """A small square PNG standing in for the world map."""
    import matplotlib.image as mpimg

    yy, xx = np.mgrid[0:32, 0:32]
    image = np.zeros((32, 32, 3), dtype=np.float64)
    image[..., 1] = xx / 31.0
    image[..., 2] = yy / 31.0

    path = tmp_path / "map.png"
    mpimg.imsave(path, image)
    return path
