"""Tests for configuration loading, map loading and the CLI startup path."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from core_engine.constants import DEFAULT_CONFIG, ViewerSettings, load_config
from data_ingestion.map_loader import MapLoadError, WorldMapLoader, load_world_map

PROJECT_ROOT = Path(__file__).parent.parent
_CONFIG_PATH = PROJECT_ROOT / "config" / "default_config.yaml"


# ===================================================================
# CONFIGURATION
# ===================================================================


class TestLoadConfig:
    """Defaults, YAML overrides and validation."""

    def test_defaults(self) -> None:
        config = load_config()

        assert isinstance(config, ViewerSettings)
        assert config.earth.radius_km == 6371.0
        assert config.earth.terminator_distance_km == pytest.approx(10018.75)
        assert (config.canvas.width_px, config.canvas.height_px) == (800, 800)
        assert config.map.path == Path("map.jpg")
        assert config.sun.initial_lat_deg == 47.7511
        assert config.sun.initial_lon_deg == 120.7401
        assert config.sun.marker_color == (220, 220, 30)
        assert config.illumination.shade_color == (0, 0, 0, 220)
        assert config.illumination.step_px == 1
        assert config.viewer.select_key == " "

    def test_shipped_yaml_matches_defaults(self) -> None:
        assert load_config(_CONFIG_PATH) == load_config()

    def test_partial_yaml_override(self, tmp_path: Path) -> None:
        path = tmp_path / "small.yaml"
        path.write_text(
            "canvas:\n  width_px: 200\n  height_px: 200\n"
            "illumination:\n  step_px: 2\n",
            encoding="utf-8",
        )

        config = load_config(path)

        assert config.canvas.width_px == 200
        assert config.illumination.step_px == 2
        assert config.earth.radius_km == 6371.0  # untouched

    def test_overrides_applied_last(self, tmp_path: Path) -> None:
        path = tmp_path / "sun.yaml"
        path.write_text("sun:\n  initial_lat_deg: 10.0\n", encoding="utf-8")

        config = load_config(path, overrides={"sun": {"initial_lat_deg": -5.0}})

        assert config.sun.initial_lat_deg == -5.0

    def test_defaults_not_mutated(self) -> None:
        load_config(overrides={"canvas": {"width_px": 100, "height_px": 100}})
        assert DEFAULT_CONFIG["canvas"]["width_px"] == 800

    def test_empty_yaml_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == load_config()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"network": {"port": 1}},
            {"canvas": {"depth_px": 3}},
            {"canvas": 800},
        ],
    )
    def test_unknown_keys_rejected(self, overrides: dict) -> None:
        with pytest.raises(ValueError):
            load_config(overrides=overrides)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"earth": {"radius_km": 0.0}},
            {"earth": {"circumference_km": -1.0}},
            {"canvas": {"width_px": 800, "height_px": 600}},
            {"canvas": {"width_px": 0, "height_px": 0}},
            {"illumination": {"step_px": 0}},
            {"illumination": {"shade_color": [0, 0, 0]}},
            {"illumination": {"shade_color": [0, 0, 0, 300]}},
            {"sun": {"initial_lat_deg": 95.0}},
            {"sun": {"initial_lon_deg": -180.0}},
            {"sun": {"marker_radius_px": 0}},
            {"viewer": {"frame_interval_ms": 0}},
        ],
    )
    def test_invalid_values_rejected(self, overrides: dict) -> None:
        with pytest.raises(ValueError):
            load_config(overrides=overrides)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"sun": {"marker_color": 5}},
            {"earth": {"radius_km": None}},
            {"canvas": {"width_px": "wide", "height_px": 800}},
            {"illumination": {"step_px": [1]}},
        ],
    )
    def test_wrong_types_rejected(self, overrides: dict) -> None:
        with pytest.raises(ValueError, match="Invalid value for"):
            load_config(overrides=overrides)

    def test_empty_yaml_value_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "blank.yaml"
        path.write_text("earth:\n  radius_km:\n", encoding="utf-8")

        with pytest.raises(ValueError, match="earth.radius_km"):
            load_config(path)


# ===================================================================
# WORLD MAP
# ===================================================================


class TestWorldMapLoader:
    """Startup image loading."""

    def test_loads_png(self, map_file: Path) -> None:
        world_map = load_world_map(map_file)

        assert world_map.width == 32
        assert world_map.height == 32
        assert world_map.path == map_file
        assert world_map.image.shape == (32, 32, 4)
        assert world_map.image.dtype == np.uint8
        assert world_map.interpolation == "bilinear"

    def test_nearest_when_not_smooth(self, map_file: Path) -> None:
        assert WorldMapLoader(smooth=False).load_map(map_file).interpolation == "nearest"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_world_map(tmp_path / "map.jpg")

    def test_undecodable_file(self, tmp_path: Path) -> None:
        path = tmp_path / "map.png"
        path.write_bytes(b"definitely not an image")

        with pytest.raises(MapLoadError):
            load_world_map(path)


# ===================================================================
# CLI
# ===================================================================


class TestMain:
    """Startup failures are fatal with a non-zero status."""

    def test_missing_map_exits_nonzero(self, tmp_path: Path) -> None:
        from main import main

        status = main(["--map", str(tmp_path / "missing.jpg"), "--log-level", "ERROR"])
        assert status == 1

    def test_corrupt_map_exits_nonzero(self, tmp_path: Path) -> None:
        from main import main

        path = tmp_path / "map.png"
        path.write_bytes(b"definitely not an image")

        status = main(["--map", str(path), "--log-level", "ERROR"])
        assert status == 1

    def test_wrong_type_config_exits_nonzero(self, tmp_path: Path, map_file: Path) -> None:
        from main import main

        path = tmp_path / "typed.yaml"
        path.write_text("sun:\n  marker_color: 5\n", encoding="utf-8")

        status = main(["--config", str(path), "--map", str(map_file), "--log-level", "ERROR"])
        assert status == 1

    def test_bad_config_exits_nonzero(self, tmp_path: Path, map_file: Path) -> None:
        from main import main

        status = main(["--map", str(map_file), "--step", "0", "--log-level", "ERROR"])
        assert status == 1

    def test_snapshot(self, tmp_path: Path, map_file: Path) -> None:
        from main import main

        out = tmp_path / "out" / "frame.png"
        status = main([
            "--map", str(map_file),
            "--lat", "0", "--lon", "90",
            "--step", "4",
            "--snapshot", str(out),
            "--log-level", "WARNING",
        ])

        assert status == 0
        assert out.exists()
