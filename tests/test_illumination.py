"""Tests for the illumination engine and the per-pixel classifier.

Test Strategy
-------------
1. Canvas geometry: centre, rim, round trip pixel ↔ plane.
2. Parallel kernel equals the scalar per-pixel reference.
3. Known geometry: sun at the north pole gives a night annulus.
4. Washington scenario: antipode shaded, sub-solar point lit.
"""

from __future__ import annotations

import numpy as np
import pytest

from core_engine.coordinates import LatLon, PlanarPoint
from core_engine.illumination import Canvas, IlluminationEngine
from core_engine.terminator import PixelClass, classify_canvas

_R_EARTH = 6371.0
_TERMINATOR_KM = 40075.0 / 4.0
_WASHINGTON = LatLon(47.7511, 120.7401)
_WASHINGTON_ANTIPODE = LatLon(-47.7511, -59.2599)


# ===================================================================
# FIXTURES
# ===================================================================


@pytest.fixture
def canvas() -> Canvas:
    return Canvas(800, 800)


@pytest.fixture
def engine(canvas: Canvas) -> IlluminationEngine:
    return IlluminationEngine(canvas, radius_km=_R_EARTH, terminator_distance_km=_TERMINATOR_KM)


@pytest.fixture
def small_engine() -> IlluminationEngine:
    return IlluminationEngine(Canvas(48, 48))


# ===================================================================
# CANVAS TESTS
# ===================================================================


class TestCanvas:
    """Pixel ↔ projection plane mapping."""

    def test_center_is_north_pole(self, canvas: Canvas) -> None:
        p = canvas.to_planar(400.0, 400.0)
        assert p.x == 0.0 and p.y == 0.0

    def test_half_width_is_one_unit(self, canvas: Canvas) -> None:
        p = canvas.to_planar(800.0, 400.0)
        assert p.x == pytest.approx(1.0)
        p = canvas.to_planar(400.0, 0.0)
        assert p.y == pytest.approx(-1.0)

    def test_corner_is_off_map(self, canvas: Canvas) -> None:
        assert not canvas.to_planar(0.0, 0.0).is_on_map

    def test_round_trip(self, canvas: Canvas) -> None:
        for x, y in [(0.0, 0.0), (123.0, 456.0), (799.0, 1.0)]:
            assert canvas.to_canvas(canvas.to_planar(x, y)) == pytest.approx((x, y))

    def test_grid_shape(self) -> None:
        assert Canvas(800, 800).grid_shape(1) == (800, 800)
        assert Canvas(10, 10).grid_shape(3) == (4, 4)


# ===================================================================
# KERNEL VS REFERENCE
# ===================================================================


class TestClassificationKernel:
    """The parallel kernel must not change any per-pixel result."""

    @pytest.mark.parametrize(
        "sun",
        [_WASHINGTON, LatLon(90.0, 0.0), LatLon(-23.44, -45.0), LatLon(0.0, 180.0)],
    )
    def test_kernel_matches_scalar_reference(
        self, small_engine: IlluminationEngine, sun: LatLon
    ) -> None:
        result = small_engine.compute(sun)
        rows, cols = result.classes.shape

        for row in range(rows):
            for col in range(cols):
                expected = small_engine.classify_pixel(sun, col, row)
                assert result.classes[row, col] == expected, (
                    f"Mismatch at pixel ({col}, {row}): "
                    f"kernel={result.classes[row, col]}, reference={expected}"
                )

    def test_kernel_matches_scalar_reference_with_step(self) -> None:
        engine = IlluminationEngine(Canvas(50, 50), step=3)
        result = engine.compute(_WASHINGTON)

        assert result.classes.shape == (17, 17)
        for row in range(17):
            for col in range(17):
                assert result.classes[row, col] == engine.classify_pixel(
                    _WASHINGTON, col * 3, row * 3
                )

    def test_output_dtype_and_codes(self, small_engine: IlluminationEngine) -> None:
        classes = small_engine.compute(_WASHINGTON).classes
        assert classes.dtype == np.int8
        assert set(np.unique(classes)) <= {-1, 0, 1}

    def test_direct_kernel_call(self) -> None:
        classes = classify_canvas(
            4, 4, 1, 2.0, 2.0, 2.0, 90.0, 0.0, _R_EARTH, _TERMINATOR_KM
        )
        # (0, 0) is a corner: r = sqrt(2) > 1
        assert classes[0, 0] == PixelClass.OFF_MAP
        # (2, 2) is the north pole, where the sun is
        assert classes[2, 2] == PixelClass.DAY


# ===================================================================
# GEOMETRY
# ===================================================================


class TestIlluminationGeometry:
    """Day/night regions for known sun positions."""

    def test_sun_at_north_pole_night_annulus(self, engine: IlluminationEngine) -> None:
        """Night starts just south of the equator (r ≈ 0.5006)."""
        sun = LatLon(90.0, 0.0)

        assert engine.classify_pixel(sun, 400, 400) == PixelClass.DAY
        assert engine.classify_pixel(sun, 400, 400 + 0.45 * 400) == PixelClass.DAY
        assert engine.classify_pixel(sun, 400, 400 + 0.60 * 400) == PixelClass.NIGHT
        assert engine.classify_pixel(sun, 400 - 0.99 * 400, 400) == PixelClass.NIGHT
        assert engine.classify_pixel(sun, 799, 0) == PixelClass.OFF_MAP

    def test_sun_at_north_pole_night_fraction(self, engine: IlluminationEngine) -> None:
        """Annulus 0.5006 < r ≤ 1 covers about 75% of the disk."""
        result = engine.compute(LatLon(90.0, 0.0))
        expected = 1.0 - 0.5006**2

        assert result.stats["night_fraction"] == pytest.approx(expected, abs=0.01)
        assert result.stats["off_map_fraction"] == pytest.approx(1.0 - np.pi / 4.0, abs=0.01)

    def test_stats_sum_to_one(self, small_engine: IlluminationEngine) -> None:
        stats = small_engine.compute(_WASHINGTON).stats
        assert stats["night_fraction"] + stats["day_fraction"] == pytest.approx(1.0)

    def test_off_map_pixels_never_shaded(self, engine: IlluminationEngine) -> None:
        result = engine.compute(_WASHINGTON)
        assert not np.any(result.night_mask & result.off_map_mask)

        rows, cols = np.mgrid[0:800, 0:800]
        r = np.hypot(cols - 400.0, rows - 400.0) / 400.0
        assert np.all(result.off_map_mask[r > 1.0 + 1e-9])
        assert not np.any(result.off_map_mask[r <= 1.0 - 1e-9])

    def test_shaded_pixels_coordinates(self) -> None:
        engine = IlluminationEngine(Canvas(40, 40), step=2)
        result = engine.compute(LatLon(90.0, 0.0))
        coords = result.shaded_pixels()

        assert coords.shape == (int(result.night_mask.sum()), 2)
        for x, y in coords:
            assert engine.classify_pixel(result.sun, x, y) == PixelClass.NIGHT

    def test_invalid_step_rejected(self, canvas: Canvas) -> None:
        with pytest.raises(ValueError):
            IlluminationEngine(canvas, step=0)


# ===================================================================
# SCENARIO
# ===================================================================


class TestWashingtonScenario:
    """Sun overhead at Washington State."""

    def test_antipode_is_shaded(self, engine: IlluminationEngine) -> None:
        d = _WASHINGTON.spherical_distance(_WASHINGTON_ANTIPODE)
        assert d >= _TERMINATOR_KM
        assert engine.is_shaded(_WASHINGTON, _WASHINGTON_ANTIPODE)

    def test_subsolar_point_is_lit(self, engine: IlluminationEngine) -> None:
        assert _WASHINGTON.spherical_distance(_WASHINGTON) == 0.0
        assert not engine.is_shaded(_WASHINGTON, _WASHINGTON)

    def test_pixels_at_markers(self, engine: IlluminationEngine) -> None:
        sun_px = engine.marker_position(_WASHINGTON)
        anti_px = engine.marker_position(_WASHINGTON_ANTIPODE)

        assert engine.classify_pixel(_WASHINGTON, *sun_px) == PixelClass.DAY
        assert engine.classify_pixel(_WASHINGTON, *anti_px) == PixelClass.NIGHT

    def test_marker_position(self, engine: IlluminationEngine) -> None:
        result = engine.compute(_WASHINGTON)
        planar = _WASHINGTON.to_projection()

        assert result.marker == pytest.approx(
            (400.0 + 400.0 * planar.x, 400.0 + 400.0 * planar.y)
        )
        assert engine.marker_position(LatLon(90.0, 0.0)) == (400.0, 400.0)

    def test_off_map_point_not_shaded(self, engine: IlluminationEngine) -> None:
        degenerate = LatLon.from_projection(PlanarPoint(1.5, 0.0))
        assert not engine.is_shaded(_WASHINGTON, degenerate)
