"""Tests for build_horizon_profile and observer resolution."""

from __future__ import annotations

import logging
import math

import numpy as np
import pytest
from pydantic import ValidationError

from domain.horizon import services
from domain.horizon.errors import InvalidDirectionError, ObserverOutOfBoundsError
from domain.horizon.services import (
    ObserverPolicy,
    build_horizon_profile,
    direction_range,
    resolve_observer,
)
from domain.horizon.value_objects import HorizonResult
from domain.terrain.value_objects import MISSING_ELEVATION_M, PixelCoordinate
from shared.fixtures_expected import (
    FLAT_ELEVATION_M,
    PEAK_HEIGHT_M,
    PEAK_OFFSET_PX,
    PIXEL_SIZE_M,
)
from tests.conftest_utils import (
    flat_data,
    make_grid,
    make_projector,
    pixel_center_latlon,
)


@pytest.fixture
def projector():
    return make_projector()


@pytest.fixture
def center_latlon(projector, center_px):
    return pixel_center_latlon(projector, center_px, center_px)


@pytest.fixture
def peak_grid(center_px):
    data = flat_data()
    data[center_px - PEAK_OFFSET_PX, center_px] = FLAT_ELEVATION_M + PEAK_HEIGHT_M
    return make_grid(data)


# ===========================================================================
# Direction ranges
# ===========================================================================
class TestDirectionRange:
    def test_full_circle(self):
        assert direction_range(0, 359) == list(range(360))

    def test_single_direction(self):
        assert direction_range(47, 47) == [47]

    def test_start_after_end_is_empty(self):
        assert direction_range(350, 10) == []

    def test_wraparound(self):
        assert direction_range(350, 10, wraparound=True) == (
            list(range(350, 360)) + list(range(0, 11))
        )

    def test_wraparound_normalizes_bounds(self):
        assert direction_range(-10, 10, wraparound=True) == (
            list(range(350, 360)) + list(range(0, 11))
        )

    @pytest.mark.parametrize("start,end", [(0, 360), (10, 370), (-10, 370), (5, 4)])
    def test_wraparound_full_circle_spans(self, start, end):
        directions = direction_range(start, end, wraparound=True)
        assert len(directions) == 360
        assert directions[0] == start % 360
        assert sorted(directions) == list(range(360))

    def test_wraparound_start_after_end_within_circle(self):
        assert direction_range(358, 1, wraparound=True) == [358, 359, 0, 1]

    def test_wraparound_ordinary_range_unchanged(self):
        assert direction_range(47, 111, wraparound=True) == list(range(47, 112))

    def test_numpy_integers_accepted(self):
        assert direction_range(np.int64(1), np.int32(3)) == [1, 2, 3]

    @pytest.mark.parametrize("bad", [1.5, "10", None, True])
    def test_non_integer_rejected(self, bad):
        with pytest.raises(InvalidDirectionError):
            direction_range(bad, 10)


# ===========================================================================
# Observer resolution
# ===========================================================================
class TestResolveObserver:
    def test_inside_grid_reads_sample_under_observer(self, peak_grid, center_px):
        observer = resolve_observer(
            peak_grid, PixelCoordinate(x=center_px + 0.7, y=center_px - PEAK_OFFSET_PX + 0.2)
        )
        assert observer.in_grid
        assert observer.base_elevation_m == FLAT_ELEVATION_M + PEAK_HEIGHT_M

    def test_outside_grid_defaults_to_missing_elevation(self, caplog):
        with caplog.at_level(logging.WARNING):
            observer = resolve_observer(make_grid(), PixelCoordinate(x=-3.0, y=5.0))
        assert not observer.in_grid
        assert observer.base_elevation_m == MISSING_ELEVATION_M
        assert "outside" in caplog.text

    def test_non_finite_position_defaults_to_missing_elevation(self):
        observer = resolve_observer(make_grid(), PixelCoordinate(x=math.inf, y=5.0))
        assert not observer.in_grid
        assert observer.base_elevation_m == MISSING_ELEVATION_M

    def test_strict_policy_raises(self):
        with pytest.raises(ObserverOutOfBoundsError) as exc_info:
            resolve_observer(
                make_grid(),
                PixelCoordinate(x=100.0, y=5.0),
                ObserverPolicy.STRICT,
                latitude=40.0,
                longitude=-111.0,
            )
        assert exc_info.value.shape == (41, 41)
        assert "outside grid" in str(exc_info.value)

    def test_strict_policy_allows_inside(self):
        observer = resolve_observer(
            make_grid(), PixelCoordinate(x=1.0, y=1.0), ObserverPolicy.STRICT
        )
        assert observer.base_elevation_m == FLAT_ELEVATION_M


# ===========================================================================
# Profile construction
# ===========================================================================
def test_default_range_gives_360_ordered_results(projector, center_latlon):
    profile = build_horizon_profile(make_grid(), projector, *center_latlon)

    assert len(profile) == 360
    assert profile.directions() == tuple(range(360))
    assert profile.observer.in_grid


def test_sub_range_inclusive(projector, center_latlon):
    profile = build_horizon_profile(make_grid(), projector, *center_latlon, 47, 111)
    assert profile.directions() == tuple(range(47, 112))
    assert len(profile.results) == 111 - 47 + 1


def test_start_after_end_is_empty(projector, center_latlon):
    profile = build_horizon_profile(make_grid(), projector, *center_latlon, 350, 10)
    assert profile.results == ()
    assert profile.max_result() is None


def test_wraparound_opt_in(projector, center_latlon):
    profile = build_horizon_profile(
        make_grid(), projector, *center_latlon, 350, 10, wraparound=True
    )
    assert profile.directions() == tuple(range(350, 360)) + tuple(range(0, 11))


def test_flat_grid_profile(projector, center_latlon):
    profile = build_horizon_profile(make_grid(), projector, *center_latlon)

    assert all(r.elevation_angle_degrees == 0.0 for r in profile.results)
    assert all(r.distance_km == pytest.approx(PIXEL_SIZE_M / 1000) for r in profile.results)
    assert profile.observer.base_elevation_m == FLAT_ELEVATION_M


def test_peak_due_north(projector, center_latlon, peak_grid):
    profile = build_horizon_profile(peak_grid, projector, *center_latlon)

    north = profile.results[0]
    distance_m = PEAK_OFFSET_PX * PIXEL_SIZE_M
    assert north.direction == 0
    assert north.elevation_angle_degrees == pytest.approx(
        math.degrees(math.atan2(PEAK_HEIGHT_M, distance_m))
    )
    assert north.distance_km == pytest.approx(distance_m / 1000)
    assert profile.max_result() == north
    assert profile.results[180].elevation_angle_degrees == 0.0


def test_repeated_queries_are_identical(projector, center_latlon, peak_grid):
    first = build_horizon_profile(peak_grid, projector, *center_latlon)
    second = build_horizon_profile(peak_grid, projector, *center_latlon)
    assert first.results == second.results
    assert first.angles() == second.angles()


def test_thread_fan_out_matches_sequential(projector, center_latlon):
    rng = np.random.default_rng(3)
    grid = make_grid((rng.random((41, 41)) * 500 + 1000).astype(np.float32))

    sequential = build_horizon_profile(grid, projector, *center_latlon)
    parallel = build_horizon_profile(grid, projector, *center_latlon, max_workers=4)

    assert parallel.results == sequential.results


@pytest.mark.parametrize("workers", [None, 4])
def test_on_result_sees_each_result_in_order(projector, center_latlon, workers):
    seen = []

    profile = build_horizon_profile(
        make_grid(),
        projector,
        *center_latlon,
        350,
        10,
        wraparound=True,
        max_workers=workers,
        on_result=seen.append,
    )

    assert tuple(seen) == profile.results
    assert [r.direction for r in seen] == list(range(350, 360)) + list(range(0, 11))


def test_on_result_called_before_later_directions_are_scanned(
    projector, center_latlon, monkeypatch
):
    events = []
    real_scan = services.scan_direction

    def recording_scan(grid, ox, oy, direction, *args, **kwargs):
        events.append(("scan", direction))
        return real_scan(grid, ox, oy, direction, *args, **kwargs)

    monkeypatch.setattr(services, "scan_direction", recording_scan)
    build_horizon_profile(
        make_grid(),
        projector,
        *center_latlon,
        0,
        2,
        on_result=lambda r: events.append(("report", r.direction)),
    )

    assert events == [
        ("scan", 0),
        ("report", 0),
        ("scan", 1),
        ("report", 1),
        ("scan", 2),
        ("report", 2),
    ]


def test_observer_outside_grid_degrades_not_fails(projector):
    # 100 px west of the grid; every ray exits at step 1
    lat, lon = projector.to_geographic(-100.5, 20.5)

    profile = build_horizon_profile(make_grid(), projector, lat, lon)

    assert len(profile) == 360
    assert not profile.observer.in_grid
    assert profile.observer.base_elevation_m == MISSING_ELEVATION_M
    assert all(r.distance_km == 0.0 for r in profile.results)
    assert all(r.elevation_angle_degrees == 0.0 for r in profile.results)


def test_observer_just_off_grid_measures_from_zero_base(projector):
    # Half a pixel west of column 0: eastward rays enter the grid immediately
    lat, lon = projector.to_geographic(-0.5, 20.5)

    profile = build_horizon_profile(make_grid(), projector, lat, lon, 90, 90)

    east = profile.results[0]
    assert east.elevation_angle_degrees == pytest.approx(
        math.degrees(math.atan2(FLAT_ELEVATION_M, PIXEL_SIZE_M)), rel=1e-6
    )


def test_strict_observer_policy(projector):
    lat, lon = projector.to_geographic(-100.5, 20.5)
    with pytest.raises(ObserverOutOfBoundsError):
        build_horizon_profile(
            make_grid(), projector, lat, lon, observer_policy=ObserverPolicy.STRICT
        )


def test_profile_json_uses_camel_case_keys(projector, center_latlon):
    profile = build_horizon_profile(make_grid(), projector, *center_latlon, 0, 1)
    assert profile.to_json_list() == [
        {"direction": 0, "elevationAngleDegrees": 0.0, "distanceKm": 0.03},
        {"direction": 1, "elevationAngleDegrees": 0.0, "distanceKm": 0.03},
    ]


# ===========================================================================
# HorizonResult
# ===========================================================================
class TestHorizonResult:
    def test_empty_ray_result(self):
        result = HorizonResult(direction=0, elevation_angle_degrees=0.0, distance_km=0.0)
        assert not result.has_horizon

    def test_zero_distance_with_angle_rejected(self):
        with pytest.raises(ValidationError, match="distance 0"):
            HorizonResult(direction=0, elevation_angle_degrees=12.5, distance_km=0.0)

    def test_negative_distance_rejected(self):
        with pytest.raises(ValidationError):
            HorizonResult(direction=0, elevation_angle_degrees=0.0, distance_km=-0.03)

    def test_negative_angle_at_distance_allowed(self):
        result = HorizonResult(direction=90, elevation_angle_degrees=-3.0, distance_km=0.03)
        assert result.has_horizon
