"""Horizon Bounded Context - Domain Services.

Pure domain logic for horizon computation by ray marching.
NO I/O operations - grids arrive fully materialized from the loader.

Compass convention: 0 = north, angles increase clockwise. Pixel rows grow
southward, so a northward step is a negative row delta.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from enum import Enum

import numpy as np
from numpy.typing import NDArray

from domain.horizon.errors import InvalidDirectionError, ObserverOutOfBoundsError
from domain.horizon.value_objects import (
    HorizonProfile,
    HorizonResult,
    Observer,
    TerrainSample,
)
from domain.terrain.services import CoordinateProjector
from domain.terrain.value_objects import (
    MISSING_ELEVATION_M,
    ElevationGrid,
    PixelCoordinate,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
FULL_CIRCLE_DEG = 360
DEFAULT_START_DIRECTION = 0
DEFAULT_END_DIRECTION = 359

# Extra steps past the grid diagonal; guarantees the march sees its exit
_STEP_MARGIN = 2


class ObserverPolicy(str, Enum):
    """What to do when the observer itself falls outside the grid."""

    # Base elevation silently becomes the missing-sample value (0 m)
    DEFAULT_ZERO = "default_zero"
    # Raise ObserverOutOfBoundsError
    STRICT = "strict"


# ---------------------------------------------------------------------------
# Direction Helpers
# ---------------------------------------------------------------------------
def direction_unit_vector(direction: int) -> tuple[float, float]:
    """Return (step_x, step_y) for one pixel of travel along a compass bearing."""
    rad = math.radians(direction)
    return (math.sin(rad), -math.cos(rad))


def direction_range(start: int, end: int, wraparound: bool = False) -> list[int]:
    """Integer directions from start to end inclusive.

    Without wraparound, start > end is an empty range. With wraparound the
    walk begins at start modulo 360 and advances clockwise to end, so
    350 -> 10 walks 350..359 then 0..10. A span of 359 degrees or more is
    one full circle beginning at start.

    Raises:
        InvalidDirectionError: If a bound is not an integer
    """
    for name, value in (("start_direction", start), ("end_direction", end)):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise InvalidDirectionError(
                f"{name} must be an integer number of degrees, got {value!r}"
            )
    start, end = int(start), int(end)

    if not wraparound:
        return list(range(start, end + 1))

    span = end - start
    if span >= FULL_CIRCLE_DEG - 1:
        count = FULL_CIRCLE_DEG
    else:
        count = span % FULL_CIRCLE_DEG + 1
    return [(start + i) % FULL_CIRCLE_DEG for i in range(count)]


# ---------------------------------------------------------------------------
# Observer Resolution
# ---------------------------------------------------------------------------
def resolve_observer(
    grid: ElevationGrid,
    pixel: PixelCoordinate,
    policy: ObserverPolicy = ObserverPolicy.DEFAULT_ZERO,
    latitude: float = math.nan,
    longitude: float = math.nan,
) -> Observer:
    """Turn a projected pixel position into an Observer.

    The base elevation is read at floor(x), floor(y) with no bounds check
    under DEFAULT_ZERO, so an observer off the grid stands at the
    missing-sample elevation and every angle in the profile is measured from
    there.

    Raises:
        ObserverOutOfBoundsError: Under STRICT, if the observer is off the grid
    """
    index = pixel.to_index()
    in_grid = index is not None and grid.in_bounds(*index)

    if not in_grid:
        if policy is ObserverPolicy.STRICT:
            raise ObserverOutOfBoundsError(
                latitude, longitude, (pixel.x, pixel.y), (grid.width, grid.height)
            )
        logger.warning(
            "Observer at pixel (%.2f, %.2f) is outside %dx%d grid; "
            "base elevation defaults to missing-sample value",
            pixel.x,
            pixel.y,
            grid.width,
            grid.height,
        )

    if index is None:
        base_elevation = MISSING_ELEVATION_M
    else:
        base_elevation = grid.sample_at(*index)

    return Observer(
        pixel_x=pixel.x,
        pixel_y=pixel.y,
        base_elevation_m=base_elevation,
        in_grid=in_grid,
    )


# ---------------------------------------------------------------------------
# Ray Marching
# ---------------------------------------------------------------------------
def _march_indices(
    grid: ElevationGrid,
    observer_x: float,
    observer_y: float,
    step_x: float,
    step_y: float,
) -> tuple[NDArray[np.float64], NDArray[np.int64], NDArray[np.int64]]:
    """Steps and pixel indices visited before the ray first leaves the grid.

    Evaluates every candidate step at once, then keeps the prefix up to the
    first out-of-bounds pixel. Later re-entries are never visited: the first
    exit ends the march.
    """
    empty = np.empty(0, dtype=np.int64)
    if not (math.isfinite(observer_x) and math.isfinite(observer_y)):
        return np.empty(0, dtype=np.float64), empty, empty

    max_steps = int(math.ceil(grid.diagonal_px)) + _STEP_MARGIN
    steps = np.arange(1, max_steps + 1, dtype=np.float64)
    xs = np.floor(observer_x + step_x * steps)
    ys = np.floor(observer_y + step_y * steps)

    inside = (xs >= 0) & (ys >= 0) & (xs < grid.width) & (ys < grid.height)
    count = max_steps if inside.all() else int(np.argmin(inside))

    return (
        steps[:count],
        xs[:count].astype(np.int64),
        ys[:count].astype(np.int64),
    )


def march_direction(
    grid: ElevationGrid,
    observer_x: float,
    observer_y: float,
    direction: int,
) -> tuple[TerrainSample, ...]:
    """Return every sample visited along one compass ray, nearest first."""
    steps, xs, ys = _march_indices(
        grid, observer_x, observer_y, *direction_unit_vector(direction)
    )
    elevations = grid.samples_at(xs, ys)
    distances = steps * grid.pixel_size_m
    return tuple(
        TerrainSample(elevation_m=float(e), distance_m=float(d))
        for e, d in zip(elevations, distances)
    )


def scan_direction(
    grid: ElevationGrid,
    observer_x: float,
    observer_y: float,
    direction: int,
    base_elevation: float,
    unit_vector: tuple[float, float] | None = None,
) -> HorizonResult:
    """Find the horizon along one compass ray.

    Marches one pixel per step from the observer until the ray leaves the
    grid. The horizon is the sample with the steepest elevation angle; on
    equal angles the nearest one wins. It is neither the first obstruction
    nor the farthest sample.

    Args:
        grid: Elevation grid
        observer_x: Observer fractional pixel column
        observer_y: Observer fractional pixel row
        direction: Compass bearing in integer degrees
        base_elevation: Elevation angles are measured from this height (m)
        unit_vector: Precomputed direction_unit_vector(direction), if any

    Returns:
        HorizonResult. A ray with no in-bounds sample reports angle 0 and
        distance 0, indistinguishable from a flat horizon by angle alone;
        check has_horizon to tell them apart.
    """
    step_x, step_y = unit_vector or direction_unit_vector(direction)
    steps, xs, ys = _march_indices(grid, observer_x, observer_y, step_x, step_y)

    if steps.size == 0:
        return HorizonResult(
            direction=direction, elevation_angle_degrees=0.0, distance_km=0.0
        )

    elevations = grid.samples_at(xs, ys)
    distances = steps * grid.pixel_size_m
    angles = np.degrees(np.arctan2(elevations - base_elevation, distances))

    # argmax returns the first maximum: strict ">" semantics, nearest wins ties
    best = int(np.argmax(angles))

    return HorizonResult(
        direction=direction,
        elevation_angle_degrees=float(angles[best]),
        distance_km=float(distances[best]) / 1000.0,
    )


# ---------------------------------------------------------------------------
# Main Service: build_horizon_profile
# ---------------------------------------------------------------------------
def scan_directions(
    grid: ElevationGrid,
    observer: Observer,
    directions: Sequence[int],
    max_workers: int | None = None,
    on_result: Callable[[HorizonResult], None] | None = None,
) -> tuple[HorizonResult, ...]:
    """Scan each direction independently; output follows `directions` order.

    With max_workers > 1 the scans fan out to a thread pool. Results are
    identical to the sequential path. on_result, if given, is called with each
    result in output order as soon as it is available.
    """
    vectors = {d: direction_unit_vector(d) for d in set(directions)}

    def _scan(direction: int) -> HorizonResult:
        return scan_direction(
            grid,
            observer.pixel_x,
            observer.pixel_y,
            direction,
            observer.base_elevation_m,
            unit_vector=vectors[direction],
        )

    def _collect(results: Iterable[HorizonResult]) -> tuple[HorizonResult, ...]:
        collected = []
        for result in results:
            if on_result is not None:
                on_result(result)
            collected.append(result)
        return tuple(collected)

    if max_workers is not None and max_workers > 1 and len(directions) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            # Executor.map yields in submission order
            return _collect(pool.map(_scan, directions))

    return _collect(_scan(d) for d in directions)


def build_horizon_profile(
    grid: ElevationGrid,
    projector: CoordinateProjector,
    latitude: float,
    longitude: float,
    start_direction: int = DEFAULT_START_DIRECTION,
    end_direction: int = DEFAULT_END_DIRECTION,
    *,
    observer_policy: ObserverPolicy = ObserverPolicy.DEFAULT_ZERO,
    wraparound: bool = False,
    max_workers: int | None = None,
    on_result: Callable[[HorizonResult], None] | None = None,
) -> HorizonProfile:
    """Compute the horizon in every integer direction of a range.

    The observer is projected and resolved once, then every direction is
    scanned against the same read-only grid.

    Args:
        grid: Elevation grid
        projector: Projector for the grid's CRS and transform
        latitude: Observer latitude, WGS84 decimal degrees (not range-checked)
        longitude: Observer longitude, WGS84 decimal degrees (not range-checked)
        start_direction: First compass direction, inclusive
        end_direction: Last compass direction, inclusive
        observer_policy: Behavior when the observer is off the grid
        wraparound: Let start > end walk through 359 -> 0
        max_workers: Thread fan-out across directions (None/1 = sequential)
        on_result: Called with each HorizonResult in output order as it completes

    Returns:
        HorizonProfile with one HorizonResult per direction. Empty when
        start_direction > end_direction and wraparound is off.

    Raises:
        InvalidDirectionError: If a direction bound is not an integer
        ObserverOutOfBoundsError: Under ObserverPolicy.STRICT only

    Example:
        >>> dataset = load_elevation_data("terrain.tif")
        >>> profile = build_horizon_profile(
        ...     dataset.grid, dataset.projector, 40.3908, -111.6458
        ... )
        >>> len(profile.results)
        360
    """
    directions = direction_range(start_direction, end_direction, wraparound)

    pixel = projector.project(latitude, longitude)
    observer = resolve_observer(grid, pixel, observer_policy, latitude, longitude)
    logger.debug(
        "Observer (%.6f, %.6f) -> pixel (%.3f, %.3f), base %.2f m, %d directions",
        latitude,
        longitude,
        observer.pixel_x,
        observer.pixel_y,
        observer.base_elevation_m,
        len(directions),
    )

    results = scan_directions(
        grid, observer, directions, max_workers=max_workers, on_result=on_result
    )

    return HorizonProfile(
        latitude=latitude,
        longitude=longitude,
        observer=observer,
        start_direction=int(start_direction),
        end_direction=int(end_direction),
        wraparound=wraparound,
        results=results,
    )

