"""Horizon Bounded Context - Loaded elevation dataset.

An ElevationDataset owns everything a query needs: the read-only grid, its
geotransform and a projector built for the raster's own CRS. It is produced
by an ElevationRepository (see domain/terrain/repositories.py) and is safe to
query repeatedly; no query mutates it.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from domain.horizon.services import (
    DEFAULT_END_DIRECTION,
    DEFAULT_START_DIRECTION,
    ObserverPolicy,
    build_horizon_profile,
)
from domain.horizon.value_objects import HorizonProfile, HorizonResult
from domain.terrain.services import CoordinateProjector
from domain.terrain.value_objects import AffineTransform, ElevationGrid


class ElevationDataset:
    """Elevation grid plus georeferencing, queryable for horizon profiles.

    Parameters
    ----------
    grid: ElevationGrid
        Fully materialized band samples.
    transform: AffineTransform
        Raster geotransform in the raster's native CRS.
    crs: Any
        Raster CRS in any form pyproj accepts.
    source_name: str | None
        File name the data came from (name only, no directories).
    """

    def __init__(
        self,
        grid: ElevationGrid,
        transform: AffineTransform,
        crs: Any,
        source_name: str | None = None,
    ) -> None:
        self.grid = grid
        self.transform = transform
        self.projector = CoordinateProjector(transform, crs)
        self.source_name = source_name

    def __repr__(self) -> str:
        return (
            f"ElevationDataset(source={self.source_name!r}, "
            f"size={self.grid.width}x{self.grid.height}, "
            f"crs={self.projector.crs_string()!r})"
        )

    @property
    def crs(self) -> str:
        return self.projector.crs_string()

    def horizon_profile(
        self,
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
        """Full profile including the resolved observer."""
        return build_horizon_profile(
            self.grid,
            self.projector,
            latitude,
            longitude,
            start_direction,
            end_direction,
            observer_policy=observer_policy,
            wraparound=wraparound,
            max_workers=max_workers,
            on_result=on_result,
        )

    def calculate_horizon(
        self,
        latitude: float,
        longitude: float,
        start_direction: int = DEFAULT_START_DIRECTION,
        end_direction: int = DEFAULT_END_DIRECTION,
        **options: Any,
    ) -> list[HorizonResult]:
        """Horizon per integer direction, ascending from start_direction.

        Keyword options are passed through to horizon_profile.

        Example:
            >>> dataset = load_elevation_data("elevation.tif")
            >>> for point in dataset.calculate_horizon(40.3908, -111.6458):
            ...     print(point.direction, point.elevation_angle_degrees)
        """
        profile = self.horizon_profile(
            latitude, longitude, start_direction, end_direction, **options
        )
        return list(profile.results)
