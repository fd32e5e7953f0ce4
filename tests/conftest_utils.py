"""Shared test helpers.

Builders for in-memory grids and projectors so domain tests never touch the
filesystem. Used by tests/terrain, tests/horizon and tests/cli.
"""

from __future__ import annotations

import numpy as np

from domain.horizon.dataset import ElevationDataset
from domain.terrain.services import CoordinateProjector
from domain.terrain.value_objects import AffineTransform, ElevationGrid
from shared.fixtures_expected import (
    FLAT_ELEVATION_M,
    GRID_SIZE_PX,
    PIXEL_SIZE_M,
    UTM12N_ORIGIN,
)

UTM12N_EPSG = "EPSG:26912"


def north_up_transform(
    origin: tuple[float, float] = UTM12N_ORIGIN, pixel_size: float = PIXEL_SIZE_M
) -> AffineTransform:
    return AffineTransform(
        origin_x=origin[0],
        pixel_width=pixel_size,
        origin_y=origin[1],
        pixel_height=-pixel_size,
    )


def flat_data(
    size: int = GRID_SIZE_PX, elevation: float = FLAT_ELEVATION_M
) -> np.ndarray:
    return np.full((size, size), elevation, dtype=np.float32)


def make_grid(
    data: np.ndarray | None = None, pixel_size: float = PIXEL_SIZE_M
) -> ElevationGrid:
    return ElevationGrid(
        data=flat_data() if data is None else data, pixel_size_m=pixel_size
    )


def make_projector(
    transform: AffineTransform | None = None, crs: str = UTM12N_EPSG
) -> CoordinateProjector:
    return CoordinateProjector(transform or north_up_transform(), crs)


def make_dataset(
    data: np.ndarray | None = None, crs: str = UTM12N_EPSG
) -> ElevationDataset:
    grid = make_grid(data)
    return ElevationDataset(grid, north_up_transform(), crs, source_name="memory")


def pixel_center_latlon(
    projector: CoordinateProjector, pixel_x: int, pixel_y: int
) -> tuple[float, float]:
    """(latitude, longitude) of the center of an integer pixel."""
    return projector.to_geographic(pixel_x + 0.5, pixel_y + 0.5)
