"""Terrain Bounded Context - Value Objects.

Immutable data structures representing georeferencing and elevation data.
All validation occurs at construction time via Pydantic.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------------------------------------------------------------------------
# Numeric Constants
# ---------------------------------------------------------------------------
# Elevation reported for any cell that has no data (NaN) or lies outside the buffer
MISSING_ELEVATION_M = 0.0


class AffineTransform(BaseModel):
    """Six-term geotransform in GDAL order (Value Object).

    Maps projected coordinates to fractional pixel indices and back:
        projX = origin_x + px * pixel_width
        projY = origin_y + py * pixel_height

    Rotation terms are carried for completeness but NOT applied by
    to_pixel / pixel_to_projected. North-up rasters have both set to zero.

    Invariants:
        AT-1: all six terms finite
        AT-2: pixel_width != 0 and pixel_height != 0
    """

    origin_x: float
    pixel_width: float
    rotation_x: float = 0.0
    origin_y: float
    rotation_y: float = 0.0
    pixel_height: float

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_terms(self) -> "AffineTransform":
        for name, value in self.to_gdal_dict().items():
            if math.isnan(value) or math.isinf(value):
                raise ValueError(f"Transform term {name} is not finite: {value}")
        if self.pixel_width == 0 or self.pixel_height == 0:
            raise ValueError(
                f"Pixel size must be non-zero: ({self.pixel_width}, {self.pixel_height})"
            )
        return self

    @classmethod
    def from_gdal(cls, terms: Sequence[float]) -> "AffineTransform":
        """Build from a GDAL geotransform tuple (c, a, b, f, d, e)."""
        if len(terms) != 6:
            raise ValueError(f"GDAL geotransform needs 6 terms, got {len(terms)}")
        origin_x, pixel_width, rotation_x, origin_y, rotation_y, pixel_height = terms
        return cls(
            origin_x=float(origin_x),
            pixel_width=float(pixel_width),
            rotation_x=float(rotation_x),
            origin_y=float(origin_y),
            rotation_y=float(rotation_y),
            pixel_height=float(pixel_height),
        )

    @classmethod
    def from_affine(cls, transform: Any) -> "AffineTransform":
        """Build from an ``affine.Affine`` (the type rasterio exposes)."""
        return cls.from_gdal(transform.to_gdal())

    def to_gdal(self) -> tuple[float, float, float, float, float, float]:
        return (
            self.origin_x,
            self.pixel_width,
            self.rotation_x,
            self.origin_y,
            self.rotation_y,
            self.pixel_height,
        )

    def to_gdal_dict(self) -> dict[str, float]:
        return dict(
            zip(
                (
                    "origin_x",
                    "pixel_width",
                    "rotation_x",
                    "origin_y",
                    "rotation_y",
                    "pixel_height",
                ),
                self.to_gdal(),
            )
        )

    @property
    def has_rotation(self) -> bool:
        return self.rotation_x != 0 or self.rotation_y != 0

    @property
    def pixel_size_m(self) -> float:
        """Ground size of one pixel, taken from the x scale (square pixels assumed)."""
        return abs(self.pixel_width)

    def to_pixel(self, proj_x: float, proj_y: float) -> "PixelCoordinate":
        """Projected coordinates -> fractional pixel coordinates (rotation ignored)."""
        return PixelCoordinate(
            x=(proj_x - self.origin_x) / self.pixel_width,
            y=(proj_y - self.origin_y) / self.pixel_height,
        )

    def pixel_to_projected(self, pixel_x: float, pixel_y: float) -> tuple[float, float]:
        """Inverse of to_pixel."""
        return (
            self.origin_x + pixel_x * self.pixel_width,
            self.origin_y + pixel_y * self.pixel_height,
        )


class PixelCoordinate(BaseModel):
    """Fractional (x, y) position in grid space (Value Object).

    May hold non-finite values when a coordinate could not be projected
    (e.g. latitude beyond the poles); such positions are outside every grid.
    """

    x: float
    y: float

    model_config = ConfigDict(frozen=True)

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def to_index(self) -> tuple[int, int] | None:
        """Truncate to the containing sample index, or None if not finite."""
        if not self.is_finite:
            return None
        return (math.floor(self.x), math.floor(self.y))


class ElevationGrid(BaseModel):
    """Immutable elevation buffer with pixel size (Value Object).

    The data array is made truly immutable (read-only) at construction time.
    Attempts to modify the array after construction will raise ValueError.

    Rows increase southward (row 0 = north edge), columns increase eastward.
    """

    data: NDArray[np.float32]  # 2D float32 array (height x width), read-only
    pixel_size_m: float = Field(gt=0)  # |pixel_width| in CRS units (meters)

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @model_validator(mode="after")
    def validate_grid(self) -> "ElevationGrid":
        data = np.asarray(self.data)
        if data.ndim != 2:
            raise ValueError(f"Data must be 2D, got {data.ndim}D")
        if data.shape[0] == 0 or data.shape[1] == 0:
            raise ValueError(f"Data cannot be empty: {data.shape}")

        # Owned, contiguous float32 copy; caller arrays are never touched.
        immutable = np.array(data, dtype=np.float32, copy=True, order="C")
        immutable.flags.writeable = False
        object.__setattr__(self, "data", immutable)

        return self

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def diagonal_px(self) -> float:
        return math.hypot(self.width, self.height)

    def in_bounds(self, pixel_x: int, pixel_y: int) -> bool:
        """True when (pixel_x, pixel_y) indexes a stored sample."""
        return 0 <= pixel_x < self.width and 0 <= pixel_y < self.height

    def sample_at(self, pixel_x: int, pixel_y: int) -> float:
        """Return elevation at an integer index.

        Missing samples (NoData cells and indices outside the buffer) read as
        MISSING_ELEVATION_M. Negative indices never wrap around.
        """
        if not self.in_bounds(pixel_x, pixel_y):
            return MISSING_ELEVATION_M
        value = float(self.data[pixel_y, pixel_x])
        if math.isnan(value):
            return MISSING_ELEVATION_M
        return value

    def samples_at(
        self, pixel_xs: NDArray[np.int64], pixel_ys: NDArray[np.int64]
    ) -> NDArray[np.float64]:
        """Vectorized sample_at for index arrays already known to be in bounds.

        NoData cells read as MISSING_ELEVATION_M, same as sample_at.
        """
        values = self.data[pixel_ys, pixel_xs].astype(np.float64)
        return np.nan_to_num(values, nan=MISSING_ELEVATION_M, copy=False)

    def nodata_ratio(self) -> float:
        """Fraction of cells that are NoData (0.0 to 1.0)."""
        return float(np.isnan(self.data).mean())
