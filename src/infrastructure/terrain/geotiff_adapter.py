"""GeoTIFF adapter for ElevationRepository.

Implements loading of DEM rasters from GeoTIFF using rasterio, keeping the
raster in its native CRS and returning a domain ElevationDataset.

Lifecycle (to avoid resource leaks):
1) Pre-flight checks on the path (existence, extension, symlink, size)
2) Enter rasterio.Env for GDAL/PROJ configuration
3) Open dataset with context manager (rasterio.open)
4) Read metadata and validate preconditions (CRS, geotransform, bands)
5) Read band 1 as float32; convert nodata -> np.nan
6) Exit contexts to release GDAL handles
7) Build ElevationGrid + projector and return ElevationDataset
"""

from __future__ import annotations

import logging
import math
from pathlib import Path

import numpy as np
import rasterio
from affine import Affine

from domain.horizon.dataset import ElevationDataset
from domain.terrain.errors import (
    InsufficientMemoryError,
    InvalidGeotransformError,
    InvalidRasterError,
    MissingCRSError,
)
from domain.terrain.value_objects import AffineTransform, ElevationGrid

# Module-level logger (reused across all calls)
logger = logging.getLogger(__name__)

# Only band 1 is ever read
_ELEVATION_BAND = 1

_ALLOWED_SUFFIXES = (".tif", ".tiff")

# Warn when more than this share of the grid is NoData
_NODATA_WARN_PCT = 80.0


def _validate_transform(transform: Affine) -> AffineTransform:
    """Check a rasterio transform and convert it to the domain type.

    rasterio reports an identity transform for files without georeferencing,
    which would silently place pixel (0, 0) at the projected origin.
    """
    if not isinstance(transform, Affine):
        raise InvalidGeotransformError("Missing affine transform")
    if transform.is_identity:
        raise InvalidGeotransformError(
            "Raster is not georeferenced (identity transform)"
        )
    if any(
        math.isnan(v) or math.isinf(v)
        for v in (
            transform.a,
            transform.b,
            transform.c,
            transform.d,
            transform.e,
            transform.f,
        )
    ):
        raise InvalidGeotransformError("Invalid (NaN/Inf) transform values")
    if transform.a == 0 or transform.e == 0:
        raise InvalidGeotransformError("Invalid transform scale (zero)")
    return AffineTransform.from_affine(transform)


class GeoTiffElevationAdapter:
    """Infrastructure adapter for loading DEMs from GeoTIFF files.

    Parameters
    ----------
    max_bytes: int | None
        Optional memory budget for the resulting float32 grid (height*width*4).
        If specified and exceeded by estimated size, the adapter raises
        InsufficientMemoryError before reading any pixels.
    """

    def __init__(self, max_bytes: int | None = None) -> None:
        self.max_bytes = max_bytes

    def _preflight(self, path: Path) -> None:
        # Check existence first to ensure missing files surface as FileNotFoundError
        if not path.exists():
            raise FileNotFoundError(str(path))

        if path.suffix.lower() not in _ALLOWED_SUFFIXES:
            raise InvalidRasterError(f"Unsupported file extension: {path.suffix}")

        try:
            if path.is_symlink():
                raise InvalidRasterError("Symlinks are not permitted")
            st = path.stat()
            if st.st_size == 0:
                raise InvalidRasterError("Empty file")
            # Compressed files can be far smaller than the grid, but a file
            # over twice the budget can never fit.
            if self.max_bytes is not None and st.st_size > self.max_bytes * 2:
                raise InsufficientMemoryError(
                    f"File size {st.st_size}B exceeds 2x memory budget {self.max_bytes}B"
                )
        except OSError as e:
            # Log only filename, errno, and strerror to avoid leaking absolute paths
            logger.error(
                "Failed to stat %s (errno=%s, strerror=%s)",
                path.name,
                getattr(e, "errno", "unknown"),
                getattr(e, "strerror", "unknown"),
            )
            raise

    def load_dem(self, file_path: Path | str) -> ElevationDataset:
        """Load DEM from GeoTIFF and return a queryable ElevationDataset.

        Raises:
            FileNotFoundError: If the file does not exist
            PermissionError: If the file cannot be opened (name only in message)
            InvalidRasterError: Wrong extension, empty, corrupted or bandless
            MissingCRSError: Raster has no spatial reference
            InvalidProjectionError: Spatial reference unusable by pyproj
            InvalidGeotransformError: Missing, non-finite or zero-scale transform
            InsufficientMemoryError: Grid would exceed max_bytes
        """
        path = Path(file_path)
        self._preflight(path)

        try:
            with rasterio.Env():
                with rasterio.open(path) as src:
                    if src.count == 0:
                        raise InvalidRasterError("Empty or bandless file")
                    if src.count > 1:
                        logger.warning(
                            "DEM %s: %d bands present, reading band %d only",
                            path.name,
                            src.count,
                            _ELEVATION_BAND,
                        )
                    transform = _validate_transform(src.transform)
                    if src.crs is None:
                        raise MissingCRSError("Raster has no CRS defined")

                    crs_wkt = src.crs.to_wkt()
                    src_crs_str = src.crs.to_string()

                    # Memory budget check BEFORE allocation
                    if self.max_bytes is not None:
                        est_bytes = src.width * src.height * 4  # float32 = 4 bytes
                        if est_bytes > self.max_bytes:
                            raise InsufficientMemoryError(
                                f"Estimated grid size {est_bytes}B "
                                f"exceeds budget {self.max_bytes}B"
                            )

                    data = src.read(_ELEVATION_BAND, masked=True, out_dtype="float32")

                    # Convert nodata -> NaN: handle both masked arrays and explicit nodata
                    if hasattr(data, "mask") and np.any(data.mask):
                        data = np.where(data.mask, np.float32(np.nan), data.data)
                    elif src.nodata is not None:
                        # Exact equality: GeoTIFF stores nodata as an exact value
                        data = np.where(data == src.nodata, np.float32(np.nan), data)
                    data = np.asarray(data, dtype=np.float32)

        except PermissionError as e:
            # Re-raise with filename only to avoid leaking full path in logs
            raise PermissionError(path.name) from e
        except (rasterio.errors.RasterioIOError, rasterio.errors.RasterioError) as e:
            raise InvalidRasterError(f"Corrupted or invalid raster: {e}") from e
        except MemoryError as e:
            raise InsufficientMemoryError("Insufficient memory to load raster") from e

        grid = ElevationGrid(data=data, pixel_size_m=transform.pixel_size_m)
        dataset = ElevationDataset(grid, transform, crs_wkt, source_name=path.name)

        if transform.has_rotation:
            logger.warning(
                "DEM %s: rotated geotransform; rotation terms are ignored", path.name
            )
        nodata_pct = grid.nodata_ratio() * 100.0
        if nodata_pct > _NODATA_WARN_PCT:
            logger.warning(
                "DEM %s: %.1f%% NoData pixels detected", path.name, nodata_pct
            )
        logger.info("DEM %s: native CRS %s", path.name, src_crs_str)
        logger.debug("DEM %s: Loaded %dx%d grid", path.name, grid.width, grid.height)
        return dataset


def load_elevation_data(
    file_path: Path | str, max_bytes: int | None = None
) -> ElevationDataset:
    """Load a GeoTIFF DEM with the default adapter."""
    return GeoTiffElevationAdapter(max_bytes=max_bytes).load_dem(file_path)
