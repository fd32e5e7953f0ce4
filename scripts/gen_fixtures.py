#!/usr/bin/env python3
"""Generate synthetic GeoTIFF fixtures for DEM loading and horizon tests.

Fixtures are minimal synthetic rasters - not real terrain data. The test
suite calls generate_fixtures() into a session temp directory; running the
script writes the same files to tests/fixtures/ for manual inspection.

Usage:
    python scripts/gen_fixtures.py [output_dir]

Requirements:
    pip install rasterio numpy

Dependencies:
    This script imports from shared/fixtures_expected.py (not tests/) to avoid
    circular dependencies between scripts and tests packages.
"""

from __future__ import annotations

import struct
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import numpy as np
from numpy.typing import NDArray

import rasterio
from affine import Affine
from rasterio.crs import CRS
from shared.fixtures_expected import (
    EXPECTED_FIXTURE_COUNT,
    EXPECTED_FIXTURES,
    FLAT_ELEVATION_M,
    GRID_SIZE_PX,
    PEAK_HEIGHT_M,
    PEAK_OFFSET_PX,
    PIXEL_SIZE_M,
    UTM11N_ORIGIN,
    UTM12N_ORIGIN,
)

# Output directory
FIXTURES_DIR = Path(__file__).parent.parent / "tests" / "fixtures"

# =============================================================================
# Projections
# =============================================================================
# Two different UTM zones so tests prove the CRS is read from each file.
UTM12N_NAD83 = CRS.from_epsg(26912)  # Utah Valley area
UTM11N_WGS84 = CRS.from_epsg(32611)

NODATA = -9999.0


def _north_up(origin: tuple[float, float], pixel_size: float = PIXEL_SIZE_M) -> Affine:
    return Affine.translation(*origin) * Affine.scale(pixel_size, -pixel_size)


def _flat(value: float = FLAT_ELEVATION_M) -> NDArray[np.float32]:
    return np.full((GRID_SIZE_PX, GRID_SIZE_PX), value, dtype=np.float32)


# =============================================================================
# Helper: write_raster
# =============================================================================
def write_raster(
    path: Path,
    data: NDArray[Any],
    transform: Affine | None,
    crs: CRS | None = None,
    dtype: str | None = None,
    nodata: float | None = None,
) -> Path:
    """Write a GeoTIFF using rasterio.

    Handles both single-band (2D array) and multi-band (3D array) writes.

    Args:
        path: Output file path
        data: 2D array (single band) or 3D array (bands x height x width)
        transform: Affine transform for georeferencing (None for none at all)
        crs: Coordinate reference system (None for CRS-less files)
        dtype: Data type string (e.g., "float32", "int16"). Defaults to data.dtype
        nodata: NoData value (optional)
    """
    if data.ndim == 2:
        count = 1
        height, width = data.shape
    elif data.ndim == 3:
        count, height, width = data.shape
    else:
        raise ValueError(f"Data must be 2D or 3D, got {data.ndim}D")

    kwargs: dict[str, Any] = {
        "driver": "GTiff",
        "height": height,
        "width": width,
        "count": count,
        "dtype": dtype or str(data.dtype),
    }
    if transform is not None:
        kwargs["transform"] = transform
    if crs is not None:
        kwargs["crs"] = crs
    if nodata is not None:
        kwargs["nodata"] = nodata

    with rasterio.open(path, "w", **kwargs) as dst:
        if data.ndim == 2:
            dst.write(data, 1)
        else:
            for band_idx in range(count):
                dst.write(data[band_idx], band_idx + 1)
    return path


# =============================================================================
# Valid DEMs
# =============================================================================
def gen_dem_flat_utm12n(out_dir: Path) -> Path:
    """Flat plateau, every sample at FLAT_ELEVATION_M (NAD83 / UTM 12N)."""
    return write_raster(
        out_dir / "dem_flat_utm12n.tif",
        _flat(),
        _north_up(UTM12N_ORIGIN),
        crs=UTM12N_NAD83,
    )


def gen_dem_peak_utm12n(out_dir: Path) -> Path:
    """Flat plateau with one spike PEAK_OFFSET_PX rows north of the center pixel."""
    data = _flat()
    center = GRID_SIZE_PX // 2
    data[center - PEAK_OFFSET_PX, center] = FLAT_ELEVATION_M + PEAK_HEIGHT_M
    return write_raster(
        out_dir / "dem_peak_utm12n.tif",
        data,
        _north_up(UTM12N_ORIGIN),
        crs=UTM12N_NAD83,
    )


def gen_dem_ridge_utm11n(out_dir: Path) -> Path:
    """North-south ridge along the east edge (WGS84 / UTM 11N).

    Heights rise linearly with column so the eastern horizon is the grid edge.
    """
    cols = np.arange(GRID_SIZE_PX, dtype=np.float32)
    data = np.tile(FLAT_ELEVATION_M + cols * 10.0, (GRID_SIZE_PX, 1)).astype(np.float32)
    return write_raster(
        out_dir / "dem_ridge_utm11n.tif",
        data,
        _north_up(UTM11N_ORIGIN),
        crs=UTM11N_WGS84,
    )


def gen_dem_with_nodata(out_dir: Path) -> Path:
    """Flat plateau whose northern half is NoData (-9999)."""
    data = _flat()
    data[: GRID_SIZE_PX // 2, :] = NODATA
    return write_raster(
        out_dir / "dem_with_nodata.tif",
        data,
        _north_up(UTM12N_ORIGIN),
        crs=UTM12N_NAD83,
        nodata=NODATA,
    )


def gen_dem_int16(out_dir: Path) -> Path:
    """Integer source samples; loader must widen to float32."""
    data = np.full((GRID_SIZE_PX, GRID_SIZE_PX), int(FLAT_ELEVATION_M), dtype=np.int16)
    return write_raster(
        out_dir / "dem_int16_utm12n.tif",
        data,
        _north_up(UTM12N_ORIGIN),
        crs=UTM12N_NAD83,
        dtype="int16",
    )


def gen_dem_multiband(out_dir: Path) -> Path:
    """Two bands; only band 1 (the flat plateau) should be read."""
    data = np.stack([_flat(), _flat(9999.0)], axis=0)
    return write_raster(
        out_dir / "dem_multiband.tif",
        data,
        _north_up(UTM12N_ORIGIN),
        crs=UTM12N_NAD83,
    )


# =============================================================================
# Invalid DEMs
# =============================================================================
def gen_dem_no_crs(out_dir: Path) -> Path:
    """Georeferenced transform but no CRS."""
    return write_raster(out_dir / "dem_no_crs.tif", _flat(), _north_up(UTM12N_ORIGIN))


def gen_dem_no_transform(out_dir: Path) -> Path:
    """CRS but no geotransform (rasterio reads back the identity transform)."""
    return write_raster(
        out_dir / "dem_no_transform.tif", _flat(), None, crs=UTM12N_NAD83
    )


def gen_empty_tif(out_dir: Path) -> Path:
    """0-byte file; does not use write_raster."""
    path = out_dir / "empty.tif"
    path.write_bytes(b"")
    return path


def gen_dem_corrupted(out_dir: Path) -> Path:
    """Valid little-endian TIFF header followed by a truncated IFD."""
    path = out_dir / "dem_corrupted.tif"
    tiff_header = b"II"  # Little-endian
    tiff_header += struct.pack("<H", 42)  # TIFF magic number
    tiff_header += struct.pack("<I", 8)  # Offset to first IFD
    tiff_header += b"\x00" * 50  # Truncated/invalid IFD
    path.write_bytes(tiff_header)
    return path


def gen_image_png(out_dir: Path) -> Path:
    """Non-GeoTIFF extension; rejected before the file is opened."""
    path = out_dir / "image.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00" * 16)
    return path


GENERATORS: tuple[Callable[[Path], Path], ...] = (
    gen_dem_flat_utm12n,
    gen_dem_peak_utm12n,
    gen_dem_ridge_utm11n,
    gen_dem_with_nodata,
    gen_dem_int16,
    gen_dem_multiband,
    gen_dem_no_crs,
    gen_dem_no_transform,
    gen_empty_tif,
    gen_dem_corrupted,
    gen_image_png,
)


def generate_fixtures(out_dir: Path) -> list[Path]:
    """Write every fixture into out_dir and return the paths."""
    out_dir.mkdir(parents=True, exist_ok=True)
    return [gen(out_dir) for gen in GENERATORS]


# =============================================================================
# Main
# =============================================================================
def main(argv: list[str] | None = None) -> int:
    """Generate all fixtures.

    Returns:
        0 on success, 1 on failure
    """
    args = sys.argv[1:] if argv is None else argv
    out_dir = Path(args[0]) if args else FIXTURES_DIR

    try:
        paths = generate_fixtures(out_dir)
    except OSError as e:
        print(f"ERROR: Cannot write fixtures: {e}")
        return 1

    found_set = {p.name for p in paths}
    expected_set = set(EXPECTED_FIXTURES)
    if len(paths) != EXPECTED_FIXTURE_COUNT or found_set != expected_set:
        print("ERROR: Fixture filenames do not match expected list!")
        missing = expected_set - found_set
        extra = found_set - expected_set
        if missing:
            print(f"  Missing (expected but not generated): {sorted(missing)}")
        if extra:
            print(f"  Extra (generated but not expected): {sorted(extra)}")
        print("\nUpdate shared/fixtures_expected.py to match generated fixtures.")
        return 1

    print(f"Generated {EXPECTED_FIXTURE_COUNT} fixtures in {out_dir}:")
    for p in sorted(paths):
        size = p.stat().st_size
        size_str = f"{size}B" if size < 1024 else f"{size/1024:.1f}KB"
        print(f"  {p.name:40} {size_str:>10}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
