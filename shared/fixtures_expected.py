"""Single source of truth for expected test fixtures.

This module defines the fixture filenames and the synthetic terrain layout
used by both:
- scripts/gen_fixtures.py (generation)
- tests/gis/test_fixtures_sanity.py and the horizon integration tests

Location: shared/ (not tests/) to avoid scripts->tests dependency.

When adding/removing fixtures, update ONLY this module.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Synthetic terrain layout
# ---------------------------------------------------------------------------
GRID_SIZE_PX: int = 41  # Square grids; center pixel is (20, 20)
PIXEL_SIZE_M: float = 30.0
FLAT_ELEVATION_M: float = 1500.0
PEAK_HEIGHT_M: float = 300.0  # Above the plateau
PEAK_OFFSET_PX: int = 10  # Rows north of the center pixel

# Upper-left corners in projected meters
UTM12N_ORIGIN: tuple[float, float] = (440000.0, 4470000.0)
UTM11N_ORIGIN: tuple[float, float] = (500000.0, 4000000.0)

# Expected fixtures - sorted alphabetically for deterministic comparison.
EXPECTED_FIXTURES: list[str] = sorted(
    [
        "dem_corrupted.tif",  # Truncated TIFF -> InvalidRasterError
        "dem_flat_utm12n.tif",  # Flat plateau
        "dem_int16_utm12n.tif",  # Integer samples widened to float32
        "dem_multiband.tif",  # Only band 1 is read
        "dem_no_crs.tif",  # MissingCRSError
        "dem_no_transform.tif",  # InvalidGeotransformError
        "dem_peak_utm12n.tif",  # Single spike due north of center
        "dem_ridge_utm11n.tif",  # Different UTM zone, rising to the east
        "dem_with_nodata.tif",  # NoData north half reads as 0 m
        "empty.tif",  # InvalidRasterError
        "image.png",  # Extension allowlist rejection
    ]
)

# Count derived from list for verification
EXPECTED_FIXTURE_COUNT: int = len(EXPECTED_FIXTURES)
