"""Terrain Bounded Context - Domain Services.

Pure domain logic for georeferencing.
NO I/O operations - file loading is implemented by infrastructure adapters
under `src/infrastructure/terrain/geotiff_adapter.py` via domain ports.
"""

from __future__ import annotations

from typing import Any

from pyproj import CRS, Transformer
from pyproj.enums import TransformDirection
from pyproj.exceptions import CRSError, ProjError

from domain.terrain.errors import InvalidProjectionError, MissingCRSError
from domain.terrain.value_objects import AffineTransform, PixelCoordinate

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
# Observer coordinates are always WGS84 lat/lon
WGS84 = "EPSG:4326"


# ---------------------------------------------------------------------------
# CoordinateProjector
# ---------------------------------------------------------------------------
class CoordinateProjector:
    """Convert WGS84 latitude/longitude into fractional raster pixel positions.

    The target CRS is whatever the raster declares; it is never assumed.
    Building the projector is the only step that can fail, so a malformed CRS
    surfaces at load time rather than on the first query.

    Args:
        transform: Raster geotransform
        crs: Anything pyproj.CRS.from_user_input accepts (WKT, PROJ string,
            "EPSG:32612", rasterio CRS, ...)

    Raises:
        MissingCRSError: If crs is None or empty
        InvalidProjectionError: If pyproj cannot interpret crs
    """

    def __init__(self, transform: AffineTransform, crs: Any) -> None:
        if crs is None or (isinstance(crs, str) and not crs.strip()):
            raise MissingCRSError("Raster has no CRS defined")
        try:
            self.crs = CRS.from_user_input(crs)
            self._transformer = Transformer.from_crs(WGS84, self.crs, always_xy=True)
        except (CRSError, ProjError) as e:
            raise InvalidProjectionError(f"Unusable raster CRS: {e}") from e
        self.transform = transform

    def project(self, latitude: float, longitude: float) -> PixelCoordinate:
        """Project a WGS84 point into pixel space.

        No range validation: out-of-range inputs land outside the grid (or at
        non-finite coordinates, which every grid treats as out of bounds).

        Note the (longitude, latitude) axis order handed to pyproj.
        """
        proj_x, proj_y = self._transformer.transform(longitude, latitude)
        return self.transform.to_pixel(proj_x, proj_y)

    def to_geographic(self, pixel_x: float, pixel_y: float) -> tuple[float, float]:
        """Inverse of project: pixel position -> (latitude, longitude)."""
        proj_x, proj_y = self.transform.pixel_to_projected(pixel_x, pixel_y)
        longitude, latitude = self._transformer.transform(
            proj_x, proj_y, direction=TransformDirection.INVERSE
        )
        return (latitude, longitude)

    def crs_string(self) -> str:
        """Compact CRS identifier for logs and reports."""
        authority = self.crs.to_authority()
        if authority is not None:
            return f"{authority[0]}:{authority[1]}"
        return self.crs.to_proj4()
