"""rasterio-backed implementation of the ElevationRepository port."""

from .geotiff_adapter import GeoTiffElevationAdapter, load_elevation_data

__all__ = ["GeoTiffElevationAdapter", "load_elevation_data"]
