"""Terrain Bounded Context - Error Hierarchy.

Custom exceptions for terrain operations. Everything raised here is a
load-time failure: once a dataset is loaded, queries never raise these.
"""

from __future__ import annotations


class TerrainError(Exception):
    """Base error for terrain operations."""


class InvalidRasterError(TerrainError):
    """Not a readable single-file GeoTIFF (extension, empty, corrupted, no bands)."""


class MissingCRSError(TerrainError):
    """Raster has no CRS defined."""


class InvalidProjectionError(TerrainError):
    """Raster CRS cannot be used to build a WGS84 transformer."""


class InvalidGeotransformError(TerrainError):
    """Geotransform is missing (identity), non-finite, or has a zero pixel size."""


class InsufficientMemoryError(TerrainError):
    """Elevation buffer would exceed the configured budget or available memory."""
