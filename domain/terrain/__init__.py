"""Terrain Bounded Context.

Responsible for physical geography and georeferencing:
- Value Objects: AffineTransform, ElevationGrid, PixelCoordinate
- Services: CoordinateProjector (WGS84 -> raster pixel space)
"""
