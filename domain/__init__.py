"""Horizon Profiler Domain Layer.

This package contains the core logic organized by bounded contexts:
- terrain: Elevation grids, georeferencing, coordinate projection
- horizon: Ray marching and per-direction horizon profiles
"""

# Imports alphabetized per project style (isort)
from domain import horizon, terrain

__all__ = ["horizon", "terrain"]
