"""Domain Port(s) for Terrain I/O.

Defines interfaces (Protocols) that infrastructure adapters must implement.
No concrete I/O here.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from domain.horizon.dataset import ElevationDataset


class ElevationRepository(Protocol):
    """Port for obtaining elevation datasets from external sources.

    Implementations live in infrastructure (e.g., GeoTIFF adapter).
    """

    def load_dem(self, file_path: Path | str) -> "ElevationDataset":
        """Load a DEM in its native CRS and return a queryable dataset."""
        ...
