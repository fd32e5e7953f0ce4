"""Horizon Bounded Context - Error Hierarchy.

Query-time errors. Under the default observer policy none of these are raised
for degraded inputs: an observer off the grid or a ray that leaves the grid
immediately yields a zero-angle, zero-distance result instead.
"""

from __future__ import annotations


class HorizonError(Exception):
    """Base error for horizon operations."""


class ObserverOutOfBoundsError(HorizonError):
    """Observer pixel lies outside the elevation grid (STRICT policy only).

    Attributes:
        latitude: Observer latitude as requested
        longitude: Observer longitude as requested
        pixel: (x, y) fractional pixel position the observer projected to
        shape: (width, height) of the grid
    """

    def __init__(
        self,
        latitude: float,
        longitude: float,
        pixel: tuple[float, float],
        shape: tuple[int, int],
    ) -> None:
        self.latitude = latitude
        self.longitude = longitude
        self.pixel = pixel
        self.shape = shape
        super().__init__(
            f"Observer ({latitude:.6f}, {longitude:.6f}) projects to pixel "
            f"({pixel[0]:.2f}, {pixel[1]:.2f}) outside grid "
            f"{shape[0]}x{shape[1]}"
        )


class InvalidDirectionError(HorizonError):
    """Direction bounds are not integer degrees."""
