"""Horizon Bounded Context - Value Objects.

Immutable results of a horizon query. All validation occurs at construction
time via Pydantic.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Observer(BaseModel):
    """Observer resolved once per query (Value Object).

    pixel_x / pixel_y are the fractional projected position; base_elevation_m
    is the sample under floor(pixel_x), floor(pixel_y), or the missing-sample
    elevation when that index is off the grid.
    """

    pixel_x: float
    pixel_y: float
    base_elevation_m: float
    in_grid: bool = True

    model_config = ConfigDict(frozen=True)


class TerrainSample(BaseModel):
    """One (elevation, distance) pair visited during a ray march (Value Object)."""

    elevation_m: float
    distance_m: float = Field(gt=0)

    model_config = ConfigDict(frozen=True)


class HorizonResult(BaseModel):
    """Horizon for a single compass direction (Value Object).

    Invariants:
        HR-1: distance_km >= 0
        HR-2: distance_km == 0 implies elevation_angle_degrees == 0
              (no in-bounds sample along the ray)

    Serialized with camelCase keys: direction, elevationAngleDegrees, distanceKm.
    """

    direction: int  # Compass degrees: 0 = N, 90 = E, 180 = S, 270 = W
    elevation_angle_degrees: float = Field(serialization_alias="elevationAngleDegrees")
    distance_km: float = Field(ge=0, serialization_alias="distanceKm")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_empty_ray(self) -> "HorizonResult":
        if self.distance_km == 0 and self.elevation_angle_degrees != 0:
            raise ValueError(
                "A result with distance 0 (no sample visited) must have angle 0, "
                f"got {self.elevation_angle_degrees}"
            )
        return self

    @property
    def has_horizon(self) -> bool:
        """False when the ray left the grid before any sample was visited."""
        return self.distance_km > 0

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class HorizonProfile(BaseModel):
    """Ordered horizon results for one observer (Value Object).

    Invariants:
        HP-1: results ordered as the requested direction walk
        HP-2: one result per requested direction
    """

    latitude: float
    longitude: float
    observer: Observer
    start_direction: int
    end_direction: int
    wraparound: bool = False
    results: tuple[HorizonResult, ...]

    model_config = ConfigDict(frozen=True)

    def __len__(self) -> int:
        return len(self.results)

    def directions(self) -> tuple[int, ...]:
        """Return direction values in output order."""
        return tuple(r.direction for r in self.results)

    def angles(self) -> tuple[float, ...]:
        """Return horizon elevation angles in output order."""
        return tuple(r.elevation_angle_degrees for r in self.results)

    def max_result(self) -> HorizonResult | None:
        """Return the direction with the highest horizon (first wins ties)."""
        if not self.results:
            return None
        return max(self.results, key=lambda r: r.elevation_angle_degrees)

    def to_json_list(self) -> list[dict[str, Any]]:
        return [r.to_json_dict() for r in self.results]
