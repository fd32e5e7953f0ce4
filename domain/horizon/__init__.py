"""Horizon Bounded Context.

Responsible for per-direction horizon computation:
- Value Objects: Observer, TerrainSample, HorizonResult, HorizonProfile
- Services: scan_direction (ray marching), build_horizon_profile
- Entities: ElevationDataset (loaded grid + georeferencing)
"""
