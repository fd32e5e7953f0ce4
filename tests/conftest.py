"""Root pytest configuration for all tests.

Synthetic GeoTIFF fixtures are generated once per session into a temp
directory with scripts/gen_fixtures.py, so no binary fixtures live in the
repository.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from shared.fixtures_expected import GRID_SIZE_PX


@pytest.fixture(scope="session")
def fixtures_dir(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """Directory holding every fixture listed in shared/fixtures_expected.py."""
    from scripts.gen_fixtures import generate_fixtures

    out_dir = tmp_path_factory.mktemp("fixtures")
    generate_fixtures(out_dir)
    return out_dir


@pytest.fixture
def center_px() -> int:
    """Index of the center row/column of every synthetic grid."""
    return GRID_SIZE_PX // 2
