"""
Pytest configuration and shared fixtures for hole detection tests.

Provides synthetic depth grids lying on a table plane, table hull helpers
and the logging setup shared by all test modules.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator, List, Tuple

import numpy as np
import pytest

from hole_detection.config import HoleDetectionConfig, get_default_config
from hole_detection.frame import OrganizedGrid, PlaneModel
from hole_detection.utils.logging_utils import setup_logging

GRID_SPACING = 0.01
TABLE_Z = 1.0


def make_plane_points(width: int, height: int, spacing: float = GRID_SPACING,
                      z: float = TABLE_Z) -> np.ndarray:
    """Samples of the plane ``z = const``, one grid cell per ``spacing`` meters."""
    cols, rows = np.meshgrid(np.arange(width), np.arange(height))
    points = np.empty((height, width, 3), dtype=np.float64)
    points[..., 0] = (cols - width // 2) * spacing
    points[..., 1] = (rows - height // 2) * spacing
    points[..., 2] = z
    return points


def corner_hull_indices(corners: List[Tuple[int, int]], width: int) -> List[int]:
    """Linear indices of ``(col, row)`` hull corners."""
    return [row * width + col for col, row in corners]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def table_plane() -> PlaneModel:
    """The plane ``z = 1`` all synthetic grids are sampled from."""
    return PlaneModel(0.0, 0.0, 1.0, -TABLE_Z)


@pytest.fixture
def plane_points() -> Callable[..., np.ndarray]:
    """Factory for fully finite grids lying on the table plane."""
    return make_plane_points


@pytest.fixture
def hull_indices() -> Callable[[List[Tuple[int, int]], int], List[int]]:
    """Factory converting hull corners to linear indices."""
    return corner_hull_indices


@pytest.fixture
def full_grid_hull() -> List[int]:
    """Hull covering the whole 100x100 grid."""
    return corner_hull_indices([(0, 0), (99, 0), (99, 99), (0, 99)], 100)


@pytest.fixture
def inner_hull() -> List[int]:
    """Hull of the 100x100 grid inset by 10 samples on every side."""
    return corner_hull_indices([(10, 10), (89, 10), (89, 89), (10, 89)], 100)


@pytest.fixture
def small_grid() -> OrganizedGrid:
    """7x5 plane grid, all finite."""
    return OrganizedGrid(make_plane_points(7, 5))


@pytest.fixture
def detection_config() -> HoleDetectionConfig:
    """Default detector configuration."""
    return HoleDetectionConfig()


@pytest.fixture(autouse=True)
def setup_test_logging():
    """Setup logging for tests."""
    config = get_default_config()
    config.logging.use_rich = False
    setup_logging(
        level="WARNING",  # Only show warnings and errors in tests
        use_rich=config.logging.use_rich,
        format_style="minimal"
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (deselect with '-m \"not unit\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location and name."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)

        if "slow" in item.name.lower():
            item.add_marker(pytest.mark.slow)
