"""Conversion between linear grid indices and (col, row) coordinates."""

from typing import Iterable, List, Tuple

import numpy as np

from ..exceptions import InvalidCoordinateError
from ..frame import Coord, OrganizedGrid
from ..utils.logging_utils import get_logger

logger = get_logger(__name__)


def to_coords(grid: OrganizedGrid, index: int) -> Coord:
    """Convert a linear index into ``(col, row)``.

    Raises:
        InvalidCoordinateError: If the grid is not organized or the index is
            outside ``[0, width*height)``.
    """
    if not grid.is_organized:
        raise InvalidCoordinateError("Grid needs to be organized for 2D addressing", index=index)
    if index < 0 or index >= grid.size:
        raise InvalidCoordinateError(
            f"Point index {index} invalid for grid of {grid.size} samples", index=index
        )
    row = index // grid.width
    col = index - grid.width * row
    return int(col), int(row)


def to_index(grid: OrganizedGrid, col: int, row: int) -> int:
    """Convert ``(col, row)`` into a linear, row-major index.

    A single-row grid accepts only ``row == 0``.

    Raises:
        InvalidCoordinateError: If the coordinates lie outside the grid.
    """
    if col < 0 or row < 0:
        raise InvalidCoordinateError("Grid coordinates must not be negative", col=col, row=row)
    if not grid.is_organized and row > 0:
        raise InvalidCoordinateError("Grid not organized, but row > 0", col=col, row=row)
    if col >= grid.width or row >= grid.height:
        raise InvalidCoordinateError(
            f"2D coordinates ({col}, {row}) outside of grid dimension {grid.width}x{grid.height}",
            col=col, row=row,
        )
    return int(row * grid.width + col)


def coords_to_indices(grid: OrganizedGrid, coords: np.ndarray) -> np.ndarray:
    """Convert an ``(N, 2)`` array of ``(col, row)`` into row-major indices.

    Raises:
        InvalidCoordinateError: For the first coordinate outside the grid.
    """
    coords = np.asarray(coords, dtype=np.int64).reshape(-1, 2)
    cols, rows = coords[:, 0], coords[:, 1]
    outside = (cols < 0) | (rows < 0) | (cols >= grid.width) | (rows >= grid.height)
    if outside.any():
        col, row = (int(v) for v in coords[np.argmax(outside)])
        raise InvalidCoordinateError(
            f"2D coordinates ({col}, {row}) outside of grid dimension {grid.width}x{grid.height}",
            col=col, row=row,
        )
    return rows * grid.width + cols


def indices_to_coords(grid: OrganizedGrid, indices: Iterable[int]) -> Tuple[List[int], List[Coord]]:
    """Convert many indices, skipping the ones that cannot be addressed.

    Returns:
        Tuple of (accepted indices, their coordinates) in input order
    """
    kept_indices: List[int] = []
    coords: List[Coord] = []
    for index in indices:
        try:
            coords.append(to_coords(grid, int(index)))
        except InvalidCoordinateError as e:
            logger.warning(f"Skipping index: {e}")
            continue
        kept_indices.append(int(index))
    return kept_indices, coords
