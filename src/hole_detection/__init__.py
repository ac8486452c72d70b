"""Detection of depth holes on planar table surfaces."""

__version__ = "1.0.0"
__author__ = "Hole Detection Team"

from .detector import HoleDetector, detect_holes
from .frame import (
    Hole,
    HoleClass,
    HoleDetectionResult,
    HoleOutline,
    OrganizedGrid,
    PlaneModel,
    TableHull,
)

__all__ = [
    "HoleDetector",
    "detect_holes",
    "Hole",
    "HoleClass",
    "HoleDetectionResult",
    "HoleOutline",
    "OrganizedGrid",
    "PlaneModel",
    "TableHull",
]
