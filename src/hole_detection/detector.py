"""Per-frame detection of holes in the depth data of a planar table surface.

A hole is a connected region of missing depth with at least one sample
inside the table's convex hull. Holes are classified against the hull,
checked for alignment with the table plane and, when they overlap the hull
boundary, for being an artifact of the table edge. Accepted holes yield a
convex outline on the plane and the grid indices of the finite samples they
enclose, which the caller is expected to blank.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .config.models import HoleDetectionConfig
from .exceptions import DegenerateGeometryError, InvalidCoordinateError, MissingInputError
from .frame import (
    Hole,
    HoleClass,
    HoleDetectionResult,
    HoleOutline,
    OrganizedGrid,
    PlaneModel,
    TableHull,
)
from .processors.base import BaseProcessor
from .processors.classification import classify_holes
from .processors.edge_artifact import is_edge_artifact
from .processors.outline import adjust_overlap_border, build_outline
from .processors.plane_alignment import (
    border_inside_mask,
    is_inside_hole_aligned,
    is_overlap_hole_aligned,
)
from .processors.polygon import build_table_hull, points_in_polygon
from .processors.region_growing import find_holes
from .processors.removal import RemovalIndexBuilder
from .utils.logging_utils import get_logger, log_processing_stats

logger = get_logger(__name__)

PlaneLike = Union[PlaneModel, Sequence[float], np.ndarray]


class HoleDetector(BaseProcessor):
    """Processor that finds genuine holes on the table surface of a depth frame."""

    def __init__(self, config: Optional[HoleDetectionConfig] = None):
        super().__init__(config or HoleDetectionConfig())

    def process(
        self,
        grid: Union[OrganizedGrid, np.ndarray],
        plane: Optional[PlaneLike] = None,
        hull_indices: Optional[Sequence[int]] = None,
        **kwargs,
    ) -> HoleDetectionResult:
        """Detect holes in one frame.

        Args:
            grid: Organized grid or ``(height, width, 3)`` array
            plane: Table plane coefficients ``(a, b, c, d)``
            hull_indices: Ordered grid indices of the table's convex hull
            **kwargs: Additional parameters

        Returns:
            Accepted hole outlines and the sorted, unique removal indices
        """
        grid = self.validate_grid(grid)
        self.clear_debug_images()

        result = detect_holes(grid, plane, hull_indices, config=self.config, processor=self)

        debug_dir = self.get_config_value('debug_output_dir', None)
        if debug_dir:
            self.save_debug_images_to_dir(Path(debug_dir), prefix=kwargs.get("frame_id", ""))
        return result

    def detect(
        self,
        grid: Union[OrganizedGrid, np.ndarray],
        plane: PlaneLike,
        hull_indices: Sequence[int],
        **kwargs,
    ) -> HoleDetectionResult:
        """Positional form of ``process``."""
        return self.process(grid, plane=plane, hull_indices=hull_indices, **kwargs)


def detect_holes(
    grid: Union[OrganizedGrid, np.ndarray],
    plane: Optional[PlaneLike],
    hull_indices: Optional[Sequence[int]],
    config: Optional[HoleDetectionConfig] = None,
    processor: Optional[BaseProcessor] = None,
) -> HoleDetectionResult:
    """Run the full detection pipeline on one frame.

    Args:
        grid: Organized grid or ``(height, width, 3)`` array
        plane: Table plane coefficients ``(a, b, c, d)``
        hull_indices: Ordered grid indices of the table's convex hull
        config: Detector thresholds (defaults if None)
        processor: Receives the debug masks of the frame, if given

    Returns:
        Accepted hole outlines and the sorted, unique removal indices

    Raises:
        MissingInputError: If the plane or the table hull is absent
    """
    config = config or HoleDetectionConfig()

    if plane is None:
        raise MissingInputError("No plane model given for frame", input_name="plane")
    if hull_indices is None or len(hull_indices) == 0:
        raise MissingInputError("No table hull given for frame", input_name="hull_indices")

    if not isinstance(grid, OrganizedGrid):
        grid = OrganizedGrid(grid)
    if not isinstance(plane, PlaneModel):
        plane = PlaneModel.from_coefficients(plane)
    hull = build_table_hull(grid, hull_indices)

    with log_processing_stats("hole detection", logger) as stats:
        holes = find_holes(grid, hull, config.min_hole_size)
        buckets = classify_holes(holes, hull, config.inside_out_factor)

        stats["holes_found"] = len(holes)
        for label in HoleClass:
            stats[label.value] = len(buckets[label])
        rejections: Dict[str, int] = {"outside": len(buckets[HoleClass.OUTSIDE])}

        builder = RemovalIndexBuilder(grid)
        outlines: List[HoleOutline] = []
        touching = 0

        candidates = ([(hole, HoleClass.INSIDE) for hole in buckets[HoleClass.INSIDE]] +
                      [(hole, HoleClass.OVERLAP) for hole in buckets[HoleClass.OVERLAP]])
        for hole, label in candidates:
            try:
                if label is HoleClass.INSIDE:
                    outline, reason = _inside_hole_outline(grid, hole, plane, config)
                else:
                    outline, reason = _overlap_hole_outline(grid, hole, hull, plane, config)
            except (InvalidCoordinateError, DegenerateGeometryError) as e:
                logger.debug(f"Dropping {label.value} hole at {hole.seed}: {e}")
                outline, reason = None, "degenerate"

            if outline is None:
                rejections[reason] = rejections.get(reason, 0) + 1
                continue

            at_border = builder.add_outline(
                outline.grid_polygon, keep_if_touching=config.keep_border_touching_removals
            )
            if at_border:
                touching += 1
                logger.debug(f"Discarding {label.value} hole at {hole.seed}: outline touches image border")
                continue
            outlines.append(outline)

        removal_indices = builder.build()

        stats["holes_accepted"] = len(outlines)
        stats["holes_rejected"] = sum(rejections.values()) + touching
        stats["rejections"] = dict(rejections, touches_border=touching)
        stats["removed_points"] = int(removal_indices.shape[0])

    if processor is not None:
        _store_debug_masks(processor, grid, hull, removal_indices)

    return HoleDetectionResult(outlines=outlines, removal_indices=removal_indices, stats=stats)


def _inside_hole_outline(
    grid: OrganizedGrid, hole: Hole, plane: PlaneModel, config: HoleDetectionConfig
) -> Tuple[Optional[HoleOutline], str]:
    if not is_inside_hole_aligned(grid, hole, plane, config.plane_dist_threshold):
        logger.debug(f"Dropping inside hole at {hole.seed}: border not aligned with plane")
        return None, "plane_alignment"

    outline = build_outline(
        grid.points_at(hole.border), hole.border, plane, HoleClass.INSIDE, hole.size
    )
    return outline, ""


def _overlap_hole_outline(
    grid: OrganizedGrid,
    hole: Hole,
    hull: TableHull,
    plane: PlaneModel,
    config: HoleDetectionConfig,
) -> Tuple[Optional[HoleOutline], str]:
    inside_mask = border_inside_mask(hole, hull)
    threshold = config.plane_dist_threshold * config.overlap_alignment_factor
    if not is_overlap_hole_aligned(grid, hole, plane, inside_mask, threshold):
        logger.debug(f"Dropping overlap hole at {hole.seed}: border not aligned with plane")
        return None, "plane_alignment"

    points, coords, inside = adjust_overlap_border(
        grid, hole, plane, inside_mask,
        config.plane_dist_threshold * config.overlap_projection_factor,
    )
    if not inside.any():
        logger.debug(f"Dropping overlap hole at {hole.seed}: no inside border sample has a plane projection")
        return None, "degenerate"

    if is_edge_artifact(points[inside], hull, config.min_distance_to_convex_hull):
        logger.debug(f"Dropping overlap hole at {hole.seed}: artifact at table edge")
        return None, "edge_artifact"

    outline = build_outline(points, coords, plane, HoleClass.OVERLAP, hole.size)
    return outline, ""


def _store_debug_masks(
    processor: BaseProcessor, grid: OrganizedGrid, hull: TableHull, removal_indices: np.ndarray
) -> None:
    if not processor.get_config_value('save_debug_images', False):
        return

    processor.save_debug_image("invalid_mask", ~grid.finite_mask)

    rows, cols = np.mgrid[0:grid.height, 0:grid.width]
    queries = np.column_stack([cols.ravel(), rows.ravel()])
    hull_mask = points_in_polygon(hull.polygon, queries).reshape(grid.height, grid.width)
    processor.save_debug_image("hull_mask", hull_mask)

    removal_mask = np.zeros(grid.size, dtype=bool)
    removal_mask[removal_indices] = True
    processor.save_debug_image("removal_mask", removal_mask.reshape(grid.height, grid.width))
