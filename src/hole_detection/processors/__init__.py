"""Hole Detection Processors Module.

Each module handles one stage of the per-frame detection: grid addressing,
region growing, polygon geometry, classification, plane alignment, outline
extraction, edge artifact filtering and removal index collection.
"""

# Base processor
from .base import BaseProcessor, mask_to_image

# Grid addressing
from .coordinates import (
    to_coords,
    to_index,
    coords_to_indices,
    indices_to_coords,
)

# Polygon geometry
from .polygon import (
    point_in_polygon,
    points_in_polygon,
    polygon_bounding_box,
    touches_border,
    build_table_hull,
    point_to_segment_distance,
    max_min_distance_to_polygon_edges,
)

# Plane geometry
from .plane import (
    point_to_plane_distance,
    project_points_orthogonal,
    project_point_perspective,
    plane_transformation,
    to_plane_coordinates,
)

# Region growing
from .region_growing import (
    grow_region,
    find_holes,
)

# Classification
from .classification import (
    classify_counts,
    classify_hole,
    classify_holes,
    count_inside,
)

# Plane alignment
from .plane_alignment import (
    mean_plane_distance,
    border_inside_mask,
    is_inside_hole_aligned,
    is_overlap_hole_aligned,
)

# Outline extraction
from .outline import (
    adjust_overlap_border,
    build_outline,
)

# Edge artifacts
from .edge_artifact import (
    farthest_inside_distance,
    is_edge_artifact,
)

# Removal indices
from .removal import (
    RemovalIndexBuilder,
    outline_removal_indices,
    canonicalize_indices,
)

__all__ = [
    # Base
    "BaseProcessor",
    "mask_to_image",

    # Grid addressing
    "to_coords",
    "to_index",
    "coords_to_indices",
    "indices_to_coords",

    # Polygon geometry
    "point_in_polygon",
    "points_in_polygon",
    "polygon_bounding_box",
    "touches_border",
    "build_table_hull",
    "point_to_segment_distance",
    "max_min_distance_to_polygon_edges",

    # Plane geometry
    "point_to_plane_distance",
    "project_points_orthogonal",
    "project_point_perspective",
    "plane_transformation",
    "to_plane_coordinates",

    # Region growing
    "grow_region",
    "find_holes",

    # Classification
    "classify_counts",
    "classify_hole",
    "classify_holes",
    "count_inside",

    # Plane alignment
    "mean_plane_distance",
    "border_inside_mask",
    "is_inside_hole_aligned",
    "is_overlap_hole_aligned",

    # Outline extraction
    "adjust_overlap_border",
    "build_outline",

    # Edge artifacts
    "farthest_inside_distance",
    "is_edge_artifact",

    # Removal indices
    "RemovalIndexBuilder",
    "outline_removal_indices",
    "canonicalize_indices",
]
