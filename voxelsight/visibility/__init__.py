"""Visibility engine: ray traversal, cone sampling, aggregation."""

from voxelsight.visibility.aggregator import (
    VoxelVisibility,
    get_visible_voxels_in_cone,
    iter_visible_voxels_in_cone,
)
from voxelsight.visibility.cone import Cone, Ray, generate_cone_rays
from voxelsight.visibility.estimator import calculate_ray_count_for_distance
from voxelsight.visibility.traversal import (
    TraversalOutcome,
    has_line_of_sight,
    iter_ray_voxels,
    trace_ray,
)

__all__ = [
    "VoxelVisibility",
    "get_visible_voxels_in_cone",
    "iter_visible_voxels_in_cone",
    "Cone",
    "Ray",
    "generate_cone_rays",
    "calculate_ray_count_for_distance",
    "TraversalOutcome",
    "has_line_of_sight",
    "iter_ray_voxels",
    "trace_ray",
]
