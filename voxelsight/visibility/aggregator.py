"""
Cone visibility aggregation.

Traces every sampled ray of a cone through the world and merges the hits
into one duplicate-free voxel list. Nothing is cached: each call re-traces
against the current grid.
"""

from __future__ import annotations

import logging
import time
from typing import Iterator, List, Optional, Sequence

from voxelsight.map.world import OccupancyWorld, VoxelCoord
from voxelsight.messages.visibility import VisibilitySnapshot
from voxelsight.visibility.cone import Cone, Ray, generate_cone_rays
from voxelsight.visibility.estimator import calculate_ray_count_for_distance
from voxelsight.visibility.traversal import (
    has_line_of_sight,
    iter_ray_voxels,
    trace_ray,
)

logger = logging.getLogger(__name__)

_AXIS_BITS = 21
_AXIS_MASK = (1 << _AXIS_BITS) - 1


def pack_voxel_key(x: int, y: int, z: int) -> int:
    """Pack an in-bounds voxel index into one integer (21 bits per axis)."""
    return (x & _AXIS_MASK) | ((y & _AXIS_MASK) << _AXIS_BITS) | ((z & _AXIS_MASK) << (2 * _AXIS_BITS))


def unpack_voxel_key(key: int) -> VoxelCoord:
    return VoxelCoord(
        key & _AXIS_MASK,
        (key >> _AXIS_BITS) & _AXIS_MASK,
        (key >> (2 * _AXIS_BITS)) & _AXIS_MASK,
    )


def iter_visible_voxels_in_cone(
    world: OccupancyWorld,
    cone: Cone,
    ray_count: int,
) -> Iterator[VoxelCoord]:
    """Yield each voxel visible from *cone* once, in first-discovery order."""
    seen: set = set()
    for ray in generate_cone_rays(cone, ray_count, world.voxel_size):
        for voxel in iter_ray_voxels(world, ray.origin, ray.direction, cone.max_range):
            key = pack_voxel_key(voxel.x, voxel.y, voxel.z)
            if key not in seen:
                seen.add(key)
                yield voxel


def get_visible_voxels_in_cone(
    world: OccupancyWorld,
    cone: Cone,
    ray_count: int,
) -> List[VoxelCoord]:
    """Deduplicated voxels visible from *cone*. Callers must not rely on order."""
    return list(iter_visible_voxels_in_cone(world, cone, ray_count))


class VoxelVisibility:
    """Facade binding the visibility queries to one world.

    Holds no state besides the world reference; every query recomputes.
    """

    def __init__(self, world: OccupancyWorld):
        self.world = world

    @property
    def voxel_size(self) -> float:
        return self.world.voxel_size

    def world_to_voxel(self, pos: Sequence[float]) -> VoxelCoord:
        return self.world.world_to_voxel(pos)

    def voxel_to_world(self, x: int, y: int, z: int):
        return self.world.voxel_to_world(x, y, z)

    def is_voxel_opaque(self, x: int, y: int, z: int) -> bool:
        return self.world.is_voxel_opaque(x, y, z)

    def set_voxel_opaque(self, x: int, y: int, z: int, opaque: bool) -> bool:
        return self.world.set_voxel_opaque(x, y, z, opaque)

    def trace_ray(self, origin, direction, max_distance: float) -> List[VoxelCoord]:
        return trace_ray(self.world, origin, direction, max_distance)

    def has_line_of_sight(self, from_pos, to_pos) -> bool:
        return has_line_of_sight(self.world, from_pos, to_pos)

    def ray_count_for(self, cone: Cone) -> int:
        return calculate_ray_count_for_distance(cone.max_range, cone.half_angle, self.voxel_size)

    def generate_cone_rays(self, cone: Cone, ray_count: Optional[int] = None) -> Iterator[Ray]:
        if ray_count is None:
            ray_count = self.ray_count_for(cone)
        return generate_cone_rays(cone, ray_count, self.voxel_size)

    def get_visible_voxels_in_cone(self, cone: Cone, ray_count: Optional[int] = None) -> List[VoxelCoord]:
        if ray_count is None:
            ray_count = self.ray_count_for(cone)
        return get_visible_voxels_in_cone(self.world, cone, ray_count)

    def snapshot(
        self,
        cone: Cone,
        ray_count: Optional[int] = None,
        include_rays: bool = False,
        obstacle_count: Optional[int] = None,
    ):
        """Run one cone query and package it for a renderer or UI readout."""
        if ray_count is None:
            ray_count = self.ray_count_for(cone)
        t0 = time.perf_counter()
        visible = get_visible_voxels_in_cone(self.world, cone, ray_count)
        elapsed_ms = (time.perf_counter() - t0) * 1000.0
        rays = list(generate_cone_rays(cone, ray_count, self.voxel_size)) if include_rays else None
        if obstacle_count is None:
            obstacle_count = self.world.opaque_count()
        logger.debug(
            "Cone query: %d rays, %d visible voxels, %.2f ms",
            ray_count, len(visible), elapsed_ms,
        )
        return VisibilitySnapshot.build(
            cone=cone,
            ray_count=ray_count,
            visible=visible,
            obstacle_count=obstacle_count,
            rays=rays,
            query_ms=elapsed_ms,
        )
