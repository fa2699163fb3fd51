"""
Single-ray voxel traversal (3D DDA, Amanatides & Woo).

Two entry points share one marcher:

* ``trace_ray`` walks outward from an origin and reports every voxel the
  ray enters, up to and including the first opaque one.
* ``has_line_of_sight`` walks from one world point towards another and
  reports whether an opaque voxel lies in between.

``trace_ray`` expects a unit-length direction; distances are measured in
world units along it. ``has_line_of_sight`` takes two points and
normalizes internally.
"""

from __future__ import annotations

import enum
import logging
import math
from typing import Iterator, List, Sequence, Tuple

from voxelsight.map.world import OccupancyWorld, VoxelCoord
from voxelsight.utils import vector_math as vm

logger = logging.getLogger(__name__)

INF = math.inf


class TraversalOutcome(enum.Enum):
    """Terminal state of a single march."""

    BLOCKED = "blocked"
    TARGET_REACHED = "target_reached"
    EXITED_BOUNDS = "exited_bounds"
    MAX_DISTANCE_REACHED = "max_distance_reached"


class _DDAState:
    """Per-call marching state: current voxel plus per-axis tMax/tDelta."""

    __slots__ = ("x", "y", "z", "step", "t_max", "t_delta")

    def __init__(self, world: OccupancyWorld, origin: Sequence[float], direction: Sequence[float]):
        start = world.world_to_voxel(origin)
        self.x, self.y, self.z = start
        vs = world.voxel_size
        origin_vox = world.origin_in_voxels

        step = [1 if d > 0 else -1 for d in direction]
        t_max = [INF, INF, INF]
        t_delta = [INF, INF, INF]
        for axis, cell in enumerate(start):
            d = direction[axis]
            if d == 0:
                continue
            boundary = (cell + (1 if step[axis] > 0 else 0)) * vs + origin_vox[axis] * vs
            t_max[axis] = (boundary - origin[axis]) / d
            t_delta[axis] = vs / abs(d)
        self.step = step
        self.t_max = t_max
        self.t_delta = t_delta

    def advance(self) -> float:
        """Step into the next voxel; return the parametric distance crossed.

        Ties go to x, then y, then z.
        """
        t_max = self.t_max
        tx, ty, tz = t_max
        if tx <= ty and tx <= tz:
            self.x += self.step[0]
            t_max[0] = tx + self.t_delta[0]
            return tx
        if ty <= tz:
            self.y += self.step[1]
            t_max[1] = ty + self.t_delta[1]
            return ty
        self.z += self.step[2]
        t_max[2] = tz + self.t_delta[2]
        return tz

    @property
    def voxel(self) -> VoxelCoord:
        return VoxelCoord(self.x, self.y, self.z)


def _march(
    world: OccupancyWorld,
    origin: Sequence[float],
    direction: Sequence[float],
    max_distance: float,
    outcome: list,
) -> Iterator[VoxelCoord]:
    state = _DDAState(world, origin, direction)
    traveled = 0.0
    while world.is_in_bounds(state.x, state.y, state.z) and traveled < max_distance:
        current = state.voxel
        yield current
        if world.is_voxel_opaque(current.x, current.y, current.z):
            outcome.append(TraversalOutcome.BLOCKED)
            return
        traveled = state.advance()
    if world.is_in_bounds(state.x, state.y, state.z):
        outcome.append(TraversalOutcome.MAX_DISTANCE_REACHED)
    else:
        outcome.append(TraversalOutcome.EXITED_BOUNDS)


def iter_ray_voxels(
    world: OccupancyWorld,
    origin: Sequence[float],
    direction: Sequence[float],
    max_distance: float,
) -> Iterator[VoxelCoord]:
    """Lazily yield the voxels a ray enters, in order.

    Starts with the voxel containing *origin*. Stops when the ray leaves
    the grid, when the distance travelled reaches *max_distance*, or after
    yielding the first opaque voxel. Each call builds a fresh iterator.
    """
    return _march(world, origin, direction, max_distance, [])


def trace_ray(
    world: OccupancyWorld,
    origin: Sequence[float],
    direction: Sequence[float],
    max_distance: float,
) -> List[VoxelCoord]:
    """Materialized form of ``iter_ray_voxels``."""
    return list(iter_ray_voxels(world, origin, direction, max_distance))


def trace_ray_with_outcome(
    world: OccupancyWorld,
    origin: Sequence[float],
    direction: Sequence[float],
    max_distance: float,
) -> Tuple[List[VoxelCoord], TraversalOutcome]:
    """Like ``trace_ray`` but also reports why the march stopped."""
    outcome: list = []
    voxels = list(_march(world, origin, direction, max_distance, outcome))
    return voxels, outcome[0]


def line_of_sight_outcome(
    world: OccupancyWorld,
    from_pos: Sequence[float],
    to_pos: Sequence[float],
) -> TraversalOutcome:
    """March from *from_pos* towards *to_pos* and report the terminal state.

    Once every axis' next crossing lies beyond the segment length the rest
    of the segment is treated as clear (MAX_DISTANCE_REACHED). Leaving the
    grid before the target is also treated as clear (EXITED_BOUNDS), even
    though the target voxel was never examined.
    """
    delta = vm.subtract(to_pos, from_pos)
    seg_len = vm.length(delta)
    if seg_len == 0:
        return TraversalOutcome.TARGET_REACHED
    direction = vm.scale(delta, 1.0 / seg_len)

    target = world.world_to_voxel(to_pos)
    state = _DDAState(world, from_pos, direction)
    t_max = state.t_max
    while world.is_in_bounds(state.x, state.y, state.z):
        if world.is_voxel_opaque(state.x, state.y, state.z):
            return TraversalOutcome.BLOCKED
        if state.x == target.x and state.y == target.y and state.z == target.z:
            return TraversalOutcome.TARGET_REACHED
        state.advance()
        if t_max[0] > seg_len and t_max[1] > seg_len and t_max[2] > seg_len:
            return TraversalOutcome.MAX_DISTANCE_REACHED
    return TraversalOutcome.EXITED_BOUNDS


def has_line_of_sight(
    world: OccupancyWorld,
    from_pos: Sequence[float],
    to_pos: Sequence[float],
) -> bool:
    """True unless an opaque voxel lies between the two world points."""
    outcome = line_of_sight_outcome(world, from_pos, to_pos)
    logger.debug("LOS %s -> %s: %s", tuple(from_pos), tuple(to_pos), outcome.value)
    return outcome is not TraversalOutcome.BLOCKED
