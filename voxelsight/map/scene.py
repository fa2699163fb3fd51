"""Demo scene construction: two crossing walls plus random pillars.

Scene setup is the only writer of the occupancy grid. ``regenerate``
clears and rebuilds it; queries issued afterwards see the new layout.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from voxelsight.config.grid_config import DEFAULTS, get_visibility_config
from voxelsight.map.world import OccupancyWorld

logger = logging.getLogger(__name__)


@dataclass
class SceneLayout:
    """Wall and pillar placement, in voxel indices."""
    wall_start: int = 10
    wall_end: int = 40      # exclusive
    wall_height: int = 10
    wall_line: int = 20     # z of the first wall, x of the second
    pillar_count: int = 5
    pillar_height: int = 15
    pillar_min: int = 5
    pillar_max: int = 45    # exclusive

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SceneLayout:
        merged = {**DEFAULTS["scene"], **data}
        return cls(**{k: int(merged[k]) for k in cls.__dataclass_fields__})

    @classmethod
    def from_config(cls) -> SceneLayout:
        return cls.from_dict(get_visibility_config().get("scene"))


def build_walls(world: OccupancyWorld, layout: Optional[SceneLayout] = None) -> int:
    """Write two perpendicular walls crossing at (wall_line, *, wall_line).

    Returns the number of writes, counting the shared column twice.
    """
    layout = layout or SceneLayout()
    writes = 0
    for i in range(layout.wall_start, layout.wall_end):
        for y in range(layout.wall_height):
            world.set_voxel_opaque(i, y, layout.wall_line, True)
            world.set_voxel_opaque(layout.wall_line, y, i, True)
            writes += 2
    return writes


def place_pillars(
    world: OccupancyWorld,
    layout: Optional[SceneLayout] = None,
    rng: Optional[np.random.Generator] = None,
) -> int:
    """Write ``pillar_count`` vertical pillars at random (x, z) columns."""
    layout = layout or SceneLayout()
    rng = rng if rng is not None else np.random.default_rng()
    writes = 0
    for _ in range(layout.pillar_count):
        x = int(rng.integers(layout.pillar_min, layout.pillar_max))
        z = int(rng.integers(layout.pillar_min, layout.pillar_max))
        for y in range(layout.pillar_height):
            world.set_voxel_opaque(x, y, z, True)
            writes += 1
        logger.debug("Pillar at x=%d z=%d", x, z)
    return writes


def build_demo_scene(
    world: OccupancyWorld,
    layout: Optional[SceneLayout] = None,
    rng: Optional[np.random.Generator] = None,
) -> int:
    """Add walls and pillars to *world*. Returns the obstacle write count."""
    layout = layout or SceneLayout()
    obstacles = build_walls(world, layout) + place_pillars(world, layout, rng)
    logger.info(
        "Demo scene built: %d obstacle writes, %d opaque voxels",
        obstacles, world.opaque_count(),
    )
    return obstacles


def regenerate(
    world: OccupancyWorld,
    layout: Optional[SceneLayout] = None,
    rng: Optional[np.random.Generator] = None,
) -> int:
    """Clear the grid and build a fresh demo scene."""
    world.clear()
    return build_demo_scene(world, layout, rng)
