"""Voxel occupancy world.

Owns the boolean occupancy grid and converts between continuous world
positions and integer voxel indices. Traversal and cone queries only go
through the ``OccupancyWorld`` interface so the dense array can be swapped
for a sparse store without touching them.

Single-writer: mutate the grid, then query. Nothing here locks, so a
multi-threaded host must serialize writes against in-flight queries.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from typing import List, NamedTuple, Optional, Sequence

import numpy as np

from voxelsight.config.grid_config import GridConfig

logger = logging.getLogger(__name__)


class VoxelCoord(NamedTuple):
    """Integer voxel index. Valid iff every component is in [0, grid_size)."""
    x: int
    y: int
    z: int


class OccupancyWorld(ABC):
    """Read/write capability over an occupancy grid."""

    def __init__(self, config: GridConfig):
        self.config = config
        self._voxel_size = float(config.voxel_size)
        self._grid_size = int(config.grid_size)
        self._origin = config.world_origin
        self._origin_vox = config.origin_in_voxels

    @property
    def voxel_size(self) -> float:
        return self._voxel_size

    @property
    def grid_size(self) -> int:
        return self._grid_size

    @property
    def origin(self):
        """World position of the grid's (0, 0, 0) corner."""
        return self._origin

    @property
    def origin_in_voxels(self):
        """Grid corner in voxel units (see ``GridConfig.origin_in_voxels``)."""
        return self._origin_vox

    def world_to_voxel(self, pos: Sequence[float]) -> VoxelCoord:
        """Voxel containing world position *pos* (may be out of bounds)."""
        vs = self._voxel_size
        ov = self._origin_vox
        return VoxelCoord(
            math.floor(pos[0] / vs - ov[0]),
            math.floor(pos[1] / vs - ov[1]),
            math.floor(pos[2] / vs - ov[2]),
        )

    def voxel_to_world(self, x: int, y: int, z: int):
        """Centre of voxel (x, y, z) in world space."""
        vs = self._voxel_size
        ov = self._origin_vox
        return (
            (x + ov[0]) * vs + vs / 2,
            (y + ov[1]) * vs + vs / 2,
            (z + ov[2]) * vs + vs / 2,
        )

    def is_in_bounds(self, x: int, y: int, z: int) -> bool:
        g = self._grid_size
        return 0 <= x < g and 0 <= y < g and 0 <= z < g

    @abstractmethod
    def is_voxel_opaque(self, x: int, y: int, z: int) -> bool:
        """True if (x, y, z) blocks sight. Out-of-bounds is never opaque."""

    @abstractmethod
    def set_voxel_opaque(self, x: int, y: int, z: int, opaque: bool) -> bool:
        """Write one cell. Out-of-bounds writes are ignored.

        Returns True if the write landed in the grid.
        """

    @abstractmethod
    def clear(self) -> None:
        """Mark every voxel transparent."""

    @abstractmethod
    def opaque_count(self) -> int:
        ...


class World(OccupancyWorld):
    """Dense occupancy grid backed by a flat numpy bool array.

    Linear index is ``x + y*g + z*g*g``.
    """

    def __init__(self, config: Optional[GridConfig] = None):
        super().__init__(config or GridConfig())
        self._data: np.ndarray = np.zeros(self.config.voxel_count, dtype=bool)
        logger.debug(
            "World created: %d^3 voxels, voxel_size=%.3f, origin=%s",
            self._grid_size, self._voxel_size, self._origin,
        )

    def _index(self, x: int, y: int, z: int) -> int:
        g = self._grid_size
        return x + y * g + z * g * g

    def is_voxel_opaque(self, x: int, y: int, z: int) -> bool:
        if not self.is_in_bounds(x, y, z):
            return False
        return bool(self._data[self._index(x, y, z)])

    def set_voxel_opaque(self, x: int, y: int, z: int, opaque: bool) -> bool:
        if not self.is_in_bounds(x, y, z):
            return False
        self._data[self._index(x, y, z)] = bool(opaque)
        return True

    def fill_box(self, lo: Sequence[int], hi: Sequence[int], opaque: bool = True) -> int:
        """Set every voxel in the half-open box [lo, hi), clipped to the grid.

        Returns the number of voxels written.
        """
        g = self._grid_size
        x0, y0, z0 = (max(0, int(v)) for v in lo)
        x1, y1, z1 = (min(g, int(v)) for v in hi)
        if x0 >= x1 or y0 >= y1 or z0 >= z1:
            return 0
        # Flat array viewed as [z, y, x] matches the linear index order
        cube = self._data.reshape(g, g, g)
        cube[z0:z1, y0:y1, x0:x1] = bool(opaque)
        return (x1 - x0) * (y1 - y0) * (z1 - z0)

    def clear(self) -> None:
        self._data[:] = False

    def opaque_count(self) -> int:
        return int(np.count_nonzero(self._data))

    def opaque_voxels(self) -> List[VoxelCoord]:
        """All opaque voxels in linear-index order."""
        g = self._grid_size
        idx = np.flatnonzero(self._data)
        xs = idx % g
        ys = (idx // g) % g
        zs = idx // (g * g)
        return [VoxelCoord(int(x), int(y), int(z)) for x, y, z in zip(xs, ys, zs)]

    def as_array(self) -> np.ndarray:
        """Copy of the grid shaped (x, y, z)."""
        g = self._grid_size
        return self._data.reshape(g, g, g).transpose(2, 1, 0).copy()
