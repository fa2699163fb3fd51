"""Occupancy world and scene construction."""

from voxelsight.map.world import OccupancyWorld, VoxelCoord, World

__all__ = ["OccupancyWorld", "VoxelCoord", "World"]
