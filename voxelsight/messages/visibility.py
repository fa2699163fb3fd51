"""Pydantic models for visibility results handed to a renderer or UI."""

import time
from typing import Optional

from pydantic import BaseModel, Field


class VoxelModel(BaseModel):
    """One visible voxel, by integer grid index."""
    x: int
    y: int
    z: int


class RayModel(BaseModel):
    """A sampled ray, for debug-ray display."""
    origin: list[float] = Field(description="[x, y, z] world position")
    direction: list[float] = Field(description="[x, y, z] unit vector")


class ConeModel(BaseModel):
    origin: list[float] = Field(description="[x, y, z] world position")
    direction: list[float] = Field(description="[x, y, z] unit vector")
    half_angle: float = Field(description="Radians")
    max_range: float


class VisibilitySnapshot(BaseModel):
    """Result of one cone visibility query."""

    cone: ConeModel
    ray_count: int = Field(description="Ray budget passed to the sampler")
    visible_voxels: list[VoxelModel] = Field(default_factory=list)
    visible_count: int = 0
    obstacle_count: int = Field(default=0, description="Opaque voxels in the scene")
    rays: Optional[list[RayModel]] = None
    query_ms: float = 0.0
    timestamp: float = Field(default_factory=time.time)

    @classmethod
    def build(cls, cone, ray_count, visible, obstacle_count=0, rays=None, query_ms=0.0):
        return cls(
            cone=ConeModel(
                origin=list(cone.origin),
                direction=list(cone.direction),
                half_angle=cone.half_angle,
                max_range=cone.max_range,
            ),
            ray_count=ray_count,
            visible_voxels=[VoxelModel(x=v[0], y=v[1], z=v[2]) for v in visible],
            visible_count=len(visible),
            obstacle_count=obstacle_count,
            rays=(
                [RayModel(origin=list(r.origin), direction=list(r.direction)) for r in rays]
                if rays is not None
                else None
            ),
            query_ms=query_ms,
        )
