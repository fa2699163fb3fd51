"""
Cone ray sampling.

A viewing cone is covered by a centre ray plus concentric rings of rays.
Ring radii are measured on the plane at ``max_range`` and step outward by
one voxel width; each ring carries roughly one ray per voxel width of
circumference so neighbouring rays land about a voxel apart at full range.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Iterator, List, Tuple

from voxelsight.utils import vector_math as vm
from voxelsight.utils.vector_math import Vec3

logger = logging.getLogger(__name__)

# |direction.y| above this makes world-up nearly parallel to the axis
NEAR_VERTICAL = 0.9

WORLD_UP: Vec3 = (0.0, 1.0, 0.0)
WORLD_RIGHT: Vec3 = (1.0, 0.0, 0.0)


@dataclass(frozen=True)
class Ray:
    origin: Vec3
    direction: Vec3


@dataclass(frozen=True)
class Cone:
    """Viewing cone. ``direction`` must be unit length."""

    origin: Vec3
    direction: Vec3
    half_angle: float  # radians, in (0, pi/2)
    max_range: float

    @property
    def max_radius(self) -> float:
        """Cross-section radius at ``max_range``."""
        return self.max_range * math.tan(self.half_angle)

    @property
    def center_ray(self) -> Ray:
        return Ray(origin=self.origin, direction=self.direction)

    def validate(self) -> None:
        if not (0 < self.half_angle < math.pi / 2):
            raise ValueError(f"half_angle must be in (0, pi/2), got {self.half_angle}")
        if not self.max_range > 0:
            raise ValueError(f"max_range must be > 0, got {self.max_range}")
        if abs(vm.length(self.direction) - 1.0) > 1e-6:
            raise ValueError(f"direction must be unit length, got {self.direction}")

    def with_direction(self, direction) -> Cone:
        return replace(self, direction=vm.normalize(direction))

    def rotated_y(self, angle: float) -> Cone:
        """Copy of this cone turned about the vertical axis by *angle* radians."""
        return replace(self, direction=vm.rotate_vector_y(self.direction, angle))


def rotate_cone(cone: Cone, speed: float, dt: float) -> Cone:
    """Advance a spinning cone by one animation frame."""
    return cone.rotated_y(speed * dt)


def cone_basis(direction: Vec3) -> Tuple[Vec3, Vec3]:
    """Two unit vectors perpendicular to *direction* and to each other."""
    up = WORLD_RIGHT if abs(direction[1]) > NEAR_VERTICAL else WORLD_UP
    right = vm.normalize(vm.cross(direction, up))
    forward = vm.cross(direction, right)
    return right, forward


def ring_radii(max_radius: float, voxel_size: float) -> Iterator[float]:
    """Radii of the sampling rings: one voxel apart, the last clamped to *max_radius*.

    Yields nothing when the cone is narrower than half a voxel.
    """
    if max_radius < voxel_size / 2:
        return
    radius = 0.0
    while radius < max_radius:
        radius += voxel_size
        if radius > max_radius:
            radius = max_radius
        yield radius


def rays_for_ring(radius: float, voxel_size: float) -> int:
    """One ray per voxel width of circumference, at least one."""
    return max(1, math.ceil(2 * math.pi * radius / voxel_size))


def generate_cone_rays(cone: Cone, ray_count: int, voxel_size: float) -> Iterator[Ray]:
    """Lazily yield at most *ray_count* rays covering *cone*.

    The centre ray always comes first. Rings are filled innermost first;
    the last ring is truncated if the budget runs out, and fewer rays than
    requested are produced if the rings end before the budget does.
    """
    yield cone.center_ray
    if ray_count <= 1:
        return

    remaining = ray_count - 1
    right, forward = cone_basis(cone.direction)
    d = cone.direction
    for radius in ring_radii(cone.max_radius, voxel_size):
        if remaining <= 0:
            break
        ring_angle = math.atan(radius / cone.max_range)
        cos_ring = math.cos(ring_angle)
        sin_ring = math.sin(ring_angle)
        n = min(remaining, rays_for_ring(radius, voxel_size))
        for i in range(n):
            theta = 2 * math.pi * i / n
            c = math.cos(theta)
            s = math.sin(theta)
            yield Ray(
                origin=cone.origin,
                direction=(
                    d[0] * cos_ring + (right[0] * c + forward[0] * s) * sin_ring,
                    d[1] * cos_ring + (right[1] * c + forward[1] * s) * sin_ring,
                    d[2] * cos_ring + (right[2] * c + forward[2] * s) * sin_ring,
                ),
            )
        remaining -= n


def cone_rays(cone: Cone, ray_count: int, voxel_size: float) -> List[Ray]:
    """Materialized ``generate_cone_rays``, e.g. for debug-ray display."""
    return list(generate_cone_rays(cone, ray_count, voxel_size))
