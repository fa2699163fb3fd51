"""Ray budget needed to sample a cone at one-voxel angular spacing."""

import math

from voxelsight.visibility.cone import ring_radii, rays_for_ring


def calculate_ray_count_for_distance(distance: float, half_angle: float, voxel_size: float) -> int:
    """Number of rays ``generate_cone_rays`` needs to cover a cone out to *distance*.

    Sums the same rings the sampler walks, so passing the result as the
    sampler's budget produces every ring in full. This is a density
    target (one ray per voxel width of circumference per ring), not a
    guarantee that no voxel falls between rays.
    """
    max_radius = distance * math.tan(half_angle)
    total = 1  # centre ray
    for radius in ring_radii(max_radius, voxel_size):
        total += rays_for_ring(radius, voxel_size)
    return total
