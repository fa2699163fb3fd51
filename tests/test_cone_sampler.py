"""Tests for cone construction and ray sampling."""

import math
from dataclasses import replace

import numpy as np
import pytest

from voxelsight.utils.vector_math import dot, length, normalize
from voxelsight.visibility.cone import (
    Cone,
    Ray,
    cone_basis,
    cone_rays,
    generate_cone_rays,
    ring_radii,
    rotate_cone,
)


class TestCone:
    def test_max_radius(self, default_cone):
        assert default_cone.max_radius == pytest.approx(20.0 * math.tan(math.pi / 6))

    def test_validate_accepts_default(self, default_cone):
        default_cone.validate()

    @pytest.mark.parametrize(
        "kwargs,match",
        [
            ({"half_angle": 0.0}, "half_angle"),
            ({"half_angle": math.pi / 2}, "half_angle"),
            ({"max_range": 0.0}, "max_range"),
            ({"direction": (0.0, 0.0, 2.0)}, "unit"),
        ],
    )
    def test_validate_rejects(self, default_cone, kwargs, match):
        with pytest.raises(ValueError, match=match):
            replace(default_cone, **kwargs).validate()

    def test_rotated_y_quarter_turn(self, default_cone):
        turned = default_cone.rotated_y(math.pi / 2)
        np.testing.assert_allclose(turned.direction, (-1.0, 0.0, 0.0), atol=1e-12)
        assert turned.origin == default_cone.origin
        assert turned.half_angle == default_cone.half_angle

    def test_rotate_cone_uses_speed_times_dt(self, default_cone):
        np.testing.assert_allclose(
            rotate_cone(default_cone, 2.0, 0.25).direction,
            default_cone.rotated_y(0.5).direction,
        )

    def test_with_direction_normalizes(self, default_cone):
        c = default_cone.with_direction((3.0, 0.0, 4.0))
        assert c.direction == pytest.approx((0.6, 0.0, 0.8))


class TestConeBasis:
    @pytest.mark.parametrize(
        "direction",
        [(0.0, 0.0, 1.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, -1.0, 0.0), normalize((0.3, 0.95, 0.1))],
    )
    def test_orthonormal(self, direction):
        right, forward = cone_basis(direction)
        assert length(right) == pytest.approx(1.0)
        assert length(forward) == pytest.approx(1.0)
        assert dot(right, forward) == pytest.approx(0.0, abs=1e-12)
        assert dot(right, direction) == pytest.approx(0.0, abs=1e-12)
        assert dot(forward, direction) == pytest.approx(0.0, abs=1e-12)

    def test_horizontal_direction_uses_world_up(self):
        right, forward = cone_basis((0.0, 0.0, 1.0))
        assert right == pytest.approx((-1.0, 0.0, 0.0))
        assert forward == pytest.approx((0.0, -1.0, 0.0))


class TestRingRadii:
    def test_clamped_last_ring(self):
        assert list(ring_radii(2.5, 1.0)) == [1.0, 2.0, 2.5]

    def test_exact_multiple_has_no_extra_ring(self):
        assert list(ring_radii(3.0, 1.0)) == [1.0, 2.0, 3.0]

    def test_narrow_cone_has_no_rings(self):
        assert list(ring_radii(0.4, 1.0)) == []

    def test_sub_voxel_ring(self):
        assert list(ring_radii(0.7, 1.0)) == [0.7]


class TestGenerateConeRays:
    @pytest.mark.parametrize("budget", [1, 0, -5])
    def test_single_ray_budget(self, default_cone, budget):
        rays = cone_rays(default_cone, budget, 1.0)
        assert rays == [Ray(origin=default_cone.origin, direction=default_cone.direction)]

    def test_center_ray_first(self, default_cone):
        first = next(generate_cone_rays(default_cone, 100, 1.0))
        assert first == default_cone.center_ray

    @pytest.mark.parametrize("budget", [2, 8, 10, 57, 300])
    def test_never_exceeds_budget(self, default_cone, budget):
        rays = cone_rays(default_cone, budget, 1.0)
        assert len(rays) == budget

    def test_first_ring_then_partial_second(self, default_cone):
        # ring r=1 holds ceil(2*pi) = 7 rays; 2 more come from ring r=2
        rays = cone_rays(default_cone, 10, 1.0)
        first_ring = rays[1:8]
        angle_1 = math.atan(1.0 / 20.0)
        angle_2 = math.atan(2.0 / 20.0)
        for r in first_ring:
            assert math.acos(dot(r.direction, default_cone.direction)) == pytest.approx(angle_1)
        for r in rays[8:]:
            assert math.acos(dot(r.direction, default_cone.direction)) == pytest.approx(angle_2)

    def test_rays_are_unit_and_inside_cone(self, default_cone):
        for ray in generate_cone_rays(default_cone, 10_000, 1.0):
            assert length(ray.direction) == pytest.approx(1.0)
            cos_off = dot(ray.direction, default_cone.direction)
            assert math.acos(min(1.0, cos_off)) <= default_cone.half_angle + 1e-9
            assert ray.origin == default_cone.origin

    def test_rays_stop_when_rings_run_out(self, default_cone):
        rays = cone_rays(default_cone, 10_000, 1.0)
        assert len(rays) == 494

    def test_narrow_cone_only_center_ray(self):
        cone = Cone(origin=(0.0, 0.0, 0.0), direction=(1.0, 0.0, 0.0), half_angle=0.01, max_range=10.0)
        assert len(cone_rays(cone, 50, 1.0)) == 1

    def test_vertical_cone(self):
        cone = Cone(origin=(0.0, 10.0, 0.0), direction=(0.0, -1.0, 0.0), half_angle=0.5, max_range=8.0)
        rays = cone_rays(cone, 200, 1.0)
        assert len(rays) > 1
        for ray in rays:
            assert all(math.isfinite(c) for c in ray.direction)
            assert ray.direction[1] < 0

    def test_restartable(self, default_cone):
        assert cone_rays(default_cone, 120, 1.0) == cone_rays(default_cone, 120, 1.0)

    def test_ring_rays_evenly_spaced(self, default_cone):
        rays = cone_rays(default_cone, 8, 1.0)[1:]
        right, forward = cone_basis(default_cone.direction)
        thetas = [math.atan2(dot(r.direction, forward), dot(r.direction, right)) for r in rays]
        np.testing.assert_allclose(np.diff(np.unwrap(thetas)), 2 * math.pi / 7)
