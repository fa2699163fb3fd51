"""Tests for demo scene construction."""

import numpy as np
import pytest

from voxelsight.config.grid_config import GridConfig
from voxelsight.map.scene import (
    SceneLayout,
    build_demo_scene,
    build_walls,
    place_pillars,
    regenerate,
)
from voxelsight.map.world import World


class TestSceneLayout:
    def test_defaults(self):
        layout = SceneLayout()
        assert layout.wall_line == 20
        assert layout.pillar_count == 5

    def test_from_dict_merges_defaults(self):
        layout = SceneLayout.from_dict({"pillar_count": 0, "wall_height": "4"})
        assert layout.pillar_count == 0
        assert layout.wall_height == 4
        assert layout.wall_start == 10


class TestBuildWalls:
    def test_write_count_and_overlap(self, default_world):
        writes = build_walls(default_world)
        assert writes == 600
        # the two walls share the column at x=20, z=20
        assert default_world.opaque_count() == 590

    def test_wall_positions(self, default_world):
        build_walls(default_world)
        assert default_world.is_voxel_opaque(10, 0, 20)
        assert default_world.is_voxel_opaque(39, 9, 20)
        assert default_world.is_voxel_opaque(20, 5, 33)
        assert not default_world.is_voxel_opaque(40, 0, 20)
        assert not default_world.is_voxel_opaque(15, 10, 20)


class TestPillars:
    def test_pillar_writes(self, default_world):
        writes = place_pillars(default_world, rng=np.random.default_rng(1))
        assert writes == 75
        assert 0 < default_world.opaque_count() <= 75

    def test_pillars_are_full_height_columns(self, default_world):
        place_pillars(default_world, rng=np.random.default_rng(2))
        for v in default_world.opaque_voxels():
            assert 5 <= v.x < 45 and 5 <= v.z < 45
            assert all(default_world.is_voxel_opaque(v.x, y, v.z) for y in range(15))
            assert not default_world.is_voxel_opaque(v.x, 15, v.z)

    def test_seed_reproducible(self, default_world):
        other = World(GridConfig())
        place_pillars(default_world, rng=np.random.default_rng(42))
        place_pillars(other, rng=np.random.default_rng(42))
        assert np.array_equal(default_world.as_array(), other.as_array())


class TestDemoScene:
    def test_obstacle_count(self, default_world):
        assert build_demo_scene(default_world, rng=np.random.default_rng(0)) == 675

    def test_regenerate_clears_first(self, default_world):
        build_demo_scene(default_world, rng=np.random.default_rng(0))
        default_world.set_voxel_opaque(0, 49, 0, True)
        assert regenerate(default_world, rng=np.random.default_rng(3)) == 675
        assert not default_world.is_voxel_opaque(0, 49, 0)
        assert default_world.is_voxel_opaque(10, 0, 20)

    def test_small_grid_writes_are_clipped(self):
        world = World(GridConfig(grid_size=12))
        layout = SceneLayout(pillar_count=0)
        build_demo_scene(world, layout)
        assert world.opaque_count() == 0
