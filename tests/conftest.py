"""
Shared test fixtures for the voxelsight test suite.
"""

import math
import sys
from pathlib import Path

import numpy as np
import pytest

# Ensure project root on path
sys.path.insert(0, str(Path(__file__).parent.parent))

from voxelsight.config.grid_config import GridConfig
from voxelsight.map.scene import build_demo_scene
from voxelsight.map.world import World
from voxelsight.visibility.cone import Cone


@pytest.fixture
def small_world():
    """10^3 grid of unit voxels with its corner at the world origin."""
    return World(GridConfig(voxel_size=1.0, grid_size=10, origin=(0.0, 0.0, 0.0)))


@pytest.fixture
def default_world():
    """50^3 grid centred horizontally on the world origin, no obstacles."""
    return World(GridConfig())


@pytest.fixture
def demo_world():
    """Default grid with walls and seeded pillars."""
    world = World(GridConfig())
    build_demo_scene(world, rng=np.random.default_rng(1234))
    return world


@pytest.fixture
def default_cone():
    return Cone(
        origin=(0.0, 5.0, 0.0),
        direction=(0.0, 0.0, 1.0),
        half_angle=math.pi / 6,
        max_range=20.0,
    )
