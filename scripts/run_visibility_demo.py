#!/usr/bin/env python3
"""
Run the voxel visibility demo headless.

Builds the walls-and-pillars scene, points the default cone into it,
optionally spins the cone about the vertical axis for a number of frames,
and reports ray count, visible voxels, obstacle count and query time per
frame.

Usage:
    python scripts/run_visibility_demo.py [--frames 60] [--seed 7]
    python scripts/run_visibility_demo.py --json --rays > snapshot.json
"""

import argparse
import logging
import math
import sys
from dataclasses import replace
from pathlib import Path

import numpy as np

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from voxelsight.config.grid_config import get_visibility_config
from voxelsight.map.scene import SceneLayout, build_demo_scene, regenerate
from voxelsight.map.world import World
from voxelsight.utils.logging_config import setup_logging
from voxelsight.visibility.aggregator import VoxelVisibility
from voxelsight.visibility.cone import rotate_cone

logger = logging.getLogger("run_visibility_demo")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Headless voxel visibility demo")
    parser.add_argument("--frames", type=int, default=1, help="Frames to simulate")
    parser.add_argument("--seed", type=int, default=None, help="Pillar placement seed")
    parser.add_argument("--half-angle-deg", type=float, default=None, help="Override cone half-angle")
    parser.add_argument("--max-range", type=float, default=None, help="Override cone range")
    parser.add_argument("--speed", type=float, default=None, help="Rotation speed (rad/s)")
    parser.add_argument(
        "--regenerate-every", type=int, default=0,
        help="Rebuild the scene every N frames (0 = never)",
    )
    parser.add_argument("--json", action="store_true", help="Print the last snapshot as JSON")
    parser.add_argument("--rays", action="store_true", help="Include sampled rays in the JSON")
    parser.add_argument("--debug", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(app_name="visibility_demo", debug=args.debug)

    cfg = get_visibility_config()
    grid = cfg.grid_config()
    cone = cfg.default_cone()
    if args.half_angle_deg is not None or args.max_range is not None:
        cone = replace(
            cone,
            half_angle=math.radians(args.half_angle_deg) if args.half_angle_deg is not None else cone.half_angle,
            max_range=args.max_range if args.max_range is not None else cone.max_range,
        )
        try:
            cone.validate()
        except ValueError as e:
            logger.error("Invalid cone: %s", e)
            return 2

    speed = args.speed if args.speed is not None else cfg.get("animation", "rotation_speed_rad_s")
    dt = cfg.get("animation", "frame_dt_s")

    rng = np.random.default_rng(args.seed)
    layout = SceneLayout.from_config()
    world = World(grid)
    obstacles = build_demo_scene(world, layout, rng)
    vis = VoxelVisibility(world)

    snapshot = None
    for frame in range(max(1, args.frames)):
        if args.regenerate_every and frame and frame % args.regenerate_every == 0:
            obstacles = regenerate(world, layout, rng)
        snapshot = vis.snapshot(cone, include_rays=args.rays, obstacle_count=obstacles)
        logger.info(
            "frame=%d rays=%d visible=%d obstacles=%d query=%.1fms",
            frame, snapshot.ray_count, snapshot.visible_count,
            snapshot.obstacle_count, snapshot.query_ms,
        )
        cone = rotate_cone(cone, speed, dt)

    if args.json and snapshot is not None:
        print(snapshot.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
