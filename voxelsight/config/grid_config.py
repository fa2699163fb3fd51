"""
Grid geometry and visibility configuration.

``GridConfig`` is the immutable geometry handed to a ``World`` at
construction. ``VisibilityConfig`` is a singleton holding the tunable
defaults (grid, cone, demo scene, animation) read from
data/visibility_config.json and VOXELSIGHT_* environment variables.
All entry points should use `get_visibility_config()` instead of
hardcoding values.
"""

from __future__ import annotations

import copy
import json
import logging
import math
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_CONFIG_DIR = _PROJECT_ROOT / "data"
_CONFIG_FILE = _CONFIG_DIR / "visibility_config.json"

# Environment overrides, applied after the JSON overlay
ENV_CONFIG_FILE = "VOXELSIGHT_CONFIG_FILE"
ENV_VOXEL_SIZE = "VOXELSIGHT_VOXEL_SIZE"
ENV_GRID_SIZE = "VOXELSIGHT_GRID_SIZE"


@dataclass(frozen=True)
class GridConfig:
    """Geometry of a cubic voxel grid (``grid_size``³ cells).

    ``origin`` is the world position of grid-local corner (0, 0, 0). When
    None the grid is centred horizontally on the world origin and sits on
    the y=0 plane.
    """

    voxel_size: float = 1.0
    grid_size: int = 50
    origin: Optional[Tuple[float, float, float]] = None

    @property
    def world_origin(self) -> Tuple[float, float, float]:
        if self.origin is not None:
            return (float(self.origin[0]), float(self.origin[1]), float(self.origin[2]))
        half_extent = self.grid_size * self.voxel_size / 2
        return (-half_extent, 0.0, -half_extent)

    @property
    def origin_in_voxels(self) -> Tuple[float, float, float]:
        """Grid corner divided by voxel_size, i.e. the offset in voxel units.

        The centred default is exactly (-g/2, 0, -g/2), so index math stays
        ``floor(p / vs + g / 2)`` without a rounded world-space origin.
        """
        if self.origin is None:
            return (-self.grid_size / 2, 0.0, -self.grid_size / 2)
        vs = self.voxel_size
        o = self.world_origin
        return (o[0] / vs, o[1] / vs, o[2] / vs)

    @property
    def voxel_count(self) -> int:
        return self.grid_size ** 3

    def validate(self) -> None:
        """Raise ValueError for geometry the grid cannot represent.

        World does not call this; it is for entry points building a
        GridConfig from user input.
        """
        if not (isinstance(self.voxel_size, (int, float)) and self.voxel_size > 0):
            raise ValueError(f"voxel_size must be > 0, got {self.voxel_size!r}")
        if not (isinstance(self.grid_size, int) and self.grid_size > 0):
            raise ValueError(f"grid_size must be a positive int, got {self.grid_size!r}")
        if self.origin is not None and len(self.origin) != 3:
            raise ValueError(f"origin must have 3 components, got {self.origin!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "voxel_size": self.voxel_size,
            "grid_size": self.grid_size,
            "origin": list(self.origin) if self.origin is not None else None,
        }


# ── Defaults ──────────────────────────────────────────────────────────────

DEFAULTS: dict[str, Any] = {
    "grid": {
        "voxel_size": 1.0,
        "grid_size": 50,
        "origin": None,
    },
    "cone": {
        "origin": [0.0, 5.0, 0.0],
        "direction": [0.0, 0.0, 1.0],
        "half_angle_rad": math.pi / 6,
        "max_range": 20.0,
    },
    "scene": {
        "wall_start": 10,
        "wall_end": 40,
        "wall_height": 10,
        "wall_line": 20,
        "pillar_count": 5,
        "pillar_height": 15,
        "pillar_min": 5,
        "pillar_max": 45,
    },
    "animation": {
        "rotation_speed_rad_s": 1.0,
        "frame_dt_s": 1.0 / 60.0,
    },
}

_MISSING = object()


def _deep_merge(base: dict, overlay: dict):
    """Merge *overlay* into *base* in place, recursing into nested dicts."""
    for k, v in overlay.items():
        if isinstance(base.get(k), dict) and isinstance(v, dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v


def _changed(reference: dict, current: dict) -> dict:
    """Nested subset of *current* whose values differ from *reference*."""
    result = {}
    for k, v in current.items():
        ref = reference.get(k, _MISSING)
        if isinstance(v, dict) and isinstance(ref, dict):
            sub = _changed(ref, v)
            if sub:
                result[k] = sub
        elif v != ref:
            result[k] = v
    return result


class VisibilityConfig:
    """Singleton configuration for the visibility engine and demo scene.

    Values are layered: DEFAULTS, then the JSON file, then VOXELSIGHT_*
    environment overrides. Only the file layer is ever written back, so an
    env override lasts exactly as long as the variable does. Thread-safe.
    Auto-saves on change.
    """

    _instance: Optional[VisibilityConfig] = None
    _lock = threading.Lock()

    def __new__(cls) -> VisibilityConfig:
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._initialized = False
            return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._data: dict[str, Any] = copy.deepcopy(DEFAULTS)
        self._env: dict[str, dict[str, Any]] = {}
        self._initialized = True
        self._config_file = _CONFIG_FILE
        load_dotenv(_PROJECT_ROOT / ".env")
        env_file = os.getenv(ENV_CONFIG_FILE)
        if env_file:
            self._config_file = Path(env_file)
        self._load()
        self._read_env()

    def _load(self):
        """Merge the JSON file, if any, into the persisted layer."""
        if self._config_file.exists():
            try:
                saved = json.loads(self._config_file.read_text())
                _deep_merge(self._data, saved)
                logger.info("Loaded visibility config from %s", self._config_file)
            except Exception as e:
                logger.warning("Failed to load visibility config: %s", e)

    def _read_env(self):
        """Collect VOXELSIGHT_* overrides into the env layer."""
        for env_name, key, cast in (
            (ENV_VOXEL_SIZE, "voxel_size", float),
            (ENV_GRID_SIZE, "grid_size", int),
        ):
            raw = os.getenv(env_name)
            if raw is None:
                continue
            try:
                self._env.setdefault("grid", {})[key] = cast(raw)
            except ValueError:
                logger.warning("Ignoring %s=%r: not a valid %s", env_name, raw, cast.__name__)

    def _effective(self) -> dict[str, Any]:
        merged = copy.deepcopy(self._data)
        _deep_merge(merged, copy.deepcopy(self._env))
        return merged

    def _save(self):
        """Write the persisted layer (never the env layer) to disk."""
        try:
            self._config_file.parent.mkdir(parents=True, exist_ok=True)
            self._config_file.write_text(json.dumps(self._data, indent=2))
        except Exception as e:
            logger.warning("Failed to save visibility config: %s", e)

    @property
    def env_overrides(self) -> dict[str, Any]:
        """Values currently pinned by environment variables."""
        with self._lock:
            return copy.deepcopy(self._env)

    def get(self, section: str, key: Optional[str] = None) -> Any:
        """Effective value of ``section.key``, or the whole section if key is None."""
        with self._lock:
            sec = self._effective().get(section, {})
            return sec if key is None else sec.get(key)

    def set(self, section: str, key: str, value: Any):
        """Persist a value. An env override on the same key still wins on read."""
        with self._lock:
            self._data.setdefault(section, {})[key] = value
            if key in self._env.get(section, {}):
                logger.warning("%s.%s is overridden by the environment; saved value is shadowed", section, key)
            self._save()

    def get_all(self) -> dict[str, Any]:
        with self._lock:
            return self._effective()

    def update(self, data: dict[str, Any]):
        """Deep-merge *data* into the persisted layer and save."""
        with self._lock:
            _deep_merge(self._data, copy.deepcopy(data))
            self._save()

    def reset(self):
        """Drop saved values back to DEFAULTS. Env overrides stay in force."""
        with self._lock:
            self._data = copy.deepcopy(DEFAULTS)
            self._save()

    def get_defaults(self) -> dict[str, Any]:
        return copy.deepcopy(DEFAULTS)

    def diff(self) -> dict[str, Any]:
        """Effective values that differ from DEFAULTS."""
        with self._lock:
            return _changed(DEFAULTS, self._effective())

    def grid_config(self) -> GridConfig:
        """Build a validated GridConfig from the ``grid`` section."""
        grid = self.get("grid")
        origin = grid.get("origin")
        cfg = GridConfig(
            voxel_size=float(grid["voxel_size"]),
            grid_size=int(grid["grid_size"]),
            origin=tuple(origin) if origin is not None else None,
        )
        cfg.validate()
        return cfg

    def default_cone(self):
        """Build a validated Cone from the ``cone`` section."""
        from voxelsight.utils.vector_math import normalize
        from voxelsight.visibility.cone import Cone

        c = self.get("cone")
        cone = Cone(
            origin=tuple(c["origin"]),
            direction=normalize(c["direction"]),
            half_angle=float(c["half_angle_rad"]),
            max_range=float(c["max_range"]),
        )
        cone.validate()
        return cone


def get_visibility_config() -> VisibilityConfig:
    """Get the singleton VisibilityConfig instance."""
    return VisibilityConfig()
