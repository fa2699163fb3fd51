"""Configuration: grid geometry and tunable defaults."""

from voxelsight.config.grid_config import GridConfig, VisibilityConfig, get_visibility_config

__all__ = ["GridConfig", "VisibilityConfig", "get_visibility_config"]
