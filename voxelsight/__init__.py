"""voxelsight: voxel-grid visibility and line-of-sight queries."""

__version__ = "0.1.0"
