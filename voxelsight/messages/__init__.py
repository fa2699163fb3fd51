"""Pydantic schemas for data leaving the engine."""

from voxelsight.messages.visibility import ConeModel, RayModel, VisibilitySnapshot, VoxelModel

__all__ = ["ConeModel", "RayModel", "VisibilitySnapshot", "VoxelModel"]
