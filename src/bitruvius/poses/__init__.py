"""Built-in pose presets for Bitruvius."""

from bitruvius.poses.loader import PosePreset, available_presets, load

__all__ = ["PosePreset", "available_presets", "load"]
