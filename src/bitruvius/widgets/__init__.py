"""Bitruvius TUI custom widgets."""

from bitruvius.widgets.event_log import EventLogPanel
from bitruvius.widgets.joint_panel import JointPanel
from bitruvius.widgets.pose_canvas import CanvasFrame, PoseCanvas, rasterize

__all__ = [
    "CanvasFrame",
    "EventLogPanel",
    "JointPanel",
    "PoseCanvas",
    "rasterize",
]
