"""Bitruvius runtime - interaction state machine, history and frame scheduling."""

from bitruvius.engine.history import HistoryEngine
from bitruvius.engine.scheduler import (
    AnimationDriver,
    CalibrationDriver,
    DriverFrame,
    FrameScheduler,
    TimelapseDriver,
)
from bitruvius.engine.session import DragCapture, PosingSession

__all__ = [
    "AnimationDriver",
    "CalibrationDriver",
    "DragCapture",
    "DriverFrame",
    "FrameScheduler",
    "HistoryEngine",
    "PosingSession",
    "TimelapseDriver",
]
