"""Bitruvius data models - pure Pydantic, no I/O."""

from bitruvius.models.enums import (
    AssetKind,
    Axis,
    BodyPart,
    InteractionState,
    Joint,
    JointMode,
    Side,
)
from bitruvius.models.history import HistoryEntry
from bitruvius.models.pose import GlobalTransform, Pose, Proportion, Vector2D

__all__ = [
    "AssetKind",
    "Axis",
    "BodyPart",
    "GlobalTransform",
    "HistoryEntry",
    "InteractionState",
    "Joint",
    "JointMode",
    "Pose",
    "Proportion",
    "Side",
    "Vector2D",
]
