"""Pose, proportion and transform models for the posing engine."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bitruvius.models.enums import Axis, BodyPart, Joint
from bitruvius.models.skeleton import JOINT_ORDER, PART_ORDER

if TYPE_CHECKING:
    from collections.abc import Mapping


class Vector2D(BaseModel):
    """A point or direction in the y-down drawing plane."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vector2D) -> Vector2D:
        return Vector2D(x=self.x + other.x, y=self.y + other.y)

    def __sub__(self, other: Vector2D) -> Vector2D:
        return Vector2D(x=self.x - other.x, y=self.y - other.y)

    def rotated(self, degrees: float) -> Vector2D:
        """Rotate around the origin by *degrees* (clockwise on screen)."""
        r = math.radians(degrees)
        c = math.cos(r)
        s = math.sin(r)
        return Vector2D(x=self.x * c - self.y * s, y=self.x * s + self.y * c)

    def distance_to(self, other: Vector2D) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


class Proportion(BaseModel):
    """Width/height scale multipliers for one body part."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    w: float = Field(default=1.0, gt=0)
    h: float = Field(default=1.0, gt=0)

    def axis(self, axis: Axis) -> float:
        return self.w if axis is Axis.WIDTH else self.h


class Pose(BaseModel):
    """Immutable snapshot of every joint offset and part proportion.

    Both maps are always complete: missing joints default to a 0 degree
    offset and missing parts to a 1.0 x 1.0 proportion.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    offsets: dict[Joint, float] = Field(default_factory=dict, validate_default=True)
    props: dict[BodyPart, Proportion] = Field(default_factory=dict, validate_default=True)

    @field_validator("offsets")
    @classmethod
    def _complete_offsets(cls, value: dict[Joint, float]) -> dict[Joint, float]:
        return {joint: float(value.get(joint, 0.0)) for joint in JOINT_ORDER}

    @field_validator("props")
    @classmethod
    def _complete_props(cls, value: dict[BodyPart, Proportion]) -> dict[BodyPart, Proportion]:
        return {part: value.get(part) or Proportion() for part in PART_ORDER}

    def offset(self, joint: Joint) -> float:
        return self.offsets.get(joint, 0.0)

    def proportion(self, part: BodyPart) -> Proportion:
        return self.props.get(part) or Proportion()

    def with_offsets(self, values: Mapping[Joint, float]) -> Pose:
        """Return a new pose with the given absolute offsets replaced."""
        return Pose(offsets={**self.offsets, **values}, props=self.props)

    def apply_deltas(self, deltas: Mapping[Joint, float]) -> Pose:
        """Return a new pose with *deltas* added to the current offsets."""
        updated = {joint: self.offset(joint) + delta for joint, delta in deltas.items()}
        return self.with_offsets(updated)

    def with_proportion(self, part: BodyPart, axis: Axis, value: float) -> Pose:
        current = self.proportion(part)
        scaled = Proportion(**{**current.model_dump(), axis.value: value})
        return Pose(offsets=self.offsets, props={**self.props, part: scaled})

    def with_props(self, props: Mapping[BodyPart, Proportion]) -> Pose:
        return Pose(offsets=self.offsets, props=dict(props))


class GlobalTransform(BaseModel):
    """Absolute placement of a body part after forward kinematics.

    ``position`` is the part's anchor (proximal end), ``rotation`` its absolute
    rotation in degrees, ``length``/``width`` its scaled dimensions.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    position: Vector2D
    rotation: float
    length: float
    width: float


def default_proportions() -> dict[BodyPart, Proportion]:
    return {part: Proportion() for part in PART_ORDER}
