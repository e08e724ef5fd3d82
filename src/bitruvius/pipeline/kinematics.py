"""Forward kinematics: joint offsets and proportions to absolute part transforms."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bitruvius.models.enums import Axis, BodyPart, Joint, Side
from bitruvius.models.pose import GlobalTransform, Pose, Vector2D
from bitruvius.models.skeleton import (
    JOINT_TO_PART,
    PART_SPECS,
    SHOULDER_SIDE_BIAS,
    SHOULDER_X_OFFSET,
    side_joint,
    side_part,
)

if TYPE_CHECKING:
    from collections.abc import Mapping


# Direction of a segment in its own frame; y grows downwards.
_UP = Vector2D(x=0.0, y=-1.0)
_DOWN = Vector2D(x=0.0, y=1.0)

DEFAULT_COLLECTION_FRACTION = 0.85


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def scaled_dimension(pose: Pose, part: BodyPart, axis: Axis, base_unit: float) -> float:
    """Raw part dimension scaled by the base unit and the part's proportion."""
    spec = PART_SPECS[part]
    raw = spec.raw_h if axis is Axis.HEIGHT else spec.raw_w
    return raw * base_unit * pose.proportion(part).axis(axis)


def solve_pose(pose: Pose, base_unit: float) -> dict[BodyPart, GlobalTransform]:
    """Compute the absolute transform of every body part.

    The waist sits at the origin. Torso, collar and head stack upwards, each
    anchored at its parent's distal point. Arms hang from the collar's distal
    point with a lateral rigging offset and a fixed side bias. Legs are
    anchored directly at the waist position and rotate relative to the
    waist, not through the torso.

    The traversal is fixed rather than generic because both sides share the
    waist and collar anchors with side-dependent offsets.
    """
    trans: dict[BodyPart, GlobalTransform] = {}

    def place(part: BodyPart, position: Vector2D, rotation: float) -> GlobalTransform:
        t = GlobalTransform(
            position=position,
            rotation=rotation,
            length=scaled_dimension(pose, part, Axis.HEIGHT, base_unit),
            width=scaled_dimension(pose, part, Axis.WIDTH, base_unit),
        )
        trans[part] = t
        return t

    waist = place(BodyPart.WAIST, Vector2D(), pose.offset(Joint.WAIST))
    torso = place(
        BodyPart.TORSO,
        _step(waist.position, waist.length, _UP, waist.rotation),
        waist.rotation + pose.offset(Joint.TORSO),
    )
    collar = place(
        BodyPart.COLLAR,
        _step(torso.position, torso.length, _UP, torso.rotation),
        torso.rotation + pose.offset(Joint.COLLAR),
    )
    collar_end = _step(collar.position, collar.length, _UP, collar.rotation)
    place(BodyPart.HEAD, collar_end, collar.rotation + pose.offset(Joint.NECK))

    for side in (Side.RIGHT, Side.LEFT):
        lateral = Vector2D(x=SHOULDER_X_OFFSET[side] * base_unit, y=0.0)
        upper = place(
            side_part(side, "upper_arm"),
            collar_end + lateral.rotated(collar.rotation),
            collar.rotation + SHOULDER_SIDE_BIAS[side] + pose.offset(side_joint(side, "shoulder")),
        )
        lower = place(
            side_part(side, "lower_arm"),
            _step(upper.position, upper.length, _DOWN, upper.rotation),
            upper.rotation + pose.offset(side_joint(side, "elbow")),
        )
        place(
            side_part(side, "hand"),
            _step(lower.position, lower.length, _DOWN, lower.rotation),
            lower.rotation + pose.offset(side_joint(side, "hand")),
        )

    for side in (Side.RIGHT, Side.LEFT):
        thigh = place(
            side_part(side, "upper_leg"),
            waist.position,
            waist.rotation + pose.offset(side_joint(side, "hip")),
        )
        calf = place(
            side_part(side, "lower_leg"),
            _step(thigh.position, thigh.length, _DOWN, thigh.rotation),
            thigh.rotation + pose.offset(side_joint(side, "knee")),
        )
        foot = place(
            side_part(side, "foot"),
            _step(calf.position, calf.length, _DOWN, calf.rotation),
            calf.rotation + pose.offset(side_joint(side, "foot")),
        )
        place(
            side_part(side, "toe"),
            _step(foot.position, foot.length, _DOWN, foot.rotation),
            foot.rotation + pose.offset(side_joint(side, "toe")),
        )

    return trans


def distal_point(part: BodyPart, transform: GlobalTransform) -> Vector2D:
    """End of the part opposite its anchor."""
    direction = _UP if PART_SPECS[part].draws_upwards else _DOWN
    return _step(transform.position, transform.length, direction, transform.rotation)


def joint_position(joint: Joint, transforms: Mapping[BodyPart, GlobalTransform]) -> Vector2D:
    """Anchor position of the part driven by *joint*, origin if unknown."""
    t = transforms.get(JOINT_TO_PART[joint])
    return t.position if t is not None else Vector2D()


def place_transforms(
    transforms: Mapping[BodyPart, GlobalTransform],
    *,
    root: Vector2D | None = None,
    body_rotation: float = 0.0,
    pivot: Vector2D | None = None,
) -> dict[BodyPart, GlobalTransform]:
    """Rotate the whole figure around *pivot*, then translate it by *root*."""
    root = root or Vector2D()
    pivot = pivot or Vector2D()
    placed: dict[BodyPart, GlobalTransform] = {}
    for part, t in transforms.items():
        position = root + pivot + (t.position - pivot).rotated(body_rotation)
        placed[part] = t.model_copy(
            update={"position": position, "rotation": t.rotation + body_rotation},
        )
    return placed


def collection_points(
    transforms: Mapping[BodyPart, GlobalTransform],
    fraction: float = DEFAULT_COLLECTION_FRACTION,
) -> dict[Side, Vector2D]:
    """Point *fraction* x hand length past each wrist along the hand."""
    points: dict[Side, Vector2D] = {}
    for side in (Side.LEFT, Side.RIGHT):
        hand = transforms[side_part(side, "hand")]
        points[side] = _step(hand.position, hand.length * fraction, _DOWN, hand.rotation)
    return points


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _step(origin: Vector2D, length: float, direction: Vector2D, rotation: float) -> Vector2D:
    offset = Vector2D(x=direction.x * length, y=direction.y * length)
    return origin + offset.rotated(rotation)
