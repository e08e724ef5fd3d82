"""Static skeletal model: kinematic tree, part drivers and raw anatomy.

All lengths are expressed in *head units* and are scaled at solve time by the
base unit and the per-part proportion.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from bitruvius.models.enums import BodyPart, Joint, Side

if TYPE_CHECKING:
    from collections.abc import Mapping

# Canonical orders used by the pose text format and by every total lookup.
JOINT_ORDER: tuple[Joint, ...] = tuple(Joint)
PART_ORDER: tuple[BodyPart, ...] = tuple(BodyPart)

ROOT_JOINT = Joint.WAIST

KINEMATIC_TREE: Mapping[Joint, tuple[Joint, ...]] = MappingProxyType({
    Joint.WAIST: (Joint.TORSO, Joint.L_HIP, Joint.R_HIP),
    Joint.TORSO: (Joint.COLLAR,),
    Joint.COLLAR: (Joint.NECK, Joint.L_SHOULDER, Joint.R_SHOULDER),
    Joint.NECK: (),
    Joint.L_SHOULDER: (Joint.L_ELBOW,),
    Joint.L_ELBOW: (Joint.L_HAND,),
    Joint.L_HAND: (),
    Joint.R_SHOULDER: (Joint.R_ELBOW,),
    Joint.R_ELBOW: (Joint.R_HAND,),
    Joint.R_HAND: (),
    Joint.L_HIP: (Joint.L_KNEE,),
    Joint.L_KNEE: (Joint.L_FOOT,),
    Joint.L_FOOT: (Joint.L_TOE,),
    Joint.L_TOE: (),
    Joint.R_HIP: (Joint.R_KNEE,),
    Joint.R_KNEE: (Joint.R_FOOT,),
    Joint.R_FOOT: (Joint.R_TOE,),
    Joint.R_TOE: (),
})

JOINT_PARENT: Mapping[Joint, Joint] = MappingProxyType({
    child: parent for parent, children in KINEMATIC_TREE.items() for child in children
})

# Each body part is driven by exactly one joint's cumulative rotation.
JOINT_TO_PART: Mapping[Joint, BodyPart] = MappingProxyType({
    Joint.WAIST: BodyPart.WAIST,
    Joint.TORSO: BodyPart.TORSO,
    Joint.COLLAR: BodyPart.COLLAR,
    Joint.NECK: BodyPart.HEAD,
    Joint.L_SHOULDER: BodyPart.L_UPPER_ARM,
    Joint.L_ELBOW: BodyPart.L_LOWER_ARM,
    Joint.L_HAND: BodyPart.L_HAND,
    Joint.R_SHOULDER: BodyPart.R_UPPER_ARM,
    Joint.R_ELBOW: BodyPart.R_LOWER_ARM,
    Joint.R_HAND: BodyPart.R_HAND,
    Joint.L_HIP: BodyPart.L_UPPER_LEG,
    Joint.L_KNEE: BodyPart.L_LOWER_LEG,
    Joint.L_FOOT: BodyPart.L_FOOT,
    Joint.L_TOE: BodyPart.L_TOE,
    Joint.R_HIP: BodyPart.R_UPPER_LEG,
    Joint.R_KNEE: BodyPart.R_LOWER_LEG,
    Joint.R_FOOT: BodyPart.R_FOOT,
    Joint.R_TOE: BodyPart.R_TOE,
})

PART_TO_JOINT: Mapping[BodyPart, Joint] = MappingProxyType(
    {part: joint for joint, part in JOINT_TO_PART.items()}
)


@dataclass(frozen=True)
class PartSpec:
    """Raw (unscaled) dimensions of a body part in head units."""

    raw_h: float
    raw_w: float
    label: str
    draws_upwards: bool = False


PART_SPECS: Mapping[BodyPart, PartSpec] = MappingProxyType({
    BodyPart.HEAD: PartSpec(1.0, 0.75, "Head", draws_upwards=True),
    BodyPart.COLLAR: PartSpec(0.2, 1.4, "Collar", draws_upwards=True),
    BodyPart.TORSO: PartSpec(1.3, 1.1, "Torso", draws_upwards=True),
    BodyPart.WAIST: PartSpec(0.9, 0.95, "Waist", draws_upwards=True),
    BodyPart.L_UPPER_ARM: PartSpec(1.3, 0.32, "L.Bicep"),
    BodyPart.L_LOWER_ARM: PartSpec(1.15, 0.26, "L.Forearm"),
    BodyPart.L_HAND: PartSpec(0.6, 0.3, "L.Hand"),
    BodyPart.R_UPPER_ARM: PartSpec(1.3, 0.32, "R.Bicep"),
    BodyPart.R_LOWER_ARM: PartSpec(1.15, 0.26, "R.Forearm"),
    BodyPart.R_HAND: PartSpec(0.6, 0.3, "R.Hand"),
    BodyPart.L_UPPER_LEG: PartSpec(1.9, 0.42, "L.Thigh"),
    BodyPart.L_LOWER_LEG: PartSpec(1.7, 0.32, "L.Calf"),
    BodyPart.L_FOOT: PartSpec(0.55, 0.26, "L.Foot"),
    BodyPart.L_TOE: PartSpec(0.25, 0.26, "L.Toe"),
    BodyPart.R_UPPER_LEG: PartSpec(1.9, 0.42, "R.Thigh"),
    BodyPart.R_LOWER_LEG: PartSpec(1.7, 0.32, "R.Calf"),
    BodyPart.R_FOOT: PartSpec(0.55, 0.26, "R.Foot"),
    BodyPart.R_TOE: PartSpec(0.25, 0.26, "R.Toe"),
})

# Lateral shoulder attachment relative to the collar's distal point, in head units.
SHOULDER_X_OFFSET: Mapping[Side, float] = MappingProxyType({
    Side.LEFT: -0.6,
    Side.RIGHT: 0.6,
})

# Arms hang sideways from the collar: +90 swings a y-down segment towards -x.
SHOULDER_SIDE_BIAS: Mapping[Side, float] = MappingProxyType({
    Side.LEFT: 90.0,
    Side.RIGHT: -90.0,
})


def side_joint(side: Side, name: str) -> Joint:
    """Return the sided joint, e.g. ``side_joint(Side.LEFT, "elbow")``."""
    return Joint(f"{side.value}_{name}")


def side_part(side: Side, name: str) -> BodyPart:
    """Return the sided body part, e.g. ``side_part(Side.RIGHT, "hand")``."""
    return BodyPart(f"{side.value}_{name}")


def descendants(joint: Joint) -> list[Joint]:
    """Return every joint below *joint* in depth-first order."""
    result: list[Joint] = []
    stack = list(reversed(KINEMATIC_TREE[joint]))
    while stack:
        current = stack.pop()
        result.append(current)
        stack.extend(reversed(KINEMATIC_TREE[current]))
    return result
