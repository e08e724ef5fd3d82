"""Joint influence propagation through the kinematic tree."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bitruvius.models.enums import Joint, JointMode
from bitruvius.models.skeleton import KINEMATIC_TREE

if TYPE_CHECKING:
    from collections.abc import Mapping

    from bitruvius.models.pose import Pose

logger = logging.getLogger(__name__)


def propagate(
    joint: Joint,
    delta: float,
    modes: Mapping[Joint, JointMode],
) -> dict[Joint, float]:
    """Return the rotation delta for every joint affected by rotating *joint*.

    *joint* itself receives *delta*. From there the push is depth-first,
    parent to child: a ``bend`` joint hands its own delta to each direct
    child, a ``stretch`` joint hands the negated delta, and an ``fk`` joint
    stops the push for its whole subtree. A zero delta affects nothing.
    """
    if delta == 0:
        return {}

    deltas: dict[Joint, float] = {joint: delta}
    stack: list[tuple[Joint, float]] = [(joint, delta)]

    while stack:
        parent, applied = stack.pop()
        mode = modes.get(parent, JointMode.FK)
        if mode == JointMode.FK:
            continue
        child_delta = applied if mode == JointMode.BEND else -applied
        for child in reversed(KINEMATIC_TREE[parent]):
            deltas[child] = deltas.get(child, 0.0) + child_delta
            stack.append((child, child_delta))

    logger.debug("Propagated %+.2f from %s to %d joints", delta, joint, len(deltas))
    return deltas


def rotate_joint(
    pose: Pose,
    joint: Joint,
    value: float,
    modes: Mapping[Joint, JointMode],
) -> Pose | None:
    """Set *joint* to *value* and push the change through the tree.

    Returns the new pose, or ``None`` when *value* equals the current offset.
    """
    deltas = propagate(joint, value - pose.offset(joint), modes)
    if not deltas:
        return None
    # The target lands exactly on *value* rather than on offset + delta.
    return pose.apply_deltas(deltas).with_offsets({joint: value})
