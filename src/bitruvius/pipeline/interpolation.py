"""Pose interpolation: linear blends, snap-out easing and keyframe sampling."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from bitruvius.models.pose import Pose, Proportion
from bitruvius.models.skeleton import JOINT_ORDER, PART_ORDER

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from bitruvius.models.enums import Joint


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def lerp(a: float, b: float, t: float) -> float:
    """Linear blend that returns *a* exactly at 0 and *b* exactly at 1."""
    return a * (1.0 - t) + b * t


def snap_out_ease(t: float) -> float:
    """Exponentially decaying sine ease-out; overshoots slightly then settles."""
    if t <= 0:
        return 0.0
    if t >= 1:
        return 1.0
    c4 = (2 * math.pi) / 3
    return math.pow(2, -10 * t) * math.sin((t * 10 - 0.75) * c4) + 1


def blend_poses(a: Pose, b: Pose, u: float) -> Pose:
    """Interpolate every joint offset and every proportion axis."""
    offsets = {j: lerp(a.offset(j), b.offset(j), u) for j in JOINT_ORDER}
    props = {}
    for part in PART_ORDER:
        pa = a.proportion(part)
        pb = b.proportion(part)
        props[part] = Proportion(w=lerp(pa.w, pb.w, u), h=lerp(pa.h, pb.h, u))
    return Pose(offsets=offsets, props=props)


def ease_offsets(start: Pose, target: Mapping[Joint, float], eased: float) -> Pose:
    """Move every joint offset of *start* towards *target* by *eased*.

    Proportions are left untouched.
    """
    offsets = {j: lerp(start.offset(j), target.get(j, 0.0), eased) for j in JOINT_ORDER}
    return start.with_offsets(offsets)


def timelapse_duration(keyframe_count: int, segment_ms: float) -> float:
    """Total playback time for *keyframe_count* keyframes."""
    return max(keyframe_count - 1, 0) * segment_ms


def sample_keyframes(
    keyframes: Sequence[Pose],
    elapsed_ms: float,
    segment_ms: float,
) -> tuple[Pose, float]:
    """Sample the keyframe sequence at *elapsed_ms*.

    Returns the interpolated pose and the global progress in ``[0, 1]``.
    Progress is mapped to segment ``i`` and local fraction ``u`` so that
    ``t = k * segment_ms`` reproduces keyframe ``k`` exactly.
    """
    n = len(keyframes)
    if n < 2:
        msg = f"Timelapse needs at least 2 keyframes, got {n}"
        raise ValueError(msg)
    if segment_ms <= 0:
        msg = "segment_ms must be positive"
        raise ValueError(msg)

    total = timelapse_duration(n, segment_ms)
    progress = min(max(elapsed_ms, 0.0) / total, 1.0)
    steps = n - 1
    exact = progress * steps
    i = min(math.floor(exact), steps - 1)
    u = exact - i
    return blend_poses(keyframes[i], keyframes[i + 1], u), progress


def resample_keyframes(
    keyframes: Sequence[Pose],
    segment_ms: float,
    frame_interval_ms: float,
) -> list[Pose]:
    """Sample the whole timelapse at a fixed frame interval, end pose included."""
    if frame_interval_ms <= 0:
        msg = "frame_interval_ms must be positive"
        raise ValueError(msg)

    total = timelapse_duration(len(keyframes), segment_ms)
    frames: list[Pose] = []
    elapsed = 0.0
    while True:
        pose, progress = sample_keyframes(keyframes, elapsed, segment_ms)
        frames.append(pose)
        if progress >= 1:
            return frames
        elapsed = min(elapsed + frame_interval_ms, total)
