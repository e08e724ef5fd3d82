"""Tests for easing, blending and keyframe sampling."""

import pytest

from bitruvius.models import Axis, BodyPart, Joint, Pose
from bitruvius.pipeline.interpolation import (
    blend_poses,
    ease_offsets,
    lerp,
    resample_keyframes,
    sample_keyframes,
    snap_out_ease,
    timelapse_duration,
)

K0 = Pose(offsets={Joint.L_ELBOW: 0})
K1 = Pose(offsets={Joint.L_ELBOW: 90, Joint.R_KNEE: 30}).with_proportion(
    BodyPart.HEAD, Axis.HEIGHT, 1.5,
)
K2 = Pose(offsets={Joint.L_ELBOW: -45, Joint.R_KNEE: 10})


def test_lerp_exact_at_bounds():
    assert lerp(0.1, 0.7, 0) == 0.1
    assert lerp(0.1, 0.7, 1) == 0.7
    assert lerp(0, 10, 0.25) == 2.5


def test_snap_out_ease_bounds():
    assert snap_out_ease(0) == 0.0
    assert snap_out_ease(1) == 1.0
    assert snap_out_ease(-1) == 0.0
    assert snap_out_ease(2) == 1.0


def test_snap_out_ease_overshoots_then_settles():
    values = [snap_out_ease(i / 100) for i in range(1, 100)]
    assert max(values) > 1.0
    assert values[-1] == pytest.approx(1.0, abs=1e-3)


def test_blend_poses_interpolates_offsets_and_props():
    mid = blend_poses(K0, K1, 0.5)
    assert mid.offset(Joint.L_ELBOW) == 45
    assert mid.offset(Joint.R_KNEE) == 15
    assert mid.proportion(BodyPart.HEAD).h == pytest.approx(1.25)
    assert mid.proportion(BodyPart.HEAD).w == 1.0


def test_ease_offsets_keeps_proportions():
    eased = ease_offsets(K1, {}, 1.0)
    assert all(v == 0 for v in eased.offsets.values())
    assert eased.proportion(BodyPart.HEAD).h == 1.5


def test_duration():
    assert timelapse_duration(3, 250) == 500
    assert timelapse_duration(1, 250) == 0


@pytest.mark.parametrize(("elapsed", "expected"), [(0, K0), (250, K1), (500, K2), (900, K2)])
def test_sample_hits_keyframes_exactly(elapsed: float, expected: Pose):
    pose, _ = sample_keyframes([K0, K1, K2], elapsed, 250)
    assert pose == expected


def test_sample_midpoint_and_progress():
    pose, progress = sample_keyframes([K0, K1, K2], 375, 250)
    assert progress == 0.75
    assert pose.offset(Joint.L_ELBOW) == pytest.approx(22.5)
    assert pose.offset(Joint.R_KNEE) == pytest.approx(20.0)


def test_sample_requires_two_keyframes():
    with pytest.raises(ValueError, match="at least 2"):
        sample_keyframes([K0], 0, 250)


def test_resample_includes_both_ends():
    frames = resample_keyframes([K0, K1], 250, 100)
    assert len(frames) == 4
    assert frames[0] == K0
    assert frames[-1] == K1
    assert frames[1].offset(Joint.L_ELBOW) == pytest.approx(36.0)


def test_resample_rejects_bad_interval():
    with pytest.raises(ValueError):
        resample_keyframes([K0, K1], 250, 0)
