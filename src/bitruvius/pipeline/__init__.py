"""Bitruvius processing stages - pure functions over poses and transforms."""

from bitruvius.pipeline.export import (
    HistoryLoadError,
    PoseFormatError,
    format_pose_string,
    load_history_json,
    parse_pose_string,
    write_history_json,
    write_pose_file,
)
from bitruvius.pipeline.interpolation import (
    blend_poses,
    ease_offsets,
    resample_keyframes,
    sample_keyframes,
    snap_out_ease,
)
from bitruvius.pipeline.kinematics import (
    collection_points,
    place_transforms,
    solve_pose,
)
from bitruvius.pipeline.propagation import propagate, rotate_joint
from bitruvius.pipeline.render import render_pose_image

__all__ = [
    "HistoryLoadError",
    "PoseFormatError",
    "blend_poses",
    "collection_points",
    "ease_offsets",
    "format_pose_string",
    "load_history_json",
    "parse_pose_string",
    "place_transforms",
    "propagate",
    "render_pose_image",
    "resample_keyframes",
    "rotate_joint",
    "sample_keyframes",
    "snap_out_ease",
    "solve_pose",
    "write_history_json",
    "write_pose_file",
]
