"""Interaction state machine: drags, scripted transitions and playback.

A :class:`PosingSession` is the single writer of the current pose. Pointer
presses, moves and releases, slider edits, presets, undo/redo and the two
animation drivers all go through it; the solved transforms it caches are the
read model for renderers and collision consumers.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from PIL import Image

from bitruvius.config import PosingSettings
from bitruvius.engine.history import HistoryEngine
from bitruvius.engine.scheduler import CalibrationDriver, FrameScheduler, TimelapseDriver
from bitruvius.models.enums import AssetKind, Axis, InteractionState, Joint, JointMode
from bitruvius.models.pose import Pose, Vector2D, default_proportions
from bitruvius.pipeline.export import (
    HistoryLoadError,
    format_pose_string,
    load_history_json,
    write_history_json,
    write_pose_file,
)
from bitruvius.pipeline.kinematics import (
    collection_points,
    joint_position,
    place_transforms,
    solve_pose,
)
from bitruvius.pipeline.propagation import rotate_joint
from bitruvius.poses import load as load_preset

if TYPE_CHECKING:
    from pathlib import Path

    from bitruvius.engine.scheduler import DriverFrame
    from bitruvius.models.enums import BodyPart, Side
    from bitruvius.models.pose import GlobalTransform

logger = logging.getLogger(__name__)

REST_PRESET = "t_pose"
START_PRESET = "challenge"

# Callback invoked synchronously after every pose change.
PoseListener = Callable[["PosingSession"], None]


def monotonic_ms() -> float:
    return time.monotonic() * 1000


@dataclass(frozen=True)
class DragCapture:
    """Pointer state captured when a drag begins."""

    joint: Joint
    start_x: float
    start_offset: float


class PosingSession:
    """Owns the pose, joint modes, drag capture, pin and animation slot."""

    def __init__(
        self,
        settings: PosingSettings | None = None,
        *,
        pose: Pose | None = None,
        history: HistoryEngine | None = None,
        clock: Callable[[], float] = monotonic_ms,
    ) -> None:
        self.settings = settings or PosingSettings()
        self.history = history or HistoryEngine(
            undo_limit=self.settings.undo_limit,
            log_limit=self.settings.log_limit,
        )
        self.scheduler = FrameScheduler()
        self.modes: dict[Joint, JointMode] = {joint: JointMode.FK for joint in Joint}
        self.pinned_joint = Joint.WAIST
        self.root_position = Vector2D()
        self.body_rotation = 0.0
        self.assets: dict[AssetKind, Path] = {}
        self._clock = clock
        self._state = InteractionState.IDLE
        self._calibrated = False
        self._drag: DragCapture | None = None
        self._listeners: list[PoseListener] = []
        self._pose = pose if pose is not None else load_preset(START_PRESET).to_pose()
        self._transforms = solve_pose(self._pose, self.settings.base_unit)

    # ── Read model ───────────────────────────────────────────

    @property
    def pose(self) -> Pose:
        return self._pose

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def calibrated(self) -> bool:
        return self._calibrated

    @property
    def dragging_joint(self) -> Joint | None:
        return self._drag.joint if self._drag else None

    @property
    def transforms(self) -> dict[BodyPart, GlobalTransform]:
        """Per-part transforms of the current pose, figure-local."""
        return self._transforms

    @property
    def pose_string(self) -> str:
        return format_pose_string(self._pose)

    def world_transforms(self) -> dict[BodyPart, GlobalTransform]:
        """Transforms after body rotation around the pin and root translation."""
        return place_transforms(
            self._transforms,
            root=self.root_position,
            body_rotation=self.body_rotation,
            pivot=joint_position(self.pinned_joint, self._transforms),
        )

    def collection_points(self) -> dict[Side, Vector2D]:
        return collection_points(self.world_transforms(), self.settings.collection_fraction)

    def subscribe(self, listener: PoseListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: PoseListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ── Pointer interaction ──────────────────────────────────

    def press(self, joint: Joint, pointer_x: float, *, modifier: bool = False) -> bool:
        """Begin a drag on *joint*, or re-pin the body pivot with *modifier*."""
        if not self._calibrated or self._state is not InteractionState.IDLE:
            return False
        if modifier:
            self.set_pin(joint)
            return True
        self.history.commit(self._pose)
        self.history.log(f"START_DRAG_{joint}", self._pose)
        self._drag = DragCapture(joint, pointer_x, self._pose.offset(joint))
        self._state = InteractionState.DRAGGING
        return True

    def move(self, pointer_x: float) -> bool:
        """Rotate the dragged joint by the horizontal pointer travel."""
        if self._state is not InteractionState.DRAGGING or self._drag is None:
            return False
        drag = self._drag
        value = drag.start_offset + (pointer_x - drag.start_x) * self.settings.drag_sensitivity
        updated = rotate_joint(self._pose, drag.joint, value, self.modes)
        if updated is None:
            return False
        self._set_pose(updated)
        return True

    def release(self) -> bool:
        """End the drag and log its final pose."""
        if self._state is not InteractionState.DRAGGING or self._drag is None:
            return False
        self.history.log(f"END_DRAG_{self._drag.joint}", self._pose)
        self._drag = None
        self._state = InteractionState.IDLE
        return True

    def set_pin(self, joint: Joint) -> None:
        self.pinned_joint = joint
        self.history.log(f"PIN SET: Puppet now pivots on {joint.value.replace('_', ' ')}.")

    def set_joint_mode(self, joint: Joint, mode: JointMode) -> JointMode:
        """Assign *mode*; choosing the current mode again returns to ``fk``."""
        current = self.modes[joint]
        self.modes[joint] = JointMode.FK if current == mode else mode
        return self.modes[joint]

    # ── Discrete edits ───────────────────────────────────────

    def set_joint_rotation(self, joint: Joint, value: float) -> bool:
        if not self._can_edit() or not math.isfinite(value):
            return False
        updated = rotate_joint(self._pose, joint, value, self.modes)
        if updated is None:
            return False
        self._commit(updated, f"RANGE_{joint}")
        return True

    def set_proportion(self, part: BodyPart, axis: Axis, value: float) -> bool:
        if not self._can_edit() or not math.isfinite(value) or value <= 0:
            return False
        if self._pose.proportion(part).axis(axis) == value:
            return False
        updated = self._pose.with_proportion(part, axis, value)
        self._commit(updated, f"PROP_{axis.value.upper()}_{part}")
        return True

    def reset_proportions(self) -> bool:
        if not self._can_edit():
            return False
        self._commit(self._pose.with_props(default_proportions()), "PROPS_RESET")
        self.history.log("COMMAND: Anatomical proportions reset.")
        return True

    def apply_preset(self, name: str) -> bool:
        if not self._can_edit():
            return False
        try:
            preset = load_preset(name)
        except FileNotFoundError:
            logger.warning("Unknown pose preset '%s'", name)
            return False
        self._commit(preset.to_pose(self._pose), f"SET_POSE_{name.upper()}")
        self.history.log(f"COMMAND: Applied {name} state.")
        return True

    def set_root_position(self, x: float, y: float) -> None:
        self.root_position = Vector2D(x=x, y=y)
        self._notify()

    def set_body_rotation(self, degrees: float) -> None:
        self.body_rotation = degrees
        self._notify()

    # ── Undo / redo ──────────────────────────────────────────

    def undo(self) -> bool:
        if self._state is not InteractionState.IDLE:
            return False
        previous = self.history.undo(self._pose)
        if previous is None:
            return False
        self._set_pose(previous)
        self.history.log("UNDO: System state reverted.")
        return True

    def redo(self) -> bool:
        if self._state is not InteractionState.IDLE:
            return False
        following = self.history.redo(self._pose)
        if following is None:
            return False
        self._set_pose(following)
        self.history.log("REDO: System state reapplied.")
        return True

    # ── Animation drivers ────────────────────────────────────

    def start_calibration(self, now_ms: float | None = None) -> bool:
        """Snap to the rest pose once; later calls have no effect."""
        if self._calibrated or self._state is not InteractionState.IDLE:
            return False
        rest = load_preset(REST_PRESET).offsets
        driver = CalibrationDriver(self._pose, rest, self.settings.calibration_ms)
        if not self.scheduler.start(driver, self._now(now_ms)):
            return False
        self.history.commit(self._pose)
        self.history.log("CALIBRATION_START", self._pose)
        self.history.log("SEQUENCE: CALIBRATION START...")
        self._state = InteractionState.CALIBRATING
        return True

    def play_timelapse(self, now_ms: float | None = None) -> bool:
        """Play back the keyframe sequence; needs at least two keyframes."""
        keyframes = [entry.pose for entry in self.history.keyframes if entry.pose is not None]
        if len(keyframes) < 2 or self._state is not InteractionState.IDLE:
            return False
        driver = TimelapseDriver(keyframes, self.settings.segment_ms)
        if not self.scheduler.start(driver, self._now(now_ms)):
            return False
        self.history.log(f"SEQUENCE: RECREATION OF {len(keyframes)} KEYFRAMES.")
        self._state = InteractionState.PLAYING_TIMELAPSE
        return True

    def tick(self, now_ms: float | None = None) -> DriverFrame | None:
        """Advance the active driver by one frame."""
        frame = self.scheduler.tick(self._now(now_ms))
        if frame is None:
            return None
        self._set_pose(frame.pose)
        if frame.done:
            self._finish_driver()
        return frame

    def shutdown(self) -> None:
        """Stop the active driver and drop any drag capture."""
        if self.scheduler.cancel() is not None:
            logger.info("Cancelled %s on shutdown", self._state)
        self._drag = None
        self._state = InteractionState.IDLE

    # ── Event log and keyframes ──────────────────────────────

    def promote_keyframe(self, index: int) -> bool:
        return self.history.promote(index)

    def delete_log_entry(self, index: int) -> bool:
        return self.history.delete_entry(index) is not None

    def clear_log(self) -> None:
        self.history.clear_log()

    def clear_keyframes(self) -> None:
        self.history.clear_keyframes()

    # ── I/O ──────────────────────────────────────────────────

    def load_asset(self, kind: AssetKind, path: Path) -> bool:
        """Attach a mask or background image; failures only reach the log."""
        title = kind.value.capitalize()
        try:
            with Image.open(path) as img:
                img.verify()
        except (OSError, SyntaxError) as exc:
            logger.warning("Failed to load %s image %s: %s", kind, path, exc)
            self.history.log(f"ERR: {title} upload failed.")
            return False
        self.assets[kind] = path
        self.history.log(f"IO: {title} image uploaded.")
        return True

    def export_pose(self, directory: Path) -> Path | None:
        try:
            path = write_pose_file(self._pose, directory, timestamp=self.history.now())
        except OSError as exc:
            logger.warning("Pose export failed: %s", exc)
            self.history.log("ERR: Pose export failed.")
            return None
        self.history.log("IO: Pose exported to file.")
        return path

    def export_history(self, directory: Path) -> Path | None:
        try:
            path = write_history_json(
                self.history.event_log, directory, timestamp=self.history.now(),
            )
        except OSError as exc:
            logger.warning("History export failed: %s", exc)
            self.history.log("ERR: History export failed.")
            return None
        self.history.log("IO: Full rotation history exported as JSON.")
        return path

    def load_keyframes(self, path: Path) -> int:
        """Append every pose-carrying entry of a history file as a keyframe."""
        try:
            entries = load_history_json(path)
        except HistoryLoadError as exc:
            logger.warning("%s", exc)
            self.history.log("ERR: History load failed.")
            return 0
        added = sum(1 for entry in entries if self.history.add_keyframe(entry))
        self.history.log(f"IO: {added} keyframes loaded.")
        return added

    # ── Internals ────────────────────────────────────────────

    def _can_edit(self) -> bool:
        return self._calibrated and self._state is InteractionState.IDLE

    def _now(self, now_ms: float | None) -> float:
        return self._clock() if now_ms is None else now_ms

    def _commit(self, updated: Pose, label: str) -> None:
        self.history.commit(self._pose)
        self._set_pose(updated)
        self.history.log(label, updated)

    def _set_pose(self, pose: Pose) -> None:
        self._pose = pose
        self._transforms = solve_pose(pose, self.settings.base_unit)
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _finish_driver(self) -> None:
        if self._state is InteractionState.CALIBRATING:
            self._calibrated = True
            self.history.log("CALIBRATION_END", self._pose)
            self.history.log("SEQUENCE: SYSTEM ALIGNED.")
            logger.info("Calibration complete")
        elif self._state is InteractionState.PLAYING_TIMELAPSE:
            self.history.log("SEQUENCE: KEYFRAME PLAYBACK COMPLETE.")
            logger.info("Timelapse playback complete")
        self._state = InteractionState.IDLE
