"""Tests for the interaction state machine."""

from pathlib import Path

from PIL import Image

from bitruvius.engine.session import PosingSession
from bitruvius.models import (
    AssetKind,
    Axis,
    BodyPart,
    InteractionState,
    Joint,
    JointMode,
    Pose,
    Side,
)
from bitruvius.poses import load


def _labels(session: PosingSession) -> list[str | None]:
    return [e.label for e in session.history.event_log]


def _keyframe(session: PosingSession, pose: Pose) -> None:
    session.history.log("KEY", pose)
    assert session.promote_keyframe(len(session.history.event_log) - 1)


# ── Calibration ─────────────────────────────────────────────


def test_starts_uncalibrated_in_challenge_pose(session: PosingSession):
    assert session.state is InteractionState.IDLE
    assert not session.calibrated
    assert session.pose == load("challenge").to_pose()


def test_controls_locked_before_calibration(session: PosingSession):
    before = session.pose
    assert not session.press(Joint.L_ELBOW, 0)
    assert not session.set_joint_rotation(Joint.L_ELBOW, 10)
    assert not session.apply_preset("default")
    assert session.pose == before
    assert session.state is InteractionState.IDLE


def test_calibration_snaps_to_rest_pose(session: PosingSession):
    assert session.start_calibration(now_ms=0)
    assert session.state is InteractionState.CALIBRATING
    session.tick(now_ms=100)
    assert session.state is InteractionState.CALIBRATING
    assert not session.calibrated
    frame = session.tick(now_ms=250)
    assert frame is not None
    assert frame.done
    assert session.state is InteractionState.IDLE
    assert session.calibrated
    assert all(v == 0 for v in session.pose.offsets.values())
    labels = _labels(session)
    assert labels[0] == "CALIBRATION_START"
    assert "CALIBRATION_END" in labels
    assert labels[-1] == "SEQUENCE: SYSTEM ALIGNED."


def test_calibration_is_idempotent(calibrated_session: PosingSession):
    assert not calibrated_session.start_calibration(now_ms=1000)
    assert calibrated_session.state is InteractionState.IDLE


def test_calibration_is_not_interruptible(session: PosingSession):
    session.start_calibration(now_ms=0)
    assert not session.start_calibration(now_ms=10)
    assert not session.undo()
    assert not session.press(Joint.WAIST, 0)
    assert not session.reset_proportions()


# ── Dragging ────────────────────────────────────────────────


def test_drag_rotates_by_pointer_travel(calibrated_session: PosingSession):
    s = calibrated_session
    undo_before = len(s.history.undo_stack)
    assert s.press(Joint.L_ELBOW, 100)
    assert s.state is InteractionState.DRAGGING
    assert s.dragging_joint is Joint.L_ELBOW
    assert len(s.history.undo_stack) == undo_before + 1
    assert s.move(140)
    assert s.pose.offset(Joint.L_ELBOW) == 20
    assert s.move(60)
    assert s.pose.offset(Joint.L_ELBOW) == -20
    assert s.release()
    assert s.state is InteractionState.IDLE
    assert s.dragging_joint is None
    labels = _labels(s)
    assert labels[-1] == "END_DRAG_l_elbow"
    assert "START_DRAG_l_elbow" in labels


def test_drag_honours_joint_modes(calibrated_session: PosingSession):
    s = calibrated_session
    s.set_joint_mode(Joint.L_SHOULDER, JointMode.BEND)
    s.press(Joint.L_SHOULDER, 0)
    s.move(20)
    assert s.pose.offset(Joint.L_SHOULDER) == 10
    assert s.pose.offset(Joint.L_ELBOW) == 10
    assert s.pose.offset(Joint.L_HAND) == 0


def test_zero_pointer_travel_is_noop(calibrated_session: PosingSession):
    s = calibrated_session
    s.press(Joint.R_KNEE, 50)
    pose = s.pose
    log_len = len(s.history.event_log)
    assert not s.move(50)
    assert s.pose is pose
    assert len(s.history.event_log) == log_len


def test_modifier_press_sets_pin(calibrated_session: PosingSession):
    s = calibrated_session
    pose = s.pose
    assert s.press(Joint.L_FOOT, 0, modifier=True)
    assert s.state is InteractionState.IDLE
    assert s.pinned_joint is Joint.L_FOOT
    assert s.pose is pose
    assert _labels(s)[-1] == "PIN SET: Puppet now pivots on l foot."


def test_move_and_release_outside_drag(calibrated_session: PosingSession):
    assert not calibrated_session.move(10)
    assert not calibrated_session.release()


def test_set_joint_mode_toggles_back_to_fk(session: PosingSession):
    assert session.set_joint_mode(Joint.NECK, JointMode.BEND) is JointMode.BEND
    assert session.set_joint_mode(Joint.NECK, JointMode.STRETCH) is JointMode.STRETCH
    assert session.set_joint_mode(Joint.NECK, JointMode.STRETCH) is JointMode.FK


# ── Discrete edits and undo ─────────────────────────────────


def test_undo_redo_round_trip(calibrated_session: PosingSession):
    s = calibrated_session
    rest = s.pose
    assert s.set_joint_rotation(Joint.R_KNEE, 45)
    edited = s.pose
    assert s.undo()
    assert s.pose == rest
    assert s.redo()
    assert s.pose == edited
    assert _labels(s)[-2:] == ["UNDO: System state reverted.", "REDO: System state reapplied."]


def test_redo_empty_is_noop(calibrated_session: PosingSession):
    pose = calibrated_session.pose
    assert not calibrated_session.redo()
    assert calibrated_session.pose is pose


def test_new_commit_invalidates_redo(calibrated_session: PosingSession):
    s = calibrated_session
    s.set_joint_rotation(Joint.NECK, 10)
    s.undo()
    assert s.history.can_redo
    s.set_joint_rotation(Joint.NECK, 20)
    assert not s.history.can_redo


def test_unchanged_rotation_is_noop(calibrated_session: PosingSession):
    s = calibrated_session
    undo_len = len(s.history.undo_stack)
    assert not s.set_joint_rotation(Joint.WAIST, 0)
    assert len(s.history.undo_stack) == undo_len


def test_non_finite_rotation_is_rejected(calibrated_session: PosingSession):
    s = calibrated_session
    undo_len = len(s.history.undo_stack)
    assert not s.set_joint_rotation(Joint.L_ELBOW, float("nan"))
    assert not s.set_joint_rotation(Joint.L_ELBOW, float("-inf"))
    assert len(s.history.undo_stack) == undo_len


def test_set_proportion(calibrated_session: PosingSession):
    s = calibrated_session
    assert s.set_proportion(BodyPart.TORSO, Axis.HEIGHT, 1.5)
    assert s.pose.proportion(BodyPart.TORSO).h == 1.5
    assert _labels(s)[-1] == "PROP_H_torso"
    assert not s.set_proportion(BodyPart.TORSO, Axis.HEIGHT, 1.5)
    assert not s.set_proportion(BodyPart.TORSO, Axis.WIDTH, 0)
    assert not s.set_proportion(BodyPart.TORSO, Axis.WIDTH, float("nan"))
    assert not s.set_proportion(BodyPart.TORSO, Axis.HEIGHT, float("inf"))
    assert s.pose.proportion(BodyPart.TORSO).w == 1.0


def test_reset_proportions(calibrated_session: PosingSession):
    s = calibrated_session
    s.set_proportion(BodyPart.HEAD, Axis.WIDTH, 2.0)
    assert s.reset_proportions()
    assert s.pose.proportion(BodyPart.HEAD).w == 1.0
    assert _labels(s)[-2:] == ["PROPS_RESET", "COMMAND: Anatomical proportions reset."]


def test_apply_preset(calibrated_session: PosingSession):
    s = calibrated_session
    assert s.apply_preset("default")
    assert s.pose.offset(Joint.L_SHOULDER) == -75
    assert s.pose.offset(Joint.R_SHOULDER) == 75
    assert _labels(s)[-2:] == ["SET_POSE_DEFAULT", "COMMAND: Applied default state."]
    assert s.history.event_log[-2].has_pose
    assert not s.apply_preset("no_such_pose")


def test_listeners_notified_on_pose_change(calibrated_session: PosingSession):
    seen: list[Pose] = []

    def listener(s: PosingSession) -> None:
        seen.append(s.pose)

    calibrated_session.subscribe(listener)
    calibrated_session.set_joint_rotation(Joint.TORSO, 15)
    assert seen[-1].offset(Joint.TORSO) == 15
    calibrated_session.unsubscribe(listener)
    calibrated_session.set_joint_rotation(Joint.TORSO, 30)
    assert len(seen) == 1


def test_transforms_follow_pose(calibrated_session: PosingSession):
    s = calibrated_session
    s.set_joint_rotation(Joint.WAIST, 30)
    assert s.transforms[BodyPart.WAIST].rotation == 30


def test_stage_placement_does_not_touch_history(calibrated_session: PosingSession):
    s = calibrated_session
    undo_len = len(s.history.undo_stack)
    s.set_root_position(100, 50)
    s.set_body_rotation(90)
    world = s.world_transforms()
    assert world[BodyPart.WAIST].position.x == 100
    assert world[BodyPart.WAIST].position.y == 50
    assert world[BodyPart.TORSO].rotation == 90
    assert len(s.history.undo_stack) == undo_len
    assert set(s.collection_points()) == {Side.LEFT, Side.RIGHT}


# ── Timelapse ───────────────────────────────────────────────


def test_timelapse_needs_two_keyframes(calibrated_session: PosingSession):
    _keyframe(calibrated_session, Pose())
    assert not calibrated_session.play_timelapse(now_ms=0)
    assert calibrated_session.state is InteractionState.IDLE


def test_timelapse_hits_keyframes_and_locks_edits(calibrated_session: PosingSession):
    s = calibrated_session
    k0 = Pose()
    k1 = Pose(offsets={Joint.L_ELBOW: 90})
    k2 = Pose(offsets={Joint.L_ELBOW: 90, Joint.R_KNEE: 30})
    for k in (k0, k1, k2):
        _keyframe(s, k)

    assert s.play_timelapse(now_ms=1000)
    assert s.state is InteractionState.PLAYING_TIMELAPSE
    assert _labels(s)[-1] == "SEQUENCE: RECREATION OF 3 KEYFRAMES."

    s.tick(now_ms=1000)
    assert s.pose == k0
    log_len = len(s.history.event_log)
    assert not s.press(Joint.WAIST, 0)
    assert not s.set_joint_rotation(Joint.WAIST, 10)
    assert not s.apply_preset("default")
    assert not s.undo()
    assert not s.redo()
    assert not s.start_calibration(now_ms=1000)
    assert len(s.history.event_log) == log_len

    s.tick(now_ms=1250)
    assert s.pose == k1
    frame = s.tick(now_ms=1500)
    assert frame is not None
    assert frame.done
    assert s.pose == k2
    assert s.state is InteractionState.IDLE
    assert _labels(s)[-1] == "SEQUENCE: KEYFRAME PLAYBACK COMPLETE."


def test_shutdown_cancels_driver(session: PosingSession):
    session.start_calibration(now_ms=0)
    session.shutdown()
    assert session.state is InteractionState.IDLE
    assert not session.scheduler.busy
    assert not session.calibrated
    assert session.tick(now_ms=500) is None


def test_shutdown_drops_drag(calibrated_session: PosingSession):
    calibrated_session.press(Joint.NECK, 0)
    calibrated_session.shutdown()
    assert calibrated_session.dragging_joint is None
    assert calibrated_session.state is InteractionState.IDLE


# ── Log delegation ──────────────────────────────────────────


def test_log_operations(calibrated_session: PosingSession):
    s = calibrated_session
    assert s.delete_log_entry(0)
    assert not s.delete_log_entry(999)
    s.clear_keyframes()
    assert _labels(s)[-1] == "COMMAND: Keyframe sequence cleared."
    s.clear_log()
    assert _labels(s) == ["COMMAND: Recording history cleared."]


# ── I/O ─────────────────────────────────────────────────────


def test_asset_failure_is_logged(session: PosingSession, tmp_path: Path):
    bad = tmp_path / "mask.png"
    bad.write_bytes(b"not an image")
    assert not session.load_asset(AssetKind.MASK, bad)
    assert AssetKind.MASK not in session.assets
    assert _labels(session)[-1] == "ERR: Mask upload failed."
    assert not session.load_asset(AssetKind.MASK, tmp_path / "missing.png")


def test_asset_success_is_logged(session: PosingSession, tmp_path: Path):
    path = tmp_path / "bg.png"
    Image.new("RGB", (4, 4)).save(path)
    assert session.load_asset(AssetKind.BACKGROUND, path)
    assert session.assets[AssetKind.BACKGROUND] == path
    assert _labels(session)[-1] == "IO: Background image uploaded."


def test_export_and_reload(calibrated_session: PosingSession, tmp_path: Path):
    s = calibrated_session
    s.set_joint_rotation(Joint.L_KNEE, 33)
    pose_path = s.export_pose(tmp_path)
    assert pose_path is not None
    assert pose_path.name.startswith("bitruvian_pose_")
    assert pose_path.read_text() == s.pose_string
    assert _labels(s)[-1] == "IO: Pose exported to file."

    history_path = s.export_history(tmp_path)
    assert history_path is not None
    assert history_path.name.startswith("bitruvian_history_")
    assert _labels(s)[-1] == "IO: Full rotation history exported as JSON."

    fresh = PosingSession()
    with_pose = sum(1 for e in s.history.event_log[:-1] if e.has_pose)
    assert fresh.load_keyframes(history_path) == with_pose
    assert len(fresh.history.keyframes) == with_pose


def test_export_failure_is_logged(calibrated_session: PosingSession, tmp_path: Path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    assert calibrated_session.export_pose(blocker) is None
    assert _labels(calibrated_session)[-1] == "ERR: Pose export failed."


def test_load_keyframes_failure_is_logged(session: PosingSession, tmp_path: Path):
    assert session.load_keyframes(tmp_path / "nope.json") == 0
    assert _labels(session)[-1] == "ERR: History load failed."


def test_load_keyframes_unreadable_file_is_logged(session: PosingSession, tmp_path: Path):
    path = tmp_path / "binary.json"
    path.write_bytes(b"\xff\xfe[]")
    assert session.load_keyframes(path) == 0
    assert session.load_keyframes(tmp_path) == 0
    assert _labels(session)[-1] == "ERR: History load failed."
    assert session.state is InteractionState.IDLE
