"""Posing screen - canvas, joint table and event log around one session."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, ClassVar

from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Footer, Header, Label

from bitruvius.models.enums import InteractionState, JointMode
from bitruvius.widgets import EventLogPanel, JointPanel, PoseCanvas

if TYPE_CHECKING:
    from pathlib import Path

    from textual.app import ComposeResult
    from textual.binding import BindingType
    from textual.timer import Timer

    from bitruvius.engine.session import PosingSession

logger = logging.getLogger(__name__)

ROTATION_STEP = 5.0


class PosingScreen(Screen[None]):
    """Interactive posing console driven by a :class:`PosingSession`."""

    name = "posing"

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("c", "calibrate", "Calibrate", show=True),
        Binding("ctrl+z", "undo", "Undo", show=True),
        Binding("ctrl+y", "redo", "Redo", show=True),
        Binding("t", "preset('t_pose')", "T-pose", show=True),
        Binding("d", "preset('default')", "Default", show=True),
        Binding("b", "mode('bend')", "Bend", show=True),
        Binding("s", "mode('stretch')", "Stretch", show=True),
        Binding("left_square_bracket", "rotate(-1)", "Rotate -", show=False),
        Binding("right_square_bracket", "rotate(1)", "Rotate +", show=False),
        Binding("r", "reset_proportions", "Reset props", show=False),
        Binding("k", "promote", "Keyframe", show=True),
        Binding("delete", "delete_entry", "Delete entry", show=False),
        Binding("p", "play", "Play", show=True),
        Binding("e", "export", "Export", show=True),
        Binding("x", "clear_log", "Clear log", show=False),
        Binding("ctrl+k", "clear_keyframes", "Clear keyframes", show=False),
    ]

    def __init__(self, session: PosingSession, export_dir: Path) -> None:
        super().__init__()
        self.session = session
        self.export_dir = export_dir
        self._timer: Timer | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal():
            yield PoseCanvas(id="pose-canvas")
            with Vertical(classes="side-panel"):
                yield JointPanel()
                yield EventLogPanel()
        yield Label("", id="posing-status")
        yield Label("", id="posing-pose", markup=False)
        yield Footer()

    def on_mount(self) -> None:
        self.session.subscribe(self._on_pose_changed)
        interval = self.session.settings.frame_interval_ms / 1000
        self._timer = self.set_interval(interval, self._on_frame)
        self.call_after_refresh(self._refresh)

    def on_unmount(self) -> None:
        if self._timer is not None:
            self._timer.stop()
        self.session.unsubscribe(self._on_pose_changed)
        self.session.shutdown()

    # ── Session events ───────────────────────────────────────
    def _on_pose_changed(self, session: PosingSession) -> None:
        self._refresh_figure()

    def _on_frame(self) -> None:
        if self.session.tick() is not None:
            self._refresh()

    # ── Canvas messages ──────────────────────────────────────
    def on_pose_canvas_joint_pressed(self, event: PoseCanvas.JointPressed) -> None:
        self.session.press(event.joint, event.pointer_x, modifier=event.modifier)
        self._refresh()

    def on_pose_canvas_pointer_moved(self, event: PoseCanvas.PointerMoved) -> None:
        self.session.move(event.pointer_x)

    def on_pose_canvas_pointer_released(self, event: PoseCanvas.PointerReleased) -> None:
        self.session.release()
        self._refresh()

    # ── Actions ──────────────────────────────────────────────
    def action_calibrate(self) -> None:
        self.session.start_calibration()
        self._refresh()

    def action_undo(self) -> None:
        self.session.undo()
        self._refresh()

    def action_redo(self) -> None:
        self.session.redo()
        self._refresh()

    def action_preset(self, name: str) -> None:
        self.session.apply_preset(name)
        self._refresh()

    def action_mode(self, mode: str) -> None:
        joint = self.query_one(JointPanel).selected_joint
        self.session.set_joint_mode(joint, JointMode(mode))
        self._refresh()

    def action_rotate(self, direction: int) -> None:
        joint = self.query_one(JointPanel).selected_joint
        value = self.session.pose.offset(joint) + direction * ROTATION_STEP
        self.session.set_joint_rotation(joint, value)
        self._refresh()

    def action_reset_proportions(self) -> None:
        self.session.reset_proportions()
        self._refresh()

    def action_promote(self) -> None:
        index = self.query_one(EventLogPanel).selected_index
        if index is not None and not self.session.promote_keyframe(index):
            self.notify("Selected entry carries no pose.", severity="warning")
        self._refresh()

    def action_delete_entry(self) -> None:
        index = self.query_one(EventLogPanel).selected_index
        if index is not None:
            self.session.delete_log_entry(index)
        self._refresh()

    def action_play(self) -> None:
        if not self.session.play_timelapse():
            self.notify("Timelapse needs at least 2 keyframes.", severity="warning")
        self._refresh()

    def action_export(self) -> None:
        pose_path = self.session.export_pose(self.export_dir)
        history_path = self.session.export_history(self.export_dir)
        if pose_path is not None and history_path is not None:
            logger.info("Exported %s and %s", pose_path.name, history_path.name)
            self.notify(f"Exported to {self.export_dir}")
        else:
            self.notify("Export failed. See event log.", severity="error")
        self._refresh()

    def action_clear_log(self) -> None:
        self.session.clear_log()
        self._refresh()

    def action_clear_keyframes(self) -> None:
        self.session.clear_keyframes()
        self._refresh()

    # ── Rendering ────────────────────────────────────────────
    def _refresh_figure(self) -> None:
        self.query_one(PoseCanvas).set_figure(
            self.session.world_transforms(),
            pinned=self.session.pinned_joint,
            active=self.session.dragging_joint,
        )
        self.query_one(JointPanel).set_data(self.session.pose, self.session.modes)

    def _refresh(self) -> None:
        self._refresh_figure()
        history = self.session.history
        self.query_one(EventLogPanel).set_entries(history.event_log, len(history.keyframes))
        self.query_one("#posing-status", Label).update(self._status_text())
        self.query_one("#posing-pose", Label).update(self.session.pose_string)

    def _status_text(self) -> str:
        session = self.session
        if not session.calibrated and session.state is InteractionState.IDLE:
            hint = "[bold yellow]Press c to calibrate[/bold yellow]"
        else:
            hint = f"State: {session.state.value}"
        return (
            f"{hint} | Pin: {session.pinned_joint.value} | "
            f"Undo: {len(session.history.undo_stack)} "
            f"Redo: {len(session.history.redo_stack)}"
        )
