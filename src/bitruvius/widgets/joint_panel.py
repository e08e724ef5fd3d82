"""Joint panel widget - per-joint offsets and propagation modes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual.widget import Widget
from textual.widgets import DataTable, Static

from bitruvius.models.enums import Joint, JointMode
from bitruvius.models.skeleton import JOINT_ORDER

if TYPE_CHECKING:
    from collections.abc import Mapping

    from textual.app import ComposeResult

    from bitruvius.models.pose import Pose

_MODE_TAGS = {
    JointMode.FK: "fk",
    JointMode.BEND: "[yellow]bend[/yellow]",
    JointMode.STRETCH: "[cyan]stretch[/cyan]",
}


class JointPanel(Widget):
    """Table of joint offsets; the cursor row is the selected joint."""

    DEFAULT_CSS = """
    JointPanel {
        layout: vertical;
        height: auto;
        background: #1e1b4b;
        border: round #7c3aed;
        padding: 0 1;
    }

    JointPanel .jp-title {
        text-style: bold;
        color: #c4b5fd;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static("Joints", classes="jp-title")
        yield DataTable(id="joint-table", cursor_type="row")

    def on_mount(self) -> None:
        table = self.query_one("#joint-table", DataTable)
        table.add_columns("Joint", "Offset", "Mode")

    @property
    def selected_joint(self) -> Joint:
        row = self.query_one("#joint-table", DataTable).cursor_row
        return JOINT_ORDER[min(max(row, 0), len(JOINT_ORDER) - 1)]

    def set_data(self, pose: Pose, modes: Mapping[Joint, JointMode]) -> None:
        """Replace table rows, keeping the cursor on the same joint."""
        table = self.query_one("#joint-table", DataTable)
        cursor = table.cursor_row
        table.clear()
        for joint in JOINT_ORDER:
            table.add_row(
                joint.value,
                f"{pose.offset(joint):8.1f}",
                _MODE_TAGS[modes.get(joint, JointMode.FK)],
            )
        table.move_cursor(row=cursor)
