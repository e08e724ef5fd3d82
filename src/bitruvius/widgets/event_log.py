"""Event log widget - operator history with keyframe markers."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from textual.widget import Widget
from textual.widgets import DataTable, Static

if TYPE_CHECKING:
    from textual.app import ComposeResult

    from bitruvius.models.history import HistoryEntry


class EventLogPanel(Widget):
    """Newest-last list of log entries; pose-carrying entries are promotable."""

    DEFAULT_CSS = """
    EventLogPanel {
        layout: vertical;
        height: 1fr;
        background: #0c0a1a;
        border: round #312e81;
        padding: 0 1;
    }

    EventLogPanel .el-title {
        text-style: bold;
        color: #a78bfa;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static("Event Log", classes="el-title", id="el-title")
        yield DataTable(id="log-table", cursor_type="row")

    def on_mount(self) -> None:
        table = self.query_one("#log-table", DataTable)
        table.add_columns("#", "Time", "Event", "Pose")

    @property
    def selected_index(self) -> int | None:
        table = self.query_one("#log-table", DataTable)
        if table.row_count == 0:
            return None
        return table.cursor_row

    def set_entries(self, entries: list[HistoryEntry], keyframe_count: int = 0) -> None:
        table = self.query_one("#log-table", DataTable)
        follow = table.row_count == 0 or table.cursor_row >= table.row_count - 1
        cursor = table.cursor_row
        table.clear()
        for i, entry in enumerate(entries, start=1):
            stamp = datetime.fromtimestamp(entry.timestamp / 1000).strftime("%H:%M:%S")
            table.add_row(str(i), stamp, entry.display_label(), "*" if entry.has_pose else "")
        table.move_cursor(row=max(len(entries) - 1, 0) if follow else cursor)
        self.query_one("#el-title", Static).update(
            f"Event Log ({len(entries)})  Keyframes: {keyframe_count}"
        )
