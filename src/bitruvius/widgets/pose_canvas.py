"""Pose canvas widget - ASCII stick figure with pointer dragging."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from textual.message import Message
from textual.widgets import Static

from bitruvius.models.enums import Joint
from bitruvius.models.skeleton import JOINT_ORDER, PART_TO_JOINT
from bitruvius.pipeline.kinematics import distal_point, joint_position
from bitruvius.pipeline.render import figure_bounds

if TYPE_CHECKING:
    from collections.abc import Mapping

    from textual import events

    from bitruvius.models.enums import BodyPart
    from bitruvius.models.pose import GlobalTransform, Vector2D

# Terminal cells are roughly twice as tall as they are wide.
CELL_ASPECT = 2.0
# Pointer travel per cell, in the drag sensitivity's pixel units.
CELL_PIXELS = 8.0


@dataclass(frozen=True)
class CanvasFrame:
    """Rasterized figure: text rows, joint anchor cells and bone cells.

    ``bones`` maps every drawn bone cell outside the anchors to the joint
    driving that bone.
    """

    rows: list[str]
    anchors: dict[Joint, tuple[int, int]]
    bones: dict[tuple[int, int], Joint] = field(default_factory=dict)

    def nearest_joint(self, col: int, row: int, radius: float = 2.0) -> Joint | None:
        """Joint under ``(col, row)``: a bone hit, else the closest anchor within *radius*."""
        hit = self.bones.get((col, row))
        if hit is not None:
            return hit
        best: Joint | None = None
        best_dist = radius
        for joint in JOINT_ORDER:
            cell = self.anchors.get(joint)
            if cell is None:
                continue
            dist = ((cell[0] - col) ** 2 + ((cell[1] - row) * CELL_ASPECT) ** 2) ** 0.5
            if dist <= best_dist and (best is None or dist < best_dist):
                best = joint
                best_dist = dist
        return best


def rasterize(
    transforms: Mapping[BodyPart, GlobalTransform],
    cols: int,
    rows: int,
    *,
    pinned: Joint | None = None,
    active: Joint | None = None,
) -> CanvasFrame:
    """Fit the figure into a ``cols`` x ``rows`` character grid."""
    grid = [[" " for _ in range(cols)] for _ in range(rows)]
    if not transforms or cols < 3 or rows < 3:
        return CanvasFrame(["".join(r) for r in grid], {})

    min_x, min_y, max_x, max_y = figure_bounds(transforms)
    span_x = max(max_x - min_x, 1.0)
    span_y = max(max_y - min_y, 1.0)
    scale = min((cols - 2) / (span_x * CELL_ASPECT), (rows - 2) / span_y)
    cx = (min_x + max_x) / 2
    cy = (min_y + max_y) / 2

    def to_cell(p: Vector2D) -> tuple[int, int]:
        col = round(cols / 2 + (p.x - cx) * scale * CELL_ASPECT)
        row = round(rows / 2 + (p.y - cy) * scale)
        return min(max(col, 0), cols - 1), min(max(row, 0), rows - 1)

    bones: dict[tuple[int, int], Joint] = {}
    for part, t in transforms.items():
        (c0, r0), (c1, r1) = to_cell(t.position), to_cell(distal_point(part, t))
        ch = _bone_char(c1 - c0, r1 - r0)
        steps = max(abs(c1 - c0), abs(r1 - r0), 1)
        for i in range(steps + 1):
            c = round(c0 + (c1 - c0) * i / steps)
            r = round(r0 + (r1 - r0) * i / steps)
            grid[r][c] = ch
            bones[(c, r)] = PART_TO_JOINT[part]

    anchors: dict[Joint, tuple[int, int]] = {}
    for joint in JOINT_ORDER:
        col, row = to_cell(joint_position(joint, transforms))
        anchors[joint] = (col, row)
        grid[row][col] = "o"
        bones.pop((col, row), None)
    if pinned is not None and pinned in anchors:
        col, row = anchors[pinned]
        grid[row][col] = "@"
    if active is not None and active in anchors:
        col, row = anchors[active]
        grid[row][col] = "#"

    return CanvasFrame(["".join(r) for r in grid], anchors, bones)


def _bone_char(dc: int, dr: int) -> str:
    if abs(dc) >= 2 * abs(dr):
        return "-"
    if abs(dr) * CELL_ASPECT >= 2 * abs(dc):
        return "|"
    return "\\" if (dc > 0) == (dr > 0) else "/"


class PoseCanvas(Static):
    """Draw the solved figure and translate mouse input into joint drags.

    A press near a joint anchor posts :class:`PoseCanvas.JointPressed`
    (``modifier`` is set when shift is held, which re-pins the body);
    subsequent motion posts :class:`PoseCanvas.PointerMoved` until release.
    """

    DEFAULT_CSS = """
    PoseCanvas {
        background: #0c0a1a;
        border: round #4c1d95;
        min-height: 24;
        width: 1fr;
        height: 1fr;
        color: #a78bfa;
    }
    """

    class JointPressed(Message):
        def __init__(self, joint: Joint, pointer_x: float, modifier: bool) -> None:
            super().__init__()
            self.joint = joint
            self.pointer_x = pointer_x
            self.modifier = modifier

    class PointerMoved(Message):
        def __init__(self, pointer_x: float) -> None:
            super().__init__()
            self.pointer_x = pointer_x

    class PointerReleased(Message):
        pass

    def __init__(self, *, id: str | None = None) -> None:
        super().__init__("", id=id, markup=False)
        self._transforms: Mapping[BodyPart, GlobalTransform] = {}
        self._pinned: Joint | None = None
        self._active: Joint | None = None
        self._frame = CanvasFrame([], {})
        self._dragging = False

    def set_figure(
        self,
        transforms: Mapping[BodyPart, GlobalTransform],
        *,
        pinned: Joint | None = None,
        active: Joint | None = None,
    ) -> None:
        self._transforms = transforms
        self._pinned = pinned
        self._active = active
        self._render_figure()

    def on_resize(self, event: events.Resize) -> None:
        self._render_figure()

    def _render_figure(self) -> None:
        cols = max(self.content_size.width, 1)
        rows = max(self.content_size.height, 1)
        self._frame = rasterize(
            self._transforms, cols, rows, pinned=self._pinned, active=self._active,
        )
        self.update("\n".join(self._frame.rows))

    # ── Mouse ────────────────────────────────────────────────
    def on_mouse_down(self, event: events.MouseDown) -> None:
        offset = event.get_content_offset(self)
        if offset is None:
            return
        joint = self._frame.nearest_joint(offset.x, offset.y)
        if joint is None:
            return
        if not event.shift:
            self._dragging = True
            self.capture_mouse()
        self.post_message(self.JointPressed(joint, event.screen_x * CELL_PIXELS, event.shift))

    def on_mouse_move(self, event: events.MouseMove) -> None:
        if self._dragging:
            self.post_message(self.PointerMoved(event.screen_x * CELL_PIXELS))

    def on_mouse_up(self, event: events.MouseUp) -> None:
        if self._dragging:
            self._dragging = False
            self.release_mouse()
            self.post_message(self.PointerReleased())
