"""Stick-figure preview rendering of solved transforms with Pillow."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw

from bitruvius.pipeline.kinematics import distal_point

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from bitruvius.models.enums import BodyPart
    from bitruvius.models.pose import GlobalTransform, Vector2D

logger = logging.getLogger(__name__)

ANCHOR_COLOUR: tuple[int, int, int] = (248, 113, 113)
BONE_COLOUR: tuple[int, int, int] = (58, 58, 58)


def figure_bounds(
    transforms: Mapping[BodyPart, GlobalTransform],
) -> tuple[float, float, float, float]:
    """``(min_x, min_y, max_x, max_y)`` over every anchor and distal point."""
    points = [t.position for t in transforms.values()]
    points += [distal_point(part, t) for part, t in transforms.items()]
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return min(xs), min(ys), max(xs), max(ys)


def render_pose_image(
    transforms: Mapping[BodyPart, GlobalTransform],
    output_path: Path,
    *,
    width: int = 512,
    height: int = 768,
    margin: int = 24,
    bg_colour: tuple[int, int, int] = (245, 243, 236),
    point_radius: int = 4,
) -> Path:
    """Render solved transforms to a PNG preview.

    Each part is drawn as a line from its anchor to its distal point with a
    thickness proportional to its scaled width; anchors are marked with dots.
    The figure is fitted into the image, keeping its aspect ratio.
    """
    img = Image.new("RGB", (width, height), bg_colour)
    draw = ImageDraw.Draw(img)

    min_x, min_y, max_x, max_y = figure_bounds(transforms)
    span = max(max_x - min_x, max_y - min_y, 1.0)
    scale = min(width, height) - 2 * margin
    scale /= span
    cx = (min_x + max_x) / 2
    cy = (min_y + max_y) / 2

    def to_pixel(p: Vector2D) -> tuple[int, int]:
        return (int(width / 2 + (p.x - cx) * scale), int(height / 2 + (p.y - cy) * scale))

    for part, t in transforms.items():
        line_width = max(1, int(t.width * scale * 0.5))
        draw.line(
            [to_pixel(t.position), to_pixel(distal_point(part, t))],
            fill=BONE_COLOUR,
            width=line_width,
        )

    for t in transforms.values():
        px, py = to_pixel(t.position)
        r = point_radius
        draw.ellipse([px - r, py - r, px + r, py + r], fill=ANCHOR_COLOUR)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    img.save(output_path, "PNG")
    logger.info("Rendered pose preview -> %s", output_path)
    return output_path
