"""CLI entry point using Typer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

if TYPE_CHECKING:
    from bitruvius.models.pose import Pose

app = typer.Typer(
    name="bitruvius",
    help="2D articulated figure posing and motion history engine.",
    no_args_is_help=False,
)

PresetOption = Annotated[
    str | None,
    typer.Option("--preset", "-p", help="Built-in pose preset name"),
]
PoseOption = Annotated[
    str | None,
    typer.Option("--pose", help="Pose string: POSE[...]|PROPS[...]"),
]

# Upper bound for --interval and --segment.
MAX_TIMING_MS = 60_000.0


def _resolve_pose(preset: str | None, pose_string: str | None) -> Pose:
    """Pose from an explicit string, a preset, or the rest pose."""
    from bitruvius.pipeline.export import PoseFormatError, parse_pose_string
    from bitruvius.poses import load

    if pose_string is not None:
        try:
            return parse_pose_string(pose_string)
        except PoseFormatError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1) from None
    try:
        return load(preset or "t_pose").to_pose()
    except FileNotFoundError:
        typer.echo(f"Error: unknown preset '{preset}'", err=True)
        raise typer.Exit(1) from None


@app.command()
def presets() -> None:
    """List the built-in pose presets."""
    from bitruvius.poses import available_presets

    for name in available_presets():
        typer.echo(name)


@app.command()
def pose(preset: PresetOption = None, pose_string: PoseOption = None) -> None:
    """Print a pose in the canonical text format."""
    from bitruvius.pipeline.export import format_pose_string

    typer.echo(format_pose_string(_resolve_pose(preset, pose_string)))


@app.command()
def solve(
    preset: PresetOption = None,
    pose_string: PoseOption = None,
    base_unit: Annotated[
        float | None,
        typer.Option("--base-unit", "-u", help="Head unit length"),
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Emit JSON")] = False,
) -> None:
    """Print the absolute transform of every body part."""
    import json

    from bitruvius.config import load_config
    from bitruvius.pipeline.kinematics import solve_pose

    unit = base_unit or load_config().posing.base_unit
    transforms = solve_pose(_resolve_pose(preset, pose_string), unit)

    if as_json:
        data = {part.value: t.model_dump() for part, t in transforms.items()}
        typer.echo(json.dumps(data, indent=2))
        return

    typer.echo(f"{'part':<12} {'x':>9} {'y':>9} {'rot':>8} {'len':>8}")
    for part, t in transforms.items():
        typer.echo(
            f"{part.value:<12} {t.position.x:>9.2f} {t.position.y:>9.2f} "
            f"{t.rotation:>8.2f} {t.length:>8.2f}"
        )


@app.command()
def render(
    output: Annotated[Path, typer.Argument(help="Output PNG path")],
    preset: PresetOption = None,
    pose_string: PoseOption = None,
    width: Annotated[int, typer.Option("--width", "-W", help="Image width")] = 512,
    height: Annotated[int, typer.Option("--height", "-H", help="Image height")] = 768,
) -> None:
    """Render a stick-figure preview of a pose to PNG."""
    from bitruvius.config import load_config
    from bitruvius.pipeline.kinematics import solve_pose
    from bitruvius.pipeline.render import render_pose_image

    transforms = solve_pose(_resolve_pose(preset, pose_string), load_config().posing.base_unit)
    path = render_pose_image(transforms, output, width=width, height=height)
    typer.echo(f"Saved: {path}")


@app.command()
def timelapse(
    history_file: Annotated[Path, typer.Argument(help="Exported history JSON")],
    indices: Annotated[
        str | None,
        typer.Option("--indices", "-i", help="Comma-separated log indices to use as keyframes"),
    ] = None,
    interval: Annotated[
        float | None,
        typer.Option("--interval", min=1.0, max=MAX_TIMING_MS, help="Frame interval in ms"),
    ] = None,
    segment: Annotated[
        float | None,
        typer.Option(
            "--segment", min=1.0, max=MAX_TIMING_MS, help="Duration between keyframes in ms",
        ),
    ] = None,
) -> None:
    """Sample keyframe playback from a history file and print each frame."""
    from bitruvius.config import load_config
    from bitruvius.pipeline.export import HistoryLoadError, format_pose_string, load_history_json
    from bitruvius.pipeline.interpolation import resample_keyframes

    settings = load_config().posing
    try:
        entries = load_history_json(history_file)
    except HistoryLoadError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if indices:
        try:
            chosen = [entries[int(i)] for i in indices.split(",")]
        except (ValueError, IndexError):
            typer.echo(f"Error: invalid keyframe indices '{indices}'", err=True)
            raise typer.Exit(1) from None
    else:
        chosen = entries

    keyframes = [e.pose for e in chosen if e.pose is not None]
    if len(keyframes) < 2:
        typer.echo("Error: need at least 2 pose-carrying entries", err=True)
        raise typer.Exit(1)

    frames = resample_keyframes(
        keyframes,
        settings.segment_ms if segment is None else segment,
        settings.frame_interval_ms if interval is None else interval,
    )
    for frame in frames:
        typer.echo(format_pose_string(frame))


@app.command()
def validate(
    history_file: Annotated[Path, typer.Argument(help="Exported history JSON")],
) -> None:
    """Check a history file against the bundled schema."""
    from bitruvius.pipeline.export import HistoryLoadError, load_history_json

    try:
        entries = load_history_json(history_file)
    except HistoryLoadError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    with_pose = sum(1 for e in entries if e.has_pose)
    typer.echo(f"Valid: {len(entries)} entries ({with_pose} with pose)")


@app.command()
def tui() -> None:
    """Launch the interactive posing console."""
    from bitruvius.app import run

    run()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool, typer.Option("--version", "-v", help="Show version")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Enable debug logging")
    ] = False,
) -> None:
    """Bitruvius - 2D articulated figure posing and motion history engine."""
    if version:
        from bitruvius import __version__

        typer.echo(f"bitruvius {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand in (None, "tui"):
        # Console output would draw over the Textual screen.
        from bitruvius.config import load_config

        logging.basicConfig(
            filename=load_config().log_file,
            level=logging.DEBUG if verbose else logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    else:
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )
    if ctx.invoked_subcommand is None:
        # Default to TUI when no subcommand
        from bitruvius.app import run

        run()
