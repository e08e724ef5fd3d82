"""Pose text format and history JSON import/export."""

from __future__ import annotations

import json
import logging
import math
import re
from typing import TYPE_CHECKING

import jsonschema
from pydantic import ValidationError as PydanticValidationError

from bitruvius.models.enums import BodyPart, Joint
from bitruvius.models.history import HistoryEntry
from bitruvius.models.pose import Pose, Proportion
from bitruvius.models.skeleton import JOINT_ORDER, PART_ORDER
from bitruvius.validation import validate_history_json

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

logger = logging.getLogger(__name__)

POSE_FILE_PREFIX = "bitruvian_pose_"
HISTORY_FILE_PREFIX = "bitruvian_history_"

_POSE_RE = re.compile(r"^POSE\[(?P<joints>[^\]]*)\]\|PROPS\[(?P<props>[^\]]*)\]$")
_PROP_RE = re.compile(r"^h(?P<h>-?[\d.]+),w(?P<w>-?[\d.]+)$")

_JOINT_KEYS = frozenset(j.value for j in Joint)
_PART_KEYS = frozenset(p.value for p in BodyPart)


class PoseFormatError(ValueError):
    """Raised when a pose string cannot be parsed."""


class HistoryLoadError(ValueError):
    """Raised when a history file cannot be loaded."""


# ---------------------------------------------------------------------------
# Pose text format
# ---------------------------------------------------------------------------


def format_pose_string(pose: Pose) -> str:
    """Render ``POSE[j:v;...]|PROPS[p:hH,wW;...]`` in canonical order.

    Offsets are rounded half up to whole degrees, proportions use two
    decimals.
    """
    joints = ";".join(f"{j}:{_round_half_up(pose.offset(j))}" for j in JOINT_ORDER)
    parts = []
    for part in PART_ORDER:
        prop = pose.proportion(part)
        parts.append(f"{part}:h{prop.h:.2f},w{prop.w:.2f}")
    return f"POSE[{joints}]|PROPS[{';'.join(parts)}]"


def parse_pose_string(text: str) -> Pose:
    """Parse a string produced by :func:`format_pose_string`.

    Unknown keys are skipped with a warning; missing keys take their
    defaults.

    Raises
    ------
    PoseFormatError
        If the overall layout or a value cannot be read.
    """
    match = _POSE_RE.match(text.strip())
    if match is None:
        msg = "pose string must look like POSE[...]|PROPS[...]"
        raise PoseFormatError(msg)

    offsets: dict[Joint, float] = {}
    for key, value in _entries(match.group("joints")):
        if key not in _JOINT_KEYS:
            logger.warning("Skipping unknown joint '%s' in pose string", key)
            continue
        try:
            offsets[Joint(key)] = _finite(value)
        except ValueError:
            msg = f"invalid offset for joint '{key}': {value!r}"
            raise PoseFormatError(msg) from None

    props: dict[BodyPart, Proportion] = {}
    for key, value in _entries(match.group("props")):
        if key not in _PART_KEYS:
            logger.warning("Skipping unknown body part '%s' in pose string", key)
            continue
        prop_match = _PROP_RE.match(value)
        if prop_match is None:
            msg = f"invalid proportion for part '{key}': {value!r}"
            raise PoseFormatError(msg)
        try:
            props[BodyPart(key)] = Proportion(
                h=_finite(prop_match.group("h")), w=_finite(prop_match.group("w")),
            )
        except (ValueError, PydanticValidationError):
            msg = f"invalid proportion for part '{key}': {value!r}"
            raise PoseFormatError(msg) from None

    return Pose(offsets=offsets, props=props)


def write_pose_file(pose: Pose, directory: Path, *, timestamp: int) -> Path:
    """Write the pose string to ``bitruvian_pose_<timestamp>.txt``."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{POSE_FILE_PREFIX}{timestamp}.txt"
    path.write_text(format_pose_string(pose), encoding="utf-8")
    logger.info("Wrote %s", path)
    return path


# ---------------------------------------------------------------------------
# History JSON
# ---------------------------------------------------------------------------


def history_document(entries: Iterable[HistoryEntry]) -> list[dict[str, object]]:
    """Ordered list of export records, validated against the bundled schema."""
    document = [entry.to_record() for entry in entries]
    validate_history_json(document)
    return document


def write_history_json(
    entries: Iterable[HistoryEntry],
    directory: Path,
    *,
    timestamp: int,
) -> Path:
    """Write the event log to ``bitruvian_history_<timestamp>.json``."""
    document = history_document(entries)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{HISTORY_FILE_PREFIX}{timestamp}.json"
    path.write_text(json.dumps(document, indent=2), encoding="utf-8")
    logger.info("Wrote %s (%d entries)", path, len(document))
    return path


def load_history_json(path: Path) -> list[HistoryEntry]:
    """Load an exported history document."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        msg = f"history file not found: {path}"
        raise HistoryLoadError(msg) from None
    except PermissionError:
        msg = f"permission denied reading history file: {path}"
        raise HistoryLoadError(msg) from None
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"cannot read history file {path}: {exc}"
        raise HistoryLoadError(msg) from None
    try:
        data = json.loads(text, parse_float=_parse_json_float, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        msg = f"history file contains invalid JSON: {exc}"
        raise HistoryLoadError(msg) from None
    try:
        validate_history_json(data)
    except jsonschema.ValidationError as exc:
        msg = f"history file does not match schema: {exc.message}"
        raise HistoryLoadError(msg) from None
    try:
        return [HistoryEntry.model_validate(record) for record in data]
    except PydanticValidationError as exc:
        msg = f"history file has invalid structure: {exc}"
        raise HistoryLoadError(msg) from None


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _finite(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        msg = f"non-finite number: {text!r}"
        raise ValueError(msg)
    return value


def _reject_constant(name: str) -> float:
    msg = f"history file contains non-finite number {name}"
    raise HistoryLoadError(msg)


def _parse_json_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        _reject_constant(text)
    return value


def _entries(body: str) -> list[tuple[str, str]]:
    result: list[tuple[str, str]] = []
    for chunk in body.split(";"):
        if not chunk:
            continue
        key, sep, value = chunk.partition(":")
        if not sep:
            msg = f"entry without ':' separator: {chunk!r}"
            raise PoseFormatError(msg)
        result.append((key.strip(), value.strip()))
    return result
