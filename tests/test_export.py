"""Tests for the pose text format and history JSON I/O."""

import json
from pathlib import Path

import pytest

from bitruvius.engine.history import HistoryEngine
from bitruvius.models import Axis, BodyPart, Joint, Pose
from bitruvius.models.skeleton import JOINT_ORDER, PART_ORDER
from bitruvius.pipeline.export import (
    HistoryLoadError,
    PoseFormatError,
    format_pose_string,
    history_document,
    load_history_json,
    parse_pose_string,
    write_history_json,
    write_pose_file,
)


def test_format_rest_pose():
    joints = ";".join(f"{j}:0" for j in JOINT_ORDER)
    props = ";".join(f"{p}:h1.00,w1.00" for p in PART_ORDER)
    assert format_pose_string(Pose()) == f"POSE[{joints}]|PROPS[{props}]"


def test_format_starts_with_canonical_order():
    text = format_pose_string(Pose())
    assert text.startswith("POSE[waist:0;torso:0;collar:0;neck:0;l_shoulder:0")
    assert "|PROPS[head:h1.00,w1.00;collar:h1.00,w1.00" in text


@pytest.mark.parametrize(
    ("value", "expected"),
    [(2.5, "3"), (-2.5, "-2"), (179.6, "180"), (-0.4, "0"), (44.49, "44")],
)
def test_format_rounds_half_up(value: float, expected: str):
    text = format_pose_string(Pose(offsets={Joint.L_ELBOW: value}))
    assert f"l_elbow:{expected};" in text


def test_format_props_two_decimals():
    pose = Pose().with_proportion(BodyPart.HEAD, Axis.HEIGHT, 1.234)
    assert "head:h1.23,w1.00" in format_pose_string(pose)


def test_parse_round_trip():
    pose = Pose(offsets={Joint.WAIST: 15, Joint.R_TOE: -30}).with_proportion(
        BodyPart.L_FOOT, Axis.WIDTH, 0.75,
    )
    assert parse_pose_string(format_pose_string(pose)) == pose


def test_parse_defaults_and_skips_unknown(caplog: pytest.LogCaptureFixture):
    pose = parse_pose_string("POSE[neck:12;tail:40]|PROPS[tail:h2.00,w2.00]")
    assert pose.offset(Joint.NECK) == 12
    assert pose.offset(Joint.WAIST) == 0
    assert pose.proportion(BodyPart.HEAD).h == 1.0
    assert "tail" in caplog.text


@pytest.mark.parametrize(
    "text",
    [
        "",
        "POSE[waist:0]",
        "POSE[waist:abc]|PROPS[]",
        "POSE[waist]|PROPS[]",
        "POSE[]|PROPS[head:1.0]",
        "POSE[]|PROPS[head:h0.00,w1.00]",
        "POSE[waist:nan]|PROPS[]",
        "POSE[waist:-inf]|PROPS[]",
        "POSE[waist:1e309]|PROPS[]",
        "POSE[]|PROPS[head:h" + "9" * 400 + ",w1.00]",
    ],
)
def test_parse_rejects_malformed(text: str):
    with pytest.raises(PoseFormatError):
        parse_pose_string(text)


def test_write_pose_file(tmp_path: Path):
    path = write_pose_file(Pose(), tmp_path / "out", timestamp=123)
    assert path.name == "bitruvian_pose_123.txt"
    assert path.read_text(encoding="utf-8") == format_pose_string(Pose())


def _history(bent_pose: Pose) -> HistoryEngine:
    engine = HistoryEngine(clock=lambda: 1000)
    engine.log("SEQUENCE: CALIBRATION START...")
    engine.log("END_DRAG_l_elbow", bent_pose)
    return engine


def test_history_document_records(bent_pose: Pose):
    doc = history_document(_history(bent_pose).event_log)
    assert doc[0] == {"timestamp": 1000, "label": "SEQUENCE: CALIBRATION START..."}
    assert doc[1]["pivotOffsets"]["l_elbow"] == 25
    assert doc[1]["props"]["head"] == {"w": 1.0, "h": 1.0}


def test_history_json_round_trip(tmp_path: Path, bent_pose: Pose):
    entries = _history(bent_pose).event_log
    path = write_history_json(entries, tmp_path, timestamp=99)
    assert path.name == "bitruvian_history_99.json"
    loaded = load_history_json(path)
    assert loaded == entries
    assert loaded[1].pose == bent_pose


def test_load_missing_file(tmp_path: Path):
    with pytest.raises(HistoryLoadError, match="not found"):
        load_history_json(tmp_path / "missing.json")


def test_load_invalid_json(tmp_path: Path):
    path = tmp_path / "bad.json"
    path.write_text("{not json")
    with pytest.raises(HistoryLoadError, match="invalid JSON"):
        load_history_json(path)


def test_load_undecodable_file(tmp_path: Path):
    path = tmp_path / "binary.json"
    path.write_bytes(b"\xff\xfe[]")
    with pytest.raises(HistoryLoadError, match="cannot read"):
        load_history_json(path)


def test_load_directory(tmp_path: Path):
    with pytest.raises(HistoryLoadError, match="cannot read"):
        load_history_json(tmp_path)


@pytest.mark.parametrize("number", ["NaN", "Infinity", "-Infinity", "1e400"])
def test_load_rejects_non_finite_numbers(tmp_path: Path, number: str):
    path = tmp_path / "history.json"
    path.write_text(f'[{{"timestamp": 1, "pivotOffsets": {{"waist": {number}}}}}]')
    with pytest.raises(HistoryLoadError, match="non-finite"):
        load_history_json(path)


@pytest.mark.parametrize(
    "document",
    [
        {"timestamp": 1},
        [{"label": "no timestamp"}],
        [{"timestamp": 1, "pivotOffsets": {"tail": 3}}],
        [{"timestamp": 1, "props": {"head": {"w": 0, "h": 1}}}],
        [{"timestamp": 1, "extra": True}],
    ],
)
def test_load_schema_violations(tmp_path: Path, document: object):
    path = tmp_path / "history.json"
    path.write_text(json.dumps(document))
    with pytest.raises(HistoryLoadError, match="schema"):
        load_history_json(path)
