"""Tests for history JSON schema validation."""

import jsonschema
import pytest

from bitruvius.validation import validate_history_json


def test_valid_document():
    validate_history_json([
        {"timestamp": 0},
        {
            "timestamp": 1,
            "label": "END_DRAG_waist",
            "pivotOffsets": {"waist": 12.5},
            "props": {"head": {"w": 1.0, "h": 1.2}},
        },
    ])


def test_empty_document_is_valid():
    validate_history_json([])


@pytest.mark.parametrize(
    "record",
    [
        {"timestamp": -1},
        {"timestamp": 1.5},
        {"timestamp": 1, "label": 3},
        {"timestamp": 1, "props": {"head": {"w": 1.0}}},
    ],
)
def test_invalid_records(record: dict):
    with pytest.raises(jsonschema.ValidationError):
        validate_history_json([record])
