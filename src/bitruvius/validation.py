"""Validation utilities for Bitruvius history documents."""

from __future__ import annotations

import json
from pathlib import Path

import jsonschema

_SCHEMA_PATH = Path(__file__).parent / "schemas" / "history.schema.json"


def validate_history_json(data: object) -> None:
    """Validate an exported history document against history.schema.json.

    Parameters
    ----------
    data:
        The decoded history document (a list of record dicts).

    Raises
    ------
    jsonschema.ValidationError
        If the data does not conform to the schema.
    """
    schema = json.loads(_SCHEMA_PATH.read_text())
    jsonschema.validate(data, schema)
