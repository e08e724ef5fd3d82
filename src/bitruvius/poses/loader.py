"""Load pose preset JSON files from the built-in poses directory."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field

from bitruvius.models.enums import Joint
from bitruvius.models.pose import Pose

logger = logging.getLogger(__name__)

# Directory containing the bundled preset JSON files.
_POSES_DIR = Path(__file__).resolve().parent


class PosePreset(BaseModel):
    """A named set of joint offsets; unspecified joints are 0."""

    name: str
    offsets: dict[Joint, float] = Field(default_factory=dict)

    def to_pose(self, base: Pose | None = None) -> Pose:
        """Replace every joint offset of *base* (proportions are kept)."""
        base = base or Pose()
        return Pose(offsets=self.offsets, props=base.props)


def available_presets() -> list[str]:
    """Return a sorted list of available preset names (without extension)."""
    return sorted(p.stem for p in _POSES_DIR.glob("*.json"))


@lru_cache(maxsize=32)
def load(name: str) -> PosePreset:
    """Load and validate a pose preset by name.

    Parameters
    ----------
    name:
        Either a bare name like ``"t_pose"`` or with extension ``"t_pose.json"``.

    Returns
    -------
    PosePreset
        The validated preset model.

    Raises
    ------
    FileNotFoundError
        If no matching JSON file exists in the poses directory.
    """
    if not name.endswith(".json"):
        name = f"{name}.json"

    path = _POSES_DIR / name

    if not path.exists():
        msg = f"Pose preset not found: {path}"
        raise FileNotFoundError(msg)

    data = json.loads(path.read_text(encoding="utf-8"))
    preset = PosePreset.model_validate(data)
    logger.debug("Loaded pose preset '%s' (%d joints)", preset.name, len(preset.offsets))
    return preset
