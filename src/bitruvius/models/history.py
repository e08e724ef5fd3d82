"""History entry model shared by the undo stacks, event log and keyframes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from bitruvius.models.enums import BodyPart, Joint
from bitruvius.models.pose import Pose, Proportion


class HistoryEntry(BaseModel):
    """A timestamped, optionally labelled and optionally pose-carrying record.

    Serialises to the history export record
    ``{timestamp, label?, pivotOffsets?, props?}``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    timestamp: int  # epoch milliseconds
    label: str | None = None
    pivot_offsets: dict[Joint, float] | None = Field(default=None, alias="pivotOffsets")
    props: dict[BodyPart, Proportion] | None = None

    @classmethod
    def snapshot(cls, pose: Pose, timestamp: int, label: str | None = None) -> HistoryEntry:
        return cls(
            timestamp=timestamp,
            label=label,
            pivot_offsets=dict(pose.offsets),
            props=dict(pose.props),
        )

    @property
    def has_pose(self) -> bool:
        return self.pivot_offsets is not None

    @property
    def pose(self) -> Pose | None:
        if self.pivot_offsets is None:
            return None
        return Pose(offsets=self.pivot_offsets, props=self.props or {})

    def display_label(self) -> str:
        return self.label or f"Pose @ {self.timestamp}"

    def to_record(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
