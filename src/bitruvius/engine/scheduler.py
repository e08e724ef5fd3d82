"""Single-slot cooperative frame scheduler and the two animation drivers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable

from bitruvius.models.enums import InteractionState
from bitruvius.pipeline.interpolation import ease_offsets, sample_keyframes, snap_out_ease

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from bitruvius.models.enums import Joint
    from bitruvius.models.pose import Pose

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DriverFrame:
    """What a driver produced for one tick."""

    pose: Pose
    progress: float
    done: bool


@runtime_checkable
class AnimationDriver(Protocol):
    """A function from elapsed milliseconds to the pose for that instant."""

    state: ClassVar[InteractionState]

    def __call__(self, elapsed_ms: float) -> DriverFrame:
        ...


class CalibrationDriver:
    """Snap every joint offset from a start pose to a rest pose."""

    state: ClassVar[InteractionState] = InteractionState.CALIBRATING

    def __init__(self, start: Pose, target: Mapping[Joint, float], duration_ms: float) -> None:
        self.start = start
        self.target = dict(target)
        self.duration_ms = duration_ms

    def __call__(self, elapsed_ms: float) -> DriverFrame:
        progress = min(max(elapsed_ms, 0.0) / self.duration_ms, 1.0)
        pose = ease_offsets(self.start, self.target, snap_out_ease(progress))
        return DriverFrame(pose=pose, progress=progress, done=progress >= 1)


class TimelapseDriver:
    """Linear playback through an ordered keyframe sequence."""

    state: ClassVar[InteractionState] = InteractionState.PLAYING_TIMELAPSE

    def __init__(self, keyframes: Sequence[Pose], segment_ms: float) -> None:
        if len(keyframes) < 2:
            msg = f"Timelapse needs at least 2 keyframes, got {len(keyframes)}"
            raise ValueError(msg)
        self.keyframes = list(keyframes)
        self.segment_ms = segment_ms

    def __call__(self, elapsed_ms: float) -> DriverFrame:
        pose, progress = sample_keyframes(self.keyframes, elapsed_ms, self.segment_ms)
        return DriverFrame(pose=pose, progress=progress, done=progress >= 1)


class FrameScheduler:
    """Owns exactly one active driver and advances it once per tick.

    A driver stops being rescheduled as soon as it reports ``done``;
    :meth:`cancel` clears the slot from outside (e.g. on unmount).
    """

    def __init__(self) -> None:
        self._driver: AnimationDriver | None = None
        self._started_at = 0.0

    @property
    def active(self) -> AnimationDriver | None:
        return self._driver

    @property
    def busy(self) -> bool:
        return self._driver is not None

    def start(self, driver: AnimationDriver, now_ms: float) -> bool:
        """Occupy the slot with *driver*; refused while another one runs."""
        if self._driver is not None:
            logger.debug("Scheduler busy with %s, refusing %s", self._driver.state, driver.state)
            return False
        self._driver = driver
        self._started_at = now_ms
        logger.debug("Scheduler started %s at %.1f ms", driver.state, now_ms)
        return True

    def tick(self, now_ms: float) -> DriverFrame | None:
        """Advance the active driver, or return ``None`` when idle."""
        if self._driver is None:
            return None
        frame = self._driver(now_ms - self._started_at)
        if frame.done:
            logger.debug("Scheduler finished %s", self._driver.state)
            self._driver = None
        return frame

    def cancel(self) -> AnimationDriver | None:
        """Clear the slot without producing a final frame."""
        driver, self._driver = self._driver, None
        if driver is not None:
            logger.debug("Scheduler cancelled %s", driver.state)
        return driver
