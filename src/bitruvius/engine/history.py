"""Snapshot undo/redo, the operator event log and the keyframe sequence."""

from __future__ import annotations

import logging
import time
from collections import deque
from typing import TYPE_CHECKING

from bitruvius.models.history import HistoryEntry

if TYPE_CHECKING:
    from collections.abc import Callable

    from bitruvius.models.pose import Pose

logger = logging.getLogger(__name__)

DEFAULT_UNDO_LIMIT = 50
DEFAULT_LOG_LIMIT = 100


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


class HistoryEngine:
    """Three independent sequences over pose snapshots.

    ``undo_stack`` is bounded (oldest dropped first, most recent last),
    ``redo_stack`` keeps its next entry at the front and is cleared by every
    commit, and the event log keeps the last ``log_limit`` entries. Keyframes
    are entries promoted from the log.
    """

    def __init__(
        self,
        *,
        undo_limit: int = DEFAULT_UNDO_LIMIT,
        log_limit: int = DEFAULT_LOG_LIMIT,
        clock: Callable[[], int] = wall_clock_ms,
    ) -> None:
        self.undo_limit = undo_limit
        self.log_limit = log_limit
        self._clock = clock
        self._undo: deque[HistoryEntry] = deque(maxlen=undo_limit)
        self._redo: deque[HistoryEntry] = deque()
        self._log: list[HistoryEntry] = []
        self._keyframes: list[HistoryEntry] = []

    # -- read model -----------------------------------------------------------

    @property
    def undo_stack(self) -> list[HistoryEntry]:
        return list(self._undo)

    @property
    def redo_stack(self) -> list[HistoryEntry]:
        return list(self._redo)

    @property
    def event_log(self) -> list[HistoryEntry]:
        return list(self._log)

    @property
    def keyframes(self) -> list[HistoryEntry]:
        return list(self._keyframes)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def now(self) -> int:
        """Current timestamp on the engine's clock, epoch milliseconds."""
        return self._clock()

    # -- undo / redo ----------------------------------------------------------

    def commit(self, pose: Pose) -> None:
        """Push *pose* onto the undo stack and invalidate redo."""
        self._undo.append(HistoryEntry.snapshot(pose, self._clock()))
        self._redo.clear()

    def undo(self, current: Pose) -> Pose | None:
        """Swap *current* for the most recent undo snapshot."""
        if not self._undo:
            return None
        previous = self._undo.pop()
        self._redo.appendleft(HistoryEntry.snapshot(current, self._clock()))
        return previous.pose

    def redo(self, current: Pose) -> Pose | None:
        """Swap *current* for the front of the redo stack."""
        if not self._redo:
            return None
        following = self._redo.popleft()
        self._undo.append(HistoryEntry.snapshot(current, self._clock()))
        return following.pose

    # -- event log ------------------------------------------------------------

    def log(self, label: str, pose: Pose | None = None) -> HistoryEntry:
        """Append an entry, carrying a snapshot of *pose* when given."""
        now = self._clock()
        if pose is None:
            entry = HistoryEntry(timestamp=now, label=label)
        else:
            entry = HistoryEntry.snapshot(pose, now, label)
        self._log.append(entry)
        if len(self._log) > self.log_limit:
            del self._log[: len(self._log) - self.log_limit]
        logger.debug("Event log: %s", label)
        return entry

    def delete_entry(self, index: int) -> HistoryEntry | None:
        if not 0 <= index < len(self._log):
            return None
        entry = self._log.pop(index)
        self.log(f'LOG DELETED: "{entry.display_label()}" removed.')
        return entry

    def promote(self, index: int) -> bool:
        """Append log entry *index* to the keyframes if it carries a pose."""
        if not 0 <= index < len(self._log):
            return False
        entry = self._log[index]
        if not entry.has_pose:
            return False
        self._keyframes.append(entry)
        self.log(f"KEYFRAME ADDED: Pose from log #{index + 1}.")
        return True

    def add_keyframe(self, entry: HistoryEntry) -> bool:
        """Append an externally loaded entry to the keyframes."""
        if not entry.has_pose:
            return False
        self._keyframes.append(entry)
        return True

    def clear_log(self) -> None:
        self._log.clear()
        self.log("COMMAND: Recording history cleared.")

    def clear_keyframes(self) -> None:
        self._keyframes.clear()
        self.log("COMMAND: Keyframe sequence cleared.")
