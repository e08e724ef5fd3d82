"""Shared fixtures for Bitruvius tests."""

import pytest

from bitruvius.config import PosingSettings
from bitruvius.engine.history import HistoryEngine
from bitruvius.engine.session import PosingSession
from bitruvius.models import Joint, Pose


class StepClock:
    """Deterministic millisecond clock that advances on every read."""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 1) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        return value


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def settings() -> PosingSettings:
    return PosingSettings()


@pytest.fixture
def history(clock: StepClock) -> HistoryEngine:
    return HistoryEngine(clock=clock)


@pytest.fixture
def session(settings: PosingSettings, history: HistoryEngine) -> PosingSession:
    return PosingSession(settings, history=history, clock=lambda: 0.0)


@pytest.fixture
def calibrated_session(session: PosingSession) -> PosingSession:
    assert session.start_calibration(now_ms=0)
    session.tick(now_ms=0)
    session.tick(now_ms=250)
    assert session.calibrated
    return session


@pytest.fixture
def bent_pose() -> Pose:
    return Pose(offsets={Joint.L_SHOULDER: -40, Joint.L_ELBOW: 25, Joint.R_KNEE: 10})
