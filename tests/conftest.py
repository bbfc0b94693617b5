"""
Shared fixtures for the workout session engine tests.

Provides sample plans, a deterministic clock, a recording feedback sink
and helpers for driving the reducer.
"""

from typing import List

import pytest

from workout_session.config import config
from workout_session.models.plan_adapter import adapt_plan
from workout_session.models.schemas import FeedbackRecord
from workout_session.models.session_machine import SessionMachine
from workout_session.models.session_state import Action, ActionType


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------


def make_plan(*exercises, name="Test Plan"):
    return {"id": "plan-1", "planName": name, "exercises": list(exercises)}


@pytest.fixture
def rep_plan():
    """One rep-based exercise with three sets"""
    return make_plan({"name": "Push Ups", "sets": "3", "reps": "10-12"})


@pytest.fixture
def timed_plan():
    """One timed exercise, 30 seconds, single set"""
    return make_plan({"name": "Plank", "sets": "1", "durationSeconds": 30})


@pytest.fixture
def mixed_plan():
    """Rep-based single set followed by a timed exercise"""
    return make_plan(
        {"name": "Squats", "sets": 1, "reps": "15"},
        {"name": "Wall Sit", "sets": "2", "durationSeconds": 45},
    )


# ---------------------------------------------------------------------------
# Reducer helpers
# ---------------------------------------------------------------------------


def machine_for(plan) -> SessionMachine:
    return SessionMachine(adapt_plan(plan), prep_duration=3, rest_duration=60)


def apply(machine: SessionMachine, state, *action_types, at: float = 1000.0):
    """Apply actions in order and return (state, all effects)"""
    effects = []
    for action_type in action_types:
        state, produced = machine.reduce(state, Action(action_type, at=at))
        effects.extend(produced)
    return state, effects


def tick(machine: SessionMachine, state, times: int = 1):
    effects = []
    for _ in range(times):
        state, produced = machine.reduce(state, Action(ActionType.TICK))
        effects.extend(produced)
    return state, effects


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


class RecordingSink:
    """Feedback sink that keeps everything it receives"""

    def __init__(self):
        self.records: List[FeedbackRecord] = []

    def submit(self, record: FeedbackRecord) -> None:
        self.records.append(record)


class FailingSink:
    def submit(self, record: FeedbackRecord) -> None:
        raise RuntimeError("analytics backend unavailable")


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture(autouse=True)
def session_config(monkeypatch):
    """Pin timing so tests do not depend on the environment"""
    monkeypatch.setattr(config, "prep_duration", 3)
    monkeypatch.setattr(config, "rest_duration", 60)
    monkeypatch.setattr(config, "server_ticks", False)
    monkeypatch.setattr(config, "session_ttl", 1800.0)
    yield config
