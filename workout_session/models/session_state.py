# session_state.py
"""
State, actions and effects shared by the session reducer and the exit flow.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from workout_session.models.countdown_timer import CountdownTimer
from workout_session.models.schemas import FeedbackReason, FeedbackRecord


class Phase(str, Enum):
    """Discrete states of an active workout session"""
    NOT_STARTED = "NOT_STARTED"
    PREPARING = "PREPARING"
    EXERCISING_TIMED = "EXERCISING_TIMED"
    EXERCISING_REPS = "EXERCISING_REPS"
    PAUSED = "PAUSED"
    RESTING_BETWEEN_SETS = "RESTING_BETWEEN_SETS"
    RESTING_BETWEEN_EXERCISES = "RESTING_BETWEEN_EXERCISES"
    COMPLETED_EXERCISE_PENDING_NEXT = "COMPLETED_EXERCISE_PENDING_NEXT"
    WORKOUT_COMPLETE = "WORKOUT_COMPLETE"


# Phases during which the countdown may run
TIMED_PHASES = frozenset({
    Phase.PREPARING,
    Phase.EXERCISING_TIMED,
    Phase.RESTING_BETWEEN_SETS,
    Phase.RESTING_BETWEEN_EXERCISES,
})

# Phases that `skip` short-circuits to their expiry transition
SKIPPABLE_PHASES = frozenset({
    Phase.PREPARING,
    Phase.RESTING_BETWEEN_SETS,
    Phase.RESTING_BETWEEN_EXERCISES,
})

EXERCISING_PHASES = frozenset({Phase.EXERCISING_TIMED, Phase.EXERCISING_REPS})


class EndReason(str, Enum):
    COMPLETED = "completed"
    FEEDBACK_SUBMITTED = "feedback_submitted"
    FEEDBACK_SKIPPED = "feedback_skipped"


class ActionType(str, Enum):
    """Events the reducer understands; values match the client-facing action names"""
    START = "start"
    FINISH_SET = "finishSet"
    CONTINUE = "continue"
    SKIP = "skip"
    PAUSE = "pause"
    RESUME = "resume"
    PREVIOUS_EXERCISE = "previousExercise"
    RESET_TIMER = "resetTimer"
    TICK = "tick"
    EXIT = "exit"
    SELECT_REASON = "selectReason"
    SET_CUSTOM_TEXT = "setCustomText"
    SUBMIT_FEEDBACK = "submitFeedback"
    SKIP_FEEDBACK = "skipFeedback"
    CANCEL_EXIT = "cancelExit"


@dataclass(frozen=True)
class Action:
    """
    One event for the reducer.
    `at` is the wall-clock time the host observed the event; `cycle` addresses a tick to one timer arm cycle.
    """
    type: ActionType
    at: Optional[float] = None
    cycle: Optional[int] = None
    reason: Optional[FeedbackReason] = None
    text: Optional[str] = None


class EffectType(str, Enum):
    SHOW_ALERT = "show_alert"
    SHOW_EXIT_PROMPT = "show_exit_prompt"
    LOG_FEEDBACK = "log_feedback"
    END_SESSION = "end_session"


@dataclass(frozen=True)
class Effect:
    """Side effect the host performs after applying the new state"""
    type: EffectType
    title: Optional[str] = None
    message: Optional[str] = None
    feedback: Optional[FeedbackRecord] = None
    end_reason: Optional[EndReason] = None


@dataclass(frozen=True)
class ExitFlowState:
    """Open exit prompt; remembers whether the countdown was running when it opened"""
    timer_was_active: bool
    reason: Optional[FeedbackReason] = None
    custom_text: str = ""

    @property
    def can_submit(self) -> bool:
        if self.reason is None:
            return False
        if self.reason == FeedbackReason.OTHER:
            return bool(self.custom_text.strip())
        return True


@dataclass(frozen=True)
class SessionState:
    """
    Complete state of one workout session. Owned by the reducer; hosts only read it.
    previous_phase is set exactly while phase is PAUSED.
    """
    phase: Phase = Phase.NOT_STARTED
    current_exercise_index: int = 0
    current_set: int = 1
    timer: CountdownTimer = field(default_factory=CountdownTimer)
    previous_phase: Optional[Phase] = None
    workout_start_time: Optional[float] = None
    exit_flow: Optional[ExitFlowState] = None
    end_reason: Optional[EndReason] = None

    @property
    def timer_value(self) -> int:
        return self.timer.value

    @property
    def is_timer_active(self) -> bool:
        return self.timer.active

    @property
    def is_ended(self) -> bool:
        return self.end_reason is not None


Transition = Tuple[SessionState, Tuple[Effect, ...]]


def alert(title: str, message: str) -> Effect:
    return Effect(type=EffectType.SHOW_ALERT, title=title, message=message)


def end_session(reason: EndReason) -> Effect:
    return Effect(type=EffectType.END_SESSION, end_reason=reason)
