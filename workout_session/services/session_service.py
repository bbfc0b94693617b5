"""
Hosts one workout session: owns its state, feeds actions through the reducer one at a time,
and performs the effects the reducer asks for.
"""

import time
import uuid
from collections import deque
from typing import Any, Callable, Deque, Dict, Optional, Union

from workout_session.config import config
from workout_session.models.plan_adapter import PlanView, adapt_plan
from workout_session.models.schemas import (
    Alert,
    ExitFlowSnapshot,
    FeedbackReason,
    SessionSnapshot,
    WorkoutPlan,
)
from workout_session.models.session_machine import SessionMachine
from workout_session.models.session_state import (
    Action,
    ActionType,
    Effect,
    EffectType,
    EndReason,
    Phase,
    SessionState,
)
from workout_session.services.feedback_service import FeedbackService, feedback_service
from workout_session.utils.logging_utils import logger
from workout_session.utils.motivation import (
    format_time,
    get_motivation_text,
    get_primary_action_label,
    get_progress_text,
)

EndListener = Callable[["WorkoutSession", EndReason], None]
AlertListener = Callable[["WorkoutSession", Effect], None]


class WorkoutSession:
    """
    One active session over one plan.
    Construction validates the plan and raises PlanConfigurationError if it cannot be run;
    after that no action raises. Once closed, the session ignores everything.
    """

    def __init__(
        self,
        plan: Union[WorkoutPlan, Dict[str, Any]],
        session_id: Optional[str] = None,
        clock: Callable[[], float] = time.time,
        feedback_sink: Optional[FeedbackService] = None,
        on_end: Optional[EndListener] = None,
        on_alert: Optional[AlertListener] = None,
    ):
        self.plan: PlanView = adapt_plan(plan)
        self.session_id = session_id or uuid.uuid4().hex
        self.machine = SessionMachine(self.plan, prep_duration=config.prep_duration,
                                      rest_duration=config.rest_duration)
        self.state: SessionState = self.machine.initial_state()

        self._clock = clock
        self._feedback_sink = feedback_sink if feedback_sink is not None else feedback_service
        self._on_end = on_end
        self._on_alert = on_alert

        self._queue: Deque[Action] = deque()
        self._processing = False
        self._closed = False
        self.recent_alerts: Deque[Alert] = deque(maxlen=config.max_recent_alerts)
        self.exit_prompt_shown = False
        self.last_active: float = clock()

        logger.info(f"Session {self.session_id} created for plan '{self.plan.plan_name}'")

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def ended(self) -> bool:
        return self.state.is_ended

    def dispatch(self, action: Action) -> SessionState:
        """
        Apply one action. Actions dispatched from inside an effect are queued and run
        after the current one finishes, so transitions never interleave.
        """
        if self._closed:
            logger.debug(f"Session {self.session_id} closed; dropping {action.type.value}")
            return self.state

        if action.at is None:
            action = Action(type=action.type, at=self._clock(), cycle=action.cycle,
                            reason=action.reason, text=action.text)
        if action.type != ActionType.TICK:
            self.last_active = action.at
        self._queue.append(action)
        if self._processing:
            return self.state

        self._processing = True
        try:
            while self._queue and not self._closed:
                current = self._queue.popleft()
                self.state, effects = self.machine.reduce(self.state, current)
                for effect in effects:
                    self._perform(effect)
        finally:
            self._processing = False
            self._queue.clear()
        return self.state

    def _perform(self, effect: Effect) -> None:
        if effect.type == EffectType.SHOW_ALERT:
            self.recent_alerts.append(Alert(title=effect.title, message=effect.message))
            self._notify(self._on_alert, effect)

        elif effect.type == EffectType.SHOW_EXIT_PROMPT:
            self.exit_prompt_shown = True
            self._notify(self._on_alert, effect)

        elif effect.type == EffectType.LOG_FEEDBACK:
            try:
                self._feedback_sink.submit(effect.feedback)
            except Exception as e:
                logger.error(f"Error delivering feedback for session {self.session_id}: {e}")

        elif effect.type == EffectType.END_SESSION:
            logger.info(f"Session {self.session_id} ended ({effect.end_reason.value})")
            self._notify(self._on_end, effect.end_reason)

    def _notify(self, listener: Optional[Callable], *args) -> None:
        """Call a host listener; a failing listener must not stop the remaining effects"""
        if listener is None:
            return
        try:
            listener(self, *args)
        except Exception as e:
            logger.error(f"Listener {getattr(listener, '__name__', listener)} failed for session {self.session_id}: {e}")

    # ---- user actions ----------------------------------------------------

    def start(self) -> SessionState:
        return self.dispatch(Action(ActionType.START))

    def finish_set(self) -> SessionState:
        return self.dispatch(Action(ActionType.FINISH_SET))

    def continue_(self) -> SessionState:
        return self.dispatch(Action(ActionType.CONTINUE))

    def skip(self) -> SessionState:
        return self.dispatch(Action(ActionType.SKIP))

    def pause(self) -> SessionState:
        return self.dispatch(Action(ActionType.PAUSE))

    def resume(self) -> SessionState:
        return self.dispatch(Action(ActionType.RESUME))

    def previous_exercise(self) -> SessionState:
        return self.dispatch(Action(ActionType.PREVIOUS_EXERCISE))

    def reset_timer(self) -> SessionState:
        return self.dispatch(Action(ActionType.RESET_TIMER))

    def tick(self, cycle: Optional[int] = None) -> SessionState:
        return self.dispatch(Action(ActionType.TICK, cycle=cycle))

    def exit(self) -> SessionState:
        return self.dispatch(Action(ActionType.EXIT))

    def select_reason(self, reason: FeedbackReason, custom_text: Optional[str] = None) -> SessionState:
        return self.dispatch(Action(ActionType.SELECT_REASON, reason=reason, text=custom_text))

    def set_custom_text(self, text: str) -> SessionState:
        return self.dispatch(Action(ActionType.SET_CUSTOM_TEXT, text=text))

    def submit_feedback(self) -> SessionState:
        return self.dispatch(Action(ActionType.SUBMIT_FEEDBACK))

    def skip_feedback(self) -> SessionState:
        return self.dispatch(Action(ActionType.SKIP_FEEDBACK))

    def cancel_exit(self) -> SessionState:
        return self.dispatch(Action(ActionType.CANCEL_EXIT))

    def close(self) -> None:
        """Unmount the session. Pending ticks and later actions are dropped."""
        if self._closed:
            return
        self._closed = True
        self._queue.clear()
        logger.info(f"Session {self.session_id} closed")

    # ---- rendering -------------------------------------------------------

    def snapshot(self) -> SessionSnapshot:
        """Read-only view of the current state for clients"""
        state = self.state
        index = state.current_exercise_index
        exercise = self.plan[index]

        exit_snapshot = None
        if state.exit_flow is not None:
            exit_snapshot = ExitFlowSnapshot(
                reason=state.exit_flow.reason,
                customText=state.exit_flow.custom_text,
                canSubmit=state.exit_flow.can_submit,
            )

        return SessionSnapshot(
            sessionId=self.session_id,
            planName=self.plan.plan_name,
            phase=state.phase.value,
            previousPhase=state.previous_phase.value if state.previous_phase else None,
            currentExerciseIndex=index,
            totalExercises=len(self.plan),
            currentSet=state.current_set,
            totalSets=exercise.total_sets,
            exerciseName=exercise.name,
            reps=exercise.reps,
            durationSeconds=exercise.duration_seconds,
            timerValue=state.timer_value,
            timerDisplay=format_time(state.timer_value),
            isTimerActive=state.is_timer_active,
            progressText=get_progress_text(index, len(self.plan), state.current_set, exercise.total_sets),
            primaryActionLabel=get_primary_action_label(state.current_set, exercise.total_sets,
                                                        self.plan.is_last(index)),
            canGoPrevious=index > 0 and state.phase not in (Phase.NOT_STARTED, Phase.WORKOUT_COMPLETE),
            motivation=get_motivation_text(state.phase, state.current_set, exercise.total_sets),
            exitFlow=exit_snapshot,
            isEnded=state.is_ended,
            endReason=state.end_reason.value if state.end_reason else None,
            recentAlerts=list(self.recent_alerts),
        )
