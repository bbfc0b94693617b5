# session_machine.py
"""
Pure reducer that walks a session through a plan.
reduce(state, action) returns the next state plus the effects the host should perform;
nothing here reads clocks or schedules work.
"""

from dataclasses import replace
from typing import Tuple

from workout_session.models import exit_flow
from workout_session.models.plan_adapter import PlanView, PlannedExercise
from workout_session.models.session_state import (
    EXERCISING_PHASES,
    SKIPPABLE_PHASES,
    TIMED_PHASES,
    Action,
    ActionType,
    Effect,
    EndReason,
    Phase,
    SessionState,
    Transition,
    alert,
    end_session,
)
from workout_session.utils.logging_utils import logger

PREP_DURATION = 3
REST_DURATION = 60


class SessionMachine:
    """
    Transition rules for one plan. The plan is fixed at construction; state is passed in and returned.
    Actions that make no sense for the current phase are ignored rather than rejected.
    """

    def __init__(self, plan: PlanView, prep_duration: int = PREP_DURATION, rest_duration: int = REST_DURATION):
        self.plan = plan
        self.prep_duration = prep_duration
        self.rest_duration = rest_duration

    def initial_state(self) -> SessionState:
        return SessionState()

    def reduce(self, state: SessionState, action: Action) -> Transition:
        # Completed and abandoned sessions are absorbing
        if state.is_ended:
            return state, ()

        if state.exit_flow is not None:
            if action.type in exit_flow.EXIT_FLOW_ACTIONS:
                return exit_flow.reduce_exit(self.plan, state, action)
            if action.type == ActionType.TICK:
                return state, ()
            return self._ignore(state, action)

        handler = {
            ActionType.START: self._start,
            ActionType.TICK: self._tick,
            ActionType.SKIP: self._skip,
            ActionType.FINISH_SET: self._finish_set,
            ActionType.CONTINUE: self._continue,
            ActionType.PAUSE: self._pause,
            ActionType.RESUME: self._resume,
            ActionType.PREVIOUS_EXERCISE: self._previous_exercise,
            ActionType.RESET_TIMER: self._reset_timer,
            ActionType.EXIT: self._exit,
        }.get(action.type)

        if handler is None:
            return self._ignore(state, action)
        return handler(state, action)

    # ---- helpers ---------------------------------------------------------

    def current_exercise(self, state: SessionState) -> PlannedExercise:
        return self.plan[state.current_exercise_index]

    def _ignore(self, state: SessionState, action: Action) -> Transition:
        logger.debug(f"Ignoring {action.type.value} during {state.phase.value}")
        return state, ()

    def _move(self, state: SessionState, phase: Phase, **changes) -> SessionState:
        if phase != state.phase:
            logger.info(f"Phase: {state.phase.value} → {phase.value}")
        return replace(state, phase=phase, **changes)

    def _enter_exercise(self, state: SessionState, index: int, current_set: int) -> SessionState:
        """Begin a set: timed exercises get a preparation countdown, rep-based ones start straight away"""
        exercise = self.plan[index]
        if exercise.is_timed:
            return self._move(state, Phase.PREPARING, current_exercise_index=index, current_set=current_set,
                              timer=state.timer.arm(self.prep_duration), previous_phase=None)
        return self._move(state, Phase.EXERCISING_REPS, current_exercise_index=index, current_set=current_set,
                          timer=state.timer.clear(), previous_phase=None)

    def _complete_set(self, state: SessionState) -> Transition:
        exercise = self.current_exercise(state)

        if state.current_set < exercise.total_sets:
            rested = self._move(state, Phase.RESTING_BETWEEN_SETS, timer=state.timer.arm(self.rest_duration))
            return rested, (alert("Set Complete!", f"Starting {self.rest_duration}s rest."),)

        if not self.plan.is_last(state.current_exercise_index):
            rested = self._move(state, Phase.RESTING_BETWEEN_EXERCISES, timer=state.timer.arm(self.rest_duration))
            return rested, (alert("Exercise Complete!", "Moving to the next exercise."),)

        return self._finish_workout(state)

    def _finish_workout(self, state: SessionState) -> Transition:
        done = self._move(state, Phase.WORKOUT_COMPLETE, timer=state.timer.clear(), previous_phase=None,
                          end_reason=EndReason.COMPLETED)
        return done, (
            alert("Workout Complete!", "Congratulations! You've finished the workout."),
            end_session(EndReason.COMPLETED),
        )

    def _expire(self, state: SessionState) -> Transition:
        """What reaching zero means in the current phase"""
        phase = state.phase

        if phase == Phase.PREPARING:
            exercise = self.current_exercise(state)
            if exercise.is_timed:
                return self._move(state, Phase.EXERCISING_TIMED,
                                  timer=state.timer.arm(exercise.duration_seconds)), ()
            return self._move(state, Phase.EXERCISING_REPS, timer=state.timer.clear()), ()

        if phase == Phase.EXERCISING_TIMED:
            pending = self._move(state, Phase.COMPLETED_EXERCISE_PENDING_NEXT, timer=state.timer.clear())
            return pending, (alert("Time's Up!", "Move to the next step."),)

        if phase == Phase.RESTING_BETWEEN_SETS:
            next_set = min(state.current_set + 1, self.current_exercise(state).total_sets)
            return self._enter_exercise(state, state.current_exercise_index, next_set), ()

        if phase == Phase.RESTING_BETWEEN_EXERCISES:
            next_index = state.current_exercise_index + 1
            if next_index >= len(self.plan):
                return self._finish_workout(state)
            return self._enter_exercise(state, next_index, 1), ()

        return state, ()

    # ---- actions ---------------------------------------------------------

    def _start(self, state: SessionState, action: Action) -> Transition:
        if state.phase != Phase.NOT_STARTED:
            return self._ignore(state, action)
        started = state if state.workout_start_time is not None else replace(state, workout_start_time=action.at)
        logger.info(f"Starting '{self.plan.plan_name}' with {len(self.plan)} exercises")
        return self._enter_exercise(started, 0, 1), ()

    def _tick(self, state: SessionState, action: Action) -> Transition:
        if state.phase not in TIMED_PHASES:
            return state, ()
        timer, expired = state.timer.tick(action.cycle)
        ticked = replace(state, timer=timer)
        if not expired:
            return ticked, ()

        effects: Tuple[Effect, ...] = ()
        if state.phase in (Phase.RESTING_BETWEEN_SETS, Phase.RESTING_BETWEEN_EXERCISES):
            effects = (alert("Rest Over!", "Let's get to the next set/exercise."),)
        next_state, more = self._expire(ticked)
        return next_state, effects + more

    def _skip(self, state: SessionState, action: Action) -> Transition:
        if state.phase not in SKIPPABLE_PHASES:
            return self._ignore(state, action)
        return self._expire(replace(state, timer=state.timer.clear()))

    def _finish_set(self, state: SessionState, action: Action) -> Transition:
        if state.phase not in EXERCISING_PHASES:
            return self._ignore(state, action)
        return self._complete_set(state)

    def _continue(self, state: SessionState, action: Action) -> Transition:
        if state.phase != Phase.COMPLETED_EXERCISE_PENDING_NEXT:
            return self._ignore(state, action)
        return self._complete_set(state)

    def _pause(self, state: SessionState, action: Action) -> Transition:
        if state.phase not in TIMED_PHASES or not state.timer.active:
            return self._ignore(state, action)
        paused = self._move(state, Phase.PAUSED, previous_phase=state.phase, timer=state.timer.pause())
        return paused, ()

    def _resume(self, state: SessionState, action: Action) -> Transition:
        if state.phase != Phase.PAUSED or state.previous_phase is None:
            return self._ignore(state, action)
        resumed = self._move(state, state.previous_phase, previous_phase=None, timer=state.timer.resume())
        return resumed, ()

    def _previous_exercise(self, state: SessionState, action: Action) -> Transition:
        if state.phase in (Phase.NOT_STARTED, Phase.WORKOUT_COMPLETE) or state.current_exercise_index == 0:
            return self._ignore(state, action)
        return self._enter_exercise(state, state.current_exercise_index - 1, 1), ()

    def _phase_duration(self, phase: Phase, exercise: PlannedExercise) -> int:
        if phase == Phase.PREPARING:
            return self.prep_duration
        if phase == Phase.EXERCISING_TIMED:
            return exercise.duration_seconds or 0
        if phase in (Phase.RESTING_BETWEEN_SETS, Phase.RESTING_BETWEEN_EXERCISES):
            return self.rest_duration
        return 0

    def _reset_timer(self, state: SessionState, action: Action) -> Transition:
        exercise = self.current_exercise(state)

        if state.phase == Phase.PAUSED:
            duration = self._phase_duration(state.previous_phase, exercise)
            return replace(state, timer=state.timer.reset(duration).pause()), ()

        if state.phase not in TIMED_PHASES:
            return self._ignore(state, action)
        return replace(state, timer=state.timer.reset(self._phase_duration(state.phase, exercise))), ()

    def _exit(self, state: SessionState, action: Action) -> Transition:
        if not exit_flow.can_open(state):
            return self._ignore(state, action)
        return exit_flow.open_exit(state)
