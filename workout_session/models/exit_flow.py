# exit_flow.py
"""
Early-exit flow: pause the countdown, collect a reason, then either log feedback and end,
end without feedback, or put everything back the way it was.
"""

from dataclasses import replace
from typing import Optional

from workout_session.models.plan_adapter import PlanView
from workout_session.models.schemas import FeedbackReason, FeedbackRecord
from workout_session.models.session_state import (
    Action,
    ActionType,
    Effect,
    EffectType,
    EndReason,
    ExitFlowState,
    Phase,
    SessionState,
    Transition,
    end_session,
)
from workout_session.utils.logging_utils import logger

EXIT_FLOW_ACTIONS = frozenset({
    ActionType.SELECT_REASON,
    ActionType.SET_CUSTOM_TEXT,
    ActionType.SUBMIT_FEEDBACK,
    ActionType.SKIP_FEEDBACK,
    ActionType.CANCEL_EXIT,
})


def can_open(state: SessionState) -> bool:
    return (
        not state.is_ended
        and state.exit_flow is None
        and state.phase not in (Phase.NOT_STARTED, Phase.WORKOUT_COMPLETE)
    )


def open_exit(state: SessionState) -> Transition:
    if not can_open(state):
        return state, ()

    flow = ExitFlowState(timer_was_active=state.timer.active)
    logger.info(f"Exit requested during {state.phase.value} (timer active: {flow.timer_was_active})")
    return (
        replace(state, timer=state.timer.pause(), exit_flow=flow),
        (Effect(type=EffectType.SHOW_EXIT_PROMPT),),
    )


def elapsed_seconds(state: SessionState, now: Optional[float]) -> int:
    if state.workout_start_time is None or now is None:
        return 0
    return max(0, int(now - state.workout_start_time))


def build_feedback_record(plan: PlanView, state: SessionState, now: Optional[float]) -> FeedbackRecord:
    flow = state.exit_flow
    exercise = plan[state.current_exercise_index]
    custom_text = flow.custom_text.strip() if flow.reason == FeedbackReason.OTHER else ""
    return FeedbackRecord(
        reason=flow.reason,
        customText=custom_text,
        exerciseName=exercise.name,
        setNumber=state.current_set,
        planName=plan.plan_name,
        elapsedSeconds=elapsed_seconds(state, now),
    )


def reduce_exit(plan: PlanView, state: SessionState, action: Action) -> Transition:
    """Handle an exit-flow action. Callers only route here while the prompt is open."""
    flow = state.exit_flow
    if flow is None:
        return state, ()

    if action.type == ActionType.SELECT_REASON:
        if action.reason is None:
            return state, ()
        custom_text = action.text if action.text is not None else flow.custom_text
        return replace(state, exit_flow=replace(flow, reason=action.reason, custom_text=custom_text)), ()

    if action.type == ActionType.SET_CUSTOM_TEXT:
        return replace(state, exit_flow=replace(flow, custom_text=action.text or "")), ()

    if action.type == ActionType.SUBMIT_FEEDBACK:
        if not flow.can_submit:
            logger.debug("Feedback submission ignored: reason incomplete")
            return state, ()
        record = build_feedback_record(plan, state, action.at)
        logger.info(f"Session abandoned: {record.reason.value} after {record.elapsedSeconds}s")
        ended = replace(state, timer=state.timer.clear(), exit_flow=None, end_reason=EndReason.FEEDBACK_SUBMITTED)
        return ended, (
            Effect(type=EffectType.LOG_FEEDBACK, feedback=record),
            end_session(EndReason.FEEDBACK_SUBMITTED),
        )

    if action.type == ActionType.SKIP_FEEDBACK:
        logger.info("Session abandoned without feedback")
        ended = replace(state, timer=state.timer.clear(), exit_flow=None, end_reason=EndReason.FEEDBACK_SKIPPED)
        return ended, (end_session(EndReason.FEEDBACK_SKIPPED),)

    if action.type == ActionType.CANCEL_EXIT:
        timer = state.timer.resume() if flow.timer_was_active else state.timer
        return replace(state, timer=timer, exit_flow=None), ()

    return state, ()
