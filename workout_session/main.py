# main.py
import time
from typing import Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from workout_session.config import config
from workout_session.utils.logging_utils import logger
from workout_session.models.plan_adapter import PlanConfigurationError
from workout_session.models.schemas import ActionPayload, FeedbackRecord, SessionSnapshot, WorkoutPlan
from workout_session.models.session_state import Action, ActionType, EndReason, Phase
from workout_session.services.feedback_service import feedback_service
from workout_session.services.session_service import WorkoutSession
from workout_session.services.tick_scheduler import tick_scheduler

logger.info(f"Starting in: {config.mode_description}")

# Initialize FastAPI application with dynamic title based on mode
app = FastAPI(title=f"Workout Session Engine - {config.mode_description}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# Session storage for active workouts, keyed by session id
workout_sessions: Dict[str, WorkoutSession] = {}

# Actions clients may post by name; ticks have their own endpoint
CLIENT_ACTIONS = {a.value: a for a in ActionType if a != ActionType.TICK}


def _handle_session_end(session: WorkoutSession, reason: EndReason):
    """Stop the countdown once a session ends; the final snapshot stays readable until DELETE or eviction"""
    tick_scheduler.cancel(session.session_id)


def _ensure_ticking(session: WorkoutSession):
    """Server ticks run only between start and the end of a session"""
    if config.server_ticks and session.state.phase != Phase.NOT_STARTED and not session.ended:
        tick_scheduler.schedule(session)


def _evict_idle_sessions(now: Optional[float] = None) -> int:
    """Forget sessions whose client went away without DELETE, ended or not"""
    now = time.time() if now is None else now
    idle = [sid for sid, s in workout_sessions.items() if now - s.last_active > config.session_ttl]
    for session_id in idle:
        tick_scheduler.cancel(session_id)
        workout_sessions.pop(session_id).close()
    if idle:
        logger.info(f"Evicted {len(idle)} idle session(s)")
    return len(idle)


def _get_session(session_id: str) -> WorkoutSession:
    session = workout_sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@app.on_event("startup")
async def startup_event():
    logger.info(f"Server ticks: {'on' if config.server_ticks else 'off'} "
                f"(prep={config.prep_duration}s, rest={config.rest_duration}s)")


@app.on_event("shutdown")
async def shutdown_event():
    """Cancel every tick subscription before the loop goes away"""
    await tick_scheduler.shutdown()
    for session in workout_sessions.values():
        session.close()
    workout_sessions.clear()


@app.post("/sessions", response_model=SessionSnapshot)
async def create_session(plan: WorkoutPlan):
    """
    Start hosting a session for the supplied plan.
    Plans without exercises (or with nameless exercises) are rejected before any session exists.
    """
    try:
        session = WorkoutSession(plan, on_end=_handle_session_end)
    except PlanConfigurationError as e:
        logger.warning(f"Rejected workout plan: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    _evict_idle_sessions()
    workout_sessions[session.session_id] = session

    return session.snapshot()


@app.get("/sessions/{session_id}", response_model=SessionSnapshot)
async def get_session(session_id: str):
    return _get_session(session_id).snapshot()


@app.post("/sessions/{session_id}/actions/{action}", response_model=SessionSnapshot)
async def dispatch_action(session_id: str, action: str, payload: Optional[ActionPayload] = Body(default=None)):
    """
    Dispatch a user action (start, finishSet, continue, skip, pause, resume, previousExercise,
    resetTimer, exit, selectReason, setCustomText, submitFeedback, skipFeedback, cancelExit).
    Actions that do not apply to the current phase are accepted and leave the state unchanged.
    """
    session = _get_session(session_id)

    action_type = CLIENT_ACTIONS.get(action)
    if action_type is None:
        raise HTTPException(status_code=400, detail=f"Unknown action: {action}")

    payload = payload or ActionPayload()
    session.dispatch(Action(type=action_type, reason=payload.reason, text=payload.customText))
    _ensure_ticking(session)

    return session.snapshot()


@app.post("/sessions/{session_id}/tick", response_model=SessionSnapshot)
async def tick_session(session_id: str):
    """Advance the countdown by one second for clients that drive their own clock"""
    session = _get_session(session_id)
    session.tick()
    return session.snapshot()


@app.delete("/sessions/{session_id}")
async def close_session(session_id: str):
    """Unmount a session: ticks stop synchronously and the session is forgotten"""
    session = _get_session(session_id)
    tick_scheduler.cancel(session_id)
    session.close()
    del workout_sessions[session_id]
    return {"sessionId": session_id, "closed": True}


@app.get("/feedback", response_model=List[FeedbackRecord])
async def recent_feedback(limit: int = 50):
    """Feedback captured from abandoned sessions, newest last"""
    return feedback_service.recent(limit)


@app.get("/health")
async def health_check():
    """Simple health check endpoint for service monitoring"""
    return {"status": "healthy", "activeSessions": len(workout_sessions), "timestamp": time.time()}
