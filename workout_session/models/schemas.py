# schemas.py
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Exercise(BaseModel):
    """
    One exercise as supplied by the plan-selection screens.
    Only name, sets, reps and durationSeconds drive the session; media fields are passed through untouched.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = Field(default="", validation_alias=AliasChoices("name", "exerciseName"))
    sets: Any = None                                     # "3", 3 or "3-4"; anything unreadable counts as one set
    reps: Union[str, int, None] = None                   # Free-form rep description, never counted
    durationSeconds: Any = None                          # Presence of a positive value marks a timed exercise
    description: Optional[str] = None
    videoUrl: Optional[str] = None
    imageUrl: Optional[str] = None


class WorkoutPlan(BaseModel):
    """Workout plan handed to a session; treated as immutable for the session's lifetime."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "_id"))
    planName: str = Field(default="", validation_alias=AliasChoices("planName", "name"))
    exercises: List[Exercise] = Field(default_factory=list)


class FeedbackReason(str, Enum):
    """Reasons offered when a user abandons a session early"""
    TOO_HARD = "TooHard"
    TIRED = "Tired"
    NOT_ENOUGH_TIME = "NotEnoughTime"
    EQUIPMENT_ISSUE = "EquipmentIssue"
    OTHER = "Other"


class FeedbackRecord(BaseModel):
    """
    Early-exit feedback handed to the analytics/logging sink.
    customText is only meaningful when reason is Other.
    """
    model_config = ConfigDict(frozen=True)

    reason: FeedbackReason
    customText: str = ""
    exerciseName: str
    setNumber: int
    planName: str
    elapsedSeconds: int


class Alert(BaseModel):
    """User-facing notification produced by a transition"""
    title: str
    message: str


class ExitFlowSnapshot(BaseModel):
    """Reason-selection step shown while the user is leaving a session"""
    reason: Optional[FeedbackReason] = None
    customText: str = ""
    canSubmit: bool = False


class SessionSnapshot(BaseModel):
    """
    Read-only session state returned to clients for rendering.
    Mirrors the engine's SessionState plus display helpers derived from the plan.
    """
    sessionId: str                               # Handle used for subsequent actions
    planName: str
    phase: str                                   # Current phase name
    previousPhase: Optional[str] = None          # Only set while PAUSED
    currentExerciseIndex: int = 0
    totalExercises: int = 0
    currentSet: int = 1
    totalSets: int = 1
    exerciseName: str = ""
    reps: Optional[str] = None
    durationSeconds: Optional[int] = None
    timerValue: int = 0                          # Remaining seconds on the countdown
    timerDisplay: str = "0:00"                   # timerValue formatted as M:SS
    isTimerActive: bool = False
    progressText: str = ""                       # "Exercise 1 of 3 (Set 1 of 3)"
    primaryActionLabel: str = ""                 # "Finish Set 1", "Finish Exercise" or "Finish Workout"
    canGoPrevious: bool = False
    motivation: str = "Ready to start!"          # Status line for the current phase
    exitFlow: Optional[ExitFlowSnapshot] = None  # Present while the exit prompt is open
    isEnded: bool = False
    endReason: Optional[str] = None
    recentAlerts: List[Alert] = Field(default_factory=list)


class ActionPayload(BaseModel):
    """Optional body for exit-flow actions"""
    reason: Optional[FeedbackReason] = None
    customText: Optional[str] = None
