# plan_adapter.py
"""
Turns an externally supplied workout plan into the read-only view the session machine consumes.
Validation failures here are fatal for the session; malformed per-exercise fields are recovered locally.
"""

import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple, Union

from pydantic import ValidationError

from workout_session.models.schemas import Exercise, WorkoutPlan
from workout_session.utils.logging_utils import logger

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class PlanConfigurationError(ValueError):
    """Raised when a plan cannot drive a session (no exercises, nameless exercise, unreadable payload)"""
    pass


def parse_total_sets(sets: Any) -> int:
    """
    Parse a set count the way the plan screens write it ("3", 3, "3-4", "4 sets").
    Reads the leading integer only; anything unreadable or below 1 becomes 1. Never raises.
    """
    if sets is None or isinstance(sets, bool):
        return 1

    if isinstance(sets, (int, float)):
        if isinstance(sets, float) and not math.isfinite(sets):
            return 1
        return max(1, int(sets))

    match = _LEADING_INT.match(str(sets))
    if not match:
        return 1
    return max(1, int(match.group(1)))


def parse_duration(duration: Any) -> Optional[int]:
    """Return a positive whole number of seconds, or None for rep-based exercises"""
    if duration is None or isinstance(duration, bool):
        return None
    try:
        seconds = float(duration)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring unreadable durationSeconds: {duration!r}")
        return None
    if not math.isfinite(seconds) or seconds < 1:
        return None
    return int(seconds)


@dataclass(frozen=True)
class PlannedExercise:
    """Normalized exercise; total_sets is fixed for the whole session"""
    name: str
    total_sets: int
    reps: Optional[str] = None
    duration_seconds: Optional[int] = None
    description: Optional[str] = None
    video_url: Optional[str] = None
    image_url: Optional[str] = None

    @property
    def is_timed(self) -> bool:
        return self.duration_seconds is not None


@dataclass(frozen=True)
class PlanView:
    """Immutable, ordered view over a validated plan"""
    plan_id: Optional[str]
    plan_name: str
    exercises: Tuple[PlannedExercise, ...]

    def __len__(self) -> int:
        return len(self.exercises)

    def __getitem__(self, index: int) -> PlannedExercise:
        return self.exercises[index]

    def __iter__(self) -> Iterator[PlannedExercise]:
        return iter(self.exercises)

    def is_last(self, index: int) -> bool:
        return index >= len(self.exercises) - 1


def _normalize_exercise(position: int, exercise: Exercise) -> PlannedExercise:
    name = (exercise.name or "").strip()
    if not name:
        raise PlanConfigurationError(f"Exercise #{position + 1} has no name")

    reps = exercise.reps
    if reps is not None:
        reps = str(reps)

    return PlannedExercise(
        name=name,
        total_sets=parse_total_sets(exercise.sets),
        reps=reps,
        duration_seconds=parse_duration(exercise.durationSeconds),
        description=exercise.description,
        video_url=exercise.videoUrl,
        image_url=exercise.imageUrl,
    )


def adapt_plan(plan: Union[WorkoutPlan, Dict[str, Any]]) -> PlanView:
    """
    Validate a plan and expose it as a PlanView.
    Raises PlanConfigurationError if the plan has no exercises or an exercise has no name.
    """
    if isinstance(plan, dict):
        try:
            plan = WorkoutPlan.model_validate(plan)
        except ValidationError as e:
            raise PlanConfigurationError(f"Unreadable workout plan: {e}") from e

    if not plan.exercises:
        raise PlanConfigurationError("Workout plan has no exercises")

    exercises = tuple(_normalize_exercise(i, ex) for i, ex in enumerate(plan.exercises))

    view = PlanView(plan_id=plan.id, plan_name=plan.planName, exercises=exercises)
    logger.info(f"Adapted plan '{view.plan_name}' with {len(view)} exercises")
    return view
