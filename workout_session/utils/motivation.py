# motivation.py
from workout_session.models.session_state import Phase


def format_time(seconds: int) -> str:
    """Format a second count as M:SS (75 -> "1:15")."""
    seconds = max(0, int(seconds))
    mins, secs = divmod(seconds, 60)
    return f"{mins}:{secs:02d}"


def get_primary_action_label(current_set: int, total_sets: int, is_last_exercise: bool) -> str:
    """Label for the main button: finishing a set, the exercise, or the whole workout."""
    if current_set < total_sets:
        return f"Finish Set {current_set}"
    if is_last_exercise:
        return "Finish Workout"
    return "Finish Exercise"


def get_progress_text(exercise_index: int, total_exercises: int, current_set: int, total_sets: int) -> str:
    return f"Exercise {exercise_index + 1} of {total_exercises} (Set {current_set} of {total_sets})"


def get_motivation_text(phase: Phase, current_set: int, total_sets: int) -> str:
    """
    Generate the status line shown under the timer for the current phase.
    Returns "Ready to start!" before the session begins.
    """

    if phase == Phase.NOT_STARTED:
        return "Ready to start!"
    if phase == Phase.PREPARING:
        return "Get ready..."
    if phase == Phase.EXERCISING_TIMED:
        return f"Set {current_set} of {total_sets} - keep going! 🔥"
    if phase == Phase.EXERCISING_REPS:
        return f"Set {current_set} of {total_sets} - tap finish when done 💪"
    if phase == Phase.PAUSED:
        return "Paused"
    if phase in (Phase.RESTING_BETWEEN_SETS, Phase.RESTING_BETWEEN_EXERCISES):
        return "RESTING..."
    if phase == Phase.COMPLETED_EXERCISE_PENDING_NEXT:
        return "Time's up! Continue when ready."
    return "Workout complete! 🌟"
