"""Unit tests for plan validation and normalization."""
import pytest

from workout_session.models.plan_adapter import (
    PlanConfigurationError,
    adapt_plan,
    parse_duration,
    parse_total_sets,
)
from workout_session.models.schemas import WorkoutPlan


class TestParseTotalSets:
    """Set counts parse like the plan screens write them."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("3", 3),
            (4, 4),
            ("3-4", 3),
            ("5 sets", 5),
            ("  2", 2),
            (2.7, 2),
        ],
    )
    def test_reads_leading_integer(self, raw, expected):
        assert parse_total_sets(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "abc", "sets: 3", "0", 0, "-2", -5, True, float("nan"), [3], {"count": 3}])
    def test_unreadable_or_non_positive_defaults_to_one(self, raw):
        assert parse_total_sets(raw) == 1

    def test_parsing_is_idempotent(self):
        """Parsing an already-parsed count gives the same count."""
        for raw in ["3", "x", "0", 7]:
            once = parse_total_sets(raw)
            assert parse_total_sets(once) == once


class TestParseDuration:
    def test_positive_numbers_mark_timed(self):
        assert parse_duration(30) == 30
        assert parse_duration(45.9) == 45
        assert parse_duration("20") == 20

    @pytest.mark.parametrize("raw", [None, 0, -10, 0.5, "abc", False])
    def test_missing_or_non_positive_is_rep_based(self, raw):
        assert parse_duration(raw) is None


class TestAdaptPlan:
    """Validation and the read-only view."""

    def test_empty_plan_is_a_configuration_error(self):
        with pytest.raises(PlanConfigurationError):
            adapt_plan({"planName": "Empty", "exercises": []})

    def test_missing_exercises_is_a_configuration_error(self):
        with pytest.raises(PlanConfigurationError):
            adapt_plan({"planName": "Nothing"})

    def test_nameless_exercise_is_a_configuration_error(self):
        with pytest.raises(PlanConfigurationError, match="#2"):
            adapt_plan({"planName": "P", "exercises": [{"name": "Squat"}, {"name": "   "}]})

    def test_unreadable_payload_is_a_configuration_error(self):
        with pytest.raises(PlanConfigurationError):
            adapt_plan({"planName": "P", "exercises": "not a list"})

    def test_normalizes_exercises(self, mixed_plan):
        view = adapt_plan(mixed_plan)

        assert view.plan_name == "Test Plan"
        assert view.plan_id == "plan-1"
        assert len(view) == 2
        assert view[0].name == "Squats"
        assert view[0].total_sets == 1
        assert view[0].reps == "15"
        assert view[0].is_timed is False
        assert view[1].total_sets == 2
        assert view[1].duration_seconds == 45
        assert view[1].is_timed is True

    def test_accepts_original_field_names(self):
        """Plans from the listing screens use exerciseName and _id."""
        view = adapt_plan({"_id": "abc", "planName": "Legacy",
                           "exercises": [{"exerciseName": "Lunges", "sets": "2", "reps": 12}]})

        assert view.plan_id == "abc"
        assert view[0].name == "Lunges"
        assert view[0].reps == "12"

    def test_structured_sets_and_duration_fall_back(self):
        """Lists or objects where a count is expected are recovered, not rejected."""
        view = adapt_plan({"planName": "P", "exercises": [
            {"name": "Rows", "sets": [3, 4], "durationSeconds": {"seconds": 30}},
            {"name": "Dips", "sets": {"count": 2}},
        ]})

        assert view[0].total_sets == 1
        assert view[0].is_timed is False
        assert view[1].total_sets == 1

    def test_accepts_model_instances(self):
        plan = WorkoutPlan(planName="Model", exercises=[{"name": "Burpees", "sets": "abc"}])
        view = adapt_plan(plan)

        assert view[0].total_sets == 1

    def test_view_is_read_only(self, rep_plan):
        view = adapt_plan(rep_plan)

        with pytest.raises(Exception):
            view.exercises[0].total_sets = 5
        assert isinstance(view.exercises, tuple)

    def test_is_last(self, mixed_plan):
        view = adapt_plan(mixed_plan)
        assert view.is_last(0) is False
        assert view.is_last(1) is True
