"""Tests for weekly coaching feedback."""

from datetime import timedelta

import pytest

import coaching.coach_feedback as coach_feedback
from models.training import ActivityStats, EventGoal, HrZones, PowerZones
from coaching.coach_feedback import (
    ERROR_FEEDBACK,
    FALLBACK_NOTE,
    CoachFeedbackService,
    build_training_bundle,
    generate_heuristic_feedback,
    total_time_in_zones,
)
from tests.conftest import TODAY


class FakeGenerator:
    def __init__(self, text="Solid week. Keep it up.", error=None):
        self.text = text
        self.error = error
        self.bundles = []

    def generate_feedback(self, training_data):
        self.bundles.append(training_data)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def analysis(make_analysis, make_insight):
    insights = [
        make_insight(days=0, zones=PowerZones(z1=600, z2=300)),
        make_insight(days=1, zones=HrZones(z1=100, z4=200)),
        make_insight(days=3),
    ]
    return make_analysis().model_copy(update={"activities": insights, "recommendations": ["Rest well"]})


@pytest.fixture
def stats():
    return ActivityStats(total_activities=3, total_distance=50000, total_time=5400)


def test_generator_text_is_returned(analysis, stats) -> None:
    generator = FakeGenerator()

    feedback = CoachFeedbackService(generator).get_weekly_feedback(analysis, stats, today=TODAY)

    assert feedback.source == "generator"
    assert feedback.feedback == "Solid week. Keep it up."
    assert feedback.error is None
    assert set(generator.bundles[0]) == {"analysis", "time_in_zones", "rest_days", "weekly_stats", "goals"}


def test_generator_failure_falls_back(analysis, stats) -> None:
    service = CoachFeedbackService(FakeGenerator(error=RuntimeError("model overloaded")))

    feedback = service.get_weekly_feedback(analysis, stats, today=TODAY)

    assert feedback.source == "fallback"
    assert feedback.error == "model overloaded"
    assert feedback.feedback.endswith("\n\n" + FALLBACK_NOTE)


def test_blank_generator_text_falls_back(analysis, stats) -> None:
    feedback = CoachFeedbackService(FakeGenerator(text="   ")).get_weekly_feedback(analysis, stats, today=TODAY)

    assert feedback.source == "fallback"
    assert feedback.error == "No valid response from narrative generator"


def test_missing_generator_falls_back(analysis) -> None:
    feedback = CoachFeedbackService().get_weekly_feedback(analysis, today=TODAY)

    assert feedback.source == "fallback"
    assert "Great consistency with 3 training sessions!" in feedback.feedback


def test_fallback_failure_reports_error(analysis, monkeypatch) -> None:
    def broken(*args, **kwargs):
        raise ValueError("bad stats")

    monkeypatch.setattr(coach_feedback, "generate_heuristic_feedback", broken)

    feedback = CoachFeedbackService(FakeGenerator(error=RuntimeError("down"))).get_weekly_feedback(analysis)

    assert feedback.source == "error"
    assert feedback.feedback == ERROR_FEEDBACK
    assert "bad stats" in feedback.error


def test_heuristic_feedback_without_activities(make_analysis) -> None:
    text = generate_heuristic_feedback(make_analysis(), today=TODAY)

    assert text.startswith("No recent training activities found.")


def test_heuristic_feedback_mentions_totals_and_goal(analysis, stats) -> None:
    goals = [EventGoal(description="Gran Fondo", target_date=TODAY + timedelta(days=30))]

    text = generate_heuristic_feedback(analysis, stats, goals, today=TODAY)

    assert "Great consistency with 3 training sessions!" in text
    assert "You covered 50.0km in 1.5 hours." in text
    assert 'With 30 days until your goal "Gran Fondo", you\'re on a good training path.' in text
    assert "Rest well" in text
    assert "zone-based training" in text


def test_heuristic_feedback_ignores_past_goals(analysis, stats) -> None:
    goals = [EventGoal(description="Spring Classic", target_date=TODAY - timedelta(days=1))]

    assert "Spring Classic" not in generate_heuristic_feedback(analysis, stats, goals, today=TODAY)


def test_low_volume_feedback(make_analysis, make_insight) -> None:
    analysis = make_analysis().model_copy(update={"activities": [make_insight()]})

    text = generate_heuristic_feedback(analysis, today=TODAY)

    assert "You've been active with 1 session." in text
    assert "heart rate monitor or power meter" in text


def test_time_in_zones_sums_buckets(analysis) -> None:
    assert total_time_in_zones(analysis) == {
        "z1": 700, "z2": 300, "z3": 0, "z4": 200, "z5": 0, "z6": 0, "z7": 0,
    }


def test_bundle_is_json_ready(analysis, stats) -> None:
    goal = EventGoal(description="Gran Fondo", target_date=TODAY + timedelta(days=30))

    bundle = build_training_bundle(analysis, stats, [goal])

    assert bundle["rest_days"] == analysis.pattern.last_rest_day
    assert bundle["weekly_stats"]["total_distance"] == 50000
    assert bundle["goals"][0]["target_date"] == "2024-07-15"
    assert bundle["analysis"]["activities"][0]["zones"]["source"] == "power"
