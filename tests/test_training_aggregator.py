"""Tests for the training analysis entry point."""

from datetime import datetime, time

import pytest

import coaching.training_aggregator as training_aggregator
from coaching.activity_store import SqlActivityStore
from coaching.exceptions import ActivityFetchError
from coaching.recommendations import RECOMMENDATION_RULES
from coaching.training_aggregator import TrainingDataAggregator
from tests.conftest import TODAY, FakeActivityStore

MESSAGES = {rule.code: rule.message for rule in RECOMMENDATION_RULES}


def test_empty_window() -> None:
    aggregator = TrainingDataAggregator(FakeActivityStore())

    analysis = aggregator.analyze_recent_training("athlete-1", 250, 170, days_back=14, today=TODAY)

    assert analysis.activities == []
    assert (analysis.fitness, analysis.fatigue, analysis.form) == (0, 0, 0)
    assert analysis.pattern.consistency_score == 0
    assert analysis.recommendations == [MESSAGES["train_regularly"]]


def test_store_is_asked_for_window_ending_today() -> None:
    store = FakeActivityStore()

    TrainingDataAggregator(store).analyze_recent_training("athlete-1", 250, 170, days_back=28, today=TODAY)

    assert store.requests == [("athlete-1", 28, datetime.combine(TODAY, time.max))]


def test_hard_week_recommends_rest_first(make_activity) -> None:
    # 1.8 h at FTP is very hard with a load of 90
    activities = [make_activity(days=d, moving_time=6480, average_power=250) for d in (0, 1, 2)]
    aggregator = TrainingDataAggregator(FakeActivityStore(activities))

    analysis = aggregator.analyze_recent_training("athlete-1", 250, 170, today=TODAY)

    assert [i.training_load for i in analysis.activities] == [90, 90, 90]
    assert all(i.intensity == "very_hard" for i in analysis.activities)
    assert analysis.pattern.recovery_needed is True
    assert analysis.recommendations[0] == MESSAGES["rest_or_easy"]
    assert analysis.form == analysis.fitness - analysis.fatigue


def test_insights_are_newest_first(make_activity) -> None:
    activities = [make_activity(days=d) for d in (5, 0, 3)]

    analysis = TrainingDataAggregator(FakeActivityStore(activities)).analyze_activities(
        activities, 250, 170, today=TODAY
    )

    dates = [i.date for i in analysis.activities]
    assert dates == sorted(dates, reverse=True)


def test_store_failure_is_propagated() -> None:
    store = FakeActivityStore(error=ActivityFetchError("athlete-1", "connection refused"))

    with pytest.raises(ActivityFetchError) as excinfo:
        TrainingDataAggregator(store).analyze_recent_training("athlete-1", 250, 170, today=TODAY)

    assert excinfo.value.reason == "connection refused"


def test_unexpected_store_error_is_wrapped() -> None:
    store = FakeActivityStore(error=RuntimeError("disk on fire"))

    with pytest.raises(ActivityFetchError) as excinfo:
        TrainingDataAggregator(store).analyze_recent_training("athlete-1", 250, 170, today=TODAY)

    assert excinfo.value.athlete_id == "athlete-1"
    assert "disk on fire" in excinfo.value.reason


def test_steady_training_from_database_is_stable(session_factory, make_activity) -> None:
    store = SqlActivityStore(session_factory=session_factory)
    store.store_activities("athlete-1", [make_activity(days=d) for d in range(20)])

    analysis = TrainingDataAggregator(store).analyze_recent_training(
        "athlete-1", 250, 170, days_back=14, today=TODAY
    )

    # Two full weeks, today-13 through today
    assert len(analysis.activities) == 14
    assert analysis.pattern.recent_load == 30
    assert analysis.pattern.load_trend == "stable"
    assert analysis.pattern.recovery_needed is False


def test_default_reference_day_is_utc_today(monkeypatch) -> None:
    monkeypatch.setattr(training_aggregator, "utc_today", lambda: TODAY)
    store = FakeActivityStore()

    TrainingDataAggregator(store).analyze_recent_training("athlete-1", 250, 170, days_back=14)

    assert store.requests[0][2] == datetime.combine(TODAY, time.max)
