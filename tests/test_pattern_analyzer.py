"""Tests for training pattern diagnostics."""

from datetime import datetime, timedelta, timezone

import coaching.pattern_analyzer as pattern_analyzer
from models.training import PowerZones
from coaching.pattern_analyzer import (
    analyze_patterns,
    calculate_consistency_score,
    calculate_last_rest_day,
    calculate_load_trend,
    calculate_zone_focus,
)
from tests.conftest import TODAY


def test_empty_window() -> None:
    pattern = analyze_patterns([], today=TODAY)

    assert pattern.recent_load == 0
    assert pattern.load_trend == "stable"
    assert pattern.recovery_needed is False
    assert pattern.consistency_score == 0
    assert pattern.zone_focus == "mixed"
    assert pattern.last_rest_day == 0


def test_recent_load_is_daily_average_over_week(make_insight) -> None:
    insights = [make_insight(days=d, load=70) for d in (0, 2, 4)]

    pattern = analyze_patterns(insights, today=TODAY)

    assert pattern.recent_load == 30


def test_activities_older_than_a_week_are_not_recent(make_insight) -> None:
    insights = [make_insight(days=8, load=70), make_insight(days=13, load=70)]

    pattern = analyze_patterns(insights, today=TODAY)

    assert pattern.recent_load == 0
    assert pattern.load_trend == "decreasing"


def test_increasing_load(make_insight) -> None:
    insights = [make_insight(days=1), make_insight(days=2), make_insight(days=10)]

    assert analyze_patterns(insights, today=TODAY).load_trend == "increasing"


def test_decreasing_load(make_insight) -> None:
    insights = [make_insight(days=1), make_insight(days=9), make_insight(days=10)]

    assert analyze_patterns(insights, today=TODAY).load_trend == "decreasing"


def test_stable_load(make_insight) -> None:
    insights = [make_insight(days=1), make_insight(days=9)]

    assert analyze_patterns(insights, today=TODAY).load_trend == "stable"


def test_load_trend_thresholds() -> None:
    assert calculate_load_trend(11.6, 10) == "increasing"
    assert calculate_load_trend(11.4, 10) == "stable"
    assert calculate_load_trend(8.6, 10) == "stable"
    assert calculate_load_trend(8.4, 10) == "decreasing"
    assert calculate_load_trend(30, 0) == "stable"


def test_three_hard_sessions_need_recovery(make_insight) -> None:
    insights = [make_insight(days=d, load=20, intensity="very_hard") for d in (0, 1, 2)]

    assert analyze_patterns(insights, today=TODAY).recovery_needed is True


def test_high_recent_load_needs_recovery(make_insight) -> None:
    insights = [make_insight(days=d, load=100, intensity="easy") for d in (0, 1, 2, 3)]

    pattern = analyze_patterns(insights, today=TODAY)

    assert pattern.recent_load > 50
    assert pattern.recovery_needed is True


def test_two_hard_sessions_are_fine(make_insight) -> None:
    insights = [
        make_insight(days=0, load=40, intensity="hard"),
        make_insight(days=2, load=40, intensity="very_hard"),
        make_insight(days=4, load=40, intensity="easy"),
    ]

    assert analyze_patterns(insights, today=TODAY).recovery_needed is False


def test_consistency_counts_distinct_days(make_insight) -> None:
    insights = [
        make_insight(days=0, hour=7),
        make_insight(days=0, hour=18),
        make_insight(days=1, hour=7),
        make_insight(days=1, hour=18),
    ]

    assert calculate_consistency_score(insights) == 50


def test_consistency_caps_expected_days(make_insight) -> None:
    insights = [make_insight(days=d) for d in range(20)]

    assert calculate_consistency_score(insights) == 100


def test_zone_focus(make_insight) -> None:
    def focus(**zones):
        return calculate_zone_focus([make_insight(zones=PowerZones(**zones))])

    assert focus(z1=500, z2=400, z3=100) == "endurance"
    assert focus(z2=600, z3=400) == "tempo"
    assert focus(z2=600, z3=150, z4=250) == "threshold"
    assert focus(z2=700, z3=100, z4=100, z5=150) == "vo2max"
    assert focus(z2=700, z3=200, z4=100) == "mixed"


def test_zone_focus_sums_across_activities(make_insight) -> None:
    insights = [
        make_insight(zones=PowerZones(z2=1000)),
        make_insight(zones=PowerZones(z4=500)),
        make_insight(zones=None),
    ]

    assert calculate_zone_focus(insights) == "threshold"


def test_last_rest_day_when_latest_activity_was_before_today(make_insight) -> None:
    insights = [make_insight(days=1), make_insight(days=2)]

    assert calculate_last_rest_day(insights, TODAY) == 2


def test_last_rest_day_from_gap(make_insight) -> None:
    insights = [make_insight(days=0), make_insight(days=1), make_insight(days=4)]

    assert calculate_last_rest_day(insights, TODAY) == 2


def test_last_rest_day_without_gap(make_insight) -> None:
    insights = [make_insight(days=d) for d in range(4)]

    assert calculate_last_rest_day(insights, TODAY) == 4


def test_insight_order_does_not_matter(make_insight) -> None:
    insights = [make_insight(days=d, load=10 * d) for d in (3, 0, 9, 1)]

    forward = analyze_patterns(insights, today=TODAY)
    backward = analyze_patterns(list(reversed(insights)), today=TODAY)

    assert forward == backward


def test_recent_window_is_seven_calendar_days(make_insight) -> None:
    pattern = analyze_patterns([make_insight(days=6, load=70)], today=TODAY)

    assert pattern.recent_load == 10
    assert pattern.load_trend == "stable"


def test_activity_seven_days_ago_belongs_to_prior_week(make_insight) -> None:
    pattern = analyze_patterns([make_insight(days=7, load=70)], today=TODAY)

    assert pattern.recent_load == 0
    assert pattern.load_trend == "decreasing"


def test_activity_fourteen_days_ago_is_outside_both_weeks(make_insight) -> None:
    insights = [make_insight(days=1, load=70), make_insight(days=14, load=70)]

    pattern = analyze_patterns(insights, today=TODAY)

    assert pattern.recent_load == 10
    # Prior week is empty
    assert pattern.load_trend == "stable"


def test_steady_daily_training_is_stable(make_insight) -> None:
    insights = [make_insight(days=d, load=42) for d in range(15)]

    pattern = analyze_patterns(insights, today=TODAY)

    assert pattern.recent_load == 42
    assert pattern.load_trend == "stable"
    assert pattern.recovery_needed is False


def test_steady_load_below_limit_needs_no_recovery(make_insight) -> None:
    insights = [make_insight(days=d, load=49) for d in range(14)]

    pattern = analyze_patterns(insights, today=TODAY)

    assert pattern.recent_load == 49
    assert pattern.recovery_needed is False


def test_timezone_aware_start_times_use_utc_day(make_insight) -> None:
    # 01:00 at UTC+2 on TODAY is 23:00 UTC the day before
    started = datetime(2024, 6, 15, 1, 0, tzinfo=timezone(timedelta(hours=2)))
    insight = make_insight().model_copy(update={"date": started})

    assert calculate_last_rest_day([insight], TODAY) == 2


def test_default_reference_day_is_utc_today(make_insight, monkeypatch) -> None:
    monkeypatch.setattr(pattern_analyzer, "utc_today", lambda: TODAY)

    pattern = analyze_patterns([make_insight(days=0, load=70)])

    assert pattern.recent_load == 10
    assert pattern.last_rest_day == 1
