"""Training pattern diagnostics over a window of activity insights."""

from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence

from models.training import ActivityInsight, LoadTrend, TrainingPattern, ZoneFocus
from coaching.logger import get_logger

logger = get_logger(__name__)

RECENT_WINDOW_DAYS = 7
CONSISTENCY_WINDOW_DAYS = 14
TREND_UP_FACTOR = 1.15
TREND_DOWN_FACTOR = 0.85
RECOVERY_HARD_SESSIONS = 3
RECOVERY_LOAD_LIMIT = 50


def utc_today() -> date:
    """Current calendar day in UTC, the clock activity start times are stored in."""
    return datetime.now(timezone.utc).date()


def activity_day(insight: ActivityInsight) -> date:
    """UTC calendar day an activity started on. Naive timestamps are already UTC."""
    started = insight.date
    if started.tzinfo is not None:
        started = started.astimezone(timezone.utc)
    return started.date()


def _window_load(insights: Sequence[ActivityInsight]) -> float:
    """Average daily load over a 7-day window, rest days included."""
    return sum(i.training_load for i in insights) / RECENT_WINDOW_DAYS


def calculate_load_trend(recent_load: float, previous_load: float) -> LoadTrend:
    """Compare this week's load with the week before."""
    if previous_load <= 0:
        return "stable"
    if recent_load > previous_load * TREND_UP_FACTOR:
        return "increasing"
    if recent_load < previous_load * TREND_DOWN_FACTOR:
        return "decreasing"
    return "stable"


def calculate_consistency_score(insights: Sequence[ActivityInsight]) -> int:
    """Share of expected training days that had an activity, 0-100."""
    if not insights:
        return 0
    expected_days = min(len(insights), CONSISTENCY_WINDOW_DAYS)
    actual_days = len({activity_day(i) for i in insights})
    return min(round(actual_days / expected_days * 100), 100)


def calculate_zone_focus(insights: Sequence[ActivityInsight]) -> ZoneFocus:
    """Classify where the time in zones was spent across all insights."""
    zone_totals: Dict[str, float] = {}
    for insight in insights:
        if insight.zones is None:
            continue
        for zone, seconds in insight.zones.as_dict().items():
            zone_totals[zone] = zone_totals.get(zone, 0) + seconds

    total_zone_time = sum(zone_totals.values())
    if total_zone_time <= 0:
        return "mixed"

    z1z2_pct = (zone_totals.get("z1", 0) + zone_totals.get("z2", 0)) / total_zone_time
    z3_pct = zone_totals.get("z3", 0) / total_zone_time
    z4_pct = zone_totals.get("z4", 0) / total_zone_time
    z5_plus_pct = sum(zone_totals.get(z, 0) for z in ("z5", "z6", "z7")) / total_zone_time

    if z1z2_pct > 0.8:
        return "endurance"
    if z3_pct > 0.3:
        return "tempo"
    if z4_pct > 0.2:
        return "threshold"
    if z5_plus_pct > 0.1:
        return "vo2max"
    return "mixed"


def calculate_last_rest_day(newest_first: Sequence[ActivityInsight], today: date) -> int:
    """
    Days since the most recent rest day.

    If the latest activity was before today, counts from that activity. Otherwise
    looks for the most recent gap of two or more days between consecutive
    activities; with no such gap, the day before the oldest activity counts as
    the last rest day.
    """
    if not newest_first:
        return 0

    latest = activity_day(newest_first[0])
    if latest != today:
        return (today - latest).days + 1

    for newer, older in zip(newest_first, newest_first[1:]):
        gap_days = (activity_day(newer) - activity_day(older)).days
        if gap_days >= 2:
            return (today - activity_day(older)).days - gap_days + 1

    oldest = activity_day(newest_first[-1])
    return (today - oldest).days + 1


def analyze_patterns(insights: Sequence[ActivityInsight], today: Optional[date] = None) -> TrainingPattern:
    """
    Compute load, trend, recovery, consistency, zone focus and rest diagnostics.

    Args:
        insights: Activity insights in any order
        today: Reference day for the trailing windows (defaults to the current UTC day)

    Returns:
        TrainingPattern
    """
    today = today or utc_today()
    newest_first: List[ActivityInsight] = sorted(insights, key=lambda i: i.date, reverse=True)

    # Recent window is today-6..today, the prior window the seven days before it
    week_ago = today - timedelta(days=RECENT_WINDOW_DAYS)
    two_weeks_ago = today - timedelta(days=2 * RECENT_WINDOW_DAYS)

    last_7_days = [i for i in newest_first if week_ago < activity_day(i) <= today]
    previous_7_days = [i for i in newest_first if two_weeks_ago < activity_day(i) <= week_ago]

    recent_load = _window_load(last_7_days)
    previous_load = _window_load(previous_7_days)
    load_trend = calculate_load_trend(recent_load, previous_load)

    hard_sessions = sum(1 for i in last_7_days if i.intensity in ("hard", "very_hard"))
    recovery_needed = hard_sessions >= RECOVERY_HARD_SESSIONS or recent_load > RECOVERY_LOAD_LIMIT

    pattern = TrainingPattern(
        recent_load=recent_load,
        load_trend=load_trend,
        recovery_needed=recovery_needed,
        consistency_score=calculate_consistency_score(newest_first),
        zone_focus=calculate_zone_focus(newest_first),
        last_rest_day=calculate_last_rest_day(newest_first, today),
    )

    logger.debug(
        f"Patterns over {len(newest_first)} activities: load={recent_load:.1f} ({load_trend}), "
        f"recovery={recovery_needed}, consistency={pattern.consistency_score}, "
        f"focus={pattern.zone_focus}, last_rest={pattern.last_rest_day}"
    )
    return pattern
