"""Polarized training plan generation."""

from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from config.settings import settings
from models.training import TrainingPlan, TrainingSession
from coaching.exceptions import TrainingDataError
from coaching.training_aggregator import TrainingDataAggregator
from coaching.logger import get_logger

logger = get_logger(__name__)

PLAN_WEEKS = (4, 8, 12)
CONSISTENCY_LOOKBACK_DAYS = 14
DEFAULT_SESSIONS_PER_WEEK = 3
HIGH_INTENSITY_SHARE = 0.2
HIGH_INTENSITY_SLOT_STEP = 4


def sessions_per_week_for(consistency_score: int) -> int:
    """Training frequency the athlete has shown they can sustain."""
    if consistency_score >= 80:
        return 5
    if consistency_score >= 60:
        return 4
    return DEFAULT_SESSIONS_PER_WEEK


def _vo2max_session(day: date) -> TrainingSession:
    return TrainingSession(
        date=day,
        type="vo2max",
        duration=60,
        intensity=9,
        description="VO2max intervals (e.g., 5x3' Z5)",
    )


def _endurance_session(day: date) -> TrainingSession:
    return TrainingSession(
        date=day,
        type="endurance",
        duration=90,
        intensity=3,
        description="Endurance ride Z1-Z2",
    )


def build_polarized_plan(
    user_id: str,
    weeks: int,
    sessions_per_week: int,
    start_date: date
) -> TrainingPlan:
    """
    Lay out an ~80/20 polarized plan.

    Sessions are spaced floor(7 / sessions_per_week) days apart inside each
    week. 20% of all sessions (rounded) are VO2max sessions, placed on every
    4th slot from the first until the quota is used; the rest are endurance.

    Args:
        user_id: Plan owner
        weeks: Plan length, one of 4, 8 or 12
        sessions_per_week: Sessions per week
        start_date: Day of the first session

    Returns:
        New TrainingPlan with all sessions incomplete
    """
    if weeks not in PLAN_WEEKS:
        raise ValueError(f"Plan length must be one of {PLAN_WEEKS} weeks, got {weeks}")

    total_sessions = sessions_per_week * weeks
    high_intensity_count = round(total_sessions * HIGH_INTENSITY_SHARE)
    interval = 7 // sessions_per_week

    day_offsets: List[int] = [
        week * 7 + slot * interval
        for week in range(weeks)
        for slot in range(sessions_per_week)
    ]
    high_slots = set(range(0, len(day_offsets), HIGH_INTENSITY_SLOT_STEP)[:high_intensity_count])

    sessions = [
        _vo2max_session(start_date + timedelta(days=offset))
        if index in high_slots
        else _endurance_session(start_date + timedelta(days=offset))
        for index, offset in enumerate(day_offsets)
    ]

    now = datetime.now(timezone.utc)
    plan = TrainingPlan(user_id=user_id, sessions=sessions, created_at=now, updated_at=now)

    logger.info(
        f"Built {weeks}-week plan {plan.id} for {user_id}: {sessions_per_week} sessions/week, "
        f"{len(high_slots)} of {total_sessions} high intensity"
    )
    return plan


class PlanGenerator:
    """Creates plans sized to the athlete's recent consistency."""

    def __init__(self, aggregator: TrainingDataAggregator):
        """
        Initialize plan generator.

        Args:
            aggregator: Used to score consistency over the last two weeks
        """
        self.aggregator = aggregator

    def recent_consistency(
        self,
        user_id: str,
        ftp: float,
        lthr: float,
        today: Optional[date] = None
    ) -> Optional[int]:
        """Consistency score over the last 14 days, or None if it cannot be computed."""
        try:
            analysis = self.aggregator.analyze_recent_training(
                user_id, ftp, lthr, days_back=CONSISTENCY_LOOKBACK_DAYS, today=today
            )
        except TrainingDataError as e:
            logger.warning(f"Could not analyse recent training for {user_id}: {e}")
            return None
        return analysis.pattern.consistency_score

    def generate_polarized_plan(
        self,
        user_id: str,
        weeks: int,
        ftp: Optional[float] = None,
        lthr: Optional[float] = None,
        start_date: Optional[date] = None
    ) -> TrainingPlan:
        """
        Generate a polarized plan for an athlete.

        Args:
            user_id: Athlete the plan belongs to
            weeks: Plan length, one of 4, 8 or 12
            ftp: FTP (defaults to settings.DEFAULT_FTP)
            lthr: LTHR (defaults to settings.DEFAULT_LTHR)
            start_date: First day of the plan (defaults to today)

        Returns:
            New TrainingPlan
        """
        if weeks not in PLAN_WEEKS:
            raise ValueError(f"Plan length must be one of {PLAN_WEEKS} weeks, got {weeks}")

        ftp = ftp or settings.DEFAULT_FTP
        lthr = lthr or settings.DEFAULT_LTHR
        start_date = start_date or date.today()

        score = self.recent_consistency(user_id, ftp, lthr)
        if score is None:
            logger.warning(f"Defaulting to {DEFAULT_SESSIONS_PER_WEEK} sessions/week")
            sessions_per_week = DEFAULT_SESSIONS_PER_WEEK
        else:
            sessions_per_week = sessions_per_week_for(score)

        return build_polarized_plan(user_id, weeks, sessions_per_week, start_date)
