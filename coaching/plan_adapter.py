"""Adapt upcoming sessions of a training plan to the latest training analysis.

Rules run in order against the same working set of upcoming sessions:

- soften: fatigue > 70 or recovery needed turns the next vo2max/threshold
  session into endurance.
- sharpen: form > 20 turns the next endurance session into vo2max. It runs
  after soften and can pick the session soften just changed.
- weekly rest: every ISO week of the plan without a rest session gets one,
  the day after that week's first session.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

from models.training import TrainingAnalysis, TrainingPlan, TrainingSession
from coaching.logger import get_logger

logger = get_logger(__name__)

FATIGUE_LIMIT = 70
FORM_READY = 20
HARD_SESSION_TYPES = ("vo2max", "threshold")


def make_endurance(session: TrainingSession) -> None:
    session.type = "endurance"
    session.intensity = 3
    session.duration = 90
    session.description = "Endurance ride Z1-Z2 (adapted)"


def make_vo2max(session: TrainingSession) -> None:
    session.type = "vo2max"
    session.intensity = 9
    session.duration = 60
    session.description = "VO2max intervals (adapted)"


class AdaptationRule(NamedTuple):
    """Mutation applied to the first upcoming session of a matching type."""

    name: str
    applies: Callable[[TrainingAnalysis], bool]
    target_types: Tuple[str, ...]
    mutate: Callable[[TrainingSession], None]


ADAPTATION_RULES: List[AdaptationRule] = [
    AdaptationRule(
        "soften",
        lambda a: a.fatigue > FATIGUE_LIMIT or a.pattern.recovery_needed,
        HARD_SESSION_TYPES,
        make_endurance,
    ),
    AdaptationRule(
        "sharpen",
        lambda a: a.form > FORM_READY,
        ("endurance",),
        make_vo2max,
    ),
]


def upcoming_sessions(sessions: List[TrainingSession], today: date) -> List[TrainingSession]:
    """Sessions from today onward that are not completed, in plan order."""
    return [s for s in sessions if s.date >= today and not s.completed]


def ensure_weekly_rest(sessions: List[TrainingSession]) -> List[TrainingSession]:
    """
    Append a rest session to every ISO week that has none.

    Args:
        sessions: Plan sessions, modified in place

    Returns:
        The rest sessions that were added
    """
    weeks: Dict[Tuple[int, int], List[TrainingSession]] = {}
    for session in sessions:
        iso_year, iso_week, _ = session.date.isocalendar()
        weeks.setdefault((iso_year, iso_week), []).append(session)

    added = []
    for week_sessions in weeks.values():
        if any(s.type == "rest" for s in week_sessions):
            continue
        rest = TrainingSession(
            date=week_sessions[0].date + timedelta(days=1),
            type="rest",
            duration=0,
            intensity=1,
            description="Rest day (auto-inserted)",
            completed=False,
        )
        sessions.append(rest)
        added.append(rest)
    return added


def adapt_training_plan(
    plan: TrainingPlan,
    analysis: TrainingAnalysis,
    today: Optional[date] = None,
    now: Optional[datetime] = None
) -> TrainingPlan:
    """
    Revise a plan's upcoming sessions for the athlete's current state.

    Only sessions dated today or later and not completed are edited. The
    returned plan shares its session list with the input plan.

    Args:
        plan: Plan to adapt
        analysis: Latest training analysis
        today: Reference day for "upcoming" (defaults to today)
        now: Timestamp for updated_at (defaults to the current UTC time)

    Returns:
        Plan with the adapted sessions and a new updated_at
    """
    today = today or date.today()
    upcoming = upcoming_sessions(plan.sessions, today)

    for rule in ADAPTATION_RULES:
        if not rule.applies(analysis):
            continue
        target = next((s for s in upcoming if s.type in rule.target_types), None)
        if target is None:
            continue
        previous_type = target.type
        rule.mutate(target)
        logger.info(f"Plan {plan.id}: {rule.name} changed {target.date} from {previous_type} to {target.type}")

    added = ensure_weekly_rest(plan.sessions)
    if added:
        logger.info(f"Plan {plan.id}: inserted {len(added)} rest days")

    return plan.model_copy(update={"updated_at": now or datetime.now(timezone.utc)})
