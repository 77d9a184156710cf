"""Weekly coaching feedback from a narrative generator, with a heuristic fallback."""

from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from models.training import ActivityStats, CoachFeedback, EventGoal, TrainingAnalysis
from coaching.collaborators import NarrativeGenerator
from coaching.training_metrics import TrainingMetrics
from coaching.logger import get_logger

logger = get_logger(__name__)

FALLBACK_NOTE = (
    "Note: Using simplified analysis because the coaching service is unavailable. "
    "For full personalized insights, please try again later."
)
ERROR_FEEDBACK = (
    "Unable to generate training analysis at this time. Please ensure you have "
    "recent activities synced and try again later."
)


def total_time_in_zones(analysis: TrainingAnalysis) -> Optional[Dict[str, float]]:
    """Seconds per zone summed over the analysis window, None without zone data."""
    totals: Dict[str, float] = {}
    for insight in analysis.activities:
        if insight.zones is None:
            continue
        for zone, seconds in insight.zones.as_dict().items():
            totals[zone] = totals.get(zone, 0) + seconds
    return totals or None


def build_training_bundle(
    analysis: TrainingAnalysis,
    stats: Optional[ActivityStats] = None,
    goals: Sequence[EventGoal] = ()
) -> Dict[str, Any]:
    """
    Structured input for the narrative generator.

    Args:
        analysis: Training analysis
        stats: Window totals, if available
        goals: Upcoming event goals, nearest first

    Returns:
        JSON-serializable dictionary
    """
    return {
        "analysis": analysis.model_dump(mode="json"),
        "time_in_zones": total_time_in_zones(analysis),
        "rest_days": analysis.pattern.last_rest_day,
        "weekly_stats": (stats or ActivityStats()).model_dump(mode="json"),
        "goals": [goal.model_dump(mode="json") for goal in goals],
    }


def generate_heuristic_feedback(
    analysis: TrainingAnalysis,
    stats: Optional[ActivityStats] = None,
    goals: Sequence[EventGoal] = (),
    today: Optional[date] = None
) -> str:
    """Plain-text feedback built from the structured analysis alone."""
    if not analysis.activities:
        return (
            "No recent training activities found. Start with some easy rides to build "
            "your base fitness, and sync your activities to track progress."
        )

    today = today or date.today()
    stats = stats or ActivityStats(total_activities=len(analysis.activities))
    total_activities = stats.total_activities or len(analysis.activities)
    parts: List[str] = []

    if total_activities >= 3:
        parts.append(f"Great consistency with {total_activities} training sessions!")
    else:
        plural = "s" if total_activities > 1 else ""
        parts.append(f"You've been active with {total_activities} session{plural}.")

    if stats.total_distance > 0:
        parts.append(
            f"You covered {stats.total_distance / 1000:.1f}km in {stats.total_time / 3600:.1f} hours."
        )

    upcoming_goals = [g for g in goals if g.target_date > today]
    if upcoming_goals:
        goal = upcoming_goals[0]
        days_to_goal = (goal.target_date - today).days
        advice = (
            "consider increasing training frequency."
            if total_activities < 3
            else "you're on a good training path."
        )
        parts.append(f'With {days_to_goal} days until your goal "{goal.description}", {advice}')

    parts.append(
        f"Form is {TrainingMetrics.describe_form(analysis.form).lower()} "
        f"(fitness {analysis.fitness}, fatigue {analysis.fatigue})."
    )
    parts.extend(analysis.recommendations[:2])

    if total_time_in_zones(analysis):
        parts.append("Continue focusing on zone-based training to build specific fitness adaptations.")
    else:
        parts.append("Consider using a heart rate monitor or power meter for more targeted training.")

    return " ".join(parts)


class CoachFeedbackService:
    """
    Produces weekly feedback text.

    The narrative generator is optional and allowed to fail; the structured
    analysis is always enough to produce heuristic feedback.
    """

    def __init__(self, generator: Optional[NarrativeGenerator] = None):
        """
        Initialize feedback service.

        Args:
            generator: Narrative generator, or None to always use the fallback
        """
        self.generator = generator

    def get_weekly_feedback(
        self,
        analysis: TrainingAnalysis,
        stats: Optional[ActivityStats] = None,
        goals: Sequence[EventGoal] = (),
        today: Optional[date] = None
    ) -> CoachFeedback:
        """
        Generate weekly feedback. Never raises.

        Returns:
            CoachFeedback with source "generator", "fallback" or "error"
        """
        if self.generator is None:
            return self._fallback(analysis, stats, goals, today, "Narrative generator not configured")

        bundle = build_training_bundle(analysis, stats, goals)
        try:
            text = self.generator.generate_feedback(bundle)
        except Exception as e:
            logger.error(f"Narrative generator failed: {e}", exc_info=True)
            return self._fallback(analysis, stats, goals, today, str(e))

        if not text or not text.strip():
            return self._fallback(analysis, stats, goals, today, "No valid response from narrative generator")

        return CoachFeedback(feedback=text, source="generator")

    def _fallback(
        self,
        analysis: TrainingAnalysis,
        stats: Optional[ActivityStats],
        goals: Sequence[EventGoal],
        today: Optional[date],
        reason: str
    ) -> CoachFeedback:
        logger.warning(f"Using heuristic feedback: {reason}")
        try:
            feedback = generate_heuristic_feedback(analysis, stats, goals, today)
        except Exception as e:
            logger.error(f"Heuristic feedback failed: {e}", exc_info=True)
            return CoachFeedback(
                feedback=ERROR_FEEDBACK,
                source="error",
                error=f"Fallback failed: {e}",
            )
        return CoachFeedback(feedback=f"{feedback}\n\n{FALLBACK_NOTE}", source="fallback", error=reason)
