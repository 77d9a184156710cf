"""Training analysis entry point: fetch activities, derive insights, patterns, fitness and recommendations."""

from datetime import date, datetime, time
from typing import List, Optional

from config.settings import settings
from models.training import ActivityInsight, RawActivity, TrainingAnalysis
from coaching.activity_insights import process_activity
from coaching.collaborators import ActivityStore
from coaching.exceptions import ActivityFetchError
from coaching.pattern_analyzer import analyze_patterns, utc_today
from coaching.recommendations import generate_recommendations
from coaching.training_metrics import TrainingMetrics
from coaching.logger import get_logger, log_exception

logger = get_logger(__name__)


class TrainingDataAggregator:
    """
    Builds the TrainingAnalysis bundle for an athlete.

    Handles:
    - Fetching recent activities from the activity store
    - Per-activity insight extraction
    - Pattern diagnostics and the fitness model over the window
    - Recommendations
    """

    def __init__(self, activity_store: ActivityStore):
        """
        Initialize aggregator.

        Args:
            activity_store: Source of raw activities
        """
        self.activity_store = activity_store
        self.metrics = TrainingMetrics()

    def analyze_recent_training(
        self,
        athlete_id: str,
        ftp: Optional[float] = None,
        lthr: Optional[float] = None,
        days_back: Optional[int] = None,
        today: Optional[date] = None
    ) -> TrainingAnalysis:
        """
        Generate the training analysis for an athlete's recent activities.

        Args:
            athlete_id: Athlete to analyze
            ftp: Functional Threshold Power (defaults to settings.DEFAULT_FTP)
            lthr: Lactate threshold HR (defaults to settings.DEFAULT_LTHR)
            days_back: Window size in days (defaults to settings.ANALYSIS_DAYS_BACK)
            today: Reference UTC day (defaults to the current UTC day)

        Returns:
            TrainingAnalysis; an empty window gives an analysis with no activities

        Raises:
            ActivityFetchError: if the activity store fails
        """
        ftp = ftp or settings.DEFAULT_FTP
        lthr = lthr or settings.DEFAULT_LTHR
        days_back = days_back or settings.ANALYSIS_DAYS_BACK
        today = today or utc_today()

        logger.info(f"Analyzing {days_back} days of training for athlete {athlete_id}")

        # With the window ending at the close of today, days_back=14 covers
        # today-13..today: both weekly pattern windows in full
        now = datetime.combine(today, time.max)
        try:
            activities = self.activity_store.get_recent_activities(athlete_id, days_back, now=now)
        except ActivityFetchError as e:
            log_exception(logger, e, f"Activity fetch failed for athlete {athlete_id}")
            raise
        except Exception as e:
            log_exception(logger, e, f"Activity fetch failed for athlete {athlete_id}")
            raise ActivityFetchError(athlete_id, str(e)) from e

        return self.analyze_activities(activities, ftp, lthr, today=today)

    def analyze_activities(
        self,
        activities: List[RawActivity],
        ftp: float,
        lthr: float,
        today: Optional[date] = None
    ) -> TrainingAnalysis:
        """
        Run the analysis pipeline over already-fetched activities.

        Args:
            activities: Raw activities in any order
            ftp: Functional Threshold Power
            lthr: Lactate threshold HR
            today: Reference day for the pattern windows

        Returns:
            TrainingAnalysis
        """
        insights: List[ActivityInsight] = [process_activity(a, ftp, lthr) for a in activities]
        insights.sort(key=lambda i: i.date, reverse=True)

        pattern = analyze_patterns(insights, today=today)
        fitness_state = self.metrics.calculate_fitness_state(insights)
        recommendations = generate_recommendations(pattern, fitness_state)

        logger.info(
            f"Analysis complete: {len(insights)} activities, fitness={fitness_state.fitness}, "
            f"fatigue={fitness_state.fatigue}, form={fitness_state.form}, "
            f"{len(recommendations)} recommendations"
        )

        return TrainingAnalysis(
            activities=insights,
            pattern=pattern,
            fitness=fitness_state.fitness,
            fatigue=fitness_state.fatigue,
            form=fitness_state.form,
            recommendations=recommendations,
        )
