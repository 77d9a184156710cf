"""Fitness, fatigue and form from exponentially smoothed training load (CTL/ATL/TSB analogues)."""

from typing import Iterable, List, Optional

from models.training import ActivityInsight, FitnessModelState, FitnessState
from coaching.logger import get_logger

logger = get_logger(__name__)


class TrainingMetrics:
    """Calculator for fitness and fatigue from training load history."""

    # Per-step decay factors
    FITNESS_DECAY = 0.993  # ~42-day time constant (CTL, fitness)
    FATIGUE_DECAY = 0.928  # ~7-day time constant (ATL, fatigue)

    MAX_SCORE = 100

    @staticmethod
    def smooth(previous: float, load: float, decay: float) -> float:
        """
        One exponential smoothing step.

        value_today = value_yesterday * decay + load * (1 - decay)
        """
        return previous * decay + load * (1 - decay)

    @staticmethod
    def update_model_state(
        state: Optional[FitnessModelState],
        insights: Iterable[ActivityInsight]
    ) -> FitnessModelState:
        """
        Fold new insights into a fitness model state.

        The model advances one step per activity, oldest first; rest days do
        not add a decay step. Insights dated at or before the state's last
        processed activity are skipped, so a caller can keep the state between
        runs and pass the full history each time.

        Args:
            state: Previous state, or None to start from zero
            insights: Activity insights in any order

        Returns:
            New FitnessModelState (the input state is not modified)
        """
        state = state or FitnessModelState()
        fitness = state.fitness
        fatigue = state.fatigue
        last_date = state.last_activity_date
        processed = state.activities_processed

        for insight in sorted(insights, key=lambda i: i.date):
            if state.last_activity_date is not None and insight.date <= state.last_activity_date:
                continue
            fitness = TrainingMetrics.smooth(fitness, insight.training_load, TrainingMetrics.FITNESS_DECAY)
            fatigue = TrainingMetrics.smooth(fatigue, insight.training_load, TrainingMetrics.FATIGUE_DECAY)
            last_date = insight.date
            processed += 1

        return FitnessModelState(
            fitness=fitness,
            fatigue=fatigue,
            last_activity_date=last_date,
            activities_processed=processed,
        )

    @staticmethod
    def to_fitness_state(state: FitnessModelState) -> FitnessState:
        """
        Round and clamp a model state into reported fitness, fatigue and form.

        Form (TSB analogue) = fitness - fatigue and is not clamped.
        """
        fitness = min(max(round(state.fitness), 0), TrainingMetrics.MAX_SCORE)
        fatigue = min(max(round(state.fatigue), 0), TrainingMetrics.MAX_SCORE)
        return FitnessState(fitness=fitness, fatigue=fatigue, form=fitness - fatigue)

    @staticmethod
    def calculate_fitness_state(insights: List[ActivityInsight]) -> FitnessState:
        """
        Recompute fitness, fatigue and form from the full insight history.

        Args:
            insights: Activity insights in any order

        Returns:
            FitnessState
        """
        state = TrainingMetrics.update_model_state(None, insights)
        result = TrainingMetrics.to_fitness_state(state)
        logger.debug(
            f"Fitness over {state.activities_processed} activities: "
            f"fitness={result.fitness}, fatigue={result.fatigue}, form={result.form}"
        )
        return result

    @staticmethod
    def describe_form(form: int) -> str:
        """
        Describe form (TSB analogue).

        Interpretation:
        - form < -20: carrying significant fatigue
        - -20 to 20: balanced training
        - form > 20: fresh
        """
        if form < -20:
            return "Fatigued"
        if form > 20:
            return "Fresh"
        return "Balanced"
