"""Rule-based training recommendations from patterns and fitness state."""

from typing import Callable, List, NamedTuple

from models.training import FitnessState, TrainingPattern


class RecommendationRule(NamedTuple):
    """A recommendation emitted when its predicate holds."""

    code: str
    applies: Callable[[TrainingPattern, FitnessState], bool]
    message: str


# Evaluated in order; every rule that applies contributes one recommendation.
RECOMMENDATION_RULES: List[RecommendationRule] = [
    RecommendationRule(
        "rest_or_easy",
        lambda p, f: p.recovery_needed or f.fatigue > 70,
        "Consider an easy recovery ride or rest day to manage fatigue",
    ),
    RecommendationRule(
        "recovery_focus",
        lambda p, f: f.form < -20,
        "You're carrying significant fatigue. Focus on recovery and easy rides",
    ),
    RecommendationRule(
        "use_good_form",
        lambda p, f: f.form > 20,
        "Good form! This could be a good time for harder training or events",
    ),
    RecommendationRule(
        "ramp_rate_caution",
        lambda p, f: p.load_trend == "increasing" and p.recent_load > 40,
        "Training load is increasing rapidly. Be mindful of recovery",
    ),
    RecommendationRule(
        "add_volume",
        lambda p, f: p.load_trend == "decreasing" and f.fitness < 50,
        "Training load has decreased. Consider adding more consistent rides",
    ),
    RecommendationRule(
        "add_intensity",
        lambda p, f: p.zone_focus == "endurance",
        "Good endurance base! Consider adding some tempo or threshold work",
    ),
    RecommendationRule(
        "add_easy_volume",
        lambda p, f: p.zone_focus == "vo2max",
        "High intensity focus detected. Balance with more easy endurance rides",
    ),
    RecommendationRule(
        "train_regularly",
        lambda p, f: p.consistency_score < 50,
        "Try to maintain more consistent training to build fitness effectively",
    ),
    RecommendationRule(
        "insert_rest_day",
        lambda p, f: p.last_rest_day > 7,
        "Consider taking a rest day - you haven't had one in over a week",
    ),
]

DEFAULT_RECOMMENDATION = RecommendationRule(
    "keep_going",
    lambda p, f: True,
    "Keep up the great training! Stay consistent and listen to your body",
)


def matching_rules(pattern: TrainingPattern, fitness: FitnessState) -> List[RecommendationRule]:
    """Rules that apply, in rule order; the default rule when none do."""
    matched = [rule for rule in RECOMMENDATION_RULES if rule.applies(pattern, fitness)]
    return matched or [DEFAULT_RECOMMENDATION]


def generate_recommendations(pattern: TrainingPattern, fitness: FitnessState) -> List[str]:
    """Recommendation messages for the athlete."""
    return [rule.message for rule in matching_rules(pattern, fitness)]


def generate_recommendation_codes(pattern: TrainingPattern, fitness: FitnessState) -> List[str]:
    """Stable codes of the recommendations, for callers that localize text."""
    return [rule.code for rule in matching_rules(pattern, fitness)]
