"""Per-activity insight extraction: intensity class, note signals and training load."""

import re
from typing import Dict, List, Optional, Tuple

from models.training import ActivityInsight, Intensity, RawActivity, Sentiment, ZoneDistribution
from coaching.training_zones import compute_zones_from_streams
from coaching.logger import get_logger

logger = get_logger(__name__)

NOTE_KEYWORD_PATTERNS = {
    "feeling": re.compile(r"\b(tired|exhausted|fresh|strong|weak|good|great|bad|awful|amazing)\b"),
    "body": re.compile(r"\b(legs|heart|breathing|pain|sore|stiff|tight|loose)\b"),
    "weather": re.compile(r"\b(hot|cold|windy|rain|sunny|humid|dry)\b"),
    "equipment": re.compile(r"\b(bike|wheel|tire|chain|brake|gear)\b"),
    "effort": re.compile(r"\b(easy|hard|tough|struggle|smooth|fast|slow)\b"),
}

POSITIVE_WORDS = ("good", "great", "amazing", "strong", "fresh", "smooth", "fast", "easy")
NEGATIVE_WORDS = ("bad", "awful", "tired", "exhausted", "weak", "pain", "sore", "struggle", "tough")

INTENSITY_MULTIPLIERS: Dict[str, float] = {
    "easy": 1.0,
    "moderate": 1.5,
    "hard": 2.0,
    "very_hard": 2.5,
}

# Zone weight is the zone number.
ZONE_WEIGHTS: Dict[str, int] = {f"z{i}": i for i in range(1, 8)}

BASE_LOAD_PER_HOUR = 20
INTENSITY_LOAD_SHARE = 0.7
ZONE_LOAD_SHARE = 0.3
MAX_TRAINING_LOAD = 100


def classify_intensity(
    activity: RawActivity,
    zones: Optional[ZoneDistribution],
    ftp: Optional[float],
    lthr: Optional[float]
) -> Intensity:
    """
    Classify an activity as easy, moderate, hard or very_hard.

    Uses the first source available, in order: zone distribution, average
    power against FTP, average heart rate against LTHR, moving time.
    """
    if zones is not None:
        total_time = zones.total()
        if total_time == 0:
            return "easy"

        buckets = zones.as_dict()
        high_pct = sum(buckets.get(z, 0) for z in ("z4", "z5", "z6", "z7")) / total_time
        moderate_pct = buckets.get("z3", 0) / total_time

        if high_pct > 0.15:
            return "very_hard"
        if high_pct > 0.05 or moderate_pct > 0.3:
            return "hard"
        if moderate_pct > 0.1:
            return "moderate"
        return "easy"

    if activity.average_power and ftp and ftp > 0:
        ratio = activity.average_power / ftp
        if ratio > 0.95:
            return "very_hard"
        if ratio > 0.75:
            return "hard"
        if ratio > 0.55:
            return "moderate"
        return "easy"

    if activity.average_heartrate and lthr and lthr > 0:
        ratio = activity.average_heartrate / lthr
        if ratio > 1.0:
            return "very_hard"
        if ratio > 0.85:
            return "hard"
        if ratio > 0.7:
            return "moderate"
        return "easy"

    # Rough estimate from duration alone
    duration_hours = (activity.moving_time or 0) / 3600.0
    if duration_hours < 0.5:
        return "easy"
    if duration_hours < 1.5:
        return "moderate"
    if duration_hours < 2.5:
        return "hard"
    return "very_hard"


def analyze_note(note: Optional[str]) -> Tuple[List[str], Optional[Sentiment]]:
    """
    Extract keywords and a sentiment from a private note.

    Args:
        note: Free-text note written by the athlete

    Returns:
        (keywords in first-seen order without duplicates, sentiment). Sentiment
        is None when there is no note.
    """
    if not note:
        return [], None

    lower_note = note.lower()

    keywords: List[str] = []
    for pattern in NOTE_KEYWORD_PATTERNS.values():
        for match in pattern.findall(lower_note):
            if match not in keywords:
                keywords.append(match)

    positive_count = sum(1 for word in POSITIVE_WORDS if word in lower_note)
    negative_count = sum(1 for word in NEGATIVE_WORDS if word in lower_note)

    sentiment: Sentiment = "neutral"
    if positive_count > negative_count:
        sentiment = "positive"
    elif negative_count > positive_count:
        sentiment = "negative"

    return keywords, sentiment


def calculate_training_load(
    moving_time: int,
    zones: Optional[ZoneDistribution],
    intensity: Intensity
) -> int:
    """
    Calculate a 0-100 training load score.

    load = hours * 20 * intensity multiplier. With a non-empty zone
    distribution it is blended 70/30 with the zone-weighted term
    (average zone number * hours * 10).

    Args:
        moving_time: Moving time in seconds
        zones: Zone distribution, if any
        intensity: Intensity class

    Returns:
        Training load clamped to [0, 100]
    """
    duration_hours = max(moving_time or 0, 0) / 3600.0
    load = duration_hours * BASE_LOAD_PER_HOUR * INTENSITY_MULTIPLIERS[intensity]

    if zones is not None:
        total_time = zones.total()
        if total_time > 0:
            weighted_time = sum(
                time * ZONE_WEIGHTS[zone] for zone, time in zones.as_dict().items()
            )
            avg_zone = weighted_time / total_time
            zone_load = avg_zone * duration_hours * 10
            load = load * INTENSITY_LOAD_SHARE + zone_load * ZONE_LOAD_SHARE

    return int(min(max(round(load), 0), MAX_TRAINING_LOAD))


def resolve_zones(
    activity: RawActivity,
    ftp: Optional[float],
    lthr: Optional[float]
) -> Optional[ZoneDistribution]:
    """Stored power zones, then stored HR zones, then zones computed from streams."""
    if activity.power_zones is not None:
        return activity.power_zones
    if activity.hr_zones is not None:
        return activity.hr_zones
    return compute_zones_from_streams(activity.streams, ftp, lthr)


def process_activity(
    activity: RawActivity,
    ftp: Optional[float],
    lthr: Optional[float],
    zones: Optional[ZoneDistribution] = None
) -> ActivityInsight:
    """
    Build the insight record for one activity.

    Args:
        activity: Raw activity from the activity store
        ftp: Athlete's FTP in watts
        lthr: Athlete's lactate threshold heart rate
        zones: Precomputed zone distribution; resolved from the activity when omitted

    Returns:
        ActivityInsight
    """
    if zones is None:
        zones = resolve_zones(activity, ftp, lthr)

    intensity = classify_intensity(activity, zones, ftp, lthr)
    keywords, sentiment = analyze_note(activity.private_note)
    training_load = calculate_training_load(activity.moving_time, zones, intensity)

    logger.debug(
        f"Activity {activity.id}: intensity={intensity}, load={training_load}, "
        f"zones={'yes' if zones is not None else 'no'}"
    )

    return ActivityInsight(
        activity_id=activity.id,
        date=activity.start_date,
        type=activity.type,
        duration=round((activity.moving_time or 0) / 60),
        distance=round((activity.distance or 0) / 1000, 1),
        intensity=intensity,
        zones=zones,
        note_keywords=tuple(keywords),
        note_sentiment=sentiment,
        training_load=training_load,
    )
