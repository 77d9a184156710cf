"""Training domain records exchanged between the coaching core and its collaborators.

These are plain pydantic models: the activity store produces ``RawActivity``
records, the analysis core turns them into ``ActivityInsight``,
``TrainingPattern`` and ``TrainingAnalysis`` bundles, and the planner works on
``TrainingPlan``/``TrainingSession``.
"""

import datetime as dt
from typing import Annotated, ClassVar, Dict, List, Literal, Optional, Tuple, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

Intensity = Literal["easy", "moderate", "hard", "very_hard"]
Sentiment = Literal["positive", "neutral", "negative"]
LoadTrend = Literal["increasing", "stable", "decreasing"]
ZoneFocus = Literal["endurance", "tempo", "threshold", "vo2max", "mixed"]
SessionType = Literal["endurance", "tempo", "threshold", "vo2max", "recovery", "rest"]
FeedbackSource = Literal["generator", "fallback", "error"]


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class SampleStream(BaseModel):
    """Per-second samples recorded during one activity."""

    time: Optional[List[float]] = None
    watts: Optional[List[Optional[float]]] = None
    heartrate: Optional[List[Optional[float]]] = None
    distance: Optional[List[Optional[float]]] = None

    @model_validator(mode="after")
    def _check_alignment(self) -> "SampleStream":
        if not self.time:
            return self
        for name in ("watts", "heartrate", "distance"):
            values = getattr(self, name)
            if values and len(values) != len(self.time):
                raise ValueError(
                    f"{name} stream has {len(values)} samples but time stream has {len(self.time)}"
                )
        return self

    @property
    def has_power(self) -> bool:
        return bool(self.watts)

    @property
    def has_heartrate(self) -> bool:
        return bool(self.heartrate)


class _ZoneBuckets(BaseModel):
    ZONE_KEYS: ClassVar[Tuple[str, ...]] = ()

    def as_dict(self) -> Dict[str, float]:
        """Zone id to accumulated seconds, lowest zone first."""
        return {key: getattr(self, key) for key in self.ZONE_KEYS}

    def total(self) -> float:
        return sum(self.as_dict().values())


class PowerZones(_ZoneBuckets):
    """Seconds spent in the seven Coggan power zones."""

    ZONE_KEYS: ClassVar[Tuple[str, ...]] = ("z1", "z2", "z3", "z4", "z5", "z6", "z7")

    source: Literal["power"] = "power"
    z1: float = Field(default=0, ge=0)
    z2: float = Field(default=0, ge=0)
    z3: float = Field(default=0, ge=0)
    z4: float = Field(default=0, ge=0)
    z5: float = Field(default=0, ge=0)
    z6: float = Field(default=0, ge=0)
    z7: float = Field(default=0, ge=0)


class HrZones(_ZoneBuckets):
    """Seconds spent in the five heart-rate zones."""

    ZONE_KEYS: ClassVar[Tuple[str, ...]] = ("z1", "z2", "z3", "z4", "z5")

    source: Literal["heart_rate"] = "heart_rate"
    z1: float = Field(default=0, ge=0)
    z2: float = Field(default=0, ge=0)
    z3: float = Field(default=0, ge=0)
    z4: float = Field(default=0, ge=0)
    z5: float = Field(default=0, ge=0)


ZoneDistribution = Annotated[Union[PowerZones, HrZones], Field(discriminator="source")]


class RawActivity(BaseModel):
    """Activity as supplied by the activity store."""

    id: str
    start_date: dt.datetime
    type: str = "Ride"
    moving_time: int = 0  # seconds
    distance: float = 0.0  # meters
    name: Optional[str] = None
    private_note: Optional[str] = None
    average_power: Optional[float] = None
    max_power: Optional[float] = None
    average_heartrate: Optional[float] = None
    max_heartrate: Optional[float] = None
    power_zones: Optional[PowerZones] = None
    hr_zones: Optional[HrZones] = None
    streams: Optional[SampleStream] = None


class ActivityInsight(BaseModel):
    """Normalized view of one activity, derived once and never mutated."""

    model_config = ConfigDict(frozen=True)

    activity_id: str
    date: dt.datetime
    type: str
    duration: int  # minutes
    distance: float  # km
    intensity: Intensity
    zones: Optional[ZoneDistribution] = None
    note_keywords: Tuple[str, ...] = ()
    note_sentiment: Optional[Sentiment] = None
    training_load: int = Field(default=0, ge=0, le=100)


class TrainingPattern(BaseModel):
    """Aggregate diagnostics over a window of insights."""

    recent_load: float
    load_trend: LoadTrend
    recovery_needed: bool
    consistency_score: int = Field(ge=0, le=100)
    zone_focus: ZoneFocus
    last_rest_day: int


class FitnessState(BaseModel):
    """Fitness (CTL analogue), fatigue (ATL analogue) and form."""

    fitness: int = Field(ge=0, le=100)
    fatigue: int = Field(ge=0, le=100)
    form: int


class FitnessModelState(BaseModel):
    """Unrounded exponential-smoothing state owned by the caller between runs."""

    fitness: float = 0.0
    fatigue: float = 0.0
    last_activity_date: Optional[dt.datetime] = None
    activities_processed: int = 0


class TrainingAnalysis(BaseModel):
    """Bundle handed to narrative generation and to the plan adapter."""

    activities: List[ActivityInsight] = Field(default_factory=list)
    pattern: TrainingPattern
    fitness: int
    fatigue: int
    form: int
    recommendations: List[str] = Field(default_factory=list)
    generated_at: dt.datetime = Field(default_factory=_utcnow)

    @property
    def fitness_state(self) -> FitnessState:
        return FitnessState(fitness=self.fitness, fatigue=self.fatigue, form=self.form)


class EventGoal(BaseModel):
    """What the athlete is training for, and by when."""

    id: str = Field(default_factory=_new_id)
    description: str
    target_date: dt.date


class TrainingSession(BaseModel):
    """One planned workout. Only future, incomplete sessions may be edited."""

    id: str = Field(default_factory=_new_id)
    date: dt.date
    type: SessionType
    duration: int  # minutes
    intensity: int = Field(ge=1, le=10)
    description: str
    completed: bool = False
    completed_activity_id: Optional[str] = None


class TrainingPlan(BaseModel):
    """A periodized plan owned by one athlete."""

    id: str = Field(default_factory=_new_id)
    user_id: str
    sessions: List[TrainingSession] = Field(default_factory=list)
    goal_event: Optional[EventGoal] = None
    created_at: dt.datetime = Field(default_factory=_utcnow)
    updated_at: dt.datetime = Field(default_factory=_utcnow)


class ActivityStats(BaseModel):
    """Totals and averages over a window of activities."""

    total_activities: int = 0
    total_distance: float = 0.0  # meters
    total_time: float = 0.0  # seconds
    avg_power: Optional[float] = None
    avg_heartrate: Optional[float] = None


class CoachFeedback(BaseModel):
    """Narrative feedback with the path that produced it."""

    feedback: str
    source: FeedbackSource
    timestamp: dt.datetime = Field(default_factory=_utcnow)
    error: Optional[str] = None
